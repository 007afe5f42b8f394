"""
Test suite for poptree

Contains:
- tests/unit/          : Unit tests for intervals, tree, queries, state store, config
"""
