"""
Packed per-id state store and randomized selection over query samples.
"""

from poptree.store.random_source import RandomSource, SeededRandom, weighted_choice
from poptree.store.state_store import StateStore, build_population

__all__ = [
    "RandomSource",
    "SeededRandom",
    "weighted_choice",
    "StateStore",
    "build_population",
]
