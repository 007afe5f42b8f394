"""
Core primitives: interval algebra, partition tree, query samples and errors.

Этот пакет не зависит от хранилища состояний (poptree.store).
"""
