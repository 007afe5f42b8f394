"""
Domain models: partition tree, query samples, id states and configuration.
"""

from poptree.core.domain.config import PopulationConfig, SliceSpec, build_tree
from poptree.core.domain.sample import QuerySample
from poptree.core.domain.states import IN_USE_STATE_MASK, PreferredState
from poptree.core.domain.tree import (
    DEFAULT_POPULATION_SIZE,
    PartitionLevel,
    PartitionTree,
)

__all__ = [
    # Tree
    "DEFAULT_POPULATION_SIZE",
    "PartitionLevel",
    "PartitionTree",
    # Sample
    "QuerySample",
    # States
    "IN_USE_STATE_MASK",
    "PreferredState",
    # Config
    "PopulationConfig",
    "SliceSpec",
    "build_tree",
]
