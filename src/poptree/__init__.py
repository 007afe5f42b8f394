"""
poptree — recursive percentage partitioning of an id population

Популяция из N уникальных id (0..N-1) рекурсивно делится на
пропорциональные непересекающиеся диапазоны; запросы над деревом
компонуются в точные множества id, а StateStore хранит in-use бит
каждого id и выбирает случайные id из результатов запросов.
"""

from poptree.core.domain import (
    DEFAULT_POPULATION_SIZE,
    IN_USE_STATE_MASK,
    PartitionLevel,
    PartitionTree,
    PopulationConfig,
    PreferredState,
    QuerySample,
    SliceSpec,
    build_tree,
)
from poptree.core.errors import (
    EmptyPopulation,
    ErrorKind,
    IdOutOfRange,
    InvalidDepth,
    InvalidPartition,
    PopulationError,
)
from poptree.core.log import setup_logging
from poptree.core.math import Interval
from poptree.store import RandomSource, SeededRandom, StateStore, build_population

__all__ = [
    # Tree & queries
    "DEFAULT_POPULATION_SIZE",
    "Interval",
    "PartitionLevel",
    "PartitionTree",
    "QuerySample",
    # States
    "IN_USE_STATE_MASK",
    "PreferredState",
    "RandomSource",
    "SeededRandom",
    "StateStore",
    # Config
    "PopulationConfig",
    "SliceSpec",
    "build_tree",
    "build_population",
    # Errors
    "ErrorKind",
    "PopulationError",
    "InvalidPartition",
    "InvalidDepth",
    "IdOutOfRange",
    "EmptyPopulation",
    # Logging
    "setup_logging",
]
