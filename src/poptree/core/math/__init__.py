"""
Core math modules для poptree

Алгебра множеств интервалов: чистые функции без состояния.
"""

from poptree.core.math.intervals import (
    PERCENTAGE_SUM_EPS,
    Interval,
    condense,
    difference,
    intersect,
    intersect_range,
    intersect_with_points,
    intersect_with_points_linear,
    intersecting_ids,
    merge_adjacent,
    percentage_partition,
    round_half_up,
    select_nth_of_every_m,
    total_count,
    validate_percentages,
)

__all__ = [
    # Constants
    "PERCENTAGE_SUM_EPS",
    # Types
    "Interval",
    # Partitioning
    "percentage_partition",
    "round_half_up",
    "validate_percentages",
    # Set algebra
    "intersect",
    "intersect_range",
    "intersecting_ids",
    "intersect_with_points",
    "intersect_with_points_linear",
    "difference",
    "merge_adjacent",
    "condense",
    # Utilities
    "select_nth_of_every_m",
    "total_count",
]
