"""
RandomSource — Источник равномерных случайных чисел

StateStore требует только seedable генератор с двумя операциями:
uniform_int(bound) ∈ [0, bound) и uniform_float01() ∈ [0, 1).
Детерминизм при одинаковом seed обязателен (воспроизводимые тесты).
"""

import random
from typing import Protocol, Sequence

from poptree.core.errors import EmptyPopulation
from poptree.core.math.intervals import Interval, total_count


class RandomSource(Protocol):
    """Равномерный генератор, детерминированный по seed."""

    def uniform_int(self, bound: int) -> int: ...

    def uniform_float01(self) -> float: ...


class SeededRandom:
    """RandomSource поверх random.Random (Mersenne Twister)."""

    def __init__(self, seed: int):
        self.seed = seed
        self._random = random.Random(seed)

    def uniform_int(self, bound: int) -> int:
        """Случайное целое в [0, bound)."""
        if bound <= 0:
            raise ValueError(f"Upper bound must be positive, got {bound}")
        return self._random.randrange(bound)

    def uniform_float01(self) -> float:
        """Случайное float в [0, 1)."""
        return self._random.random()


def weighted_choice(source: RandomSource, intervals: Sequence[Interval]) -> int:
    """
    Случайный id из набора интервалов с весом, пропорциональным длине.

    Берётся равномерное целое в [0, total), интервалы обходятся с накоплением
    длины до попадания, затем id выбирается равномерно внутри интервала.

    Raises:
        EmptyPopulation: Суммарная длина интервалов равна нулю
    """
    total = total_count(intervals)
    if total < 1:
        raise EmptyPopulation()

    drawn = source.uniform_int(total)
    accumulated = 0
    for interval in intervals:
        accumulated += interval.length
        if drawn < accumulated:
            return interval.start + source.uniform_int(interval.length)

    raise EmptyPopulation()
