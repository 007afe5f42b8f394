"""
QuerySample — Результат запроса к PartitionTree

Упорядоченный набор непересекающихся интервалов плюс ссылка на дерево.
Каждый query/exclude возвращает НОВУЮ выборку, предыдущая не меняется:
цепочка запросов — чистое преобразование значений.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Интервалы упорядочены по start и не пересекаются
2. query/exclude коммутируют по независимым глубинам
3. query(d, v1).query(d, v2) при v1 != v2 → пустая выборка
4. Пустая выборка (count == 0) — валидный результат, не ошибка
"""

from operator import attrgetter
from typing import TYPE_CHECKING, Iterable, Iterator

from poptree.core.errors import InvalidPartition
from poptree.core.log import trace
from poptree.core.math.intervals import (
    Interval,
    difference,
    intersect,
    merge_adjacent,
    select_nth_of_every_m,
    total_count,
)

if TYPE_CHECKING:
    from poptree.core.domain.tree import PartitionTree


def _normalize(ranges: Iterable[Interval]) -> tuple[Interval, ...]:
    ordered = sorted((r for r in ranges if r.length > 0), key=attrgetter("start"))
    for left, right in zip(ordered, ordered[1:]):
        if right.start < left.stop:
            raise InvalidPartition(f"Sample ranges overlap: {left} and {right}")
    return tuple(ordered)


class QuerySample:
    """
    Выборка популяции как результат запроса.

    Пример:
        orc_paladins = tree.query().query(RACE, ORC).query(CLASS, PALADIN)
        for uid in orc_paladins.ids():
            ...
    """

    def __init__(self, tree: "PartitionTree", ranges: Iterable[Interval]):
        """
        Args:
            tree: Дерево, к которому относится выборка
            ranges: Интервалы выборки; сортируются по start, пустые отбрасываются

        Raises:
            InvalidPartition: Интервалы пересекаются
        """
        self._tree = tree
        self._ranges = _normalize(ranges)

    @classmethod
    def from_tree(cls, tree: "PartitionTree") -> "QuerySample":
        """Выборка из одного интервала, покрывающего всю популяцию."""
        return cls(tree, [tree.root.interval])

    @property
    def tree(self) -> "PartitionTree":
        return self._tree

    @property
    def ranges(self) -> tuple[Interval, ...]:
        return self._ranges

    @property
    def count(self) -> int:
        """Сумма длин интервалов (вычисляется по запросу)."""
        return total_count(self._ranges)

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def ids(self) -> Iterator[int]:
        """Все id выборки по порядку интервалов."""
        for interval in self._ranges:
            yield from interval

    def __contains__(self, uid: int) -> bool:
        return any(interval.contains(uid) for interval in self._ranges)

    # -------------------------------------------------------------------------
    # Запросы
    # -------------------------------------------------------------------------

    def _selection(self, depth: int, value: int) -> list[Interval]:
        groups = self._tree.ranges_at_depth(depth)
        group_size = self._tree.group_count(depth)
        return select_nth_of_every_m(groups, value, group_size)

    def query(self, depth: int, value: int) -> "QuerySample":
        """
        Сужение выборки до value-го потомка каждого родителя на глубине depth.

        Args:
            depth: Глубина дерева (например, раса)
            value: Индекс потомка среди братьев (например, Orc)

        Returns:
            Новая выборка: пересечение текущей с выбранными диапазонами.
            depth/value вне дерева дают пустую выборку.

        Raises:
            InvalidDepth: depth < 0
        """
        selection = self._selection(depth, value)
        ranges = intersect(self._ranges, selection)
        trace("query(depth=%d, value=%d): %d -> %d ranges", depth, value, len(self._ranges), len(ranges))
        return QuerySample(self._tree, ranges)

    def exclude(self, depth: int, value: int) -> "QuerySample":
        """
        Удаление из выборки value-го потомка каждого родителя на глубине depth.

        Raises:
            InvalidDepth: depth < 0
        """
        selection = self._selection(depth, value)
        ranges = difference(self._ranges, selection)
        trace("exclude(depth=%d, value=%d): %d -> %d ranges", depth, value, len(self._ranges), len(ranges))
        return QuerySample(self._tree, ranges)

    def condensed(self) -> "QuerySample":
        """Та же выборка со слитыми смежными интервалами."""
        return QuerySample(self._tree, merge_adjacent(self._ranges))

    def __repr__(self) -> str:
        return f"QuerySample(ranges={len(self._ranges)}, count={self.count})"
