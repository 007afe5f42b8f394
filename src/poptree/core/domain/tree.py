"""
PartitionTree — Рекурсивное процентное разбиение популяции id

Популяция из N уникальных id (0..N-1) рекурсивно делится на
непересекающиеся диапазоны пропорциональных размеров. Уровень 0 — вся
популяция; каждый slice добавляет одно поколение потомков всем узлам
предыдущего уровня.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Потомки узла покрывают интервал родителя ровно, без пересечений,
   слева направо: sum(child.length) == parent.length
2. Узлы не удаляются и не переразбиваются после создания
3. Slice затрагивает ВСЕ узлы уровня depth-1 сразу, поэтому глубина
   одинакова во всех ветвях и max_depth определяется левой цепочкой
4. После завершения slicing дерево фактически immutable
"""

from typing import TYPE_CHECKING, Final, Sequence

from poptree.core.domain.sample import QuerySample
from poptree.core.errors import IdOutOfRange, InvalidDepth, InvalidPartition
from poptree.core.log import logger
from poptree.core.math.intervals import Interval, percentage_partition

if TYPE_CHECKING:
    from poptree.core.domain.config import PopulationConfig

# Размер популяции по умолчанию (2^22)
DEFAULT_POPULATION_SIZE: Final[int] = 4_194_304


# =============================================================================
# PARTITION LEVEL
# =============================================================================


class PartitionLevel:
    """
    Узел дерева: интервал популяции и упорядоченные потомки.

    Потомки присваиваются ровно один раз (при slice) и хранятся как tuple.
    """

    def __init__(self, interval: Interval):
        self.interval = interval
        self.children: tuple["PartitionLevel", ...] = ()

    @property
    def count(self) -> int:
        return self.interval.length

    @property
    def is_sliced(self) -> bool:
        return len(self.children) > 0

    @property
    def child_intervals(self) -> list[Interval]:
        return [child.interval for child in self.children]

    def _attach(self, intervals: Sequence[Interval]) -> None:
        if self.is_sliced:
            raise InvalidDepth(f"Level {self.interval} is already sliced")
        self.children = tuple(PartitionLevel(interval) for interval in intervals)

    def __repr__(self) -> str:
        return f"PartitionLevel({self.interval!r}, children={len(self.children)})"


# =============================================================================
# PARTITION TREE
# =============================================================================


class PartitionTree:
    """
    Дерево процентного разбиения популяции.

    Пример (раса по полу, 10_000 id):
        tree = PartitionTree(10_000)
        tree.slice(1, [0.5, 0.5])               # gender
        tree.slice(2, [0.35, 0.40, 0.25])       # race
        orcs = tree.query().query(2, 1)         # 2 интервала, по одному на gender
    """

    def __init__(self, population_size: int = DEFAULT_POPULATION_SIZE):
        """
        Args:
            population_size: Количество уникальных id (N), id лежат в 0..N-1

        Raises:
            InvalidPartition: Если population_size < 0
        """
        self._root = PartitionLevel(Interval(0, population_size))

    @classmethod
    def from_config(cls, config: "PopulationConfig") -> "PartitionTree":
        """Построение дерева по валидированной конфигурации."""
        tree = cls(config.population_size)
        for spec in config.slices:
            if spec.jagged is not None:
                tree.jagged_slice(spec.depth, spec.jagged)
            else:
                tree.slice(spec.depth, spec.percentages)
        return tree

    # -------------------------------------------------------------------------
    # Свойства
    # -------------------------------------------------------------------------

    @property
    def root(self) -> PartitionLevel:
        return self._root

    @property
    def population_size(self) -> int:
        return self._root.count

    @property
    def max_depth(self) -> int:
        """Текущая максимальная глубина (по левой цепочке потомков)."""
        depth = 0
        node = self._root
        while node.is_sliced:
            node = node.children[0]
            depth += 1
        return depth

    # -------------------------------------------------------------------------
    # Slicing
    # -------------------------------------------------------------------------

    def slice(self, depth: int, percentages: Sequence[float]) -> None:
        """
        Разбиение каждого узла уровня depth-1 на потомков по общим процентам.

        Args:
            depth: Создаваемый уровень, должен быть max_depth + 1
            percentages: Доли потомков, сумма ≈ 1.0

        Raises:
            InvalidDepth: depth <= 0, повторный slice или пропуск уровня
            InvalidPartition: Некорректные проценты
        """
        parents = self._parents_for_slice(depth)
        children = [
            percentage_partition(parent.interval.start, parent.count, percentages)
            for parent in parents
        ]
        self._attach_all(parents, children)
        logger.debug(
            "Sliced depth %d: %d parents x %d children", depth, len(parents), len(percentages)
        )

    def jagged_slice(self, depth: int, percentages: Sequence[Sequence[float]]) -> None:
        """
        Разбиение уровня depth-1 с отдельным набором процентов для каждого родителя.

        Асимметричное разбиение нарушает равенство fan-out на уровне:
        group_count() после него отражает только первого родителя.

        Args:
            depth: Создаваемый уровень, должен быть max_depth + 1
            percentages: По одному набору долей на каждого родителя, слева направо

        Raises:
            InvalidDepth: depth <= 0, повторный slice или пропуск уровня
            InvalidPartition: Число наборов != числу родителей или некорректные проценты
        """
        parents = self._parents_for_slice(depth)
        if len(percentages) != len(parents):
            raise InvalidPartition(
                f"Jagged slice at depth {depth} needs {len(parents)} percentage sets, "
                f"got {len(percentages)}"
            )

        children = [
            percentage_partition(parent.interval.start, parent.count, parent_percentages)
            for parent, parent_percentages in zip(parents, percentages)
        ]
        self._attach_all(parents, children)
        logger.debug("Jagged-sliced depth %d: %d parents", depth, len(parents))

    def _parents_for_slice(self, depth: int) -> list[PartitionLevel]:
        if depth <= 0:
            raise InvalidDepth(f"Slice depth must be positive, got {depth}")

        max_depth = self.max_depth
        if depth <= max_depth:
            raise InvalidDepth(f"Depth {depth} is already sliced (max depth {max_depth})")
        if depth > max_depth + 1:
            raise InvalidDepth(
                f"Cannot slice depth {depth}: next sliceable depth is {max_depth + 1}"
            )

        return self._levels_at_depth(depth - 1)

    @staticmethod
    def _attach_all(
        parents: Sequence[PartitionLevel], children: Sequence[Sequence[Interval]]
    ) -> None:
        # Все разбиения вычислены заранее: ошибка не оставляет уровень наполовину разбитым
        for parent, intervals in zip(parents, children):
            parent._attach(intervals)

    # -------------------------------------------------------------------------
    # Чтение
    # -------------------------------------------------------------------------

    def _levels_at_depth(self, depth: int) -> list[PartitionLevel]:
        level = [self._root]
        for _ in range(depth):
            if not level:
                break
            level = [child for node in level for child in node.children]
        return level

    def levels_at_depth(self, depth: int) -> list[PartitionLevel]:
        """Узлы уровня depth слева направо (пусто, если depth > max_depth)."""
        if depth < 0:
            raise InvalidDepth(f"Depth must be non-negative, got {depth}")
        return self._levels_at_depth(depth)

    def ranges_at_depth(self, depth: int) -> list[Interval]:
        """
        Плоский список интервалов всех узлов уровня depth, слева направо.

        Потомки разных родителей конкатенируются. depth == 0 всегда даёт
        ровно один интервал всей популяции.

        Raises:
            InvalidDepth: depth < 0
        """
        return [node.interval for node in self.levels_at_depth(depth)]

    def group_count(self, depth: int) -> int:
        """
        Число потомков у каждого узла уровня depth-1.

        Для jagged уровня возвращается fan-out первого родителя.
        group_count(0) == 1; для depth > max_depth возвращается 0.

        Raises:
            InvalidDepth: depth < 0
        """
        if depth < 0:
            raise InvalidDepth(f"Depth must be non-negative, got {depth}")
        if depth == 0:
            return 1

        node = self._root
        for _ in range(depth - 1):
            if not node.is_sliced:
                return 0
            node = node.children[0]
        return len(node.children)

    def remap(self, uid: int) -> list[int]:
        """
        Обратное отображение id → цепочка индексов потомков.

        Для каждой глубины 1..max_depth возвращается индекс потомка (среди
        братьев под непосредственным родителем), содержащего uid. Это
        последовательность выборов, которые воспроизводят uid через query:
        tree.query().query(1, path[0]).query(2, path[1])... содержит uid.

        Raises:
            IdOutOfRange: uid не покрыт деревом
        """
        if not self._root.interval.contains(uid):
            raise IdOutOfRange(uid)

        path = []
        node = self._root
        depth = 0
        while node.is_sliced:
            depth += 1
            for index, child in enumerate(node.children):
                if child.interval.contains(uid):
                    path.append(index)
                    node = child
                    break
            else:
                raise IdOutOfRange(uid, depth)

        return path

    # -------------------------------------------------------------------------
    # Запросы
    # -------------------------------------------------------------------------

    def query(self) -> QuerySample:
        """Выборка, покрывающая всю популяцию (точка входа цепочки запросов)."""
        return QuerySample.from_tree(self)

    def __repr__(self) -> str:
        return f"PartitionTree(population_size={self.population_size}, max_depth={self.max_depth})"
