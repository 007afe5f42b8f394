"""
Intervals — Алгебра множеств интервалов

Модуль содержит value type Interval и чистые функции над упорядоченными
коллекциями интервалов:
- Процентное разбиение диапазона с детерминированным округлением
- Пересечение (two-pointer sweep), в том числе с одним интервалом и в виде списка id
- Вставка точек в множество интервалов (линейная и bisect версии)
- Разность множеств с конденсацией остатка
- Слияние смежных интервалов и конденсация отсортированных id
- Выборка "n-го элемента каждой группы из m"

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Interval: start >= 0, length >= 0 (иначе InvalidPartition)
2. Сумма длин процентного разбиения ВСЕГДА равна длине родителя
3. Функции не мутируют входные коллекции и не используют общих буферов
4. Пустой результат — валидный ответ, а не ошибка
"""

import math
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from operator import attrgetter
from typing import Final, Iterable, Iterator, Optional, Sequence

from poptree.core.errors import InvalidPartition

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Допуск для проверки "сумма процентов ≈ 1.0"
PERCENTAGE_SUM_EPS: Final[float] = 1e-6

_START_KEY = attrgetter("start")


# =============================================================================
# INTERVAL
# =============================================================================


@dataclass(frozen=True)
class Interval:
    """
    Непрерывный диапазон id: start, start+1, ..., start+length-1.

    end = start + length - 1 (для length == 0 интервал пуст и end < start).
    Два интервала смежные, если end одного ровно на единицу меньше start другого.
    """

    start: int
    length: int

    def __post_init__(self):
        if self.start < 0 or self.length < 0:
            raise InvalidPartition(
                f"Interval start and length must be non-negative, "
                f"got start={self.start}, length={self.length}"
            )

    @property
    def end(self) -> int:
        """Последний id интервала (включительно)."""
        return self.start + self.length - 1

    @property
    def stop(self) -> int:
        """Первый id после интервала (исключительно)."""
        return self.start + self.length

    def contains(self, index: int) -> bool:
        """True если length > 0 и start <= index <= end."""
        return self.length > 0 and self.start <= index <= self.end

    def __contains__(self, index: int) -> bool:
        return self.contains(index)

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.stop))

    def try_merge(self, other: "Interval") -> Optional["Interval"]:
        """
        Слияние с другим интервалом.

        Args:
            other: Второй интервал

        Returns:
            Интервал min(start)..max(end), если интервалы пересекаются
            или смежные; иначе None

        Examples:
            >>> Interval(0, 5).try_merge(Interval(5, 3))
            Interval(start=0, length=8)
            >>> Interval(0, 5).try_merge(Interval(7, 1)) is None
            True
        """
        if other.start > self.end + 1 or other.end < self.start - 1:
            return None

        start = min(self.start, other.start)
        end = max(self.end, other.end)
        return Interval(start, end - start + 1)


# =============================================================================
# ПРОЦЕНТНОЕ РАЗБИЕНИЕ
# =============================================================================


def round_half_up(value: float) -> int:
    """
    Округление к ближайшему целому, ничьи (x.5) округляются вверх.

    Examples:
        >>> round_half_up(437.5)
        438
        >>> round_half_up(324.1)
        324
    """
    return math.floor(value + 0.5)


def validate_percentages(percentages: Sequence[float], eps: float = PERCENTAGE_SUM_EPS) -> None:
    """
    Проверка набора процентов для разбиения.

    Args:
        percentages: Доли (фракции) для каждого потомка
        eps: Допуск для суммы

    Raises:
        InvalidPartition: Пустой набор, отрицательные или NaN/Inf доли,
            либо |sum - 1.0| >= eps
    """
    if len(percentages) == 0:
        raise InvalidPartition("Percentages must not be empty")

    for p in percentages:
        if not math.isfinite(p) or p < 0:
            raise InvalidPartition(f"Percentages must be finite and non-negative, got {p}")

    total = math.fsum(percentages)
    if abs(total - 1.0) >= eps:
        raise InvalidPartition(
            f"Percentages must sum to approximately 1.0, got {total:.9f}"
        )


def percentage_partition(start: int, length: int, percentages: Sequence[float]) -> list[Interval]:
    """
    Разбиение диапазона [start, start+length) на смежные интервалы по процентам.

    Для каждой доли p_i: child_length_i = round_half_up(length * p_i).
    Остаток от округления (length - sum(child_length_i)) переносится в последний
    интервал. Отрицательный остаток снимается с хвостовых интервалов, не опуская
    ни одну длину ниже нуля.

    Args:
        start: Начало родительского диапазона
        length: Длина родительского диапазона
        percentages: Доли, сумма ≈ 1.0

    Returns:
        Список интервалов в порядке слева направо, сумма длин == length

    Raises:
        InvalidPartition: Некорректные доли или отрицательные start/length

    Examples:
        >>> [r.length for r in percentage_partition(47, 45, [0.1, 0.25, 0.64, 0.01])]
        [5, 11, 29, 0]
    """
    if start < 0 or length < 0:
        raise InvalidPartition(
            f"Partition start and length must be non-negative, got start={start}, length={length}"
        )
    validate_percentages(percentages)

    lengths = [round_half_up(length * p) for p in percentages]
    remainder = length - sum(lengths)

    if remainder >= 0:
        lengths[-1] += remainder
    else:
        # Перебор при округлении: снимаем с хвоста
        i = len(lengths) - 1
        while remainder < 0:
            taken = min(lengths[i], -remainder)
            lengths[i] -= taken
            remainder += taken
            i -= 1

    intervals = []
    cursor = start
    for child_length in lengths:
        intervals.append(Interval(cursor, child_length))
        cursor += child_length

    return intervals


# =============================================================================
# ПЕРЕСЕЧЕНИЕ
# =============================================================================


def intersect(first: Iterable[Interval], second: Iterable[Interval]) -> list[Interval]:
    """
    Пересечение двух множеств интервалов (two-pointer sweep).

    Оба входа сортируются по start (копии, входы не мутируются). На каждом шаге
    продвигается интервал, который заканчивается раньше. Пересечение
    выдаётся только если оба исходных интервала непусты и count > 0.

    Args:
        first: Первое множество интервалов
        second: Второе множество интервалов

    Returns:
        Интервалы пересечения по возрастанию start (не обязательно слитые)
    """
    a = sorted(first, key=_START_KEY)
    b = sorted(second, key=_START_KEY)

    result = []
    i = 0
    j = 0
    while i < len(a) and j < len(b):
        x = a[i]
        y = b[j]

        if x.stop >= y.start and y.stop >= x.start:
            start = max(x.start, y.start)
            end = min(x.end, y.end)
            count = end - start + 1

            if count > 0 and x.length > 0 and y.length > 0:
                result.append(Interval(start, count))

        if x.stop < y.stop:
            i += 1
        else:
            j += 1

    return result


def intersect_range(intervals: Iterable[Interval], interval: Interval) -> list[Interval]:
    """Пересечение множества интервалов с одним интервалом."""
    return intersect(intervals, [interval])


def intersecting_ids(first: Iterable[Interval], second: Iterable[Interval]) -> list[int]:
    """
    Пересечение двух множеств интервалов как список отдельных id.

    Examples:
        >>> intersecting_ids([Interval(0, 10)], [Interval(8, 5)])
        [8, 9]
    """
    return [uid for interval in intersect(first, second) for uid in interval]


def intersect_with_points_linear(ranges: Iterable[Interval], points: Iterable[int]) -> list[Interval]:
    """
    Вставка точек в множество интервалов линейным поиском.

    Для каждой точки (по возрастанию):
    - точка уже внутри интервала → no-op
    - точка непосредственно перед start или после end интервала → интервал растёт на 1
    - иначе → новый единичный интервал в отсортированной позиции

    Соседние интервалы после вставки не сливаются (см. merge_adjacent).
    """
    result = [r for r in sorted(ranges, key=_START_KEY) if r.length > 0]

    for point in sorted(points):
        insert_at = len(result)
        for k, current in enumerate(result):
            if current.contains(point):
                break
            if current.start - 1 == point:
                result[k] = Interval(current.start - 1, current.length + 1)
                break
            if current.end + 1 == point:
                result[k] = Interval(current.start, current.length + 1)
                break
            if current.start > point:
                insert_at = k
                result.insert(insert_at, Interval(point, 1))
                break
        else:
            result.insert(insert_at, Interval(point, 1))

    return result


def intersect_with_points(ranges: Iterable[Interval], points: Iterable[int]) -> list[Interval]:
    """
    Вставка точек в множество интервалов с бинарным поиском (bisect).

    Семантика совпадает с intersect_with_points_linear, но позиция точки
    ищется бинарным поиском по start. Точка, соединяющая два соседних
    интервала, сливает их в один.

    Args:
        ranges: Исходные интервалы
        points: id для вставки

    Returns:
        Отсортированные по start непересекающиеся интервалы
    """
    result = [r for r in sorted(ranges, key=_START_KEY) if r.length > 0]

    for point in sorted(points):
        unit = Interval(point, 1)
        index = bisect_right(result, point, key=_START_KEY)

        if index > 0 and result[index - 1].contains(point):
            continue

        merged_prev = result[index - 1].try_merge(unit) if index > 0 else None
        merged_next = result[index].try_merge(unit) if index < len(result) else None

        if merged_prev is not None and merged_next is not None:
            result[index - 1] = merged_prev.try_merge(merged_next)
            del result[index]
        elif merged_prev is not None:
            result[index - 1] = merged_prev
        elif merged_next is not None:
            result[index] = merged_next
        else:
            result.insert(index, unit)

    return result


# =============================================================================
# РАЗНОСТЬ, СЛИЯНИЕ, КОНДЕНСАЦИЯ
# =============================================================================


def merge_adjacent(intervals: Iterable[Interval]) -> list[Interval]:
    """
    Слияние пересекающихся и смежных интервалов.

    Returns:
        Минимальный упорядоченный набор непустых интервалов с тем же множеством id
    """
    merged: list[Interval] = []
    for current in sorted(intervals, key=_START_KEY):
        if current.length == 0:
            continue
        if merged:
            combined = merged[-1].try_merge(current)
            if combined is not None:
                merged[-1] = combined
                continue
        merged.append(current)

    return merged


def difference(primary: Iterable[Interval], removed: Iterable[Interval]) -> list[Interval]:
    """
    Разность множеств: из каждого интервала primary удаляются все id,
    покрытые любым интервалом removed.

    Оставшиеся id каждого интервала primary конденсируются в максимальные
    непрерывные отрезки. Порядок результата следует порядку primary;
    интервалы primary без выживших id ничего не дают.

    Args:
        primary: Исходное множество
        removed: Удаляемое множество

    Returns:
        Список интервалов разности
    """
    removal = merge_adjacent(removed)
    removal_ends = [r.end for r in removal]

    result = []
    for current in primary:
        if current.length == 0:
            continue

        cursor = current.start
        k = bisect_left(removal_ends, current.start)
        while k < len(removal) and removal[k].start <= current.end:
            cut = removal[k]
            if cut.start > cursor:
                result.append(Interval(cursor, cut.start - cursor))
            cursor = max(cursor, cut.end + 1)
            k += 1

        if cursor <= current.end:
            result.append(Interval(cursor, current.end - cursor + 1))

    return result


def condense(sorted_ids: Iterable[int]) -> list[Interval]:
    """
    Конденсация отсортированных id в минимальный набор интервалов.

    Последовательные id (id[i+1] == id[i] + 1) объединяются в один интервал.

    Examples:
        >>> condense([1, 2, 3, 7, 9, 10])
        [Interval(start=1, length=3), Interval(start=7, length=1), Interval(start=9, length=2)]
    """
    result = []
    run_start = None
    previous = None

    for uid in sorted_ids:
        if run_start is None:
            run_start = uid
        elif uid != previous + 1:
            result.append(Interval(run_start, previous - run_start + 1))
            run_start = uid
        previous = uid

    if run_start is not None:
        result.append(Interval(run_start, previous - run_start + 1))

    return result


# =============================================================================
# УТИЛИТЫ
# =============================================================================


def select_nth_of_every_m(items: Sequence[Interval], n: int, m: int) -> list[Interval]:
    """
    Выбор n-го элемента каждой группы из m в плоском списке.

    Уровень дерева выдаётся плоским списком, где потомки каждого родителя
    идут группами по m; выборка восстанавливает "одного и того же потомка
    у каждого родителя".

    Returns:
        items[n], items[n + m], items[n + 2m], ...; пустой список, если n вне [0, m)
    """
    if m <= 0 or n < 0 or n >= m:
        return []
    return list(items[n::m])


def total_count(intervals: Iterable[Interval]) -> int:
    """Сумма длин интервалов."""
    return sum(r.length for r in intervals)
