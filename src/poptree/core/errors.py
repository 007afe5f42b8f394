"""
Errors — Таксономия ошибок population tree

Закрытый набор видов ошибок:
- INVALID_PARTITION: проценты не суммируются в ≈1.0, отрицательный start/length
- INVALID_DEPTH: недопустимая глубина для slice/ranges_at_depth/query
- ID_OUT_OF_RANGE: uid не покрыт ни одним диапазоном дерева (remap)
- EMPTY_POPULATION: нечего выбирать (random draw, поиск следующего id)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. INVALID_PARTITION / INVALID_DEPTH / ID_OUT_OF_RANGE — ошибки программиста,
   поднимаются сразу в месте нарушения контракта
2. EMPTY_POPULATION — ожидаемое, восстанавливаемое состояние
   (например, "свободных id больше нет"), вызывающий код обязан его обрабатывать
3. Пустой результат алгебры интервалов или запроса — НЕ ошибка
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Вид ошибки population tree."""

    INVALID_PARTITION = "INVALID_PARTITION"
    INVALID_DEPTH = "INVALID_DEPTH"
    ID_OUT_OF_RANGE = "ID_OUT_OF_RANGE"
    EMPTY_POPULATION = "EMPTY_POPULATION"


class PopulationError(Exception):
    """Базовое исключение для всех ошибок population tree."""

    kind: ErrorKind

    @property
    def recoverable(self) -> bool:
        """True только для EMPTY_POPULATION."""
        return self.kind == ErrorKind.EMPTY_POPULATION


class InvalidPartition(PopulationError, ValueError):
    """
    Некорректное разбиение: сумма процентов != ≈1.0 или отрицательный
    start/length интервала.
    """

    kind = ErrorKind.INVALID_PARTITION


class InvalidDepth(PopulationError, ValueError):
    """
    Некорректная глубина: slice с depth <= 0, повторный slice уже разбитого
    уровня, slice с пропуском уровня, отрицательная глубина в запросе.
    """

    kind = ErrorKind.INVALID_DEPTH


class IdOutOfRange(PopulationError, LookupError):
    """uid не лежит ни в одном диапазоне на некоторой глубине дерева."""

    kind = ErrorKind.ID_OUT_OF_RANGE

    def __init__(self, uid: int, depth: int | None = None):
        self.uid = uid
        self.depth = depth
        if depth is None:
            message = f"The given id '{uid}' does not exist within the population."
        else:
            message = (
                f"The given id '{uid}' does not exist within any range at depth {depth}."
            )
        super().__init__(message)


class EmptyPopulation(PopulationError):
    """
    Множество кандидатов для выбора пусто.

    Восстанавливаемое состояние: вызывающий код ветвится на нём
    (например, закончились свободные id).
    """

    kind = ErrorKind.EMPTY_POPULATION

    def __init__(self, message: str = "The resulting population from your query is empty."):
        super().__init__(message)
