"""
PopulationConfig — Конфигурация популяции

Immutable Pydantic модели, описывающие размер популяции, seed хранилища
состояний и последовательность slice операций. Совместимы с JSON Schema
(poptree/core/contracts/schema/population_layout.json).
"""

from pydantic import BaseModel, Field, field_validator, model_validator

from poptree.core.domain.tree import DEFAULT_POPULATION_SIZE, PartitionTree
from poptree.core.errors import InvalidPartition
from poptree.core.math.intervals import validate_percentages


# =============================================================================
# NESTED MODELS
# =============================================================================


def _check_percentages(values: list[float]) -> list[float]:
    try:
        validate_percentages(values)
    except InvalidPartition as e:
        raise ValueError(str(e)) from e
    return values


class SliceSpec(BaseModel):
    """
    Одна slice операция: общий набор долей или jagged (по набору на родителя).
    """

    depth: int = Field(..., ge=1, description="Создаваемый уровень дерева")
    percentages: list[float] | None = Field(
        None, description="Доли потомков, общие для всех родителей (сумма ≈ 1.0)"
    )
    jagged: list[list[float]] | None = Field(
        None, description="Доли потомков отдельно для каждого родителя"
    )

    model_config = {"frozen": True}

    @field_validator("percentages")
    @classmethod
    def validate_shared_percentages(cls, v: list[float] | None) -> list[float] | None:
        """Проверка суммы ≈ 1.0 и неотрицательности"""
        if v is None:
            return v
        return _check_percentages(v)

    @field_validator("jagged")
    @classmethod
    def validate_jagged_percentages(cls, v: list[list[float]] | None) -> list[list[float]] | None:
        """Проверка каждого набора долей"""
        if v is None:
            return v
        if len(v) == 0:
            raise ValueError("jagged must contain at least one percentage set")
        return [_check_percentages(values) for values in v]

    @model_validator(mode="after")
    def validate_exactly_one_form(self) -> "SliceSpec":
        """Ровно одно из percentages / jagged"""
        if (self.percentages is None) == (self.jagged is None):
            raise ValueError("exactly one of 'percentages' or 'jagged' must be set")
        return self


# =============================================================================
# POPULATION CONFIG
# =============================================================================


class PopulationConfig(BaseModel):
    """
    Конфигурация популяции.

    Slices применяются по порядку; глубины должны идти подряд с 1.
    """

    population_size: int = Field(
        DEFAULT_POPULATION_SIZE, gt=0, description="Количество уникальных id"
    )
    seed: int = Field(0, description="Seed генератора StateStore")
    slices: list[SliceSpec] = Field(
        default_factory=list, description="Последовательность slice операций"
    )

    model_config = {"frozen": True}

    @field_validator("slices")
    @classmethod
    def validate_consecutive_depths(cls, v: list[SliceSpec]) -> list[SliceSpec]:
        """Глубины 1, 2, 3, ... без пропусков и повторов"""
        for expected, spec in enumerate(v, start=1):
            if spec.depth != expected:
                raise ValueError(
                    f"slice depths must be consecutive from 1, got {spec.depth} at position {expected}"
                )
        return v


def build_tree(config: PopulationConfig) -> PartitionTree:
    """Построение PartitionTree по конфигурации."""
    return PartitionTree.from_config(config)
