"""
Тесты для PopulationConfig и population_layout JSON Schema контракта

Проверяемые инварианты:
1. SliceSpec: ровно одна форма (percentages / jagged), сумма долей ≈ 1.0
2. PopulationConfig: глубины подряд с 1, population_size > 0, immutable
3. build_tree / build_population воспроизводят ручное построение
4. JSON Schema: форма данных, meta-validation схемы
"""

import pytest
from jsonschema import ValidationError as SchemaValidationError
from pydantic import ValidationError

from poptree.core.contracts import (
    PopulationLayoutValidator,
    SchemaLoader,
    load_population_config,
    validate_population_layout,
)
from poptree.core.domain.config import PopulationConfig, SliceSpec, build_tree
from poptree.core.domain.tree import DEFAULT_POPULATION_SIZE, PartitionTree
from poptree.store import StateStore, build_population


@pytest.fixture
def layout():
    """Валидное описание популяции пол → раса → класс."""
    return {
        "population_size": 10_000,
        "seed": 69_420,
        "slices": [
            {"depth": 1, "percentages": [0.5, 0.5]},
            {"depth": 2, "percentages": [0.35, 0.40, 0.25]},
            {"depth": 3, "percentages": [0.1, 0.1, 0.25, 0.30, 0.1852, 0.0648]},
        ],
    }


# =============================================================================
# ТЕСТЫ: SliceSpec
# =============================================================================


class TestSliceSpec:
    """Тесты SliceSpec."""

    def test_shared_percentages(self):
        spec = SliceSpec(depth=1, percentages=[0.5, 0.5])
        assert spec.percentages == [0.5, 0.5]
        assert spec.jagged is None

    def test_jagged(self):
        spec = SliceSpec(depth=2, jagged=[[0.4, 0.6], [0.6, 0.4]])
        assert spec.jagged == [[0.4, 0.6], [0.6, 0.4]]

    def test_bad_sum(self):
        with pytest.raises(ValidationError, match="sum to approximately 1.0"):
            SliceSpec(depth=1, percentages=[0.5, 0.4])

    def test_bad_jagged_set(self):
        with pytest.raises(ValidationError):
            SliceSpec(depth=2, jagged=[[0.5, 0.5], [0.9]])

    def test_empty_jagged(self):
        with pytest.raises(ValidationError, match="at least one percentage set"):
            SliceSpec(depth=2, jagged=[])

    def test_both_forms(self):
        with pytest.raises(ValidationError, match="exactly one"):
            SliceSpec(depth=1, percentages=[1.0], jagged=[[1.0]])

    def test_neither_form(self):
        with pytest.raises(ValidationError, match="exactly one"):
            SliceSpec(depth=1)

    def test_depth_must_be_positive(self):
        with pytest.raises(ValidationError):
            SliceSpec(depth=0, percentages=[1.0])

    def test_frozen(self):
        spec = SliceSpec(depth=1, percentages=[1.0])
        with pytest.raises(ValidationError):
            spec.depth = 2


# =============================================================================
# ТЕСТЫ: PopulationConfig
# =============================================================================


class TestPopulationConfig:
    """Тесты PopulationConfig."""

    def test_defaults(self):
        config = PopulationConfig()

        assert config.population_size == DEFAULT_POPULATION_SIZE
        assert config.seed == 0
        assert config.slices == []

    def test_from_layout(self, layout):
        config = PopulationConfig.model_validate(layout)

        assert config.population_size == 10_000
        assert config.seed == 69_420
        assert [spec.depth for spec in config.slices] == [1, 2, 3]

    def test_non_consecutive_depths(self):
        with pytest.raises(ValidationError, match="consecutive"):
            PopulationConfig(
                population_size=100,
                slices=[
                    SliceSpec(depth=1, percentages=[1.0]),
                    SliceSpec(depth=3, percentages=[1.0]),
                ],
            )

    def test_slices_must_start_at_one(self):
        with pytest.raises(ValidationError, match="consecutive"):
            PopulationConfig(population_size=100, slices=[SliceSpec(depth=2, percentages=[1.0])])

    def test_population_must_be_positive(self):
        with pytest.raises(ValidationError):
            PopulationConfig(population_size=0)

    def test_frozen(self):
        config = PopulationConfig(population_size=100)
        with pytest.raises(ValidationError):
            config.seed = 1


# =============================================================================
# ТЕСТЫ: Построение по конфигурации
# =============================================================================


class TestBuildFromConfig:
    """build_tree / build_population."""

    def test_build_tree_matches_manual(self, layout):
        tree = build_tree(PopulationConfig.model_validate(layout))

        manual = PartitionTree(10_000)
        manual.slice(1, [0.5, 0.5])
        manual.slice(2, [0.35, 0.40, 0.25])
        manual.slice(3, [0.1, 0.1, 0.25, 0.30, 0.1852, 0.0648])

        assert tree.max_depth == 3
        for depth in range(4):
            assert tree.ranges_at_depth(depth) == manual.ranges_at_depth(depth)

    def test_build_jagged(self):
        config = PopulationConfig(
            population_size=10_000,
            slices=[
                SliceSpec(depth=1, percentages=[0.5, 0.5]),
                SliceSpec(depth=2, jagged=[[0.4, 0.6], [0.6, 0.4]]),
            ],
        )
        tree = PartitionTree.from_config(config)
        assert [r.length for r in tree.ranges_at_depth(2)] == [2000, 3000, 3000, 2000]

    def test_build_population(self, layout):
        config = PopulationConfig.model_validate(layout)
        tree, store = build_population(config)

        assert store.tree is tree
        assert store.population_size == 10_000
        assert tree.query().query(2, 1).query(3, 2).count == 1000

    def test_store_seed_from_config(self, layout):
        config = PopulationConfig.model_validate(layout)
        tree, store = build_population(config)
        reference = StateStore(69_420, tree)

        sample = tree.query()
        assert [store.random_id(sample) for _ in range(10)] == [reference.random_id(sample) for _ in range(10)]


# =============================================================================
# ТЕСТЫ: JSON Schema контракт
# =============================================================================


class TestPopulationLayoutContract:
    """Тесты population_layout.json."""

    def test_schema_is_valid(self):
        schema = SchemaLoader().load_schema("population_layout")
        assert schema["title"] == "population_layout"

    def test_schema_cached(self):
        loader = SchemaLoader()
        assert loader.load_schema("population_layout") is loader.load_schema("population_layout")

    def test_unknown_schema(self):
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load_schema("no_such_contract")

    def test_valid_layout(self, layout):
        validate_population_layout(layout)
        assert PopulationLayoutValidator().is_valid(layout)

    def test_minimal_layout(self):
        validate_population_layout({"population_size": 1})

    def test_missing_population_size(self, layout):
        del layout["population_size"]
        with pytest.raises(SchemaValidationError):
            validate_population_layout(layout)

    def test_unknown_property(self, layout):
        layout["population"] = 5
        assert not PopulationLayoutValidator().is_valid(layout)

    def test_slice_with_both_forms(self, layout):
        layout["slices"][0]["jagged"] = [[0.5, 0.5]]
        with pytest.raises(SchemaValidationError):
            validate_population_layout(layout)

    def test_slice_without_form(self, layout):
        layout["slices"][0] = {"depth": 1}
        with pytest.raises(SchemaValidationError):
            validate_population_layout(layout)

    def test_percentage_out_of_range(self, layout):
        layout["slices"][0]["percentages"] = [1.5, -0.5]
        errors = list(PopulationLayoutValidator().iter_errors(layout))
        assert len(errors) >= 1

    def test_load_population_config(self, layout):
        config = load_population_config(layout)
        assert isinstance(config, PopulationConfig)
        assert config.slices[2].percentages == [0.1, 0.1, 0.25, 0.30, 0.1852, 0.0648]

    def test_load_rejects_shape_before_semantics(self, layout):
        layout["population_size"] = "10000"
        with pytest.raises(SchemaValidationError):
            load_population_config(layout)

    def test_load_rejects_semantics(self, layout):
        """Схема пропускает сумму долей != 1.0, модель — нет."""
        layout["slices"][1]["percentages"] = [0.35, 0.40]
        validate_population_layout(layout)
        with pytest.raises(ValidationError):
            load_population_config(layout)
