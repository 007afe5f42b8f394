"""
Contract Validation Module

Модуль для валидации JSON описаний популяции.
"""

from .validators import (
    ContractValidator,
    PopulationLayoutValidator,
    SchemaLoader,
    load_population_config,
    validate_population_layout,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "PopulationLayoutValidator",
    # Functions
    "validate_population_layout",
    "load_population_config",
]
