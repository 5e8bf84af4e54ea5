"""Config loading and schema."""

from .loader import ConfigLoadError, load_config
from .schema import (
    DEFAULT_TIMEOUT_MS,
    DEFAULT_TOLERANCE_PERCENT,
    EngineConfig,
    SubsetCalculationConfig,
)

__all__ = [
    "ConfigLoadError",
    "DEFAULT_TIMEOUT_MS",
    "DEFAULT_TOLERANCE_PERCENT",
    "EngineConfig",
    "SubsetCalculationConfig",
    "load_config",
]
