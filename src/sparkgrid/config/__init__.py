"""
Configuration package for SparkGrid.
Provides hierarchical, file-backed and validatable configuration.
"""

from .base import (
    BaseConfig,
    ConfigFormat,
    ValidationLevel,
    ConfigValidationResult
)

from .grid_config import (
    AssetConfig,
    SimulationConfig,
    AdvisoryConfig,
    MonitoringConfig,
    SparkGridConfig
)

__all__ = [
    # Base configuration classes
    "BaseConfig",
    "ConfigFormat",
    "ValidationLevel",
    "ConfigValidationResult",

    # Configuration sections
    "AssetConfig",
    "SimulationConfig",
    "AdvisoryConfig",
    "MonitoringConfig",

    # Main configuration class
    "SparkGridConfig"
]
