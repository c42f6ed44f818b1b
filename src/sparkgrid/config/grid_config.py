"""
Main SparkGrid configuration class that integrates all configuration sections.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List, Tuple
import logging

from .base import BaseConfig, ConfigValidationResult
from ..assets import SEED_ASSETS
from ..models import Asset, AssetType, AssetStatus
from ..advisory import DEFAULT_MODEL, DEFAULT_ENDPOINT, DEFAULT_API_KEY_ENV

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@dataclass
class AssetConfig:
    """Configuration for one seed asset."""
    id: str
    name: str
    type: str  # "solar", "wind", "battery", "building", "factory", "ev-station"
    capacity: float
    current_output: float = 0.0
    status: str = "active"
    x: float = 0.0
    y: float = 0.0

    def validate(self) -> ConfigValidationResult:
        """Validate asset configuration."""
        result = ConfigValidationResult(is_valid=True)

        if not self.id:
            result.add_error("Asset id cannot be empty")

        if not self.name:
            result.add_warning("Asset name is empty")

        valid_types = [t.value for t in AssetType]
        if self.type not in valid_types:
            result.add_error(f"Unknown asset type: {self.type}")

        valid_statuses = [s.value for s in AssetStatus]
        if self.status not in valid_statuses:
            result.add_error(f"Unknown asset status: {self.status}")

        if self.capacity < 0:
            result.add_error(f"Capacity must be >= 0, got {self.capacity}")
        elif abs(self.current_output) > self.capacity:
            result.add_error(
                f"Output {self.current_output} exceeds capacity {self.capacity}"
            )

        for axis, value in (("x", self.x), ("y", self.y)):
            if not 0 <= value <= 100:
                result.add_error(f"Coordinate {axis} must be within [0, 100], got {value}")

        return result

    def to_asset(self) -> Asset:
        """Build the asset record described by this entry."""
        return Asset(
            id=str(self.id),
            name=self.name,
            type=AssetType(self.type),
            capacity=self.capacity,
            current_output=self.current_output,
            status=AssetStatus(self.status),
            x=self.x,
            y=self.y
        )

    @classmethod
    def from_asset(cls, asset: Asset) -> 'AssetConfig':
        return cls(**asset.to_dict())


@dataclass
class SimulationConfig:
    """Configuration for the grid simulation."""
    tick_interval_seconds: float = 3.0
    history_limit: int = 20
    log_limit: int = 10
    fluctuation_amplitude: float = 1.0  # MW
    nominal_frequency: float = 50.0  # Hz
    frequency_jitter: float = 0.1  # Hz, total width
    frequency_band: float = 0.05  # Hz
    storage_level: float = 65.0  # %
    random_seed: Optional[int] = None

    def validate(self) -> ConfigValidationResult:
        """Validate simulation configuration."""
        result = ConfigValidationResult(is_valid=True)

        if self.tick_interval_seconds <= 0:
            result.add_error(f"Tick interval must be > 0, got {self.tick_interval_seconds}")

        if self.history_limit < 1:
            result.add_error(f"History limit must be >= 1, got {self.history_limit}")

        if self.log_limit < 1:
            result.add_error(f"Log limit must be >= 1, got {self.log_limit}")

        if self.fluctuation_amplitude < 0:
            result.add_error(f"Fluctuation amplitude must be >= 0, got {self.fluctuation_amplitude}")

        if self.nominal_frequency <= 0:
            result.add_error(f"Nominal frequency must be > 0, got {self.nominal_frequency}")

        if self.frequency_jitter < 0:
            result.add_error(f"Frequency jitter must be >= 0, got {self.frequency_jitter}")

        if self.frequency_band < 0:
            result.add_error(f"Frequency band must be >= 0, got {self.frequency_band}")

        if not 0 <= self.storage_level <= 100:
            result.add_error(f"Storage level must be within [0, 100], got {self.storage_level}")

        return result


@dataclass
class AdvisoryConfig:
    """Configuration for the advisory collaborator."""
    enabled: bool = True
    model: str = DEFAULT_MODEL
    endpoint: str = DEFAULT_ENDPOINT
    api_key_env: str = DEFAULT_API_KEY_ENV
    timeout_seconds: float = 30.0
    request_on_scenario: bool = True
    background: bool = True

    def validate(self) -> ConfigValidationResult:
        """Validate advisory configuration."""
        result = ConfigValidationResult(is_valid=True)

        if not self.model:
            result.add_error("Advisory model cannot be empty")

        if not self.endpoint.startswith(("http://", "https://")):
            result.add_error(f"Invalid advisory endpoint: {self.endpoint}")

        if self.timeout_seconds <= 0:
            result.add_error(f"Timeout must be > 0, got {self.timeout_seconds}")

        if not self.api_key_env:
            result.add_warning("No API key environment variable configured")

        return result


@dataclass
class MonitoringConfig:
    """Configuration for logging."""
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def validate(self) -> ConfigValidationResult:
        """Validate monitoring configuration."""
        result = ConfigValidationResult(is_valid=True)

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_log_levels:
            result.add_error(f"Invalid log level: {self.log_level}")

        return result


@dataclass
class SparkGridConfig(BaseConfig):
    """Main SparkGrid configuration class."""

    name: str = "SparkGrid VPP"
    description: str = ""

    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    advisory: AdvisoryConfig = field(default_factory=AdvisoryConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    # Empty means the built-in seed fleet
    assets: List[AssetConfig] = field(default_factory=list)

    config_version: str = "1.0"

    def __post_init__(self):
        """Initialize after dataclass creation."""
        super().__init__()
        self._setup_logging()

    def _setup_logging(self):
        """Setup logging based on monitoring configuration."""
        logger = logging.getLogger("sparkgrid")
        level = getattr(logging, self.monitoring.log_level, None)
        if isinstance(level, int):
            logger.setLevel(level)

        formatter = logging.Formatter(LOG_FORMAT)

        # Console handler
        if not logger.handlers:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        # File handler if specified
        if self.monitoring.log_file:
            existing = {
                getattr(h, "baseFilename", None) for h in logger.handlers
                if isinstance(h, logging.FileHandler)
            }
            file_handler = logging.FileHandler(self.monitoring.log_file)
            if file_handler.baseFilename in existing:
                file_handler.close()
            else:
                file_handler.setFormatter(formatter)
                logger.addHandler(file_handler)

    def seed_assets(self) -> Tuple[Asset, ...]:
        """Seed fleet for the simulation."""
        if not self.assets:
            return SEED_ASSETS
        return tuple(asset.to_asset() for asset in self.assets)

    def validate(self) -> ConfigValidationResult:
        """Validate the entire configuration."""
        result = ConfigValidationResult(is_valid=True)

        if not self.name:
            result.add_error("Name cannot be empty")

        components = [
            ("simulation", self.simulation),
            ("advisory", self.advisory),
            ("monitoring", self.monitoring)
        ]

        for component_name, component in components:
            result.extend(component.validate(), prefix=f"{component_name}: ")

        asset_ids = set()
        for asset in self.assets:
            if asset.id in asset_ids:
                result.add_error(f"Duplicate asset id: {asset.id}")
            asset_ids.add(asset.id)
            result.extend(asset.validate(), prefix=f"asset '{asset.id}': ")

        return result

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "name": self.name,
            "description": self.description,
            "simulation": {
                "tick_interval_seconds": self.simulation.tick_interval_seconds,
                "history_limit": self.simulation.history_limit,
                "log_limit": self.simulation.log_limit,
                "fluctuation_amplitude": self.simulation.fluctuation_amplitude,
                "nominal_frequency": self.simulation.nominal_frequency,
                "frequency_jitter": self.simulation.frequency_jitter,
                "frequency_band": self.simulation.frequency_band,
                "storage_level": self.simulation.storage_level,
                "random_seed": self.simulation.random_seed
            },
            "advisory": {
                "enabled": self.advisory.enabled,
                "model": self.advisory.model,
                "endpoint": self.advisory.endpoint,
                "api_key_env": self.advisory.api_key_env,
                "timeout_seconds": self.advisory.timeout_seconds,
                "request_on_scenario": self.advisory.request_on_scenario,
                "background": self.advisory.background
            },
            "monitoring": {
                "log_level": self.monitoring.log_level,
                "log_file": self.monitoring.log_file
            },
            "assets": [
                {
                    "id": asset.id,
                    "name": asset.name,
                    "type": asset.type,
                    "capacity": asset.capacity,
                    "current_output": asset.current_output,
                    "status": asset.status,
                    "x": asset.x,
                    "y": asset.y
                }
                for asset in self.assets
            ],
            "config_version": self.config_version
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SparkGridConfig':
        """Create configuration from dictionary."""
        simulation_data = data.get("simulation") or {}
        simulation = SimulationConfig(
            tick_interval_seconds=simulation_data.get("tick_interval_seconds", 3.0),
            history_limit=simulation_data.get("history_limit", 20),
            log_limit=simulation_data.get("log_limit", 10),
            fluctuation_amplitude=simulation_data.get("fluctuation_amplitude", 1.0),
            nominal_frequency=simulation_data.get("nominal_frequency", 50.0),
            frequency_jitter=simulation_data.get("frequency_jitter", 0.1),
            frequency_band=simulation_data.get("frequency_band", 0.05),
            storage_level=simulation_data.get("storage_level", 65.0),
            random_seed=simulation_data.get("random_seed")
        )

        advisory_data = data.get("advisory") or {}
        advisory = AdvisoryConfig(
            enabled=advisory_data.get("enabled", True),
            model=advisory_data.get("model", DEFAULT_MODEL),
            endpoint=advisory_data.get("endpoint", DEFAULT_ENDPOINT),
            api_key_env=advisory_data.get("api_key_env", DEFAULT_API_KEY_ENV),
            timeout_seconds=advisory_data.get("timeout_seconds", 30.0),
            request_on_scenario=advisory_data.get("request_on_scenario", True),
            background=advisory_data.get("background", True)
        )

        monitoring_data = data.get("monitoring") or {}
        monitoring = MonitoringConfig(
            log_level=monitoring_data.get("log_level", "INFO"),
            log_file=monitoring_data.get("log_file")
        )

        assets = [
            AssetConfig(
                id=str(asset_data["id"]),
                name=asset_data.get("name", ""),
                type=asset_data["type"],
                capacity=asset_data["capacity"],
                current_output=asset_data.get("current_output", 0.0),
                status=asset_data.get("status", "active"),
                x=asset_data.get("x", 0.0),
                y=asset_data.get("y", 0.0)
            )
            for asset_data in data.get("assets") or []
        ]

        return cls(
            name=data.get("name", "SparkGrid VPP"),
            description=data.get("description", ""),
            simulation=simulation,
            advisory=advisory,
            monitoring=monitoring,
            assets=assets,
            config_version=data.get("config_version", "1.0")
        )

    def validate_and_log(self) -> bool:
        """Validate configuration and log results."""
        result = self.validate()

        logger = logging.getLogger("sparkgrid.config")

        if result.is_valid:
            logger.info("Configuration validation passed")
        else:
            logger.error("Configuration validation failed")
            for error in result.errors:
                logger.error(f"Validation error: {error}")

        for warning in result.warnings:
            logger.warning(f"Validation warning: {warning}")

        return result.is_valid
