"""Data models for the SparkGrid virtual power plant."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional


class AssetType(str, Enum):
    """Closed set of managed asset types."""
    SOLAR = "solar"
    WIND = "wind"
    BATTERY = "battery"
    BUILDING = "building"
    FACTORY = "factory"
    EV_STATION = "ev-station"


class AssetStatus(str, Enum):
    """Operational status of an asset."""
    ACTIVE = "active"
    OFFLINE = "offline"
    WARNING = "warning"


class AssetRole(str, Enum):
    """Role an asset type plays when aggregating grid statistics."""
    GENERATION = "generation"
    CONSUMPTION = "consumption"
    DUAL = "dual"


# Every asset type maps to exactly one role.
ASSET_ROLES: Dict[AssetType, AssetRole] = {
    AssetType.SOLAR: AssetRole.GENERATION,
    AssetType.WIND: AssetRole.GENERATION,
    AssetType.BATTERY: AssetRole.DUAL,
    AssetType.BUILDING: AssetRole.CONSUMPTION,
    AssetType.FACTORY: AssetRole.CONSUMPTION,
    AssetType.EV_STATION: AssetRole.CONSUMPTION,
}


@dataclass(frozen=True)
class Asset:
    """One managed grid entity.

    Output and capacity are in MW. Batteries report negative output while
    charging. Position is expressed on a normalized 0-100 plane.
    """
    id: str
    name: str
    type: AssetType
    capacity: float
    current_output: float
    status: AssetStatus = AssetStatus.ACTIVE
    x: float = 0.0
    y: float = 0.0

    @property
    def role(self) -> AssetRole:
        """Aggregation role of this asset."""
        return ASSET_ROLES[self.type]

    @property
    def is_active(self) -> bool:
        return self.status == AssetStatus.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "capacity": self.capacity,
            "current_output": self.current_output,
            "status": self.status.value,
            "x": self.x,
            "y": self.y
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Asset':
        """Create an asset from a dictionary.

        Unknown ``type`` or ``status`` values raise ``ValueError`` from the
        enum lookup; range checks belong to the registry validator.
        """
        return cls(
            id=str(data["id"]),
            name=data["name"],
            type=AssetType(data["type"]),
            capacity=float(data["capacity"]),
            current_output=float(data.get("current_output", 0.0)),
            status=AssetStatus(data.get("status", AssetStatus.ACTIVE.value)),
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0))
        )


@dataclass(frozen=True)
class GridStats:
    """Aggregate grid figures derived from the current assets."""
    total_generation: float  # MW
    total_consumption: float  # MW
    net_load: float  # MW, consumption minus generation
    storage_level: float  # % state of charge
    grid_frequency: float  # Hz
    nominal_frequency: float = 50.0
    frequency_band: float = 0.05

    @property
    def frequency_in_band(self) -> bool:
        """True when the frequency sits inside the nominal tolerance band."""
        deviation = abs(self.grid_frequency - self.nominal_frequency)
        return deviation <= self.frequency_band

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_generation": self.total_generation,
            "total_consumption": self.total_consumption,
            "net_load": self.net_load,
            "storage_level": self.storage_level,
            "grid_frequency": self.grid_frequency,
            "frequency_in_band": self.frequency_in_band
        }


@dataclass(frozen=True)
class HistoryPoint:
    """One snapshot of the load curve."""
    timestamp: datetime
    generation: float
    consumption: float
    net: float

    @property
    def label(self) -> str:
        """Wall-clock label used on chart axes."""
        return self.timestamp.strftime("%H:%M:%S")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "time": self.label,
            "generation": self.generation,
            "consumption": self.consumption,
            "net": self.net
        }


@dataclass(frozen=True)
class AdvisoryRequest:
    """Grid summary submitted to the advisory service."""
    generation_mw: float
    consumption_mw: float
    net_load_mw: float
    scenario: str = "general"

    @classmethod
    def from_stats(cls, stats: GridStats, scenario: str = "general") -> 'AdvisoryRequest':
        return cls(
            generation_mw=stats.total_generation,
            consumption_mw=stats.total_consumption,
            net_load_mw=stats.net_load,
            scenario=scenario
        )


@dataclass(frozen=True)
class Advice:
    """Latest operational advice and the grid snapshot it was asked for."""
    text: str
    request: Optional[AdvisoryRequest] = None
    received_at: Optional[datetime] = None
    fallback_used: bool = False

    def to_dict(self) -> Dict[str, Any]:
        request = None
        if self.request is not None:
            request = {
                "generation_mw": self.request.generation_mw,
                "consumption_mw": self.request.consumption_mw,
                "net_load_mw": self.request.net_load_mw,
                "scenario": self.request.scenario
            }
        return {
            "text": self.text,
            "request": request,
            "received_at": self.received_at.isoformat() if self.received_at else None,
            "fallback_used": self.fallback_used
        }
