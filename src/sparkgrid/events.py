"""Event definitions for the SparkGrid operator log."""

from enum import Enum
from typing import Dict, Any, Optional, Tuple
from dataclasses import dataclass, field
from datetime import datetime

class EventType(str, Enum):
    """Types of grid events."""
    SYSTEM = "system"

    # Operator actions
    SCENARIO_APPLIED = "scenario_applied"
    GRID_RESET = "grid_reset"
    ASSET_INSPECTED = "asset_inspected"

@dataclass(frozen=True)
class Event:
    """A single operator log entry."""
    type: EventType
    message: str
    timestamp: datetime = field(default_factory=datetime.now)
    asset_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "asset_id": self.asset_id,
            "details": self.details
        }

def push_event(log: Tuple[Event, ...], event: Event, limit: int = 10) -> Tuple[Event, ...]:
    """Prepend ``event`` to a newest-first log, keeping at most ``limit`` entries."""
    return ((event,) + tuple(log))[:limit]

def initial_log() -> Tuple[Event, ...]:
    """Log contents at process start, newest first."""
    return (
        Event(EventType.SYSTEM, "Grid initialized..."),
        Event(EventType.SYSTEM, "VPP systems operational."),
    )
