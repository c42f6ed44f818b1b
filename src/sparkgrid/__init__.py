"""SparkGrid virtual power plant library initialization."""

from .core import VirtualPowerPlant
from .config import SparkGridConfig
from .exceptions import SparkGridError
from .models import Asset, AssetType, AssetStatus, GridStats, HistoryPoint
from .simulation import GridState, Scenario

# Import submodules
from . import simulation
from . import advisory

__version__ = "1.0.0"
__author__ = "SparkGrid Development Team"
__license__ = "MIT"

__all__ = [
    "VirtualPowerPlant",
    "SparkGridConfig",
    "SparkGridError",
    "Asset",
    "AssetType",
    "AssetStatus",
    "GridStats",
    "HistoryPoint",
    "GridState",
    "Scenario",
    "simulation",
    "advisory"
]
