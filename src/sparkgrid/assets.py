"""Asset registry and the default seed fleet."""

from typing import Callable, Iterable, Iterator, List, Tuple

from .exceptions import AssetNotFoundError
from .models import Asset, AssetType, AssetStatus
from .validation import validate_assets

SEED_ASSETS: Tuple[Asset, ...] = (
    Asset("1", "Sunny Meadows PV", AssetType.SOLAR, 50, 35, AssetStatus.ACTIVE, 15, 20),
    Asset("2", "West Ridge Wind", AssetType.WIND, 80, 42, AssetStatus.ACTIVE, 80, 15),
    Asset("3", "Central Battery B1", AssetType.BATTERY, 40, -10, AssetStatus.ACTIVE, 50, 50),
    Asset("4", "Downtown Hub", AssetType.BUILDING, 30, 25, AssetStatus.ACTIVE, 45, 75),
    Asset("5", "Tech Park A", AssetType.FACTORY, 100, 85, AssetStatus.ACTIVE, 75, 80),
    Asset("6", "Supercharger Lot", AssetType.EV_STATION, 20, 12, AssetStatus.ACTIVE, 20, 85),
)


class AssetRegistry:
    """Ordered, immutable collection of assets.

    Every transition returns a new registry; the previous one is never
    modified, so a reader holding a registry always sees a consistent fleet.
    """

    def __init__(self, assets: Iterable[Asset] = SEED_ASSETS, validate: bool = True):
        self._assets: Tuple[Asset, ...] = tuple(assets)
        if validate:
            validate_assets(self._assets)

    @property
    def assets(self) -> Tuple[Asset, ...]:
        """Read-only snapshot of the assets in registry order."""
        return self._assets

    def replace(self, assets: Iterable[Asset]) -> 'AssetRegistry':
        """Swap the whole collection for a new one."""
        return AssetRegistry(assets)

    def map_each(self, transform: Callable[[Asset], Asset]) -> 'AssetRegistry':
        """Apply ``transform`` to every asset and return the successor registry."""
        # Transforms only touch output and status, so ids and types stay valid.
        return AssetRegistry([transform(asset) for asset in self._assets], validate=False)

    def get(self, asset_id: str) -> Asset:
        """Look up an asset by id."""
        for asset in self._assets:
            if asset.id == asset_id:
                return asset
        raise AssetNotFoundError(f"Asset not found: {asset_id}")

    @property
    def online_count(self) -> int:
        """Number of assets currently active."""
        return sum(1 for a in self._assets if a.is_active)

    @property
    def total_capacity(self) -> float:
        return sum(a.capacity for a in self._assets)

    def to_list(self) -> List[dict]:
        return [a.to_dict() for a in self._assets]

    def __iter__(self) -> Iterator[Asset]:
        return iter(self._assets)

    def __len__(self) -> int:
        return len(self._assets)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AssetRegistry):
            return NotImplemented
        return self._assets == other._assets

    def __repr__(self) -> str:
        return f"AssetRegistry({len(self._assets)} assets)"
