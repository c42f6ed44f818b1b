"""Grid statistics aggregation."""

import math
from typing import Iterable, Optional, Tuple

from .models import Asset, AssetRole, GridStats
from .randomness import RandomSource, NumpyRandomSource

# Storage level is not yet derived from battery state.
STORAGE_LEVEL_PLACEHOLDER = 65.0
NOMINAL_FREQUENCY = 50.0
FREQUENCY_JITTER = 0.1
FREQUENCY_BAND = 0.05


def round_half_up(value: float, digits: int = 1) -> float:
    """Round to ``digits`` decimals, ties going towards positive infinity."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def aggregate_load(assets: Iterable[Asset]) -> Tuple[float, float, float]:
    """Return rounded (generation, consumption, net load) for the assets.

    Batteries count as generation while discharging and as consumption
    (absolute value) while charging. Net load is rounded from the unrounded
    difference.
    """
    generation = 0.0
    consumption = 0.0
    for asset in assets:
        role = asset.role
        if role == AssetRole.GENERATION:
            generation += asset.current_output
        elif role == AssetRole.CONSUMPTION:
            consumption += asset.current_output
        elif asset.current_output > 0:
            generation += asset.current_output
        else:
            consumption += abs(asset.current_output)

    return (
        round_half_up(generation),
        round_half_up(consumption),
        round_half_up(consumption - generation)
    )


def synthetic_frequency(
    rng: RandomSource,
    nominal: float = NOMINAL_FREQUENCY,
    jitter: float = FREQUENCY_JITTER
) -> float:
    """Frequency jittered uniformly within ``jitter`` total width around nominal.

    This is a display signal only and is independent of the load balance.
    """
    return nominal + (rng.random() - 0.5) * jitter


def compute_stats(
    assets: Iterable[Asset],
    rng: Optional[RandomSource] = None,
    storage_level: float = STORAGE_LEVEL_PLACEHOLDER,
    nominal_frequency: float = NOMINAL_FREQUENCY,
    frequency_jitter: float = FREQUENCY_JITTER,
    frequency_band: float = FREQUENCY_BAND
) -> GridStats:
    """Compute fresh grid statistics from the current assets."""
    generation, consumption, net_load = aggregate_load(assets)
    rng = rng or NumpyRandomSource()
    return GridStats(
        total_generation=generation,
        total_consumption=consumption,
        net_load=net_load,
        storage_level=storage_level,
        grid_frequency=synthetic_frequency(rng, nominal_frequency, frequency_jitter),
        nominal_frequency=nominal_frequency,
        frequency_band=frequency_band
    )
