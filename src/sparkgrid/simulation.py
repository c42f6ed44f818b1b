"""Grid state simulation: periodic fluctuation and scenario transformations.

All functions here are pure. They take a ``GridState`` and return its
successor; nothing is mutated in place.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Optional, Tuple, Union
import logging

from .assets import AssetRegistry, SEED_ASSETS
from .events import Event, EventType, initial_log, push_event
from .exceptions import ScenarioError
from .models import Advice, Asset, AssetStatus, AssetType, HistoryPoint
from .randomness import RandomSource
from .stats import aggregate_load

logger = logging.getLogger("sparkgrid.simulation")

HISTORY_LIMIT = 20
LOG_LIMIT = 10
FLUCTUATION_AMPLITUDE = 1.0
DEFAULT_CONTEXT = "general"
INITIAL_ADVICE = "Waiting for system telemetry..."


class Scenario(str, Enum):
    """Named bulk transformations an operator can trigger."""
    HEATWAVE = "heatwave"
    STORM = "storm"
    BLACKOUT = "blackout"
    RESET = "reset"


@dataclass(frozen=True)
class GridState:
    """Explicit state container owned by the caller."""
    registry: AssetRegistry
    seed: Tuple[Asset, ...] = SEED_ASSETS
    history: Tuple[HistoryPoint, ...] = ()
    logs: Tuple[Event, ...] = field(default_factory=initial_log)
    advice: Advice = Advice(INITIAL_ADVICE)
    advice_pending: bool = False
    scenario: str = DEFAULT_CONTEXT

    @property
    def assets(self) -> Tuple[Asset, ...]:
        return self.registry.assets


def initial_state(seed: Tuple[Asset, ...] = SEED_ASSETS) -> GridState:
    """Build the process-start state from a seed fleet."""
    seed = tuple(seed)
    return GridState(registry=AssetRegistry(seed), seed=seed)


def parse_scenario(name: Union[str, Scenario]) -> Scenario:
    """Resolve a scenario name, raising ``ScenarioError`` if unknown."""
    if isinstance(name, Scenario):
        return name
    try:
        return Scenario(str(name).strip().lower())
    except ValueError:
        valid = ", ".join(s.value for s in Scenario)
        raise ScenarioError(f"Unknown scenario '{name}'. Must be one of: {valid}")


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def fluctuate(asset: Asset, rng: RandomSource, amplitude: float = FLUCTUATION_AMPLITUDE) -> Asset:
    """Drift one asset's output by a small random delta.

    The result is clamped to ``[0, capacity]``, so a charging battery loses
    its negative output on the first tick.
    """
    output = asset.current_output + rng.symmetric(amplitude)
    return replace(asset, current_output=clamp(output, 0.0, asset.capacity))


def append_history(
    history: Tuple[HistoryPoint, ...],
    point: HistoryPoint,
    limit: int = HISTORY_LIMIT
) -> Tuple[HistoryPoint, ...]:
    """Append a point, dropping the oldest entries beyond ``limit``."""
    return (tuple(history) + (point,))[-limit:]


def tick(
    state: GridState,
    rng: RandomSource,
    amplitude: float = FLUCTUATION_AMPLITUDE,
    history_limit: int = HISTORY_LIMIT,
    now: Optional[datetime] = None
) -> GridState:
    """Advance the grid by one randomized step and record a history point."""
    registry = state.registry.map_each(lambda asset: fluctuate(asset, rng, amplitude))
    generation, consumption, net = aggregate_load(registry)
    point = HistoryPoint(
        timestamp=now or datetime.now(),
        generation=generation,
        consumption=consumption,
        net=net
    )
    logger.debug(f"Tick: generation={generation}MW consumption={consumption}MW net={net}MW")
    return replace(
        state,
        registry=registry,
        history=append_history(state.history, point, history_limit)
    )


def _heatwave(asset: Asset) -> Asset:
    if asset.type == AssetType.SOLAR:
        return replace(asset, current_output=asset.capacity * 0.95)
    if asset.type == AssetType.BUILDING:
        return replace(asset, current_output=asset.capacity * 0.9)
    return asset


def _storm(asset: Asset) -> Asset:
    if asset.type == AssetType.WIND:
        return replace(asset, current_output=asset.capacity * 0.8, status=AssetStatus.WARNING)
    if asset.type == AssetType.SOLAR:
        return replace(asset, current_output=asset.capacity * 0.1)
    return asset


def _blackout(asset: Asset) -> Asset:
    if asset.type != AssetType.BATTERY:
        return replace(asset, current_output=0.0, status=AssetStatus.OFFLINE)
    return replace(asset, current_output=asset.capacity * 0.5)


SCENARIO_EFFECTS: Dict[Scenario, Callable[[Asset], Asset]] = {
    Scenario.HEATWAVE: _heatwave,
    Scenario.STORM: _storm,
    Scenario.BLACKOUT: _blackout,
}


def reset(
    state: GridState,
    log_limit: int = LOG_LIMIT,
    now: Optional[datetime] = None
) -> GridState:
    """Restore every asset to its seed values."""
    event = Event(EventType.GRID_RESET, "Grid reset to baseline.", timestamp=now or datetime.now())
    logger.info("Grid reset to baseline")
    return replace(
        state,
        registry=state.registry.replace(state.seed),
        logs=push_event(state.logs, event, log_limit),
        scenario=DEFAULT_CONTEXT
    )


def apply_scenario(
    state: GridState,
    scenario: Union[str, Scenario],
    log_limit: int = LOG_LIMIT,
    now: Optional[datetime] = None
) -> GridState:
    """Apply a named scenario to every asset.

    Effects set absolute targets derived from capacity, so applying the same
    scenario twice yields the same fleet as applying it once.
    """
    scenario = parse_scenario(scenario)
    if scenario == Scenario.RESET:
        return reset(state, log_limit=log_limit, now=now)

    event = Event(
        EventType.SCENARIO_APPLIED,
        f"Initiating {scenario.value} simulation...",
        timestamp=now or datetime.now(),
        details={"scenario": scenario.value}
    )
    logger.info(f"Applying scenario: {scenario.value}")
    return replace(
        state,
        registry=state.registry.map_each(SCENARIO_EFFECTS[scenario]),
        logs=push_event(state.logs, event, log_limit),
        scenario=scenario.value
    )


def record_event(state: GridState, event: Event, log_limit: int = LOG_LIMIT) -> GridState:
    """Add an event to the operator log."""
    return replace(state, logs=push_event(state.logs, event, log_limit))
