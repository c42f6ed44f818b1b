"""Core SparkGrid virtual power plant implementation."""

from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
import logging
import threading

from .advisory import AdvisoryService, GeminiAdvisoryClient
from .config import SparkGridConfig
from .events import Event, EventType
from .exceptions import ConfigurationError, ValidationError
from .models import Advice, AdvisoryRequest, Asset, GridStats, HistoryPoint
from .randomness import RandomSource, NumpyRandomSource
from .scheduler import TickSource, IntervalTickSource
from .simulation import (
    DEFAULT_CONTEXT, GridState, Scenario, initial_state, tick, apply_scenario, reset, record_event
)
from .stats import compute_stats


class VirtualPowerPlant:
    """Owns the grid state and serializes every transition on it.

    All writes go through a single lock and replace the whole ``GridState``,
    so readers on other threads always see a complete snapshot.
    """

    def __init__(
        self,
        config: Optional[SparkGridConfig] = None,
        rng: Optional[RandomSource] = None,
        advisory: Optional[AdvisoryService] = None,
        tick_source: Optional[TickSource] = None
    ):
        """Initialize the plant from configuration."""
        self.config = config or SparkGridConfig()
        self.config.ensure_valid()
        self.logger = logging.getLogger("sparkgrid.core")

        sim = self.config.simulation
        self.rng = rng or NumpyRandomSource(sim.random_seed)
        self.advisory = advisory or AdvisoryService(
            GeminiAdvisoryClient(
                model=self.config.advisory.model,
                api_key_env=self.config.advisory.api_key_env,
                endpoint=self.config.advisory.endpoint,
                timeout=self.config.advisory.timeout_seconds
            )
        )
        self.tick_source = tick_source or IntervalTickSource(sim.tick_interval_seconds)

        self._lock = threading.RLock()
        try:
            self._state = initial_state(self.config.seed_assets())
        except (ValueError, ValidationError) as e:
            raise ConfigurationError(f"Invalid seed assets: {e}") from e
        self._pending_advice = 0
        self._advice_threads: List[threading.Thread] = []

    @classmethod
    def from_config_file(cls, path: Union[str, Path], **kwargs) -> 'VirtualPowerPlant':
        """Build a plant from a YAML or JSON configuration file."""
        return cls(SparkGridConfig.load_from_file(path), **kwargs)

    # ---- Read-only views ----

    @property
    def state(self) -> GridState:
        with self._lock:
            return self._state

    @property
    def assets(self) -> Tuple[Asset, ...]:
        return self.state.assets

    @property
    def history(self) -> Tuple[HistoryPoint, ...]:
        return self.state.history

    @property
    def logs(self) -> Tuple[Event, ...]:
        return self.state.logs

    @property
    def advice(self) -> Advice:
        return self.state.advice

    @property
    def total_capacity(self) -> float:
        """Get total capacity of all assets."""
        return self.state.registry.total_capacity

    def get_stats(self) -> GridStats:
        """Compute fresh statistics for the current fleet."""
        sim = self.config.simulation
        return compute_stats(
            self.assets,
            self.rng,
            storage_level=sim.storage_level,
            nominal_frequency=sim.nominal_frequency,
            frequency_jitter=sim.frequency_jitter,
            frequency_band=sim.frequency_band
        )

    # ---- Transitions ----

    def _transition(self, step: Callable[[GridState], GridState]) -> GridState:
        with self._lock:
            self._state = step(self._state)
            return self._state

    def tick(self) -> GridState:
        """Advance the simulation by one step."""
        sim = self.config.simulation
        return self._transition(lambda state: tick(
            state,
            self.rng,
            amplitude=sim.fluctuation_amplitude,
            history_limit=sim.history_limit
        ))

    def run_scenario(self, scenario: Union[str, Scenario]) -> GridState:
        """Apply a named scenario and, if configured, ask for advice about it."""
        log_limit = self.config.simulation.log_limit
        state = self._transition(lambda s: apply_scenario(s, scenario, log_limit=log_limit))

        advisory = self.config.advisory
        if advisory.enabled and advisory.request_on_scenario and state.scenario != DEFAULT_CONTEXT:
            self.request_advice(state.scenario)
        return state

    def reset(self) -> GridState:
        """Restore the fleet to its seed values."""
        log_limit = self.config.simulation.log_limit
        return self._transition(lambda state: reset(state, log_limit=log_limit))

    def inspect_asset(self, asset_id: str) -> Asset:
        """Look up an asset and note the inspection in the operator log."""
        log_limit = self.config.simulation.log_limit
        with self._lock:
            asset = self._state.registry.get(asset_id)
            event = Event(
                EventType.ASSET_INSPECTED,
                f"Inspecting {asset.name}: {asset.current_output} MW",
                asset_id=asset.id
            )
            self._state = record_event(self._state, event, log_limit)
        return asset

    # ---- Advisory ----

    def request_advice(
        self,
        context: Optional[str] = None,
        background: Optional[bool] = None
    ) -> Optional[threading.Thread]:
        """Submit the current grid summary to the advisory service.

        The summary is captured now; the response only replaces the advice,
        however many ticks have passed in the meantime. Returns the worker
        thread when running in the background. Without a context the
        request is tagged "general", whatever scenario was applied last.
        """
        if not self.config.advisory.enabled:
            self.logger.debug("Advisory disabled, skipping request")
            return None

        with self._lock:
            stats = self.get_stats()
            request = AdvisoryRequest.from_stats(stats, context or DEFAULT_CONTEXT)
            self._pending_advice += 1
            self._state = replace(self._state, advice_pending=True)

        self.logger.info(f"Requesting advice for scenario '{request.scenario}'")

        if background is None:
            background = self.config.advisory.background
        if not background:
            self._deliver_advice(request)
            return None

        thread = threading.Thread(
            target=self._deliver_advice, args=(request,), name="sparkgrid-advisory", daemon=True
        )
        with self._lock:
            self._advice_threads = [t for t in self._advice_threads if t.is_alive()]
            self._advice_threads.append(thread)
        thread.start()
        return thread

    def _deliver_advice(self, request: AdvisoryRequest) -> None:
        advice = self.advisory.get_advice(request)
        with self._lock:
            self._pending_advice = max(0, self._pending_advice - 1)
            self._state = replace(
                self._state, advice=advice, advice_pending=self._pending_advice > 0
            )

    def wait_for_advice(self, timeout: Optional[float] = None) -> bool:
        """Block until in-flight advisory requests finish. Returns True if none remain."""
        with self._lock:
            threads = list(self._advice_threads)
        for thread in threads:
            thread.join(timeout)
        with self._lock:
            self._advice_threads = [t for t in self._advice_threads if t.is_alive()]
            return not self._advice_threads

    # ---- Scheduling ----

    def start(self) -> None:
        """Start periodic ticking."""
        self.tick_source.start(self.tick)
        self.logger.info(f"{self.config.name} started")

    def stop(self) -> None:
        """Stop periodic ticking."""
        self.tick_source.stop()
        self.logger.info(f"{self.config.name} stopped")

    def __enter__(self) -> 'VirtualPowerPlant':
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # ---- Rendering boundary ----

    def snapshot(self) -> Dict[str, Any]:
        """Plain-dict view of the current state for renderers."""
        with self._lock:
            state = self._state
            stats = self.get_stats()
        return {
            "timestamp": datetime.now().isoformat(),
            "assets": state.registry.to_list(),
            "assets_online": state.registry.online_count,
            "stats": stats.to_dict(),
            "history": [point.to_dict() for point in state.history],
            "logs": [event.to_dict() for event in state.logs],
            "advice": state.advice.to_dict(),
            "advice_pending": state.advice_pending,
            "scenario": state.scenario
        }
