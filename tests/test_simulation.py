"""
Test suite for the grid simulation engine.

Covers:
- Asset registry construction and validation
- Tick fluctuation, clamping and the bounded history
- Scenario transformations, idempotence and reset
"""

import sys
from pathlib import Path
import unittest
from dataclasses import replace
from datetime import datetime, timedelta

# Add the src directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sparkgrid.assets import AssetRegistry, SEED_ASSETS
from sparkgrid.exceptions import (
    AssetNotFoundError, ScenarioError, ValidationError, ValidationRangeError
)
from sparkgrid.models import Asset, AssetType, AssetStatus
from sparkgrid.randomness import SequenceRandomSource, NumpyRandomSource
from sparkgrid.simulation import (
    Scenario, initial_state, tick, apply_scenario, reset, parse_scenario,
    fluctuate, append_history, HISTORY_LIMIT
)


class TestAssetRegistry(unittest.TestCase):
    """Tests for the asset registry."""

    def setUp(self):
        self.registry = AssetRegistry()

    def test_seed_fleet(self):
        """Seed fleet holds one asset of every type."""
        self.assertEqual(len(self.registry), 6)
        self.assertEqual({a.type for a in self.registry}, set(AssetType))
        self.assertEqual([a.id for a in self.registry], ["1", "2", "3", "4", "5", "6"])
        self.assertEqual(self.registry.online_count, 6)
        self.assertEqual(self.registry.total_capacity, 320)

    def test_get(self):
        self.assertEqual(self.registry.get("3").name, "Central Battery B1")
        with self.assertRaises(AssetNotFoundError):
            self.registry.get("99")

    def test_map_each_returns_new_registry(self):
        """map_each never mutates the source registry."""
        zeroed = self.registry.map_each(lambda a: replace(a, current_output=0.0))
        self.assertIsNot(zeroed, self.registry)
        self.assertTrue(all(a.current_output == 0.0 for a in zeroed))
        self.assertEqual(self.registry.get("1").current_output, 35)

    def test_replace(self):
        subset = self.registry.replace(SEED_ASSETS[:2])
        self.assertEqual(len(subset), 2)
        self.assertEqual(len(self.registry), 6)

    def test_duplicate_ids_rejected(self):
        with self.assertRaises(ValidationError):
            AssetRegistry([SEED_ASSETS[0], SEED_ASSETS[0]])

    def test_invalid_records_rejected(self):
        too_far = replace(SEED_ASSETS[0], x=120)
        with self.assertRaises(ValidationRangeError):
            AssetRegistry([too_far])

        overloaded = replace(SEED_ASSETS[0], current_output=60)
        with self.assertRaises(ValidationRangeError):
            AssetRegistry([overloaded])

        negative = replace(SEED_ASSETS[0], capacity=-1, current_output=0)
        with self.assertRaises(ValidationRangeError):
            AssetRegistry([negative])

    def test_charging_battery_is_valid_seed(self):
        """Negative battery output within capacity is accepted."""
        battery = self.registry.get("3")
        self.assertEqual(battery.current_output, -10)

    def test_asset_dict_round_trip(self):
        asset = SEED_ASSETS[5]
        data = asset.to_dict()
        self.assertEqual(data["type"], "ev-station")
        self.assertEqual(Asset.from_dict(data), asset)


class TestTick(unittest.TestCase):
    """Tests for the periodic fluctuation step."""

    def setUp(self):
        self.state = initial_state()
        self.start = datetime(2024, 6, 1, 12, 0, 0)

    def test_fluctuate_delta(self):
        solar = SEED_ASSETS[0]
        up = fluctuate(solar, SequenceRandomSource([0.75]))
        self.assertAlmostEqual(up.current_output, 35.5)
        down = fluctuate(solar, SequenceRandomSource([0.25]))
        self.assertAlmostEqual(down.current_output, 34.5)

    def test_fluctuate_clamps_to_capacity(self):
        full = replace(SEED_ASSETS[0], current_output=50)
        self.assertEqual(fluctuate(full, SequenceRandomSource([0.99])).current_output, 50)

        empty = replace(SEED_ASSETS[0], current_output=0.2)
        self.assertEqual(fluctuate(empty, SequenceRandomSource([0.0])).current_output, 0.0)

    def test_battery_loses_charging_state(self):
        """Clamp to zero discards the negative charging output."""
        state = tick(self.state, SequenceRandomSource([0.5]), now=self.start)
        battery = state.registry.get("3")
        self.assertEqual(battery.current_output, 0.0)

    def test_clamp_invariant_holds(self):
        """Outputs stay within [0, capacity] for every asset and tick."""
        for draws in ([0.0], [0.999], [0.1, 0.9, 0.5, 0.3]):
            state = self.state
            rng = SequenceRandomSource(draws)
            for _ in range(120):
                state = tick(state, rng, amplitude=3.0, now=self.start)
                for asset in state.assets:
                    self.assertGreaterEqual(asset.current_output, 0.0)
                    self.assertLessEqual(asset.current_output, asset.capacity)

    def test_clamp_invariant_with_numpy_source(self):
        state = self.state
        rng = NumpyRandomSource(seed=7)
        for _ in range(200):
            state = tick(state, rng, now=self.start)
        for asset in state.assets:
            self.assertTrue(0.0 <= asset.current_output <= asset.capacity)

    def test_history_point_uses_post_tick_fleet(self):
        state = tick(self.state, SequenceRandomSource([0.5]), now=self.start)
        self.assertEqual(len(state.history), 1)
        point = state.history[0]
        # Battery no longer charging after the clamp
        self.assertEqual(point.generation, 77.0)
        self.assertEqual(point.consumption, 122.0)
        self.assertEqual(point.net, 45.0)
        self.assertEqual(point.label, "12:00:00")

    def test_history_is_bounded(self):
        """After more than 20 ticks only the latest 20 remain, in order."""
        state = self.state
        rng = SequenceRandomSource([0.5])
        stamps = [self.start + timedelta(seconds=3 * i) for i in range(27)]
        for stamp in stamps:
            state = tick(state, rng, now=stamp)
            self.assertLessEqual(len(state.history), HISTORY_LIMIT)

        self.assertEqual(len(state.history), 20)
        self.assertEqual([p.timestamp for p in state.history], stamps[-20:])

    def test_append_history_custom_limit(self):
        state = self.state
        rng = SequenceRandomSource([0.5])
        for i in range(5):
            state = tick(state, rng, history_limit=3, now=self.start + timedelta(seconds=i))
        self.assertEqual(len(state.history), 3)
        self.assertEqual(append_history((), state.history[0], limit=3), (state.history[0],))

    def test_tick_does_not_mutate_input(self):
        before = self.state
        tick(before, SequenceRandomSource([0.9]), now=self.start)
        self.assertEqual(before.registry.assets, SEED_ASSETS)
        self.assertEqual(before.history, ())


class TestScenarios(unittest.TestCase):
    """Tests for scenario transformations."""

    def setUp(self):
        self.state = initial_state()

    def test_heatwave(self):
        state = apply_scenario(self.state, "heatwave")
        solar = state.registry.get("1")
        self.assertEqual(solar.current_output, 47.5)
        self.assertEqual(solar.status, AssetStatus.ACTIVE)
        self.assertAlmostEqual(state.registry.get("4").current_output, 27.0)
        # Untouched types pass through
        self.assertEqual(state.registry.get("2"), SEED_ASSETS[1])
        self.assertEqual(state.registry.get("5"), SEED_ASSETS[4])

    def test_storm(self):
        state = apply_scenario(self.state, Scenario.STORM)
        wind = state.registry.get("2")
        self.assertEqual(wind.current_output, 64)
        self.assertEqual(wind.status, AssetStatus.WARNING)
        self.assertAlmostEqual(state.registry.get("1").current_output, 5.0)
        self.assertEqual(state.registry.get("1").status, AssetStatus.ACTIVE)
        self.assertEqual(state.registry.get("3"), SEED_ASSETS[2])

    def test_blackout(self):
        state = apply_scenario(self.state, "blackout")
        for asset in state.assets:
            if asset.type == AssetType.BATTERY:
                self.assertEqual(asset.current_output, asset.capacity * 0.5)
                self.assertEqual(asset.status, AssetStatus.ACTIVE)
            else:
                self.assertEqual(asset.current_output, 0)
                self.assertEqual(asset.status, AssetStatus.OFFLINE)
        self.assertEqual(state.registry.online_count, 1)

    def test_scenarios_are_idempotent(self):
        for scenario in ("heatwave", "storm", "blackout"):
            once = apply_scenario(self.state, scenario)
            twice = apply_scenario(once, scenario)
            self.assertEqual(once.registry, twice.registry)

    def test_reset_restores_seed(self):
        """Reset after any mix of ticks and scenarios restores the seed exactly."""
        state = self.state
        rng = NumpyRandomSource(seed=3)
        for scenario in ("storm", "heatwave", "blackout"):
            for _ in range(4):
                state = tick(state, rng)
            state = apply_scenario(state, scenario)

        restored = apply_scenario(state, "reset")
        self.assertEqual(restored.registry.assets, SEED_ASSETS)
        self.assertEqual(restored.scenario, "general")
        # History survives a reset
        self.assertEqual(len(restored.history), 12)

        self.assertEqual(reset(state).registry.assets, SEED_ASSETS)

    def test_scenario_logging(self):
        state = apply_scenario(self.state, "storm")
        self.assertEqual(state.logs[0].message, "Initiating storm simulation...")
        self.assertEqual(state.scenario, "storm")

        state = apply_scenario(state, "reset")
        self.assertEqual(state.logs[0].message, "Grid reset to baseline.")

    def test_log_is_bounded_newest_first(self):
        state = self.state
        self.assertEqual(
            [e.message for e in state.logs],
            ["Grid initialized...", "VPP systems operational."]
        )
        for _ in range(8):
            state = apply_scenario(state, "heatwave")
        state = apply_scenario(state, "blackout")
        self.assertEqual(len(state.logs), 10)
        self.assertEqual(state.logs[0].message, "Initiating blackout simulation...")
        self.assertEqual(state.logs[-1].message, "Grid initialized...")

    def test_unknown_scenario(self):
        with self.assertRaises(ScenarioError):
            apply_scenario(self.state, "earthquake")

    def test_parse_scenario(self):
        self.assertEqual(parse_scenario(" Storm "), Scenario.STORM)
        self.assertIs(parse_scenario(Scenario.RESET), Scenario.RESET)


if __name__ == "__main__":
    unittest.main()
