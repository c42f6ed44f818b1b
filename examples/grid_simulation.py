"""
SparkGrid grid simulation example.
This example demonstrates:
- Building a plant with a deterministic random source
- Driving ticks manually and reading the load history
- Triggering scenarios and reading advisory text
"""

from sparkgrid import VirtualPowerPlant, SparkGridConfig
from sparkgrid.advisory import AdvisoryService, GeminiAdvisoryClient, StaticAdvisoryClient
from sparkgrid.config import AdvisoryConfig, SimulationConfig
from sparkgrid.randomness import NumpyRandomSource
from sparkgrid.scheduler import ManualTickSource


def print_stats(vpp: VirtualPowerPlant) -> None:
    stats = vpp.get_stats()
    band = "OK" if stats.frequency_in_band else "DEVIATION"
    print(
        f"  Gen {stats.total_generation:6.1f} MW | "
        f"Demand {stats.total_consumption:6.1f} MW | "
        f"Net {stats.net_load:+6.1f} MW | "
        f"{stats.grid_frequency:.3f} Hz ({band}) | "
        f"Storage {stats.storage_level:.0f}%"
    )


def print_assets(vpp: VirtualPowerPlant) -> None:
    for asset in vpp.assets:
        print(
            f"  {asset.name:<20} {asset.type.value:<10} "
            f"{asset.current_output:6.1f} / {asset.capacity:5.1f} MW  {asset.status.value.upper()}"
        )


def main():
    config = SparkGridConfig(
        name="SparkGrid Example",
        simulation=SimulationConfig(random_seed=42),
        advisory=AdvisoryConfig(background=False)
    )

    # Use the live model when an API key is configured
    client = GeminiAdvisoryClient(api_key_env=config.advisory.api_key_env)
    if not client.is_available():
        client = StaticAdvisoryClient("Shift EV charging off-peak and hold battery reserve.")

    ticks = ManualTickSource()
    vpp = VirtualPowerPlant(
        config,
        rng=NumpyRandomSource(config.simulation.random_seed),
        advisory=AdvisoryService(client),
        tick_source=ticks
    )
    vpp.start()

    print("=== Baseline ===")
    print_assets(vpp)
    print_stats(vpp)

    ticks.fire(10)
    print("\n=== After 10 ticks ===")
    print_stats(vpp)
    for point in vpp.history[-3:]:
        print(f"  {point.label}  gen={point.generation}  cons={point.consumption}  net={point.net}")

    for scenario in ("heatwave", "storm", "blackout"):
        vpp.run_scenario(scenario)
        print(f"\n=== Scenario: {scenario} ===")
        print_assets(vpp)
        print_stats(vpp)
        print(f"  Advice: {vpp.advice.text}")

    vpp.reset()
    print("\n=== Reset ===")
    print_stats(vpp)

    print("\n=== Operator log ===")
    for event in vpp.logs:
        print(f"  [{event.timestamp:%H:%M}] {event.message}")

    vpp.stop()


if __name__ == "__main__":
    main()
