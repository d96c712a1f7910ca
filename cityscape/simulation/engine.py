"""SimulationEngine — the main tick loop.

``run_tick`` advances a grid by one tick in the canonical order:

1. Advance the weather and draw this tick's growth permission
2. Recompute happiness and pollution for every zoned cell
3. Apply transport effects to building happiness
4. Apply weather effects
5. Grow and upgrade buildings
6. Route power from plants to consumers
7. Score infrastructure connectivity
8. Aggregate the economy

``SimulationEngine`` wraps it with the state a host keeps between ticks:
the grid, the weather, the treasury and the random generator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.random import Generator

from cityscape.simulation.config import SimulationConfig
from cityscape.simulation.snapshot import grid_from_snapshot, grid_to_snapshot
from cityscape.simulation.update import (
    ConnectivitySummary,
    Economics,
    PowerSummary,
    SimulationUpdate,
)
from cityscape.systems import economy
from cityscape.systems.connectivity import grid_connectivity_stats, update_grid_connectivity
from cityscape.systems.growth import simulate_growth
from cityscape.systems.happiness import cell_happiness, update_happiness_and_pollution
from cityscape.systems.power import calculate_power_distribution, update_grid_power_status
from cityscape.systems.transport import apply_transport_effects, transport_stats
from cityscape.world.grid import Grid
from cityscape.world.weather import (
    WeatherState,
    advance_weather,
    apply_weather_effects,
    forecast,
    growth_permitted,
)

if TYPE_CHECKING:
    from cityscape.buildings.catalog import BuildingKind
    from cityscape.world.cell import Infrastructure, ZoneType

log = logging.getLogger(__name__)


def run_tick(
    grid: Grid,
    weather: WeatherState,
    rng: Generator,
    config: SimulationConfig,
    *,
    money: int = 0,
) -> tuple[SimulationUpdate, WeatherState]:
    """Advance ``grid`` by one tick.

    Args:
        grid: The city grid, mutated in place.
        weather: Weather at the start of the tick.
        rng: Seeded random generator; the only source of randomness.
        config: Tuning for power and connectivity.
        money: Treasury balance before this tick's revenue.

    Returns:
        The tick's update record and the weather to pass into the next tick.
    """
    weather = advance_weather(weather, rng)
    growth_allowed = growth_permitted(weather, rng)

    update_happiness_and_pollution(grid)
    apply_transport_effects(grid)
    apply_weather_effects(grid, weather)

    growth = simulate_growth(grid, rng, growth_allowed)

    power_grid = calculate_power_distribution(
        grid,
        plant_capacity=config.plant_capacity,
        transmission_range=config.transmission_range,
        base_demand=config.base_power_demand,
        overload_threshold=config.overload_threshold,
    )
    update_grid_power_status(grid, power_grid)

    radii = config.connectivity_radii
    update_grid_connectivity(grid, radii)
    connectivity = grid_connectivity_stats(grid, radii)

    happiness = grid.average_happiness()
    pollution = grid.average_pollution()
    stats = economy.calculate_economic_stats(grid, happiness, pollution)

    update = SimulationUpdate(
        buildings=[b.to_record() for b in grid.all_buildings()],
        economics=Economics(
            money=money + stats.total_tax_revenue,
            population=stats.total_population,
            tax_revenue=stats.total_tax_revenue,
            employment_rate=stats.employment_rate,
        ),
        happiness=happiness,
        pollution=pollution,
        power_grid=PowerSummary.from_power_grid(power_grid),
        connectivity=ConnectivitySummary.from_stats(connectivity),
    )
    log.debug(
        "tick: weather=%s growth_allowed=%s spawned=%d upgraded=%d revenue=%d",
        weather.kind.value,
        growth_allowed,
        growth.spawned + growth.blocks_spawned,
        growth.upgraded,
        stats.total_tax_revenue,
    )
    return update, weather


@dataclass
class SimulationEngine:
    """Drives the simulation forward tick by tick.

    Attributes:
        config: Loaded simulation configuration.
        grid: The city grid.
        weather: Current weather, replaced every tick.
        money: Treasury balance.
        rng: Master seeded random generator.
        tick: Current tick count.
        last_update: Record returned by the most recent tick.
    """

    config: SimulationConfig
    grid: Grid = field(init=False)
    weather: WeatherState = field(init=False)
    money: int = field(init=False)
    rng: Generator = field(init=False)
    tick: int = 0
    last_update: SimulationUpdate | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        """Build the grid, weather, treasury and RNG from config."""
        self.rng = np.random.default_rng(self.config.seed)
        self.grid = Grid(width=self.config.grid_width, height=self.config.grid_height)
        self.weather = WeatherState(change_chance=self.config.weather_change_chance)
        self.money = self.config.starting_money

    # -- Placement -----------------------------------------------------------

    def _can_afford(self, cost: int) -> bool:
        return self.money >= cost

    def add_zone(self, x: int, y: int, zone: ZoneType) -> bool:
        """Zone a cell if the treasury can pay for it."""
        cost = economy.zone_cost(zone)
        if not self._can_afford(cost) or not self.grid.add_zone(x, y, zone):
            return False
        self.money -= cost
        return True

    def add_zone_block(self, x: int, y: int, zone: ZoneType) -> bool:
        """Zone the 2x2 block at ``(x, y)`` if the treasury can pay for it."""
        cost = economy.block_zone_cost(zone)
        if not self._can_afford(cost) or not self.grid.add_zone_block(x, y, zone):
            return False
        self.money -= cost
        return True

    def add_infrastructure(self, x: int, y: int, infra: Infrastructure) -> bool:
        cost = economy.infrastructure_cost(infra)
        if not self._can_afford(cost) or not self.grid.add_infrastructure(x, y, infra):
            return False
        self.money -= cost
        return True

    def place_building(self, x: int, y: int, kind: BuildingKind) -> bool:
        """Place a building of ``kind`` directly, paying its catalog price.

        Returns:
            False when the treasury is short or the cell cannot take it.
        """
        cost = economy.building_cost(kind)
        if not self._can_afford(cost) or self.grid.place_building(x, y, kind) is None:
            return False
        self.money -= cost
        return True

    def upgrade_building(self, x: int, y: int) -> bool:
        building = self.grid.building_at(x, y)
        return building is not None and building.upgrade()

    def zone_happiness(self, x: int, y: int) -> float:
        """Happiness the model would give the cell at ``(x, y)`` right now."""
        cell = self.grid.cell_at(x, y)
        if cell is None or cell.zone is None:
            return 0.0
        return cell_happiness(self.grid, cell)

    # -- Ticking -------------------------------------------------------------

    def step(self) -> SimulationUpdate:
        """Advance the simulation by one tick and credit tax revenue."""
        update, self.weather = run_tick(
            self.grid,
            self.weather,
            self.rng,
            self.config,
            money=self.money,
        )
        self.money = update.economics.money
        self.last_update = update
        self.tick += 1
        return update

    def run(self, ticks: int) -> SimulationUpdate | None:
        """Run the simulation for a fixed number of ticks.

        Args:
            ticks: Number of ticks to advance.

        Returns:
            The last tick's update, or None when ``ticks`` is 0.
        """
        update = None
        for _ in range(ticks):
            update = self.step()
        return update

    def simulate(self, snapshot: list[list[dict[str, Any]]] | None = None) -> SimulationUpdate:
        """Optionally load ``snapshot`` into the engine, then run one tick."""
        if snapshot is not None:
            self.load_snapshot(snapshot)
        return self.step()

    def load_snapshot(self, snapshot: list[list[dict[str, Any]]]) -> None:
        self.grid = grid_from_snapshot(snapshot)

    def snapshot(self) -> list[list[dict[str, Any]]]:
        return grid_to_snapshot(self.grid)

    # -- Reporting -----------------------------------------------------------

    def statistics(self) -> dict[str, Any]:
        """City-wide figures for status displays.

        The weather forecast draws from its own generator so that reporting
        never shifts the simulation's random stream.
        """
        happiness = self.grid.average_happiness()
        pollution = self.grid.average_pollution()
        stats = economy.calculate_economic_stats(self.grid, happiness, pollution)
        transport = transport_stats(self.grid)
        forecast_rng = np.random.default_rng([self.config.seed, self.tick])
        return {
            **stats.to_dict(),
            "total_money": self.money,
            "average_happiness": happiness,
            "average_pollution": pollution,
            "weather": {
                "kind": self.weather.kind.value,
                "remaining": self.weather.remaining,
                "description": self.weather.effect.description,
                "is_severe": self.weather.is_severe,
                "forecast": [k.value for k in forecast(self.weather, forecast_rng)],
            },
            "transport": {
                "average_connectivity": transport.average_connectivity,
                "well_connected_zones": transport.well_connected_zones,
                "isolated_zones": transport.isolated_zones,
                "total_infrastructure": transport.total_infrastructure,
                "transport_efficiency": transport.transport_efficiency,
            },
        }
