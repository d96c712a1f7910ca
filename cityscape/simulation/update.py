"""SimulationUpdate — the record a tick hands back to its host.

Field names are snake_case in Python; ``to_dict`` produces the camelCase
shape that snapshot consumers expect.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cityscape.systems.connectivity import ConnectivityStats
    from cityscape.systems.power import PowerGrid


@dataclass
class Economics:
    money: int = 0
    population: int = 0
    tax_revenue: int = 0
    employment_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "money": self.money,
            "population": self.population,
            "taxRevenue": self.tax_revenue,
            "employmentRate": self.employment_rate,
        }


@dataclass
class PowerSummary:
    """Headline figures from the power-flow pass.

    Attributes:
        total_capacity: Summed plant output.
        total_demand: Summed consumer demand.
        efficiency: Load factor, capped at 1.
        is_overloaded: Load factor is above the overload threshold.
        shortage_areas: Consumers left without power.
    """

    total_capacity: float = 0.0
    total_demand: float = 0.0
    efficiency: float = 0.0
    is_overloaded: bool = False
    shortage_areas: int = 0

    @classmethod
    def from_power_grid(cls, power_grid: PowerGrid) -> PowerSummary:
        return cls(
            total_capacity=power_grid.total_capacity,
            total_demand=power_grid.total_demand,
            efficiency=power_grid.efficiency,
            is_overloaded=power_grid.is_overloaded,
            shortage_areas=len(power_grid.shortage_nodes()),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalCapacity": self.total_capacity,
            "totalDemand": self.total_demand,
            "efficiency": self.efficiency,
            "isOverloaded": self.is_overloaded,
            "shortageAreas": self.shortage_areas,
        }


@dataclass
class ConnectivitySummary:
    total_buildings: int = 0
    fully_connected: int = 0
    partially_connected: int = 0
    poorly_connected: int = 0
    average_efficiency: float = 0.0
    road_coverage: float = 0.0
    power_coverage: float = 0.0
    water_coverage: float = 0.0

    @classmethod
    def from_stats(cls, stats: ConnectivityStats) -> ConnectivitySummary:
        return cls(
            total_buildings=stats.total_buildings,
            fully_connected=stats.fully_connected,
            partially_connected=stats.partially_connected,
            poorly_connected=stats.poorly_connected,
            average_efficiency=stats.average_efficiency,
            road_coverage=stats.road_coverage,
            power_coverage=stats.power_coverage,
            water_coverage=stats.water_coverage,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalBuildings": self.total_buildings,
            "fullyConnected": self.fully_connected,
            "partiallyConnected": self.partially_connected,
            "poorlyConnected": self.poorly_connected,
            "averageEfficiency": self.average_efficiency,
            "roadCoverage": self.road_coverage,
            "powerCoverage": self.power_coverage,
            "waterCoverage": self.water_coverage,
        }


@dataclass
class SimulationUpdate:
    """Everything a tick reports.

    Attributes:
        buildings: BuildingRecords in row-major order of their anchors.
        economics: Treasury, population, revenue and employment.
        happiness: Mean happiness over zoned cells, 0 when none.
        pollution: Mean pollution over zoned cells, 0 when none.
        power_grid: Power-flow summary.
        connectivity: Connectivity summary.
    """

    buildings: list[dict[str, Any]] = field(default_factory=list)
    economics: Economics = field(default_factory=Economics)
    happiness: float = 0.0
    pollution: float = 0.0
    power_grid: PowerSummary = field(default_factory=PowerSummary)
    connectivity: ConnectivitySummary = field(default_factory=ConnectivitySummary)

    def to_dict(self) -> dict[str, Any]:
        return {
            "buildings": list(self.buildings),
            "economics": self.economics.to_dict(),
            "happiness": self.happiness,
            "pollution": self.pollution,
            "powerGrid": self.power_grid.to_dict(),
            "connectivity": self.connectivity.to_dict(),
        }
