"""Economy — city-wide money figures derived from the building table.

Everything here is a pure aggregate over the current grid.  The treasury
itself is owned by the simulation engine, which credits each tick's tax
revenue and debits placement costs from the tables below.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from cityscape.buildings.catalog import BuildingKind, BuildingSize, profile_for
from cityscape.world.cell import Infrastructure, ZoneType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cityscape.buildings.building import Building
    from cityscape.world.grid import Grid

TAX_RATES: dict[ZoneType, float] = {
    ZoneType.RESIDENTIAL: 0.05,
    ZoneType.COMMERCIAL: 0.08,
    ZoneType.INDUSTRIAL: 0.06,
}

SIZE_MULTIPLIERS: dict[BuildingSize, float] = {
    BuildingSize.SMALL: 1.0,
    BuildingSize.MEDIUM: 2.5,
    BuildingSize.LARGE: 5.0,
    BuildingSize.BLOCK_2X2: 6.0,
}

# Construction value of each flag; a tenth of it is charged as upkeep.
INFRASTRUCTURE_VALUES: dict[Infrastructure, int] = {
    Infrastructure.ROAD: 50,
    Infrastructure.POWER: 100,
    Infrastructure.WATER: 75,
}
INFRASTRUCTURE_UPKEEP_RATE = 0.1

# Placement prices charged by the engine.
ZONE_COSTS: dict[ZoneType, int] = {
    ZoneType.RESIDENTIAL: 100,
    ZoneType.COMMERCIAL: 150,
    ZoneType.INDUSTRIAL: 200,
}
BLOCK_ZONE_COSTS: dict[ZoneType, int] = {
    ZoneType.RESIDENTIAL: 400,
    ZoneType.COMMERCIAL: 600,
    ZoneType.INDUSTRIAL: 800,
}
INFRASTRUCTURE_COSTS: dict[Infrastructure, int] = {
    Infrastructure.ROAD: 10,
    Infrastructure.POWER: 20,
    Infrastructure.WATER: 15,
}

UNPLACED_EFFICIENCY = 0.5
INCOME_TO_TAX_RATIO = 20


@dataclass
class EconomicStats:
    """Aggregate economic indicators for one tick.

    Attributes:
        total_population: Residents across all buildings.
        total_tax_revenue: Tax collected this tick.
        employment_rate: Jobs per resident as a percentage, capped at 100.
        average_income: Per-capita income implied by the tax take.
        city_rating: Overall score in ``[0, 100]``.
        maintenance_costs: Summed building upkeep.
        infrastructure_costs: Upkeep on every utility flag in the grid.
    """

    total_population: int = 0
    total_tax_revenue: int = 0
    employment_rate: float = 0.0
    average_income: int = 0
    city_rating: int = 0
    maintenance_costs: int = 0
    infrastructure_costs: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def base_income(building: Building) -> float:
    """Gross income a building generates before tax."""
    zone = building.zone
    if zone is ZoneType.RESIDENTIAL:
        return building.population * 100.0
    if zone is ZoneType.COMMERCIAL:
        return building.jobs * 200.0
    if zone is ZoneType.INDUSTRIAL:
        return building.jobs * 150.0
    return 0.0


def building_efficiency(building: Building, grid: Grid) -> float:
    """Infrastructure efficiency of ``building`` as seen from its anchor cell.

    Uses the last connectivity annotation when present and falls back to
    the anchor cell's own flags.  A building the grid does not hold runs
    at half efficiency.
    """
    cell = grid.cell_at(building.x, building.y)
    if cell is None or cell.building_id != building.id:
        return UNPLACED_EFFICIENCY
    if cell.connectivity is not None:
        return cell.connectivity.efficiency
    return building.infrastructure_efficiency(
        cell.has(Infrastructure.ROAD),
        cell.has_power or cell.has(Infrastructure.POWER),
        cell.has(Infrastructure.WATER),
    )


def tax_revenue(buildings: Iterable[Building], grid: Grid | None = None) -> int:
    """Total tax collected, floored.

    Args:
        buildings: Buildings to tax.
        grid: When given, each building's take is scaled by its
            infrastructure efficiency.

    Returns:
        Integer revenue.
    """
    total = 0.0
    for building in buildings:
        zone = building.zone
        if zone is None:
            continue
        revenue = base_income(building) * TAX_RATES[zone] * SIZE_MULTIPLIERS[building.size]
        if grid is not None:
            revenue *= building_efficiency(building, grid)
        total += revenue
    return math.floor(total)


def total_population(buildings: Iterable[Building]) -> int:
    return sum(b.population for b in buildings)


def employment_rate(buildings: Iterable[Building]) -> float:
    buildings = list(buildings)
    population = total_population(buildings)
    if population == 0:
        return 0.0
    jobs = sum(b.jobs for b in buildings)
    return min(100.0, jobs / population * 100.0)


def average_income(buildings: Iterable[Building], revenue: int | None = None) -> int:
    """Per-capita income, assuming tax is a twentieth of gross income."""
    buildings = list(buildings)
    population = total_population(buildings)
    if population == 0:
        return 0
    if revenue is None:
        revenue = tax_revenue(buildings)
    return math.floor(revenue * INCOME_TO_TAX_RATIO / population)


def maintenance_costs(buildings: Iterable[Building]) -> int:
    return math.floor(sum(b.maintenance_cost() for b in buildings))


def infrastructure_costs(grid: Grid) -> int:
    """Yearly upkeep on every utility flag, a tenth of construction value."""
    total = 0
    for cell in grid.iter_cells():
        total += sum(INFRASTRUCTURE_VALUES[infra] for infra in cell.infrastructure)
    return math.floor(total * INFRASTRUCTURE_UPKEEP_RATE)


def city_rating(
    buildings: Iterable[Building],
    average_happiness: float,
    employment: float,
    pollution: float,
) -> int:
    """Overall city score.

    Starts at 50 and moves with population, happiness, employment,
    pollution and building count.  Floored and clamped to ``[0, 100]``.
    """
    buildings = list(buildings)
    rating = 50.0
    rating += min(20.0, total_population(buildings) / 100.0)
    rating += (average_happiness - 50.0) * 0.3
    rating += (employment - 50.0) * 0.2
    rating -= pollution * 0.5
    rating += min(10.0, len(buildings) / 10.0)
    return max(0, min(100, math.floor(rating)))


def calculate_economic_stats(
    grid: Grid,
    average_happiness: float,
    average_pollution: float,
    *,
    use_efficiency: bool = True,
) -> EconomicStats:
    """Compute every economic indicator for the current grid.

    Args:
        grid: The city grid (read only).
        average_happiness: Mean happiness over zoned cells.
        average_pollution: Mean pollution over zoned cells.
        use_efficiency: Scale tax revenue by infrastructure efficiency.

    Returns:
        The populated EconomicStats.
    """
    buildings = grid.all_buildings()
    revenue = tax_revenue(buildings, grid if use_efficiency else None)
    employment = employment_rate(buildings)
    return EconomicStats(
        total_population=total_population(buildings),
        total_tax_revenue=revenue,
        employment_rate=employment,
        average_income=average_income(buildings, revenue),
        city_rating=city_rating(buildings, average_happiness, employment, average_pollution),
        maintenance_costs=maintenance_costs(buildings),
        infrastructure_costs=infrastructure_costs(grid),
    )


def zone_cost(zone: ZoneType) -> int:
    return ZONE_COSTS[zone]


def block_zone_cost(zone: ZoneType) -> int:
    return BLOCK_ZONE_COSTS[zone]


def infrastructure_cost(infra: Infrastructure) -> int:
    return INFRASTRUCTURE_COSTS[infra]


def building_cost(kind: BuildingKind) -> int:
    """Price of placing ``kind`` directly."""
    return profile_for(kind).base_cost
