"""Infrastructure connectivity — proximity access to road, power and water.

A building is connected to a network when its own cell, or any cell within
that network's detection radius, carries the network's flag.  The result
drives a bright/dim/dark status and an efficiency multiplier that scales
tax revenue.

Power here is a pure proximity test.  The capacity-limited, line-of-sight
model lives in ``cityscape.systems.power``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cityscape.world.cell import ConnectivityResult, ConnectivityStatus, Infrastructure

if TYPE_CHECKING:
    from cityscape.buildings.building import Building
    from cityscape.world.grid import Grid

log = logging.getLogger(__name__)

ROAD_RADIUS = 1
POWER_RADIUS = 8
WATER_RADIUS = 6
POOR_EFFICIENCY = 0.5

DEFAULT_RADII: dict[Infrastructure, float] = {
    Infrastructure.ROAD: ROAD_RADIUS,
    Infrastructure.POWER: POWER_RADIUS,
    Infrastructure.WATER: WATER_RADIUS,
}

_RECOMMENDATIONS: dict[Infrastructure, str] = {
    Infrastructure.ROAD: "Add road access for better connectivity",
    Infrastructure.POWER: "Connect power lines for full operation",
    Infrastructure.WATER: "Install water pipes for complete infrastructure",
}


@dataclass
class ConnectivityStats:
    """City-wide connectivity summary.

    Coverage values are fractions of buildings in ``[0, 1]``.
    """

    total_buildings: int = 0
    fully_connected: int = 0
    partially_connected: int = 0
    poorly_connected: int = 0
    average_efficiency: float = 0.0
    road_coverage: float = 0.0
    power_coverage: float = 0.0
    water_coverage: float = 0.0


def has_network_access(
    grid: Grid,
    x: int,
    y: int,
    infra: Infrastructure,
    radius: float,
) -> bool:
    """True if ``(x, y)`` or any cell within ``radius`` carries ``infra``."""
    if grid.cell_at(x, y) is None:
        return False
    return any(cell.has(infra) for cell, _ in grid.cells_within(x, y, radius))


def has_road_connectivity(grid: Grid, x: int, y: int, radius: float = ROAD_RADIUS) -> bool:
    return has_network_access(grid, x, y, Infrastructure.ROAD, radius)


def power_proximity_connectivity(
    grid: Grid,
    x: int,
    y: int,
    radius: float = POWER_RADIUS,
) -> bool:
    """Whether a power line lies within reach of ``(x, y)``.

    Ignores plant capacity and line geometry entirely; see
    ``cityscape.systems.power.power_flow_connectivity`` for the flow view.
    """
    return has_network_access(grid, x, y, Infrastructure.POWER, radius)


def has_water_connectivity(
    grid: Grid,
    x: int,
    y: int,
    radius: float = WATER_RADIUS,
) -> bool:
    return has_network_access(grid, x, y, Infrastructure.WATER, radius)


def _basic_result(road: bool, power: bool, water: bool) -> ConnectivityResult:
    connected = sum((road, power, water))
    if connected == 3:
        return ConnectivityResult(road, power, water, ConnectivityStatus.BRIGHT, 1.0)
    if connected >= 2:
        return ConnectivityResult(road, power, water, ConnectivityStatus.DIM, 0.6)
    return ConnectivityResult(road, power, water, ConnectivityStatus.DARK, 0.3)


def cell_connectivity(
    grid: Grid,
    x: int,
    y: int,
    radii: dict[Infrastructure, float] | None = None,
) -> ConnectivityResult | None:
    """Score network access at ``(x, y)``.

    Cells anchoring a building are scored against the building's own
    requirements; other cells get a plain count-based score.

    Returns:
        The result, or None when ``(x, y)`` is out of bounds.
    """
    if grid.cell_at(x, y) is None:
        return None
    radii = radii or DEFAULT_RADII
    road = has_road_connectivity(grid, x, y, radii[Infrastructure.ROAD])
    power = power_proximity_connectivity(grid, x, y, radii[Infrastructure.POWER])
    water = has_water_connectivity(grid, x, y, radii[Infrastructure.WATER])

    building = grid.building_at(x, y)
    if building is None:
        return _basic_result(road, power, water)
    return ConnectivityResult(
        road=road,
        power=power,
        water=water,
        status=building.connectivity_status(road, power, water),
        efficiency=building.infrastructure_efficiency(road, power, water),
    )


def update_grid_connectivity(
    grid: Grid,
    radii: dict[Infrastructure, float] | None = None,
) -> None:
    """Annotate every building's anchor cell with its connectivity."""
    for cell in grid.iter_cells():
        if cell.building_id is None:
            cell.connectivity = None
            continue
        cell.connectivity = cell_connectivity(grid, cell.x, cell.y, radii)


def grid_connectivity_stats(
    grid: Grid,
    radii: dict[Infrastructure, float] | None = None,
) -> ConnectivityStats:
    """Summarise connectivity over every building in the grid."""
    stats = ConnectivityStats()
    total_efficiency = 0.0
    road = power = water = 0

    for building in grid.all_buildings():
        result = cell_connectivity(grid, building.x, building.y, radii)
        if result is None:
            continue
        stats.total_buildings += 1
        total_efficiency += result.efficiency
        road += result.road
        power += result.power
        water += result.water
        if result.status is ConnectivityStatus.BRIGHT:
            stats.fully_connected += 1
        elif result.status is ConnectivityStatus.DIM:
            stats.partially_connected += 1
        else:
            stats.poorly_connected += 1

    if stats.total_buildings:
        n = stats.total_buildings
        stats.average_efficiency = total_efficiency / n
        stats.road_coverage = road / n
        stats.power_coverage = power / n
        stats.water_coverage = water / n
    return stats


def find_poorly_connected(
    grid: Grid,
    radii: dict[Infrastructure, float] | None = None,
) -> list[tuple[Building, ConnectivityResult]]:
    """Buildings that are dark or run below half efficiency."""
    poor = []
    for building in grid.all_buildings():
        result = cell_connectivity(grid, building.x, building.y, radii)
        if result is None:
            continue
        if (
            result.status is ConnectivityStatus.DARK
            or result.efficiency < POOR_EFFICIENCY
        ):
            poor.append((building, result))
    return poor


def recommendations(grid: Grid, x: int, y: int) -> list[str]:
    """Suggestions for the networks ``(x, y)`` cannot reach."""
    result = cell_connectivity(grid, x, y)
    if result is None:
        return []
    missing = {
        Infrastructure.ROAD: not result.road,
        Infrastructure.POWER: not result.power,
        Infrastructure.WATER: not result.water,
    }
    return [_RECOMMENDATIONS[infra] for infra, gap in missing.items() if gap]


def is_infrastructure_connected(
    grid: Grid,
    x: int,
    y: int,
    infra: Infrastructure,
    radius: float | None = None,
) -> bool:
    """True if ``(x, y)`` carries ``infra`` and another such cell is in range."""
    cell = grid.cell_at(x, y)
    if cell is None or not cell.has(infra):
        return False
    reach = DEFAULT_RADII[infra] if radius is None else radius
    return any(
        other.has(infra)
        for other, _ in grid.cells_within(x, y, reach, include_centre=False)
    )
