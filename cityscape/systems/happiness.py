"""Happiness and pollution model.

Every zoned cell gets a happiness score and a pollution level each tick.
Happiness starts from a base value and is pushed up or down by utility
coverage, local industrial pollution, neighbouring density, nearby jobs
(residential only) and civic buildings in range.  Pollution is computed
independently from the cell's own building and nearby industry.

All neighbourhood sums use Euclidean distance over a bounding-box scan.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from cityscape.buildings.catalog import MAX_EFFECT_RADIUS
from cityscape.world.cell import ZoneType

if TYPE_CHECKING:
    from cityscape.world.cell import Cell
    from cityscape.world.grid import Grid

log = logging.getLogger(__name__)

BASE_HAPPINESS = 60.0
INFRASTRUCTURE_BONUS = 20.0
INFRASTRUCTURE_PENALTY = -10.0
NEIGHBOUR_BONUS_PER_BUILDING = 2.0
MAX_NEIGHBOUR_BONUS = 10.0
MAX_EMPLOYMENT_BONUS = 15.0
POLLUTION_RADIUS = 3
POLLUTION_SPREAD = 0.2
JOB_SEARCH_RADIUS = 5
JOB_WEIGHT = 0.1


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def count_neighbouring_buildings(grid: Grid, x: int, y: int) -> int:
    """Count the Moore neighbours of ``(x, y)`` that anchor a building."""
    return sum(1 for cell in grid.neighbours(x, y) if cell.building_id is not None)


def local_pollution(grid: Grid, x: int, y: int) -> float:
    """Industrial pollution reaching ``(x, y)``.

    Each industrial building within radius 3 contributes
    ``pollution * (1 - d/3) * 0.2``.
    """
    total = 0.0
    for cell, distance in grid.cells_within(x, y, POLLUTION_RADIUS):
        building = grid.building_of(cell)
        if building is None or building.zone is not ZoneType.INDUSTRIAL:
            continue
        falloff = 1.0 - distance / POLLUTION_RADIUS
        total += building.pollution * falloff * POLLUTION_SPREAD
    return total


def nearby_jobs(grid: Grid, x: int, y: int) -> int:
    """Distance-weighted job count within radius 5, floored."""
    jobs = 0.0
    for cell, distance in grid.cells_within(x, y, JOB_SEARCH_RADIUS):
        building = grid.building_of(cell)
        if building is None or building.jobs <= 0:
            continue
        falloff = 1.0 - distance / JOB_SEARCH_RADIUS
        jobs += building.jobs * falloff * JOB_WEIGHT
    return math.floor(jobs)


def service_effects(grid: Grid, x: int, y: int) -> float:
    """Summed happiness contribution of civic buildings in range."""
    bonus = 0.0
    for cell, distance in grid.cells_within(x, y, MAX_EFFECT_RADIUS):
        building = grid.building_of(cell)
        if building is not None and building.is_service:
            bonus += building.service_effect(distance)
    return bonus


def cell_happiness(grid: Grid, cell: Cell) -> float:
    """Compute the clamped happiness of a single zoned cell."""
    x, y = cell.x, cell.y
    happiness = BASE_HAPPINESS

    if cell.has_all_basic_infrastructure():
        happiness += INFRASTRUCTURE_BONUS
    else:
        happiness += INFRASTRUCTURE_PENALTY

    happiness -= local_pollution(grid, x, y)

    happiness += min(
        MAX_NEIGHBOUR_BONUS,
        count_neighbouring_buildings(grid, x, y) * NEIGHBOUR_BONUS_PER_BUILDING,
    )

    if cell.zone is ZoneType.RESIDENTIAL:
        happiness += min(MAX_EMPLOYMENT_BONUS, nearby_jobs(grid, x, y))

    happiness += service_effects(grid, x, y)
    return _clamp(happiness)


def cell_pollution(grid: Grid, cell: Cell) -> float:
    """Own building output plus nearby industry, clamped to ``[0, 100]``."""
    building = grid.building_of(cell)
    own = building.pollution if building is not None else 0.0
    return _clamp(own + local_pollution(grid, cell.x, cell.y))


def update_happiness_and_pollution(grid: Grid) -> None:
    """Recompute happiness and pollution for every zoned cell.

    Neither quantity reads another cell's happiness or pollution, so the
    row-major update order has no effect on the result.
    """
    updated = 0
    for cell in grid.zoned_cells():
        cell.happiness = cell_happiness(grid, cell)
        cell.pollution = cell_pollution(grid, cell)
        updated += 1
    log.debug("happiness/pollution updated for %d zoned cells", updated)
