"""Transport scoring — how well each zoned cell is tied into its surroundings.

The score is a distance-weighted count of utility flags nearby.  It feeds a
per-cell transport efficiency, the job/service/supply accessibility figures,
and a happiness nudge applied to buildings each tick.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cityscape.world.cell import Infrastructure, ZoneType

if TYPE_CHECKING:
    from cityscape.world.cell import Cell
    from cityscape.world.grid import Grid

log = logging.getLogger(__name__)

CONNECTIVITY_RANGE = 5
CONNECTIVITY_BONUS = 15.0
ISOLATION_PENALTY = -10.0
WELL_CONNECTED = 30.0
HIGH_CONNECTIVITY = 50.0
LOW_CONNECTIVITY = 10.0

JOB_RANGE = 8
SERVICE_RANGE = 6
SUPPLY_RANGE = 10
PLACEMENT_RANGE = 3

INFRASTRUCTURE_EFFICIENCY: dict[Infrastructure, float] = {
    Infrastructure.ROAD: 0.8,
    Infrastructure.POWER: 0.9,
    Infrastructure.WATER: 0.85,
}

# Per-pass memo of transport efficiency keyed by (x, y).
EfficiencyCache = dict[tuple[int, int], float]


@dataclass
class TransportStats:
    """City-wide transport summary over zoned cells."""

    average_connectivity: float = 0.0
    well_connected_zones: int = 0
    isolated_zones: int = 0
    total_infrastructure: int = 0
    transport_efficiency: float = 0.0


@dataclass
class PlacementSuggestion:
    x: int
    y: int
    score: float


def connectivity_score(grid: Grid, x: int, y: int) -> float:
    """Sum of nearby utility flags weighted by ``1 - d/5``, capped at 100."""
    score = 0.0
    for cell, distance in grid.cells_within(x, y, CONNECTIVITY_RANGE):
        if cell.infrastructure:
            score += (1.0 - distance / CONNECTIVITY_RANGE) * len(cell.infrastructure)
    return min(100.0, score)


def is_well_connected(grid: Grid, x: int, y: int) -> bool:
    return connectivity_score(grid, x, y) > WELL_CONNECTED


def transport_efficiency(
    grid: Grid,
    cell: Cell,
    cache: EfficiencyCache | None = None,
) -> float:
    """Flag weights on ``cell`` plus a connectivity bonus, capped at 1."""
    key = (cell.x, cell.y)
    if cache is not None and key in cache:
        return cache[key]
    efficiency = sum(INFRASTRUCTURE_EFFICIENCY[infra] for infra in cell.infrastructure)
    efficiency += connectivity_score(grid, cell.x, cell.y) / 100.0
    efficiency = min(1.0, efficiency)
    if cache is not None:
        cache[key] = efficiency
    return efficiency


def job_accessibility(
    grid: Grid,
    x: int,
    y: int,
    cache: EfficiencyCache | None = None,
) -> int:
    """Reachable jobs within range 8, discounted by distance and transport."""
    access = 0.0
    for cell, distance in grid.cells_within(x, y, JOB_RANGE):
        building = grid.building_of(cell)
        if building is None or building.jobs <= 0:
            continue
        access += (
            building.jobs
            * (1.0 - distance / JOB_RANGE)
            * transport_efficiency(grid, cell, cache)
        )
    return math.floor(access)


def service_accessibility(
    grid: Grid,
    x: int,
    y: int,
    cache: EfficiencyCache | None = None,
) -> int:
    """Reachable residents within range 6; the customer base for commerce."""
    access = 0.0
    for cell, distance in grid.cells_within(x, y, SERVICE_RANGE):
        building = grid.building_of(cell)
        if building is None or building.zone is not ZoneType.RESIDENTIAL:
            continue
        access += (
            building.population
            * (1.0 - distance / SERVICE_RANGE)
            * transport_efficiency(grid, cell, cache)
        )
    return math.floor(access)


def supply_chain_efficiency(
    grid: Grid,
    x: int,
    y: int,
    cache: EfficiencyCache | None = None,
) -> float:
    """Industrial neighbours within range 10, normalised to ``[0, 1]``."""
    total = 0.0
    for cell, distance in grid.cells_within(x, y, SUPPLY_RANGE):
        building = grid.building_of(cell)
        if building is None or building.zone is not ZoneType.INDUSTRIAL:
            continue
        total += (1.0 - distance / SUPPLY_RANGE) * transport_efficiency(grid, cell, cache)
    return min(1.0, total / 10.0)


def transport_happiness_modifier(
    grid: Grid,
    cell: Cell,
    cache: EfficiencyCache | None = None,
) -> float:
    """Happiness change that transport brings to the building on ``cell``."""
    score = connectivity_score(grid, cell.x, cell.y)
    if score > HIGH_CONNECTIVITY:
        modifier = CONNECTIVITY_BONUS
    elif score < LOW_CONNECTIVITY:
        modifier = ISOLATION_PENALTY
    else:
        modifier = 0.0

    if cell.zone is ZoneType.RESIDENTIAL:
        modifier += min(10.0, job_accessibility(grid, cell.x, cell.y, cache) / 10.0)
    elif cell.zone is ZoneType.COMMERCIAL:
        modifier += min(10.0, service_accessibility(grid, cell.x, cell.y, cache) / 20.0)
    elif cell.zone is ZoneType.INDUSTRIAL:
        modifier += min(5.0, supply_chain_efficiency(grid, cell.x, cell.y, cache) * 10.0)
    return modifier


def apply_transport_effects(grid: Grid) -> int:
    """Set each building's happiness from its cell's happiness plus transport.

    Only building happiness is written; cell happiness is left alone.

    Returns:
        Number of buildings updated.
    """
    cache: EfficiencyCache = {}
    updated = 0
    for cell in grid.zoned_cells():
        building = grid.building_of(cell)
        if building is None:
            continue
        modifier = transport_happiness_modifier(grid, cell, cache)
        building.happiness = max(0.0, min(100.0, cell.happiness + modifier))
        updated += 1
    log.debug("transport effects applied to %d buildings", updated)
    return updated


def transport_stats(grid: Grid) -> TransportStats:
    """Summarise transport over every zoned cell."""
    stats = TransportStats()
    cache: EfficiencyCache = {}
    total_score = 0.0
    total_efficiency = 0.0
    zoned = 0
    for cell in grid.zoned_cells():
        score = connectivity_score(grid, cell.x, cell.y)
        total_score += score
        total_efficiency += transport_efficiency(grid, cell, cache)
        stats.total_infrastructure += len(cell.infrastructure)
        zoned += 1
        if score > HIGH_CONNECTIVITY:
            stats.well_connected_zones += 1
        elif score < LOW_CONNECTIVITY:
            stats.isolated_zones += 1
    if zoned:
        stats.average_connectivity = total_score / zoned
        stats.transport_efficiency = total_efficiency / zoned
    return stats


def placement_score(grid: Grid, x: int, y: int, infra: Infrastructure) -> float:
    """Benefit of laying ``infra`` at ``(x, y)``.

    Each zoned cell within range 3 that lacks the flag adds
    ``10 * (1 - d/3)``.
    """
    score = 0.0
    for cell, distance in grid.cells_within(x, y, PLACEMENT_RANGE):
        if cell.zone is not None and not cell.has(infra):
            score += (1.0 - distance / PLACEMENT_RANGE) * 10.0
    return score


def find_optimal_location(grid: Grid, infra: Infrastructure) -> PlacementSuggestion | None:
    """Best cell for a new ``infra`` flag; the first scanned wins ties.

    Returns:
        The suggestion, or None when every cell already carries the flag.
    """
    best: PlacementSuggestion | None = None
    for cell in grid.iter_cells():
        if cell.has(infra):
            continue
        score = placement_score(grid, cell.x, cell.y, infra)
        if best is None or score > best.score:
            best = PlacementSuggestion(cell.x, cell.y, score)
    return best
