"""Growth engine — buildings sprout in zones and grow over time.

Each tick every zoned cell is visited in row-major order.  Empty cells may
spawn a building, 2x2 blocks may spawn a single block building from their
anchor cell, and existing buildings may upgrade one size class.

Whether the weather permits growth is decided once per tick by the caller
and passed in as ``growth_allowed``; every decision site in the pass sees
the same answer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cityscape.buildings.catalog import BLOCK_KIND, GROWN_KIND, BuildingSize

if TYPE_CHECKING:
    from numpy.random import Generator

    from cityscape.buildings.building import Building
    from cityscape.world.cell import Cell
    from cityscape.world.grid import Grid

log = logging.getLogger(__name__)

SINGLE_HAPPINESS_THRESHOLD = 30.0
BLOCK_HAPPINESS_THRESHOLD = 40.0
UPGRADE_HAPPINESS_THRESHOLD = 50.0

_BASE_CHANCE = 0.3
_INFRASTRUCTURE_BONUS = 0.1


@dataclass
class GrowthReport:
    """What the growth pass changed this tick."""

    spawned: int = 0
    blocks_spawned: int = 0
    upgraded: int = 0


def spawn_probability(cell: Cell) -> float:
    """Chance that an eligible cell spawns a building this tick."""
    chance = (
        _BASE_CHANCE
        + _INFRASTRUCTURE_BONUS * len(cell.infrastructure)
        + cell.happiness / 200.0
    )
    return max(0.0, min(1.0, chance))


def can_zone_grow(cell: Cell, growth_allowed: bool) -> bool:
    """Preconditions for a single-cell spawn.

    The cell needs at least one utility flag, permitting weather and
    happiness above 30.
    """
    if cell.zone is None or cell.building_id is not None:
        return False
    return (
        len(cell.infrastructure) > 0
        and growth_allowed
        and cell.happiness > SINGLE_HAPPINESS_THRESHOLD
    )


def can_block_zone_grow(grid: Grid, cell: Cell, growth_allowed: bool) -> bool:
    """Preconditions for a 2x2 block spawn, evaluated from the anchor.

    All four members need road, power and water and must be free; the
    average happiness of the block must exceed 40.
    """
    if not cell.is_block_anchor:
        return False
    members = grid.block_cells(cell)
    if members is None:
        return False
    for member in members:
        if not member.has_all_basic_infrastructure() or member.building_id is not None:
            return False
    average = sum(m.happiness for m in members) / len(members)
    return growth_allowed and average > BLOCK_HAPPINESS_THRESHOLD


def can_building_upgrade(
    building: Building,
    cell: Cell,
    growth_allowed: bool,
) -> bool:
    """Preconditions for an upgrade: room to grow, happiness above 50."""
    if not building.can_upgrade:
        return False
    return cell.happiness > UPGRADE_HAPPINESS_THRESHOLD and growth_allowed


def create_block_building(grid: Grid, x: int, y: int) -> Building | None:
    """Spawn the block building for the zone block anchored at ``(x, y)``.

    Returns:
        The block building, or None if ``(x, y)`` is not a block anchor or
        any member lacks full utilities or is already built on.
    """
    cell = grid.cell_at(x, y)
    if cell is None or not cell.is_block_anchor or cell.zone is None:
        return None
    members = grid.block_cells(cell)
    if members is None:
        return None
    if any(
        not m.has_all_basic_infrastructure() or m.building_id is not None
        for m in members
    ):
        return None
    return grid.spawn_building(x, y, BLOCK_KIND[cell.zone], BuildingSize.BLOCK_2X2)


def simulate_growth(
    grid: Grid,
    rng: Generator,
    growth_allowed: bool,
) -> GrowthReport:
    """Run one growth pass over the grid.

    Args:
        grid: The city grid, mutated in place.
        rng: Seeded random generator for spawn draws.
        growth_allowed: This tick's weather growth permission.

    Returns:
        Counts of spawned and upgraded buildings.
    """
    report = GrowthReport()
    for cell in grid.zoned_cells():
        building = grid.building_of(cell)
        if building is not None:
            if can_building_upgrade(building, cell, growth_allowed):
                building.upgrade()
                report.upgraded += 1
            continue

        if cell.is_block_zone:
            if can_block_zone_grow(grid, cell, growth_allowed):
                if create_block_building(grid, cell.x, cell.y) is not None:
                    report.blocks_spawned += 1
            continue

        if can_zone_grow(cell, growth_allowed):
            if rng.random() < spawn_probability(cell):
                grid.spawn_building(cell.x, cell.y, GROWN_KIND[cell.zone])
                report.spawned += 1

    log.debug(
        "growth: %d spawned, %d blocks, %d upgraded",
        report.spawned,
        report.blocks_spawned,
        report.upgraded,
    )
    return report
