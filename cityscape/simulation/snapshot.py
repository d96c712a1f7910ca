"""Snapshots — the plain row/cell structure exchanged with hosts.

A snapshot is a list of rows, each a list of cell dicts with camelCase
keys.  Buildings appear once, on their anchor cell; the other three cells
of a block carry only the block annotations.
"""

from __future__ import annotations

import logging
from typing import Any

from cityscape.buildings.building import Building
from cityscape.world.cell import (
    ConnectivityResult,
    ConnectivityStatus,
    Infrastructure,
    ZoneType,
)
from cityscape.world.grid import Grid

log = logging.getLogger(__name__)

CellRecord = dict[str, Any]


def cell_to_record(grid: Grid, x: int, y: int) -> CellRecord | None:
    """Serialise one cell, or None when ``(x, y)`` is out of bounds."""
    cell = grid.cell_at(x, y)
    if cell is None:
        return None
    building = grid.building_of(cell)
    conn = cell.connectivity
    return {
        "x": cell.x,
        "y": cell.y,
        "zoneType": cell.zone.value if cell.zone else None,
        "infrastructure": sorted(infra.value for infra in cell.infrastructure),
        "building": building.to_record() if building else None,
        "happiness": cell.happiness,
        "pollution": cell.pollution,
        "isBlockZone": cell.is_block_zone,
        "blockZoneId": cell.block_zone_id,
        "blockZoneX": cell.block_x,
        "blockZoneY": cell.block_y,
        "hasPower": cell.has_power,
        "powerSource": cell.power_source,
        "powerCapacity": cell.power_capacity,
        "powerDemand": cell.power_demand,
        "hasRoad": conn.road if conn else None,
        "hasWater": conn.water if conn else None,
        "hasPowerAccess": conn.power if conn else None,
        "connectivityStatus": conn.status.value if conn else None,
        "connectivityEfficiency": conn.efficiency if conn else None,
    }


def grid_to_snapshot(grid: Grid) -> list[list[CellRecord]]:
    """Serialise the whole grid, row by row."""
    return [
        [cell_to_record(grid, x, y) for x in range(grid.width)]
        for y in range(grid.height)
    ]


def _parse_zone(value: Any) -> ZoneType | None:
    if not value:
        return None
    try:
        return ZoneType(value)
    except ValueError:
        log.warning("ignoring unknown zone type %r", value)
        return None


def _parse_infrastructure(values: Any) -> set[Infrastructure]:
    flags: set[Infrastructure] = set()
    for value in values or ():
        try:
            flags.add(Infrastructure(value))
        except ValueError:
            log.warning("ignoring unknown infrastructure %r", value)
    return flags


def _parse_connectivity(record: CellRecord) -> ConnectivityResult | None:
    status = record.get("connectivityStatus")
    if not status:
        return None
    try:
        parsed = ConnectivityStatus(status)
    except ValueError:
        return None
    return ConnectivityResult(
        road=bool(record.get("hasRoad")),
        power=bool(record.get("hasPowerAccess")),
        water=bool(record.get("hasWater")),
        status=parsed,
        efficiency=float(record.get("connectivityEfficiency") or 0.0),
    )


def grid_from_snapshot(rows: list[list[CellRecord]]) -> Grid:
    """Rebuild a Grid from a snapshot.

    Grid dimensions come from the snapshot itself.  Unknown zone or
    infrastructure names are dropped with a warning, and a building record
    that cannot be parsed leaves its cell empty.

    Args:
        rows: Snapshot rows as produced by ``grid_to_snapshot``.

    Returns:
        A new Grid holding the snapshot's state.
    """
    height = len(rows)
    width = len(rows[0]) if height else 0
    grid = Grid(width=width, height=height)

    pending: list[tuple[int, int, dict[str, Any]]] = []
    for y, row in enumerate(rows):
        for x, record in enumerate(row[:width]):
            if not record:
                continue
            cell = grid.cells[y][x]
            cell.zone = _parse_zone(record.get("zoneType"))
            cell.infrastructure = _parse_infrastructure(record.get("infrastructure"))
            cell.set_happiness(float(record.get("happiness", 50.0)))
            cell.set_pollution(float(record.get("pollution", 0.0)))
            if record.get("isBlockZone"):
                cell.block_zone_id = record.get("blockZoneId")
                cell.block_x = record.get("blockZoneX")
                cell.block_y = record.get("blockZoneY")
            cell.has_power = bool(record.get("hasPower", False))
            cell.power_source = record.get("powerSource")
            cell.power_capacity = float(record.get("powerCapacity") or 0.0)
            cell.power_demand = float(record.get("powerDemand") or 0.0)
            cell.connectivity = _parse_connectivity(record)
            if record.get("building"):
                pending.append((x, y, record["building"]))

    # Buildings go in after every cell is known so block anchors resolve.
    unnamed = [p for p in pending if not p[2].get("id")]
    for x, y, building_record in pending:
        if building_record.get("id"):
            _load_building(grid, x, y, building_record)
    grid.sync_id_counter()
    for x, y, building_record in unnamed:
        _load_building(grid, x, y, building_record)
    return grid


def _load_building(grid: Grid, x: int, y: int, record: dict[str, Any]) -> None:
    building = Building.from_record(record)
    if building is None:
        log.warning("dropping unreadable building at (%d, %d)", x, y)
        return
    if not building.id:
        building.id = grid.next_building_id()
    elif building.id in grid.buildings:
        return

    cell = grid.cells[y][x]
    if cell.is_block_zone and cell.block_x is not None and cell.block_y is not None:
        anchor = grid.cell_at(cell.block_x, cell.block_y)
        if anchor is not None:
            cell = anchor
    if cell.building_id is not None:
        return
    grid.attach(cell, building)
