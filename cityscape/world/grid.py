"""Grid — the spatial container for the city.

The Grid owns cells arranged in a 2D array and a flat table of buildings
keyed by id.  Cells refer to their building by id; the three non-anchor
cells of a 2x2 block only carry the block annotations and resolve the
building through the block anchor.

Every coordinate-taking method fails closed: out-of-bounds input yields
None, False or an empty result instead of raising.
"""

from __future__ import annotations

import itertools
import logging
import math
from collections.abc import Iterator
from dataclasses import dataclass, field

from cityscape.buildings.building import Building
from cityscape.buildings.catalog import BuildingKind, BuildingSize
from cityscape.world.cell import Cell, Infrastructure, ZoneType

log = logging.getLogger(__name__)


@dataclass
class Grid:
    """A 2D city grid plus the building table.

    Attributes:
        width: Number of columns in the grid.
        height: Number of rows in the grid.
        cells: 2D list of Cell objects indexed as ``cells[y][x]``.
        buildings: Every building keyed by id.
    """

    width: int
    height: int
    cells: list[list[Cell]] = field(init=False, repr=False)
    buildings: dict[str, Building] = field(init=False, repr=False)
    _ids: itertools.count = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Initialise the grid with empty cells."""
        self.reset()

    def reset(self) -> None:
        """Drop every zone, flag and building."""
        self.cells = [
            [Cell(x=x, y=y) for x in range(self.width)] for y in range(self.height)
        ]
        self.buildings = {}
        self._ids = itertools.count(1)

    # -- Lookups -------------------------------------------------------------

    def in_bounds(self, x: int, y: int) -> bool:
        """Return True if ``(x, y)`` lies inside the grid."""
        return 0 <= x < self.width and 0 <= y < self.height

    def cell_at(self, x: int, y: int) -> Cell | None:
        """Return the cell at ``(x, y)``, or None when out of bounds."""
        if not self.in_bounds(x, y):
            return None
        return self.cells[y][x]

    def iter_cells(self) -> Iterator[Cell]:
        """Yield every cell in row-major order."""
        for row in self.cells:
            yield from row

    def zoned_cells(self) -> Iterator[Cell]:
        """Yield every cell that carries a zone, in row-major order."""
        return (cell for cell in self.iter_cells() if cell.zone is not None)

    def neighbours(
        self,
        x: int,
        y: int,
        *,
        include_diagonals: bool = True,
    ) -> list[Cell]:
        """Return adjacent cells for the given position.

        Args:
            x: Column index.
            y: Row index.
            include_diagonals: If True, return up to 8 neighbours; otherwise 4.

        Returns:
            List of neighbouring Cell objects (excludes out-of-bounds).
        """
        offsets = [(-1, 0), (1, 0), (0, -1), (0, 1)]
        if include_diagonals:
            offsets += [(-1, -1), (-1, 1), (1, -1), (1, 1)]

        result: list[Cell] = []
        for dx, dy in offsets:
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                result.append(self.cells[ny][nx])
        return result

    def cells_within(
        self,
        x: int,
        y: int,
        radius: float,
        *,
        include_centre: bool = True,
    ) -> Iterator[tuple[Cell, float]]:
        """Yield ``(cell, distance)`` for cells within a Euclidean radius.

        Scans the bounding box of ``radius`` around ``(x, y)`` and keeps
        cells whose straight-line distance is at most ``radius``.
        """
        reach = int(math.floor(radius))
        for dy in range(-reach, reach + 1):
            for dx in range(-reach, reach + 1):
                if dx == 0 and dy == 0 and not include_centre:
                    continue
                nx, ny = x + dx, y + dy
                if not self.in_bounds(nx, ny):
                    continue
                distance = math.hypot(dx, dy)
                if distance <= radius:
                    yield self.cells[ny][nx], distance

    def building_at(self, x: int, y: int) -> Building | None:
        """Return the building anchored at ``(x, y)``."""
        cell = self.cell_at(x, y)
        if cell is None or cell.building_id is None:
            return None
        return self.buildings.get(cell.building_id)

    def building_of(self, cell: Cell) -> Building | None:
        """Return the building anchored on ``cell``, if any."""
        if cell.building_id is None:
            return None
        return self.buildings.get(cell.building_id)

    def building_covering(self, x: int, y: int) -> Building | None:
        """Return the building occupying ``(x, y)``, resolving block members."""
        cell = self.cell_at(x, y)
        if cell is None:
            return None
        if cell.building_id is not None:
            return self.buildings.get(cell.building_id)
        if cell.is_block_zone and cell.block_x is not None and cell.block_y is not None:
            return self.building_at(cell.block_x, cell.block_y)
        return None

    def is_occupied(self, x: int, y: int) -> bool:
        """Return True if a building covers ``(x, y)``, block members included."""
        return self.building_covering(x, y) is not None

    def all_buildings(self) -> list[Building]:
        """Return buildings in row-major order of their anchor cells."""
        found: list[Building] = []
        for cell in self.iter_cells():
            building = self.building_of(cell)
            if building is not None:
                found.append(building)
        return found

    def block_cells(self, cell: Cell) -> list[Cell] | None:
        """Return the four member cells of ``cell``'s zone block."""
        if not cell.is_block_zone or cell.block_x is None or cell.block_y is None:
            return None
        members = []
        for dy in range(2):
            for dx in range(2):
                member = self.cell_at(cell.block_x + dx, cell.block_y + dy)
                if member is None:
                    return None
                members.append(member)
        return members

    # -- Placement -----------------------------------------------------------

    def add_zone(self, x: int, y: int, zone: ZoneType) -> bool:
        """Zone an empty cell.

        Returns:
            False if out of bounds or the cell is already zoned.
        """
        cell = self.cell_at(x, y)
        if cell is None or cell.zone is not None:
            return False
        cell.zone = zone
        return True

    def add_zone_block(self, x: int, y: int, zone: ZoneType) -> bool:
        """Zone the 2x2 block whose top-left corner is ``(x, y)``.

        Returns:
            False if any of the four cells is out of bounds or zoned.
        """
        members = [self.cell_at(x + dx, y + dy) for dy in range(2) for dx in range(2)]
        if any(m is None or m.zone is not None for m in members):
            return False

        block_id = f"zone_block_{x}_{y}"
        for member in members:
            member.zone = zone
            member.block_zone_id = block_id
            member.block_x = x
            member.block_y = y
        return True

    def add_infrastructure(self, x: int, y: int, infra: Infrastructure) -> bool:
        """Lay a utility flag; False if out of bounds or already present."""
        cell = self.cell_at(x, y)
        if cell is None or cell.has(infra):
            return False
        cell.infrastructure.add(infra)
        return True

    def next_building_id(self, prefix: str = "building") -> str:
        return f"{prefix}_{next(self._ids)}"

    def sync_id_counter(self) -> None:
        """Move the id counter past every numeric suffix already in use.

        Needed after buildings are loaded from a snapshot so that new ids
        never collide with loaded ones.
        """
        highest = 0
        for building_id in self.buildings:
            _, _, suffix = building_id.rpartition("_")
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        self._ids = itertools.count(highest + 1)

    def spawn_building(
        self,
        x: int,
        y: int,
        kind: BuildingKind,
        size: BuildingSize | None = None,
    ) -> Building | None:
        """Create a building anchored at ``(x, y)`` and register it.

        Returns:
            The new building, or None if the cell is missing or occupied.
        """
        cell = self.cell_at(x, y)
        if cell is None or self.is_occupied(x, y):
            return None
        prefix = "block_building" if size is BuildingSize.BLOCK_2X2 else "building"
        building = Building.create(self.next_building_id(prefix), x, y, kind, size)
        self.attach(cell, building)
        log.debug("spawned %s (%s) at (%d, %d)", building.id, kind.value, x, y)
        return building

    def attach(self, cell: Cell, building: Building) -> None:
        """Register ``building`` in the table and anchor it on ``cell``."""
        building.x, building.y = cell.x, cell.y
        self.buildings[building.id] = building
        cell.building_id = building.id

    def place_building(self, x: int, y: int, kind: BuildingKind) -> Building | None:
        """Place a specific building kind directly.

        The cell takes the building's zone; civic buildings keep whatever
        zone the cell already had.

        Returns:
            The placed building, or None if out of bounds or occupied.
        """
        building = self.spawn_building(x, y, kind)
        if building is None:
            return None
        cell = self.cells[y][x]
        if building.zone is not None:
            cell.zone = building.zone
        return building

    # -- Aggregates ----------------------------------------------------------

    def average_happiness(self) -> float:
        """Mean happiness over zoned cells, 0 when nothing is zoned."""
        values = [cell.happiness for cell in self.zoned_cells()]
        return sum(values) / len(values) if values else 0.0

    def average_pollution(self) -> float:
        """Mean pollution over zoned cells, 0 when nothing is zoned."""
        values = [cell.pollution for cell in self.zoned_cells()]
        return sum(values) / len(values) if values else 0.0
