"""Cell — a single tile in the city grid.

Each cell holds its zone designation, infrastructure flags and a reference
to the building it owns.  Buildings themselves live in the grid's building
table so block structures are never duplicated across their member cells.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ZoneType(Enum):
    """Land-use designation a cell receives before anything can grow."""

    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"


class Infrastructure(Enum):
    """Utility flags a cell can carry."""

    ROAD = "road"
    POWER = "power"
    WATER = "water"


BASIC_INFRASTRUCTURE = frozenset(Infrastructure)


class ConnectivityStatus(Enum):
    """How well a building is served by the utility networks."""

    BRIGHT = "bright"
    DIM = "dim"
    DARK = "dark"


@dataclass
class ConnectivityResult:
    """Per-building reachability of each network.

    Attributes:
        road: A road lies within the road detection radius.
        power: A power line lies within the power detection radius.
        water: A water pipe lies within the water detection radius.
        status: Tri-state summary of the required networks.
        efficiency: Output multiplier in ``[0.1, 1.0]``.
    """

    road: bool
    power: bool
    water: bool
    status: ConnectivityStatus
    efficiency: float


@dataclass
class Cell:
    """A single tile in the city grid.

    Attributes:
        x: Column position.
        y: Row position.
        zone: Zone designation, or None while unzoned.
        infrastructure: Utility flags present on the tile.
        building_id: Id of the building anchored here, if any.
        happiness: Resident satisfaction (0-100).
        pollution: Local pollution level (0-100).
        block_zone_id: Id of the 2x2 zone block this cell belongs to.
        block_x: Anchor column of the zone block.
        block_y: Anchor row of the zone block.
        has_power: Set by the power-flow pass when the building is fed.
        power_source: Id of the source node feeding this cell.
        power_capacity: Remaining capacity of a source on this cell.
        power_demand: Demand allotted to a consumer on this cell.
        connectivity: Result of the last connectivity pass.
    """

    x: int
    y: int
    zone: ZoneType | None = None
    infrastructure: set[Infrastructure] = field(default_factory=set)
    building_id: str | None = None
    happiness: float = 50.0
    pollution: float = 0.0

    block_zone_id: str | None = None
    block_x: int | None = None
    block_y: int | None = None

    has_power: bool = False
    power_source: str | None = None
    power_capacity: float = 0.0
    power_demand: float = 0.0
    connectivity: ConnectivityResult | None = None

    @property
    def is_block_zone(self) -> bool:
        """Return True if the cell is a member of a 2x2 zone block."""
        return self.block_zone_id is not None

    @property
    def is_block_anchor(self) -> bool:
        """Return True if this cell is the top-left cell of its block."""
        return self.is_block_zone and (self.block_x, self.block_y) == (self.x, self.y)

    def has(self, infra: Infrastructure) -> bool:
        """Return True if the cell carries the given utility flag."""
        return infra in self.infrastructure

    def has_all_basic_infrastructure(self) -> bool:
        """Return True if road, power and water are all present."""
        return BASIC_INFRASTRUCTURE <= self.infrastructure

    def set_happiness(self, value: float) -> None:
        """Set happiness, clamped to ``[0, 100]``."""
        self.happiness = max(0.0, min(100.0, value))

    def set_pollution(self, value: float) -> None:
        """Set pollution, clamped to ``[0, 100]``."""
        self.pollution = max(0.0, min(100.0, value))

    def clear_power(self) -> None:
        """Drop the annotations left by the last power-flow pass."""
        self.has_power = False
        self.power_source = None
        self.power_capacity = 0.0
        self.power_demand = 0.0
