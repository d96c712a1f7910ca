"""Power distribution — capacity-limited flow from plants to consumers.

Rebuilt from scratch every tick:

1. Scan the grid in row-major order, emitting a source node per power
   plant and a consumer node per other building.
2. Pair every consumer with its nearest source inside the transmission
   range, provided the straight rasterised line between them carries the
   power flag on every visited cell.  Lines that bend are rejected even
   when the cells are joined some other way.
3. Allot capacity in scan order: earlier consumers are served first and a
   source that runs out leaves later consumers connected but short.

This is a separate model from the proximity check in
``cityscape.systems.connectivity``; the two are not meant to agree.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from cityscape.buildings.catalog import BuildingKind, BuildingSize
from cityscape.world.cell import Infrastructure

if TYPE_CHECKING:
    from cityscape.buildings.building import Building
    from cityscape.world.grid import Grid

log = logging.getLogger(__name__)

PLANT_CAPACITY = 1000.0
TRANSMISSION_RANGE = 8.0
BASE_POWER_DEMAND = 10.0
LINE_EFFICIENCY = 0.95
LINE_LOSS_PER_CELL = 0.01
MIN_LINE_EFFICIENCY = 0.1
OVERLOAD_THRESHOLD = 0.9

_SIZE_DEMAND_MULTIPLIER: dict[BuildingSize, float] = {
    BuildingSize.SMALL: 1.0,
    BuildingSize.MEDIUM: 2.0,
    BuildingSize.LARGE: 4.0,
    BuildingSize.BLOCK_2X2: 6.0,
}

_HEAVY_SERVICE_KINDS = frozenset(
    {BuildingKind.HOSPITAL, BuildingKind.SCHOOL, BuildingKind.PARK}
)


class NodeRole(Enum):
    SOURCE = "source"
    CONSUMER = "consumer"


@dataclass
class PowerNode:
    """A tick-scoped participant in the power network.

    Attributes:
        id: Node id, unique within the tick.
        x: Column of the building's anchor cell.
        y: Row of the building's anchor cell.
        role: Source or consumer.
        capacity: Fixed output of a source; 0 for consumers.
        remaining: Output a source still has to give.
        demand: Power a consumer asks for; 0 for sources.
        allotted: Power actually delivered to a consumer.
        connected: True when the node is fed (sources always are).
        source_id: Id of the source feeding a consumer.
    """

    id: str
    x: int
    y: int
    role: NodeRole
    capacity: float = 0.0
    remaining: float = 0.0
    demand: float = 0.0
    allotted: float = 0.0
    connected: bool = False
    source_id: str | None = None


@dataclass
class PowerConnection:
    """A single source-to-consumer link.

    Attributes:
        source_id: Feeding source node.
        consumer_id: Fed consumer node.
        distance: Straight-line transmission distance.
        efficiency: Line efficiency after distance losses.
        capacity: Power the link could carry when it was built.
    """

    source_id: str
    consumer_id: str
    distance: float
    efficiency: float
    capacity: float


@dataclass
class PowerGrid:
    """Snapshot of power flow for one tick.

    Attributes:
        nodes: Every node in scan order.
        connections: Links in consumer scan order.
        total_capacity: Sum of source capacities.
        total_demand: Sum of requested consumer demand.
        efficiency: Load factor ``min(1, demand / capacity)``.
        overload_threshold: Load factor above which the grid is overloaded.
    """

    nodes: list[PowerNode] = field(default_factory=list)
    connections: list[PowerConnection] = field(default_factory=list)
    total_capacity: float = 0.0
    total_demand: float = 0.0
    efficiency: float = 0.0
    overload_threshold: float = OVERLOAD_THRESHOLD

    @property
    def sources(self) -> list[PowerNode]:
        return [n for n in self.nodes if n.role is NodeRole.SOURCE]

    @property
    def consumers(self) -> list[PowerNode]:
        return [n for n in self.nodes if n.role is NodeRole.CONSUMER]

    @property
    def is_overloaded(self) -> bool:
        return self.efficiency > self.overload_threshold

    @property
    def total_allotted(self) -> float:
        return sum(n.allotted for n in self.consumers)

    def shortage_nodes(self) -> list[PowerNode]:
        """Consumers with no wired source in range."""
        return [n for n in self.consumers if not n.connected]

    def node_at(self, x: int, y: int) -> PowerNode | None:
        for node in self.nodes:
            if node.x == x and node.y == y:
                return node
        return None


def building_power_demand(
    building: Building,
    base_demand: float = BASE_POWER_DEMAND,
) -> float:
    """Power a building asks for.

    Base demand times the size multiplier, doubled for hospitals, schools
    and parks, and times 1.5 for block buildings.
    """
    demand = base_demand * _SIZE_DEMAND_MULTIPLIER[building.size]
    if building.kind in _HEAVY_SERVICE_KINDS:
        return demand * 2.0
    if building.is_block:
        return demand * 1.5
    return demand


def build_power_nodes(
    grid: Grid,
    *,
    plant_capacity: float = PLANT_CAPACITY,
    base_demand: float = BASE_POWER_DEMAND,
) -> list[PowerNode]:
    """Emit one node per building, in row-major order."""
    nodes: list[PowerNode] = []
    for building in grid.all_buildings():
        x, y = building.x, building.y
        if building.is_power_source:
            nodes.append(
                PowerNode(
                    id=f"power_source_{x}_{y}",
                    x=x,
                    y=y,
                    role=NodeRole.SOURCE,
                    capacity=plant_capacity,
                    remaining=plant_capacity,
                    connected=True,
                    source_id=f"power_source_{x}_{y}",
                )
            )
        else:
            nodes.append(
                PowerNode(
                    id=f"power_consumer_{x}_{y}",
                    x=x,
                    y=y,
                    role=NodeRole.CONSUMER,
                    demand=building_power_demand(building, base_demand),
                )
            )
    return nodes


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def has_power_line_path(grid: Grid, x0: int, y0: int, x1: int, y1: int) -> bool:
    """Check that the rasterised line from ``(x0, y0)`` to ``(x1, y1)`` is wired.

    The line is sampled at ``max(|dx|, |dy|) + 1`` evenly spaced points,
    both endpoints included, and every sampled cell must carry the power
    flag.  Out-of-bounds endpoints fail closed.
    """
    if not (grid.in_bounds(x0, y0) and grid.in_bounds(x1, y1)):
        return False
    dx = x1 - x0
    dy = y1 - y0
    steps = max(abs(dx), abs(dy))
    if steps == 0:
        return grid.cells[y0][x0].has(Infrastructure.POWER)
    for i in range(steps + 1):
        px = _round_half_up(x0 + dx * i / steps)
        py = _round_half_up(y0 + dy * i / steps)
        if not grid.cells[py][px].has(Infrastructure.POWER):
            return False
    return True


def find_nearest_source(
    consumer: PowerNode,
    sources: list[PowerNode],
    transmission_range: float = TRANSMISSION_RANGE,
) -> PowerNode | None:
    """Closest source within range; the first scanned wins ties."""
    nearest: PowerNode | None = None
    best = math.inf
    for source in sources:
        distance = math.hypot(consumer.x - source.x, consumer.y - source.y)
        if distance < best and distance <= transmission_range:
            best = distance
            nearest = source
    return nearest


def line_efficiency(distance: float) -> float:
    return max(MIN_LINE_EFFICIENCY, LINE_EFFICIENCY - LINE_LOSS_PER_CELL * distance)


def build_power_connections(
    grid: Grid,
    nodes: list[PowerNode],
    transmission_range: float = TRANSMISSION_RANGE,
) -> list[PowerConnection]:
    """Link each consumer to its nearest wired source."""
    sources = [n for n in nodes if n.role is NodeRole.SOURCE]
    connections: list[PowerConnection] = []
    for consumer in (n for n in nodes if n.role is NodeRole.CONSUMER):
        source = find_nearest_source(consumer, sources, transmission_range)
        if source is None:
            continue
        if not has_power_line_path(grid, consumer.x, consumer.y, source.x, source.y):
            continue
        distance = math.hypot(consumer.x - source.x, consumer.y - source.y)
        connections.append(
            PowerConnection(
                source_id=source.id,
                consumer_id=consumer.id,
                distance=distance,
                efficiency=line_efficiency(distance),
                capacity=min(source.capacity, consumer.demand),
            )
        )
    return connections


def simulate_power_flow(
    nodes: list[PowerNode],
    connections: list[PowerConnection],
) -> None:
    """Allot source capacity to consumers in connection order.

    A consumer whose demand fits in the source's remaining capacity is
    fully served.  Otherwise it takes whatever is left, possibly nothing,
    and the source is exhausted.  Every linked consumer ends up connected
    to its source; only consumers with no link stay unconnected.
    """
    by_id = {node.id: node for node in nodes}
    for node in nodes:
        if node.role is NodeRole.CONSUMER:
            node.connected = False
            node.source_id = None
            node.allotted = 0.0

    for link in connections:
        source = by_id.get(link.source_id)
        consumer = by_id.get(link.consumer_id)
        if source is None or consumer is None:
            continue
        if source.remaining >= consumer.demand:
            consumer.allotted = consumer.demand
            source.remaining -= consumer.demand
        else:
            consumer.allotted = source.remaining
            source.remaining = 0.0
        consumer.connected = True
        consumer.source_id = source.id


def calculate_power_distribution(
    grid: Grid,
    *,
    plant_capacity: float = PLANT_CAPACITY,
    transmission_range: float = TRANSMISSION_RANGE,
    base_demand: float = BASE_POWER_DEMAND,
    overload_threshold: float = OVERLOAD_THRESHOLD,
) -> PowerGrid:
    """Compute this tick's power flow snapshot.

    Args:
        grid: The city grid (read only).
        plant_capacity: Output of every power plant.
        transmission_range: Furthest a consumer may be from its source.
        base_demand: Demand of a small, ordinary building.
        overload_threshold: Load factor above which the grid is overloaded.

    Returns:
        The populated PowerGrid.
    """
    nodes = build_power_nodes(
        grid,
        plant_capacity=plant_capacity,
        base_demand=base_demand,
    )
    connections = build_power_connections(grid, nodes, transmission_range)
    simulate_power_flow(nodes, connections)

    total_capacity = sum(n.capacity for n in nodes if n.role is NodeRole.SOURCE)
    total_demand = sum(n.demand for n in nodes if n.role is NodeRole.CONSUMER)
    efficiency = min(1.0, total_demand / total_capacity) if total_capacity > 0 else 0.0

    power_grid = PowerGrid(
        nodes=nodes,
        connections=connections,
        total_capacity=total_capacity,
        total_demand=total_demand,
        efficiency=efficiency,
        overload_threshold=overload_threshold,
    )
    log.debug(
        "power: capacity=%.0f demand=%.0f efficiency=%.2f shortages=%d",
        total_capacity,
        total_demand,
        efficiency,
        len(power_grid.shortage_nodes()),
    )
    return power_grid


def update_grid_power_status(grid: Grid, power_grid: PowerGrid) -> None:
    """Write node results onto the anchor cells of their buildings."""
    for cell in grid.iter_cells():
        cell.clear_power()

    for node in power_grid.nodes:
        cell = grid.cell_at(node.x, node.y)
        if cell is None:
            continue
        cell.has_power = node.connected
        cell.power_source = node.source_id
        if node.role is NodeRole.SOURCE:
            cell.power_capacity = node.remaining
        else:
            cell.power_demand = node.allotted


def power_flow_connectivity(grid: Grid, x: int, y: int) -> bool:
    """Whether the building at ``(x, y)`` was fed by the last flow pass.

    Reads the annotations written by ``update_grid_power_status``.
    """
    cell = grid.cell_at(x, y)
    return bool(cell is not None and cell.has_power)
