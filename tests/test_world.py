"""Tests for cityscape.world.grid and cityscape.world.cell."""

from cityscape.buildings.catalog import BuildingKind, BuildingSize
from cityscape.world.cell import Cell, Infrastructure, ZoneType
from cityscape.world.grid import Grid


class TestCell:
    """Tests for the Cell dataclass."""

    def test_default_values(self) -> None:
        cell = Cell(x=0, y=0)
        assert cell.zone is None
        assert cell.infrastructure == set()
        assert cell.building_id is None
        assert cell.happiness == 50.0
        assert cell.pollution == 0.0
        assert cell.is_block_zone is False

    def test_setters_clamp(self) -> None:
        cell = Cell(x=0, y=0)
        cell.set_happiness(140.0)
        cell.set_pollution(-5.0)
        assert cell.happiness == 100.0
        assert cell.pollution == 0.0

    def test_basic_infrastructure(self) -> None:
        cell = Cell(x=0, y=0, infrastructure={Infrastructure.ROAD, Infrastructure.POWER})
        assert not cell.has_all_basic_infrastructure()
        cell.infrastructure.add(Infrastructure.WATER)
        assert cell.has_all_basic_infrastructure()


class TestGridLookups:
    """Bounds handling and neighbourhood queries."""

    def test_dimensions(self, small_grid: Grid) -> None:
        assert len(small_grid.cells) == 8
        assert len(small_grid.cells[0]) == 8

    def test_cell_at_valid(self, small_grid: Grid) -> None:
        cell = small_grid.cell_at(3, 5)
        assert cell is not None
        assert (cell.x, cell.y) == (3, 5)

    def test_out_of_bounds_fails_closed(self, small_grid: Grid) -> None:
        assert small_grid.cell_at(8, 0) is None
        assert small_grid.cell_at(-1, 2) is None
        assert small_grid.building_at(99, 99) is None
        assert small_grid.add_zone(8, 8, ZoneType.RESIDENTIAL) is False
        assert small_grid.add_infrastructure(-1, 0, Infrastructure.ROAD) is False
        assert small_grid.spawn_building(0, 8, BuildingKind.HOUSE) is None

    def test_accessors(self, small_grid: Grid) -> None:
        assert small_grid.in_bounds(7, 7)
        assert not small_grid.in_bounds(7, 8)
        small_grid.add_zone(2, 1, ZoneType.COMMERCIAL)
        assert [(c.x, c.y) for c in small_grid.zoned_cells()] == [(2, 1)]
        shop = small_grid.place_building(2, 1, BuildingKind.SHOP)
        assert small_grid.building_of(small_grid.cells[1][2]) is shop
        assert small_grid.building_of(small_grid.cells[0][0]) is None
        assert not small_grid.is_occupied(0, 0)

    def test_neighbours_corner(self, small_grid: Grid) -> None:
        assert len(small_grid.neighbours(0, 0, include_diagonals=True)) == 3

    def test_neighbours_cardinal_only(self, small_grid: Grid) -> None:
        assert len(small_grid.neighbours(3, 3, include_diagonals=False)) == 4

    def test_cells_within_is_euclidean(self, small_grid: Grid) -> None:
        found = {(c.x, c.y): d for c, d in small_grid.cells_within(4, 4, 1)}
        # The diagonal at sqrt(2) is outside radius 1.
        assert set(found) == {(4, 4), (3, 4), (5, 4), (4, 3), (4, 5)}
        assert found[(4, 4)] == 0.0

    def test_cells_within_excludes_centre(self, small_grid: Grid) -> None:
        found = [(c.x, c.y) for c, _ in small_grid.cells_within(4, 4, 1, include_centre=False)]
        assert (4, 4) not in found


class TestGridPlacement:
    """Zoning, flags and buildings."""

    def test_zone_once(self, small_grid: Grid) -> None:
        assert small_grid.add_zone(1, 1, ZoneType.COMMERCIAL)
        assert not small_grid.add_zone(1, 1, ZoneType.RESIDENTIAL)
        assert small_grid.cells[1][1].zone is ZoneType.COMMERCIAL

    def test_infrastructure_once(self, small_grid: Grid) -> None:
        assert small_grid.add_infrastructure(2, 2, Infrastructure.ROAD)
        assert not small_grid.add_infrastructure(2, 2, Infrastructure.ROAD)

    def test_zone_block_annotations(self, small_grid: Grid) -> None:
        assert small_grid.add_zone_block(2, 3, ZoneType.INDUSTRIAL)
        members = [small_grid.cells[y][x] for y in (3, 4) for x in (2, 3)]
        assert {m.block_zone_id for m in members} == {"zone_block_2_3"}
        assert all((m.block_x, m.block_y) == (2, 3) for m in members)
        assert small_grid.cells[3][2].is_block_anchor
        assert not small_grid.cells[4][3].is_block_anchor

    def test_zone_block_rejects_overlap(self, small_grid: Grid) -> None:
        small_grid.add_zone(1, 1, ZoneType.RESIDENTIAL)
        assert not small_grid.add_zone_block(0, 0, ZoneType.RESIDENTIAL)
        assert small_grid.cells[0][0].zone is None

    def test_zone_block_rejects_edge(self, small_grid: Grid) -> None:
        assert not small_grid.add_zone_block(7, 0, ZoneType.RESIDENTIAL)

    def test_block_building_resolves_from_members(self, small_grid: Grid) -> None:
        small_grid.add_zone_block(0, 0, ZoneType.RESIDENTIAL)
        building = small_grid.spawn_building(
            0, 0, BuildingKind.RESIDENTIAL_BLOCK, BuildingSize.BLOCK_2X2
        )
        assert building is not None
        assert building.id.startswith("block_building_")
        assert small_grid.cells[1][1].building_id is None
        assert small_grid.building_covering(1, 1) is building
        assert small_grid.is_occupied(1, 0)
        assert small_grid.spawn_building(1, 1, BuildingKind.HOUSE) is None

    def test_place_building_takes_zone(self, small_grid: Grid) -> None:
        building = small_grid.place_building(4, 4, BuildingKind.SHOP)
        assert building is not None
        assert small_grid.cells[4][4].zone is ZoneType.COMMERCIAL

    def test_civic_building_keeps_zone(self, small_grid: Grid) -> None:
        small_grid.add_zone(4, 4, ZoneType.RESIDENTIAL)
        small_grid.place_building(4, 4, BuildingKind.PARK)
        assert small_grid.cells[4][4].zone is ZoneType.RESIDENTIAL

    def test_building_ids_unique(self, small_grid: Grid) -> None:
        a = small_grid.spawn_building(0, 0, BuildingKind.HOUSE)
        b = small_grid.spawn_building(1, 0, BuildingKind.HOUSE)
        assert a is not None and b is not None
        assert a.id != b.id

    def test_sync_id_counter(self, small_grid: Grid) -> None:
        small_grid.spawn_building(0, 0, BuildingKind.HOUSE)
        building = small_grid.buildings.pop("building_1")
        building.id = "building_41"
        small_grid.buildings[building.id] = building
        small_grid.sync_id_counter()
        assert small_grid.next_building_id() == "building_42"

    def test_all_buildings_row_major(self, small_grid: Grid) -> None:
        small_grid.spawn_building(5, 0, BuildingKind.HOUSE)
        small_grid.spawn_building(0, 2, BuildingKind.HOUSE)
        small_grid.spawn_building(1, 0, BuildingKind.HOUSE)
        assert [(b.x, b.y) for b in small_grid.all_buildings()] == [(1, 0), (5, 0), (0, 2)]

    def test_averages_empty(self, small_grid: Grid) -> None:
        assert small_grid.average_happiness() == 0.0
        assert small_grid.average_pollution() == 0.0

    def test_reset(self, small_grid: Grid) -> None:
        small_grid.place_building(1, 1, BuildingKind.HOUSE)
        small_grid.reset()
        assert small_grid.buildings == {}
        assert small_grid.cells[1][1].zone is None
