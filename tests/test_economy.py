"""Tests for cityscape.systems.economy."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from cityscape.buildings.catalog import BuildingKind, BuildingSize
from cityscape.systems import economy
from cityscape.world.cell import ConnectivityResult, ConnectivityStatus, Infrastructure, ZoneType
from cityscape.world.grid import Grid


@pytest.fixture
def mixed_town(small_grid: Grid) -> Grid:
    """One small building of each grown kind, no utilities."""
    small_grid.spawn_building(0, 0, BuildingKind.RESIDENTIAL)
    small_grid.spawn_building(1, 0, BuildingKind.COMMERCIAL)
    small_grid.spawn_building(2, 0, BuildingKind.INDUSTRIAL)
    return small_grid


class TestTaxRevenue:
    """Tests for tax collection."""

    def test_without_grid_context(self, mixed_town: Grid) -> None:
        # 10*100*0.05 + 8*200*0.08 + 10*150*0.06
        assert economy.tax_revenue(mixed_town.all_buildings()) == 268

    def test_size_multiplier(self, small_grid: Grid) -> None:
        building = small_grid.spawn_building(0, 0, BuildingKind.RESIDENTIAL)
        assert building is not None
        building.upgrade()
        # 25 residents * 100 * 0.05 * 2.5
        assert economy.tax_revenue([building]) == 312

    def test_block_multiplier(self, small_grid: Grid) -> None:
        block = small_grid.spawn_building(
            0, 0, BuildingKind.RESIDENTIAL_BLOCK, BuildingSize.BLOCK_2X2
        )
        assert block is not None
        assert economy.tax_revenue([block]) == 120 * 100 * 0.05 * 6

    def test_civic_buildings_pay_nothing(self, small_grid: Grid) -> None:
        park = small_grid.place_building(0, 0, BuildingKind.PARK)
        assert park is not None
        assert economy.tax_revenue([park]) == 0

    def test_grid_scales_by_efficiency(self, mixed_town: Grid) -> None:
        # No utilities anywhere: every building runs at the 0.1 floor.
        assert economy.tax_revenue(mixed_town.all_buildings(), mixed_town) == 26

    def test_grid_uses_connectivity_annotation(self, small_grid: Grid) -> None:
        building = small_grid.spawn_building(0, 0, BuildingKind.RESIDENTIAL)
        assert building is not None
        small_grid.cells[0][0].connectivity = ConnectivityResult(
            True, True, False, ConnectivityStatus.DIM, 0.5
        )
        assert economy.tax_revenue([building], small_grid) == 25

    def test_unplaced_building_runs_at_half(self, small_grid: Grid) -> None:
        other = Grid(width=2, height=2)
        building = other.spawn_building(1, 1, BuildingKind.RESIDENTIAL)
        assert building is not None
        assert economy.building_efficiency(building, small_grid) == 0.5


class TestAggregates:
    """Tests for population, employment, costs and rating."""

    def test_population_and_employment(self, mixed_town: Grid) -> None:
        buildings = mixed_town.all_buildings()
        assert economy.total_population(buildings) == 10
        assert economy.employment_rate(buildings) == 100.0

    def test_employment_without_population(self, small_grid: Grid) -> None:
        small_grid.spawn_building(0, 0, BuildingKind.SHOP)
        assert economy.employment_rate(small_grid.all_buildings()) == 0.0

    def test_average_income(self, mixed_town: Grid) -> None:
        assert economy.average_income(mixed_town.all_buildings()) == 536
        assert economy.average_income([]) == 0

    def test_maintenance(self, mixed_town: Grid) -> None:
        assert economy.maintenance_costs(mixed_town.all_buildings()) == 45

    def test_infrastructure_costs(self, small_grid: Grid, lay: Callable[..., None]) -> None:
        lay(small_grid, 0, 0)
        assert economy.infrastructure_costs(small_grid) == 22
        small_grid.add_infrastructure(1, 1, Infrastructure.ROAD)
        assert economy.infrastructure_costs(small_grid) == 27

    def test_city_rating(self, mixed_town: Grid) -> None:
        buildings = mixed_town.all_buildings()
        # 50 + 0.1 + 0 + 10 - 0 + 0.3
        assert economy.city_rating(buildings, 50.0, 100.0, 0.0) == 60

    def test_city_rating_clamped(self) -> None:
        assert economy.city_rating([], 0.0, 0.0, 100.0) == 0

    def test_economic_stats(self, mixed_town: Grid) -> None:
        stats = economy.calculate_economic_stats(mixed_town, 50.0, 0.0, use_efficiency=False)
        assert stats.total_population == 10
        assert stats.total_tax_revenue == 268
        assert stats.average_income == 536
        assert stats.maintenance_costs == 45
        assert stats.city_rating == 60
        assert stats.infrastructure_costs == 0

    def test_empty_city(self, small_grid: Grid) -> None:
        stats = economy.calculate_economic_stats(small_grid, 0.0, 0.0)
        assert stats.total_population == 0
        assert stats.total_tax_revenue == 0
        assert stats.employment_rate == 0.0


class TestCosts:
    """Tests for placement prices."""

    def test_zone_costs(self) -> None:
        assert economy.zone_cost(ZoneType.RESIDENTIAL) == 100
        assert economy.block_zone_cost(ZoneType.INDUSTRIAL) == 800

    def test_infrastructure_costs(self) -> None:
        assert economy.infrastructure_cost(Infrastructure.POWER) == 20

    def test_building_costs(self) -> None:
        assert economy.building_cost(BuildingKind.POWERPLANT) == 5000
        assert economy.building_cost(BuildingKind.PARK) == 500
