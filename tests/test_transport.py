"""Tests for cityscape.systems.transport."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from cityscape.buildings.catalog import BuildingKind
from cityscape.systems.transport import (
    apply_transport_effects,
    connectivity_score,
    find_optimal_location,
    is_well_connected,
    job_accessibility,
    placement_score,
    supply_chain_efficiency,
    transport_efficiency,
    transport_stats,
)
from cityscape.world.cell import Infrastructure, ZoneType
from cityscape.world.grid import Grid


class TestScores:
    """Tests for connectivity and efficiency scores."""

    def test_connectivity_score(self, small_grid: Grid, lay: Callable[..., None]) -> None:
        lay(small_grid, 3, 3)
        small_grid.add_infrastructure(4, 3, Infrastructure.ROAD)
        # Three flags at distance 0, one at distance 1.
        assert connectivity_score(small_grid, 3, 3) == pytest.approx(3.0 + 0.8)

    def test_dense_grid_is_well_connected(self) -> None:
        grid = Grid(width=11, height=11)
        for cell in grid.iter_cells():
            for infra in Infrastructure:
                grid.add_infrastructure(cell.x, cell.y, infra)
        score = connectivity_score(grid, 5, 5)
        assert 30.0 < score <= 100.0
        assert is_well_connected(grid, 5, 5)
        # The corner sees a quarter of the disc.
        assert connectivity_score(grid, 0, 0) < score

    def test_isolated_cell(self, small_grid: Grid) -> None:
        assert connectivity_score(small_grid, 3, 3) == 0.0
        assert not is_well_connected(small_grid, 3, 3)

    def test_transport_efficiency(self, small_grid: Grid) -> None:
        small_grid.add_infrastructure(3, 3, Infrastructure.ROAD)
        cell = small_grid.cells[3][3]
        assert transport_efficiency(small_grid, cell) == pytest.approx(0.81)
        small_grid.add_infrastructure(3, 3, Infrastructure.POWER)
        assert transport_efficiency(small_grid, cell) == 1.0

    def test_efficiency_cache(self, small_grid: Grid) -> None:
        cache: dict[tuple[int, int], float] = {}
        cell = small_grid.cells[0][0]
        transport_efficiency(small_grid, cell, cache)
        assert cache == {(0, 0): 0.0}


class TestAccessibility:
    """Tests for job, service and supply reach."""

    def test_job_accessibility(self, small_grid: Grid) -> None:
        small_grid.place_building(2, 2, BuildingKind.MALL)
        small_grid.add_infrastructure(2, 2, Infrastructure.ROAD)
        small_grid.add_infrastructure(2, 2, Infrastructure.POWER)
        # 50 jobs at distance 0 with full transport efficiency.
        assert job_accessibility(small_grid, 2, 2) == 50

    def test_job_accessibility_needs_transport(self, small_grid: Grid) -> None:
        small_grid.place_building(2, 2, BuildingKind.MALL)
        assert job_accessibility(small_grid, 2, 2) == 0

    def test_supply_chain(self, small_grid: Grid, lay: Callable[..., None]) -> None:
        small_grid.place_building(2, 2, BuildingKind.FACTORY)
        lay(small_grid, 2, 2)
        assert supply_chain_efficiency(small_grid, 2, 2) == pytest.approx(0.1)


class TestTransportEffects:
    """Tests for the happiness nudge on buildings."""

    def test_isolation_penalty(self, small_grid: Grid) -> None:
        house = small_grid.place_building(3, 3, BuildingKind.HOUSE)
        assert house is not None
        small_grid.cells[3][3].happiness = 50.0
        assert apply_transport_effects(small_grid) == 1
        assert house.happiness == 40.0
        # Cell happiness is left alone.
        assert small_grid.cells[3][3].happiness == 50.0

    def test_clamped(self, small_grid: Grid) -> None:
        house = small_grid.place_building(3, 3, BuildingKind.HOUSE)
        assert house is not None
        small_grid.cells[3][3].happiness = 5.0
        apply_transport_effects(small_grid)
        assert house.happiness == 0.0

    def test_stats(self, small_grid: Grid, lay: Callable[..., None]) -> None:
        small_grid.add_zone(0, 0, ZoneType.RESIDENTIAL)
        small_grid.add_zone(7, 7, ZoneType.RESIDENTIAL)
        lay(small_grid, 0, 0)
        stats = transport_stats(small_grid)
        assert stats.total_infrastructure == 3
        assert stats.isolated_zones == 2
        assert stats.average_connectivity == pytest.approx(1.5)

    def test_stats_empty(self, small_grid: Grid) -> None:
        stats = transport_stats(small_grid)
        assert stats.average_connectivity == 0.0
        assert stats.transport_efficiency == 0.0


class TestPlacement:
    """Tests for the infrastructure placement search."""

    def test_placement_score(self, small_grid: Grid) -> None:
        small_grid.add_zone(2, 2, ZoneType.RESIDENTIAL)
        assert placement_score(small_grid, 2, 2, Infrastructure.ROAD) == 10.0
        assert placement_score(small_grid, 7, 7, Infrastructure.ROAD) == 0.0

    def test_optimal_location(self, small_grid: Grid) -> None:
        small_grid.add_zone(2, 2, ZoneType.RESIDENTIAL)
        best = find_optimal_location(small_grid, Infrastructure.WATER)
        assert best is not None
        assert (best.x, best.y) == (2, 2)
        assert best.score == 10.0

    def test_no_location_left(self) -> None:
        grid = Grid(width=2, height=1)
        grid.add_infrastructure(0, 0, Infrastructure.ROAD)
        grid.add_infrastructure(1, 0, Infrastructure.ROAD)
        assert find_optimal_location(grid, Infrastructure.ROAD) is None
