"""Tests for cityscape.buildings — catalog, stats, upgrades and records."""

import pytest

from cityscape.buildings.building import Building
from cityscape.buildings.catalog import (
    CATALOG,
    MAX_EFFECT_RADIUS,
    BuildingKind,
    BuildingSize,
    profile_for,
)
from cityscape.world.cell import ConnectivityStatus, ZoneType


class TestCatalog:
    """Tests for the kind lookup table."""

    def test_every_kind_has_a_profile(self) -> None:
        assert set(CATALOG) == set(BuildingKind)

    def test_max_effect_radius(self) -> None:
        assert MAX_EFFECT_RADIUS == 8

    def test_park_effect_falls_off(self) -> None:
        park = profile_for(BuildingKind.PARK)
        assert park.effect is not None
        assert park.effect(0) == pytest.approx(15.0)
        assert park.effect(1.5) == pytest.approx(7.5)
        assert park.effect(3.5) == 0.0

    def test_powerplant_nuisance(self) -> None:
        plant = profile_for(BuildingKind.POWERPLANT)
        assert plant.effect is not None
        assert plant.effect(1) == -20.0
        assert plant.effect(3) == pytest.approx(2.0)
        assert plant.effect(6) == 0.0


class TestBuildingStats:
    """Tests for derived stats and upgrades."""

    def test_native_size(self) -> None:
        house = Building.create("b1", 0, 0, BuildingKind.HOUSE)
        assert house.size is BuildingSize.SMALL
        assert house.population == 8
        assert house.zone is ZoneType.RESIDENTIAL

    def test_upgrade_scales_stats(self) -> None:
        building = Building.create("b1", 0, 0, BuildingKind.RESIDENTIAL)
        assert building.population == 10
        assert building.upgrade()
        assert building.size is BuildingSize.MEDIUM
        assert building.population == 25
        assert building.upgrade()
        assert building.size is BuildingSize.LARGE
        assert building.population == 50

    def test_large_does_not_upgrade(self) -> None:
        building = Building.create("b1", 0, 0, BuildingKind.MALL)
        assert not building.can_upgrade
        assert not building.upgrade()
        assert building.size is BuildingSize.LARGE

    def test_block_never_upgrades(self) -> None:
        block = Building.create(
            "b1", 0, 0, BuildingKind.COMMERCIAL_BLOCK, BuildingSize.BLOCK_2X2
        )
        assert block.is_block
        assert block.footprint == 2
        assert not block.upgrade()
        assert block.size is BuildingSize.BLOCK_2X2

    def test_maintenance_scales_with_size(self) -> None:
        building = Building.create("b1", 0, 0, BuildingKind.INDUSTRIAL)
        assert building.maintenance_cost() == pytest.approx(20.0)
        building.upgrade()
        assert building.maintenance_cost() == pytest.approx(50.0)

    def test_service_effect_for_plain_building(self) -> None:
        house = Building.create("b1", 0, 0, BuildingKind.HOUSE)
        assert house.service_effect(0) == 0.0


class TestBuildingConnectivity:
    """Tests for status and efficiency from network access."""

    def test_fully_connected(self) -> None:
        house = Building.create("b1", 0, 0, BuildingKind.HOUSE)
        assert house.connectivity_status(True, True, True) is ConnectivityStatus.BRIGHT
        assert house.infrastructure_efficiency(True, True, True) == 1.0

    def test_missing_water(self) -> None:
        house = Building.create("b1", 0, 0, BuildingKind.HOUSE)
        assert house.connectivity_status(True, True, False) is ConnectivityStatus.DIM
        assert house.infrastructure_efficiency(True, True, False) == pytest.approx(2 / 3 * 0.4)

    def test_efficiency_floor(self) -> None:
        house = Building.create("b1", 0, 0, BuildingKind.HOUSE)
        assert house.connectivity_status(True, False, False) is ConnectivityStatus.DARK
        assert house.infrastructure_efficiency(True, False, False) == pytest.approx(0.1)
        assert house.infrastructure_efficiency(False, False, False) == pytest.approx(0.1)

    def test_park_needs_no_road(self) -> None:
        park = Building.create("b1", 0, 0, BuildingKind.PARK)
        assert park.connectivity_status(False, True, True) is ConnectivityStatus.BRIGHT
        assert park.infrastructure_efficiency(False, True, True) == 1.0

    def test_powerplant_only_needs_road(self) -> None:
        plant = Building.create("b1", 0, 0, BuildingKind.POWERPLANT)
        assert plant.connectivity_status(True, False, False) is ConnectivityStatus.BRIGHT


class TestBuildingRecords:
    """Tests for the BuildingRecord shape."""

    def test_record_keys(self) -> None:
        record = Building.create("b7", 2, 3, BuildingKind.OFFICE).to_record()
        assert record["id"] == "b7"
        assert record["type"] == "commercial"
        assert record["buildingType"] == "office"
        assert record["size"] == "medium"
        assert record["isBlock"] is False
        assert record["blockWidth"] == 1

    def test_from_record_restores_state(self) -> None:
        original = Building.create("b7", 2, 3, BuildingKind.FACTORY)
        original.happiness = 71.0
        restored = Building.from_record(original.to_record())
        assert restored == original

    def test_from_record_without_building_type(self) -> None:
        restored = Building.from_record(
            {"id": "b1", "x": 0, "y": 0, "type": "industrial", "size": "block_2x2"}
        )
        assert restored is not None
        assert restored.kind is BuildingKind.INDUSTRIAL_BLOCK

    def test_from_record_rejects_unknown(self) -> None:
        assert Building.from_record({"id": "b1", "buildingType": "castle"}) is None
        assert Building.from_record({"id": "b1"}) is None
