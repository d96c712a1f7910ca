"""Catalog — the building-kind lookup table.

Every per-kind constant (zone, native size and stats, cost, maintenance,
service effect curve, utility requirements) lives in ``CATALOG`` so that
adding a kind is a data change rather than a new branch in every system.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from cityscape.world.cell import ZoneType


class BuildingSize(Enum):
    """Size class, ordered from smallest to largest."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    BLOCK_2X2 = "block_2x2"


class BuildingKind(Enum):
    """Every structure the simulation knows about."""

    # Grown from zones
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"

    # Placed directly
    HOUSE = "house"
    APARTMENT = "apartment"
    VILLA = "villa"
    SHOP = "shop"
    OFFICE = "office"
    MALL = "mall"
    FACTORY = "factory"
    WAREHOUSE = "warehouse"
    POWERPLANT = "powerplant"
    HOSPITAL = "hospital"
    SCHOOL = "school"
    POLICE = "police"
    PARK = "park"

    # 2x2 blocks
    RESIDENTIAL_BLOCK = "residential_block"
    COMMERCIAL_BLOCK = "commercial_block"
    INDUSTRIAL_BLOCK = "industrial_block"


# Upgrade path; block buildings sit outside it.
UPGRADE_PATH: dict[BuildingSize, BuildingSize] = {
    BuildingSize.SMALL: BuildingSize.MEDIUM,
    BuildingSize.MEDIUM: BuildingSize.LARGE,
}

# Population/jobs/pollution scale relative to a small building.
SIZE_STAT_SCALE: dict[BuildingSize, float] = {
    BuildingSize.SMALL: 1.0,
    BuildingSize.MEDIUM: 2.5,
    BuildingSize.LARGE: 5.0,
    BuildingSize.BLOCK_2X2: 12.0,
}


def _park_effect(distance: float) -> float:
    if distance <= 3:
        return 15.0 * (1.0 - distance / 3.0)
    return 0.0


def _school_effect(distance: float) -> float:
    if distance <= 5:
        return 10.0 * (1.0 - distance / 5.0)
    return 0.0


def _hospital_effect(distance: float) -> float:
    if distance <= 8:
        return 8.0 * (1.0 - distance / 8.0)
    return 0.0


def _powerplant_effect(distance: float) -> float:
    # Noise and smoke next door, a small perk for having power nearby.
    if distance <= 2:
        return -20.0
    if distance <= 5:
        return 5.0 * (1.0 - distance / 5.0)
    return 0.0


@dataclass(frozen=True)
class KindProfile:
    """Static description of one building kind.

    Attributes:
        zone: Economic category, or None for pure civic buildings.
        native_size: Size the kind is built at.
        population: Residents at the native size.
        jobs: Jobs at the native size.
        pollution: Pollution output at the native size.
        happiness_modifier: Flat happiness stat reported for the kind.
        service_radius: Reach of the kind's service, 0 if none.
        base_cost: Construction cost when placed directly.
        maintenance: Upkeep per tick at the native size.
        is_service: Civic building that affects its surroundings.
        effect: Happiness contribution as a function of distance.
        effect_radius: Furthest distance at which ``effect`` is non-zero.
        requires_road: Counts road access toward connectivity.
        requires_power: Counts power access toward connectivity.
        requires_water: Counts water access toward connectivity.
    """

    zone: ZoneType | None
    native_size: BuildingSize
    population: int = 0
    jobs: int = 0
    pollution: int = 0
    happiness_modifier: int = 0
    service_radius: int = 0
    base_cost: int = 0
    maintenance: float = 0.0
    is_service: bool = False
    effect: Callable[[float], float] | None = None
    effect_radius: int = 0
    requires_road: bool = True
    requires_power: bool = True
    requires_water: bool = True


_R = ZoneType.RESIDENTIAL
_C = ZoneType.COMMERCIAL
_I = ZoneType.INDUSTRIAL
_S = BuildingSize

CATALOG: dict[BuildingKind, KindProfile] = {
    BuildingKind.RESIDENTIAL: KindProfile(
        _R, _S.SMALL, population=10, pollution=1, maintenance=10
    ),
    BuildingKind.COMMERCIAL: KindProfile(
        _C, _S.SMALL, jobs=8, pollution=1, maintenance=15
    ),
    BuildingKind.INDUSTRIAL: KindProfile(
        _I, _S.SMALL, jobs=10, pollution=8, maintenance=20
    ),
    BuildingKind.HOUSE: KindProfile(
        _R, _S.SMALL, population=8, pollution=1, base_cost=200, maintenance=10
    ),
    BuildingKind.APARTMENT: KindProfile(
        _R, _S.MEDIUM, population=20, pollution=2, base_cost=350, maintenance=25
    ),
    BuildingKind.VILLA: KindProfile(
        _R, _S.LARGE, population=4, pollution=1, base_cost=500, maintenance=50
    ),
    BuildingKind.SHOP: KindProfile(
        _C, _S.SMALL, jobs=12, pollution=2, base_cost=300, maintenance=15
    ),
    BuildingKind.OFFICE: KindProfile(
        _C, _S.MEDIUM, jobs=25, pollution=1, base_cost=450, maintenance=35
    ),
    BuildingKind.MALL: KindProfile(
        _C, _S.LARGE, jobs=50, pollution=3, base_cost=800, maintenance=75
    ),
    BuildingKind.FACTORY: KindProfile(
        _I, _S.MEDIUM, jobs=35, pollution=15, base_cost=600, maintenance=50
    ),
    BuildingKind.WAREHOUSE: KindProfile(
        _I, _S.SMALL, jobs=15, pollution=5, base_cost=400, maintenance=20
    ),
    BuildingKind.POWERPLANT: KindProfile(
        _I,
        _S.LARGE,
        jobs=20,
        pollution=25,
        base_cost=5000,
        maintenance=200,
        is_service=True,
        effect=_powerplant_effect,
        effect_radius=5,
        requires_power=False,
        requires_water=False,
    ),
    BuildingKind.HOSPITAL: KindProfile(
        None,
        _S.LARGE,
        jobs=30,
        pollution=2,
        service_radius=8,
        base_cost=3000,
        maintenance=150,
        is_service=True,
        effect=_hospital_effect,
        effect_radius=8,
    ),
    BuildingKind.SCHOOL: KindProfile(
        None,
        _S.MEDIUM,
        jobs=15,
        pollution=1,
        service_radius=5,
        base_cost=2000,
        maintenance=100,
        is_service=True,
        effect=_school_effect,
        effect_radius=5,
    ),
    BuildingKind.POLICE: KindProfile(
        _C,
        _S.SMALL,
        jobs=10,
        pollution=1,
        happiness_modifier=10,
        service_radius=10,
        base_cost=1000,
        maintenance=50,
        is_service=True,
    ),
    BuildingKind.PARK: KindProfile(
        None,
        _S.SMALL,
        jobs=2,
        pollution=-2,
        service_radius=3,
        base_cost=500,
        maintenance=25,
        is_service=True,
        effect=_park_effect,
        effect_radius=3,
        requires_road=False,
    ),
    BuildingKind.RESIDENTIAL_BLOCK: KindProfile(
        _R, _S.BLOCK_2X2, population=120, pollution=6, maintenance=60
    ),
    BuildingKind.COMMERCIAL_BLOCK: KindProfile(
        _C, _S.BLOCK_2X2, jobs=96, pollution=8, maintenance=90
    ),
    BuildingKind.INDUSTRIAL_BLOCK: KindProfile(
        _I, _S.BLOCK_2X2, jobs=120, pollution=40, maintenance=120
    ),
}

GROWN_KIND: dict[ZoneType, BuildingKind] = {
    _R: BuildingKind.RESIDENTIAL,
    _C: BuildingKind.COMMERCIAL,
    _I: BuildingKind.INDUSTRIAL,
}

BLOCK_KIND: dict[ZoneType, BuildingKind] = {
    _R: BuildingKind.RESIDENTIAL_BLOCK,
    _C: BuildingKind.COMMERCIAL_BLOCK,
    _I: BuildingKind.INDUSTRIAL_BLOCK,
}

# Largest service reach; bounds the happiness scan for service effects.
MAX_EFFECT_RADIUS = max(p.effect_radius for p in CATALOG.values())


def profile_for(kind: BuildingKind) -> KindProfile:
    """Return the static profile for ``kind``."""
    return CATALOG[kind]
