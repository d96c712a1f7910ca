"""Building — a single structure owned by exactly one anchor cell.

Stats are derived from the kind's catalog profile and the current size
class.  A building only changes by upgrading; there is no downgrade path.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from cityscape.buildings.catalog import (
    BLOCK_KIND,
    GROWN_KIND,
    SIZE_STAT_SCALE,
    UPGRADE_PATH,
    BuildingKind,
    BuildingSize,
    KindProfile,
    profile_for,
)
from cityscape.world.cell import ConnectivityStatus, ZoneType

# Efficiency multipliers applied when a required network is missing.
_ROAD_PENALTY = 0.2
_POWER_PENALTY = 0.3
_WATER_PENALTY = 0.4
_MIN_EFFICIENCY = 0.1


def _scale(value: int, ratio: float) -> int:
    return math.floor(value * ratio + 0.5)


@dataclass
class Building:
    """A structure anchored at ``(x, y)``.

    Attributes:
        id: Unique identifier within the grid.
        x: Anchor column.
        y: Anchor row.
        kind: Catalog entry describing the structure.
        size: Current size class.
        population: Residents housed.
        jobs: Jobs offered.
        pollution: Pollution emitted into the surrounding cells.
        happiness_modifier: Flat happiness stat from the catalog.
        service_radius: Reach of the building's service.
        happiness: Occupant satisfaction, nudged by transport and weather.
    """

    id: str
    x: int
    y: int
    kind: BuildingKind
    size: BuildingSize
    population: int = 0
    jobs: int = 0
    pollution: int = 0
    happiness_modifier: int = 0
    service_radius: int = 0
    happiness: float = 50.0

    @classmethod
    def create(
        cls,
        building_id: str,
        x: int,
        y: int,
        kind: BuildingKind,
        size: BuildingSize | None = None,
    ) -> Building:
        """Build a structure with stats derived for ``size``.

        Args:
            building_id: Unique id for the new building.
            x: Anchor column.
            y: Anchor row.
            kind: Which catalog entry to instantiate.
            size: Size class; defaults to the kind's native size.

        Returns:
            The new Building.
        """
        profile = profile_for(kind)
        building = cls(
            id=building_id,
            x=x,
            y=y,
            kind=kind,
            size=size or profile.native_size,
        )
        building.recompute_stats()
        return building

    @property
    def profile(self) -> KindProfile:
        return profile_for(self.kind)

    @property
    def zone(self) -> ZoneType | None:
        return self.profile.zone

    @property
    def is_block(self) -> bool:
        return self.size is BuildingSize.BLOCK_2X2

    @property
    def footprint(self) -> int:
        """Edge length of the square the building covers."""
        return 2 if self.is_block else 1

    @property
    def is_service(self) -> bool:
        return self.profile.is_service

    @property
    def is_power_source(self) -> bool:
        return self.kind is BuildingKind.POWERPLANT

    @property
    def can_upgrade(self) -> bool:
        return self.size in UPGRADE_PATH

    def recompute_stats(self) -> None:
        """Derive population, jobs and pollution for the current size."""
        profile = self.profile
        ratio = SIZE_STAT_SCALE[self.size] / SIZE_STAT_SCALE[profile.native_size]
        self.population = _scale(profile.population, ratio)
        self.jobs = _scale(profile.jobs, ratio)
        self.pollution = _scale(profile.pollution, ratio)
        self.happiness_modifier = profile.happiness_modifier
        self.service_radius = profile.service_radius

    def upgrade(self) -> bool:
        """Advance one size class.

        Returns:
            True if the building grew, False if it is already at its
            largest size or is a block building.
        """
        next_size = UPGRADE_PATH.get(self.size)
        if next_size is None:
            return False
        self.size = next_size
        self.recompute_stats()
        return True

    def maintenance_cost(self) -> float:
        """Upkeep per tick, scaled with size like the other stats."""
        profile = self.profile
        ratio = SIZE_STAT_SCALE[self.size] / SIZE_STAT_SCALE[profile.native_size]
        return profile.maintenance * ratio

    def service_effect(self, distance: float) -> float:
        """Happiness contribution of this building at ``distance``."""
        effect = self.profile.effect
        if effect is None:
            return 0.0
        return effect(distance)

    # -- Connectivity --------------------------------------------------------

    def _requirements(
        self,
        road: bool,
        power: bool,
        water: bool,
    ) -> list[tuple[bool, float]]:
        profile = self.profile
        checks = []
        if profile.requires_road:
            checks.append((road, _ROAD_PENALTY))
        if profile.requires_power:
            checks.append((power, _POWER_PENALTY))
        if profile.requires_water:
            checks.append((water, _WATER_PENALTY))
        return checks

    def connectivity_status(
        self,
        road: bool,
        power: bool,
        water: bool,
    ) -> ConnectivityStatus:
        """Classify access to the networks this kind requires.

        Bright when every required network is reachable, dim when at
        least half are, dark otherwise.
        """
        checks = self._requirements(road, power, water)
        satisfied = sum(1 for ok, _ in checks if ok)
        if satisfied == len(checks):
            return ConnectivityStatus.BRIGHT
        if satisfied >= len(checks) * 0.5:
            return ConnectivityStatus.DIM
        return ConnectivityStatus.DARK

    def infrastructure_efficiency(
        self,
        road: bool,
        power: bool,
        water: bool,
    ) -> float:
        """Output multiplier from network access, floored at 0.1.

        The fraction of required networks reached is multiplied down once
        per missing network (road x0.2, power x0.3, water x0.4).
        """
        checks = self._requirements(road, power, water)
        if not checks:
            return 1.0
        satisfied = sum(1 for ok, _ in checks if ok)
        efficiency = satisfied / len(checks)
        for ok, penalty in checks:
            if not ok:
                efficiency *= penalty
        return max(_MIN_EFFICIENCY, efficiency)

    # -- Records -------------------------------------------------------------

    def to_record(self) -> dict[str, Any]:
        """Serialise to the plain BuildingRecord shape used by snapshots."""
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "type": self.zone.value if self.zone else None,
            "buildingType": self.kind.value,
            "size": self.size.value,
            "population": self.population,
            "jobs": self.jobs,
            "pollution": self.pollution,
            "happiness": self.happiness,
            "serviceRange": self.service_radius,
            "isBlock": self.is_block,
            "blockWidth": self.footprint,
            "blockHeight": self.footprint,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Building | None:
        """Rebuild a Building from a BuildingRecord.

        Records without a ``buildingType`` are treated as zone-grown
        buildings of their ``type``.  Stored stats take precedence over
        the catalog so that hand-edited snapshots round-trip.

        Returns:
            The Building, or None if the record names no known kind.
        """
        try:
            size = BuildingSize(record["size"]) if record.get("size") else None
            if record.get("buildingType"):
                kind = BuildingKind(record["buildingType"])
            else:
                zone = ZoneType(record["type"])
                table = BLOCK_KIND if size is BuildingSize.BLOCK_2X2 else GROWN_KIND
                kind = table[zone]
        except (KeyError, ValueError):
            return None

        building = cls.create(
            str(record.get("id") or ""),
            int(record.get("x", 0)),
            int(record.get("y", 0)),
            kind,
            size,
        )
        for key in ("population", "jobs", "pollution"):
            if record.get(key) is not None:
                setattr(building, key, int(record[key]))
        if record.get("serviceRange") is not None:
            building.service_radius = int(record["serviceRange"])
        if record.get("happiness") is not None:
            building.happiness = float(record["happiness"])
        return building
