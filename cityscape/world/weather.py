"""Weather — city-wide conditions that nudge happiness, pollution and growth.

``WeatherState`` is an immutable value: the orchestrator passes the current
state into each tick and keeps the state returned from it.  Nothing here is
module-level mutable state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING

from cityscape.world.cell import ZoneType

if TYPE_CHECKING:
    from numpy.random import Generator

    from cityscape.world.grid import Grid

log = logging.getLogger(__name__)


class WeatherKind(Enum):
    """Possible weather conditions."""

    SUNNY = "sunny"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    STORMY = "stormy"
    FOGGY = "foggy"


@dataclass(frozen=True)
class WeatherEffect:
    """Per-kind coefficients.

    Attributes:
        duration: Ticks the weather lasts before it must change.
        happiness: Added to every building's happiness each tick.
        pollution: Added to every zoned cell's pollution each tick.
        growth: Probability that growth is permitted on a tick.
        description: Short text for status displays.
    """

    duration: int
    happiness: float
    pollution: float
    growth: float
    description: str


WEATHER_EFFECTS: dict[WeatherKind, WeatherEffect] = {
    WeatherKind.SUNNY: WeatherEffect(
        5, 5.0, -2.0, 1.2, "Beautiful sunny weather boosts city morale"
    ),
    WeatherKind.CLOUDY: WeatherEffect(
        3, 0.0, 0.0, 1.0, "Overcast skies have neutral effects"
    ),
    WeatherKind.RAINY: WeatherEffect(
        4, -3.0, -5.0, 0.8, "Rain reduces pollution but dampens spirits"
    ),
    WeatherKind.STORMY: WeatherEffect(
        2, -8.0, -10.0, 0.5, "Severe storms cause damage and reduce growth"
    ),
    WeatherKind.FOGGY: WeatherEffect(
        3, -2.0, 3.0, 0.9, "Fog traps pollution and reduces visibility"
    ),
}

# Zone sensitivity to the weather's happiness delta.
_ZONE_SENSITIVITY: dict[ZoneType, float] = {
    ZoneType.RESIDENTIAL: 1.5,
    ZoneType.COMMERCIAL: 1.0,
    ZoneType.INDUSTRIAL: 0.5,
}


@dataclass(frozen=True)
class WeatherState:
    """Current weather and how long it has left.

    Attributes:
        kind: Active weather.
        remaining: Ticks until the weather is forced to change.
        change_chance: Per-tick probability of an early change.
    """

    kind: WeatherKind = WeatherKind.SUNNY
    remaining: int = WEATHER_EFFECTS[WeatherKind.SUNNY].duration
    change_chance: float = 0.3

    @property
    def effect(self) -> WeatherEffect:
        return WEATHER_EFFECTS[self.kind]

    @property
    def is_severe(self) -> bool:
        return self.kind is WeatherKind.STORMY

    def forced(self, kind: WeatherKind, duration: int | None = None) -> WeatherState:
        """Return a state with ``kind`` set, e.g. for special events."""
        return replace(
            self,
            kind=kind,
            remaining=duration or WEATHER_EFFECTS[kind].duration,
        )


def _random_kind(rng: Generator) -> WeatherKind:
    kinds = list(WeatherKind)
    return kinds[int(rng.integers(0, len(kinds)))]


def advance_weather(state: WeatherState, rng: Generator) -> WeatherState:
    """Advance the weather by one tick.

    The remaining duration is decremented; when it runs out, or when the
    per-tick change roll succeeds, a uniformly random kind takes over
    with its full duration.

    Args:
        state: Weather at the start of the tick.
        rng: Seeded random generator.

    Returns:
        The weather for this tick.
    """
    remaining = state.remaining - 1
    if remaining <= 0 or rng.random() < state.change_chance:
        kind = _random_kind(rng)
        log.debug("weather changed %s -> %s", state.kind.value, kind.value)
        return replace(state, kind=kind, remaining=WEATHER_EFFECTS[kind].duration)
    return replace(state, remaining=remaining)


def growth_permitted(state: WeatherState, rng: Generator) -> bool:
    """Draw once against the weather's growth multiplier.

    Multipliers at or above 1.0 always permit growth.
    """
    return bool(rng.random() < state.effect.growth)


def apply_weather_effects(grid: Grid, state: WeatherState) -> None:
    """Apply the weather deltas across the grid.

    Building happiness and zoned-cell pollution move by the weather's
    deltas, clamped to ``[0, 100]``.  Unzoned cells are left untouched.
    """
    effect = state.effect
    for cell in grid.iter_cells():
        if cell.zone is not None:
            cell.set_pollution(cell.pollution + effect.pollution)
        building = grid.building_of(cell)
        if building is not None:
            building.happiness = max(
                0.0, min(100.0, building.happiness + effect.happiness)
            )


def zone_weather_impact(state: WeatherState, zone: ZoneType | None) -> float:
    """Happiness delta scaled by how sensitive ``zone`` is to weather."""
    if zone is None:
        return 0.0
    return state.effect.happiness * _ZONE_SENSITIVITY[zone]


def forecast(state: WeatherState, rng: Generator, turns: int = 3) -> list[WeatherKind]:
    """Predict the next ``turns`` weather kinds.

    Only duration expiry is simulated; early random changes are not.
    """
    result: list[WeatherKind] = []
    kind = state.kind
    remaining = state.remaining
    for _ in range(turns):
        if remaining > 0:
            remaining -= 1
        else:
            kind = _random_kind(rng)
            remaining = WEATHER_EFFECTS[kind].duration - 1
        result.append(kind)
    return result
