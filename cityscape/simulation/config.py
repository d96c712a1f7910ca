"""Config — load simulation parameters from YAML files.

Grid size, treasury, power and connectivity tuning all live in YAML and
are parsed into a typed dataclass here.  Anything a file leaves out keeps
its default.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from cityscape.systems import connectivity, power
from cityscape.world.cell import Infrastructure


@dataclass
class SimulationConfig:
    """Top-level simulation configuration.

    Attributes:
        seed: RNG seed for deterministic replay.
        grid_width: Number of grid columns.
        grid_height: Number of grid rows.
        starting_money: Treasury balance of a new city.
        tick_interval: Seconds between ticks when the host runs in real time.
        plant_capacity: Output of each power plant.
        transmission_range: Furthest a consumer may be from its plant.
        base_power_demand: Demand of a small, ordinary building.
        overload_threshold: Load factor above which the power grid is
            reported overloaded.
        weather_change_chance: Per-tick chance of an early weather change.
        road_radius: Road detection radius for connectivity scoring.
        power_radius: Power-line detection radius for connectivity scoring.
        water_radius: Water-pipe detection radius for connectivity scoring.
    """

    seed: int = 42
    grid_width: int = 50
    grid_height: int = 30
    starting_money: int = 10000
    tick_interval: float = 3.0

    # Power flow
    plant_capacity: float = power.PLANT_CAPACITY
    transmission_range: float = power.TRANSMISSION_RANGE
    base_power_demand: float = power.BASE_POWER_DEMAND
    overload_threshold: float = power.OVERLOAD_THRESHOLD

    weather_change_chance: float = 0.3

    # Connectivity detection radii
    road_radius: float = connectivity.ROAD_RADIUS
    power_radius: float = connectivity.POWER_RADIUS
    water_radius: float = connectivity.WATER_RADIUS

    def __post_init__(self) -> None:
        if self.grid_width <= 0 or self.grid_height <= 0:
            raise ValueError(
                f"grid dimensions must be positive, got "
                f"{self.grid_width}x{self.grid_height}"
            )
        if self.tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {self.tick_interval}")
        if not 0.0 <= self.weather_change_chance <= 1.0:
            raise ValueError(
                f"weather_change_chance must be in [0, 1], got "
                f"{self.weather_change_chance}"
            )

    @property
    def connectivity_radii(self) -> dict[Infrastructure, float]:
        return {
            Infrastructure.ROAD: self.road_radius,
            Infrastructure.POWER: self.power_radius,
            Infrastructure.WATER: self.water_radius,
        }

    @classmethod
    def from_yaml(cls, path: str | Path) -> SimulationConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated SimulationConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
            ValueError: If a value is out of range.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        return cls(
            seed=data.get("seed", cls.seed),
            grid_width=data.get("grid_width", cls.grid_width),
            grid_height=data.get("grid_height", cls.grid_height),
            starting_money=data.get("starting_money", cls.starting_money),
            tick_interval=data.get("tick_interval", cls.tick_interval),
            plant_capacity=data.get("plant_capacity", cls.plant_capacity),
            transmission_range=data.get(
                "transmission_range",
                cls.transmission_range,
            ),
            base_power_demand=data.get(
                "base_power_demand",
                cls.base_power_demand,
            ),
            overload_threshold=data.get(
                "overload_threshold",
                cls.overload_threshold,
            ),
            weather_change_chance=data.get(
                "weather_change_chance",
                cls.weather_change_chance,
            ),
            road_radius=data.get("road_radius", cls.road_radius),
            power_radius=data.get("power_radius", cls.power_radius),
            water_radius=data.get("water_radius", cls.water_radius),
        )
