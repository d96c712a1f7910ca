"""Shared fixtures for the Cityscape test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import numpy as np
import pytest
from numpy.random import Generator

from cityscape.simulation.config import SimulationConfig
from cityscape.world.cell import BASIC_INFRASTRUCTURE, Infrastructure
from cityscape.world.grid import Grid


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def small_grid() -> Grid:
    """A small 8x8 grid for fast tests."""
    return Grid(width=8, height=8)


@pytest.fixture
def default_config() -> SimulationConfig:
    """Default simulation config (no YAML file needed)."""
    return SimulationConfig()


@pytest.fixture
def lay() -> Callable[..., None]:
    """Helper that puts utility flags on a cell (all three by default)."""

    def _lay(
        grid: Grid,
        x: int,
        y: int,
        infra: Iterable[Infrastructure] = BASIC_INFRASTRUCTURE,
    ) -> None:
        for flag in infra:
            grid.add_infrastructure(x, y, flag)

    return _lay
