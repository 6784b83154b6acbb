"""Shared fixtures for the Humus test suite."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.random import Generator

from humus.grid.index import GridIndex
from humus.simulation.config import SoilConfig
from humus.simulation.engine import SoilSimulation
from humus.soil.fields import FieldKind, SoilFields


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def small_grid() -> GridIndex:
    """An 8x8 grid of unit cells spanning [-4, 4) on both axes."""
    return GridIndex(grid_size=8, cell_size=1.0)


@pytest.fixture
def small_fields() -> SoilFields:
    """Zeroed 8x8 soil fields."""
    return SoilFields(grid_size=8)


@pytest.fixture
def default_config() -> SoilConfig:
    """Default soil config (no YAML file needed)."""
    return SoilConfig()


@pytest.fixture
def small_config() -> SoilConfig:
    """An 8x8 config for fast tests."""
    return SoilConfig(grid_size=8)


@pytest.fixture
def small_soil(small_config: SoilConfig) -> SoilSimulation:
    """An 8x8 simulation with the wave baseline and no signals."""
    return SoilSimulation(config=small_config)


@pytest.fixture
def hot_cell_soil() -> SoilSimulation:
    """A 4x4 soil with one hot cell and no evaporation.

    Moisture is 10 everywhere except 50 at storage ``(row 1, col 1)``,
    which is cell ``(-1, -1)`` with its centre at world ``(-0.5, -0.5)``.
    Nitrogen is a uniform 10.
    """
    soil = SoilSimulation(
        config=SoilConfig(grid_size=4, cell_size=1.0, evaporation_rate=0.0),
    )
    moisture = np.full((4, 4), 10.0)
    moisture[1, 1] = 50.0
    soil.load_field(FieldKind.MOISTURE, moisture)
    soil.load_field(FieldKind.NITROGEN, np.full((4, 4), 10.0))
    return soil
