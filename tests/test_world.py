"""Tests for humus.world — environment signals and actors."""

import numpy as np
import pytest
from numpy.random import Generator

from humus.simulation.config import SoilConfig
from humus.simulation.engine import SoilSimulation
from humus.soil.fields import FieldKind
from humus.world.actors import Decomposer, Hose, Root
from humus.world.environment import Environment


def _flat_soil(value: float = 10.0) -> SoilSimulation:
    soil = SoilSimulation(config=SoilConfig(grid_size=8))
    soil.load_field(FieldKind.MOISTURE, np.full((8, 8), value))
    soil.load_field(FieldKind.NITROGEN, np.full((8, 8), value))
    return soil


class TestEnvironment:
    """Tests for the day cycle, rain, and shade."""

    def test_daytime_window(self) -> None:
        env = Environment(time_of_day=0.5)
        assert env.is_daytime
        env.time_of_day = 0.1
        assert not env.is_daytime
        env.time_of_day = 0.9
        assert not env.is_daytime

    def test_clock_wraps(self, rng: Generator) -> None:
        env = Environment(day_length=10.0, time_of_day=0.95, rain_chance=0.0)
        env.update(1.0, rng)
        assert env.time_of_day == pytest.approx(0.05)
        assert env.elapsed == 1.0

    def test_no_light_at_night(self) -> None:
        env = Environment(time_of_day=0.1)
        assert env.light_exposure(0.0, 0.0) == 0.0

    def test_light_peaks_midday(self) -> None:
        env = Environment(time_of_day=0.55)
        assert env.light_exposure(0.0, 0.0) == pytest.approx(1.0)

    def test_shade_blocks_light(self) -> None:
        env = Environment(time_of_day=0.5)
        env.add_shade(2.0, 2.0, 1.0)
        assert env.light_exposure(2.5, 2.0) == 0.0
        assert env.light_exposure(-2.0, -2.0) > 0.0
        env.clear_shade()
        assert env.light_exposure(2.5, 2.0) > 0.0

    def test_rain_starts_and_decays(self, rng: Generator) -> None:
        env = Environment(rain_chance=1.0, rain_decay=0.1)
        env.update(0.1, rng)
        start = env.rain_intensity()
        assert 0.2 <= start <= 1.0
        env.update(0.1, rng)
        assert env.rain_intensity() == pytest.approx(start - 0.1)

    def test_dry_when_chance_zero(self, rng: Generator) -> None:
        env = Environment(rain_chance=0.0)
        for _ in range(100):
            env.update(0.1, rng)
        assert env.rain_intensity() == 0.0


class TestHose:
    def test_adds_rate_times_dt(self) -> None:
        soil = _flat_soil()
        Hose(x=0.5, z=0.5, rate=20.0).update(soil, 0.1)
        assert soil.get_moisture_at(0.5, 0.5) == pytest.approx(12.0)

    def test_off_grid_hose_does_nothing(self) -> None:
        soil = _flat_soil()
        before = soil.get_total_moisture()
        Hose(x=50.0, z=0.0).update(soil, 0.1)
        assert soil.get_total_moisture() == before


class TestDecomposer:
    def test_releases_all_nitrogen(self) -> None:
        soil = _flat_soil(0.0)
        heap = Decomposer(x=0.5, z=0.5, nitrogen_total=40.0, decay_rate=10.0)
        ticks = 0
        while not heap.finished:
            heap.update(soil, 0.1)
            ticks += 1
        assert ticks == 100
        assert heap.released == pytest.approx(40.0)
        assert soil.get_nitrogen_at(0.5, 0.5) == pytest.approx(40.0, rel=1e-5)

    def test_finished_heap_is_inert(self) -> None:
        soil = _flat_soil(0.0)
        heap = Decomposer(x=0.5, z=0.5, nitrogen_total=10.0, progress=100.0)
        heap.update(soil, 0.1)
        assert soil.get_nitrogen_at(0.5, 0.5) == 0.0


class TestRoot:
    def test_absorbs_up_to_demand(self) -> None:
        soil = _flat_soil(50.0)
        root = Root(x=0.5, z=0.5, radius=1.5, demand=3.0)
        root.update(soil, 0.1)
        # float32 storage rounds each cell's withdrawal
        assert root.water == pytest.approx(0.3, rel=1e-4)
        assert soil.get_total_moisture() == pytest.approx(
            64 * 50.0 - root.water,
            rel=1e-6,
        )

    def test_full_root_stops_drinking(self) -> None:
        soil = _flat_soil(50.0)
        root = Root(x=0.5, z=0.5, water=100.0)
        before = soil.get_total_moisture()
        root.update(soil, 0.1)
        assert soil.get_total_moisture() == before
