"""Tests for the pygame renderer and the CLI entry points."""

from __future__ import annotations

from collections.abc import Iterator

import numpy as np
import pygame
import pytest

from humus.__main__ import build_scheduler, run_headless
from humus.simulation.config import SoilConfig
from humus.soil.fields import FieldKind
from humus.ui.pygame_client import SoilRenderer, field_colours


@pytest.fixture
def renderer(monkeypatch: pytest.MonkeyPatch) -> Iterator[SoilRenderer]:
    """A 16x16 demo garden rendered into an off-screen window."""
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    scheduler = build_scheduler(SoilConfig(grid_size=16))
    try:
        yield SoilRenderer(scheduler, cell_size=12)
    finally:
        pygame.quit()


def test_field_colours_flips_z_up() -> None:
    values = np.zeros(16, dtype=np.float32)
    values[12:] = 100.0  # top storage row is the highest Z
    image = field_colours(values, 4, 100.0, FieldKind.MOISTURE)
    assert image.shape == (4, 4, 3)
    assert image.dtype == np.uint8
    assert image[0, 0].tolist() == [60, 40, 25]
    assert image[3, 0].tolist() == [180, 140, 100]


def test_field_colours_nitrogen_ramp() -> None:
    values = np.full(4, 100.0, dtype=np.float32)
    image = field_colours(values, 2, 100.0, FieldKind.NITROGEN)
    assert image[0, 0].tolist() == [40, 150, 40]


class TestSoilRenderer:
    def test_window_sized_for_grid_and_panel(self, renderer: SoilRenderer) -> None:
        assert renderer.screen.get_size() == (16 * 12 + 240, 16 * 12)

    def test_screen_world_mapping(self, renderer: SoilRenderer) -> None:
        # Top-left pixel is the -X, +Z corner of the grid
        assert renderer.screen_to_world(0, 0) == (-8.0, 8.0)
        assert renderer.screen_to_world(96, 96) == (0.0, 0.0)
        assert renderer._world_to_screen(-8.0, 8.0) == (0, 0)
        assert renderer._world_to_screen(0.5, 0.5) == (102, 90)

    def test_draw_paints_snapshot(self, renderer: SoilRenderer) -> None:
        renderer._draw()
        soil = renderer.scheduler.soil
        image = field_colours(
            soil.snapshot_field(FieldKind.MOISTURE),
            16,
            soil.config.max_moisture,
            FieldKind.MOISTURE,
        )
        assert tuple(renderer.screen.get_at((5, 5)))[:3] == tuple(image[0, 0].tolist())

    def test_overlay_switch_does_not_touch_soil(self, renderer: SoilRenderer) -> None:
        soil = renderer.scheduler.soil
        before = soil.snapshot_field(FieldKind.NITROGEN).copy()
        renderer.overlay = FieldKind.NITROGEN
        renderer._draw()
        assert np.array_equal(before, soil.snapshot_field(FieldKind.NITROGEN))

    def test_speed_snaps_to_preset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
        scheduler = build_scheduler(SoilConfig(grid_size=8))
        try:
            assert SoilRenderer(scheduler, cell_size=4, speed=3.1).speed == 4.0
        finally:
            pygame.quit()


def test_headless_run() -> None:
    scheduler = build_scheduler(SoilConfig(grid_size=16))
    run_headless(scheduler, ticks=5)
    assert scheduler.soil.tick_count == 5
    assert len(scheduler.actors) == 5
    assert len(scheduler.history) == 5


def test_configure_logging() -> None:
    import logging

    import structlog

    from humus.log import configure_logging

    try:
        configure_logging("warning", json=True)
        assert logging.getLogger().level == logging.WARNING
        structlog.get_logger().info("filtered out")
    finally:
        structlog.reset_defaults()
