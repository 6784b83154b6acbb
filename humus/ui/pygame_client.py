"""Pygame 2D visualization for the Humus soil simulation.

Renders the moisture (or nitrogen) grid from ``snapshot_field`` as a
colour ramp, with actors and shade drawn on top.  The scheduler steps
the soil at its fixed tick rate while the display refreshes at the
Pygame frame rate.  The overlay choice lives here only; it never
changes simulated values.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

import numpy as np
import pygame
from numpy.typing import NDArray

if TYPE_CHECKING:
    from humus.simulation.scheduler import FixedStepScheduler

from humus.soil.fields import FieldKind
from humus.world.actors import Decomposer, Hose, Root

# Colour palette
_BG = (30, 20, 10)
_PANEL_TEXT = (200, 200, 200)
_SHADE_OUTLINE = (60, 60, 90)

# Dry soil -> wet soil
_MOISTURE_DRY = np.array([180, 140, 100], dtype=np.float64)
_MOISTURE_WET = np.array([60, 40, 25], dtype=np.float64)

# Poor soil -> rich soil
_NITROGEN_LO = np.array([150, 130, 90], dtype=np.float64)
_NITROGEN_HI = np.array([40, 150, 40], dtype=np.float64)

_ACTOR_COLOURS: dict[type, tuple[int, int, int]] = {
    Hose: (80, 160, 255),
    Decomposer: (160, 110, 60),
    Root: (90, 220, 90),
}

# Tool rates per second of holding the mouse button
_SPRAY_RATE = 40.0
_COMPOST_RATE = 5.0


def field_colours(
    values: NDArray[np.float32],
    grid_size: int,
    max_value: float,
    kind: FieldKind,
) -> NDArray[np.uint8]:
    """Map a flat row-major field to an RGB image with +Z pointing up.

    Args:
        values: Flat snapshot from ``snapshot_field``.
        grid_size: Cells per axis.
        max_value: Saturation ceiling of the field.
        kind: Which ramp to use.

    Returns:
        ``(grid_size, grid_size, 3)`` image indexed ``[screen_row, col]``.
    """
    t = np.clip(values.reshape(grid_size, grid_size) / max_value, 0.0, 1.0)
    lo, hi = (
        (_MOISTURE_DRY, _MOISTURE_WET)
        if kind is FieldKind.MOISTURE
        else (_NITROGEN_LO, _NITROGEN_HI)
    )
    image = lo + t[..., np.newaxis] * (hi - lo)
    return np.flipud(image).astype(np.uint8)


class SoilRenderer:
    """Renders a FixedStepScheduler's soil into a Pygame window.

    Attributes:
        scheduler: Drives the soil, environment, and actors.
        cell_size: Pixel size of each grid cell.
        overlay: Which field is drawn.
        screen: The Pygame display surface.
    """

    # Speed presets as multiples of real time
    _SPEED_STEPS: ClassVar[list[float]] = [0.25, 0.5, 1.0, 2.0, 4.0, 8.0]

    def __init__(
        self,
        scheduler: FixedStepScheduler,
        cell_size: int = 12,
        speed: float = 1.0,
    ) -> None:
        """Initialise the renderer.

        Args:
            scheduler: The scheduler to drive and render.
            cell_size: Pixel width/height per grid cell.
            speed: Real-time multiplier for the simulation clock.
        """
        self.scheduler = scheduler
        self.cell_size = cell_size
        self._speed_index = self._nearest_speed(speed)
        self.speed = self._SPEED_STEPS[self._speed_index]
        self.overlay = FieldKind.MOISTURE

        grid = scheduler.soil.grid
        self._map_px = grid.grid_size * cell_size
        self._panel_width = 240
        self._win_w = self._map_px + self._panel_width
        self._win_h = self._map_px

        pygame.init()
        self.screen = pygame.display.set_mode((self._win_w, self._win_h))
        pygame.display.set_caption("Humus")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.running = True
        self.paused = False

    def _nearest_speed(self, speed: float) -> int:
        """Return the index of the closest speed preset."""
        diffs = [abs(s - speed) for s in self._SPEED_STEPS]
        return diffs.index(min(diffs))

    def run(self, fps: int = 30) -> None:
        """Main loop: handle events, advance the scheduler, render.

        Args:
            fps: Target frames per second.
        """
        while self.running:
            dt = self.clock.tick(fps) / 1000.0  # seconds elapsed
            self._handle_events()
            self._apply_tools(dt)
            if not self.paused:
                self.scheduler.advance(dt * self.speed)
            self._draw()

        pygame.quit()

    def screen_to_world(self, px: int, py: int) -> tuple[float, float]:
        """Convert a pixel on the map to world coordinates."""
        grid = self.scheduler.soil.grid
        cells_x = px / self.cell_size
        cells_z = grid.grid_size - py / self.cell_size
        return (
            (cells_x - grid.half) * grid.cell_size,
            (cells_z - grid.half) * grid.cell_size,
        )

    def _world_to_screen(self, x: float, z: float) -> tuple[int, int]:
        grid = self.scheduler.soil.grid
        px = (x / grid.cell_size + grid.half) * self.cell_size
        py = (grid.grid_size - (z / grid.cell_size + grid.half)) * self.cell_size
        return int(px), int(py)

    def _handle_events(self) -> None:
        """Process Pygame input events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.paused = not self.paused
                elif event.key == pygame.K_n:
                    self.overlay = (
                        FieldKind.NITROGEN
                        if self.overlay is FieldKind.MOISTURE
                        else FieldKind.MOISTURE
                    )
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS):
                    self._speed_index = min(
                        len(self._SPEED_STEPS) - 1,
                        self._speed_index + 1,
                    )
                    self.speed = self._SPEED_STEPS[self._speed_index]
                elif event.key == pygame.K_MINUS:
                    self._speed_index = max(0, self._speed_index - 1)
                    self.speed = self._SPEED_STEPS[self._speed_index]

    def _apply_tools(self, dt: float) -> None:
        """Water (left button) or compost (right button) under the cursor."""
        left, _, right = pygame.mouse.get_pressed()
        if not (left or right):
            return
        px, py = pygame.mouse.get_pos()
        if px >= self._map_px:
            return
        x, z = self.screen_to_world(px, py)
        soil = self.scheduler.soil
        if left:
            soil.modify_moisture_at(x, z, _SPRAY_RATE * dt)
        if right:
            soil.modify_nitrogen_at(x, z, _COMPOST_RATE * dt)

    def _draw(self) -> None:
        """Render one frame."""
        self.screen.fill(_BG)
        self._draw_field()
        self._draw_shade()
        self._draw_actors()
        self._draw_info_panel()
        pygame.display.flip()

    def _draw_field(self) -> None:
        """Blit the selected field as one scaled surface."""
        soil = self.scheduler.soil
        layer = soil.fields.get_layer(self.overlay)
        image = field_colours(
            soil.snapshot_field(self.overlay),
            soil.grid.grid_size,
            layer.max_value,
            self.overlay,
        )
        # surfarray expects (width, height, 3)
        surf = pygame.surfarray.make_surface(np.ascontiguousarray(image.transpose(1, 0, 2)))
        surf = pygame.transform.scale(surf, (self._map_px, self._map_px))
        self.screen.blit(surf, (0, 0))

    def _draw_shade(self) -> None:
        grid = self.scheduler.soil.grid
        scale = self.cell_size / grid.cell_size
        for shade in self.scheduler.environment.shades:
            centre = self._world_to_screen(shade.x, shade.z)
            pygame.draw.circle(
                self.screen,
                _SHADE_OUTLINE,
                centre,
                max(1, int(shade.radius * scale)),
                width=1,
            )

    def _draw_actors(self) -> None:
        """Draw each actor as a small coloured dot."""
        radius = max(2, self.cell_size // 3)
        for actor in self.scheduler.actors:
            colour = _ACTOR_COLOURS.get(type(actor), _PANEL_TEXT)
            centre = self._world_to_screen(actor.x, actor.z)
            pygame.draw.circle(self.screen, colour, centre, radius)

    def _draw_info_panel(self) -> None:
        """Draw a stats panel on the right side of the window."""
        panel_x = self._map_px + 10
        y = 10
        soil = self.scheduler.soil
        env = self.scheduler.environment

        lines = [
            f"Tick: {soil.tick_count}",
            f"Speed: {self.speed:.2f}x",
            f"{'PAUSED' if self.paused else 'RUNNING'}",
            f"Overlay: {self.overlay.name.lower()}",
            "",
            "--- World ---",
            f"Time: {env.time_of_day * 24:05.2f} h",
            f"{'Day' if env.is_daytime else 'Night'}",
            f"Rain: {env.rain_intensity():.2f}",
            "",
            "--- Soil ---",
            f"Water: {soil.get_total_moisture():.0f}",
            f"Nitrogen: {soil.get_total_nitrogen():.0f}",
        ]

        px, py = pygame.mouse.get_pos()
        if px < self._map_px:
            x, z = self.screen_to_world(px, py)
            lines += [
                "",
                f"Cursor: ({x:.1f}, {z:.1f})",
                f"  moisture: {soil.get_moisture_at(x, z):.1f}",
                f"  nitrogen: {soil.get_nitrogen_at(x, z):.1f}",
            ]

        lines += [
            "",
            "--- Controls ---",
            "LMB: water  RMB: compost",
            "N: toggle overlay",
            "SPACE: pause",
            "+/-: speed",
            "ESC: quit",
        ]

        for line in lines:
            surf = self.font.render(line, True, _PANEL_TEXT)
            self.screen.blit(surf, (panel_x, y))
            y += 18
