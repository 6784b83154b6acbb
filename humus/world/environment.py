"""Environment — day/night cycle, rain showers, and shade.

Updated at the start of each scheduled tick so the soil sees the
current weather and light.  The soil core only pulls two narrow signals
from here: ``rain_intensity()`` and ``light_exposure(x, z)``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from numpy.random import Generator

# Fraction of the day at which the sun rises and sets
_SUNRISE = 0.25
_SUNSET = 0.85


@dataclass
class Shade:
    """A circular shadow cast on the ground (a building, a canopy)."""

    x: float
    z: float
    radius: float

    def covers(self, x: float, z: float) -> bool:
        dx = x - self.x
        dz = z - self.z
        return dx * dx + dz * dz <= self.radius * self.radius


@dataclass
class Environment:
    """Global weather and light state that changes each tick.

    Attributes:
        day_length: Seconds in a full day/night cycle.
        rain_chance: Per-tick probability that a shower starts.
        rain_decay: Per-tick drop in rain intensity while it rains.
        elapsed: Seconds since the start of the simulation.
        time_of_day: Normalised time (0.0 = midnight, 0.5 = noon).
        rain: Current rain level (0.0-1.0).
        shades: Active shade casters.
    """

    day_length: float = 600.0
    rain_chance: float = 0.002
    rain_decay: float = 0.01
    elapsed: float = 0.0
    time_of_day: float = 0.3
    rain: float = 0.0
    shades: list[Shade] = field(default_factory=list)

    @property
    def is_daytime(self) -> bool:
        """Return True between sunrise and sunset."""
        return _SUNRISE <= self.time_of_day <= _SUNSET

    def update(self, dt: float, rng: Generator) -> None:
        """Advance the clock and the weather by ``dt`` seconds.

        Args:
            dt: Tick duration in seconds.
            rng: Seeded random generator.
        """
        self.elapsed += dt
        self.time_of_day = (self.time_of_day + dt / self.day_length) % 1.0

        if self.rain <= 0 and rng.random() < self.rain_chance:
            self.rain = float(rng.uniform(0.2, 1.0))
        elif self.rain > 0:
            self.rain = max(0.0, self.rain - self.rain_decay)

    def rain_intensity(self) -> float:
        """Current rain level in ``[0, 1]``."""
        return min(max(self.rain, 0.0), 1.0)

    def add_shade(self, x: float, z: float, radius: float) -> Shade:
        """Register a circular shade caster and return it."""
        shade = Shade(x=x, z=z, radius=radius)
        self.shades.append(shade)
        return shade

    def clear_shade(self) -> None:
        self.shades.clear()

    def sun_height(self) -> float:
        """Sun elevation ratio in ``[0, 1]``; 0 outside daylight hours."""
        if not self.is_daytime:
            return 0.0
        angle = (self.time_of_day - _SUNRISE) / (_SUNSET - _SUNRISE) * math.pi
        return max(0.0, min(1.0, math.sin(angle)))

    def light_exposure(self, x: float, z: float) -> float:
        """How strongly the sun reaches a ground point.

        Returns:
            0 at night or under shade, otherwise the sun height ratio.
        """
        height = self.sun_height()
        if height <= 0:
            return 0.0
        for shade in self.shades:
            if shade.covers(x, z):
                return 0.0
        return height
