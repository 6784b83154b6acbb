"""Actors — things in the world that water, feed, or drink from the soil.

Each actor touches the soil only through the public mutation methods of
``SoilSimulation`` and is updated by the scheduler before the soil tick,
so its changes are diffused in the same tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from humus.simulation.engine import SoilSimulation


@dataclass
class Hose:
    """A fixed hose wetting the cell beneath it.

    Attributes:
        x: World X position.
        z: World Z position.
        rate: Moisture added per second.
    """

    x: float
    z: float
    rate: float = 20.0

    @property
    def finished(self) -> bool:
        return False

    def update(self, soil: SoilSimulation, dt: float) -> None:
        soil.modify_moisture_at(self.x, self.z, self.rate * dt)


@dataclass
class Decomposer:
    """Dead matter releasing its nitrogen as it decays.

    Nitrogen still held is released in proportion to the decay made
    this tick relative to the decay remaining, so the full amount has
    been handed over when progress reaches 100%.

    Attributes:
        x: World X position.
        z: World Z position.
        nitrogen_total: Nitrogen held at death.
        decay_rate: Decay progress in percent per second.
        progress: Decay progress, 0-100.
        released: Nitrogen released so far.
    """

    x: float
    z: float
    nitrogen_total: float
    decay_rate: float = 5.0
    progress: float = 0.0
    released: float = 0.0

    @property
    def finished(self) -> bool:
        return self.progress >= 100.0

    def update(self, soil: SoilSimulation, dt: float) -> None:
        if self.finished:
            return
        increment = min(self.decay_rate * dt, 100.0 - self.progress)
        if increment <= 0:
            return
        remaining_decay = 100.0 - self.progress
        self.progress = min(100.0, self.progress + increment)

        amount = (self.nitrogen_total - self.released) * (increment / remaining_decay)
        if amount > 0:
            soil.modify_nitrogen_at(self.x, self.z, amount)
            self.released += amount


@dataclass
class Root:
    """A root system drawing water from a circular patch of soil.

    Attributes:
        x: World X position.
        z: World Z position.
        radius: Root spread in world units.
        demand: Water wanted per second.
        capacity: Most water the plant can hold.
        water: Water currently held.
    """

    x: float
    z: float
    radius: float = 1.5
    demand: float = 3.0
    capacity: float = 100.0
    water: float = 0.0

    @property
    def finished(self) -> bool:
        return False

    def update(self, soil: SoilSimulation, dt: float) -> None:
        wanted = min(self.demand * dt, self.capacity - self.water)
        if wanted <= 0:
            return
        self.water += soil.absorb_water(self.x, self.z, self.radius, wanted)
