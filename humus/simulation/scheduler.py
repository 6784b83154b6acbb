"""FixedStepScheduler — turns wall-clock time into fixed soil ticks.

Each tick follows the canonical order:

1. Update environment (clock, weather)
2. Update actors (hoses, decomposers, roots); their writes land on the
   soil's current buffer
3. Tick the soil (rain, diffusion, evaporation)
4. Record the balance history
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

import structlog

from humus.simulation.telemetry import BalanceHistory

if TYPE_CHECKING:
    from numpy.random import Generator

    from humus.simulation.engine import SoilSimulation
    from humus.world.environment import Environment

logger = structlog.get_logger()

# Tolerance for float drift in the accumulator
_EPSILON = 1e-9


class Actor(Protocol):
    """Anything the scheduler updates before each soil tick."""

    @property
    def finished(self) -> bool: ...

    def update(self, soil: SoilSimulation, dt: float) -> None: ...


@dataclass
class FixedStepScheduler:
    """Runs the soil at a fixed tick rate regardless of frame timing.

    Attributes:
        soil: The simulation being driven.
        environment: Weather and light provider.
        rng: Seeded generator for the weather.
        tick_rate: Ticks per second.
        actors: Actors updated every tick; finished ones are dropped.
        history: Balance samples, one per tick.
        max_steps: Most ticks run by one ``advance`` call; leftover time
            beyond that is discarded.
    """

    soil: SoilSimulation
    environment: Environment
    rng: Generator
    tick_rate: float = 10.0
    actors: list[Actor] = field(default_factory=list)
    history: BalanceHistory = field(default_factory=BalanceHistory)
    max_steps: int = 10
    _accumulator: float = field(init=False, default=0.0, repr=False)

    def __post_init__(self) -> None:
        if not self.tick_rate > 0:
            msg = f"tick_rate must be positive, got {self.tick_rate}"
            raise ValueError(msg)

    @property
    def dt(self) -> float:
        """Fixed tick duration in seconds."""
        return 1.0 / self.tick_rate

    def add_actor(self, actor: Actor) -> None:
        self.actors.append(actor)

    def step(self) -> None:
        """Run exactly one fixed tick."""
        dt = self.dt
        self.environment.update(dt, self.rng)

        for actor in self.actors:
            actor.update(self.soil, dt)
        self.actors = [a for a in self.actors if not a.finished]

        self.soil.tick(dt, rain_intensity=self.environment.rain_intensity())
        self.history.record(self.soil)

    def advance(self, elapsed: float) -> int:
        """Accumulate wall-clock time and run the ticks it pays for.

        Args:
            elapsed: Seconds since the previous call.

        Returns:
            Number of ticks run.
        """
        self._accumulator += max(elapsed, 0.0)
        steps = 0
        while self._accumulator + _EPSILON >= self.dt and steps < self.max_steps:
            self.step()
            self._accumulator = max(0.0, self._accumulator - self.dt)
            steps += 1

        if self._accumulator + _EPSILON >= self.dt:
            logger.warning(
                "Scheduler falling behind, dropping time",
                dropped_seconds=round(self._accumulator, 3),
            )
            self._accumulator = 0.0
        return steps

    def run(self, ticks: int) -> None:
        """Run a fixed number of ticks.

        Args:
            ticks: Number of ticks to advance.
        """
        for _ in range(ticks):
            self.step()
