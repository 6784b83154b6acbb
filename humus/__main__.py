"""Entry point for ``python -m humus``.

Loads the default YAML config, builds the soil with a small demo garden
(a hose, some roots, a compost heap, a shade canopy), and either opens
a Pygame window or runs headless and logs the water balance.
"""

from __future__ import annotations

import argparse
import pathlib

import numpy as np
import structlog

from humus.log import configure_logging
from humus.simulation.config import SoilConfig
from humus.simulation.engine import SoilSimulation
from humus.simulation.scheduler import FixedStepScheduler
from humus.world.actors import Decomposer, Hose, Root
from humus.world.environment import Environment

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)

logger = structlog.get_logger()


def build_scheduler(config: SoilConfig) -> FixedStepScheduler:
    """Wire environment, soil, and demo actors into a scheduler."""
    environment = Environment(
        day_length=config.day_length,
        rain_chance=config.rain_chance,
        rain_decay=config.rain_decay,
    )
    soil = SoilSimulation(
        config=config,
        light_exposure=environment.light_exposure,
        rain_intensity=environment.rain_intensity,
    )

    extent = config.grid_size * config.cell_size / 4
    environment.add_shade(-extent, extent, extent / 2)
    scheduler = FixedStepScheduler(
        soil=soil,
        environment=environment,
        rng=np.random.default_rng(config.seed),
        tick_rate=config.tick_rate,
    )
    scheduler.add_actor(Hose(x=extent, z=extent))
    scheduler.add_actor(Decomposer(x=-extent, z=-extent, nitrogen_total=50.0))
    for dx in (-1.5, 0.0, 1.5):
        scheduler.add_actor(Root(x=extent + dx, z=-extent))
    return scheduler


def run_headless(scheduler: FixedStepScheduler, ticks: int) -> None:
    """Run ``ticks`` ticks without a display, logging the balance."""
    report_every = max(1, int(scheduler.tick_rate * 10))
    for i in range(1, ticks + 1):
        scheduler.step()
        if i % report_every == 0 or i == ticks:
            sample = scheduler.history.latest
            logger.info(
                "Soil balance",
                tick=sample.tick,
                total_moisture=round(sample.total_moisture, 2),
                total_nitrogen=round(sample.total_nitrogen, 2),
                rain=round(scheduler.environment.rain_intensity(), 2),
            )


def main() -> None:
    """Parse CLI args, build the scheduler, then render or run headless."""
    parser = argparse.ArgumentParser(
        prog="humus",
        description="Humus - soil moisture and nitrogen simulation",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--cell-size",
        type=int,
        default=12,
        help="Pixel size per grid cell (default: 12)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=30,
        help="Target frames per second (default: 30)",
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=1.0,
        help="Real-time multiplier (default: 1)",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run without a window and log the soil balance",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=600,
        help="Ticks to run in headless mode (default: 600)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    args = parser.parse_args()

    configure_logging(args.log_level)
    config = SoilConfig.from_yaml(args.config)
    scheduler = build_scheduler(config)

    if args.headless:
        run_headless(scheduler, args.ticks)
        return

    from humus.ui.pygame_client import SoilRenderer

    renderer = SoilRenderer(
        scheduler=scheduler,
        cell_size=args.cell_size,
        speed=args.speed,
    )
    renderer.run(fps=args.fps)


if __name__ == "__main__":
    main()
