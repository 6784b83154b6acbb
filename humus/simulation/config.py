"""Config — load soil simulation parameters from YAML files.

Grid dimensions, rate constants, and weather tuning live in YAML and are
parsed into a typed dataclass here.  Values are checked once when the
config is built so a bad file fails at start-up rather than mid-run.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

INITIALIZERS = ("wave", "perlin")


@dataclass
class SoilConfig:
    """Top-level soil simulation configuration.

    Attributes:
        seed: RNG seed for the initial field and the weather.
        grid_size: Cells per axis.
        cell_size: World units per cell.
        diffusion_rate: Base diffusion rate before time scaling.
        diffusion_rate_cap: Largest per-tick diffusion rate allowed.
        max_dt: Largest timestep the diffusion pass will integrate.
        tick_rate: Nominal ticks per second; scales rates to a tick.
        evaporation_rate: Base moisture loss before time scaling.
        shadow_evap_multiplier: Evaporation factor for unlit cells.
        light_threshold: Light values above this count as sunlit.
        rain_coefficient: Moisture per second added at full rain.
        absorption_fraction: Largest share of local moisture a single
            absorb call may remove.
        max_moisture: Moisture saturation ceiling.
        max_nitrogen: Nitrogen saturation ceiling.
        initializer: Baseline pattern, ``"wave"`` or ``"perlin"``.
        day_length: Seconds per full day/night cycle.
        rain_chance: Per-tick probability that a shower starts.
        rain_decay: Per-tick drop in rain intensity.
    """

    seed: int = 42
    grid_size: int = 50
    cell_size: float = 1.0

    # Diffusion
    diffusion_rate: float = 0.01
    diffusion_rate_cap: float = 0.2
    max_dt: float = 0.05
    tick_rate: float = 10.0

    # Evaporation
    evaporation_rate: float = 0.001
    shadow_evap_multiplier: float = 0.2
    light_threshold: float = 0.1

    # External inputs
    rain_coefficient: float = 1.5
    absorption_fraction: float = 0.5

    max_moisture: float = 100.0
    max_nitrogen: float = 100.0
    initializer: str = "wave"

    # Environment
    day_length: float = 600.0
    rain_chance: float = 0.002
    rain_decay: float = 0.01

    def __post_init__(self) -> None:
        """Reject parameters the simulation cannot run with.

        Raises:
            ValueError: On any out-of-range value.
        """
        if self.grid_size <= 0:
            msg = f"grid_size must be positive, got {self.grid_size}"
            raise ValueError(msg)
        if not self.cell_size > 0:
            msg = f"cell_size must be positive, got {self.cell_size}"
            raise ValueError(msg)
        if not self.tick_rate > 0:
            msg = f"tick_rate must be positive, got {self.tick_rate}"
            raise ValueError(msg)
        if not self.day_length > 0:
            msg = f"day_length must be positive, got {self.day_length}"
            raise ValueError(msg)

        for name in (
            "diffusion_rate",
            "diffusion_rate_cap",
            "max_dt",
            "evaporation_rate",
            "shadow_evap_multiplier",
            "light_threshold",
            "rain_coefficient",
            "rain_chance",
            "rain_decay",
        ):
            value = getattr(self, name)
            if not value >= 0:
                msg = f"{name} must be non-negative, got {value}"
                raise ValueError(msg)

        if not 0 < self.absorption_fraction <= 1:
            msg = (
                "absorption_fraction must be in (0, 1], "
                f"got {self.absorption_fraction}"
            )
            raise ValueError(msg)
        if not (self.max_moisture > 0 and self.max_nitrogen > 0):
            msg = "max_moisture and max_nitrogen must be positive"
            raise ValueError(msg)
        if self.initializer not in INITIALIZERS:
            msg = (
                f"unknown initializer {self.initializer!r}, "
                f"expected one of {INITIALIZERS}"
            )
            raise ValueError(msg)

    @classmethod
    def from_yaml(cls, path: str | Path) -> SoilConfig:
        """Load configuration from a YAML file.

        Keys missing from the file keep their defaults.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated SoilConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
            ValueError: If a value is out of range.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        return cls(
            seed=data.get("seed", cls.seed),
            grid_size=data.get("grid_size", cls.grid_size),
            cell_size=data.get("cell_size", cls.cell_size),
            diffusion_rate=data.get("diffusion_rate", cls.diffusion_rate),
            diffusion_rate_cap=data.get(
                "diffusion_rate_cap",
                cls.diffusion_rate_cap,
            ),
            max_dt=data.get("max_dt", cls.max_dt),
            tick_rate=data.get("tick_rate", cls.tick_rate),
            evaporation_rate=data.get("evaporation_rate", cls.evaporation_rate),
            shadow_evap_multiplier=data.get(
                "shadow_evap_multiplier",
                cls.shadow_evap_multiplier,
            ),
            light_threshold=data.get("light_threshold", cls.light_threshold),
            rain_coefficient=data.get("rain_coefficient", cls.rain_coefficient),
            absorption_fraction=data.get(
                "absorption_fraction",
                cls.absorption_fraction,
            ),
            max_moisture=data.get("max_moisture", cls.max_moisture),
            max_nitrogen=data.get("max_nitrogen", cls.max_nitrogen),
            initializer=data.get("initializer", cls.initializer),
            day_length=data.get("day_length", cls.day_length),
            rain_chance=data.get("rain_chance", cls.rain_chance),
            rain_decay=data.get("rain_decay", cls.rain_decay),
        )
