"""SoilSimulation — the soil core and its fixed tick.

Owns the grid index and both double-buffered fields, and advances them
in the canonical tick order:

1. Apply external inputs (rain; point deltas already landed on ``current``)
2. Diffuse moisture and nitrogen (swap)
3. Evaporate moisture, modulated by the light signal (swap)

Everything outside the core talks to it through the query and mutation
methods below.  The light and weather signals are plain callables passed
in at construction, so the core never depends on a lighting or weather
implementation.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import numpy as np
import structlog
from numpy.typing import ArrayLike, NDArray

from humus.grid.index import GridIndex
from humus.simulation.config import SoilConfig
from humus.soil.diffusion import diffuse_all, effective_rate, evaporate
from humus.soil.fields import FieldKind, SoilField, SoilFields
from humus.soil.inputs import absorb, apply_rain, modify_at
from humus.soil.noise import perlin_baseline, wave_baseline

logger = structlog.get_logger()

LightSignal = Callable[[float, float], "bool | float"]
RainSignal = Callable[[], float]


@dataclass
class SoilSimulation:
    """Moisture and nitrogen over a fixed grid, stepped one tick at a time.

    Attributes:
        config: Loaded simulation configuration.
        light_exposure: Returns whether (or how strongly) a world point
            is sunlit.  None treats every cell as lit.
        rain_intensity: Returns the current rain level in ``[0, 1]``.
            Used when ``tick`` is not given a rain value.
        grid: World/cell index for this grid.
        fields: The moisture and nitrogen fields.
        tick_count: Number of ticks run so far.
    """

    config: SoilConfig
    light_exposure: LightSignal | None = None
    rain_intensity: RainSignal | None = None
    grid: GridIndex = field(init=False)
    fields: SoilFields = field(init=False, repr=False)
    tick_count: int = field(init=False, default=0)
    _centers: tuple[NDArray[np.float64], NDArray[np.float64]] = field(
        init=False,
        repr=False,
    )

    def __post_init__(self) -> None:
        """Build the grid and seed both fields with a smooth baseline."""
        cfg = self.config
        self.grid = GridIndex(grid_size=cfg.grid_size, cell_size=cfg.cell_size)
        self.fields = SoilFields(
            grid_size=cfg.grid_size,
            max_moisture=cfg.max_moisture,
            max_nitrogen=cfg.max_nitrogen,
        )
        self._centers = self.grid.cell_centers()
        self._initialise_fields()
        logger.info(
            "Soil simulation created",
            grid_size=cfg.grid_size,
            cell_size=cfg.cell_size,
            initializer=cfg.initializer,
            total_moisture=round(self.get_total_moisture(), 2),
            total_nitrogen=round(self.get_total_nitrogen(), 2),
        )

    def _initialise_fields(self) -> None:
        cfg = self.config
        if cfg.initializer == "perlin":
            moisture = perlin_baseline(cfg.grid_size, low=5.0, high=35.0, seed=cfg.seed)
            nitrogen = perlin_baseline(
                cfg.grid_size,
                low=5.0,
                high=30.0,
                seed=cfg.seed + 1,
            )
        else:
            moisture = wave_baseline(
                cfg.grid_size,
                low=5.0,
                high=35.0,
                centre=20.0,
                amplitude=10.0,
            )
            nitrogen = wave_baseline(
                cfg.grid_size,
                low=5.0,
                high=30.0,
                centre=15.0,
                amplitude=10.0,
                frequency=0.15,
                phase=1.0,
            )
        self.fields.moisture.load(moisture)
        self.fields.nitrogen.load(nitrogen)

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self, dt: float, rain_intensity: float | None = None) -> None:
        """Advance the soil by one fixed step.

        Args:
            dt: Fixed-step duration in seconds (not wall-clock delta).
            rain_intensity: Rain level for this tick.  Falls back to the
                injected rain signal, then to no rain.
        """
        cfg = self.config
        if not dt > 0:  # also catches NaN
            dt = 0.0
        moisture = self.fields.moisture

        # 1. External inputs
        if rain_intensity is None:
            rain_intensity = self.rain_intensity() if self.rain_intensity else 0.0
        if rain_intensity > 0:
            apply_rain(moisture, rain_intensity, cfg.rain_coefficient, dt)

        # 2. Diffusion
        rate = effective_rate(
            cfg.diffusion_rate,
            dt,
            cfg.max_dt,
            cfg.tick_rate,
            cfg.diffusion_rate_cap,
        )
        diffuse_all(self.fields, rate)

        # 3. Evaporation
        evap_rate = cfg.evaporation_rate * dt * cfg.tick_rate
        evaporate(
            moisture,
            evap_rate,
            lit=self._lit_mask(),
            shadow_multiplier=cfg.shadow_evap_multiplier,
        )

        self.tick_count += 1
        logger.debug(
            "Soil tick",
            tick=self.tick_count,
            dt=dt,
            rain=rain_intensity,
            diffusion_rate=rate,
        )

    def run(self, ticks: int, dt: float | None = None) -> None:
        """Run a fixed number of ticks with no rain signal override.

        Args:
            ticks: Number of ticks to advance.
            dt: Step length; defaults to ``1 / tick_rate``.
        """
        step = dt if dt is not None else 1.0 / self.config.tick_rate
        for _ in range(ticks):
            self.tick(step)

    def _lit_mask(self) -> NDArray[np.bool_] | None:
        """Sample the light signal at every cell centre."""
        if self.light_exposure is None:
            return None
        xs, zs = self._centers
        threshold = self.config.light_threshold
        signal = self.light_exposure

        def is_lit(x: float, z: float) -> bool:
            value = signal(x, z)
            if isinstance(value, (bool, np.bool_)):
                return bool(value)
            return float(value) > threshold

        flat = np.fromiter(
            (is_lit(float(x), float(z)) for x, z in zip(xs.flat, zs.flat)),
            dtype=np.bool_,
            count=xs.size,
        )
        return flat.reshape(xs.shape)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _read_at(self, soil_field: SoilField, world_x: float, world_z: float) -> float:
        index = self.grid.world_to_index(world_x, world_z)
        return 0.0 if index is None else soil_field.get(index)

    def _read_cell(self, soil_field: SoilField, cell_x: int, cell_z: int) -> float:
        index = self.grid.to_linear_index(cell_x, cell_z)
        return 0.0 if index is None else soil_field.get(index)

    def get_moisture_at(self, world_x: float, world_z: float) -> float:
        """Moisture at a world point; 0 outside the grid."""
        return self._read_at(self.fields.moisture, world_x, world_z)

    def get_nitrogen_at(self, world_x: float, world_z: float) -> float:
        """Nitrogen at a world point; 0 outside the grid."""
        return self._read_at(self.fields.nitrogen, world_x, world_z)

    def get_moisture_at_cell(self, cell_x: int, cell_z: int) -> float:
        return self._read_cell(self.fields.moisture, cell_x, cell_z)

    def get_nitrogen_at_cell(self, cell_x: int, cell_z: int) -> float:
        return self._read_cell(self.fields.nitrogen, cell_x, cell_z)

    def get_total_moisture(self) -> float:
        """Sum of moisture over every cell."""
        return self.fields.moisture.total()

    def get_total_nitrogen(self) -> float:
        """Sum of nitrogen over every cell."""
        return self.fields.nitrogen.total()

    def snapshot_field(self, kind: FieldKind) -> NDArray[np.float32]:
        """Return a read-only row-major view of a field for rendering.

        Args:
            kind: Which field to export.

        Returns:
            Flat ``float32`` array of ``grid_size ** 2`` values.
        """
        return self.fields.get_layer(kind).snapshot()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def modify_moisture_at(self, world_x: float, world_z: float, amount: float) -> None:
        """Add (or with a negative amount, remove) moisture at a point.

        Out-of-grid points are ignored.
        """
        modify_at(
            self.fields.moisture,
            self.grid.world_to_index(world_x, world_z),
            amount,
        )

    def modify_nitrogen_at(self, world_x: float, world_z: float, amount: float) -> None:
        """Add (or with a negative amount, remove) nitrogen at a point.

        Out-of-grid points are ignored.
        """
        modify_at(
            self.fields.nitrogen,
            self.grid.world_to_index(world_x, world_z),
            amount,
        )

    def absorb_water(
        self,
        world_x: float,
        world_z: float,
        radius: float,
        max_amount: float,
    ) -> float:
        """Draw moisture from cells whose centre is within ``radius``.

        Args:
            world_x: World X of the absorber.
            world_z: World Z of the absorber.
            radius: Footprint radius in world units.
            max_amount: Most the caller wants this call.

        Returns:
            Moisture actually removed, never more than ``max_amount`` or
            ``absorption_fraction`` of what was available in range.
        """
        rows, cols = self.grid.cells_within_radius(world_x, world_z, radius)
        return absorb(
            self.fields.moisture,
            rows,
            cols,
            max_amount,
            fraction=self.config.absorption_fraction,
        )

    def load_field(self, kind: FieldKind, values: ArrayLike) -> None:
        """Replace a whole field, clamping every value into range.

        Args:
            kind: Which field to replace.
            values: ``(N, N)`` array or flat row-major sequence.

        Raises:
            ValueError: If the value count does not match the grid.
        """
        self.fields.get_layer(kind).load(values)
