"""SoilFields — double-buffered moisture and nitrogen grids.

Each tracked quantity is a separate ``float32`` NumPy 2D array with a
second "next" array used by the diffusion and evaporation passes.
Readers only ever see ``current``; a pass writes ``next`` and then
swaps, so a half-updated grid is never observable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

import numpy as np
from numpy.typing import ArrayLike, NDArray

MAX_MOISTURE = 100.0
MAX_NITROGEN = 100.0


class FieldKind(Enum):
    """The two soil quantities tracked per cell."""

    MOISTURE = auto()
    NITROGEN = auto()


@dataclass
class SoilField:
    """One clamped scalar field with its swap buffer.

    Attributes:
        kind: Which quantity this field holds.
        max_value: Saturation ceiling; values live in ``[0, max_value]``.
        current: Settled values, the only buffer readers see.
        next: Scratch buffer written by a pass before ``swap``.
    """

    kind: FieldKind
    max_value: float
    current: NDArray[np.float32]
    next: NDArray[np.float32] = field(repr=False)

    @classmethod
    def zeros(cls, kind: FieldKind, grid_size: int, max_value: float) -> SoilField:
        """Create an all-zero field of ``grid_size x grid_size`` cells."""
        shape = (grid_size, grid_size)
        return cls(
            kind=kind,
            max_value=max_value,
            current=np.zeros(shape, dtype=np.float32),
            next=np.zeros(shape, dtype=np.float32),
        )

    def get(self, index: int) -> float:
        """Read the value at a row-major storage index."""
        return float(self.current.flat[index])

    def set_clamped(self, index: int, value: float) -> None:
        """Write a value at a row-major index, clamped to ``[0, max_value]``.

        NaN is stored as 0.
        """
        if value != value:  # NaN
            value = 0.0
        self.current.flat[index] = min(max(value, 0.0), self.max_value)

    def swap(self) -> None:
        """Exchange ``current`` and ``next`` after a pass."""
        self.current, self.next = self.next, self.current

    def load(self, values: ArrayLike) -> None:
        """Replace all current values, clamping each into range.

        Args:
            values: ``(N, N)`` array or flat ``N*N`` row-major sequence.

        Raises:
            ValueError: If the value count does not match the grid.
        """
        arr = np.asarray(values, dtype=np.float32)
        if arr.size != self.current.size:
            msg = (
                f"{self.kind.name.lower()} expects {self.current.size} values, "
                f"got {arr.size}"
            )
            raise ValueError(msg)
        arr = np.nan_to_num(arr.reshape(self.current.shape), nan=0.0)
        np.clip(arr, 0.0, self.max_value, out=self.current)

    def total(self) -> float:
        """Return the sum over all cells (accumulated in float64)."""
        return float(self.current.sum(dtype=np.float64))

    def snapshot(self) -> NDArray[np.float32]:
        """Return a read-only flat view of the current values.

        The view is row-major, matching ``GridIndex.to_linear_index``.
        It reflects later ticks only until the next buffer swap, so
        callers that keep it across ticks should copy it.
        """
        view = self.current.reshape(-1)
        view.flags.writeable = False
        return view


@dataclass
class SoilFields:
    """Both soil fields for one grid.

    Attributes:
        grid_size: Cells per axis.
        max_moisture: Moisture saturation ceiling.
        max_nitrogen: Nitrogen saturation ceiling.
        layers: Mapping from FieldKind to its field.
    """

    grid_size: int
    max_moisture: float = MAX_MOISTURE
    max_nitrogen: float = MAX_NITROGEN
    layers: dict[FieldKind, SoilField] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Create one zeroed field per kind."""
        self.layers = {
            FieldKind.MOISTURE: SoilField.zeros(
                FieldKind.MOISTURE,
                self.grid_size,
                self.max_moisture,
            ),
            FieldKind.NITROGEN: SoilField.zeros(
                FieldKind.NITROGEN,
                self.grid_size,
                self.max_nitrogen,
            ),
        }

    @property
    def moisture(self) -> SoilField:
        return self.layers[FieldKind.MOISTURE]

    @property
    def nitrogen(self) -> SoilField:
        return self.layers[FieldKind.NITROGEN]

    def get_layer(self, kind: FieldKind) -> SoilField:
        """Return the field for a given kind."""
        return self.layers[kind]
