"""GridIndex — world-space to cell-space mapping for the soil grid.

The grid is ``grid_size`` cells per axis, centred on the world origin.
Cell coordinates run over ``[-half, grid_size - half)`` on both axes and
are stored row-major (``z`` selects the row, ``x`` the column).

Every field operation funnels through this class.  Coordinates outside
the grid resolve to ``None`` rather than raising, so callers reaching
past the border get a silent no-op.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class GridIndex:
    """Fixed-size square grid centred on the world origin.

    Attributes:
        grid_size: Number of cells per axis.
        cell_size: World units spanned by one cell.
        half: Cell offset of the grid origin (``grid_size // 2``).
    """

    grid_size: int
    cell_size: float = 1.0
    half: int = field(init=False)

    def __post_init__(self) -> None:
        """Validate dimensions and derive the half-extent."""
        if self.grid_size <= 0:
            msg = f"grid_size must be positive, got {self.grid_size}"
            raise ValueError(msg)
        if not self.cell_size > 0:
            msg = f"cell_size must be positive, got {self.cell_size}"
            raise ValueError(msg)
        object.__setattr__(self, "half", self.grid_size // 2)

    @property
    def cell_count(self) -> int:
        """Total number of cells in the grid."""
        return self.grid_size * self.grid_size

    @property
    def shape(self) -> tuple[int, int]:
        """Array shape ``(rows, cols)`` of a field over this grid."""
        return (self.grid_size, self.grid_size)

    def to_cell(self, world_x: float, world_z: float) -> tuple[int, int]:
        """Return the cell containing a world-space point.

        Args:
            world_x: World X coordinate.
            world_z: World Z coordinate.

        Returns:
            ``(cell_x, cell_z)``, which may lie outside the grid.
        """
        return (
            math.floor(world_x / self.cell_size),
            math.floor(world_z / self.cell_size),
        )

    def contains(self, cell_x: int, cell_z: int) -> bool:
        """Return True if the cell lies inside the grid."""
        lo = -self.half
        hi = self.grid_size - self.half
        return lo <= cell_x < hi and lo <= cell_z < hi

    def to_row_col(self, cell_x: int, cell_z: int) -> tuple[int, int] | None:
        """Return the ``(row, col)`` array position of a cell, or None."""
        if not self.contains(cell_x, cell_z):
            return None
        return (cell_z + self.half, cell_x + self.half)

    def to_linear_index(self, cell_x: int, cell_z: int) -> int | None:
        """Return the row-major storage index of a cell.

        Args:
            cell_x: Cell column coordinate.
            cell_z: Cell row coordinate.

        Returns:
            ``(cell_z + half) * grid_size + (cell_x + half)``, or None
            when the cell is outside the grid.
        """
        pos = self.to_row_col(cell_x, cell_z)
        if pos is None:
            return None
        row, col = pos
        return row * self.grid_size + col

    def world_to_index(self, world_x: float, world_z: float) -> int | None:
        """Resolve a world-space point straight to a storage index.

        Non-finite coordinates resolve to None like any off-grid point.
        """
        if not (math.isfinite(world_x) and math.isfinite(world_z)):
            return None
        return self.to_linear_index(*self.to_cell(world_x, world_z))

    def cell_center(self, cell_x: int, cell_z: int) -> tuple[float, float]:
        """Return the world-space centre of a cell."""
        return (
            (cell_x + 0.5) * self.cell_size,
            (cell_z + 0.5) * self.cell_size,
        )

    def cell_centers(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Return world-space centres of all cells as two ``(N, N)`` arrays.

        Returns:
            ``(xs, zs)`` where ``xs[row, col]`` and ``zs[row, col]`` give
            the centre of the cell stored at ``(row, col)``.
        """
        coords = (np.arange(self.grid_size) - self.half + 0.5) * self.cell_size
        zs, xs = np.meshgrid(coords, coords, indexing="ij")
        return xs, zs

    def cells_within_radius(
        self,
        world_x: float,
        world_z: float,
        radius: float,
    ) -> tuple[NDArray[np.intp], NDArray[np.intp]]:
        """Return in-grid cells whose centre lies within ``radius`` of a point.

        The footprint is circular and the boundary is inclusive.  Cells
        beyond the grid edge are skipped.  A non-finite point or a NaN
        radius matches nothing; an infinite radius covers the grid.

        Args:
            world_x: World X of the query point.
            world_z: World Z of the query point.
            radius: Euclidean radius in world units.

        Returns:
            ``(rows, cols)`` index arrays usable for fancy indexing into a
            field.  Both are empty when nothing is in range.
        """
        empty = np.empty(0, dtype=np.intp)
        if not (math.isfinite(world_x) and math.isfinite(world_z)):
            return empty, empty
        if math.isnan(radius) or radius < 0:
            return empty, empty
        if math.isinf(radius):
            extent = self.grid_size * self.cell_size
            radius = math.hypot(abs(world_x) + extent, abs(world_z) + extent)

        cs = self.cell_size
        lo_x = max(math.floor((world_x - radius) / cs), -self.half)
        hi_x = min(math.floor((world_x + radius) / cs), self.grid_size - self.half - 1)
        lo_z = max(math.floor((world_z - radius) / cs), -self.half)
        hi_z = min(math.floor((world_z + radius) / cs), self.grid_size - self.half - 1)
        if lo_x > hi_x or lo_z > hi_z:
            return empty, empty

        cell_xs = np.arange(lo_x, hi_x + 1)
        cell_zs = np.arange(lo_z, hi_z + 1)
        grid_z, grid_x = np.meshgrid(cell_zs, cell_xs, indexing="ij")
        dx = (grid_x + 0.5) * cs - world_x
        dz = (grid_z + 0.5) * cs - world_z
        inside = dx * dx + dz * dz <= radius * radius

        rows = (grid_z[inside] + self.half).astype(np.intp)
        cols = (grid_x[inside] + self.half).astype(np.intp)
        return rows, cols
