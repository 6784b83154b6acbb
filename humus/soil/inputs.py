"""External inputs — rain, point deltas, and radius absorption.

These act directly on a field's ``current`` buffer.  They are applied
before the diffusion pass of the tick in which they are issued; a call
made after ``tick`` has run is first diffused on the following tick.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

from humus.soil.fields import SoilField


def apply_rain(
    field: SoilField,
    intensity: float,
    coefficient: float,
    dt: float,
) -> None:
    """Add rain uniformly across the moisture field.

    Rain only adds, and never pushes a cell past saturation.

    Args:
        field: The moisture field.
        intensity: Rain strength, clamped to ``[0, 1]``.
        coefficient: Moisture added per second at full intensity.
        dt: Tick duration in seconds.
    """
    intensity = min(max(intensity, 0.0), 1.0)
    amount = intensity * coefficient * dt
    if not amount > 0:
        return
    cur = field.current
    np.clip(cur + np.float32(amount), 0.0, field.max_value, out=cur)


def modify_at(field: SoilField, index: int | None, amount: float) -> None:
    """Add ``amount`` (possibly negative) to a single cell.

    Args:
        field: Target field.
        index: Row-major storage index, or None for an out-of-grid cell.
        amount: Signed change, clamped to ``[0, max_value]`` after adding.
            A non-finite amount is ignored.
    """
    if index is None or not math.isfinite(amount):
        return
    field.set_clamped(index, field.get(index) + amount)


def absorb(
    field: SoilField,
    rows: NDArray[np.intp],
    cols: NDArray[np.intp],
    max_amount: float,
    fraction: float = 0.5,
) -> float:
    """Draw moisture from a set of cells in proportion to their share.

    At most ``fraction`` of the moisture available across the cells is
    removed in one call.  Shares come from the values before the call,
    so each cell gives ``value / total * to_absorb``.  Successive callers
    over the same region see each other's withdrawals in call order.

    Args:
        field: The moisture field.
        rows: Row indices of the cells in range.
        cols: Column indices of the cells in range.
        max_amount: Most the caller wants; non-positive draws nothing.
        fraction: Cap on the share of available moisture removed.

    Returns:
        The amount actually removed.
    """
    if rows.size == 0 or not max_amount > 0:
        return 0.0

    cur = field.current
    before = cur[rows, cols].astype(np.float64)
    total = float(before.sum())
    if total <= 0:
        return 0.0

    to_absorb = min(max_amount, total * fraction)
    after = np.maximum(before - before / total * to_absorb, 0.0)
    cur[rows, cols] = after.astype(cur.dtype)

    # Measured after float32 rounding, never reported above the cap
    removed = float(np.maximum(before - cur[rows, cols], 0.0).sum())
    return min(removed, to_absorb)
