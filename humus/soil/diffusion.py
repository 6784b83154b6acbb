"""Diffusion and evaporation passes over soil fields.

Operates on the raw NumPy buffers inside ``SoilField`` objects.  Each
pass reads ``current``, writes ``next`` and swaps, so the state other
systems observe between ticks is always fully settled.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from humus.soil.fields import SoilField, SoilFields


def effective_rate(
    base_rate: float,
    dt: float,
    max_dt: float,
    tick_normalization: float,
    rate_cap: float,
) -> float:
    """Return the per-tick diffusion rate for a timestep.

    ``dt`` is clamped to ``max_dt`` so a frame hitch cannot inflate the
    step, and the result never exceeds ``rate_cap``, which bounds the
    share of a cell's content that can move in one tick.

    Args:
        base_rate: Configured diffusion rate.
        dt: Tick duration in seconds.
        max_dt: Upper bound on the timestep used.
        tick_normalization: Nominal ticks per second.
        rate_cap: Upper bound on the returned rate.

    Returns:
        ``min(rate_cap, base_rate * min(dt, max_dt) * tick_normalization)``,
        floored at zero.
    """
    clamped_dt = min(max(dt, 0.0), max_dt)
    return max(0.0, min(rate_cap, base_rate * clamped_dt * tick_normalization))


def _exchange(
    grid: NDArray[np.float32],
) -> tuple[NDArray[np.float32], NDArray[np.float32]]:
    """Sum positive and negative neighbour differences for every cell.

    Only the four cardinal neighbours that exist are considered; edges
    do not wrap.

    Returns:
        ``(outflow, inflow)`` unscaled by any rate.
    """
    outflow = np.zeros_like(grid)
    inflow = np.zeros_like(grid)

    # Horizontal pairs: cell (r, c) against (r, c + 1)
    d = grid[:, :-1] - grid[:, 1:]
    pos = np.maximum(d, 0.0)
    neg = np.maximum(-d, 0.0)
    outflow[:, :-1] += pos
    inflow[:, :-1] += neg
    outflow[:, 1:] += neg
    inflow[:, 1:] += pos

    # Vertical pairs: cell (r, c) against (r + 1, c)
    d = grid[:-1, :] - grid[1:, :]
    pos = np.maximum(d, 0.0)
    neg = np.maximum(-d, 0.0)
    outflow[:-1, :] += pos
    inflow[:-1, :] += neg
    outflow[1:, :] += neg
    inflow[1:, :] += pos

    return outflow, inflow


def diffuse(field: SoilField, rate: float) -> None:
    """Exchange content between 4-connected neighbours.

    A cell gives ``rate * (c - n)`` to every lower neighbour and takes
    ``rate * (n - c)`` from every higher one.  When the total a cell
    would give exceeds what it holds, the outflow is scaled down by
    ``stock / outflow``.  The result is clamped to ``[0, max_value]``
    into ``next`` and the buffers are swapped.

    Args:
        field: The field to diffuse.
        rate: Per-tick rate from ``effective_rate``.
    """
    cur = field.current
    if rate <= 0:
        np.copyto(field.next, cur)
        field.swap()
        return

    outflow, inflow = _exchange(cur)
    outflow *= rate
    inflow *= rate

    # Normalise so no cell gives away more than it holds
    over = outflow > cur
    if np.any(over):
        outflow[over] = cur[over]

    np.clip(cur - outflow + inflow, 0.0, field.max_value, out=field.next)
    field.swap()


def diffuse_all(fields: SoilFields, rate: float) -> None:
    """Run one diffusion pass on every field."""
    for soil_field in fields.layers.values():
        diffuse(soil_field, rate)


def evaporate(
    field: SoilField,
    rate: float,
    lit: NDArray[np.bool_] | None = None,
    shadow_multiplier: float = 0.2,
) -> None:
    """Remove moisture, more slowly in shade.

    Each cell loses ``min(value, rate)``, with ``rate`` scaled by
    ``shadow_multiplier`` wherever ``lit`` is False.

    Args:
        field: The moisture field.
        rate: Loss per tick for a lit cell (already time-scaled).
        lit: Boolean grid of sunlit cells; None means all lit.
        shadow_multiplier: Factor applied to ``rate`` in shade.
    """
    cur = field.current
    if lit is None:
        loss = np.full_like(cur, max(rate, 0.0))
    else:
        loss = np.where(lit, rate, rate * shadow_multiplier).astype(cur.dtype)
        np.maximum(loss, 0.0, out=loss)

    np.minimum(loss, cur, out=loss)
    np.clip(cur - loss, 0.0, field.max_value, out=field.next)
    field.swap()
