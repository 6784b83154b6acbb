"""BalanceHistory — rolling record of soil totals for graphs and logs."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from humus.simulation.engine import SoilSimulation


class BalanceSample(NamedTuple):
    """Grid-wide totals at the end of one tick."""

    tick: int
    total_moisture: float
    total_nitrogen: float


@dataclass
class BalanceHistory:
    """Fixed-length ring buffer of balance samples.

    Attributes:
        maxlen: Most samples kept; older ones drop off the front.
    """

    maxlen: int = 600
    _samples: deque[BalanceSample] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.maxlen <= 0:
            msg = f"maxlen must be positive, got {self.maxlen}"
            raise ValueError(msg)
        self._samples = deque(maxlen=self.maxlen)

    def __len__(self) -> int:
        return len(self._samples)

    def record(self, soil: SoilSimulation) -> BalanceSample:
        """Append the soil's current totals and return the new sample."""
        sample = BalanceSample(
            tick=soil.tick_count,
            total_moisture=soil.get_total_moisture(),
            total_nitrogen=soil.get_total_nitrogen(),
        )
        self._samples.append(sample)
        return sample

    @property
    def latest(self) -> BalanceSample | None:
        return self._samples[-1] if self._samples else None

    def as_arrays(self) -> dict[str, NDArray[np.float64]]:
        """Return the history column-wise, oldest first."""
        if not self._samples:
            empty = np.empty(0, dtype=np.float64)
            return {"tick": empty, "total_moisture": empty, "total_nitrogen": empty}
        data = np.array(self._samples, dtype=np.float64)
        return {
            "tick": data[:, 0],
            "total_moisture": data[:, 1],
            "total_nitrogen": data[:, 2],
        }
