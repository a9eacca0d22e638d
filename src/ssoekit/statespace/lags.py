"""Lag bookkeeping for the innovations recursion.

Every state component k reads its own historical row ``i - lag_k`` when the
recursion updates row ``i``. Components are stored as columns of a 2-D
history ``states[time, component]``, so the gather is a fancy-index on
(row, column) pairs rather than a linear offset into a flattened buffer.

No bounds checks are performed on the row indices: callers guarantee
``i >= max_lag`` for forward reads and ``i + max_lag < n_rows`` for backward
reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ssoekit.exceptions import InvalidLagError


@dataclass(frozen=True, eq=False)
class LagStructure:
    """Resolved lag set of a state vector.

    Attributes:
        lags: One positive lag per state component (repeats allowed).
    """

    lags: NDArray[np.int64]
    _columns: NDArray[np.int64] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        lags = np.asarray(self.lags).reshape(-1)
        if lags.size == 0:
            raise InvalidLagError([], "at least one component is required")
        if not np.all(np.equal(np.mod(lags, 1), 0)):
            raise InvalidLagError(lags.tolist(), "lags must be integers")
        lags = lags.astype(np.int64)
        if np.any(lags < 1):
            raise InvalidLagError(lags.tolist(), "lags must be >= 1")
        object.__setattr__(self, "lags", lags)
        object.__setattr__(self, "_columns", np.arange(lags.size, dtype=np.int64))

    @classmethod
    def from_lags(cls, lags: ArrayLike | LagStructure) -> LagStructure:
        if isinstance(lags, LagStructure):
            return lags
        return cls(np.asarray(lags))

    @property
    def max_lag(self) -> int:
        return int(self.lags.max())

    @property
    def n_components(self) -> int:
        return int(self.lags.size)

    def rows(self, i: int) -> NDArray[np.int64]:
        """Absolute history row read by each component when updating row *i*."""
        return i - self.lags

    def back_rows(self, i: int) -> NDArray[np.int64]:
        """Rows read when sweeping backwards in time (future rows)."""
        return i + self.lags

    def gather(self, states: NDArray[np.float64], i: int) -> NDArray[np.float64]:
        """Lagged state vector feeding row *i*."""
        return states[i - self.lags, self._columns]

    def gather_backward(self, states: NDArray[np.float64], i: int) -> NDArray[np.float64]:
        return states[i + self.lags, self._columns]

    def flat_indices(self, i: int, n_rows: int) -> NDArray[np.int64]:
        """Column-major linear indices equivalent to :meth:`rows`.

        Component k is pre-offset by ``k * n_rows`` so that
        ``states.ravel(order="F")[flat_indices(i, n_rows)]`` equals
        ``gather(states, i)`` for a history with *n_rows* rows.
        """
        return i - self.lags + self._columns * n_rows
