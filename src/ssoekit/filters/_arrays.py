"""Input coercion shared by the filter, backcaster, forecaster and error evaluator.

Single-row inputs (measurement, scale, exogenous terms) are broadcast to the
number of periods as read-only views; nothing here copies period-sized data
except the state history, which every routine mutates privately.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike, NDArray


def copy_states(states: ArrayLike) -> NDArray[np.float64]:
    """Private float64 copy of a state history, always 2-D."""
    xt = np.array(states, dtype=np.float64, copy=True)
    if xt.ndim == 1:
        xt = xt.reshape(-1, 1)
    return xt


def as_vector(values: ArrayLike) -> NDArray[np.float64]:
    return np.asarray(values, dtype=np.float64).reshape(-1)


def observed_values(observed: ArrayLike | pd.Series) -> tuple[NDArray[np.float64], pd.Index | None]:
    """Flatten the observed series, keeping a pandas index when there is one."""
    if isinstance(observed, pd.Series | pd.DataFrame):
        return as_vector(observed.to_numpy()), observed.index
    return as_vector(observed), None


def as_rows(matrix: ArrayLike, n_rows: int) -> NDArray[np.float64]:
    """``(n_rows, n_cols)`` view of a per-period matrix.

    Longer inputs are cut to their leading *n_rows* rows; a single row is
    broadcast.
    """
    m = np.asarray(matrix, dtype=np.float64)
    if m.ndim < 2:
        m = m.reshape(1, -1)
    if m.shape[0] >= n_rows:
        return m[:n_rows]
    return np.broadcast_to(m, (n_rows, m.shape[1]))


def scale_rows(scale: ArrayLike | None, n_rows: int, n_components: int) -> NDArray[np.float64]:
    """Per-period divisor of the persistence vector, ``(n_rows, n_components)``."""
    if scale is None:
        return np.ones((n_rows, n_components), dtype=np.float64)
    v = np.asarray(scale, dtype=np.float64)
    if v.ndim == 0:
        v = v.reshape(1, 1)
    elif v.ndim == 1:
        v = v.reshape(-1, 1) if v.size == n_rows and n_rows != n_components else v.reshape(1, -1)
    if v.shape[0] >= n_rows:
        v = v[:n_rows]
    return np.broadcast_to(v, (n_rows, n_components))


def exog_term(
    exog: ArrayLike | None,
    exog_coefs: ArrayLike | None,
    n_rows: int,
) -> NDArray[np.float64]:
    """Row-wise inner product ``exog[t] . exog_coefs[t]`` for every period."""
    if exog is None or exog_coefs is None:
        return np.zeros(n_rows, dtype=np.float64)
    x = as_rows(exog, n_rows)
    b = as_rows(exog_coefs, n_rows)
    return np.einsum("ij,ij->i", x, b)


def coefs_copy(exog_coefs: ArrayLike | None) -> NDArray[np.float64] | None:
    if exog_coefs is None:
        return None
    return np.array(exog_coefs, dtype=np.float64, copy=True)
