"""Optional shape checks for engine inputs.

The recursion itself treats consistent shapes as a precondition and never
calls these checks. Model layers that assemble matrices from user input can
run :func:`validate_inputs` once before handing them to an optimizer loop.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike

from ssoekit.exceptions import DimensionMismatchError
from ssoekit.statespace.lags import LagStructure


def _rows_ok(n_rows: int, expected: int) -> bool:
    return n_rows in (1, expected)


def validate_inputs(
    states: ArrayLike,
    transition: ArrayLike,
    measurement: ArrayLike,
    observed: ArrayLike,
    persistence: ArrayLike,
    lags: ArrayLike | LagStructure,
    *,
    scale: ArrayLike | None = None,
    exog: ArrayLike | None = None,
    exog_coefs: ArrayLike | None = None,
) -> LagStructure:
    """Validate dimensions of a full set of engine inputs.

    Args:
        states: State history, ``(obs + max_lag, k)``.
        transition: ``(k, k)``.
        measurement: ``(k,)``, ``(1, k)`` or ``(obs, k)``.
        observed: ``obs`` values.
        persistence: ``k`` values.
        lags: ``k`` positive integers.
        scale: Scalar, a single row, or ``obs`` rows of 1 or ``k`` columns.
        exog: Single row or ``(obs, n_x)``.
        exog_coefs: Same layout as *exog*.

    Returns:
        The resolved :class:`LagStructure`.

    Raises:
        InvalidLagError: Lags are empty or non-positive.
        DimensionMismatchError: Any shape disagrees with the others.
    """
    lag_structure = LagStructure.from_lags(lags)
    k = lag_structure.n_components
    max_lag = lag_structure.max_lag

    y = np.asarray(observed, dtype=np.float64).reshape(-1)
    n_obs = y.size

    xt = np.asarray(states, dtype=np.float64)
    if xt.ndim != 2 or xt.shape[1] != k:
        raise DimensionMismatchError("states", xt.shape, f"(n_rows, {k})")
    if xt.shape[0] < n_obs + max_lag:
        raise DimensionMismatchError(
            "states", xt.shape, f"at least {n_obs + max_lag} rows (obs + max_lag)"
        )

    F = np.asarray(transition, dtype=np.float64)
    if F.shape != (k, k):
        raise DimensionMismatchError("transition", F.shape, f"({k}, {k})")

    w = np.asarray(measurement, dtype=np.float64)
    w2 = w.reshape(1, -1) if w.ndim == 1 else w
    if w2.ndim != 2 or w2.shape[1] != k or not _rows_ok(w2.shape[0], n_obs):
        raise DimensionMismatchError("measurement", w.shape, f"(1, {k}) or ({n_obs}, {k})")

    g = np.asarray(persistence, dtype=np.float64)
    if g.size != k:
        raise DimensionMismatchError("persistence", g.shape, f"({k},)")

    if scale is not None:
        v = np.asarray(scale, dtype=np.float64)
        v2 = v.reshape(1, -1) if v.ndim <= 1 else v
        if v2.ndim != 2 or v2.shape[1] not in (1, k) or not _rows_ok(v2.shape[0], n_obs):
            raise DimensionMismatchError(
                "scale", v.shape, f"scalar, (1, {k}), ({n_obs}, 1) or ({n_obs}, {k})"
            )

    if (exog is None) != (exog_coefs is None):
        raise DimensionMismatchError(
            "exog" if exog is None else "exog_coefs",
            (0,),
            "both exog and exog_coefs, or neither",
        )
    if exog is not None and exog_coefs is not None:
        x = np.atleast_2d(np.asarray(exog, dtype=np.float64))
        b = np.atleast_2d(np.asarray(exog_coefs, dtype=np.float64))
        if not _rows_ok(x.shape[0], n_obs):
            raise DimensionMismatchError("exog", x.shape, f"1 or {n_obs} rows")
        if not _rows_ok(b.shape[0], n_obs) or b.shape[1] != x.shape[1]:
            raise DimensionMismatchError(
                "exog_coefs", b.shape, f"1 or {n_obs} rows of {x.shape[1]} columns"
            )

    return lag_structure
