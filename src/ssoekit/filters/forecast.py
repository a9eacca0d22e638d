"""Point forecasts and rolling-origin forecast errors."""

from __future__ import annotations

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike, NDArray

from ssoekit.exceptions import FilterError
from ssoekit.filters._arrays import as_rows, copy_states, exog_term, observed_values
from ssoekit.statespace.lags import LagStructure

MISSING = np.nan


def _propagate(
    seed: NDArray[np.float64],
    F: NDArray[np.float64],
    w: NDArray[np.float64],
    ex: NDArray[np.float64],
    horizon: int,
    lag: LagStructure,
) -> NDArray[np.float64]:
    max_lag = lag.max_lag
    buffer = np.zeros((max_lag + horizon, seed.shape[1]), dtype=np.float64)
    buffer[:max_lag] = seed
    out = np.empty(horizon, dtype=np.float64)
    for i in range(max_lag, max_lag + horizon):
        x_lag = lag.gather(buffer, i)
        buffer[i] = F @ x_lag
        out[i - max_lag] = w[i - max_lag] @ x_lag + ex[i - max_lag]
    return out


def forecast(
    states: ArrayLike,
    transition: ArrayLike,
    measurement: ArrayLike,
    horizon: int,
    lags: ArrayLike | LagStructure,
    exog: ArrayLike | None = None,
    exog_coefs: ArrayLike | None = None,
) -> NDArray[np.float64]:
    """Point forecasts from the last ``max_lag`` rows of a state history.

    The state is propagated through the transition matrix only; there is
    no residual feedback and no persistence vector.

    Args:
        states: State history; only its last ``max_lag`` rows are used.
        transition: Transition matrix F, ``(k, k)``.
        measurement: Measurement vector, one row or ``horizon`` rows.
        horizon: Number of steps ahead (>= 1).
        lags: Lag of each state component.
        exog: Optional exogenous regressors for the forecast periods.
        exog_coefs: Coefficients matching *exog*.

    Returns:
        Forecasts, shape (horizon,).

    Raises:
        FilterError: ``horizon < 1``.
    """
    if horizon < 1:
        raise FilterError(f"horizon must be >= 1, got {horizon}")
    lag = LagStructure.from_lags(lags)
    xt = copy_states(states)
    seed = xt[xt.shape[0] - lag.max_lag :]
    F = np.asarray(transition, dtype=np.float64)
    w = as_rows(measurement, horizon)
    ex = exog_term(exog, exog_coefs, horizon)
    return _propagate(seed, F, w, ex, horizon, lag)


def rolling_errors(
    states: ArrayLike,
    transition: ArrayLike,
    measurement: ArrayLike,
    observed: ArrayLike | pd.Series,
    horizon: int,
    lags: ArrayLike | LagStructure,
    exog: ArrayLike | None = None,
    exog_coefs: ArrayLike | None = None,
) -> NDArray[np.float64]:
    """Forecast errors from every in-sample origin, 1 to *horizon* steps ahead.

    Row ``t`` holds the errors of forecasts made with the states available
    before period ``t``. Near the end of the sample fewer horizons can be
    evaluated; those cells hold :data:`MISSING` (NaN). Exactly the first
    ``n_obs - horizon + 1`` rows are fully populated.

    Args:
        states: Filtered state history, ``(n_obs + max_lag, k)``.
        transition: Transition matrix F.
        measurement: Measurement vector, one row or ``n_obs`` rows.
        observed: Observed series.
        horizon: Maximum forecast horizon (>= 1).
        lags: Lag of each state component.
        exog: Optional exogenous regressors, ``(n_obs, n_x)``.
        exog_coefs: Coefficients matching *exog*.

    Returns:
        Error matrix, shape (n_obs, horizon).

    Raises:
        FilterError: ``horizon < 1``.
    """
    if horizon < 1:
        raise FilterError(f"horizon must be >= 1, got {horizon}")
    lag = LagStructure.from_lags(lags)
    max_lag = lag.max_lag
    y, _ = observed_values(observed)
    n_obs = y.size

    xt = np.asarray(states, dtype=np.float64)
    if xt.ndim == 1:
        xt = xt.reshape(-1, 1)
    F = np.asarray(transition, dtype=np.float64)
    w = as_rows(measurement, n_obs)
    ex = exog_term(exog, exog_coefs, n_obs)

    errors = np.full((n_obs, horizon), MISSING, dtype=np.float64)
    for t in range(n_obs):
        hh = min(horizon, n_obs - t)
        seed = xt[t : t + max_lag]
        point = _propagate(seed, F, w[t : t + hh], ex[t : t + hh], hh, lag)
        errors[t, :hh] = y[t : t + hh] - point
    return errors


def errors_frame(
    errors: NDArray[np.float64],
    index: pd.Index | None = None,
) -> pd.DataFrame:
    """Label a rolling error matrix with ``h1..hH`` columns.

    Args:
        errors: Output of :func:`rolling_errors`.
        index: Origin labels (default: 0..n_obs-1 named ``origin``).
    """
    n_obs, horizon = errors.shape
    if index is None:
        index = pd.RangeIndex(n_obs, name="origin")
    columns = [f"h{h}" for h in range(1, horizon + 1)]
    return pd.DataFrame(errors, index=index, columns=columns)
