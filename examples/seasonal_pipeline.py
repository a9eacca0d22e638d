"""End-to-end additive level + seasonal example: estimate, filter, forecast.

The model layer (matrices for level + quarterly season, parameter bounds)
is written inline; scipy's Nelder-Mead plays the external optimizer.

Run from repository root:
    python examples/seasonal_pipeline.py
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from scipy import optimize

from ssoekit.estimation import cost, information_criteria, log_likelihood
from ssoekit.filters import errors_frame, fit_backcast, forecast, rolling_errors

LAGS = np.array([1, 4])
TRANSITION = np.eye(2)
MEASUREMENT = np.array([[1.0, 1.0]])


def simulate_quarterly(n_obs: int = 96, seed: int = 42) -> pd.Series:
    rng = np.random.default_rng(seed)
    season = np.tile([3.0, -1.0, 0.5, -2.5], n_obs // 4 + 1)[:n_obs]
    level = 50.0 + np.cumsum(rng.normal(0.0, 0.3, size=n_obs))
    y = level + season + rng.normal(0.0, 0.8, size=n_obs)
    index = pd.period_range("2000Q1", periods=n_obs, freq="Q")
    return pd.Series(y, index=index, name="y")


def initial_states(y: pd.Series) -> np.ndarray:
    """Level from the first year, seasonal deviations around it."""
    first_year = y.to_numpy()[:4]
    states = np.zeros((y.size + 4, 2))
    states[:4, 0] = first_year.mean()
    states[:4, 1] = first_year - first_year.mean()
    return states


def make_objective(y: pd.Series, states: np.ndarray, loss: str, horizon: int):
    def objective(params: np.ndarray) -> float:
        if np.any(params <= 0.0) or np.any(params >= 1.0):
            return 1e100
        return cost(
            states, TRANSITION, MEASUREMENT, None, y, params, horizon, LAGS, loss,
            backcast=True,
        )

    return objective


def main() -> None:
    y = simulate_quarterly()
    states = initial_states(y)

    estimates = {}
    for loss, horizon in (("MSE", 1), ("TLV", 4), ("GV", 4)):
        res = optimize.minimize(
            make_objective(y, states, loss, horizon),
            x0=np.array([0.3, 0.1]),
            method="Nelder-Mead",
            options={"xatol": 1e-8, "fatol": 1e-10, "maxiter": 2000},
        )
        estimates[loss] = res.x
        print(f"== {loss} (h={horizon}) ==")
        print(f"  persistence = {res.x}, cost = {res.fun:.6f}")
    print()

    persistence = estimates["MSE"]
    result = fit_backcast(states, TRANSITION, MEASUREMENT, None, y, persistence, LAGS)
    print(result.summary())
    print()

    ll = log_likelihood(result.residuals)
    print("== Information criteria (2 smoothing + 4 initial + variance) ==")
    for name, value in information_criteria(ll, n_params=7, n_obs=result.n_obs).items():
        print(f"  {name}: {value:.3f}")
    print()

    fc = forecast(result.final_states, TRANSITION, MEASUREMENT, 8, LAGS)
    future = pd.period_range(y.index[-1] + 1, periods=8, freq="Q")
    print("== Forecast ==")
    print(pd.Series(fc, index=future, name="forecast").to_string())
    print()

    errors = rolling_errors(result.states, TRANSITION, MEASUREMENT, y, 4, LAGS)
    frame = errors_frame(errors, index=y.index)
    print("== Rolling-origin RMSE by horizon ==")
    print(np.sqrt((frame**2).mean()).to_string())


if __name__ == "__main__":
    np.set_printoptions(precision=6, suppress=True)
    main()
