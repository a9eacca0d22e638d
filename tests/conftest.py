"""Shared fixtures: small synthetic single-source-of-error systems."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pytest
from numpy.typing import NDArray


@dataclass
class System:
    """Matrices and data for one synthetic model."""

    states: NDArray[np.float64]
    transition: NDArray[np.float64]
    measurement: NDArray[np.float64]
    scale: NDArray[np.float64]
    observed: NDArray[np.float64]
    persistence: NDArray[np.float64]
    lags: NDArray[np.int64]

    @property
    def max_lag(self) -> int:
        return int(self.lags.max())

    @property
    def n_obs(self) -> int:
        return int(self.observed.size)

    def args(self) -> tuple:
        """Positional arguments of ``fit`` / ``fit_backcast``."""
        return (
            self.states,
            self.transition,
            self.measurement,
            self.scale,
            self.observed,
            self.persistence,
            self.lags,
        )


def simulate_ssoe(
    transition: NDArray[np.float64],
    measurement: NDArray[np.float64],
    persistence: NDArray[np.float64],
    lags: NDArray[np.int64],
    initial: NDArray[np.float64],
    n_obs: int,
    sigma: float,
    seed: int,
) -> NDArray[np.float64]:
    """Generate observations from an additive-error innovations model."""
    rng = np.random.default_rng(seed)
    max_lag = int(lags.max())
    k = lags.size
    cols = np.arange(k)
    xt = np.zeros((n_obs + max_lag, k))
    xt[:max_lag] = initial
    y = np.zeros(n_obs)
    eps = rng.normal(0.0, sigma, size=n_obs)
    for i in range(max_lag, n_obs + max_lag):
        x_lag = xt[i - lags, cols]
        y[i - max_lag] = measurement @ x_lag + eps[i - max_lag]
        xt[i] = transition @ x_lag + persistence * eps[i - max_lag]
    return y


def _system(
    transition, measurement, persistence, lags, initial, n_obs, sigma, seed,
) -> System:
    transition = np.asarray(transition, dtype=np.float64)
    measurement = np.asarray(measurement, dtype=np.float64)
    persistence = np.asarray(persistence, dtype=np.float64)
    lags = np.asarray(lags, dtype=np.int64)
    initial = np.asarray(initial, dtype=np.float64)
    y = simulate_ssoe(transition, measurement, persistence, lags, initial, n_obs, sigma, seed)
    max_lag = int(lags.max())
    states = np.zeros((n_obs + max_lag, lags.size))
    states[:max_lag] = initial
    return System(
        states=states,
        transition=transition,
        measurement=measurement.reshape(1, -1),
        scale=np.ones((n_obs, lags.size)),
        observed=y,
        persistence=persistence,
        lags=lags,
    )


@pytest.fixture
def local_level() -> System:
    """Local level (simple exponential smoothing), alpha = 0.3, 120 periods."""
    return _system([[1.0]], [1.0], [0.3], [1], [[10.0]], n_obs=120, sigma=0.5, seed=42)


@pytest.fixture
def ar1() -> System:
    """Stationary AR(1)-like innovations model, 150 periods."""
    return _system([[0.7]], [1.0], [0.5], [1], [[0.0]], n_obs=150, sigma=1.0, seed=7)


@pytest.fixture
def seasonal() -> System:
    """Level plus quarterly seasonal component, lags (1, 4), 80 periods."""
    initial = np.array([[0.0, 2.0], [0.0, -1.0], [0.0, 0.5], [20.0, -1.5]])
    return _system(
        np.eye(2), [1.0, 1.0], [0.2, 0.1], [1, 4], initial, n_obs=80, sigma=0.3, seed=2033,
    )
