"""End-to-end: optimize persistence through the cost function, then forecast."""

from __future__ import annotations

import numpy as np
import pytest
from scipy import optimize

import ssoekit
from ssoekit.estimation import cost, information_criteria, log_likelihood
from ssoekit.filters import errors_frame, fit_backcast, forecast, rolling_errors


def _objective(sys, loss, horizon=1):
    def objective(alpha: float) -> float:
        return cost(
            sys.states,
            sys.transition,
            sys.measurement,
            sys.scale,
            sys.observed,
            np.array([alpha]),
            horizon,
            sys.lags,
            loss,
            backcast=True,
        )

    return objective


class TestTopLevel:
    def test_public_names(self):
        for name in ("fit", "fit_backcast", "forecast", "rolling_errors", "cost", "CostKind"):
            assert hasattr(ssoekit, name)
        assert isinstance(ssoekit.__version__, str)


class TestEstimation:
    @pytest.mark.parametrize("loss,horizon", [("MSE", 1), ("TLV", 3), ("GV", 3)])
    def test_optimum_beats_grid(self, local_level, loss, horizon):
        objective = _objective(local_level, loss, horizon)
        res = optimize.minimize_scalar(objective, bounds=(0.01, 0.99), method="bounded")
        assert 0.01 <= res.x <= 0.99
        assert np.isfinite(res.fun)
        for alpha in (0.05, 0.5, 0.95):
            assert res.fun <= objective(alpha) + 1e-9

    def test_mse_estimate_near_truth(self, local_level):
        objective = _objective(local_level, "MSE")
        res = optimize.minimize_scalar(objective, bounds=(0.01, 0.99), method="bounded")
        assert 0.05 < res.x < 0.8

    def test_fit_forecast_and_score(self, local_level):
        objective = _objective(local_level, "MSE")
        alpha = optimize.minimize_scalar(objective, bounds=(0.01, 0.99), method="bounded").x
        args = list(local_level.args())
        args[5] = np.array([alpha])
        result = fit_backcast(*args)

        fc = forecast(result.final_states, local_level.transition, local_level.measurement, 10, [1])
        assert fc.shape == (10,)
        np.testing.assert_allclose(fc, result.states[-1, 0])

        errors = rolling_errors(
            result.states, local_level.transition, local_level.measurement,
            local_level.observed, 4, [1],
        )
        frame = errors_frame(errors)
        assert frame.shape == (local_level.n_obs, 4)

        ll = log_likelihood(result.residuals)
        ic = information_criteria(ll, n_params=3, n_obs=result.n_obs)
        assert ic["AIC"] < ic["BIC"]
