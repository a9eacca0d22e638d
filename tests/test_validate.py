"""Tests for optional input validation."""

from __future__ import annotations

import numpy as np
import pytest

from ssoekit.exceptions import DimensionMismatchError, InvalidLagError, SystemSpecError
from ssoekit.statespace import LagStructure, validate_inputs


def _valid(sys, **overrides):
    kwargs = {
        "states": sys.states,
        "transition": sys.transition,
        "measurement": sys.measurement,
        "observed": sys.observed,
        "persistence": sys.persistence,
        "lags": sys.lags,
        "scale": sys.scale,
    }
    kwargs.update(overrides)
    return validate_inputs(**kwargs)


class TestValid:
    def test_returns_lag_structure(self, seasonal):
        lag = _valid(seasonal)
        assert isinstance(lag, LagStructure)
        assert lag.max_lag == 4

    def test_broadcast_forms_accepted(self, seasonal):
        _valid(seasonal, measurement=np.array([1.0, 1.0]), scale=2.0)
        _valid(seasonal, scale=np.ones((seasonal.n_obs, 1)))
        _valid(
            seasonal,
            exog=np.ones((seasonal.n_obs, 2)),
            exog_coefs=np.array([[0.1, 0.2]]),
        )


class TestErrors:
    def test_hierarchy(self):
        assert issubclass(DimensionMismatchError, SystemSpecError)
        assert issubclass(InvalidLagError, SystemSpecError)

    def test_states_too_short(self, seasonal):
        with pytest.raises(DimensionMismatchError, match="obs \\+ max_lag"):
            _valid(seasonal, states=seasonal.states[:-1])

    def test_states_wrong_components(self, seasonal):
        with pytest.raises(DimensionMismatchError, match="states"):
            _valid(seasonal, states=np.zeros((84, 3)))

    def test_transition_not_square(self, seasonal):
        with pytest.raises(DimensionMismatchError, match="transition"):
            _valid(seasonal, transition=np.eye(3))

    def test_measurement_rows(self, seasonal):
        with pytest.raises(DimensionMismatchError, match="measurement"):
            _valid(seasonal, measurement=np.ones((5, 2)))

    def test_persistence_length(self, seasonal):
        with pytest.raises(DimensionMismatchError, match="persistence"):
            _valid(seasonal, persistence=np.ones(3))

    def test_scale_columns(self, seasonal):
        with pytest.raises(DimensionMismatchError, match="scale"):
            _valid(seasonal, scale=np.ones((seasonal.n_obs, 3)))

    def test_exog_requires_coefs(self, seasonal):
        with pytest.raises(DimensionMismatchError, match="exog_coefs"):
            _valid(seasonal, exog=np.ones((seasonal.n_obs, 1)))

    def test_exog_column_mismatch(self, seasonal):
        with pytest.raises(DimensionMismatchError, match="exog_coefs"):
            _valid(
                seasonal,
                exog=np.ones((seasonal.n_obs, 2)),
                exog_coefs=np.ones((seasonal.n_obs, 1)),
            )

    def test_bad_lags(self, seasonal):
        with pytest.raises(InvalidLagError):
            _valid(seasonal, lags=[1, 0])
