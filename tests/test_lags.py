"""Tests for the lag-index resolver."""

from __future__ import annotations

import numpy as np
import pytest

from ssoekit.exceptions import InvalidLagError
from ssoekit.statespace import LagStructure


@pytest.fixture
def lag_sets():
    return [[1], [1, 1, 12], [1, 4], [2, 1, 3, 3], [7]]


class TestResolution:
    def test_rows_are_current_minus_lag(self, lag_sets):
        for lags in lag_sets:
            lag = LagStructure.from_lags(lags)
            for i in range(lag.max_lag, lag.max_lag + 30):
                expected = [i - lk for lk in lags]
                np.testing.assert_array_equal(lag.rows(i), expected)

    def test_back_rows_are_current_plus_lag(self):
        lag = LagStructure.from_lags([1, 4])
        np.testing.assert_array_equal(lag.back_rows(10), [11, 14])

    def test_gather_reads_each_component_at_its_lag(self):
        states = np.arange(60, dtype=np.float64).reshape(20, 3)
        lag = LagStructure.from_lags([1, 1, 12])
        got = lag.gather(states, 15)
        np.testing.assert_array_equal(got, [states[14, 0], states[14, 1], states[3, 2]])

    def test_gather_backward(self):
        states = np.arange(40, dtype=np.float64).reshape(20, 2)
        lag = LagStructure.from_lags([1, 4])
        got = lag.gather_backward(states, 5)
        np.testing.assert_array_equal(got, [states[6, 0], states[9, 1]])

    def test_flat_indices_match_gather(self, lag_sets):
        rng = np.random.default_rng(0)
        for lags in lag_sets:
            lag = LagStructure.from_lags(lags)
            n_rows = lag.max_lag + 25
            states = rng.normal(size=(n_rows, lag.n_components))
            flat = states.ravel(order="F")
            for i in range(lag.max_lag, n_rows):
                np.testing.assert_array_equal(
                    flat[lag.flat_indices(i, n_rows)], lag.gather(states, i)
                )


class TestProperties:
    def test_max_lag_and_components(self):
        lag = LagStructure.from_lags([1, 1, 12])
        assert lag.max_lag == 12
        assert lag.n_components == 3
        assert lag.lags.dtype == np.int64

    def test_from_lags_passthrough(self):
        lag = LagStructure.from_lags([1, 4])
        assert LagStructure.from_lags(lag) is lag

    def test_column_vector_input(self):
        lag = LagStructure.from_lags(np.array([[1], [4]]))
        np.testing.assert_array_equal(lag.lags, [1, 4])

    def test_float_integers_accepted(self):
        lag = LagStructure.from_lags([1.0, 12.0])
        assert lag.max_lag == 12


class TestErrors:
    def test_zero_lag(self):
        with pytest.raises(InvalidLagError, match=">= 1"):
            LagStructure.from_lags([1, 0])

    def test_negative_lag(self):
        with pytest.raises(InvalidLagError, match=">= 1"):
            LagStructure.from_lags([-2])

    def test_empty(self):
        with pytest.raises(InvalidLagError, match="at least one"):
            LagStructure.from_lags([])

    def test_fractional(self):
        with pytest.raises(InvalidLagError, match="integers"):
            LagStructure.from_lags([1, 1.5])
