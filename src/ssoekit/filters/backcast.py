"""Backcast initialisation of the pre-sample state.

The recursion is run forwards through the data, then backwards through it
with every component reading its *future* row ``i + lag_k``, so that the
backward sweep refines the ``max_lag`` leading rows. The cycle is repeated a
fixed number of times; the last cycle runs forwards only, so the leading
rows it used are exactly the ones returned.

Layout of the working history (``obs_all = max_lag + n_obs``)::

    [0, max_lag)             pre-sample rows (backcast)
    [max_lag, obs_all)       in-sample rows (filtered)
    [obs_all, obs_all + L)   scratch rows, forward-propagated by F only,
                             read by the backward sweep and then discarded
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike

from ssoekit.filters._arrays import (
    as_rows,
    coefs_copy,
    copy_states,
    exog_term,
    observed_values,
)
from ssoekit.filters.fitter import (
    FitResult,
    _gain,
    _innovations_pass,
    _propagate_pass,
    _repair_block,
)
from ssoekit.statespace.lags import LagStructure

logger = logging.getLogger(__name__)

BACKCAST_CYCLES = 4


def fit_backcast(
    states: ArrayLike,
    transition: ArrayLike,
    measurement: ArrayLike,
    scale: ArrayLike | None,
    observed: ArrayLike | pd.Series,
    persistence: ArrayLike,
    lags: ArrayLike | LagStructure,
    exog: ArrayLike | None = None,
    exog_coefs: ArrayLike | None = None,
) -> FitResult:
    """Filter the series with backcast pre-sample states.

    Arguments are those of :func:`ssoekit.filters.fit`. The supplied
    pre-sample rows are only a starting point; they are overwritten by
    :data:`BACKCAST_CYCLES` forward/backward sweeps. No convergence check is
    made.

    Returns:
        FitResult with ``backcast=True``. Fitted values and residuals are
        those of the final forward sweep. ``states`` has the same number of
        rows as the input.
    """
    lag = LagStructure.from_lags(lags)
    max_lag = lag.max_lag
    y, index = observed_values(observed)
    n_obs = y.size
    obs_all = max_lag + n_obs

    xt = copy_states(states)
    work = np.zeros((obs_all + max_lag, xt.shape[1]), dtype=np.float64)
    work[:obs_all] = xt[:obs_all]

    F = np.asarray(transition, dtype=np.float64)
    w = as_rows(measurement, n_obs)
    gain = _gain(persistence, scale, n_obs, lag.n_components)
    ex = exog_term(exog, exog_coefs, n_obs)

    fitted = np.zeros(n_obs, dtype=np.float64)
    errors = np.zeros(n_obs, dtype=np.float64)

    forward_rows = range(max_lag, obs_all)
    scratch_rows = range(obs_all, obs_all + max_lag)
    backward_rows = range(obs_all - 1, max_lag - 1, -1)
    presample_rows = range(max_lag - 1, -1, -1)

    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        n_sub = _repair_block(work[:max_lag], -1)
        for cycle in range(BACKCAST_CYCLES):
            n_sub += _innovations_pass(
                work, forward_rows, lag.gather, -1,
                lag, F, w, gain, y, ex, fitted, errors,
            )
            n_sub += _propagate_pass(work, scratch_rows, lag.gather, -1, F)

            if cycle < BACKCAST_CYCLES - 1:
                n_sub += _innovations_pass(
                    work, backward_rows, lag.gather_backward, 1,
                    lag, F, w, gain, y, ex, fitted, errors,
                )
                n_sub += _propagate_pass(work, presample_rows, lag.gather_backward, 1, F)

            logger.debug("Backcast cycle %d/%d done", cycle + 1, BACKCAST_CYCLES)

    if n_sub:
        logger.debug("Replaced %d non-finite state values", n_sub)

    xt[:obs_all] = work[:obs_all]

    return FitResult(
        states=xt,
        fitted=fitted,
        residuals=errors,
        exog_coefs=coefs_copy(exog_coefs),
        max_lag=max_lag,
        backcast=True,
        n_substitutions=n_sub,
        index=index,
    )
