"""One-pass innovations filter for single-source-of-error state-space models.

Measurement equation: y_t = w_t' x_{t-l} + x_t' b_t + e_t
Transition equation:  x_t = F x_{t-l} + (g / v_t) e_t

where x_{t-l} stacks component k of the state at its own lag l_k,
v_t is the per-period scale dividing the persistence vector g, and the
exogenous term x_t' b_t is optional.

Non-finite entries in a freshly written state row are replaced by the
adjacent value of the same component (the previous row when sweeping
forwards, the next row when sweeping backwards). The number of such
substitutions is reported on the result but never raised.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike, NDArray

from ssoekit.filters._arrays import (
    as_rows,
    as_vector,
    coefs_copy,
    copy_states,
    exog_term,
    observed_values,
    scale_rows,
)
from ssoekit.statespace.lags import LagStructure

logger = logging.getLogger(__name__)

Gather = Callable[[NDArray[np.float64], int], NDArray[np.float64]]


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------


@dataclass
class FitResult:
    """Results from the innovations filter.

    Attributes:
        states: State history including the ``max_lag`` pre-sample rows,
            shape (n_obs + max_lag, n_components).
        fitted: One-step-ahead fitted values, shape (n_obs,).
        residuals: One-step errors ``observed - fitted``, shape (n_obs,).
        exog_coefs: Exogenous coefficients (copy of the input, or None).
        max_lag: Largest lag of the state vector.
        backcast: Whether the pre-sample rows were backcast.
        n_substitutions: Non-finite state values repaired during the run.
        index: Index of the observed series when it was a pandas object.
    """

    states: NDArray[np.float64]
    fitted: NDArray[np.float64]
    residuals: NDArray[np.float64]
    exog_coefs: NDArray[np.float64] | None
    max_lag: int
    backcast: bool = False
    n_substitutions: int = 0
    index: pd.Index | None = None

    @property
    def n_obs(self) -> int:
        return int(self.fitted.shape[0])

    @property
    def initial_states(self) -> NDArray[np.float64]:
        """Pre-sample rows (the first ``max_lag`` rows of the history)."""
        return self.states[: self.max_lag]

    @property
    def final_states(self) -> NDArray[np.float64]:
        """Last ``max_lag`` rows; the seed for :func:`ssoekit.filters.forecast`."""
        end = self.max_lag + self.n_obs
        return self.states[end - self.max_lag : end]

    def summary(self) -> str:
        """Human-readable summary."""
        mse = float(np.mean(self.residuals**2)) if self.n_obs else float("nan")
        lines = [
            "Innovations Filter Results",
            "=" * 40,
            f"  Periods:            {self.n_obs}",
            f"  Components:         {self.states.shape[1]}",
            f"  Max lag:            {self.max_lag}",
            f"  Initialisation:     {'backcast' if self.backcast else 'provided'}",
            f"  Substitutions:      {self.n_substitutions}",
            "",
            f"  MSE:                {mse:.6g}",
        ]
        return "\n".join(lines)

    def to_frame(self) -> pd.DataFrame:
        """Actuals, fitted values and residuals as a DataFrame."""
        index = self.index if self.index is not None else pd.RangeIndex(self.n_obs)
        df = pd.DataFrame(
            {
                "actual": self.fitted + self.residuals,
                "fitted": self.fitted,
                "residual": self.residuals,
            },
            index=index,
        )
        if df.index.name is None:
            df.index.name = "period"
        return df

    def plot(
        self,
        *,
        figsize: tuple[float, float] | None = None,
        title: str = "Innovations Filter",
    ):
        """Plot actuals against fitted values, with residuals below.

        Returns:
            matplotlib Figure.
        """
        try:
            import matplotlib.pyplot as plt
        except ImportError as err:
            raise ImportError(
                "matplotlib is required for plotting. "
                "Install with: pip install ssoekit[plot]"
            ) from err

        frame = self.to_frame()
        if figsize is None:
            figsize = (12, 6)
        fig, (ax_fit, ax_res) = plt.subplots(2, 1, figsize=figsize, sharex=True)
        ax_fit.plot(frame.index, frame["actual"], "k-", linewidth=1.0, label="Actual")
        ax_fit.plot(frame.index, frame["fitted"], "b-", linewidth=1.2, label="Fitted")
        ax_fit.grid(True, alpha=0.3)
        ax_fit.legend(loc="best", fontsize="small")
        ax_res.plot(frame.index, frame["residual"], "r-", linewidth=0.8)
        ax_res.axhline(0.0, color="k", linewidth=0.5)
        ax_res.set_ylabel("residual")
        ax_res.grid(True, alpha=0.3)
        ax_res.set_xlabel("Period")
        fig.suptitle(title)
        fig.tight_layout()
        return fig


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _hold_adjacent(xt: NDArray[np.float64], row: int, source: int) -> int:
    """Replace non-finite entries of ``xt[row]`` with ``xt[source]``."""
    bad = ~np.isfinite(xt[row])
    if not bad.any():
        return 0
    xt[row, bad] = xt[source, bad]
    return int(bad.sum())


def _repair_block(block: NDArray[np.float64], step: int) -> int:
    """Column-major hold-adjacent repair of a whole block of rows.

    Every non-finite entry takes the value *step* positions away in
    column-major order, all reads happening before any write.
    """
    flat = block.ravel(order="F").copy()
    bad = np.flatnonzero(~np.isfinite(flat))
    if bad.size == 0:
        return 0
    src = bad + step
    keep = (src >= 0) & (src < flat.size)
    flat[bad[keep]] = flat[src[keep]]
    block[...] = flat.reshape(block.shape, order="F")
    return int(keep.sum())


def _gain(
    persistence: ArrayLike,
    scale: ArrayLike | None,
    n_obs: int,
    n_components: int,
) -> NDArray[np.float64]:
    g = as_vector(persistence)
    v = scale_rows(scale, n_obs, n_components)
    with np.errstate(divide="ignore", invalid="ignore"):
        return g[np.newaxis, :] / v


def _innovations_pass(
    xt: NDArray[np.float64],
    rows: range,
    gather: Gather,
    source_offset: int,
    lag: LagStructure,
    F: NDArray[np.float64],
    w: NDArray[np.float64],
    gain: NDArray[np.float64],
    y: NDArray[np.float64],
    ex: NDArray[np.float64],
    fitted: NDArray[np.float64],
    errors: NDArray[np.float64],
) -> int:
    """Update rows *rows* with residual feedback; returns substitutions."""
    max_lag = lag.max_lag
    n_sub = 0
    for i in rows:
        t = i - max_lag
        x_lag = gather(xt, i)
        fitted[t] = w[t] @ x_lag + ex[t]
        errors[t] = y[t] - fitted[t]
        xt[i] = F @ x_lag + gain[t] * errors[t]
        n_sub += _hold_adjacent(xt, i, i + source_offset)
    return n_sub


def _propagate_pass(
    xt: NDArray[np.float64],
    rows: range,
    gather: Gather,
    source_offset: int,
    F: NDArray[np.float64],
) -> int:
    """Update rows *rows* through the transition matrix alone."""
    n_sub = 0
    for i in rows:
        xt[i] = F @ gather(xt, i)
        n_sub += _hold_adjacent(xt, i, i + source_offset)
    return n_sub


# ---------------------------------------------------------------------------
# Main filter
# ---------------------------------------------------------------------------


def fit(
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
    """Run the innovations filter once over the observed series.

    Args:
        states: State history, ``(n_obs + max_lag, k)``. The first
            ``max_lag`` rows hold the pre-sample state; later rows are
            overwritten. The argument itself is not modified.
        transition: Transition matrix F, ``(k, k)``.
        measurement: Measurement vector w, ``(k,)``, ``(1, k)`` or
            ``(n_obs, k)``.
        scale: Divisor of the persistence vector per period (scalar,
            single row, or ``n_obs`` rows). ``None`` means 1.
        observed: Observed series, ``n_obs`` values.
        persistence: Persistence (smoothing) vector g, ``k`` values.
        lags: Lag of each state component.
        exog: Optional exogenous regressors, ``(n_obs, n_x)``.
        exog_coefs: Coefficients matching *exog*.

    Returns:
        FitResult
    """
    lag = LagStructure.from_lags(lags)
    max_lag = lag.max_lag
    y, index = observed_values(observed)
    n_obs = y.size

    xt = copy_states(states)
    F = np.asarray(transition, dtype=np.float64)
    w = as_rows(measurement, n_obs)
    gain = _gain(persistence, scale, n_obs, lag.n_components)
    ex = exog_term(exog, exog_coefs, n_obs)

    fitted = np.zeros(n_obs, dtype=np.float64)
    errors = np.zeros(n_obs, dtype=np.float64)

    with np.errstate(over="ignore", invalid="ignore", divide="ignore"):
        n_sub = _repair_block(xt[:max_lag], -1)
        n_sub += _innovations_pass(
            xt, range(max_lag, max_lag + n_obs), lag.gather, -1,
            lag, F, w, gain, y, ex, fitted, errors,
        )

    if n_sub:
        logger.debug("Replaced %d non-finite state values", n_sub)

    return FitResult(
        states=xt,
        fitted=fitted,
        residuals=errors,
        exog_coefs=coefs_copy(exog_coefs),
        max_lag=max_lag,
        backcast=False,
        n_substitutions=n_sub,
        index=index,
    )
