"""Cost functions driven by an external parameter optimizer.

Each call filters the series (optionally with backcast initial states) and
reduces the result to one scalar:

======== ============================================================
GV       log|Sigma_E| + h log(normalizer^2), Sigma_E the covariance of
         the fully populated rows of the rolling error matrix
TLV      sum_h log(mean(e_h^2))
TV       sum_h mean(e_h^2)
hsteps   mean(e_H^2) at the largest horizon only
MSE      mean(e^2) of the one-step residuals
MAE      mean(|e|)
HAM      mean(sqrt(|e|)), used for any unrecognised name
======== ============================================================
"""

from __future__ import annotations

import logging
from enum import Enum

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike, NDArray
from scipy import linalg

from ssoekit.exceptions import FilterError
from ssoekit.filters.backcast import fit_backcast
from ssoekit.filters.fitter import fit
from ssoekit.filters.forecast import rolling_errors
from ssoekit.statespace.lags import LagStructure

logger = logging.getLogger(__name__)


class CostKind(Enum):
    """Loss applied to the filter or rolling-origin errors."""

    GV = "GV"
    TLV = "TLV"
    TV = "TV"
    HSTEPS = "hsteps"
    MSE = "MSE"
    MAE = "MAE"
    HAM = "HAM"

    @classmethod
    def parse(cls, value: str | CostKind) -> CostKind:
        """Resolve a loss name; anything unrecognised maps to :attr:`HAM`."""
        if isinstance(value, CostKind):
            return value
        try:
            return cls(value)
        except ValueError:
            logger.debug("Unrecognised loss %r, using half absolute moment", value)
            return cls.HAM

    @property
    def is_multistep(self) -> bool:
        return self in (CostKind.GV, CostKind.TLV, CostKind.TV, CostKind.HSTEPS)


def _generalised_variance(
    errors: NDArray[np.float64],
    horizon: int,
    normalizer: float,
) -> float:
    n_obs = errors.shape[0]
    mat_obs = n_obs - horizon + 1
    scaled = errors[:mat_obs] / normalizer
    sigma = scaled.T @ scaled / mat_obs
    try:
        log_det = np.log(np.prod(linalg.eigvalsh(sigma)))
    except (linalg.LinAlgError, ValueError):
        logger.debug("Eigenvalue decomposition failed, using determinant")
        log_det = np.log(linalg.det(sigma, check_finite=False))
    return float(log_det + horizon * np.log(normalizer**2))


def _horizon_mse(errors: NDArray[np.float64], horizon: int) -> NDArray[np.float64]:
    """Mean squared error per horizon over that horizon's populated rows."""
    n_obs = errors.shape[0]
    return np.array(
        [np.mean(errors[: n_obs - h, h] ** 2) for h in range(horizon)],
        dtype=np.float64,
    )


def cost(
    states: ArrayLike,
    transition: ArrayLike,
    measurement: ArrayLike,
    scale: ArrayLike | None,
    observed: ArrayLike | pd.Series,
    persistence: ArrayLike,
    horizon: int,
    lags: ArrayLike | LagStructure,
    loss: str | CostKind = CostKind.MSE,
    normalizer: float = 1.0,
    backcast: bool = False,
    exog: ArrayLike | None = None,
    exog_coefs: ArrayLike | None = None,
) -> float:
    """Scalar loss of a parameterised system for an optimizer.

    Args:
        states: State history with the pre-sample rows filled in.
        transition: Transition matrix F.
        measurement: Measurement vector, one row or ``n_obs`` rows.
        scale: Persistence divisor per period (``None`` means 1).
        observed: Observed series.
        persistence: Persistence vector g.
        horizon: Forecast horizon for the multi-step losses; ignored by
            MSE, MAE and HAM.
        lags: Lag of each state component.
        loss: One of :class:`CostKind` or its name. Unknown names fall back
            to the half absolute moment.
        normalizer: Scale applied to errors before the GV determinant and
            added back as ``horizon * log(normalizer**2)``.
        backcast: Backcast the pre-sample rows before scoring.
        exog: Optional exogenous regressors.
        exog_coefs: Coefficients matching *exog*.

    Returns:
        Loss value. May be ``inf`` or ``nan`` for degenerate systems; this
        is left to the optimizer to reject.

    Raises:
        FilterError: ``horizon`` outside ``[1, n_obs]`` for a multi-step
            loss, or a non-positive GV normalizer.
    """
    kind = CostKind.parse(loss)
    lag = LagStructure.from_lags(lags)
    if kind.is_multistep and horizon < 1:
        raise FilterError(f"horizon must be >= 1, got {horizon}")
    if kind.is_multistep and horizon > np.size(observed):
        raise FilterError(
            f"horizon must not exceed the {np.size(observed)} observations, got {horizon}"
        )
    if kind is CostKind.GV and not normalizer > 0:
        raise FilterError(f"normalizer must be > 0, got {normalizer}")

    run = fit_backcast if backcast else fit
    result = run(
        states, transition, measurement, scale, observed, persistence, lag,
        exog, exog_coefs,
    )

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        if kind.is_multistep:
            errors = rolling_errors(
                result.states, transition, measurement, observed, horizon, lag,
                exog, result.exog_coefs,
            )
            if kind is CostKind.GV:
                return _generalised_variance(errors, horizon, normalizer)
            if kind is CostKind.TLV:
                return float(np.sum(np.log(_horizon_mse(errors, horizon))))
            if kind is CostKind.TV:
                return float(np.sum(_horizon_mse(errors, horizon)))
            n_obs = errors.shape[0]
            return float(np.mean(errors[: n_obs - horizon + 1, horizon - 1] ** 2))

        residuals = result.residuals
        if kind is CostKind.MSE:
            return float(np.mean(residuals**2))
        if kind is CostKind.MAE:
            return float(np.mean(np.abs(residuals)))
        return float(np.mean(np.sqrt(np.abs(residuals))))
