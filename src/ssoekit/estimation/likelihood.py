"""Concentrated likelihood and information criteria for additive errors."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike

from ssoekit.exceptions import LikelihoodError


def log_likelihood(residuals: ArrayLike) -> float:
    """Gaussian log-likelihood with the error variance concentrated out.

    ``-n/2 * (log(2*pi*e) + log(mean(e^2)))``, i.e. the likelihood at the
    MSE-optimal variance. Monotone in the MSE cost, so maximising it is the
    same as minimising ``cost(..., loss="MSE")``.

    Raises:
        LikelihoodError: The result is not finite (e.g. zero residuals).
    """
    e = np.asarray(residuals, dtype=np.float64).reshape(-1)
    n = e.size
    with np.errstate(divide="ignore", invalid="ignore"):
        value = -0.5 * n * (np.log(2.0 * np.pi * np.e) + np.log(np.mean(e**2)))
    if not np.isfinite(value):
        raise LikelihoodError(
            float(value),
            "Residual variance must be positive and finite.",
        )
    return float(value)


def information_criteria(loglik: float, n_params: int, n_obs: int) -> dict[str, float]:
    """AIC, AICc and BIC of a fitted model.

    AICc is ``inf`` when ``n_obs - n_params - 1 <= 0``.
    """
    aic = 2.0 * n_params - 2.0 * loglik
    denom = n_obs - n_params - 1
    aicc = aic + 2.0 * n_params * (n_params + 1) / denom if denom > 0 else float("inf")
    bic = n_params * np.log(n_obs) - 2.0 * loglik
    return {"AIC": float(aic), "AICc": float(aicc), "BIC": float(bic)}
