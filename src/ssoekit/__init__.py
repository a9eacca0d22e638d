"""ssoekit: innovations state-space engine for single-source-of-error models."""

from ssoekit._version import __version__
from ssoekit.estimation import CostKind, cost
from ssoekit.exceptions import (
    DimensionMismatchError,
    EstimationError,
    FilterError,
    InvalidLagError,
    LikelihoodError,
    SSOEKitError,
    SystemSpecError,
)
from ssoekit.filters import FitResult, fit, fit_backcast, forecast, rolling_errors
from ssoekit.statespace import LagStructure

__all__ = [
    "__version__",
    "LagStructure",
    "FitResult",
    "fit",
    "fit_backcast",
    "forecast",
    "rolling_errors",
    "CostKind",
    "cost",
    # Exceptions
    "SSOEKitError",
    "SystemSpecError",
    "DimensionMismatchError",
    "InvalidLagError",
    "FilterError",
    "EstimationError",
    "LikelihoodError",
]
