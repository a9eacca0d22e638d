"""Filtering, backcasting, forecasting and rolling-origin errors."""

from ssoekit.filters.backcast import BACKCAST_CYCLES, fit_backcast
from ssoekit.filters.fitter import FitResult, fit
from ssoekit.filters.forecast import (
    MISSING,
    errors_frame,
    forecast,
    rolling_errors,
)

__all__ = [
    "FitResult",
    "fit",
    "fit_backcast",
    "BACKCAST_CYCLES",
    "forecast",
    "rolling_errors",
    "errors_frame",
    "MISSING",
]
