"""Exception hierarchy for ssoekit.

All exceptions inherit from SSOEKitError for easy catching.
Numerical degeneracy inside the recursion is never raised: non-finite
states are repaired in place and the GV loss falls back to a direct
determinant. The exceptions below cover argument and shape problems only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class SSOEKitError(Exception):
    """Base exception for all ssoekit errors."""

    pass


# =============================================================================
# System Specification Errors
# =============================================================================


class SystemSpecError(SSOEKitError):
    """Error in the matrices or lag set handed to the engine."""

    pass


class DimensionMismatchError(SystemSpecError):
    """An input array does not have the shape implied by the others."""

    def __init__(
        self,
        name: str,
        shape: tuple[int, ...],
        expected: str,
    ):
        self.name = name
        self.shape = shape
        self.expected = expected
        msg = f"'{name}' has shape {shape}, expected {expected}"
        super().__init__(msg)


class InvalidLagError(SystemSpecError):
    """Lag set is empty or contains non-positive entries."""

    def __init__(self, lags: Sequence[int], reason: str):
        self.lags = lags
        self.reason = reason
        lags_str = ", ".join(str(lag) for lag in lags)
        super().__init__(f"Invalid lag set [{lags_str}]: {reason}")


# =============================================================================
# Filter / Forecast Errors
# =============================================================================


class FilterError(SSOEKitError):
    """Invalid argument to the filter, forecaster or error evaluator."""

    pass


# =============================================================================
# Estimation Errors
# =============================================================================


class EstimationError(SSOEKitError):
    """Error during estimation."""

    pass


class LikelihoodError(EstimationError):
    """Error computing likelihood (e.g., NaN, -inf)."""

    def __init__(self, value: float, reason: str = ""):
        self.value = value
        self.reason = reason
        msg = f"Invalid likelihood value: {value}"
        if reason:
            msg += f". {reason}"
        super().__init__(msg)
