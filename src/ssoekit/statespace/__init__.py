"""Lag structure and input validation for the state-space engine."""

from ssoekit.statespace.lags import LagStructure
from ssoekit.statespace.validate import validate_inputs

__all__ = [
    "LagStructure",
    "validate_inputs",
]
