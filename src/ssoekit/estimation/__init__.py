"""Cost functions and likelihood helpers for parameter estimation."""

from ssoekit.estimation.cost import CostKind, cost
from ssoekit.estimation.likelihood import information_criteria, log_likelihood

__all__ = [
    "CostKind",
    "cost",
    "log_likelihood",
    "information_criteria",
]
