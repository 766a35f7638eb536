"""
Underwriting Calculation Engine

Pure, side-effect-free calculation modules for residential real estate
purchase analysis. No I/O and no shared state; every function maps its
inputs to a new output record.
"""

from dealmetrics.calculations import (
    amortization,
    underwriting,
    primary_residence,
    projection,
    irr,
    holding_period,
)

__all__ = [
    "amortization",
    "underwriting",
    "primary_residence",
    "projection",
    "irr",
    "holding_period",
]
