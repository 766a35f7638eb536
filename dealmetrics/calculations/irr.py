"""
IRR and NPV Calculations

Solves the internal rate of return of an annual cash-flow series with
Newton-Raphson, falling back to bisection when the derivative degenerates or
Newton fails to converge. The solver never raises for a well-formed series;
on non-convergence it returns the best rate it found.
"""

import logging
from typing import List, Tuple

import numpy as np

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 100
TOLERANCE = 1e-4
DERIVATIVE_FLOOR = 1e-10
DEFAULT_GUESS = 0.1
MIN_RATE = -0.99
MAX_RATE = 10.0


def calculate_npv(cash_flows: List[float], discount_rate: float) -> float:
    """
    Calculate NPV (Net Present Value) of periodic cash flows.

    Args:
        cash_flows: Array of cash flows (negative = outflow, positive = inflow)
        discount_rate: Periodic discount rate as decimal (e.g., 0.10 for 10%)

    Returns:
        NPV value
    """
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(len(flows))
    return float(np.sum(flows / (1 + discount_rate) ** periods))


def _npv_derivative(cash_flows: List[float], rate: float) -> float:
    """Calculate derivative of NPV with respect to rate (for Newton-Raphson)."""
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(len(flows))
    return float(-np.sum(periods * flows / (1 + rate) ** (periods + 1)))


def _clamp(rate: float) -> float:
    return min(max(rate, MIN_RATE), MAX_RATE)


def _newton(cash_flows: List[float], guess: float) -> Tuple[bool, float, float]:
    """Run Newton-Raphson; returns (converged, best rate, |NPV| at best rate)."""
    rate = guess
    best_rate, best_error = rate, float("inf")

    for _ in range(MAX_ITERATIONS):
        npv = calculate_npv(cash_flows, rate)
        if abs(npv) < best_error:
            best_rate, best_error = rate, abs(npv)

        if abs(npv) < TOLERANCE:
            return True, rate, abs(npv)

        dnpv = _npv_derivative(cash_flows, rate)
        if abs(dnpv) < DERIVATIVE_FLOOR:
            logger.debug(f"IRR derivative degenerate at rate {rate:.6f}")
            break

        rate = _clamp(rate - npv / dnpv)

    return False, best_rate, best_error


def _bisection(cash_flows: List[float]) -> Tuple[bool, float, float]:
    """Bisect over [MIN_RATE, MAX_RATE]; returns (converged, best rate, |NPV|)."""
    lower, upper = MIN_RATE, MAX_RATE
    best_rate, best_error = lower, float("inf")

    for _ in range(MAX_ITERATIONS):
        mid = (lower + upper) / 2
        npv_mid = calculate_npv(cash_flows, mid)
        if abs(npv_mid) < best_error:
            best_rate, best_error = mid, abs(npv_mid)

        if abs(npv_mid) < TOLERANCE or (upper - lower) / 2 < TOLERANCE:
            return True, mid, abs(npv_mid)

        if calculate_npv(cash_flows, lower) * npv_mid < 0:
            upper = mid
        else:
            lower = mid

    return False, best_rate, best_error


def calculate_irr(cash_flows: List[float], guess: float = DEFAULT_GUESS) -> float:
    """
    Calculate IRR (Internal Rate of Return).

    Cash flows are [initial investment (negative), year 1, ..., final year
    including net sale proceeds].

    Args:
        cash_flows: Array of periodic cash flows
        guess: Initial guess for rate (default 0.1 = 10%)

    Returns:
        IRR as a percentage (e.g., 15.0 for 15%)
    """
    if len(cash_flows) < 2:
        return 0.0

    converged, rate, error = _newton(cash_flows, guess)
    if converged:
        return rate * 100

    logger.debug("Newton-Raphson did not converge, falling back to bisection")
    _, bisect_rate, bisect_error = _bisection(cash_flows)
    if bisect_error < error:
        rate, error = bisect_rate, bisect_error

    if error >= TOLERANCE:
        logger.debug(f"IRR did not converge, best estimate {rate:.6f} (|NPV|={error:.4f})")

    return rate * 100


def calculate_multiple(cash_flows: List[float]) -> float:
    """
    Calculate equity multiple.

    Args:
        cash_flows: Array of cash flows (investments are negative)

    Returns:
        Multiple (e.g., 2.0 = 2.0x return)
    """
    total_inflows = sum(cf for cf in cash_flows if cf > 0)
    total_outflows = abs(sum(cf for cf in cash_flows if cf < 0))

    if total_outflows == 0:
        raise ValueError("No investment (outflows) found")

    return total_inflows / total_outflows
