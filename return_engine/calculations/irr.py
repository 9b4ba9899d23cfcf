"""
IRR Calculations

Implements IRR using Newton-Raphson method, matching Excel's IRR function.
Solver failures are reported through ``IRRResult.is_valid`` rather than
exceptions so that one unsolvable property does not break a portfolio view.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from return_engine.calculations.errors import InvalidInputError

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 1000
TOLERANCE = 1e-7
DEFAULT_GUESS = 0.1


@dataclass(frozen=True)
class IRRResult:
    """Outcome of an IRR solve."""

    rate: float  # Periodic rate as decimal
    is_valid: bool
    iterations: int = 0

    @property
    def rate_pct(self) -> float:
        """Rate as a percentage (15.0 for 15%)."""
        return self.rate * 100


def _npv_and_derivative(flows: np.ndarray, rate: float):
    """NPV and its derivative with respect to rate."""
    periods = np.arange(flows.size)
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        discount = (1 + rate) ** periods
        value = np.sum(flows / discount)
        slope = np.sum(-periods * flows / (discount * (1 + rate)))
    return float(value), float(slope)


def _has_sign_change(flows: Sequence[float]) -> bool:
    return any(cf > 0 for cf in flows) and any(cf < 0 for cf in flows)


def solve_irr(
    cash_flows: Sequence[float],
    initial_guess: float = DEFAULT_GUESS,
    max_iterations: int = MAX_ITERATIONS,
) -> IRRResult:
    """
    Find the periodic rate that zeroes the NPV of a cash flow series.

    Newton-Raphson on ``f(r) = sum(CF_t / (1+r)^t)``. Converged when
    ``|f(r)| < 1e-7``. A vanishing derivative, a step to a rate at or below
    -100%, or running out of iterations ends the solve with an invalid result
    holding the last iterate.

    Args:
        cash_flows: Periodic cash flows (negative = outflow, positive = inflow)
        initial_guess: Starting rate (default 0.1 = 10%)
        max_iterations: Iteration cap

    Returns:
        IRRResult with the rate as decimal
    """
    flows = np.asarray(cash_flows, dtype=float)
    if not np.all(np.isfinite(flows)):
        raise InvalidInputError("cash_flows", "must contain only finite values")

    if flows.size < 2 or not _has_sign_change(flows):
        logger.debug("IRR undefined: %d flows without a sign change", flows.size)
        return IRRResult(rate=initial_guess, is_valid=False, iterations=0)

    rate = initial_guess

    for iteration in range(1, max_iterations + 1):
        if rate <= -1:
            logger.debug("IRR solve left the domain at iteration %d", iteration)
            return IRRResult(rate=rate, is_valid=False, iterations=iteration)

        value, slope = _npv_and_derivative(flows, rate)

        if not (math.isfinite(value) and math.isfinite(slope)):
            logger.debug("IRR solve overflowed at rate %.6f", rate)
            return IRRResult(rate=rate, is_valid=False, iterations=iteration)

        if abs(value) < TOLERANCE:
            return IRRResult(rate=rate, is_valid=True, iterations=iteration)

        if abs(slope) < TOLERANCE:
            logger.debug("IRR derivative vanished at rate %.6f", rate)
            return IRRResult(rate=rate, is_valid=False, iterations=iteration)

        next_rate = rate - value / slope
        if not math.isfinite(next_rate):
            logger.debug("IRR step diverged from rate %.6f", rate)
            return IRRResult(rate=rate, is_valid=False, iterations=iteration)
        rate = next_rate

    logger.debug("IRR did not converge after %d iterations", max_iterations)
    return IRRResult(rate=rate, is_valid=False, iterations=max_iterations)


def calculate_irr(cash_flows: List[float], guess: float = DEFAULT_GUESS) -> float:
    """
    Calculate IRR as a decimal, raising when no rate can be found.

    Raises:
        ValueError: If IRR cannot be calculated
    """
    if len(cash_flows) < 2:
        raise ValueError("At least 2 cash flows required")
    if not _has_sign_change(cash_flows):
        raise ValueError("Cash flows must contain both positive and negative values")

    result = solve_irr(cash_flows, guess)
    if not result.is_valid:
        raise ValueError("IRR calculation did not converge")
    return result.rate


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


def calculate_profit(cash_flows: List[float]) -> float:
    """Calculate profit (total inflows minus total outflows)."""
    return sum(cash_flows)


def monthly_to_annual_irr(monthly_irr: float) -> float:
    """Convert monthly IRR to annual IRR."""
    return ((1 + monthly_irr) ** 12) - 1


def annual_to_monthly_irr(annual_irr: float) -> float:
    """Convert annual IRR to monthly IRR."""
    return ((1 + annual_irr) ** (1 / 12)) - 1
