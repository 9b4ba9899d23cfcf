"""
NPV Calculations

Net present value and NPV index of periodic cash flows.
"""

from typing import Sequence

import numpy as np

from return_engine.calculations.errors import InvalidInputError


def _as_array(cash_flows: Sequence[float]) -> np.ndarray:
    flows = np.asarray(cash_flows, dtype=float)
    if flows.ndim != 1:
        raise InvalidInputError("cash_flows", "must be a flat sequence")
    if not np.all(np.isfinite(flows)):
        raise InvalidInputError("cash_flows", "must contain only finite values")
    return flows


def present_value(cash_flows: Sequence[float], rate: float) -> float:
    """
    Discount cash flows at a decimal periodic rate.

    Period 0 is undiscounted. The rate must be above -100%.
    """
    if rate <= -1:
        raise InvalidInputError("discount_rate", "must be greater than -100%")
    flows = _as_array(cash_flows)
    periods = np.arange(flows.size)
    return float(np.sum(flows / (1 + rate) ** periods))


def npv(cash_flows: Sequence[float], discount_rate_pct: float) -> float:
    """
    Calculate NPV (Net Present Value) of cash flows.

    Args:
        cash_flows: Periodic cash flows, period 0 first
        discount_rate_pct: Discount rate per period as a percentage (8 for 8%)

    Returns:
        NPV value
    """
    return present_value(cash_flows, discount_rate_pct / 100)


def npv_index(npv_value: float, initial_investment: float) -> float:
    """
    Normalize NPV by the size of the initial investment.

    ``(NPV + |I|) / |I|``. Values above 1.0 mean the investment beats the
    discount rate; this is the metric to compare properties of different size.
    An investment of zero has an index of exactly 1.0.
    """
    investment = abs(initial_investment)
    if investment == 0:
        return 1.0
    return (npv_value + investment) / investment


def discounted_value(amount: float, rate_pct: float, periods: float) -> float:
    """Deflate a future amount to today's money at a percentage rate."""
    if rate_pct <= -100:
        raise InvalidInputError("rate_pct", "must be greater than -100%")
    return amount * (1 + rate_pct / 100) ** -periods
