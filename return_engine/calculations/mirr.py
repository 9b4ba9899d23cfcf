"""
MIRR Calculations

Modified Internal Rate of Return on monthly cash flows. Outflows are
discounted at a financing rate, inflows compounded at a reinvestment rate.
The decomposed PV of outflows and FV of inflows are part of the result so
the breakdown can be shown next to the rate.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from dateutil.relativedelta import relativedelta

from return_engine.calculations.errors import InvalidInputError
from return_engine.calculations.inputs import PropertyFinancials

logger = logging.getLogger(__name__)

PROJECTION_HORIZONS = (10, 20, 30, 40)


@dataclass(frozen=True)
class MIRRResult:
    """MIRR with its present/future value decomposition."""

    mirr_periodic: float  # Per period of the cash flows (monthly by default)
    mirr_annual: float
    pv_negative: float
    fv_positive: float
    cash_flows: Tuple[float, ...]
    is_valid: bool

    @property
    def mirr_monthly(self) -> float:
        return self.mirr_periodic

    def to_dict(self) -> Dict:
        return {
            "mirr_periodic": self.mirr_periodic,
            "mirr_annual": self.mirr_annual,
            "pv_negative": self.pv_negative,
            "fv_positive": self.fv_positive,
            "cash_flows": list(self.cash_flows),
            "is_valid": self.is_valid,
        }


def calculate_mirr(
    cash_flows: Sequence[float],
    financing_rate_annual: float,
    reinvest_rate_annual: float,
    periods_per_year: int = 12,
) -> MIRRResult:
    """
    Calculate MIRR for a stream of periodic cash flows.

    Args:
        cash_flows: Cash flows, period 0 first (monthly unless
            ``periods_per_year`` says otherwise)
        financing_rate_annual: APR charged on outflows, decimal (0.04 for 4%)
        reinvest_rate_annual: APR earned on inflows, decimal (0.05 for 5%)
        periods_per_year: 12 for monthly flows, 1 for annual flows

    Returns:
        MIRRResult; ``is_valid`` is False when the series has no outflow or
        a single period. Outflows with no inflow at all are a total loss,
        a valid MIRR of -100%.
    """
    if periods_per_year < 1:
        raise InvalidInputError("periods_per_year", "must be at least 1")
    for field, rate in (
        ("financing_rate", financing_rate_annual),
        ("reinvest_rate", reinvest_rate_annual),
    ):
        if not math.isfinite(rate):
            raise InvalidInputError(field, "must be a finite number")
    finance_rate = financing_rate_annual / periods_per_year
    reinvest_rate = reinvest_rate_annual / periods_per_year
    if finance_rate <= -1 or reinvest_rate <= -1:
        raise InvalidInputError("rate", "periodic rate must be greater than -100%")

    flows = tuple(float(cf) for cf in cash_flows)
    if not all(math.isfinite(cf) for cf in flows):
        raise InvalidInputError("cash_flows", "must contain only finite values")
    n = len(flows) - 1

    pv_negative = sum(
        cf / (1 + finance_rate) ** t for t, cf in enumerate(flows) if cf < 0
    )
    fv_positive = sum(
        cf * (1 + reinvest_rate) ** (n - t) for t, cf in enumerate(flows) if cf > 0
    )

    if n <= 0 or pv_negative == 0:
        logger.debug(
            "MIRR undefined: n=%d pv_negative=%.2f fv_positive=%.2f",
            n,
            pv_negative,
            fv_positive,
        )
        return MIRRResult(0.0, 0.0, pv_negative, fv_positive, flows, False)

    mirr_periodic = abs(fv_positive / pv_negative) ** (1 / n) - 1
    mirr_annual = (1 + mirr_periodic) ** periods_per_year - 1

    return MIRRResult(mirr_periodic, mirr_annual, pv_negative, fv_positive, flows, True)


def months_between(start: date, end: date) -> int:
    """Whole months from start to end."""
    delta = relativedelta(end, start)
    return delta.years * 12 + delta.months


def generate_historical_cash_flows(
    property: PropertyFinancials,
    purchase_date: date,
    as_of: Optional[date] = None,
) -> List[float]:
    """
    Monthly cash flows from purchase to ``as_of``.

    Period 0 is the full purchase price; every month after earns rent less
    expenses and mortgage; the last month also realizes the current value.
    At least one month is always generated.
    """
    property.validate()
    if as_of is None:
        as_of = date.today()

    months_held = max(1, months_between(purchase_date, as_of))
    monthly_cash_flow = (
        property.monthly_rent - property.monthly_expenses - property.monthly_mortgage
    )

    cash_flows = [-property.purchase_price]
    cash_flows.extend([monthly_cash_flow] * (months_held - 1))
    cash_flows.append(monthly_cash_flow + property.market_value)
    return cash_flows


def generate_projected_cash_flows(
    property: PropertyFinancials,
    years: int,
    appreciation_rate: float = 3.5,
    rent_growth_rate: float = 3.0,
) -> List[float]:
    """
    Monthly cash flows from today over a projection horizon.

    Period 0 buys the property back at today's value; the monthly net cash
    flow grows at the rent growth rate and the final month sells at the
    appreciated value. Rates are annual percentages.
    """
    property.validate()
    if years < 1:
        raise InvalidInputError("years", "must be at least 1")

    months = years * 12
    monthly_growth = (1 + rent_growth_rate / 100) ** (1 / 12) - 1
    monthly_appreciation = (1 + appreciation_rate / 100) ** (1 / 12) - 1
    initial_cash_flow = (
        property.monthly_rent - property.monthly_expenses - property.monthly_mortgage
    )

    cash_flows = [-property.market_value]
    for month in range(1, months + 1):
        cash_flows.append(initial_cash_flow * (1 + monthly_growth) ** month)

    cash_flows[-1] += property.market_value * (1 + monthly_appreciation) ** months
    return cash_flows


def calculate_property_mirrs(
    property: PropertyFinancials,
    purchase_date: date,
    financing_rate_annual: float,
    reinvest_rate_annual: float,
    as_of: Optional[date] = None,
    appreciation_rate: float = 3.5,
    rent_growth_rate: float = 3.0,
) -> Dict[str, MIRRResult]:
    """MIRR from purchase to today and for each projection horizon."""
    results = {
        "purchase_to_today": calculate_mirr(
            generate_historical_cash_flows(property, purchase_date, as_of),
            financing_rate_annual,
            reinvest_rate_annual,
        )
    }
    for years in PROJECTION_HORIZONS:
        results[f"today_plus_{years}_years"] = calculate_mirr(
            generate_projected_cash_flows(
                property, years, appreciation_rate, rent_growth_rate
            ),
            financing_rate_annual,
            reinvest_rate_annual,
        )
    return results
