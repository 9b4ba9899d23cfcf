"""
Return Metrics

Combines the projector and the rate solvers into the per-property metrics
shown on a dashboard, plus the financing scenarios and horizon comparison
built on top of them.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence

from return_engine.calculations.amortization import calculate_payment
from return_engine.calculations.cashflow import annual_cash_flow_breakdown
from return_engine.calculations.errors import InvalidInputError
from return_engine.calculations.inputs import EconomicAssumptions, PropertyFinancials
from return_engine.calculations.irr import solve_irr
from return_engine.calculations.mirr import calculate_mirr
from return_engine.calculations.npv import npv, npv_index

logger = logging.getLogger(__name__)

DEFAULT_HORIZONS = (5, 10, 15, 20, 25, 30)
MAX_DEBT_LTV = 0.8
DEFAULT_LOAN_TERM_MONTHS = 360


@dataclass(frozen=True)
class PropertyMetrics:
    """Rate-of-return metrics for one property over one horizon."""

    horizon_years: int
    irr: float  # Annual, decimal
    irr_valid: bool
    npv: float
    npv_index: float
    mirr_annual: float
    mirr_valid: bool
    cash_flows: List[float]
    total_cash_flow: float  # Sum of every flow after the initial outlay
    cumulative_return: Optional[float]  # Percent; None without an outlay
    cash_on_cash_return: Optional[float]  # First-year flow, percent

    @property
    def is_valid(self) -> bool:
        return self.irr_valid and self.mirr_valid

    @property
    def irr_pct(self) -> float:
        return self.irr * 100

    def to_dict(self) -> Dict:
        return {
            "horizon_years": self.horizon_years,
            "irr": self.irr,
            "irr_pct": self.irr_pct,
            "irr_valid": self.irr_valid,
            "npv": self.npv,
            "npv_index": self.npv_index,
            "mirr_annual": self.mirr_annual,
            "mirr_valid": self.mirr_valid,
            "is_valid": self.is_valid,
            "total_cash_flow": self.total_cash_flow,
            "cumulative_return": self.cumulative_return,
            "cash_on_cash_return": self.cash_on_cash_return,
            "cash_flows": self.cash_flows,
        }


def evaluate_property(
    property: PropertyFinancials,
    assumptions: EconomicAssumptions,
    horizon_years: int,
    discount_rate_pct: float,
    financing_rate: float,
    reinvest_rate: float,
    closing_costs: Optional[float] = None,
    selling_cost_rate: Optional[float] = None,
    include_tax_benefits: bool = False,
) -> PropertyMetrics:
    """
    IRR, NPV, NPV index and MIRR of a property held for a horizon.

    The projected series is annual, so MIRR compounds the financing and
    reinvestment APRs once per year.
    """
    if horizon_years < 1:
        raise InvalidInputError("horizon_years", "must be at least 1")

    rows = annual_cash_flow_breakdown(
        property,
        assumptions,
        horizon_years,
        closing_costs=closing_costs,
        selling_cost_rate=selling_cost_rate,
        include_tax_benefits=include_tax_benefits,
    )
    cash_flows = [row["net_cash_flow"] for row in rows]
    first_year_cash_flow = rows[1]["net_cash_flow"] - rows[1]["sale_proceeds"]

    irr_result = solve_irr(cash_flows)
    npv_value = npv(cash_flows, discount_rate_pct)
    mirr_result = calculate_mirr(
        cash_flows, financing_rate, reinvest_rate, periods_per_year=1
    )

    if not irr_result.is_valid:
        logger.info("No IRR for %d-year horizon", horizon_years)

    initial_investment = abs(cash_flows[0])
    total_cash_flow = sum(cash_flows[1:])
    cumulative_return = None
    if initial_investment > 0:
        cumulative_return = (total_cash_flow / initial_investment - 1) * 100

    return PropertyMetrics(
        horizon_years=horizon_years,
        irr=irr_result.rate,
        irr_valid=irr_result.is_valid,
        npv=npv_value,
        npv_index=npv_index(npv_value, cash_flows[0]),
        mirr_annual=mirr_result.mirr_annual,
        mirr_valid=mirr_result.is_valid,
        cash_flows=cash_flows,
        total_cash_flow=total_cash_flow,
        cumulative_return=cumulative_return,
        cash_on_cash_return=cash_on_cash_return(first_year_cash_flow, cash_flows[0]),
    )


def analyze_horizons(
    property: PropertyFinancials,
    assumptions: EconomicAssumptions,
    discount_rate_pct: float,
    financing_rate: float,
    reinvest_rate: float,
    horizons: Sequence[int] = DEFAULT_HORIZONS,
    **kwargs,
) -> List[PropertyMetrics]:
    """Metrics for the same property across several holding periods."""
    return [
        evaluate_property(
            property,
            assumptions,
            years,
            discount_rate_pct,
            financing_rate,
            reinvest_rate,
            **kwargs,
        )
        for years in horizons
    ]


def create_scenarios(property: PropertyFinancials) -> Dict[str, PropertyFinancials]:
    """
    Financing variants of a property bought today at its market value.

    - current: the property as it is
    - max_debt: a new 80% LTV loan at the property's rate
    - zero_debt: all cash, no mortgage
    """
    value = property.market_value
    loan = value * MAX_DEBT_LTV
    term = property.loan_term_months or DEFAULT_LOAN_TERM_MONTHS

    max_debt = replace(
        property,
        purchase_price=value,
        loan_amount=loan,
        outstanding_balance=loan,
        down_payment=value - loan,
        monthly_mortgage=calculate_payment(loan, property.interest_rate, term),
        loan_term_months=term,
        elapsed_term_months=0,
    )
    zero_debt = replace(
        property,
        purchase_price=value,
        loan_amount=0.0,
        outstanding_balance=0.0,
        down_payment=value,
        monthly_mortgage=0.0,
        interest_rate=0.0,
        loan_term_months=0,
        elapsed_term_months=0,
    )

    return {"current": property, "max_debt": max_debt, "zero_debt": zero_debt}


def calculate_cap_rate(annual_noi: float, property_value: float) -> Optional[float]:
    """Annual NOI over property value, as a percentage. None without a value."""
    if property_value <= 0:
        return None
    return annual_noi / property_value * 100


def cash_on_cash_return(
    annual_cash_flow: float, initial_investment: float
) -> Optional[float]:
    """Annual cash flow over cash invested, as a percentage."""
    if initial_investment == 0:
        return None
    return annual_cash_flow / abs(initial_investment) * 100


def net_yield_percentage(annual_net_yield: float, market_value: float) -> Optional[float]:
    """Net rent after operating expenses over market value, as a percentage."""
    if market_value <= 0:
        return None
    return annual_net_yield / market_value * 100


def cash_at_hand(annual_net_yield: float, annual_mortgage: float) -> float:
    """Net rent left after the year's mortgage payments."""
    return annual_net_yield - annual_mortgage


def format_rate(rate: float, is_valid: bool = True, decimals: int = 2) -> str:
    """Render a decimal rate as a percentage, or N/A when it is not valid."""
    if not is_valid:
        return "N/A"
    return f"{rate * 100:.{decimals}f}%"
