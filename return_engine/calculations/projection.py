"""
Equity Projections

Year-indexed projection of market value, loan balance, equity after sale
costs and taxes, and net yield, both nominal and deflated to today's money.
"""

from dataclasses import dataclass
from typing import List, Optional

from return_engine.calculations.amortization import remaining_term
from return_engine.calculations.cashflow import (
    calculate_growth_factor,
    loan_balance_after,
    mortgage_due,
)
from return_engine.calculations.errors import InvalidInputError
from return_engine.calculations.inputs import EconomicAssumptions, PropertyFinancials
from return_engine.calculations.metrics import cash_at_hand, net_yield_percentage
from return_engine.calculations.npv import discounted_value


@dataclass(frozen=True)
class ProjectionPoint:
    """Projected position of a property at the end of a year."""

    year: int
    market_value: float
    market_value_pv: float
    outstanding_balance: float
    cumulative_principal_paid: float
    remaining_term_months: int
    capital_gains_tax: float
    selling_costs: float
    net_equity_nominal: float
    net_equity_pv: float
    annual_net_yield: float
    net_yield_pct: Optional[float]  # Of market value
    cumulative_net_yield_pv: float
    annual_mortgage: float
    cash_at_hand: float
    cumulative_mortgage_pv: float
    net_gain: float


def generate_projection(
    property: PropertyFinancials,
    assumptions: EconomicAssumptions,
    years: int,
) -> List[ProjectionPoint]:
    """
    Build projection points for years 0 through ``years``.

    Net gain is equity in today's money plus the discounted net yield
    collected so far, less the discounted mortgage payments made so far.
    """
    property.validate()
    assumptions.validate()
    if years < 0:
        raise InvalidInputError("years", "must not be negative")

    inflation = assumptions.inflation_rate
    starting_balance = loan_balance_after(property, 0)
    cumulative_net_yield_pv = 0.0
    cumulative_mortgage_pv = 0.0
    points = []

    for year in range(years + 1):
        market_value = property.market_value * calculate_growth_factor(
            assumptions.appreciation_rate, year
        )
        balance = loan_balance_after(property, year * 12)

        gain = max(0.0, market_value - property.purchase_price)
        capital_gains_tax = gain * assumptions.capital_gains_tax_rate / 100
        selling_costs = market_value * assumptions.selling_cost_rate / 100
        net_equity = market_value - balance - capital_gains_tax - selling_costs

        annual_net_yield = 12 * (
            property.monthly_rent
            * calculate_growth_factor(assumptions.rent_growth_rate, year)
            - property.monthly_expenses
            * calculate_growth_factor(assumptions.expense_growth_rate, year)
        )

        annual_mortgage = 0.0
        if year > 0:
            cumulative_net_yield_pv += discounted_value(annual_net_yield, inflation, year)
            if mortgage_due(property, (year - 1) * 12):
                annual_mortgage = property.monthly_mortgage * 12
            cumulative_mortgage_pv += discounted_value(annual_mortgage, inflation, year)

        net_equity_pv = discounted_value(net_equity, inflation, year)

        points.append(
            ProjectionPoint(
                year=year,
                market_value=market_value,
                market_value_pv=discounted_value(market_value, inflation, year),
                outstanding_balance=balance,
                cumulative_principal_paid=starting_balance - balance,
                remaining_term_months=remaining_term(
                    property.loan_term_months, property.elapsed_term_months + year * 12
                ),
                capital_gains_tax=capital_gains_tax,
                selling_costs=selling_costs,
                net_equity_nominal=net_equity,
                net_equity_pv=net_equity_pv,
                annual_net_yield=annual_net_yield,
                net_yield_pct=net_yield_percentage(annual_net_yield, market_value),
                cumulative_net_yield_pv=cumulative_net_yield_pv,
                annual_mortgage=annual_mortgage,
                cash_at_hand=cash_at_hand(annual_net_yield, annual_mortgage),
                cumulative_mortgage_pv=cumulative_mortgage_pv,
                net_gain=net_equity_pv + cumulative_net_yield_pv - cumulative_mortgage_pv,
            )
        )

    return points


def project_year(
    property: PropertyFinancials,
    assumptions: EconomicAssumptions,
    year: int,
) -> ProjectionPoint:
    """Projection point for a single target year."""
    return generate_projection(property, assumptions, year)[-1]


def net_gain_pv(
    property: PropertyFinancials,
    assumptions: EconomicAssumptions,
    year: int,
) -> float:
    """Net gain in today's money after holding for ``year`` years."""
    if year == 0:
        return 0.0
    return project_year(property, assumptions, year).net_gain
