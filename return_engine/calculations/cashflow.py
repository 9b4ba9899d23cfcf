"""
Cash Flow Calculations

Generates annual levered cash flow projections for a rental property:
period 0 is the equity outlay, each following year nets rent against
operating expenses and mortgage, and the final year adds the sale.
"""

from typing import List, Dict, Optional

from return_engine.calculations.amortization import outstanding_balance, remaining_term
from return_engine.calculations.errors import InvalidInputError
from return_engine.calculations.inputs import (
    DEFAULT_CLOSING_COST_RATE,
    EconomicAssumptions,
    PropertyFinancials,
)
from return_engine.calculations.taxes import calculate_tax_benefits, calculate_tax_savings


def calculate_growth_factor(annual_rate_pct: float, years: float) -> float:
    """Compound growth factor for a percentage rate over a number of years."""
    return (1 + annual_rate_pct / 100) ** years


def loan_balance_after(property: PropertyFinancials, months_from_now: int) -> float:
    """
    Outstanding loan balance a number of months from today.

    When the original loan amount is known the balance follows the note from
    origination; otherwise today's balance is amortized over the term left.
    """
    if property.loan_amount > 0:
        return outstanding_balance(
            property.loan_amount,
            property.interest_rate,
            property.loan_term_months,
            property.elapsed_term_months + months_from_now,
        )

    if property.outstanding_balance > 0:
        months_left = remaining_term(
            property.loan_term_months, property.elapsed_term_months
        )
        if months_left == 0:
            return 0.0
        return outstanding_balance(
            property.outstanding_balance,
            property.interest_rate,
            months_left,
            months_from_now,
        )

    return 0.0


def mortgage_due(property: PropertyFinancials, months_from_now: int) -> bool:
    """
    Whether the monthly mortgage is still being paid.

    Payments stop once a known note is paid off. A payment given without any
    loan amount or balance has no payoff date, so it runs for the whole hold.
    """
    if property.monthly_mortgage <= 0:
        return False
    if property.loan_amount == 0 and property.outstanding_balance == 0:
        return True
    return loan_balance_after(property, months_from_now) > 0


def resolve_closing_costs(
    property: PropertyFinancials, closing_costs: Optional[float] = None
) -> float:
    """Explicit closing costs, else the property's, else 3% of price."""
    if closing_costs is not None:
        if closing_costs < 0:
            raise InvalidInputError("closing_costs", "must not be negative")
        return closing_costs
    if property.closing_costs is not None:
        return property.closing_costs
    return property.purchase_price * DEFAULT_CLOSING_COST_RATE / 100


def annual_cash_flow_breakdown(
    property: PropertyFinancials,
    assumptions: EconomicAssumptions,
    horizon_years: int,
    closing_costs: Optional[float] = None,
    selling_cost_rate: Optional[float] = None,
    include_tax_benefits: bool = False,
) -> List[Dict]:
    """
    Year-by-year components of the projected cash flows.

    Args:
        property: Property terms
        assumptions: Growth, tax and cost assumptions (percentages)
        horizon_years: Holding period in years
        closing_costs: Override for acquisition closing costs
        selling_cost_rate: Override for selling costs, % of sale price
        include_tax_benefits: Add annual tax savings to each year

    Returns:
        One row per period 0..horizon_years
    """
    property.validate()
    assumptions.validate()
    if horizon_years < 0:
        raise InvalidInputError("horizon_years", "must not be negative")

    if selling_cost_rate is None:
        selling_cost_rate = assumptions.selling_cost_rate
    elif not 0 <= selling_cost_rate <= 100:
        raise InvalidInputError("selling_cost_rate", "must be between 0% and 100%")

    acquisition = property.down_payment + resolve_closing_costs(property, closing_costs)
    rows = [
        {
            "year": 0,
            "rent": 0.0,
            "expenses": 0.0,
            "mortgage": 0.0,
            "tax_savings": 0.0,
            "sale_proceeds": 0.0,
            "net_cash_flow": -acquisition,
        }
    ]

    tax_savings = 0.0
    if include_tax_benefits:
        tax_savings = calculate_tax_savings(
            calculate_tax_benefits(property).total, assumptions.income_tax_rate
        )

    for year in range(1, horizon_years + 1):
        rent = property.monthly_rent * calculate_growth_factor(
            assumptions.rent_growth_rate, year
        ) * 12
        expenses = property.monthly_expenses * calculate_growth_factor(
            assumptions.expense_growth_rate, year
        ) * 12

        # Payments stop once the note is paid off
        mortgage = 0.0
        if mortgage_due(property, (year - 1) * 12):
            mortgage = property.monthly_mortgage * 12

        sale_proceeds = 0.0
        if year == horizon_years:
            sale_price = property.purchase_price * calculate_growth_factor(
                assumptions.appreciation_rate, horizon_years
            )
            balance_at_sale = loan_balance_after(property, horizon_years * 12)
            selling_costs = sale_price * selling_cost_rate / 100
            sale_proceeds = sale_price - balance_at_sale - selling_costs

        rows.append(
            {
                "year": year,
                "rent": rent,
                "expenses": expenses,
                "mortgage": mortgage,
                "tax_savings": tax_savings,
                "sale_proceeds": sale_proceeds,
                "net_cash_flow": rent - expenses - mortgage + tax_savings + sale_proceeds,
            }
        )

    return rows


def project_cash_flows(
    property: PropertyFinancials,
    assumptions: EconomicAssumptions,
    horizon_years: int,
    closing_costs: Optional[float] = None,
    selling_cost_rate: Optional[float] = None,
    include_tax_benefits: bool = False,
) -> List[float]:
    """
    Annual net cash flows, period 0 first.

    A zero-year horizon yields only the initial outlay, which is not enough
    for IRR, NPV or MIRR.
    """
    return [
        row["net_cash_flow"]
        for row in annual_cash_flow_breakdown(
            property,
            assumptions,
            horizon_years,
            closing_costs=closing_costs,
            selling_cost_rate=selling_cost_rate,
            include_tax_benefits=include_tax_benefits,
        )
    ]


def sum_cash_flows(
    rows: List[Dict], field: str, start_year: int = 0, end_year: Optional[int] = None
) -> float:
    """Sum a field of the breakdown across a range of years."""
    if end_year is None:
        end_year = len(rows) - 1

    return sum(
        row.get(field, 0.0) for row in rows if start_year <= row["year"] <= end_year
    )
