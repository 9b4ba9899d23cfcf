"""
Calculation Inputs

Property and economic assumption snapshots passed into every calculation.
All monetary values are plain currency units (dollars, not cents).
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional

from return_engine.calculations.errors import InvalidInputError

DEFAULT_CLOSING_COST_RATE = 3.0  # % of purchase price
DEFAULT_SELLING_COST_RATE = 6.0  # % of sale price
DEFAULT_EXPENSE_GROWTH_RATE = 2.0
RENT_GROWTH_SHARE_OF_APPRECIATION = 0.7


def _check_finite(field: str, value: float) -> None:
    if value is None or not math.isfinite(value):
        raise InvalidInputError(field, "must be a finite number")


def _check_non_negative(field: str, value: float) -> None:
    _check_finite(field, value)
    if value < 0:
        raise InvalidInputError(field, "must not be negative")


def _check_growth_rate(field: str, value: float) -> None:
    _check_finite(field, value)
    if value < -100:
        raise InvalidInputError(field, "must be at least -100%")


def _check_bounded_rate(field: str, value: float) -> None:
    _check_finite(field, value)
    if value < 0 or value > 100:
        raise InvalidInputError(field, "must be between 0% and 100%")


@dataclass(frozen=True)
class PropertyFinancials:
    """Snapshot of a single property's financial terms."""

    purchase_price: float
    down_payment: float
    current_value: float = 0.0
    monthly_rent: float = 0.0
    monthly_expenses: float = 0.0  # Operating expenses, excluding mortgage
    loan_amount: float = 0.0
    outstanding_balance: float = 0.0
    monthly_mortgage: float = 0.0
    interest_rate: float = 0.0  # Annual rate as decimal (e.g., 0.05 for 5%)
    loan_term_months: int = 0
    elapsed_term_months: int = 0
    closing_costs: Optional[float] = None
    property_type: str = "residential"
    cost_basis: Optional[float] = None
    annual_property_taxes: float = 0.0
    monthly_maintenance: float = 0.0
    tax_benefit_override: Optional[float] = None

    @property
    def market_value(self) -> float:
        """Current value, falling back to purchase price when unknown."""
        return self.current_value if self.current_value > 0 else self.purchase_price

    def validate(self) -> "PropertyFinancials":
        _check_finite("purchase_price", self.purchase_price)
        if self.purchase_price <= 0:
            raise InvalidInputError("purchase_price", "must be greater than zero")
        _check_non_negative("down_payment", self.down_payment)

        for field in (
            "current_value",
            "monthly_rent",
            "monthly_expenses",
            "loan_amount",
            "outstanding_balance",
            "monthly_mortgage",
            "interest_rate",
            "annual_property_taxes",
            "monthly_maintenance",
        ):
            _check_non_negative(field, getattr(self, field))

        if self.loan_term_months < 0:
            raise InvalidInputError("loan_term_months", "must not be negative")
        if self.elapsed_term_months < 0:
            raise InvalidInputError("elapsed_term_months", "must not be negative")
        if (self.loan_amount > 0 or self.outstanding_balance > 0) and self.loan_term_months == 0:
            raise InvalidInputError("loan_term_months", "required when there is a loan")
        if self.closing_costs is not None:
            _check_non_negative("closing_costs", self.closing_costs)
        if self.cost_basis is not None:
            _check_non_negative("cost_basis", self.cost_basis)
        if self.tax_benefit_override is not None:
            _check_non_negative("tax_benefit_override", self.tax_benefit_override)
        if self.property_type not in ("residential", "commercial"):
            raise InvalidInputError(
                "property_type", "must be 'residential' or 'commercial'"
            )
        return self


@dataclass(frozen=True)
class EconomicAssumptions:
    """
    Growth, tax and transaction-cost assumptions for a jurisdiction.

    All rates are plain percentages (3.5 means 3.5%).
    """

    appreciation_rate: float = 3.5
    rent_growth_rate: float = 2.45
    expense_growth_rate: float = DEFAULT_EXPENSE_GROWTH_RATE
    inflation_rate: float = 2.5
    capital_gains_tax_rate: float = 25.0
    selling_cost_rate: float = DEFAULT_SELLING_COST_RATE
    income_tax_rate: float = 22.0

    def validate(self) -> "EconomicAssumptions":
        for field in (
            "appreciation_rate",
            "rent_growth_rate",
            "expense_growth_rate",
            "inflation_rate",
        ):
            _check_growth_rate(field, getattr(self, field))
        for field in ("capital_gains_tax_rate", "selling_cost_rate", "income_tax_rate"):
            _check_bounded_rate(field, getattr(self, field))
        return self

    @classmethod
    def for_country(cls, country: str) -> "EconomicAssumptions":
        """Build assumptions from a country preset."""
        try:
            preset = COUNTRY_PRESETS[country]
        except KeyError:
            raise InvalidInputError("country", f"unknown country '{country}'")

        appreciation = preset["appreciation_rate"]
        return cls(
            appreciation_rate=appreciation,
            rent_growth_rate=appreciation * RENT_GROWTH_SHARE_OF_APPRECIATION,
            expense_growth_rate=DEFAULT_EXPENSE_GROWTH_RATE,
            inflation_rate=preset["inflation_rate"],
            capital_gains_tax_rate=preset["capital_gains_tax_rate"],
            selling_cost_rate=preset["selling_cost_rate"],
            income_tax_rate=preset["income_tax_rate"],
        )


COUNTRY_PRESETS: Dict[str, Dict[str, float]] = {
    "USA": {
        "appreciation_rate": 3.5,
        "inflation_rate": 2.5,
        "capital_gains_tax_rate": 25.0,
        "selling_cost_rate": 6.0,
        "income_tax_rate": 22.0,
    },
    "Turkey": {
        "appreciation_rate": 12.0,
        "inflation_rate": 15.0,
        "capital_gains_tax_rate": 20.0,
        "selling_cost_rate": 5.0,
        "income_tax_rate": 20.0,
    },
    "Canada": {
        "appreciation_rate": 4.0,
        "inflation_rate": 2.0,
        "capital_gains_tax_rate": 25.0,
        "selling_cost_rate": 6.0,
        "income_tax_rate": 26.0,
    },
    "UK": {
        "appreciation_rate": 3.0,
        "inflation_rate": 2.5,
        "capital_gains_tax_rate": 28.0,
        "selling_cost_rate": 3.0,
        "income_tax_rate": 20.0,
    },
}
