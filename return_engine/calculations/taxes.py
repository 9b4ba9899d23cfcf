"""
Tax Benefit Calculations

Annual deductions available to a rental property owner and the tax saved
by them.
"""

from dataclasses import dataclass

from return_engine.calculations.errors import InvalidInputError
from return_engine.calculations.inputs import PropertyFinancials

BUILDING_SHARE_OF_PRICE = 0.8
RESIDENTIAL_DEPRECIATION_YEARS = 27.5
COMMERCIAL_DEPRECIATION_YEARS = 39.0
DEFAULT_RECAPTURE_RATE = 25.0


@dataclass(frozen=True)
class TaxBenefits:
    annual_depreciation: float
    mortgage_interest_deduction: float
    property_tax_deduction: float
    maintenance_deductions: float
    total: float


def depreciation_years(property_type: str) -> float:
    if property_type == "commercial":
        return COMMERCIAL_DEPRECIATION_YEARS
    return RESIDENTIAL_DEPRECIATION_YEARS


def cost_basis(property: PropertyFinancials) -> float:
    """Depreciable basis, defaulting to the building share of the price."""
    if property.cost_basis is not None:
        return property.cost_basis
    return property.purchase_price * BUILDING_SHARE_OF_PRICE


def calculate_tax_benefits(property: PropertyFinancials) -> TaxBenefits:
    """
    Annual deductions: depreciation, mortgage interest, property taxes and
    maintenance. A manual override replaces the whole calculation.
    """
    if property.tax_benefit_override:
        return TaxBenefits(0.0, 0.0, 0.0, 0.0, property.tax_benefit_override)

    depreciation = cost_basis(property) / depreciation_years(property.property_type)
    interest = property.outstanding_balance * property.interest_rate
    property_tax = property.annual_property_taxes
    maintenance = property.monthly_maintenance * 12

    return TaxBenefits(
        annual_depreciation=depreciation,
        mortgage_interest_deduction=interest,
        property_tax_deduction=property_tax,
        maintenance_deductions=maintenance,
        total=depreciation + interest + property_tax + maintenance,
    )


def calculate_tax_savings(total_benefits: float, tax_rate_pct: float) -> float:
    """Tax saved by deducting benefits at a marginal rate (percentage)."""
    if not 0 <= tax_rate_pct <= 100:
        raise InvalidInputError("tax_rate_pct", "must be between 0% and 100%")
    return total_benefits * tax_rate_pct / 100


def calculate_depreciation_recapture(
    property: PropertyFinancials,
    years_held: float,
    recapture_rate_pct: float = DEFAULT_RECAPTURE_RATE,
) -> float:
    """Tax due on depreciation claimed over the holding period."""
    if years_held < 0:
        raise InvalidInputError("years_held", "must not be negative")
    life = depreciation_years(property.property_type)
    claimed = cost_basis(property) * min(years_held, life) / life
    return claimed * recapture_rate_pct / 100
