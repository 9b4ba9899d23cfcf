"""
Financial Calculation Engine

Pure calculation modules for real estate rate-of-return analysis:
cash flow projection, IRR, NPV, MIRR, loan amortization and
inflation-adjusted returns.
"""

from return_engine.calculations import (
    amortization,
    cashflow,
    inflation,
    irr,
    metrics,
    mirr,
    npv,
    projection,
    taxes,
)
from return_engine.calculations.errors import InvalidInputError
from return_engine.calculations.inputs import EconomicAssumptions, PropertyFinancials

__all__ = [
    "amortization",
    "cashflow",
    "inflation",
    "irr",
    "metrics",
    "mirr",
    "npv",
    "projection",
    "taxes",
    "InvalidInputError",
    "EconomicAssumptions",
    "PropertyFinancials",
]
