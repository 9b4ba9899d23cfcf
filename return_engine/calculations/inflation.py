"""
Inflation-Adjusted Returns

Restates a property's appreciation and total return in real terms using
annual US CPI inflation between the purchase year and a current year.
Prices are plain currency units; rates and returns are percentages.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional

from return_engine.calculations.errors import InvalidInputError
from return_engine.calculations.inputs import PropertyFinancials

DEFAULT_INFLATION_RATE = 2.5  # Used for years with no recorded rate

# Annual CPI inflation, percent
HISTORICAL_INFLATION: Dict[int, float] = {
    1950: 1.3, 1951: 7.9, 1952: 1.9, 1953: 0.8, 1954: 0.7,
    1955: -0.4, 1956: 1.5, 1957: 3.3, 1958: 2.8, 1959: 0.7,
    1960: 1.7, 1961: 1.0, 1962: 1.0, 1963: 1.3, 1964: 1.3,
    1965: 1.6, 1966: 2.9, 1967: 3.1, 1968: 4.2, 1969: 5.5,
    1970: 5.7, 1971: 4.4, 1972: 3.2, 1973: 6.2, 1974: 11.0,
    1975: 9.2, 1976: 5.8, 1977: 6.5, 1978: 7.6, 1979: 11.3,
    1980: 13.5, 1981: 10.3, 1982: 6.2, 1983: 3.2, 1984: 4.3,
    1985: 3.6, 1986: 1.9, 1987: 3.6, 1988: 4.1, 1989: 4.8,
    1990: 5.4, 1991: 4.2, 1992: 3.0, 1993: 3.0, 1994: 2.6,
    1995: 2.8, 1996: 3.0, 1997: 2.3, 1998: 1.6, 1999: 2.2,
    2000: 3.4, 2001: 2.8, 2002: 1.6, 2003: 2.3, 2004: 2.7,
    2005: 3.4, 2006: 3.2, 2007: 2.8, 2008: 3.8, 2009: -0.4,
    2010: 1.6, 2011: 3.1, 2012: 2.1, 2013: 1.5, 2014: 0.1,
    2015: 0.1, 2016: 1.3, 2017: 2.1, 2018: 2.4, 2019: 1.8,
    2020: 1.2, 2021: 4.7, 2022: 8.0, 2023: 4.1, 2024: 3.2,
}


@dataclass(frozen=True)
class RealAppreciation:
    """Appreciation of a property before and after inflation."""

    years_held: int
    nominal_roi: float
    inflation_factor: float
    total_inflation: float
    inflation_adjusted_price: float
    real_roi: float
    real_appreciation_rate: float  # Annualized


@dataclass(frozen=True)
class TrueROI:
    """Total return from appreciation plus rental cash flow."""

    years_held: int
    total_cash_flow: float
    appreciation_return: float
    cash_flow_return: float
    total_roi: float
    annualized_roi: float


def inflation_rate_for_year(year: int) -> Optional[float]:
    """Recorded inflation for a year, or None when there is none."""
    return HISTORICAL_INFLATION.get(year)


def _current_year(current_year: Optional[int]) -> int:
    return date.today().year if current_year is None else current_year


def cumulative_inflation(purchase_year: int, current_year: Optional[int] = None) -> float:
    """
    Compounded price level change from the end of the purchase year to the
    end of the current year (1.5 means prices rose 50%).

    Years without a recorded rate compound at ``DEFAULT_INFLATION_RATE``.
    """
    current_year = _current_year(current_year)
    factor = 1.0
    for year in range(purchase_year + 1, current_year + 1):
        rate = HISTORICAL_INFLATION.get(year, DEFAULT_INFLATION_RATE)
        factor *= 1 + rate / 100
    return factor


def inflation_adjusted_price(
    purchase_price: float, purchase_date: date, current_year: Optional[int] = None
) -> float:
    """Purchase price restated in current-year money."""
    return purchase_price * cumulative_inflation(purchase_date.year, current_year)


def real_appreciation_metrics(
    purchase_price: float,
    current_value: float,
    purchase_date: date,
    current_year: Optional[int] = None,
) -> RealAppreciation:
    """
    Nominal and real appreciation of a property since purchase.

    A property held less than a full calendar year, or without a purchase
    price, reports no appreciation.
    """
    if current_value < 0:
        raise InvalidInputError("current_value", "must not be negative")

    years_held = _current_year(current_year) - purchase_date.year
    if years_held <= 0 or purchase_price <= 0:
        return RealAppreciation(
            years_held=max(years_held, 0),
            nominal_roi=0.0,
            inflation_factor=1.0,
            total_inflation=0.0,
            inflation_adjusted_price=purchase_price,
            real_roi=0.0,
            real_appreciation_rate=0.0,
        )

    factor = cumulative_inflation(purchase_date.year, current_year)
    adjusted_price = purchase_price * factor

    return RealAppreciation(
        years_held=years_held,
        nominal_roi=(current_value - purchase_price) / purchase_price * 100,
        inflation_factor=factor,
        total_inflation=(factor - 1) * 100,
        inflation_adjusted_price=adjusted_price,
        real_roi=(current_value - adjusted_price) / adjusted_price * 100,
        real_appreciation_rate=(
            (current_value / adjusted_price) ** (1 / years_held) - 1
        ) * 100,
    )


def true_roi(
    property: PropertyFinancials,
    purchase_date: date,
    current_year: Optional[int] = None,
) -> TrueROI:
    """
    Return on the purchase price from appreciation and net rent combined.

    Net rent is today's monthly rent less expenses and mortgage, assumed
    flat over every year held.
    """
    property.validate()
    years_held = _current_year(current_year) - purchase_date.year
    if years_held <= 0:
        return TrueROI(max(years_held, 0), 0.0, 0.0, 0.0, 0.0, 0.0)

    price = property.purchase_price
    monthly_cash_flow = (
        property.monthly_rent - property.monthly_expenses - property.monthly_mortgage
    )
    total_cash_flow = monthly_cash_flow * years_held * 12
    appreciation = property.market_value - price
    total_return = appreciation + total_cash_flow

    # A total loss beyond the price has no real annualized rate
    growth = (total_return + price) / price
    annualized = (growth ** (1 / years_held) - 1) * 100 if growth > 0 else -100.0

    return TrueROI(
        years_held=years_held,
        total_cash_flow=total_cash_flow,
        appreciation_return=appreciation / price * 100,
        cash_flow_return=total_cash_flow / price * 100,
        total_roi=total_return / price * 100,
        annualized_roi=annualized,
    )
