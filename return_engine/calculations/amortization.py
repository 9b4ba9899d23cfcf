"""
Loan Amortization Calculations

Closed-form level-payment amortization: payment, outstanding balance,
cumulative principal and remaining term at any point of a fixed-rate note.
Rates are annual decimals (0.05 for 5%); terms are in months.
"""

import math
from typing import List, Dict, Optional
from datetime import date
from dateutil.relativedelta import relativedelta

from return_engine.calculations.errors import InvalidInputError


def _validate_note(loan_amount: float, annual_rate: float, total_term_months: int) -> None:
    if not math.isfinite(loan_amount):
        raise InvalidInputError("loan_amount", "must be a finite number")
    if not math.isfinite(annual_rate):
        raise InvalidInputError("annual_rate", "must be a finite number")
    if loan_amount < 0:
        raise InvalidInputError("loan_amount", "must not be negative")
    if annual_rate < 0:
        raise InvalidInputError("annual_rate", "must not be negative")
    if loan_amount > 0 and total_term_months <= 0:
        raise InvalidInputError("total_term_months", "must be greater than zero")


def calculate_payment(
    loan_amount: float, annual_rate: float, total_term_months: int
) -> float:
    """
    Calculate the level monthly payment of a fully amortizing loan.

    Matches Excel's PMT() function (sign flipped to positive).

    Args:
        loan_amount: Loan principal
        annual_rate: Annual interest rate as decimal (e.g., 0.05 for 5%)
        total_term_months: Amortization term in months

    Returns:
        Monthly payment amount
    """
    _validate_note(loan_amount, annual_rate, total_term_months)
    if loan_amount == 0:
        return 0.0

    monthly_rate = annual_rate / 12

    if monthly_rate == 0:
        return loan_amount / total_term_months

    growth = (1 + monthly_rate) ** total_term_months
    return loan_amount * monthly_rate * growth / (growth - 1)


def _validate_io_months(io_months: int, total_term_months: int) -> None:
    if io_months < 0 or io_months >= max(total_term_months, 1):
        raise InvalidInputError("io_months", "must be shorter than the loan term")


def outstanding_balance(
    loan_amount: float,
    annual_rate: float,
    total_term_months: int,
    months_elapsed: int,
    io_months: int = 0,
) -> float:
    """
    Remaining principal after a number of level payments.

    Uses the present value of the remaining payments:
    ``M * [(1+i)^(n-k) - 1] / [i * (1+i)^(n-k)]``. A 0% note amortizes
    linearly. A note past its term has no balance.

    Args:
        loan_amount: Original loan principal
        annual_rate: Annual interest rate as decimal
        total_term_months: Original term in months (n), including
            interest-only months
        months_elapsed: Payments already made (k)
        io_months: Leading interest-only months; principal stays untouched
            through them and the rest of the term amortizes
    """
    _validate_note(loan_amount, annual_rate, total_term_months)
    if io_months:
        _validate_io_months(io_months, total_term_months)
        if months_elapsed <= io_months:
            return float(loan_amount)
        return outstanding_balance(
            loan_amount,
            annual_rate,
            total_term_months - io_months,
            months_elapsed - io_months,
        )

    if loan_amount == 0 or months_elapsed >= total_term_months:
        return 0.0
    if months_elapsed <= 0:
        return float(loan_amount)

    remaining = total_term_months - months_elapsed
    monthly_rate = annual_rate / 12

    if monthly_rate == 0:
        return loan_amount * remaining / total_term_months

    payment = calculate_payment(loan_amount, annual_rate, total_term_months)
    growth = (1 + monthly_rate) ** remaining
    return payment * (growth - 1) / (monthly_rate * growth)


def cumulative_principal_paid(
    loan_amount: float,
    annual_rate: float,
    total_term_months: int,
    months_elapsed: int,
    io_months: int = 0,
) -> float:
    """Principal repaid after a number of level payments."""
    return loan_amount - outstanding_balance(
        loan_amount, annual_rate, total_term_months, months_elapsed, io_months
    )


def remaining_term(total_term_months: int, months_elapsed: int) -> int:
    """Months left on the note (never negative)."""
    return max(0, total_term_months - max(0, months_elapsed))


def generate_amortization_schedule(
    loan_amount: float,
    annual_rate: float,
    total_term_months: int,
    io_months: int = 0,
    start_date: Optional[date] = None,
) -> List[Dict]:
    """
    Generate a monthly amortization schedule.

    The first ``io_months`` payments are interest-only; the remaining
    ``total_term_months - io_months`` payments fully amortize the loan.

    Args:
        loan_amount: Loan principal
        annual_rate: Annual interest rate as decimal
        total_term_months: Total term in months, including interest-only months
        io_months: Interest-only period in months
        start_date: Date of first payment (defaults to today)

    Returns:
        List of schedule rows
    """
    _validate_note(loan_amount, annual_rate, total_term_months)
    _validate_io_months(io_months, total_term_months)

    if start_date is None:
        start_date = date.today()

    amortizing_months = total_term_months - io_months
    monthly_rate = annual_rate / 12
    schedule = []

    for period in range(1, total_term_months + 1):
        if period <= io_months:
            beginning = float(loan_amount)
            interest = beginning * monthly_rate
            principal = 0.0
            ending = beginning
        else:
            paid = period - io_months
            beginning = outstanding_balance(
                loan_amount, annual_rate, amortizing_months, paid - 1
            )
            ending = outstanding_balance(
                loan_amount, annual_rate, amortizing_months, paid
            )
            interest = beginning * monthly_rate
            principal = beginning - ending

        schedule.append(
            {
                "period": period,
                "date": (start_date + relativedelta(months=period - 1)).isoformat(),
                "beginning_balance": round(beginning, 2),
                "payment": round(principal + interest, 2),
                "interest": round(interest, 2),
                "principal": round(principal, 2),
                "ending_balance": round(ending, 2),
            }
        )

    return schedule


def calculate_total_interest(schedule: List[Dict]) -> float:
    """Total interest paid over a schedule."""
    return sum(row["interest"] for row in schedule)


def calculate_dscr(noi: float, debt_service: float) -> Optional[float]:
    """
    Calculate Debt Service Coverage Ratio (DSCR).

    Returns None when there is no debt service to cover.
    """
    if debt_service == 0:
        return None
    return noi / debt_service


def calculate_loan_constant(
    loan_amount: float, annual_rate: float, total_term_months: int
) -> float:
    """Annual debt service divided by loan amount."""
    if loan_amount <= 0:
        raise InvalidInputError("loan_amount", "must be greater than zero")
    return calculate_payment(loan_amount, annual_rate, total_term_months) * 12 / loan_amount
