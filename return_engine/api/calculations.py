"""
Financial calculation API endpoints.

These endpoints accept property inputs and return calculated metrics.
Every request is stateless; monetary values are plain currency units and
are rounded to cents on the way out.
"""

import logging
from dataclasses import asdict, replace
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from return_engine.config import get_settings
from return_engine.calculations import (
    amortization,
    inflation,
    irr,
    metrics,
    mirr,
    npv,
    projection,
)
from return_engine.calculations.inputs import EconomicAssumptions, PropertyFinancials

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter()


def _money(value: float) -> float:
    return round(value, 2)


class PropertyInput(BaseModel):
    """Property financial terms."""

    purchase_price: float
    down_payment: float
    current_value: float = 0.0
    monthly_rent: float = 0.0
    monthly_expenses: float = 0.0
    loan_amount: float = 0.0
    outstanding_balance: float = 0.0
    monthly_mortgage: float = 0.0
    interest_rate: float = 0.0  # Annual decimal
    loan_term_months: int = 0
    elapsed_term_months: int = 0
    closing_costs: Optional[float] = None
    property_type: str = "residential"
    cost_basis: Optional[float] = None
    annual_property_taxes: float = 0.0
    monthly_maintenance: float = 0.0
    tax_benefit_override: Optional[float] = None

    def to_financials(self) -> PropertyFinancials:
        return PropertyFinancials(**self.model_dump())


class AssumptionsInput(BaseModel):
    """Economic assumptions as percentages; unset fields come from the country preset."""

    country: Optional[str] = None
    appreciation_rate: Optional[float] = None
    rent_growth_rate: Optional[float] = None
    expense_growth_rate: Optional[float] = None
    inflation_rate: Optional[float] = None
    capital_gains_tax_rate: Optional[float] = None
    selling_cost_rate: Optional[float] = None
    income_tax_rate: Optional[float] = None

    def to_assumptions(self) -> EconomicAssumptions:
        base = EconomicAssumptions.for_country(self.country or settings.default_country)
        overrides = self.model_dump(exclude={"country"}, exclude_none=True)
        return replace(base, **overrides)


class MetricsInput(BaseModel):
    """Input for per-property return metrics."""

    property: PropertyInput
    assumptions: AssumptionsInput = AssumptionsInput()
    horizon_years: int = settings.default_horizon_years
    discount_rate_pct: float = settings.default_discount_rate_pct
    financing_rate: float = settings.default_financing_rate
    reinvest_rate: float = settings.default_reinvest_rate
    closing_costs: Optional[float] = None
    selling_cost_rate: Optional[float] = None
    include_tax_benefits: bool = False

    def options(self) -> Dict:
        return {
            "closing_costs": self.closing_costs,
            "selling_cost_rate": self.selling_cost_rate,
            "include_tax_benefits": self.include_tax_benefits,
        }


class MetricsResponse(BaseModel):
    """Return metrics for one horizon."""

    horizon_years: int
    irr: float
    irr_pct: float
    npv: float
    npv_index: float
    mirr_annual: float
    is_valid: bool
    total_cash_flow: float
    cumulative_return: Optional[float] = None
    cash_on_cash_return: Optional[float] = None
    cash_flows: List[float]


def metrics_to_response(result: metrics.PropertyMetrics) -> MetricsResponse:
    """Convert PropertyMetrics to response schema."""
    return MetricsResponse(
        horizon_years=result.horizon_years,
        irr=result.irr,
        irr_pct=result.irr_pct,
        npv=_money(result.npv),
        npv_index=result.npv_index,
        mirr_annual=result.mirr_annual,
        is_valid=result.is_valid,
        total_cash_flow=_money(result.total_cash_flow),
        cumulative_return=result.cumulative_return,
        cash_on_cash_return=result.cash_on_cash_return,
        cash_flows=[_money(cf) for cf in result.cash_flows],
    )


@router.post("/metrics", response_model=MetricsResponse)
async def calculate_metrics(inputs: MetricsInput):
    """Calculate IRR, NPV, NPV index and MIRR for a property."""
    result = metrics.evaluate_property(
        inputs.property.to_financials(),
        inputs.assumptions.to_assumptions(),
        inputs.horizon_years,
        inputs.discount_rate_pct,
        inputs.financing_rate,
        inputs.reinvest_rate,
        **inputs.options(),
    )
    return metrics_to_response(result)


class HorizonsInput(MetricsInput):
    """Input for a comparison across holding periods."""

    horizons: List[int] = list(metrics.DEFAULT_HORIZONS)


class HorizonsResponse(BaseModel):
    results: List[MetricsResponse]


@router.post("/horizons", response_model=HorizonsResponse)
async def calculate_horizons(inputs: HorizonsInput):
    """Calculate metrics for each holding period."""
    results = metrics.analyze_horizons(
        inputs.property.to_financials(),
        inputs.assumptions.to_assumptions(),
        inputs.discount_rate_pct,
        inputs.financing_rate,
        inputs.reinvest_rate,
        horizons=inputs.horizons,
        **inputs.options(),
    )
    return HorizonsResponse(results=[metrics_to_response(r) for r in results])


class ScenariosResponse(BaseModel):
    scenarios: Dict[str, MetricsResponse]


@router.post("/scenarios", response_model=ScenariosResponse)
async def calculate_scenarios(inputs: MetricsInput):
    """Compare current, maximum-debt and all-cash financing of a property."""
    assumptions = inputs.assumptions.to_assumptions()
    variants = metrics.create_scenarios(inputs.property.to_financials())

    return ScenariosResponse(
        scenarios={
            name: metrics_to_response(
                metrics.evaluate_property(
                    variant,
                    assumptions,
                    inputs.horizon_years,
                    inputs.discount_rate_pct,
                    inputs.financing_rate,
                    inputs.reinvest_rate,
                    **inputs.options(),
                )
            )
            for name, variant in variants.items()
        }
    )


class IRRInput(BaseModel):
    """Input for IRR calculation."""

    cash_flows: List[float]
    guess: float = irr.DEFAULT_GUESS


class IRRResponse(BaseModel):
    """Response with IRR calculation."""

    irr: float
    irr_pct: float
    is_valid: bool
    iterations: int
    multiple: Optional[float] = None
    profit: float
    npv_at_discount_rate: float


@router.post("/irr", response_model=IRRResponse)
async def calculate_irr_endpoint(inputs: IRRInput):
    """Calculate IRR for given cash flows."""
    if len(inputs.cash_flows) < 2:
        raise HTTPException(status_code=400, detail="At least 2 cash flows required")

    result = irr.solve_irr(inputs.cash_flows, inputs.guess)

    try:
        multiple = irr.calculate_multiple(inputs.cash_flows)
    except ValueError:
        multiple = None

    return IRRResponse(
        irr=result.rate,
        irr_pct=result.rate_pct,
        is_valid=result.is_valid,
        iterations=result.iterations,
        multiple=multiple,
        profit=_money(irr.calculate_profit(inputs.cash_flows)),
        npv_at_discount_rate=_money(
            npv.npv(inputs.cash_flows, settings.default_discount_rate_pct)
        ),
    )


class NPVInput(BaseModel):
    """Input for NPV calculation."""

    cash_flows: List[float]
    discount_rate_pct: float = settings.default_discount_rate_pct


@router.post("/npv")
async def calculate_npv_endpoint(inputs: NPVInput):
    """Calculate NPV and NPV index for given cash flows."""
    if not inputs.cash_flows:
        raise HTTPException(status_code=400, detail="At least 1 cash flow required")

    value = npv.npv(inputs.cash_flows, inputs.discount_rate_pct)
    return {
        "npv": _money(value),
        "npv_index": npv.npv_index(value, inputs.cash_flows[0]),
    }


class MIRRInput(BaseModel):
    """Input for MIRR calculation."""

    cash_flows: List[float]
    financing_rate: float = settings.default_financing_rate
    reinvest_rate: float = settings.default_reinvest_rate
    periods_per_year: int = 12


@router.post("/mirr")
async def calculate_mirr_endpoint(inputs: MIRRInput):
    """Calculate MIRR with its present/future value breakdown."""
    result = mirr.calculate_mirr(
        inputs.cash_flows,
        inputs.financing_rate,
        inputs.reinvest_rate,
        periods_per_year=inputs.periods_per_year,
    )
    return result.to_dict()


class AmortizationInput(BaseModel):
    """Input for amortization calculation."""

    loan_amount: float
    annual_rate: float
    total_term_months: int
    months_elapsed: int = 0
    io_months: int = 0
    include_schedule: bool = True


@router.post("/amortization")
async def calculate_amortization(inputs: AmortizationInput):
    """Loan position after a number of payments, with the full schedule."""
    balance = amortization.outstanding_balance(
        inputs.loan_amount,
        inputs.annual_rate,
        inputs.total_term_months,
        inputs.months_elapsed,
        io_months=inputs.io_months,
    )

    schedule = amortization.generate_amortization_schedule(
        loan_amount=inputs.loan_amount,
        annual_rate=inputs.annual_rate,
        total_term_months=inputs.total_term_months,
        io_months=inputs.io_months,
    )

    return {
        "monthly_payment": _money(
            amortization.calculate_payment(
                inputs.loan_amount,
                inputs.annual_rate,
                inputs.total_term_months - inputs.io_months,
            )
        ),
        "interest_only_payment": _money(inputs.loan_amount * inputs.annual_rate / 12),
        "outstanding_balance": _money(balance),
        "cumulative_principal_paid": _money(inputs.loan_amount - balance),
        "remaining_term_months": amortization.remaining_term(
            inputs.total_term_months, inputs.months_elapsed
        ),
        "schedule": schedule if inputs.include_schedule else [],
        "total_interest": _money(amortization.calculate_total_interest(schedule)),
    }


class ProjectionInput(BaseModel):
    """Input for a year-by-year equity projection."""

    property: PropertyInput
    assumptions: AssumptionsInput = AssumptionsInput()
    years: int = settings.default_horizon_years


@router.post("/projection")
async def calculate_projection(inputs: ProjectionInput):
    """Project value, balance, equity and yield for each year."""
    points = projection.generate_projection(
        inputs.property.to_financials(),
        inputs.assumptions.to_assumptions(),
        inputs.years,
    )

    rows = []
    for point in points:
        row = asdict(point)
        for key, value in row.items():
            if isinstance(value, float):
                row[key] = _money(value)
        rows.append(row)

    return {"points": rows}


class InflationInput(BaseModel):
    """Input for inflation-adjusted appreciation and total return."""

    property: PropertyInput
    purchase_date: date
    current_year: Optional[int] = None


@router.post("/inflation")
async def calculate_inflation(inputs: InflationInput):
    """Nominal and real appreciation, and ROI including rental cash flow."""
    financials = inputs.property.to_financials().validate()
    appreciation = inflation.real_appreciation_metrics(
        financials.purchase_price,
        financials.market_value,
        inputs.purchase_date,
        inputs.current_year,
    )
    roi = inflation.true_roi(financials, inputs.purchase_date, inputs.current_year)

    return {
        "appreciation": {
            "years_held": appreciation.years_held,
            "nominal_roi": round(appreciation.nominal_roi, 2),
            "inflation_factor": round(appreciation.inflation_factor, 3),
            "total_inflation": round(appreciation.total_inflation, 2),
            "inflation_adjusted_price": _money(appreciation.inflation_adjusted_price),
            "real_roi": round(appreciation.real_roi, 2),
            "real_appreciation_rate": round(appreciation.real_appreciation_rate, 2),
        },
        "roi": {
            "years_held": roi.years_held,
            "total_cash_flow": _money(roi.total_cash_flow),
            "appreciation_return": round(roi.appreciation_return, 2),
            "cash_flow_return": round(roi.cash_flow_return, 2),
            "total_roi": round(roi.total_roi, 2),
            "annualized_roi": round(roi.annualized_roi, 2),
        },
    }
