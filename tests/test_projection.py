"""
Tests for equity projections, tax benefits and input validation.
"""

import pytest

from return_engine.calculations.amortization import outstanding_balance
from return_engine.calculations.errors import InvalidInputError
from return_engine.calculations.inputs import EconomicAssumptions, PropertyFinancials
from return_engine.calculations.projection import (
    generate_projection,
    net_gain_pv,
    project_year,
)
from return_engine.calculations.taxes import (
    calculate_depreciation_recapture,
    calculate_tax_benefits,
    calculate_tax_savings,
)


class TestProjection:
    """Test year-by-year projections."""

    def test_length(self, mortgaged_property):
        points = generate_projection(mortgaged_property, EconomicAssumptions(), 10)
        assert [p.year for p in points] == list(range(11))

    def test_year_zero(self, mortgaged_property):
        point = project_year(mortgaged_property, EconomicAssumptions(), 0)
        balance = outstanding_balance(320_000, 0.06, 360, 24)

        assert point.market_value == 420_000
        assert point.market_value_pv == 420_000
        assert point.outstanding_balance == pytest.approx(balance)
        assert point.capital_gains_tax == pytest.approx(5_000)  # 25% of 20k gain
        assert point.selling_costs == pytest.approx(25_200)  # 6% of 420k
        assert point.net_equity_nominal == pytest.approx(420_000 - balance - 30_200)
        assert point.cumulative_principal_paid == 0
        assert point.annual_mortgage == 0
        assert point.net_gain == pytest.approx(point.net_equity_pv)

    def test_balance_follows_amortization(self, mortgaged_property):
        points = generate_projection(mortgaged_property, EconomicAssumptions(), 8)
        start = points[0].outstanding_balance
        for point in points:
            expected = outstanding_balance(320_000, 0.06, 360, 24 + point.year * 12)
            assert point.outstanding_balance == pytest.approx(expected)
            assert point.cumulative_principal_paid + point.outstanding_balance == (
                pytest.approx(start)
            )

    def test_remaining_term(self, mortgaged_property):
        points = generate_projection(mortgaged_property, EconomicAssumptions(), 30)
        assert points[0].remaining_term_months == 336
        assert points[5].remaining_term_months == 276
        assert points[30].remaining_term_months == 0
        assert points[30].outstanding_balance == 0

    def test_mortgage_stops_when_paid_off(self, mortgaged_property):
        points = generate_projection(mortgaged_property, EconomicAssumptions(), 30)
        assert points[28].annual_mortgage == pytest.approx(1_918.56 * 12)
        assert points[29].annual_mortgage == 0
        assert points[30].annual_mortgage == 0

    def test_inflation_deflates_values(self, mortgaged_property):
        assumptions = EconomicAssumptions(appreciation_rate=4.0, inflation_rate=3.0)
        point = project_year(mortgaged_property, assumptions, 5)
        assert point.market_value == pytest.approx(420_000 * 1.04 ** 5)
        assert point.market_value_pv == pytest.approx(420_000 * 1.04 ** 5 / 1.03 ** 5)
        assert point.net_equity_pv == pytest.approx(point.net_equity_nominal / 1.03 ** 5)

    def test_net_gain_without_growth(self, all_cash_property, flat_assumptions):
        """Flat all-cash property: equity plus three years of net rent."""
        point = project_year(all_cash_property, flat_assumptions, 3)
        assert point.annual_net_yield == pytest.approx(21_600)
        assert point.cumulative_net_yield_pv == pytest.approx(64_800)
        assert point.net_equity_nominal == pytest.approx(500_000)
        assert point.net_gain == pytest.approx(564_800)
        assert point.net_yield_pct == pytest.approx(4.32)
        assert point.cash_at_hand == pytest.approx(21_600)

    def test_mortgage_without_loan_details(self, flat_assumptions):
        prop = PropertyFinancials(
            purchase_price=300_000,
            down_payment=60_000,
            monthly_rent=2_500,
            monthly_expenses=500,
            monthly_mortgage=1_500,
        )
        points = generate_projection(prop, flat_assumptions, 3)
        assert [p.annual_mortgage for p in points] == [0, 18_000, 18_000, 18_000]
        assert points[3].cash_at_hand == pytest.approx(6_000)

    def test_net_gain_composition(self, mortgaged_property):
        point = project_year(mortgaged_property, EconomicAssumptions(), 12)
        assert point.net_gain == pytest.approx(
            point.net_equity_pv
            + point.cumulative_net_yield_pv
            - point.cumulative_mortgage_pv
        )

    def test_net_gain_pv_year_zero(self, mortgaged_property):
        assert net_gain_pv(mortgaged_property, EconomicAssumptions(), 0) == 0.0

    def test_negative_years(self, mortgaged_property):
        with pytest.raises(InvalidInputError):
            generate_projection(mortgaged_property, EconomicAssumptions(), -1)

    def test_no_capital_gains_tax_on_loss(self):
        prop = PropertyFinancials(
            purchase_price=500_000, down_payment=500_000, current_value=450_000
        )
        point = project_year(prop, EconomicAssumptions(), 0)
        assert point.capital_gains_tax == 0


class TestTaxBenefits:
    """Test tax benefit calculations."""

    def test_residential_depreciation(self):
        prop = PropertyFinancials(purchase_price=275_000, down_payment=55_000)
        benefits = calculate_tax_benefits(prop)
        assert benefits.annual_depreciation == pytest.approx(8_000)

    def test_commercial_depreciation(self):
        prop = PropertyFinancials(
            purchase_price=390_000, down_payment=100_000, property_type="commercial"
        )
        assert calculate_tax_benefits(prop).annual_depreciation == pytest.approx(8_000)

    def test_total_deductions(self):
        prop = PropertyFinancials(
            purchase_price=275_000,
            down_payment=55_000,
            outstanding_balance=200_000,
            interest_rate=0.05,
            loan_term_months=360,
            annual_property_taxes=3_000,
            monthly_maintenance=100,
        )
        benefits = calculate_tax_benefits(prop)
        assert benefits.mortgage_interest_deduction == pytest.approx(10_000)
        assert benefits.total == pytest.approx(8_000 + 10_000 + 3_000 + 1_200)

    def test_override(self):
        prop = PropertyFinancials(
            purchase_price=275_000, down_payment=55_000, tax_benefit_override=5_000
        )
        benefits = calculate_tax_benefits(prop)
        assert benefits.total == 5_000
        assert benefits.annual_depreciation == 0

    def test_tax_savings(self):
        assert calculate_tax_savings(10_000, 22) == pytest.approx(2_200)
        with pytest.raises(InvalidInputError):
            calculate_tax_savings(10_000, 150)

    def test_depreciation_recapture(self):
        prop = PropertyFinancials(purchase_price=275_000, down_payment=55_000)
        assert calculate_depreciation_recapture(prop, 10) == pytest.approx(20_000)


class TestInputs:
    """Test input validation and presets."""

    def test_country_preset(self):
        turkey = EconomicAssumptions.for_country("Turkey")
        assert turkey.appreciation_rate == 12.0
        assert turkey.inflation_rate == 15.0
        assert turkey.rent_growth_rate == pytest.approx(8.4)
        assert turkey.expense_growth_rate == 2.0

    def test_unknown_country(self):
        with pytest.raises(InvalidInputError):
            EconomicAssumptions.for_country("Atlantis")

    def test_rate_bounds(self):
        with pytest.raises(InvalidInputError):
            EconomicAssumptions(capital_gains_tax_rate=120).validate()
        with pytest.raises(InvalidInputError):
            EconomicAssumptions(selling_cost_rate=-1).validate()
        with pytest.raises(InvalidInputError):
            EconomicAssumptions(appreciation_rate=float("nan")).validate()
        EconomicAssumptions(appreciation_rate=-100).validate()

    def test_property_type(self):
        with pytest.raises(InvalidInputError):
            PropertyFinancials(
                purchase_price=1, down_payment=0, property_type="industrial"
            ).validate()

    def test_loan_requires_term(self):
        with pytest.raises(InvalidInputError) as exc_info:
            PropertyFinancials(
                purchase_price=100_000, down_payment=20_000, loan_amount=80_000
            ).validate()
        assert exc_info.value.field == "loan_term_months"

    def test_market_value_fallback(self):
        prop = PropertyFinancials(purchase_price=100_000, down_payment=20_000)
        assert prop.market_value == 100_000
