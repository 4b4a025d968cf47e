"""Shared fixtures: packaged calendar, generated fiscal years, a small tariff."""

from datetime import date
from decimal import Decimal

import pytest

from renewal import (
    BSCalendarConverter,
    BSDate,
    FiscalYearCalendar,
    InsuranceRate,
    PenaltyBand,
    PenaltySchedule,
    RateTable,
    RenewalFeeCalculator,
    TaxRate,
    Vehicle,
    generate_fiscal_years,
)
from renewal.loader import default_calendar


@pytest.fixture
def converter():
    return BSCalendarConverter(default_calendar(), clock=lambda: date(2026, 1, 3))


@pytest.fixture
def fiscal_years(converter):
    return FiscalYearCalendar(generate_fiscal_years(converter, 2078, 2083), converter)


@pytest.fixture
def monthly_penalty():
    """0% in the first month, 10% up to six months, 20% after."""
    return PenaltySchedule(
        bands=(
            PenaltyBand("first month", 0, Decimal("0"), end=1),
            PenaltyBand("1-6 months", 1, Decimal("10"), end=6),
            PenaltyBand("over 6 months", 6, Decimal("20")),
        ),
        unit="months",
    )


@pytest.fixture
def rates(monthly_penalty):
    return RateTable(
        version="test-1",
        tax_rates=(
            TaxRate("2W", "Petrol", 0, Decimal("3000"), Decimal("300")),
            TaxRate("2W", "Petrol", 126, Decimal("5000"), Decimal("300")),
            TaxRate("2W", "Petrol", 0, Decimal("2800"), Decimal("300"), province="KOSHI"),
            TaxRate("4W", "Diesel", 0, Decimal("22000"), Decimal("0")),
        ),
        insurance_rates=(
            InsuranceRate("2W", Decimal("1715"), "Petrol", 0),
            InsuranceRate("2W", Decimal("1941"), "Petrol", 150),
        ),
        penalty=monthly_penalty,
    )


@pytest.fixture
def calculator(converter, fiscal_years, rates):
    return RenewalFeeCalculator(converter, fiscal_years, rates)


@pytest.fixture
def bike():
    return Vehicle(
        registration_number="BA 2 PA 1234",
        vehicle_type="2W",
        fuel_type="Petrol",
        engine_capacity=150,
        registration_date=BSDate(2078, 1, 15),
        last_renewed_date=BSDate(2080, 1, 15),
        province="BAGMATI",
    )
