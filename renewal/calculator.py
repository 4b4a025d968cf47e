"""Renewal fee calculator: tax, insurance and late penalties for a vehicle."""

import logging
from datetime import date
from decimal import Decimal
from typing import Union

from .bs_date import BSDate
from .calculations import (
    VALIDITY_MONTHS,
    apply_percentage,
    calc_expiry_date,
    calc_overdue_start,
    calc_overdue_units,
    check_status,
    to_money,
)
from .converter import BSCalendarConverter
from .errors import OutOfRangeError
from .fiscal_year import FiscalYear, FiscalYearCalendar
from .rates import RateTable
from .result import ArrearsStatement, RenewalComputationResult
from .status import RenewalStatus
from .vehicle import Vehicle

logger = logging.getLogger(__name__)

MAX_ARREARS_YEARS = 4

DateLike = Union[date, BSDate]


class RenewalFeeCalculator:
    """
    Computes the amount due to renew a vehicle's registration.

    All inputs are read-only: the calculator never mutates the vehicle, the
    rate table or the fiscal years, so the same call can back both a preview
    and the final charge.
    """

    def __init__(
        self,
        converter: BSCalendarConverter,
        fiscal_years: FiscalYearCalendar,
        rates: RateTable,
    ):
        self.converter = converter
        self.fiscal_years = fiscal_years
        self.rates = rates

    @classmethod
    def from_snapshot(cls, snapshot) -> "RenewalFeeCalculator":
        return cls(snapshot.converter, snapshot.fiscal_years, snapshot.rates)

    def as_bs(self, value: DateLike) -> BSDate:
        """Normalize an AD date or a BSDate to a checked BSDate."""
        if isinstance(value, BSDate):
            return self.converter.check(value)
        return self.converter.to_bs(value)

    def expiry_date(self, vehicle: Vehicle) -> BSDate:
        """Registration expiry: one BS year after the last renewal (or registration)."""
        return calc_expiry_date(
            self.converter, self.converter.check(vehicle.reference_date)
        )

    def renewal_status(
        self, vehicle: Vehicle, as_of_date: DateLike, due_soon_days: int = 30
    ) -> RenewalStatus:
        """EXPIRED, DUE_SOON or VALID as of a date; UNKNOWN past the calendar table."""
        try:
            as_of = self.as_bs(as_of_date)
            expiry = self.expiry_date(vehicle)
            return check_status(
                self.converter.to_ordinal(as_of),
                self.converter.to_ordinal(expiry),
                due_soon_days,
            )
        except OutOfRangeError as e:
            logger.debug("Status unknown for %s: %s", vehicle.registration_number, e)
            return RenewalStatus.UNKNOWN

    def compute_due(
        self, vehicle: Vehicle, as_of_date: DateLike
    ) -> RenewalComputationResult:
        """
        Calculate the amount due to renew `vehicle` on `as_of_date`.

        Logic:
        - Fiscal year: the one containing as_of (NoFiscalYearError if none)
        - Tax and renewal fee: rate for the vehicle's type/fuel/capacity band
          in the fiscal year the current period expires in (RateNotFoundError
          if none)
        - Insurance: premium for the vehicle, 0 if the type is exempt
        - Penalty: band selected by how long the renewal is overdue, counted
          from the last renewal (or registration) plus the configured offset
        """
        as_of = self.as_bs(as_of_date)
        current = self.fiscal_years.require(as_of)
        reference = self.converter.check(vehicle.reference_date)
        expiry = calc_expiry_date(self.converter, reference)
        rate_year = self._pricing_year(vehicle, expiry, as_of, current)
        return self._price(vehicle, rate_year, reference, as_of, current.label)

    def compute_arrears(
        self,
        vehicle: Vehicle,
        as_of_date: DateLike,
        max_years: int = MAX_ARREARS_YEARS,
    ) -> ArrearsStatement:
        """
        Break down every unpaid renewal year, oldest first.

        Year k covers the period starting k years after the last renewal and
        expiring one year later. It is included when k == 0 or its expiry has
        passed, up to max_years lines. Each year is priced with the
        rates of the fiscal year its expiry falls in.

        Raises:
            ValueError: max_years is below 1
        """
        if max_years < 1:
            raise ValueError(f"max_years must be at least 1, got {max_years}")
        as_of = self.as_bs(as_of_date)
        current = self.fiscal_years.require(as_of)
        reference = self.converter.check(vehicle.reference_date)

        lines = []
        for k in range(max_years):
            period_start = self.converter.add_years(reference, k)
            expiry = calc_expiry_date(self.converter, period_start)
            if k > 0 and expiry > as_of:
                break

            rate_year = self._pricing_year(vehicle, expiry, as_of, current)
            label = rate_year.label if expiry <= as_of else current.label
            lines.append(self._price(vehicle, rate_year, period_start, as_of, label))

        statement = ArrearsStatement(lines=tuple(lines))
        logger.debug(
            "Arrears for %s as of %s: %d year(s), total %s",
            vehicle.registration_number,
            as_of,
            statement.years_count,
            statement.grand_total,
        )
        return statement

    def _pricing_year(
        self,
        vehicle: Vehicle,
        expiry: BSDate,
        as_of: BSDate,
        current: FiscalYear,
    ) -> FiscalYear:
        """
        Fiscal year whose rates price the period ending on `expiry`.

        Falls back to `current` when no configured fiscal year holds the expiry.
        """
        fiscal_year = self.fiscal_years.find(expiry)
        if fiscal_year is not None:
            return fiscal_year
        log = logger.warning if expiry <= as_of else logger.debug
        log(
            "No fiscal year covers expiry %s of %s; pricing with FY %s",
            expiry,
            vehicle.registration_number,
            current.label,
        )
        return current

    def _price(
        self,
        vehicle: Vehicle,
        fiscal_year: FiscalYear,
        period_start: BSDate,
        as_of: BSDate,
        label: str,
    ) -> RenewalComputationResult:
        tax_rate = self.rates.find_tax_rate(
            vehicle.vehicle_type,
            vehicle.fuel_type,
            vehicle.engine_capacity,
            fiscal_year=fiscal_year.label,
            province=vehicle.province,
        )
        insurance_rate = self.rates.find_insurance_rate(
            vehicle.vehicle_type,
            vehicle.fuel_type,
            vehicle.engine_capacity,
            fiscal_year=fiscal_year.label,
        )

        base_tax = to_money(tax_rate.annual_tax)
        renewal_fee = to_money(tax_rate.renewal_fee)
        insurance = to_money(insurance_rate.annual_premium) if insurance_rate else to_money(0)

        schedule = self.rates.penalty
        clock_start = calc_overdue_start(
            self.converter, period_start, schedule.offset_months, schedule.grace_days
        )
        units = calc_overdue_units(self.converter, clock_start, as_of, schedule.unit)
        band = schedule.band_for(units) if units is not None else None

        percentage = band.percentage if band else Decimal("0")
        fee_percentage = band.renewal_fee_percentage if band else Decimal("0")
        tax_penalty = apply_percentage(base_tax, percentage)
        renewal_fee_penalty = apply_percentage(renewal_fee, fee_percentage)
        penalty = tax_penalty + renewal_fee_penalty

        result = RenewalComputationResult(
            fiscal_year_label=label,
            base_tax=base_tax,
            insurance_amount=insurance,
            penalty_amount=penalty,
            total_due=base_tax + renewal_fee + insurance + penalty,
            renewal_fee=renewal_fee,
            tax_penalty=tax_penalty,
            renewal_fee_penalty=renewal_fee_penalty,
            penalty_percentage=percentage,
            renewal_fee_penalty_percentage=fee_percentage,
            penalty_band=band.label if band else None,
            overdue_units=units,
            overdue_unit=schedule.unit,
            reference_date=period_start,
            expiry_date=calc_expiry_date(self.converter, period_start, VALIDITY_MONTHS),
            as_of=as_of,
        )
        logger.debug(
            "%s FY %s (rates %s): tax=%s fee=%s insurance=%s penalty=%s "
            "(%s %s overdue, band %s)",
            vehicle.registration_number,
            label,
            fiscal_year.label,
            base_tax,
            renewal_fee,
            insurance,
            penalty,
            units,
            schedule.unit,
            result.penalty_band,
        )
        return result
