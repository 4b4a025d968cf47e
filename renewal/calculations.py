"""Helper functions for renewal due and penalty calculations."""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from .bs_date import BSDate
from .converter import BSCalendarConverter
from .status import RenewalStatus

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
VALIDITY_MONTHS = 12


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Convert to Decimal rounded half-up to 2 places. Floats go through str()."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def apply_percentage(amount: Decimal, percentage: Decimal) -> Decimal:
    return to_money(amount * percentage / HUNDRED)


def calc_expiry_date(
    converter: BSCalendarConverter, reference: BSDate, validity_months: int = VALIDITY_MONTHS
) -> BSDate:
    """Registration expires validity_months BS months after the reference date."""
    return converter.add_months(reference, validity_months)


def calc_ad_expiry_date(ad_date: date, years: int = 1) -> date:
    """Gregorian expiry: same calendar day `years` later (Feb 29 -> Feb 28)."""
    return ad_date + relativedelta(years=years)


def calc_overdue_start(
    converter: BSCalendarConverter,
    reference: BSDate,
    offset_months: int = 0,
    grace_days: int = 0,
) -> BSDate:
    """
    First day the overdue clock runs from.

    - offset_months: validity period, in BS months
    - grace_days: days allowed after expiry before penalties apply
    """
    start = converter.add_months(reference, offset_months)
    if grace_days:
        start = converter.add_days(start, grace_days)
    return start


def calc_overdue_units(
    converter: BSCalendarConverter, start: BSDate, as_of: BSDate, unit: str
) -> Optional[int]:
    """
    Overdue duration from start to as_of, in "days" or whole BS "months".

    None when as_of is not after start (nothing is overdue yet).
    """
    if as_of <= start:
        return None
    if unit == "days":
        return converter.days_between(start, as_of)
    return converter.months_between(start, as_of)


def check_status(current: int, due: int, soon_threshold: int) -> RenewalStatus:
    """Determine status by comparing a current day ordinal to the expiry ordinal."""
    if current >= due:
        return RenewalStatus.EXPIRED
    if current >= due - soon_threshold:
        return RenewalStatus.DUE_SOON
    return RenewalStatus.VALID


def describe_interval(start: date, end: date) -> str:
    """Human-readable gap between two AD dates, e.g. '1y 2mo 3d' or '-15d'."""
    sign = ""
    if end < start:
        start, end = end, start
        sign = "-"
    delta = relativedelta(end, start)
    parts = []
    if delta.years:
        parts.append(f"{delta.years}y")
    if delta.months:
        parts.append(f"{delta.months}mo")
    if delta.days or not parts:
        parts.append(f"{delta.days}d")
    return sign + " ".join(parts)
