"""Module-level shortcuts backed by the packaged BS calendar."""

from datetime import date
from functools import lru_cache
from typing import Union

from .bs_date import BSDate, parse_ad_date, parse_bs_date
from .calculator import DateLike, RenewalFeeCalculator
from .converter import BSCalendarConverter
from .errors import RenewalError
from .loader import default_calendar
from .reference import ReferenceSnapshot
from .result import RenewalComputationResult
from .vehicle import Vehicle


@lru_cache(maxsize=1)
def default_converter() -> BSCalendarConverter:
    return BSCalendarConverter(default_calendar())


def to_bs(ad_date: Union[date, str]) -> BSDate:
    """Convert an AD date (or 'YYYY-MM-DD' string) to BS."""
    if isinstance(ad_date, str):
        ad_date = parse_ad_date(ad_date)
    return default_converter().to_bs(ad_date)


def to_ad(bs_date: Union[BSDate, str]) -> date:
    """Convert a BS date (or 'YYYY-MM-DD' string) to AD."""
    if isinstance(bs_date, str):
        bs_date = parse_bs_date(bs_date)
    return default_converter().to_ad(bs_date)


def is_valid_bs_date(bs_date: Union[BSDate, str]) -> bool:
    """True when the date exists in the packaged calendar. Never raises."""
    if isinstance(bs_date, str):
        try:
            bs_date = parse_bs_date(bs_date)
        except RenewalError:
            return False
    if not isinstance(bs_date, BSDate):
        return False
    return default_converter().is_valid_bs_date(bs_date)


def today_bs() -> BSDate:
    return default_converter().today_bs()


def compute_due(
    vehicle: Vehicle, as_of_date: DateLike, snapshot: ReferenceSnapshot
) -> RenewalComputationResult:
    """Amount due for `vehicle` on `as_of_date` using one reference snapshot."""
    return RenewalFeeCalculator.from_snapshot(snapshot).compute_due(vehicle, as_of_date)
