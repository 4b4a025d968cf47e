"""Bidirectional AD <-> BS date conversion."""

from datetime import date, datetime, timedelta
from typing import Callable, Optional

from .bs_date import BSDate, SHRAWAN, fiscal_year_label, parse_ad_date, parse_bs_date
from .calendar_table import CalendarTable
from .errors import InvalidDateError, OutOfRangeError


class BSCalendarConverter:
    """
    Stateless converter between Gregorian (AD) and Bikram Sambat (BS) dates.

    The calendar table is the only data dependency. `clock` supplies the
    current AD date for today_bs() and defaults to date.today.
    """

    def __init__(
        self,
        table: CalendarTable,
        clock: Optional[Callable[[], date]] = None,
    ):
        self.table = table
        self.clock = clock or date.today

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def is_valid_bs_date(self, bs_date: BSDate) -> bool:
        """Check a BS date against the table without raising."""
        if not isinstance(bs_date, BSDate) or bs_date.year not in self.table:
            return False
        if bs_date.month < 1 or bs_date.month > 12:
            return False
        return 1 <= bs_date.day <= self.table.days_in_month(
            bs_date.year, bs_date.month
        )

    def check(self, bs_date: BSDate) -> BSDate:
        """Return bs_date unchanged, or raise OutOfRangeError / InvalidDateError."""
        if bs_date.year not in self.table:
            raise OutOfRangeError(
                f"BS year {bs_date.year} not supported "
                f"(table covers {self.table.first_year}-{self.table.last_year})"
            )
        days = self.table.days_in_month(bs_date.year, bs_date.month)
        if bs_date.day > days:
            raise InvalidDateError(
                f"Invalid BS date {bs_date}: {bs_date.month_name} "
                f"{bs_date.year} has {days} days"
            )
        return bs_date

    def days_in_month(self, year: int, month: int) -> int:
        return self.table.days_in_month(year, month)

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def to_ordinal(self, bs_date: BSDate) -> int:
        """Days from the table epoch to bs_date."""
        self.check(bs_date)
        lengths = self.table.month_lengths(bs_date.year)
        return (
            self.table.year_offset(bs_date.year)
            + sum(lengths[: bs_date.month - 1])
            + bs_date.day
            - 1
        )

    def from_ordinal(self, offset: int) -> BSDate:
        """Inverse of to_ordinal."""
        year, remaining = self.table.locate(offset)
        month = 1
        for days in self.table.month_lengths(year):
            if remaining < days:
                break
            remaining -= days
            month += 1
        return BSDate(year, month, remaining + 1)

    def to_ad(self, bs_date: BSDate) -> date:
        """
        Convert a BS date to its Gregorian date.

        Raises:
            OutOfRangeError: year missing from the table
            InvalidDateError: day past the end of that BS month
        """
        return self.table.epoch_ad + timedelta(days=self.to_ordinal(bs_date))

    def to_bs(self, ad_date: date) -> BSDate:
        """
        Convert a Gregorian date to its BS date.

        datetime values are refused; strip the time of day first.

        Raises:
            OutOfRangeError: date before the epoch or past the table end
        """
        if isinstance(ad_date, datetime):
            raise TypeError("to_bs() takes a date, not a datetime; call .date() first")
        offset = (ad_date - self.table.epoch_ad).days
        if offset < 0 or offset >= self.table.total_days:
            raise OutOfRangeError(
                f"AD date {ad_date.isoformat()} is outside the calendar table "
                f"({self.table.epoch_ad.isoformat()} to {self.table.last_ad.isoformat()})"
            )
        return self.from_ordinal(offset)

    def today_bs(self) -> BSDate:
        return self.to_bs(self.clock())

    def to_bs_string(self, ad_text: str) -> str:
        """'2024-04-13' (AD) -> '2081-01-01' (BS)."""
        return self.to_bs(parse_ad_date(ad_text)).isoformat()

    def to_ad_string(self, bs_text: str) -> str:
        """'2081-01-01' (BS) -> '2024-04-13' (AD)."""
        return self.to_ad(parse_bs_date(bs_text)).isoformat()

    # -------------------------------------------------------------------------
    # BS arithmetic
    # -------------------------------------------------------------------------

    def add_days(self, bs_date: BSDate, days: int) -> BSDate:
        return self.from_ordinal(self.to_ordinal(bs_date) + days)

    def add_months(self, bs_date: BSDate, months: int) -> BSDate:
        """Shift by whole BS months, clamping the day to the target month's length."""
        self.check(bs_date)
        index = bs_date.year * 12 + (bs_date.month - 1) + months
        year, month = divmod(index, 12)
        month += 1
        day = min(bs_date.day, self.table.days_in_month(year, month))
        return BSDate(year, month, day)

    def add_years(self, bs_date: BSDate, years: int) -> BSDate:
        return self.add_months(bs_date, years * 12)

    def days_between(self, start: BSDate, end: BSDate) -> int:
        """Signed number of days from start to end."""
        return self.to_ordinal(end) - self.to_ordinal(start)

    def months_between(self, start: BSDate, end: BSDate) -> int:
        """
        Whole BS months from start to end (floored toward start).

        2081-01-15 -> 2081-02-14 is 0 months; -> 2081-02-15 is 1 month.
        A start day clamped by a short month counts as the month end, so
        2081-02-32 -> 2081-03-31 (Ashadh 2081 has 31 days) is 1 month.
        """
        if end < start:
            return -self.months_between(end, start)
        months = (end.year - start.year) * 12 + (end.month - start.month)
        if months > 0 and self.add_months(start, months) > end:
            months -= 1
        return months

    def fiscal_year_label_for(self, bs_date: BSDate) -> str:
        """Nepal's fiscal year runs Shrawan 1 to the end of Ashadh: '2081/82'."""
        start_year = bs_date.year if bs_date.month >= SHRAWAN else bs_date.year - 1
        return fiscal_year_label(start_year)
