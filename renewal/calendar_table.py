"""Month-length reference table for the Bikram Sambat calendar."""

from bisect import bisect_right
from datetime import date, timedelta
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Sequence, Tuple

from .bs_date import BSDate
from .errors import ConfigError, OutOfRangeError

MIN_MONTH_DAYS = 29
MAX_MONTH_DAYS = 32


class CalendarTable:
    """
    Immutable BS year -> month lengths table anchored to an AD epoch.

    The epoch is Baisakh 1 of the first covered year; `epoch_ad` is the
    Gregorian date of that day. Years must be contiguous.
    """

    def __init__(self, years: Mapping[int, Sequence[int]], epoch_ad: date):
        if not years:
            raise ConfigError("Calendar table has no years")

        ordered = sorted(years)
        if ordered != list(range(ordered[0], ordered[-1] + 1)):
            raise ConfigError(
                f"Calendar table years must be contiguous ({ordered[0]}-{ordered[-1]})"
            )

        months: Dict[int, Tuple[int, ...]] = {}
        for year in ordered:
            lengths = tuple(int(n) for n in years[year])
            if len(lengths) != 12:
                raise ConfigError(
                    f"BS year {year} has {len(lengths)} month lengths, expected 12"
                )
            for month, n in enumerate(lengths, start=1):
                if not MIN_MONTH_DAYS <= n <= MAX_MONTH_DAYS:
                    raise ConfigError(
                        f"BS {year}-{month:02d} has {n} days, "
                        f"expected {MIN_MONTH_DAYS}-{MAX_MONTH_DAYS}"
                    )
            months[year] = lengths

        self._months = MappingProxyType(months)
        self.epoch_ad = epoch_ad
        self.first_year = ordered[0]
        self.last_year = ordered[-1]

        # Day offset of each Baisakh 1 from the epoch, plus one past the end.
        offsets = [0]
        for year in ordered:
            offsets.append(offsets[-1] + sum(months[year]))
        self._year_offsets = tuple(offsets)

    def __contains__(self, year: int) -> bool:
        return year in self._months

    def __iter__(self) -> Iterator[int]:
        return iter(self._months)

    def __len__(self) -> int:
        return len(self._months)

    def __repr__(self) -> str:
        return (
            f"CalendarTable({self.first_year}-{self.last_year}, "
            f"epoch_ad={self.epoch_ad.isoformat()})"
        )

    @property
    def epoch_bs(self) -> BSDate:
        return BSDate(self.first_year, 1, 1)

    @property
    def last_ad(self) -> date:
        """Last Gregorian date covered by the table."""
        return self.epoch_ad + timedelta(days=self.total_days - 1)

    @property
    def total_days(self) -> int:
        return self._year_offsets[-1]

    def month_lengths(self, year: int) -> Tuple[int, ...]:
        try:
            return self._months[year]
        except KeyError:
            raise OutOfRangeError(
                f"BS year {year} not supported "
                f"(table covers {self.first_year}-{self.last_year})"
            ) from None

    def days_in_month(self, year: int, month: int) -> int:
        return self.month_lengths(year)[month - 1]

    def days_in_year(self, year: int) -> int:
        return sum(self.month_lengths(year))

    def year_offset(self, year: int) -> int:
        """Days from the epoch to Baisakh 1 of `year`."""
        self.month_lengths(year)
        return self._year_offsets[year - self.first_year]

    def locate(self, offset: int) -> Tuple[int, int]:
        """Split a day offset from the epoch into (BS year, days into that year)."""
        if not 0 <= offset < self.total_days:
            raise OutOfRangeError(
                f"Day offset {offset} is outside the calendar table "
                f"({self.epoch_ad.isoformat()} to {self.last_ad.isoformat()})"
            )
        index = bisect_right(self._year_offsets, offset) - 1
        return self.first_year + index, offset - self._year_offsets[index]

    def as_dict(self) -> Dict[int, list]:
        return {year: list(lengths) for year, lengths in self._months.items()}
