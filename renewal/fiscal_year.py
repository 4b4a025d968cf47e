"""Nepal fiscal years (Shrawan 1 to the last day of Ashadh)."""

from bisect import bisect_right
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional

from .bs_date import ASHADH, SHRAWAN, BSDate, fiscal_year_label
from .converter import BSCalendarConverter
from .errors import ConfigError, NoFiscalYearError


@dataclass(frozen=True)
class FiscalYear:
    """A fiscal year bounded by two inclusive BS dates."""

    label: str
    start_date: BSDate
    end_date: BSDate

    def contains(self, bs_date: BSDate) -> bool:
        return self.start_date <= bs_date <= self.end_date

    def total_days(self, converter: BSCalendarConverter) -> int:
        return converter.days_between(self.start_date, self.end_date) + 1

    def quarter(self, bs_date: BSDate, converter: BSCalendarConverter) -> Optional[int]:
        """Quarter (1-4) of bs_date within this fiscal year, in 91-day blocks."""
        if not self.contains(bs_date):
            return None
        elapsed = converter.days_between(self.start_date, bs_date)
        return min(elapsed // 91 + 1, 4)

    @property
    def display(self) -> str:
        return f"FY {self.label} ({self.start_date} to {self.end_date})"


def fiscal_year_for_start(converter: BSCalendarConverter, start_year: int) -> FiscalYear:
    """Build the fiscal year that starts on Shrawan 1 of `start_year`."""
    end_year = start_year + 1
    return FiscalYear(
        label=fiscal_year_label(start_year),
        start_date=converter.check(BSDate(start_year, SHRAWAN, 1)),
        end_date=BSDate(end_year, ASHADH, converter.days_in_month(end_year, ASHADH)),
    )


def generate_fiscal_years(
    converter: BSCalendarConverter, first_year: int, last_year: int
) -> List[FiscalYear]:
    """Fiscal years starting in BS years first_year..last_year inclusive."""
    return [
        fiscal_year_for_start(converter, year)
        for year in range(first_year, last_year + 1)
    ]


class FiscalYearCalendar:
    """
    Ordered, contiguous, non-overlapping fiscal years with date lookup.

    Contiguity is checked day by day: each fiscal year must start on the day
    after the previous one ends.
    """

    def __init__(self, fiscal_years: Iterable[FiscalYear], converter: BSCalendarConverter):
        years = sorted(fiscal_years, key=lambda fy: fy.start_date)
        labels = set()
        for fy in years:
            converter.check(fy.start_date)
            converter.check(fy.end_date)
            if fy.end_date < fy.start_date:
                raise ConfigError(f"Fiscal year {fy.label} ends before it starts")
            if fy.label in labels:
                raise ConfigError(f"Duplicate fiscal year label: {fy.label}")
            labels.add(fy.label)

        for prev, cur in zip(years, years[1:]):
            if cur.start_date <= prev.end_date:
                raise ConfigError(f"Fiscal years {prev.label} and {cur.label} overlap")
            if converter.add_days(prev.end_date, 1) != cur.start_date:
                raise ConfigError(
                    f"Gap between fiscal years {prev.label} and {cur.label}"
                )

        self._years = tuple(years)
        self._starts = [fy.start_date for fy in years]

    def __iter__(self) -> Iterator[FiscalYear]:
        return iter(self._years)

    def __len__(self) -> int:
        return len(self._years)

    def find(self, bs_date: BSDate) -> Optional[FiscalYear]:
        """The fiscal year containing bs_date, or None."""
        index = bisect_right(self._starts, bs_date) - 1
        if index < 0:
            return None
        fy = self._years[index]
        return fy if fy.contains(bs_date) else None

    def require(self, bs_date: BSDate) -> FiscalYear:
        """Like find(), but raises NoFiscalYearError when nothing matches."""
        fy = self.find(bs_date)
        if fy is None:
            if self._years:
                covered = f"{self._years[0].start_date} to {self._years[-1].end_date}"
            else:
                covered = "none configured"
            raise NoFiscalYearError(
                f"No fiscal year covers BS {bs_date} (configured: {covered})"
            )
        return fy

    def get(self, label: str) -> Optional[FiscalYear]:
        for fy in self._years:
            if fy.label == label:
                return fy
        return None
