"""BSDate value type and date-string parsing."""

import re
from dataclasses import dataclass
from datetime import date

from .errors import InvalidDateError, ParseError

MONTH_NAMES = [
    "Baisakh",
    "Jestha",
    "Ashadh",
    "Shrawan",
    "Bhadra",
    "Ashwin",
    "Kartik",
    "Mangsir",
    "Poush",
    "Magh",
    "Falgun",
    "Chaitra",
]

SHRAWAN = 4
ASHADH = 3

_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


@dataclass(frozen=True, order=True)
class BSDate:
    """A Bikram Sambat calendar date, ordered by (year, month, day).

    Only the shape is checked here (month 1-12, day 1-32). Whether the day
    exists in that month depends on the calendar table, see
    BSCalendarConverter.is_valid_bs_date.
    """

    year: int
    month: int
    day: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise InvalidDateError(f"Invalid BS month: {self.month}")
        if not 1 <= self.day <= 32:
            raise InvalidDateError(f"Invalid BS day: {self.day}")

    @classmethod
    def parse(cls, text: str) -> "BSDate":
        """Parse a YYYY-MM-DD string. Raises ParseError or InvalidDateError."""
        year, month, day = _split_date(text)
        return cls(year, month, day)

    @property
    def month_name(self) -> str:
        return MONTH_NAMES[self.month - 1]

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def __str__(self) -> str:
        return self.isoformat()

    def format(self, style: str = "numeric") -> str:
        """
        Format the date for display.

        Args:
            style: "numeric" (2081-01-01), "full" (Baisakh 1, 2081)
                or "short" (Bai 1, 2081)
        """
        if style == "full":
            return f"{self.month_name} {self.day}, {self.year}"
        elif style == "short":
            return f"{self.month_name[:3]} {self.day}, {self.year}"
        return self.isoformat()


def _split_date(text: str):
    if not isinstance(text, str):
        raise ParseError(f"Expected a YYYY-MM-DD string, got {type(text).__name__}")
    match = _DATE_RE.match(text.strip())
    if match is None:
        raise ParseError(f"Invalid date format: {text!r}. Expected YYYY-MM-DD")
    return tuple(int(part) for part in match.groups())


def parse_bs_date(text: str) -> BSDate:
    """Parse a BS date string (YYYY-MM-DD)."""
    return BSDate.parse(text)


def parse_ad_date(text: str) -> date:
    """Parse an AD date string (YYYY-MM-DD) into a date."""
    year, month, day = _split_date(text)
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidDateError(f"Invalid AD date {text!r}: {e}") from e


def get_month_name(month: int) -> str:
    """Get the BS month name for a month number (1-12)."""
    if 1 <= month <= 12:
        return MONTH_NAMES[month - 1]
    raise InvalidDateError(f"Invalid BS month: {month}")


def fiscal_year_label(start_year: int) -> str:
    """Label of the fiscal year starting in `start_year`: 2081 -> '2081/82'."""
    return f"{start_year}/{str(start_year + 1)[-2:]}"
