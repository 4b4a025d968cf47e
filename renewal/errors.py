"""Exceptions raised by the calendar converter and the fee calculator."""


class RenewalError(ValueError):
    """Base class for every recoverable error raised by this package."""


class ParseError(RenewalError):
    """A date string is not in YYYY-MM-DD form."""


class InvalidDateError(RenewalError):
    """A well-formed BS date names a month or day that does not exist."""


class OutOfRangeError(RenewalError):
    """A date falls outside the years covered by the calendar table."""


class NoFiscalYearError(RenewalError):
    """No configured fiscal year contains the requested date."""


class RateNotFoundError(RenewalError):
    """No tax rate matches the vehicle's type, fuel and engine capacity."""


class ConfigError(RenewalError):
    """Reference data (calendar, fiscal years, tariff) is inconsistent."""
