"""
Bikram Sambat calendar conversion and vehicle renewal fees.

This package provides:
- BSDate: A Bikram Sambat date value
- CalendarTable: BS month lengths per year, anchored to an AD epoch
- BSCalendarConverter: AD <-> BS conversion and BS date arithmetic
- FiscalYear / FiscalYearCalendar: Shrawan-to-Ashadh fiscal years
- RateTable: Tax, insurance and penalty rates
- Vehicle: Registration profile of a vehicle
- RenewalFeeCalculator: Amount due, arrears and renewal status
- ReferenceStore: Current calendar/fiscal-year/rate snapshot
"""

from .errors import (
    RenewalError,
    ParseError,
    InvalidDateError,
    OutOfRangeError,
    NoFiscalYearError,
    RateNotFoundError,
    ConfigError,
)
from .bs_date import (
    BSDate,
    MONTH_NAMES,
    parse_bs_date,
    parse_ad_date,
    get_month_name,
    fiscal_year_label,
)
from .calendar_table import CalendarTable
from .converter import BSCalendarConverter
from .fiscal_year import FiscalYear, FiscalYearCalendar, generate_fiscal_years
from .rates import TaxRate, InsuranceRate, PenaltyBand, PenaltySchedule, RateTable
from .status import RenewalStatus
from .vehicle import Vehicle
from .result import RenewalComputationResult, ArrearsStatement
from .calculator import RenewalFeeCalculator
from .reference import ReferenceSnapshot, ReferenceStore
from .loader import (
    load_calendar,
    load_tariff,
    load_reference,
    load_vehicle,
    save_last_renewed,
)
from .api import to_bs, to_ad, is_valid_bs_date, today_bs, compute_due

__all__ = [
    "RenewalError",
    "ParseError",
    "InvalidDateError",
    "OutOfRangeError",
    "NoFiscalYearError",
    "RateNotFoundError",
    "ConfigError",
    "BSDate",
    "MONTH_NAMES",
    "parse_bs_date",
    "parse_ad_date",
    "get_month_name",
    "fiscal_year_label",
    "CalendarTable",
    "BSCalendarConverter",
    "FiscalYear",
    "FiscalYearCalendar",
    "generate_fiscal_years",
    "TaxRate",
    "InsuranceRate",
    "PenaltyBand",
    "PenaltySchedule",
    "RateTable",
    "RenewalStatus",
    "Vehicle",
    "RenewalComputationResult",
    "ArrearsStatement",
    "RenewalFeeCalculator",
    "ReferenceSnapshot",
    "ReferenceStore",
    "load_calendar",
    "load_tariff",
    "load_reference",
    "load_vehicle",
    "save_last_renewed",
    "to_bs",
    "to_ad",
    "is_valid_bs_date",
    "today_bs",
    "compute_due",
]
