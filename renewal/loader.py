"""YAML loading and saving utilities for calendar, tariff and vehicle data."""

import json
import logging
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .bs_date import BSDate, parse_ad_date
from .calendar_table import CalendarTable
from .converter import BSCalendarConverter
from .errors import ConfigError, RenewalError
from .fiscal_year import FiscalYear, FiscalYearCalendar, generate_fiscal_years
from .rates import InsuranceRate, PenaltyBand, PenaltySchedule, RateTable, TaxRate
from .reference import ReferenceSnapshot
from .vehicle import Vehicle

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
DEFAULT_CALENDAR = DATA_DIR / "bs_calendar.yaml"

PathLike = Union[str, Path]


class TariffDocument:
    """Parsed tariff file: the rate table plus how to build its fiscal years."""

    def __init__(
        self,
        rates: RateTable,
        fiscal_years: Optional[List[FiscalYear]] = None,
        generate_range: Optional[Tuple[int, int]] = None,
    ):
        self.rates = rates
        self.fiscal_years = fiscal_years or []
        self.generate_range = generate_range

    def fiscal_year_calendar(self, converter: BSCalendarConverter) -> FiscalYearCalendar:
        years = list(self.fiscal_years)
        if self.generate_range:
            first, last = self.generate_range
            listed = {fy.label for fy in years}
            years.extend(
                fy
                for fy in generate_fiscal_years(converter, first, last)
                if fy.label not in listed
            )
        return FiscalYearCalendar(years, converter)


def _decimal(value: Any) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _optional_decimal(value: Any) -> Decimal:
    return Decimal("0") if value is None else _decimal(value)


def _parse_date(value: Optional[str]) -> Optional[BSDate]:
    return BSDate.parse(value) if value is not None else None


def _parse_object(dct: Dict[str, Any]) -> Any:
    """Parse dictionary into appropriate object type."""
    # Tax rate entry
    if "annualTax" in dct:
        return TaxRate(
            dct["vehicleType"],
            dct["fuelType"],
            int(dct.get("minCapacity") or 0),
            _decimal(dct["annualTax"]),
            _optional_decimal(dct.get("renewalFee")),
            dct.get("province"),
            dct.get("fiscalYear"),
            dct.get("notes"),
        )
    # Insurance rate entry
    elif "annualPremium" in dct:
        return InsuranceRate(
            dct["vehicleType"],
            _decimal(dct["annualPremium"]),
            dct.get("fuelType"),
            int(dct.get("minCapacity") or 0),
            dct.get("fiscalYear"),
        )
    # Penalty band (checked before fiscal years, both have label/start/end)
    elif "percentage" in dct and "start" in dct:
        return PenaltyBand(
            dct.get("label") or f"from {dct['start']}",
            int(dct["start"]),
            _decimal(dct["percentage"]),
            int(dct["end"]) if dct.get("end") is not None else None,
            _optional_decimal(dct.get("renewalFeePercentage")),
        )
    # Penalty schedule
    elif "bands" in dct:
        return PenaltySchedule(
            tuple(dct["bands"]),
            dct.get("unit", "months"),
            int(dct.get("offsetMonths") or 0),
            int(dct.get("graceDays") or 0),
        )
    # Fiscal year entry
    elif "label" in dct and "start" in dct and "end" in dct:
        return FiscalYear(dct["label"], BSDate.parse(dct["start"]), BSDate.parse(dct["end"]))
    # Vehicle
    elif "registrationNumber" in dct:
        return Vehicle(
            str(dct["registrationNumber"]),
            str(dct["vehicleType"]),
            str(dct["fuelType"]),
            int(dct["engineCapacity"]),
            BSDate.parse(dct["registrationDate"]),
            _parse_date(dct.get("lastRenewedDate")),
            dct.get("province"),
            dct.get("ownerName"),
        )
    # Top-level vehicle file
    elif "vehicle" in dct and isinstance(dct["vehicle"], Vehicle):
        return dct["vehicle"]
    # Calendar table
    elif "epoch" in dct and "years" in dct:
        years = {int(year): lengths for year, lengths in dct["years"].items()}
        table = CalendarTable(years, parse_ad_date(dct["epoch"]["ad"]))
        if BSDate.parse(dct["epoch"]["bs"]) != table.epoch_bs:
            raise ConfigError(
                f"Calendar epoch {dct['epoch']['bs']} must be Baisakh 1 "
                f"of the first year ({table.epoch_bs})"
            )
        return table
    # Top-level tariff
    elif "version" in dct and "taxRates" in dct:
        rates = RateTable(
            str(dct["version"]),
            tuple(dct["taxRates"] or ()),
            tuple(dct.get("insuranceRates") or ()),
            dct.get("penalty") or PenaltySchedule(),
        )
        generate = dct.get("generateFiscalYears")
        return TariffDocument(
            rates,
            dct.get("fiscalYears"),
            (int(generate["from"]), int(generate["to"])) if generate else None,
        )
    else:
        # Return dict as-is for unknown structures (like epoch)
        return dct


def _load(filename: PathLike) -> Any:
    """
    Read a YAML file and build model objects from it.

    Raises:
        ConfigError: a required key is missing or a value has the wrong shape
    """
    with open(filename, "rb") as fp:
        json_data = json.dumps(yaml.load(fp, Loader=yaml.SafeLoader), default=str)
    try:
        return json.loads(json_data, object_hook=_parse_object, parse_float=Decimal)
    except KeyError as e:
        raise ConfigError(f"{filename}: missing required key {e}") from e
    except RenewalError:
        raise
    except (TypeError, ValueError, ArithmeticError) as e:
        raise ConfigError(f"{filename}: invalid value ({e})") from e


def _expect(obj: Any, kind: type, filename: PathLike) -> Any:
    if not isinstance(obj, kind):
        raise ConfigError(f"{filename} does not look like a {kind.__name__} file")
    return obj


def load_calendar(filename: PathLike = DEFAULT_CALENDAR) -> CalendarTable:
    """Load a BS month-length table from a YAML file."""
    table = _expect(_load(filename), CalendarTable, filename)
    logger.debug("Loaded %r from %s", table, filename)
    return table


@lru_cache(maxsize=1)
def default_calendar() -> CalendarTable:
    """The packaged calendar table, loaded once per process."""
    return load_calendar(DEFAULT_CALENDAR)


def load_tariff(filename: PathLike) -> TariffDocument:
    """Load tax/insurance/penalty rates and fiscal years from a YAML file."""
    document = _expect(_load(filename), TariffDocument, filename)
    logger.debug(
        "Loaded tariff %s from %s: %d tax rates, %d insurance rates, %d penalty bands",
        document.rates.version,
        filename,
        len(document.rates.tax_rates),
        len(document.rates.insurance_rates),
        len(document.rates.penalty.bands),
    )
    return document


def load_reference(
    tariff_file: PathLike, calendar_file: Optional[PathLike] = None
) -> ReferenceSnapshot:
    """Load a complete snapshot: calendar (packaged by default) plus tariff."""
    table = load_calendar(calendar_file) if calendar_file else default_calendar()
    converter = BSCalendarConverter(table)
    document = load_tariff(tariff_file)
    return ReferenceSnapshot(
        converter=converter,
        fiscal_years=document.fiscal_year_calendar(converter),
        rates=document.rates,
    )


def load_vehicle(filename: PathLike) -> Vehicle:
    """Load a vehicle from a YAML file."""
    return _expect(_load(filename), Vehicle, filename)


def save_last_renewed(filename: PathLike, renewed_on: BSDate) -> None:
    """
    Record a completed renewal in a vehicle YAML file.

    Loads the raw YAML, sets lastRenewedDate, and writes back to the file.
    """
    with open(filename, "r") as fp:
        data = yaml.load(fp, Loader=yaml.SafeLoader)

    data["vehicle"]["lastRenewedDate"] = renewed_on.isoformat()

    with open(filename, "w") as fp:
        yaml.dump(
            data,
            fp,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            width=120,
        )
