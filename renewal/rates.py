"""Tax, insurance and penalty rate tables."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import ConfigError, RateNotFoundError

PENALTY_UNITS = ("days", "months")


def _same(a: Optional[str], b: Optional[str]) -> bool:
    return (a or "").lower() == (b or "").lower()


@dataclass(frozen=True)
class TaxRate:
    """Annual road tax and renewal fee for an engine-capacity band.

    The band starts at `min_capacity` and runs up to the next band's start.
    `province` and `fiscal_year` narrow the rate; None means "any".
    """

    vehicle_type: str
    fuel_type: str
    min_capacity: int
    annual_tax: Decimal
    renewal_fee: Decimal = Decimal("0")
    province: Optional[str] = None
    fiscal_year: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class InsuranceRate:
    """Annual third-party insurance premium. fuel_type None matches any fuel."""

    vehicle_type: str
    annual_premium: Decimal
    fuel_type: Optional[str] = None
    min_capacity: int = 0
    fiscal_year: Optional[str] = None


@dataclass(frozen=True)
class PenaltyBand:
    """Penalty step covering start <= overdue units < end (end None = open)."""

    label: str
    start: int
    percentage: Decimal
    end: Optional[int] = None
    renewal_fee_percentage: Decimal = Decimal("0")

    def covers(self, units: int) -> bool:
        return self.start <= units and (self.end is None or units < self.end)


@dataclass(frozen=True)
class PenaltySchedule:
    """
    Step function from overdue duration to penalty percentage.

    The overdue clock starts `offset_months` BS months plus `grace_days` days
    after the last renewal. Bands are counted in `unit` ("days" or "months")
    from that point. Bands must leave no gaps, end open-ended, and carry
    non-decreasing percentages, so the penalty never drops as time passes.
    """

    bands: Tuple[PenaltyBand, ...] = ()
    unit: str = "months"
    offset_months: int = 0
    grace_days: int = 0

    def __post_init__(self):
        if self.unit not in PENALTY_UNITS:
            raise ConfigError(
                f"Penalty unit must be one of {', '.join(PENALTY_UNITS)}, got {self.unit!r}"
            )
        if self.offset_months < 0 or self.grace_days < 0:
            raise ConfigError("Penalty offsetMonths and graceDays must not be negative")

        bands = tuple(sorted(self.bands, key=lambda b: b.start))
        object.__setattr__(self, "bands", bands)

        for band in bands:
            if band.start < 0:
                raise ConfigError(f"Penalty band {band.label!r} starts below zero")
            if band.end is not None and band.end <= band.start:
                raise ConfigError(f"Penalty band {band.label!r} ends before it starts")
            if band.percentage < 0 or band.renewal_fee_percentage < 0:
                raise ConfigError(f"Penalty band {band.label!r} has a negative rate")

        for prev, cur in zip(bands, bands[1:]):
            if prev.end is not None and prev.end < cur.start:
                raise ConfigError(
                    f"Gap between penalty bands {prev.label!r} and {cur.label!r}"
                )
            if (
                cur.percentage < prev.percentage
                or cur.renewal_fee_percentage < prev.renewal_fee_percentage
            ):
                raise ConfigError(
                    f"Penalty band {cur.label!r} lowers the rate of {prev.label!r}"
                )

        if bands and bands[-1].end is not None:
            raise ConfigError(
                f"Last penalty band {bands[-1].label!r} must be open-ended"
            )

    def band_for(self, units: int) -> Optional[PenaltyBand]:
        """The band with the highest start that covers `units`, if any."""
        match = None
        for band in self.bands:
            if band.covers(units):
                match = band
        return match


@dataclass(frozen=True)
class RateTable:
    """Versioned, read-only tariff: tax rates, insurance rates, penalties."""

    version: str
    tax_rates: Tuple[TaxRate, ...] = ()
    insurance_rates: Tuple[InsuranceRate, ...] = ()
    penalty: PenaltySchedule = field(default_factory=PenaltySchedule)

    def __post_init__(self):
        object.__setattr__(self, "tax_rates", tuple(self.tax_rates))
        object.__setattr__(self, "insurance_rates", tuple(self.insurance_rates))

    def find_tax_rate(
        self,
        vehicle_type: str,
        fuel_type: str,
        engine_capacity: int,
        fiscal_year: Optional[str] = None,
        province: Optional[str] = None,
    ) -> TaxRate:
        """
        Find the tax rate for a vehicle.

        Scopes are tried from most to least specific: fiscal year and province,
        fiscal year only, province only, neither. Within a scope the band with
        the highest min_capacity not above engine_capacity wins.

        Raises:
            RateNotFoundError: nothing matches
        """
        candidates = [
            r
            for r in self.tax_rates
            if _same(r.vehicle_type, vehicle_type)
            and _same(r.fuel_type, fuel_type)
            and r.min_capacity <= engine_capacity
        ]
        scopes = [(fiscal_year, province), (fiscal_year, None), (None, province), (None, None)]
        for fy, prov in _dedupe(scopes):
            rate = _highest_band(
                r
                for r in candidates
                if _scope_matches(r.fiscal_year, fy) and _scope_matches(r.province, prov)
            )
            if rate is not None:
                return rate

        available = sorted(
            {
                r.min_capacity
                for r in self.tax_rates
                if _same(r.vehicle_type, vehicle_type) and _same(r.fuel_type, fuel_type)
            }
        )
        raise RateNotFoundError(
            f"Tax rate not found for vehicle type: {vehicle_type}, fuel: {fuel_type}, "
            f"capacity: {engine_capacity}, fiscal year: {fiscal_year or '-'}, "
            f"province: {province or '-'}. "
            f"Available capacity bands: {', '.join(str(c) for c in available) or 'none'}"
        )

    def find_insurance_rate(
        self,
        vehicle_type: str,
        fuel_type: Optional[str],
        engine_capacity: int,
        fiscal_year: Optional[str] = None,
    ) -> Optional[InsuranceRate]:
        """Find the insurance premium for a vehicle, or None if it is exempt."""
        candidates = [
            r
            for r in self.insurance_rates
            if _same(r.vehicle_type, vehicle_type)
            and (r.fuel_type is None or _same(r.fuel_type, fuel_type))
            and r.min_capacity <= engine_capacity
        ]
        for fy in _dedupe([fiscal_year, None]):
            scoped = [r for r in candidates if _scope_matches(r.fiscal_year, fy)]
            # Fuel-specific entries beat fuel-agnostic ones.
            for group in (
                [r for r in scoped if r.fuel_type is not None],
                [r for r in scoped if r.fuel_type is None],
            ):
                rate = _highest_band(group)
                if rate is not None:
                    return rate
        return None

    def vehicle_types(self) -> List[str]:
        return sorted({r.vehicle_type for r in self.tax_rates})


def _scope_matches(value: Optional[str], wanted: Optional[str]) -> bool:
    if wanted is None:
        return value is None
    return _same(value, wanted)


def _highest_band(rates: Iterable):
    best = None
    for rate in rates:
        if best is None or rate.min_capacity > best.min_capacity:
            best = rate
    return best


def _dedupe(items: Sequence) -> list:
    seen = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen
