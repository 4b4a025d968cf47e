"""Result types returned by the renewal fee calculator."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from .bs_date import BSDate


@dataclass(frozen=True)
class RenewalComputationResult:
    """Amount due for one renewal year. Derived, never persisted."""

    fiscal_year_label: str
    base_tax: Decimal
    insurance_amount: Decimal
    penalty_amount: Decimal
    total_due: Decimal
    renewal_fee: Decimal = Decimal("0")
    tax_penalty: Decimal = Decimal("0")
    renewal_fee_penalty: Decimal = Decimal("0")
    penalty_percentage: Decimal = Decimal("0")
    renewal_fee_penalty_percentage: Decimal = Decimal("0")
    penalty_band: Optional[str] = None
    overdue_units: Optional[int] = None
    overdue_unit: str = "months"
    reference_date: Optional[BSDate] = None
    expiry_date: Optional[BSDate] = None
    as_of: Optional[BSDate] = None

    @property
    def is_overdue(self) -> bool:
        return self.overdue_units is not None


@dataclass(frozen=True)
class ArrearsStatement:
    """One line per unpaid renewal year, oldest first."""

    lines: Tuple[RenewalComputationResult, ...]

    @property
    def years_count(self) -> int:
        return len(self.lines)

    @property
    def total_tax(self) -> Decimal:
        return sum((line.base_tax for line in self.lines), Decimal("0"))

    @property
    def total_renewal_fee(self) -> Decimal:
        return sum((line.renewal_fee for line in self.lines), Decimal("0"))

    @property
    def total_insurance(self) -> Decimal:
        return sum((line.insurance_amount for line in self.lines), Decimal("0"))

    @property
    def total_penalty(self) -> Decimal:
        return sum((line.penalty_amount for line in self.lines), Decimal("0"))

    @property
    def grand_total(self) -> Decimal:
        return sum((line.total_due for line in self.lines), Decimal("0"))
