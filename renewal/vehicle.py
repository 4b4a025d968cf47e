"""Vehicle profile used for renewal calculations."""

from typing import Optional

from .bs_date import BSDate


class Vehicle:
    """Registration details of a vehicle, as of one point in time."""

    def __init__(
        self,
        registration_number: str,
        vehicle_type: str,
        fuel_type: str,
        engine_capacity: int,
        registration_date: BSDate,
        last_renewed_date: Optional[BSDate] = None,
        province: Optional[str] = None,
        owner_name: Optional[str] = None,
    ):
        self.registration_number = registration_number
        self.vehicle_type = vehicle_type
        self.fuel_type = fuel_type
        self.engine_capacity = engine_capacity
        self.registration_date = registration_date
        self.last_renewed_date = last_renewed_date
        self.province = province
        self.owner_name = owner_name

    @property
    def reference_date(self) -> BSDate:
        """Date the current renewal period started: last renewal, else registration."""
        return self.last_renewed_date or self.registration_date

    @property
    def name(self) -> str:
        """Human-readable vehicle name."""
        base = f"{self.registration_number} ({self.vehicle_type}, {self.fuel_type}, {self.engine_capacity})"
        return f"{base} - {self.owner_name}" if self.owner_name else base

    def __repr__(self) -> str:
        return f"Vehicle({self.registration_number!r}, reference={self.reference_date})"
