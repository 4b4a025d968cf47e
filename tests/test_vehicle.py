#!/usr/bin/env python3
"""Tests for Vehicle class."""

from renewal import BSDate, Vehicle


def make_vehicle(**kwargs):
    defaults = dict(
        registration_number="BA 2 PA 1234",
        vehicle_type="2W",
        fuel_type="Petrol",
        engine_capacity=150,
        registration_date=BSDate(2078, 1, 15),
    )
    defaults.update(kwargs)
    return Vehicle(**defaults)


class TestReferenceDate:
    """Tests for Vehicle.reference_date."""

    def test_last_renewed_when_present(self):
        vehicle = make_vehicle(last_renewed_date=BSDate(2081, 5, 10))
        assert vehicle.reference_date == BSDate(2081, 5, 10)

    def test_registration_when_never_renewed(self):
        vehicle = make_vehicle()
        assert vehicle.reference_date == BSDate(2078, 1, 15)


class TestName:
    """Tests for Vehicle.name."""

    def test_without_owner(self):
        assert make_vehicle().name == "BA 2 PA 1234 (2W, Petrol, 150)"

    def test_with_owner(self):
        vehicle = make_vehicle(owner_name="Sita Sharma")
        assert vehicle.name == "BA 2 PA 1234 (2W, Petrol, 150) - Sita Sharma"

    def test_repr(self):
        assert repr(make_vehicle()) == "Vehicle('BA 2 PA 1234', reference=2078-01-15)"
