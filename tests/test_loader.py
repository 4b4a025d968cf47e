#!/usr/bin/env python3
"""Tests for YAML loading and saving utilities."""

from decimal import Decimal
from pathlib import Path

import pytest
import yaml

from renewal import (
    BSDate,
    CalendarTable,
    ConfigError,
    FiscalYearCalendar,
    InvalidDateError,
    ParseError,
    RateTable,
    ReferenceSnapshot,
    Vehicle,
    load_calendar,
    load_reference,
    load_tariff,
    load_vehicle,
    save_last_renewed,
)
from renewal.loader import DEFAULT_CALENDAR

REPO_ROOT = Path(__file__).parent.parent

VEHICLE_YAML = """
vehicle:
  registrationNumber: BA 2 PA 1234
  vehicleType: 2W
  fuelType: Petrol
  engineCapacity: 150
  registrationDate: '2076-05-12'
  lastRenewedDate: '2081-05-10'
  province: BAGMATI
  ownerName: Sita Sharma
"""

TARIFF_YAML = """
version: test-2
fiscalYears:
  - label: 2081/82
    start: '2081-04-01'
    end: '2082-03-32'
taxRates:
  - vehicleType: 2W
    fuelType: Petrol
    minCapacity: 0
    annualTax: 3000
    renewalFee: 300
  - vehicleType: 2W
    fuelType: Petrol
    minCapacity: 126
    annualTax: 5000.50
    province: KOSHI
    fiscalYear: 2081/82
insuranceRates:
  - vehicleType: 2W
    fuelType: Petrol
    annualPremium: 1715
  - vehicleType: Heavy
    minCapacity: 5000
    annualPremium: 15000
penalty:
  unit: days
  offsetMonths: 12
  graceDays: 90
  bands:
    - label: First 30 days
      start: 0
      end: 31
      percentage: 5
      renewalFeePercentage: 100
    - start: 31
      percentage: 10.5
      renewalFeePercentage: 100
"""

# =============================================================================
# load_calendar tests
# =============================================================================


class TestLoadCalendar:
    """Tests for load_calendar function."""

    def test_loads_packaged_calendar(self):
        table = load_calendar()
        assert isinstance(table, CalendarTable)
        assert table.first_year == 2000
        assert table.last_year == 2090

    def test_default_path_exists(self):
        assert DEFAULT_CALENDAR.exists()

    def test_loads_custom_calendar(self, tmp_path):
        yaml_file = tmp_path / "calendar.yaml"
        yaml_file.write_text("""
epoch:
  bs: '2081-01-01'
  ad: '2024-04-13'
years:
  2081: [31, 32, 31, 32, 31, 30, 30, 30, 29, 30, 29, 31]
""")
        table = load_calendar(yaml_file)
        assert table.first_year == table.last_year == 2081
        assert table.days_in_month(2081, 2) == 32

    def test_unquoted_epoch_dates(self, tmp_path):
        """YAML turns bare dates into date objects; they are accepted too."""
        yaml_file = tmp_path / "calendar.yaml"
        yaml_file.write_text("""
epoch:
  bs: '2081-01-01'
  ad: 2024-04-13
years:
  2081: [31, 32, 31, 32, 31, 30, 30, 30, 29, 30, 29, 31]
""")
        assert load_calendar(yaml_file).epoch_ad.isoformat() == "2024-04-13"

    def test_epoch_must_match_first_year(self, tmp_path):
        yaml_file = tmp_path / "calendar.yaml"
        yaml_file.write_text("""
epoch:
  bs: '2080-01-01'
  ad: '2024-04-13'
years:
  2081: [31, 32, 31, 32, 31, 30, 30, 30, 29, 30, 29, 31]
""")
        with pytest.raises(ConfigError, match="epoch"):
            load_calendar(yaml_file)

    def test_bad_month_length(self, tmp_path):
        yaml_file = tmp_path / "calendar.yaml"
        yaml_file.write_text("""
epoch:
  bs: '2081-01-01'
  ad: '2024-04-13'
years:
  2081: [31, 32, 31, 32, 31, 30, 30, 30, 29, 30, 29, 35]
""")
        with pytest.raises(ConfigError):
            load_calendar(yaml_file)

    def test_wrong_kind_of_file(self, tmp_path):
        yaml_file = tmp_path / "vehicle.yaml"
        yaml_file.write_text(VEHICLE_YAML)
        with pytest.raises(ConfigError, match="CalendarTable"):
            load_calendar(yaml_file)


# =============================================================================
# load_tariff tests
# =============================================================================


class TestLoadTariff:
    """Tests for load_tariff function."""

    @pytest.fixture
    def tariff(self, tmp_path):
        yaml_file = tmp_path / "tariff.yaml"
        yaml_file.write_text(TARIFF_YAML)
        return load_tariff(yaml_file)

    def test_rate_table(self, tariff):
        assert isinstance(tariff.rates, RateTable)
        assert tariff.rates.version == "test-2"
        assert len(tariff.rates.tax_rates) == 2
        assert len(tariff.rates.insurance_rates) == 2

    def test_tax_rate_fields(self, tariff):
        default, scoped = tariff.rates.tax_rates
        assert default.annual_tax == Decimal("3000")
        assert default.renewal_fee == Decimal("300")
        assert default.province is None
        assert scoped.min_capacity == 126
        assert scoped.annual_tax == Decimal("5000.50")
        assert scoped.renewal_fee == Decimal("0")
        assert scoped.province == "KOSHI"
        assert scoped.fiscal_year == "2081/82"

    def test_amounts_are_decimals(self, tariff):
        for rate in tariff.rates.tax_rates:
            assert isinstance(rate.annual_tax, Decimal)
        for rate in tariff.rates.insurance_rates:
            assert isinstance(rate.annual_premium, Decimal)

    def test_insurance_defaults(self, tariff):
        petrol, heavy = tariff.rates.insurance_rates
        assert petrol.min_capacity == 0
        assert heavy.fuel_type is None
        assert heavy.min_capacity == 5000

    def test_penalty_schedule(self, tariff):
        penalty = tariff.rates.penalty
        assert penalty.unit == "days"
        assert penalty.offset_months == 12
        assert penalty.grace_days == 90
        first, second = penalty.bands
        assert first.label == "First 30 days"
        assert first.end == 31
        assert first.renewal_fee_percentage == Decimal("100")
        assert second.label == "from 31"
        assert second.end is None
        assert second.percentage == Decimal("10.5")

    def test_listed_fiscal_years(self, tariff, converter):
        calendar = tariff.fiscal_year_calendar(converter)
        assert isinstance(calendar, FiscalYearCalendar)
        assert [fy.label for fy in calendar] == ["2081/82"]
        assert calendar.find(BSDate(2082, 3, 32)).label == "2081/82"

    def test_generated_fiscal_years(self, tmp_path, converter):
        yaml_file = tmp_path / "tariff.yaml"
        yaml_file.write_text("""
version: gen
generateFiscalYears:
  from: 2080
  to: 2082
taxRates: []
""")
        calendar = load_tariff(yaml_file).fiscal_year_calendar(converter)
        assert [fy.label for fy in calendar] == ["2080/81", "2081/82", "2082/83"]

    def test_listed_and_generated_merge(self, tmp_path, converter):
        yaml_file = tmp_path / "tariff.yaml"
        yaml_file.write_text("""
version: merged
fiscalYears:
  - {label: 2081/82, start: '2081-04-01', end: '2082-03-32'}
generateFiscalYears: {from: 2080, to: 2082}
taxRates: []
""")
        calendar = load_tariff(yaml_file).fiscal_year_calendar(converter)
        assert len(calendar) == 3

    def test_missing_penalty_means_no_bands(self, tmp_path):
        yaml_file = tmp_path / "tariff.yaml"
        yaml_file.write_text("version: bare\ntaxRates: []\n")
        assert load_tariff(yaml_file).rates.penalty.bands == ()

    def test_invalid_penalty_bands(self, tmp_path):
        yaml_file = tmp_path / "tariff.yaml"
        yaml_file.write_text("""
version: bad
taxRates: []
penalty:
  bands:
    - {start: 0, end: 10, percentage: 20}
    - {start: 10, percentage: 5}
""")
        with pytest.raises(ConfigError):
            load_tariff(yaml_file)

    def test_bad_fiscal_year_date(self, tmp_path):
        yaml_file = tmp_path / "tariff.yaml"
        yaml_file.write_text("""
version: bad
fiscalYears:
  - {label: 2081/82, start: '2081/04/01', end: '2082-03-32'}
taxRates: []
""")
        with pytest.raises(ParseError):
            load_tariff(yaml_file)

    def test_tax_rate_missing_fuel_type(self, tmp_path):
        yaml_file = tmp_path / "tariff.yaml"
        yaml_file.write_text("""
version: bad
taxRates:
  - {vehicleType: 2W, minCapacity: 0, annualTax: 3000}
""")
        with pytest.raises(ConfigError, match="fuelType"):
            load_tariff(yaml_file)

    def test_shipped_tariff(self, converter):
        tariff = load_tariff(REPO_ROOT / "tariffs" / "nepal.yaml")
        assert tariff.rates.version == "2081/82-r1"
        assert "Heavy" in tariff.rates.vehicle_types()
        calendar = tariff.fiscal_year_calendar(converter)
        assert calendar.get("2070/71") is not None
        assert calendar.get("2089/90") is not None


# =============================================================================
# load_reference tests
# =============================================================================


class TestLoadReference:
    """Tests for load_reference function."""

    def test_builds_snapshot(self, tmp_path):
        yaml_file = tmp_path / "tariff.yaml"
        yaml_file.write_text(TARIFF_YAML)
        snapshot = load_reference(yaml_file)
        assert isinstance(snapshot, ReferenceSnapshot)
        assert snapshot.rates.version == "test-2"
        assert len(snapshot.fiscal_years) == 1
        assert snapshot.converter.table.first_year == 2000

    def test_custom_calendar(self, tmp_path):
        calendar_file = tmp_path / "calendar.yaml"
        calendar_file.write_text("""
epoch:
  bs: '2081-01-01'
  ad: '2024-04-13'
years:
  2081: [31, 32, 31, 32, 31, 30, 30, 30, 29, 30, 29, 31]
  2082: [31, 31, 32, 31, 31, 31, 30, 29, 30, 29, 30, 30]
""")
        tariff_file = tmp_path / "tariff.yaml"
        tariff_file.write_text(TARIFF_YAML)
        snapshot = load_reference(tariff_file, calendar_file)
        assert snapshot.converter.table.first_year == 2081
        assert snapshot.version == "calendar 2081-2082 / tariff test-2"


# =============================================================================
# load_vehicle tests
# =============================================================================


class TestLoadVehicle:
    """Tests for load_vehicle function."""

    def test_loads_full_vehicle(self, tmp_path):
        yaml_file = tmp_path / "vehicle.yaml"
        yaml_file.write_text(VEHICLE_YAML)

        vehicle = load_vehicle(yaml_file)

        assert isinstance(vehicle, Vehicle)
        assert vehicle.registration_number == "BA 2 PA 1234"
        assert vehicle.vehicle_type == "2W"
        assert vehicle.fuel_type == "Petrol"
        assert vehicle.engine_capacity == 150
        assert vehicle.registration_date == BSDate(2076, 5, 12)
        assert vehicle.last_renewed_date == BSDate(2081, 5, 10)
        assert vehicle.province == "BAGMATI"
        assert vehicle.owner_name == "Sita Sharma"

    def test_loads_minimal_vehicle(self, tmp_path):
        yaml_file = tmp_path / "vehicle.yaml"
        yaml_file.write_text("""
vehicle:
  registrationNumber: BA 3 PA 7788
  vehicleType: 2W
  fuelType: Electric
  engineCapacity: 1200
  registrationDate: '2082-02-15'
""")
        vehicle = load_vehicle(yaml_file)
        assert vehicle.last_renewed_date is None
        assert vehicle.province is None
        assert vehicle.reference_date == BSDate(2082, 2, 15)

    def test_invalid_date(self, tmp_path):
        yaml_file = tmp_path / "vehicle.yaml"
        yaml_file.write_text(VEHICLE_YAML.replace("'2081-05-10'", "'2081-13-10'"))
        with pytest.raises(InvalidDateError):
            load_vehicle(yaml_file)

    def test_missing_key_raises_config_error(self, tmp_path):
        yaml_file = tmp_path / "vehicle.yaml"
        yaml_file.write_text(VEHICLE_YAML.replace("  vehicleType: 2W\n", ""))
        with pytest.raises(ConfigError, match="vehicleType") as excinfo:
            load_vehicle(yaml_file)
        assert str(yaml_file) in str(excinfo.value)

    def test_non_numeric_capacity_raises_config_error(self, tmp_path):
        yaml_file = tmp_path / "vehicle.yaml"
        yaml_file.write_text(VEHICLE_YAML.replace("engineCapacity: 150", "engineCapacity: big"))
        with pytest.raises(ConfigError, match="invalid value"):
            load_vehicle(yaml_file)

    def test_accepts_string_path(self, tmp_path):
        yaml_file = tmp_path / "vehicle.yaml"
        yaml_file.write_text(VEHICLE_YAML)
        assert load_vehicle(str(yaml_file)).registration_number == "BA 2 PA 1234"

    def test_sample_vehicles_load(self):
        for path in sorted((REPO_ROOT / "vehicles").glob("*.yaml")):
            assert isinstance(load_vehicle(path), Vehicle)


# =============================================================================
# save_last_renewed tests
# =============================================================================


class TestSaveLastRenewed:
    """Tests for save_last_renewed function."""

    def test_updates_existing_date(self, tmp_path):
        yaml_file = tmp_path / "vehicle.yaml"
        yaml_file.write_text(VEHICLE_YAML)

        save_last_renewed(yaml_file, BSDate(2082, 5, 9))

        data = yaml.safe_load(yaml_file.read_text())
        assert data["vehicle"]["lastRenewedDate"] == "2082-05-09"
        assert load_vehicle(yaml_file).last_renewed_date == BSDate(2082, 5, 9)

    def test_adds_missing_date(self, tmp_path):
        yaml_file = tmp_path / "vehicle.yaml"
        yaml_file.write_text(VEHICLE_YAML.replace("  lastRenewedDate: '2081-05-10'\n", ""))

        save_last_renewed(yaml_file, BSDate(2082, 5, 9))

        assert load_vehicle(yaml_file).last_renewed_date == BSDate(2082, 5, 9)

    def test_preserves_other_fields_and_order(self, tmp_path):
        yaml_file = tmp_path / "vehicle.yaml"
        yaml_file.write_text(VEHICLE_YAML)

        save_last_renewed(yaml_file, BSDate(2082, 5, 9))

        data = yaml.safe_load(yaml_file.read_text())
        assert list(data["vehicle"])[0] == "registrationNumber"
        assert data["vehicle"]["ownerName"] == "Sita Sharma"
        assert data["vehicle"]["engineCapacity"] == 150
