#!/usr/bin/env python3
"""Validate vehicle, tariff and calendar YAML files against the schema."""
import json
import sys
from pathlib import Path

import yaml
from jsonschema import validate, ValidationError

from renewal import BSCalendarConverter, RenewalError
from renewal.loader import (
    DEFAULT_CALENDAR,
    default_calendar,
    load_calendar,
    load_tariff,
    load_vehicle,
)


def load_schema() -> dict:
    """Load the JSON schemas from schema.yaml, keyed by file kind."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def _read(filepath: Path):
    # Same normalization as the loader: dates become strings, keys strings.
    with open(filepath) as f:
        data = yaml.safe_load(f)
    return json.loads(json.dumps(data, default=str))


def _validate_file(filepath: Path, schema: dict, load=None) -> list[str]:
    errors = []
    try:
        validate(instance=_read(filepath), schema=schema)
        if load is not None:
            load(filepath)
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except RenewalError as e:
        errors.append(f"Config error: {e}")
    except Exception as e:
        errors.append(f"Error: {e}")
    return errors


def _load_tariff(filepath: Path):
    converter = BSCalendarConverter(default_calendar())
    return load_tariff(filepath).fiscal_year_calendar(converter)


def validate_vehicle_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single vehicle YAML file. Returns list of errors."""
    return _validate_file(filepath, schema["vehicle"], load_vehicle)


def validate_tariff_file(filepath: Path, schema: dict) -> list[str]:
    """
    Validate a tariff YAML file. Returns list of errors.

    Beyond the schema, the tariff is loaded so that overlapping fiscal years
    and out-of-order penalty bands are reported too.
    """
    return _validate_file(filepath, schema["tariff"], _load_tariff)


def validate_calendar_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a BS calendar YAML file. Returns list of errors."""
    return _validate_file(filepath, schema["calendar"], load_calendar)


def _check_dir(directory: Path, validator, schema: dict) -> bool:
    if not directory.exists():
        print(f"Warning: directory not found: {directory}")
        return True

    yaml_files = list(directory.glob("*.yaml")) + list(directory.glob("*.yml"))
    if not yaml_files:
        print(f"Warning: No YAML files found in {directory}")
        return True

    all_valid = True
    for filepath in sorted(yaml_files):
        errors = validator(filepath, schema)
        if errors:
            print(f"FAIL: {directory.name}/{filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {directory.name}/{filepath.name}")
    return all_valid


def main():
    """Validate the packaged calendar, tariffs/ and vehicles/."""
    schema = load_schema()
    root = Path(__file__).parent

    all_valid = True
    errors = validate_calendar_file(DEFAULT_CALENDAR, schema)
    if errors:
        print(f"FAIL: {DEFAULT_CALENDAR.name}")
        for error in errors:
            print(f"  {error}")
        all_valid = False
    else:
        print(f"OK: {DEFAULT_CALENDAR.name}")

    all_valid &= _check_dir(root / "tariffs", validate_tariff_file, schema)
    all_valid &= _check_dir(root / "vehicles", validate_vehicle_file, schema)

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
