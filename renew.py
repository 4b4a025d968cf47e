#!/usr/bin/env python3
"""
Unified CLI for BS date conversion and vehicle renewal fees.

Commands:
  to-bs        - Convert an AD date to Bikram Sambat
  to-ad        - Convert a BS date to AD (with one-year expiry)
  today        - Show today's date in both calendars
  fiscal-years - List configured fiscal years
  rates        - List tax, insurance and penalty rates
  due          - Amount due to renew a vehicle
  arrears      - Year-by-year breakdown of unpaid renewals
  status       - Expired / due soon / valid for one or more vehicles
  mark-renewed - Record a completed renewal in a vehicle file
"""

import argparse
import logging
import sys
from decimal import Decimal
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from renewal import (
    ArrearsStatement,
    BSCalendarConverter,
    BSDate,
    RenewalComputationResult,
    RenewalError,
    RenewalFeeCalculator,
    RenewalStatus,
    load_calendar,
    load_reference,
    load_vehicle,
    parse_ad_date,
    parse_bs_date,
    save_last_renewed,
)
from renewal.calculations import calc_ad_expiry_date, describe_interval
from renewal.loader import default_calendar

DEFAULT_TARIFF = Path(__file__).parent / "tariffs" / "nepal.yaml"

# =============================================================================
# Formatting helpers
# =============================================================================


def format_money(amount: Optional[Decimal]) -> str:
    """Format a rupee amount for display."""
    return f"Rs. {amount:,.2f}" if amount is not None else "-"


def format_percentage(value: Optional[Decimal]) -> str:
    """Format a percentage, dropping trailing zeros (e.g., '20%', '12.5%')."""
    if value is None:
        return "-"
    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text}%"


def format_overdue(result: RenewalComputationResult) -> str:
    """Format the overdue duration (e.g., '45 days', '1 month')."""
    if not result.is_overdue:
        return "-"
    unit = result.overdue_unit
    if result.overdue_units == 1:
        unit = unit.rstrip("s")
    return f"{result.overdue_units} {unit}"


def format_bs(bs_date: Optional[BSDate], style: str = "numeric") -> str:
    return bs_date.format(style) if bs_date is not None else "-"


# =============================================================================
# Shared loading
# =============================================================================


def get_converter(args) -> BSCalendarConverter:
    table = load_calendar(args.calendar) if args.calendar else default_calendar()
    return BSCalendarConverter(table)


def get_calculator(args) -> RenewalFeeCalculator:
    snapshot = load_reference(args.tariff, args.calendar)
    return RenewalFeeCalculator.from_snapshot(snapshot)


def resolve_as_of(args, converter: BSCalendarConverter) -> BSDate:
    """BS date for --as-of / --as-of-ad, defaulting to today."""
    if args.as_of:
        return converter.check(parse_bs_date(args.as_of))
    if args.as_of_ad:
        return converter.to_bs(parse_ad_date(args.as_of_ad))
    return converter.today_bs()


def print_vehicle_header(vehicle, as_of: BSDate, converter: BSCalendarConverter):
    print(f"Vehicle: {vehicle.name}")
    if vehicle.province:
        print(f"Province: {vehicle.province}")
    print(f"Registered: {vehicle.registration_date}")
    print(f"Last renewed: {format_bs(vehicle.last_renewed_date)}")
    print(f"As of: {as_of} ({converter.to_ad(as_of).isoformat()} AD)")


# =============================================================================
# Conversion commands
# =============================================================================


def cmd_to_bs(args):
    """Convert an AD date to Bikram Sambat."""
    converter = get_converter(args)
    bs_date = converter.to_bs(parse_ad_date(args.date))
    print(f"AD:          {args.date}")
    print(f"BS:          {bs_date} ({bs_date.format('full')})")
    print(f"Fiscal year: {converter.fiscal_year_label_for(bs_date)}")
    return 0


def cmd_to_ad(args):
    """Convert a BS date to AD, with the registration expiry a year later."""
    converter = get_converter(args)
    bs_date = parse_bs_date(args.date)
    ad_date = converter.to_ad(bs_date)
    print(f"BS:          {bs_date} ({bs_date.format('full')})")
    print(f"AD:          {ad_date.isoformat()}")
    print(f"Expiry (AD): {calc_ad_expiry_date(ad_date).isoformat()}")
    return 0


def cmd_today(args):
    """Show today's date in both calendars."""
    converter = get_converter(args)
    today = converter.clock()
    bs_date = converter.to_bs(today)
    print(f"AD:          {today.isoformat()}")
    print(f"BS:          {bs_date} ({bs_date.format('full')})")
    print(f"Fiscal year: {converter.fiscal_year_label_for(bs_date)}")
    return 0


# =============================================================================
# Reference data commands
# =============================================================================


def make_fiscal_year_table(fiscal_years, converter: BSCalendarConverter) -> List[List[str]]:
    """Convert fiscal years to table rows."""
    rows = []
    for fy in fiscal_years:
        rows.append(
            [
                fy.label,
                str(fy.start_date),
                str(fy.end_date),
                converter.to_ad(fy.start_date).isoformat(),
                converter.to_ad(fy.end_date).isoformat(),
                fy.total_days(converter),
            ]
        )
    return rows


def cmd_fiscal_years(args):
    """List configured fiscal years."""
    calculator = get_calculator(args)
    fiscal_years = [
        fy
        for fy in calculator.fiscal_years
        if (args.since is None or fy.start_date.year >= args.since)
        and (args.until is None or fy.start_date.year <= args.until)
    ]

    print(f"Fiscal years: {len(fiscal_years)}")
    print()
    if not fiscal_years:
        print("No fiscal years found.")
        return 0

    headers = ["Label", "Start (BS)", "End (BS)", "Start (AD)", "End (AD)", "Days"]
    print(
        tabulate(
            make_fiscal_year_table(fiscal_years, calculator.converter),
            headers=headers,
            tablefmt="simple",
        )
    )
    return 0


def cmd_rates(args):
    """List tax, insurance and penalty rates."""
    rates = get_calculator(args).rates

    def wanted(rate) -> bool:
        return args.type is None or rate.vehicle_type.lower() == args.type.lower()

    print(f"Tariff: {rates.version}")
    print()

    tax_rows = [
        [
            r.vehicle_type,
            r.fuel_type,
            f"{r.min_capacity:,}",
            format_money(r.annual_tax),
            format_money(r.renewal_fee),
            r.province or "-",
            r.fiscal_year or "-",
        ]
        for r in sorted(
            filter(wanted, rates.tax_rates),
            key=lambda r: (r.vehicle_type, r.fuel_type, r.province or "", r.min_capacity),
        )
    ]
    print("TAX RATES:")
    headers = ["Type", "Fuel", "From", "Annual Tax", "Renewal Fee", "Province", "FY"]
    print(tabulate(tax_rows, headers=headers, tablefmt="simple"))
    print()

    insurance_rows = [
        [r.vehicle_type, r.fuel_type or "any", f"{r.min_capacity:,}", format_money(r.annual_premium)]
        for r in sorted(
            filter(wanted, rates.insurance_rates),
            key=lambda r: (r.vehicle_type, r.fuel_type or "", r.min_capacity),
        )
    ]
    print("INSURANCE:")
    print(tabulate(insurance_rows, headers=["Type", "Fuel", "From", "Premium"], tablefmt="simple"))
    print()

    schedule = rates.penalty
    print(
        f"PENALTIES (in {schedule.unit}, after {schedule.offset_months} months"
        f" + {schedule.grace_days} days grace):"
    )
    band_rows = [
        [
            band.label,
            band.start,
            band.end if band.end is not None else "-",
            format_percentage(band.percentage),
            format_percentage(band.renewal_fee_percentage),
        ]
        for band in schedule.bands
    ]
    headers = ["Band", "From", "To", "Tax Penalty", "Fee Penalty"]
    print(tabulate(band_rows, headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Due command
# =============================================================================


def make_due_table(result: RenewalComputationResult) -> List[List[str]]:
    """Convert a computation result to breakdown rows."""
    return [
        ["Road tax", format_money(result.base_tax)],
        ["Renewal fee", format_money(result.renewal_fee)],
        ["Insurance", format_money(result.insurance_amount)],
        [
            f"Tax penalty ({format_percentage(result.penalty_percentage)})",
            format_money(result.tax_penalty),
        ],
        [
            f"Renewal fee penalty ({format_percentage(result.renewal_fee_penalty_percentage)})",
            format_money(result.renewal_fee_penalty),
        ],
        ["Total due", format_money(result.total_due)],
    ]


def cmd_due(args):
    """Show the amount due to renew a vehicle."""
    calculator = get_calculator(args)
    vehicle = load_vehicle(args.vehicle_file)
    as_of = resolve_as_of(args, calculator.converter)

    result = calculator.compute_due(vehicle, as_of)

    print_vehicle_header(vehicle, as_of, calculator.converter)
    print(f"Fiscal year: {result.fiscal_year_label}")
    print(f"Expiry: {format_bs(result.expiry_date)}")
    print(f"Overdue: {format_overdue(result)}")
    if result.penalty_band:
        print(f"Penalty band: {result.penalty_band}")
    print()
    print(tabulate(make_due_table(result), tablefmt="simple"))
    return 0


# =============================================================================
# Arrears command
# =============================================================================


def make_arrears_table(statement: ArrearsStatement) -> List[List[str]]:
    """Convert an arrears statement to table rows, with a totals row."""
    rows = []
    for line in statement.lines:
        rows.append(
            [
                line.fiscal_year_label,
                format_bs(line.reference_date),
                format_bs(line.expiry_date),
                format_money(line.base_tax),
                format_money(line.renewal_fee),
                format_money(line.insurance_amount),
                format_money(line.penalty_amount),
                format_money(line.total_due),
            ]
        )
    rows.append(
        [
            "Total",
            "",
            "",
            format_money(statement.total_tax),
            format_money(statement.total_renewal_fee),
            format_money(statement.total_insurance),
            format_money(statement.total_penalty),
            format_money(statement.grand_total),
        ]
    )
    return rows


def cmd_arrears(args):
    """Show a year-by-year breakdown of unpaid renewals."""
    calculator = get_calculator(args)
    vehicle = load_vehicle(args.vehicle_file)
    as_of = resolve_as_of(args, calculator.converter)

    statement = calculator.compute_arrears(vehicle, as_of, max_years=args.max_years)

    print_vehicle_header(vehicle, as_of, calculator.converter)
    print(f"Years due: {statement.years_count}")
    print()

    headers = ["FY", "Period From", "Expiry", "Tax", "Fee", "Insurance", "Penalty", "Total"]
    print(tabulate(make_arrears_table(statement), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Status command
# =============================================================================


def collect_vehicle_files(paths: List[Path]) -> List[Path]:
    """Expand directories into the YAML files they contain."""
    files = []
    for path in paths:
        if path.is_dir():
            files.extend(sorted(list(path.glob("*.yaml")) + list(path.glob("*.yml"))))
        else:
            files.append(path)
    return files


def make_status_table(entries, converter: BSCalendarConverter, as_of: BSDate) -> List[List[str]]:
    """Convert (vehicle, status) pairs to table rows."""
    as_of_ad = converter.to_ad(as_of)
    rows = []
    for vehicle, expiry in entries:
        remaining = "-"
        expiry_ad = "-"
        if expiry is not None:
            ad = converter.to_ad(expiry)
            expiry_ad = ad.isoformat()
            remaining = describe_interval(as_of_ad, ad)
        rows.append(
            [
                vehicle.registration_number,
                vehicle.vehicle_type,
                format_bs(vehicle.last_renewed_date),
                format_bs(expiry),
                expiry_ad,
                remaining,
            ]
        )
    return rows


def cmd_status(args):
    """Show expired, due-soon and valid vehicles."""
    calculator = get_calculator(args)
    converter = calculator.converter
    as_of = resolve_as_of(args, converter)

    files = collect_vehicle_files(args.vehicle_files)
    if not files:
        print("No vehicle files found.")
        return 0

    grouped = {status: [] for status in RenewalStatus}
    for path in files:
        vehicle = load_vehicle(path)
        status = calculator.renewal_status(vehicle, as_of, due_soon_days=args.due_soon_days)
        expiry = calculator.expiry_date(vehicle) if status != RenewalStatus.UNKNOWN else None
        grouped[status].append((vehicle, expiry))

    print(f"As of: {as_of} ({converter.to_ad(as_of).isoformat()} AD)")
    print(f"Vehicles: {len(files)}")
    print()

    headers = ["Registration", "Type", "Last Renewed", "Expiry (BS)", "Expiry (AD)", "Remaining"]
    titles = {
        RenewalStatus.EXPIRED: "EXPIRED:",
        RenewalStatus.DUE_SOON: f"DUE SOON (within {args.due_soon_days} days):",
        RenewalStatus.VALID: "VALID:",
    }
    for status, title in titles.items():
        if grouped[status]:
            entries = sorted(grouped[status], key=lambda e: e[1])
            print(title)
            print(tabulate(make_status_table(entries, converter, as_of), headers=headers, tablefmt="simple"))
            print()

    if grouped[RenewalStatus.UNKNOWN]:
        print("UNKNOWN (dates outside the calendar table):")
        for vehicle, _ in grouped[RenewalStatus.UNKNOWN]:
            print(f"  {vehicle.name}")
        print()

    return 0


# =============================================================================
# Mark Renewed command
# =============================================================================


def cmd_mark_renewed(args):
    """Record a completed renewal in a vehicle file."""
    converter = get_converter(args)
    vehicle = load_vehicle(args.vehicle_file)
    renewed_on = converter.check(parse_bs_date(args.date)) if args.date else converter.today_bs()

    old_reference = converter.check(vehicle.reference_date)
    if renewed_on < old_reference:
        print(f"Error: Renewal date {renewed_on} is before the current reference date {old_reference}")
        return 1

    print(f"Vehicle: {vehicle.name}")
    print(f"Last renewed: {format_bs(vehicle.last_renewed_date)} -> {renewed_on}")
    print(f"New expiry:   {converter.add_years(renewed_on, 1)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    save_last_renewed(args.vehicle_file, renewed_on)
    print("Renewal saved.")
    return 0


# =============================================================================
# Main
# =============================================================================


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Bikram Sambat dates and vehicle renewal fees",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s to-bs 2024-04-13
  %(prog)s to-ad 2081-01-01
  %(prog)s today
  %(prog)s fiscal-years --since 2080
  %(prog)s rates --type 2W
  %(prog)s due vehicles/ba-2-pa-1234.yaml --as-of 2082-09-19
  %(prog)s arrears vehicles/ko-1-cha-4321.yaml --as-of-ad 2026-01-03
  %(prog)s status vehicles/
  %(prog)s mark-renewed vehicles/ba-2-pa-1234.yaml --date 2082-05-10 --dry-run
""",
    )
    parser.add_argument(
        "--tariff",
        type=Path,
        default=DEFAULT_TARIFF,
        help=f"Path to tariff YAML file (default: {DEFAULT_TARIFF.name})",
    )
    parser.add_argument(
        "--calendar",
        type=Path,
        help="Path to BS calendar YAML file (default: packaged table)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log lookups and calculations",
    )

    # --as-of options shared by date-sensitive subcommands
    as_of_parent = argparse.ArgumentParser(add_help=False)
    as_of_group = as_of_parent.add_mutually_exclusive_group()
    as_of_group.add_argument(
        "--as-of",
        type=str,
        help="BS date to compute for, YYYY-MM-DD (default: today)",
    )
    as_of_group.add_argument(
        "--as-of-ad",
        type=str,
        help="AD date to compute for, YYYY-MM-DD",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    to_bs_parser = subparsers.add_parser("to-bs", help="Convert an AD date to BS")
    to_bs_parser.add_argument("date", type=str, help="AD date in YYYY-MM-DD format")

    to_ad_parser = subparsers.add_parser("to-ad", help="Convert a BS date to AD")
    to_ad_parser.add_argument("date", type=str, help="BS date in YYYY-MM-DD format")

    subparsers.add_parser("today", help="Show today's date in both calendars")

    fiscal_parser = subparsers.add_parser("fiscal-years", help="List configured fiscal years")
    fiscal_parser.add_argument("--since", type=int, help="First BS start year to show")
    fiscal_parser.add_argument("--until", type=int, help="Last BS start year to show")

    rates_parser = subparsers.add_parser("rates", help="List tax, insurance and penalty rates")
    rates_parser.add_argument("--type", type=str, help="Only show this vehicle type (e.g., 2W)")

    due_parser = subparsers.add_parser(
        "due", parents=[as_of_parent], help="Amount due to renew a vehicle"
    )
    due_parser.add_argument("vehicle_file", type=Path, help="Path to vehicle YAML file")

    arrears_parser = subparsers.add_parser(
        "arrears", parents=[as_of_parent], help="Year-by-year breakdown of unpaid renewals"
    )
    arrears_parser.add_argument("vehicle_file", type=Path, help="Path to vehicle YAML file")
    arrears_parser.add_argument(
        "--max-years",
        type=positive_int,
        default=4,
        help="Maximum number of years to list (default: 4)",
    )

    status_parser = subparsers.add_parser(
        "status", parents=[as_of_parent], help="Renewal status of vehicles"
    )
    status_parser.add_argument(
        "vehicle_files",
        type=Path,
        nargs="+",
        help="Vehicle YAML files or directories containing them",
    )
    status_parser.add_argument(
        "--due-soon-days",
        type=int,
        default=30,
        help="Days before expiry to flag as due soon (default: 30)",
    )

    mark_parser = subparsers.add_parser(
        "mark-renewed", help="Record a completed renewal in a vehicle file"
    )
    mark_parser.add_argument("vehicle_file", type=Path, help="Path to vehicle YAML file")
    mark_parser.add_argument(
        "--date",
        type=str,
        help="BS renewal date in YYYY-MM-DD format (default: today)",
    )
    mark_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be saved without saving",
    )

    return parser


COMMANDS = {
    "to-bs": cmd_to_bs,
    "to-ad": cmd_to_ad,
    "today": cmd_today,
    "fiscal-years": cmd_fiscal_years,
    "rates": cmd_rates,
    "due": cmd_due,
    "arrears": cmd_arrears,
    "status": cmd_status,
    "mark-renewed": cmd_mark_renewed,
}


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Validate input files exist
    paths = [args.tariff, args.calendar, getattr(args, "vehicle_file", None)]
    paths.extend(getattr(args, "vehicle_files", None) or [])
    for path in paths:
        if path is not None and not path.exists():
            print(f"Error: File not found: {path}")
            return 1

    # Dispatch to command handler
    try:
        return COMMANDS[args.command](args)
    except RenewalError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
