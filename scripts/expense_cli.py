#!/usr/bin/env python3
"""
Command-line allowance calculator.

Loads the rate table from YAML and prints the calculation (or the entry
window status) as JSON.

Usage:
    python3 scripts/expense_cli.py calculate --role mr --distance 45 \\
        --night-stay --hotel-bill 600
    python3 scripts/expense_cli.py window
    python3 scripts/expense_cli.py --settings config/expense_settings.yaml window
"""

import argparse
import dataclasses
import json
import sys
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from fieldforce_engines import (  # noqa: E402
    calculate_expense,
    is_expense_entry_allowed,
    validate_expense_input,
)
from fieldforce_kernel.domain.clock import SystemClock  # noqa: E402
from fieldforce_modules.expense.models import ExpenseInput, UserRole  # noqa: E402
from fieldforce_modules.expense.settings import SettingsProvider  # noqa: E402

DEFAULT_SETTINGS = ROOT / "config" / "expense_settings.yaml"


def _to_json(obj) -> str:
    def default(value):
        if isinstance(value, Decimal):
            return str(value)
        raise TypeError(f"Cannot serialize {type(value).__name__}")

    return json.dumps(dataclasses.asdict(obj), default=default, indent=2, ensure_ascii=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Field expense allowance calculator")
    parser.add_argument(
        "--settings", type=Path, default=DEFAULT_SETTINGS,
        help="Settings YAML (default: config/expense_settings.yaml)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    calc = sub.add_parser("calculate", help="Compute DA, TA, hotel and total")
    calc.add_argument("--user", default="cli")
    calc.add_argument("--role", choices=[r.value for r in UserRole], default="mr")
    calc.add_argument("--distance", type=Decimal, required=True)
    calc.add_argument("--outstation", action="store_true")
    calc.add_argument("--night-stay", action="store_true")
    calc.add_argument("--hotel-bill", type=Decimal, default=Decimal("0"))
    calc.add_argument("--joint-work", action="store_true")

    sub.add_parser("window", help="Show whether expense entry is open now")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = SettingsProvider.from_yaml(args.settings).get()

    if args.command == "window":
        print(_to_json(is_expense_entry_allowed(settings, SystemClock().now())))
        return 0

    expense_input = ExpenseInput(
        user_id=args.user,
        user_role=UserRole(args.role),
        distance_km=args.distance,
        is_outstation=args.outstation,
        is_night_stay=args.night_stay,
        hotel_bill_amount=args.hotel_bill,
        is_joint_work=args.joint_work,
    )
    validation = validate_expense_input(expense_input)
    for message in validation.errors:
        print(f"warning: {message}", file=sys.stderr)

    print(_to_json(calculate_expense(expense_input, settings)))
    return 0 if validation.valid else 1


if __name__ == "__main__":
    sys.exit(main())
