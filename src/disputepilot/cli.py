"""
DisputePilot CLI

Command-line access to the penalty matrix and the distribution planner.

Usage:
    disputepilot quote --role GUEST --type CLEANLINESS --severity HIGH --rent 1000 --deposit 500
    disputepilot validate-matrix packs/derent.yaml
    disputepilot matrix [--pack packs/derent.yaml]

Exit Codes:
    0   OK
    1   Usage error
    10  INPUT_INVALID  - Bad amounts or enum values
    11  MATRIX_ERROR   - Matrix pack failed to load or validate
"""
from __future__ import annotations

import argparse
import json
import sys
from typing import Optional

from . import __version__
from .config import EngineSettings
from .engine import DistributionPlanner, PenaltyCalculator
from .exceptions import ConfigurationError, MatrixLoadError, MatrixValidationError
from .logging_config import configure_logging
from .matrix import load_matrix_pack, resolve_matrix
from .models import (
    BookingFacts,
    ComplainantRole,
    PartyWallets,
    ReclamationType,
    Severity,
)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_INPUT_INVALID = 10
EXIT_MATRIX_ERROR = 11


def _load_matrix(args: argparse.Namespace, settings: EngineSettings):
    return resolve_matrix(args.pack or settings.penalty_matrix_path)


def cmd_quote(args: argparse.Namespace, settings: EngineSettings) -> int:
    """Show the penalty and distribution plan for one hypothetical approval."""
    try:
        role = ComplainantRole(args.role.upper())
        rtype = ReclamationType(args.type.upper())
        severity = Severity(args.severity.upper())
        booking = BookingFacts(
            booking_id=0,
            renter_id=0,
            property_id=None,
            rent_total=args.rent,
            deposit_total=args.deposit,
        )
    except ValueError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return EXIT_INPUT_INVALID

    matrix = _load_matrix(args, settings)
    penalty = PenaltyCalculator(matrix).calculate(
        rtype, severity, role, booking.rent_total, booking.deposit_total,
    )
    planner = DistributionPlanner(
        platform_wallet=settings.platform_wallet,
        fee_rate=settings.platform_fee_rate,
    )
    plan = planner.plan(
        booking=booking,
        role=role,
        type=rtype,
        refund_amount=penalty.refund_amount,
        wallets=PartyWallets(guest="<guest>", host="<host>"),
    )

    if args.json:
        print(json.dumps({
            "matrix_id": matrix.matrix_id,
            "refund_amount": str(penalty.refund_amount),
            "penalty_points": penalty.penalty_points,
            "plan": plan.to_dict(),
        }, indent=2))
        return EXIT_OK

    print(f"{role.value} / {rtype.value} / {severity.value}  (matrix: {matrix.matrix_id})")
    print(f"Rent: {booking.rent_total}   Deposit: {booking.deposit_total}")
    print("=" * 60)
    print(f"Refund:         {penalty.refund_amount}")
    print(f"Penalty points: {penalty.penalty_points}")
    if not penalty.matched:
        print("(combination not tabulated)")
    print()
    print(f"Distribution ({plan.case.value if plan.case else '-'}):")
    print("-" * 60)
    for i in plan.instructions:
        print(f"{i.sequence:>3}. {i.party.value:<9} {i.amount:>12} {i.pool.value:<8} {i.memo}")
    if plan.is_empty:
        print("  (no transfers)")
    return EXIT_OK


def cmd_validate_matrix(args: argparse.Namespace, settings: EngineSettings) -> int:
    """Validate a matrix pack and print its hash."""
    matrix = load_matrix_pack(args.path)
    print(f"OK  {matrix.matrix_id}  {len(matrix)} cells  {len(matrix.variants())} variants")
    print(f"hash: {matrix.matrix_hash}")
    return EXIT_OK


def cmd_matrix(args: argparse.Namespace, settings: EngineSettings) -> int:
    """Print the active penalty matrix."""
    matrix = _load_matrix(args, settings)
    if args.json:
        print(json.dumps(matrix.to_dict(), indent=2))
        return EXIT_OK

    print(f"PENALTY MATRIX: {matrix.matrix_id}")
    print("=" * 78)
    print(f"{'Role':<6} {'Type':<28} {'Severity':<9} {'Rent':>7} {'Deposit':>8} {'Points':>7}")
    print("-" * 78)
    for (role, rtype, severity), rule in matrix:
        print(
            f"{role.value:<6} {rtype.value:<28} {severity.value:<9} "
            f"{rule.rent_fraction:>7} {rule.deposit_fraction:>8} {rule.points:>7}"
        )
    print("-" * 78)
    print(f"hash: {matrix.matrix_hash}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="DisputePilot reclamation engine tools",
        prog="disputepilot",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default=None, help="Override DP_LOG_LEVEL")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    quote = subparsers.add_parser("quote", help="Quote refund, points and distribution")
    quote.add_argument("--role", required=True, help="GUEST or HOST")
    quote.add_argument("--type", required=True, help="Reclamation type")
    quote.add_argument("--severity", default="LOW", help="LOW, MEDIUM, HIGH or CRITICAL")
    quote.add_argument("--rent", required=True, help="Rent pool")
    quote.add_argument("--deposit", required=True, help="Deposit pool")
    quote.add_argument("--pack", default=None, help="Matrix pack (defaults to DP_PENALTY_MATRIX_PATH)")
    quote.add_argument("--json", action="store_true", help="Emit JSON")
    quote.set_defaults(func=cmd_quote)

    validate = subparsers.add_parser("validate-matrix", help="Validate a matrix pack")
    validate.add_argument("path", help="YAML or JSON matrix pack")
    validate.set_defaults(func=cmd_validate_matrix)

    show = subparsers.add_parser("matrix", help="Print the active penalty matrix")
    show.add_argument("--pack", default=None, help="Matrix pack (defaults to DP_PENALTY_MATRIX_PATH)")
    show.add_argument("--json", action="store_true", help="Emit JSON")
    show.set_defaults(func=cmd_matrix)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    try:
        settings = EngineSettings.from_env()
        configure_logging(args.log_level or settings.log_level)
    except (ConfigurationError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        return args.func(args, settings)
    except (MatrixLoadError, MatrixValidationError) as e:
        print(f"Matrix error: {e}", file=sys.stderr)
        for error in e.details.get("errors", []):
            loc = ".".join(str(p) for p in error.get("loc", ()))
            print(f"  {loc}: {error.get('msg')}", file=sys.stderr)
        for duplicate in e.details.get("duplicates", []):
            print(f"  duplicate: {duplicate}", file=sys.stderr)
        return EXIT_MATRIX_ERROR


if __name__ == "__main__":
    sys.exit(main())
