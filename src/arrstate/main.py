#!/usr/bin/env python3

# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from arrstate.adapters.desired_state import load_desired_state
from arrstate.app import check_health, plan_service, reconcile_services, service_status
from arrstate.common import configure_logging
from arrstate.config import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from arrstate.app import ServiceOutcome
    from arrstate.domain.model import DesiredState
    from arrstate.domain.reconciliation import ChangeSet, ReconciliationPlan

_MARKERS = {"create": "+", "update": "~", "delete": "-"}


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="arrstate",
        description="Reconcile Servarr service configuration against a desired state",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    plan = commands.add_parser("plan", help="Show the changes a reconciliation would make")
    plan.add_argument(
        "--desired",
        type=Path,
        action="append",
        required=True,
        help="Desired-state JSON document (repeat for several services)",
    )

    apply = commands.add_parser("apply", help="Reconcile services against desired state")
    apply.add_argument(
        "--desired",
        type=Path,
        action="append",
        required=True,
        help="Desired-state JSON document (repeat for several services)",
    )
    apply.add_argument(
        "--timeout",
        type=float,
        help="Stop issuing changes after this many seconds per service",
    )
    apply.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any change failed",
    )

    for name, description in (
        ("health", "Report the health checks of a service"),
        ("status", "Connect to a service and print its version"),
    ):
        command = commands.add_parser(name, help=description)
        command.add_argument("--app", required=True, help="radarr, sonarr, lidarr or prowlarr")

    return parser.parse_args(list(argv))


def _load_documents(paths: Sequence[Path]) -> list[DesiredState]:
    return [load_desired_state(path) for path in paths]


def _print_changes(changes: ChangeSet, *, indent: str = "  ") -> None:
    for change in changes:
        print(f"{indent}{_MARKERS[change.action]} {change.describe()}")
    for change in changes.skipped:
        print(f"{indent}! skipped {change.describe()}: {change.reason}")


def _print_plan(plan: ReconciliationPlan) -> None:
    combined = plan.combined()
    print(f"{plan.app}: {combined.summary()}")
    _print_changes(combined)


def _print_outcome(outcome: ServiceOutcome) -> None:
    if outcome.error is not None:
        print(f"{outcome.app}: error: {outcome.error}")
        return
    if outcome.report is None:
        return
    result = outcome.report.result
    print(
        f"{outcome.app} ({outcome.report.service.version}): applied {result.applied}, "
        f"failed {result.failed}, skipped {result.skipped}"
    )
    for error in result.errors:
        print(f"  ! {error}")


def _run_plan(args: argparse.Namespace) -> int:
    for desired in _load_documents(args.desired):
        _print_plan(plan_service(desired))
    return 0


def _run_apply(args: argparse.Namespace) -> int:
    if args.timeout is not None and args.timeout <= 0:
        raise ConfigurationError("Timeout must be positive")
    outcomes = reconcile_services(_load_documents(args.desired), timeout_seconds=args.timeout)
    for outcome in outcomes:
        _print_outcome(outcome)
    if any(outcome.error is not None for outcome in outcomes):
        return 1
    if args.strict and not all(outcome.success for outcome in outcomes):
        return 1
    return 0


def _run_health(args: argparse.Namespace) -> int:
    status = check_health(args.app)
    print(f"{args.app}: {'healthy' if status.healthy else 'unhealthy'}")
    for issue in status.issues:
        print(f"  [{issue.type}] {issue.source}: {issue.message}")
    return 0 if status.healthy else 1


def _run_status(args: argparse.Namespace) -> int:
    info = service_status(args.app)
    started = f", started {info.start_time.isoformat()}" if info.start_time else ""
    print(f"{info.app} {info.version}{started}")
    return 0


_COMMANDS = {
    "plan": _run_plan,
    "apply": _run_apply,
    "health": _run_health,
    "status": _run_status,
}


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args = _parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        exit_code = _COMMANDS[parsed_args.command](parsed_args)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    except Exception as e:  # noqa: BLE001
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    print("\nClosed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
