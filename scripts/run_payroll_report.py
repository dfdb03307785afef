#!/usr/bin/env python3
"""
Generate a payroll report (or a client invoice) from a JSON snapshot.

Usage:
    python scripts/run_payroll_report.py snapshot.json \\
        --start 2025-06-02 --end 2025-06-15 --pay-date 2025-06-20

    python scripts/run_payroll_report.py snapshot.json \\
        --start 2025-06-02 --end 2025-06-15 --pay-date 2025-06-20 \\
        --invoice-client client_1

The snapshot is a JSON object with the record-store collections:
``employees``, ``tasks``, ``clients``, ``timeEntries`` and ``piecework``.
The report is written as JSON to stdout (or --output).  Structured logs
go to stderr.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from payroll_config import get_active_config
from payroll_kernel.exceptions import PayrollKernelError
from payroll_kernel.logging_config import configure_logging
from payroll_services import generate_client_invoice, generate_payroll_report


def load_snapshot_file(path: Path) -> dict:
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Washington farm-labor payroll report from a JSON snapshot.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("snapshot", type=Path, help="JSON snapshot of the record store")
    parser.add_argument("--start", required=True, help="Report start date (YYYY-MM-DD)")
    parser.add_argument("--end", required=True, help="Report end date (YYYY-MM-DD)")
    parser.add_argument("--pay-date", required=True, help="Pay date (YYYY-MM-DD)")
    parser.add_argument(
        "--config", type=Path, default=None,
        help="Payroll policy YAML (default: packaged Washington policy)",
    )
    parser.add_argument(
        "--output", type=Path, default=None,
        help="Write the JSON report here instead of stdout",
    )
    parser.add_argument(
        "--invoice-client", default=None, metavar="CLIENT_ID",
        help="Produce the client invoice for CLIENT_ID instead of the payroll report",
    )
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Structured log level on stderr (default: WARNING)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=getattr(logging, args.log_level))

    try:
        config = get_active_config(args.config)
        data = load_snapshot_file(args.snapshot)
        collections = dict(
            employees=data.get("employees"),
            tasks=data.get("tasks"),
            clients=data.get("clients"),
            time_entries=data.get("timeEntries"),
            piecework=data.get("piecework"),
        )
        if args.invoice_client:
            result = generate_client_invoice(
                args.invoice_client, args.start, args.end,
                invoice_date=args.pay_date, config=config, **collections,
            )
        else:
            result = generate_payroll_report(
                args.start, args.end, args.pay_date, config=config, **collections,
            )
    except PayrollKernelError as exc:
        print(f"ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError, KeyError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    output = result.to_json()
    if args.output:
        args.output.write_text(output + "\n")
    else:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
