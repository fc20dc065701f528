"""Consolidate one month of worktime from the command line.

Usage: python scripts/consolidate.py --year 2024 --month 3

Prints the structured result as JSON. Exit codes: 0 success (warnings
included), 1 failure, 2 invalid period.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.worktime_system.worktime_system.container import build_container
from src.worktime_system.worktime_system.core.exceptions import ValidationError
from src.worktime_system.worktime_system.logging_config import configure_logging
from src.worktime_system.worktime_system.main import load_settings

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID_PERIOD = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Consolidate employee worktime into the admin set.")
    parser.add_argument("--year", type=int, required=True)
    parser.add_argument("--month", type=int, required=True)
    return parser.parse_args(argv)


def run(args: argparse.Namespace, container) -> int:
    try:
        result = container.consolidation_service.consolidate(args.year, args.month)
    except ValidationError as e:
        print(json.dumps({"success": False, "message": str(e), "year": args.year, "month": args.month}))
        return EXIT_INVALID_PERIOD

    print(json.dumps(result.to_dict(), indent=2))
    return EXIT_OK if result.success else EXIT_FAILED


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    configure_logging(level=getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=dict(settings.DB_CONFIG), settings=settings)
    return run(args, container)


if __name__ == "__main__":
    sys.exit(main())
