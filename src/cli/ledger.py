"""CLI for inspecting apartment ledgers from the terminal.

Usage:
    python -m src.cli.ledger summary 42
    python -m src.cli.ledger balances 1 2 3

Exit Codes:
    0 - Success
    1 - Failure: apartment not found, invalid input or database error
"""

import argparse
import asyncio
import json
import logging
import sys
from decimal import Decimal
from typing import Any, Sequence

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ledger", description="Apartment ledger tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    summary = subparsers.add_parser("summary", help="Financial summary of one apartment")
    summary.add_argument("apartment_id", type=int)

    balances = subparsers.add_parser("balances", help="Net balances of several apartments")
    balances.add_argument("apartment_ids", type=int, nargs="+")

    return parser


async def run(args: argparse.Namespace) -> dict[str, Any]:
    """Execute the parsed command and return a JSON-serializable result."""
    from src.services import AsyncSessionLocal
    from src.services.ledger_service import LedgerService

    async with AsyncSessionLocal() as session:
        service = LedgerService(session)
        if args.command == "summary":
            summary = await service.compute_financial_summary(args.apartment_id)
            return summary.as_dict()

        balances = await service.batch_compute_balances(args.apartment_ids)
        return {str(apartment_id): amounts.as_dict() for apartment_id, amounts in balances.items()}


async def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the ledger CLI.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    load_dotenv()

    from src.services.errors import AppError
    from src.services.logging import setup_server_logging

    setup_server_logging(log_file=None)
    args = build_parser().parse_args(argv)

    try:
        result = await run(args)
    except AppError as e:
        logger.error(f"Ledger command failed: {e.message}")
        return 1
    except Exception as e:
        logger.error(f"Ledger command failed: {e}", exc_info=True)
        return 1

    print(json.dumps(result, default=_json_default, indent=2))
    return 0


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
