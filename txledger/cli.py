"""
cli.py - Command-line entry point

Replays a CSV event log and prints the final accounts as CSV.

Run:
    txledger transactions.csv > accounts.csv
    txledger transactions.csv --verbose    # also report each event on stderr
    python -m txledger transactions.csv
"""

from __future__ import annotations
from typing import List, Optional
import argparse
import sys

from .core import LedgerError
from .csv_io import read_transactions, write_accounts
from .engine import LedgerEngine


EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="txledger",
        description="Replay a CSV log of ledger events and print the final account balances.",
    )
    parser.add_argument("path", help="CSV file with type,client,tx,amount rows")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="report every applied or ignored event on stderr",
    )
    return parser


def run_processing(path: str, verbose: bool = False) -> LedgerEngine:
    """
    Replay every transaction in the file.

    Raises:
        MalformedRecord: If any row is structurally invalid
        OSError: If the file cannot be read
    """
    engine = LedgerEngine(verbose=verbose)
    engine.apply_all(read_transactions(path))
    return engine


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        engine = run_processing(args.path, verbose=args.verbose)
    except (LedgerError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    write_accounts(engine.snapshot(), sys.stdout)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
