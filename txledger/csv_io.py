"""
csv_io.py - CSV adapters around the engine

Reading:
    Rows of `type, client, tx, amount` become Transaction values. Whitespace
    around headers and fields is ignored, the amount column may be empty or
    missing for disputes, resolves and chargebacks, and blank lines are
    skipped. Any structurally invalid row raises MalformedRecord.

Writing:
    AccountView rows are written as `client, available, held, total, locked`.
"""

from __future__ import annotations
from typing import IO, Iterable, Iterator, List, Optional, Sequence, Union
import csv
import os

from .core import (
    AccountView, MalformedRecord, Transaction, TransactionKind,
    MAX_CLIENT_ID, MAX_TX_ID,
    parse_amount,
)


TRANSACTION_HEADER = ("type", "client", "tx", "amount")
ACCOUNT_HEADER = ("client", "available", "held", "total", "locked")

PathOrStream = Union[str, "os.PathLike[str]", IO[str]]


# ============================================================================
# READING
# ============================================================================

def read_transactions(source: PathOrStream) -> Iterator[Transaction]:
    """
    Lazily parse a CSV event log.

    Args:
        source: Path to the CSV file, or an open text stream

    Yields:
        Transactions in file order

    Raises:
        MalformedRecord: On the first row that cannot be parsed, or if the
            input is not valid UTF-8 CSV
        OSError: If the file cannot be opened
    """
    if isinstance(source, (str, os.PathLike)):
        with open(source, newline="", encoding="utf-8") as stream:
            yield from _read_stream(stream)
    else:
        yield from _read_stream(source)


def _read_stream(stream: IO[str]) -> Iterator[Transaction]:
    reader = csv.reader(stream)
    try:
        header = _next_nonblank(reader)
        if header is None:
            return
        _check_header(header, reader.line_num)

        for row in reader:
            if _is_blank(row):
                continue
            yield parse_record([field.strip() for field in row], reader.line_num)
    except csv.Error as e:
        raise MalformedRecord(str(e), reader.line_num) from e
    except UnicodeDecodeError as e:
        # Decoding runs ahead of the reader in chunks, so no line is known
        raise MalformedRecord(f"input is not valid UTF-8: {e}") from e


def _next_nonblank(reader) -> Optional[List[str]]:
    for row in reader:
        if not _is_blank(row):
            return row
    return None


def _is_blank(row: Sequence[str]) -> bool:
    return all(not field.strip() for field in row)


def _check_header(header: Sequence[str], line: int) -> None:
    names = tuple(name.strip().lower() for name in header)
    if names not in (TRANSACTION_HEADER, TRANSACTION_HEADER[:3]):
        raise MalformedRecord(
            f"expected header {','.join(TRANSACTION_HEADER)}, got {','.join(header)}",
            line,
        )


def parse_record(fields: Sequence[str], line: Optional[int] = None) -> Transaction:
    """
    Build a Transaction from already-split, trimmed fields.

    Amounts on dispute, resolve and chargeback rows are ignored.

    Args:
        fields: [type, client, tx] or [type, client, tx, amount]
        line: 1-based line number for error messages

    Raises:
        MalformedRecord: If the record is structurally invalid
    """
    if not 3 <= len(fields) <= 4:
        raise MalformedRecord(f"expected 3 or 4 fields, got {len(fields)}", line)

    try:
        kind = TransactionKind(fields[0].lower())
    except ValueError:
        raise MalformedRecord(f"unknown transaction type {fields[0]!r}", line) from None

    client = _parse_id(fields[1], "client", MAX_CLIENT_ID, line)
    tx = _parse_id(fields[2], "tx", MAX_TX_ID, line)

    amount = None
    if kind.carries_amount:
        text = fields[3] if len(fields) == 4 else ""
        if not text:
            raise MalformedRecord(f"{kind.value} requires an amount", line)
        try:
            amount = parse_amount(text)
        except ValueError as e:
            raise MalformedRecord(str(e), line) from None

    return Transaction(kind, client, tx, amount)


def _parse_id(text: str, name: str, upper: int, line: Optional[int]) -> int:
    if not (text.isascii() and text.isdigit()):
        raise MalformedRecord(f"{name} must be an unsigned integer, got {text!r}", line)
    value = int(text)
    if value > upper:
        raise MalformedRecord(f"{name} {value} exceeds maximum {upper}", line)
    return value


# ============================================================================
# WRITING
# ============================================================================

def write_accounts(accounts: Iterable[AccountView], stream: IO[str]) -> None:
    """Write a header and one row per account."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(ACCOUNT_HEADER)
    for account in accounts:
        writer.writerow(account.as_row())
