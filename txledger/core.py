"""
Core types and pure functions for the transaction ledger.

This module provides the foundational data structures for the ledger:
1. Enums: TransactionKind for the closed set of event kinds, ApplyResult for outcomes
2. Immutable data structures: Transaction, AccountView
3. Mutable account record: Account (owned exclusively by LedgerEngine)
4. Exceptions: LedgerError and input-level error types
5. Presentation helpers: rounding and formatting of Decimal balances

Nothing in this module touches engine state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, MAX_PREC, ROUND_HALF_EVEN, ROUND_HALF_UP, getcontext
from enum import Enum
from typing import Optional, Set


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Balances are replayed across arbitrarily long logs, so arithmetic must be
# exact. Balances are only added, subtracted and compared; at maximum
# precision none of those operations rounds. The global context is configured
# once at import time.
#
# PRECONDITION: No other code should modify the global Decimal context.
# If thread-local contexts are needed, use decimal.localcontext().
#
_LEDGER_DECIMAL_CONTEXT = getcontext()
_LEDGER_DECIMAL_CONTEXT.prec = MAX_PREC
_LEDGER_DECIMAL_CONTEXT.rounding = ROUND_HALF_EVEN


# ============================================================================
# CONSTANTS
# ============================================================================

# Fractional digits kept when balances leave the engine.
PRESENTATION_PLACES = 4
_PRESENTATION_QUANTUM = Decimal(1).scaleb(-PRESENTATION_PLACES)

# Identifier bounds (client ids are u16, transaction ids are u32).
MAX_CLIENT_ID = 2**16 - 1
MAX_TX_ID = 2**32 - 1

ZERO = Decimal("0")


# ============================================================================
# ENUMS
# ============================================================================

class TransactionKind(Enum):
    """
    Closed set of ledger event kinds.

    DEPOSIT and WITHDRAWAL carry an amount and a fresh tx id.
    DISPUTE, RESOLVE and CHARGEBACK reference the tx id of an earlier deposit
    and carry no amount.
    """
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionKind.DEPOSIT, TransactionKind.WITHDRAWAL)


class ApplyResult(Enum):
    """
    Outcome of applying a transaction to the engine.

    APPLIED: Balances or dispute state changed.
    IGNORED: The transaction was a defined no-op (insufficient funds, locked
             account, unknown or mismatched reference, repeated dispute,
             negative amount, ...). Ignored transactions are not errors.
    """
    APPLIED = "applied"
    IGNORED = "ignored"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class MalformedRecord(LedgerError):
    """
    Raised when an input record cannot be turned into a Transaction.

    A structurally invalid log cannot be replayed safely, so this error aborts
    the whole run rather than skipping the row.
    """

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Transaction:
    """
    A single event from the ledger log.

    Attributes:
        kind: The event kind.
        client: Client id the event targets (u16).
        tx: Transaction id. Fresh for deposits/withdrawals, a reference for
            disputes, resolves and chargebacks (u32).
        amount: Exact amount for deposits/withdrawals, None otherwise.

    Negative amounts are constructible; the engine drops them on apply.
    """
    kind: TransactionKind
    client: int
    tx: int
    amount: Optional[Decimal] = None

    def __post_init__(self):
        if not isinstance(self.kind, TransactionKind):
            raise ValueError(f"Transaction kind must be TransactionKind, got {type(self.kind)}")
        if not 0 <= self.client <= MAX_CLIENT_ID:
            raise ValueError(f"Client id out of range: {self.client}")
        if not 0 <= self.tx <= MAX_TX_ID:
            raise ValueError(f"Transaction id out of range: {self.tx}")
        if self.kind.carries_amount:
            if not isinstance(self.amount, Decimal):
                raise ValueError(
                    f"{self.kind.value} requires a Decimal amount, got {type(self.amount)}"
                )
            if not self.amount.is_finite():
                raise ValueError(f"Transaction amount must be finite, got {self.amount}")
        elif self.amount is not None:
            raise ValueError(f"{self.kind.value} must not carry an amount")

    def __repr__(self) -> str:
        amount = f" {self.amount}" if self.amount is not None else ""
        return f"Transaction({self.kind.value} client={self.client} tx={self.tx}{amount})"


@dataclass(slots=True)
class Account:
    """
    Mutable per-client balance record.

    Only LedgerEngine mutates accounts. `disputed` holds the ids of deposits
    currently under dispute and never leaves the engine.
    """
    client: int
    available: Decimal = ZERO
    held: Decimal = ZERO
    total: Decimal = ZERO
    locked: bool = False
    disputed: Set[int] = field(default_factory=set)

    def view(self) -> AccountView:
        """Rounded, immutable projection of this account."""
        return AccountView(
            client=self.client,
            available=round_for_presentation(self.available),
            held=round_for_presentation(self.held),
            total=round_for_presentation(self.total),
            locked=self.locked,
        )


@dataclass(frozen=True, slots=True)
class AccountView:
    """
    Presentation snapshot of an account.

    Balances are already rounded to PRESENTATION_PLACES.
    """
    client: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool

    def as_row(self) -> list:
        """Return the account as CSV-ready string fields."""
        return [
            str(self.client),
            format_decimal(self.available),
            format_decimal(self.held),
            format_decimal(self.total),
            "true" if self.locked else "false",
        ]

    def __str__(self) -> str:
        return ", ".join(self.as_row()[1:])


# ============================================================================
# PRESENTATION HELPERS
# ============================================================================

def round_for_presentation(value: Decimal) -> Decimal:
    """
    Round a balance to at most PRESENTATION_PLACES fractional digits.

    Halves round away from zero. Values that already have fewer digits keep
    their scale, so Decimal("1.0") stays Decimal("1.0") rather than being
    padded to "1.0000".

    Example:
        round_for_presentation(Decimal("33.123456"))  # Decimal("33.1235")
        round_for_presentation(Decimal("0.00005"))    # Decimal("0.0001")
    """
    if value.as_tuple().exponent < -PRESENTATION_PLACES:
        value = value.quantize(_PRESENTATION_QUANTUM, rounding=ROUND_HALF_UP)
    # No negative zero in reports
    if value.is_zero():
        value = value.copy_abs()
    return value


def format_decimal(value: Decimal) -> str:
    """Plain positional notation, never an exponent."""
    return format(value, "f")


def parse_amount(text: str) -> Decimal:
    """
    Parse a textual amount into an exact, finite Decimal.

    Raises:
        ValueError: If the text is not a finite decimal number.
    """
    try:
        value = Decimal(text.strip())
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {text!r}") from None
    if not value.is_finite():
        raise ValueError(f"Amount must be finite, got {text!r}")
    return value
