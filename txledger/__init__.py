"""
txledger - Transaction Ledger Replay

Replays an ordered log of deposits, withdrawals, disputes, resolves and
chargebacks against per-client accounts and reports the final balances.

Usage:
    from decimal import Decimal
    from txledger import LedgerEngine, Transaction, TransactionKind

    engine = LedgerEngine()
    engine.apply(Transaction(TransactionKind.DEPOSIT, 1, 1, Decimal("1.5")))
    engine.apply(Transaction(TransactionKind.DISPUTE, 1, 1))

    for account in engine.snapshot():
        print(account.client, account.available, account.held, account.total, account.locked)
"""

# Core types
from .core import (
    TransactionKind,
    ApplyResult,
    Transaction,
    Account,
    AccountView,
    LedgerError,
    MalformedRecord,
    round_for_presentation,
    format_decimal,
    parse_amount,
    PRESENTATION_PLACES,
    MAX_CLIENT_ID,
    MAX_TX_ID,
)

# Engine
from .engine import LedgerEngine

# CSV adapters
from .csv_io import (
    read_transactions,
    parse_record,
    write_accounts,
    TRANSACTION_HEADER,
    ACCOUNT_HEADER,
)

__all__ = [
    # Core
    'TransactionKind', 'ApplyResult', 'Transaction', 'Account', 'AccountView',
    'LedgerError', 'MalformedRecord',
    'round_for_presentation', 'format_decimal', 'parse_amount',
    'PRESENTATION_PLACES', 'MAX_CLIENT_ID', 'MAX_TX_ID',
    # Engine
    'LedgerEngine',
    # CSV
    'read_transactions', 'parse_record', 'write_accounts',
    'TRANSACTION_HEADER', 'ACCOUNT_HEADER',
]

__version__ = '1.0.0'
