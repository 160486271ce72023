"""
engine.py - Stateful Transaction Ledger Engine

LedgerEngine is the central state manager of the package. It is the only
module that mutates account state.

Key responsibilities:
    - Replays deposits, withdrawals, disputes, resolves and chargebacks in log order
    - Keeps the table of deposits/withdrawals that later disputes refer to
    - Tracks per-account dispute state and freezes accounts on chargeback
    - Never raises for business-rule violations; offending events are ignored
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
import sys

from .core import (
    # Types
    Account, AccountView, ApplyResult, Transaction, TransactionKind,
    # Constants
    ZERO,
)


# (applied, reason) - reason is empty when applied
HandlerOutcome = Tuple[bool, str]


class LedgerEngine:
    """
    Sequential replay engine for client accounts.

    Each dispute status lives in the owning account's disputed set:
    DISPUTE moves a deposit from undisputed to disputed, RESOLVE moves it back
    (funds restored) and CHARGEBACK ends it (funds forfeited, account locked).
    Outside of those transitions the reference handlers are no-ops.

    Thread Safety:
        Not thread-safe. Engines share no state, so independent engines can
        replay independent client partitions side by side.

    Example:
        engine = LedgerEngine()
        engine.apply(Transaction(TransactionKind.DEPOSIT, 1, 1, Decimal("1.5")))
        engine.apply(Transaction(TransactionKind.DISPUTE, 1, 1))
        for view in engine.snapshot():
            print(view)
    """

    def __init__(self, verbose: bool = False):
        """
        Create an empty engine.

        Args:
            verbose: Print one line per applied or ignored event to stderr
        """
        self.verbose = verbose
        self.accounts: Dict[int, Account] = {}
        # Deposits and withdrawals by tx id, consulted by reference events
        self.transactions: Dict[int, Transaction] = {}
        self._handlers: Dict[TransactionKind, Callable[[Transaction], HandlerOutcome]] = {
            TransactionKind.DEPOSIT: self._deposit,
            TransactionKind.WITHDRAWAL: self._withdrawal,
            TransactionKind.DISPUTE: self._dispute,
            TransactionKind.RESOLVE: self._resolve,
            TransactionKind.CHARGEBACK: self._chargeback,
        }

    # ========================================================================
    # APPLY (Mutating)
    # ========================================================================

    def apply(self, tx: Transaction) -> ApplyResult:
        """
        Apply a single transaction.

        Transactions must be applied in log order. Business-rule violations
        (insufficient funds, locked account, bad references, ...) leave the
        state untouched and return IGNORED; nothing is raised.

        Args:
            tx: Transaction to apply

        Returns:
            ApplyResult.APPLIED if balances or dispute state changed
            ApplyResult.IGNORED otherwise
        """
        if tx.amount is not None and tx.amount < ZERO:
            applied, reason = False, "negative amount"
        else:
            applied, reason = self._handlers[tx.kind](tx)

        result = ApplyResult.APPLIED if applied else ApplyResult.IGNORED
        if self.verbose:
            self._print_result(tx, result, reason)
        return result

    def apply_all(self, transactions: Iterable[Transaction]) -> Dict[ApplyResult, int]:
        """
        Apply transactions in iteration order.

        Returns:
            Count of transactions per outcome
        """
        counts = {result: 0 for result in ApplyResult}
        for tx in transactions:
            counts[self.apply(tx)] += 1
        return counts

    def _print_result(self, tx: Transaction, result: ApplyResult, reason: str) -> None:
        if result == ApplyResult.APPLIED:
            line = f"✓ APPLIED: {tx!r}"
        else:
            line = f"✗ IGNORED: {tx!r}: {reason}"
        print(line, file=sys.stderr)

    # ========================================================================
    # HANDLERS
    # ========================================================================

    def _deposit(self, tx: Transaction) -> HandlerOutcome:
        account = self._get_account(tx.client)
        if not self._record(tx):
            return False, f"duplicate tx id {tx.tx}"
        if account.locked:
            return False, f"account {tx.client} is locked"
        account.available += tx.amount
        account.total += tx.amount
        return True, ""

    def _withdrawal(self, tx: Transaction) -> HandlerOutcome:
        account = self._get_account(tx.client)
        if not self._record(tx):
            return False, f"duplicate tx id {tx.tx}"
        if account.locked:
            return False, f"account {tx.client} is locked"
        if account.available < tx.amount:
            return False, f"insufficient funds: {account.available} < {tx.amount}"
        account.available -= tx.amount
        account.total -= tx.amount
        return True, ""

    def _dispute(self, tx: Transaction) -> HandlerOutcome:
        referenced, reason = self._lookup_reference(tx)
        if referenced is None:
            return False, reason
        if referenced.kind != TransactionKind.DEPOSIT:
            return False, f"tx {tx.tx} is not a deposit"
        account = self._get_account(tx.client)
        if tx.tx in account.disputed:
            return False, f"tx {tx.tx} is already disputed"
        account.disputed.add(tx.tx)
        account.held += referenced.amount
        account.available -= referenced.amount
        return True, ""

    def _resolve(self, tx: Transaction) -> HandlerOutcome:
        referenced, reason = self._lookup_reference(tx)
        if referenced is None:
            return False, reason
        account = self._get_account(tx.client)
        if tx.tx not in account.disputed:
            return False, f"tx {tx.tx} is not disputed"
        account.disputed.remove(tx.tx)
        account.held -= referenced.amount
        account.available += referenced.amount
        return True, ""

    def _chargeback(self, tx: Transaction) -> HandlerOutcome:
        referenced, reason = self._lookup_reference(tx)
        if referenced is None:
            return False, reason
        account = self._get_account(tx.client)
        if tx.tx not in account.disputed:
            return False, f"tx {tx.tx} is not disputed"
        account.disputed.remove(tx.tx)
        account.held -= referenced.amount
        account.total -= referenced.amount
        account.locked = True
        return True, ""

    def _record(self, tx: Transaction) -> bool:
        """
        Store a deposit or withdrawal for later reference.

        Recording happens whether or not funds move (locked account,
        insufficient funds). The first record for a tx id wins and repeats
        are rejected.
        """
        if tx.tx in self.transactions:
            return False
        self.transactions[tx.tx] = tx
        return True

    def _lookup_reference(self, tx: Transaction) -> Tuple[Optional[Transaction], str]:
        """
        Find the stored transaction a dispute, resolve or chargeback refers to.

        The reference is valid only if the stored transaction exists and
        belongs to the same client.

        Returns:
            (referenced transaction, "") or (None, reason)
        """
        referenced = self.transactions.get(tx.tx)
        if referenced is None:
            return None, f"unknown tx {tx.tx}"
        if referenced.client != tx.client:
            return None, f"tx {tx.tx} belongs to client {referenced.client}, not {tx.client}"
        return referenced, ""

    def _get_account(self, client: int) -> Account:
        """Get an existing account or create an empty one."""
        account = self.accounts.get(client)
        if account is None:
            account = Account(client)
            self.accounts[client] = account
        return account

    # ========================================================================
    # READ-ONLY ACCESS
    # ========================================================================

    def snapshot(self) -> List[AccountView]:
        """
        Return every account as a rounded view, ordered by client id.

        Does not mutate state; repeated calls return equal results.
        """
        return [self.accounts[client].view() for client in sorted(self.accounts)]

    def get_account(self, client: int) -> Optional[AccountView]:
        """Return the rounded view of one account, or None if never seen."""
        account = self.accounts.get(client)
        return account.view() if account is not None else None

    def list_clients(self) -> List[int]:
        """List all client ids seen so far."""
        return sorted(self.accounts)

    def verify_balances(self) -> Dict[str, Any]:
        """
        Verify the account invariants for every account.

        For each account: total == available + held (exact) and held >= 0.

        Returns:
            Dict with keys:
            - 'valid': bool - True if every account satisfies the invariants
            - 'discrepancies': List[Dict] - one entry per violation, with
              client, check, and the offending balances

        Example:
            result = engine.verify_balances()
            assert result['valid'], result['discrepancies']
        """
        discrepancies = []
        for client in sorted(self.accounts):
            account = self.accounts[client]
            if account.available + account.held != account.total:
                discrepancies.append({
                    'client': client,
                    'check': 'total == available + held',
                    'available': account.available,
                    'held': account.held,
                    'total': account.total,
                })
            if account.held < ZERO:
                discrepancies.append({
                    'client': client,
                    'check': 'held >= 0',
                    'held': account.held,
                })
        return {
            'valid': len(discrepancies) == 0,
            'discrepancies': discrepancies,
        }
