"""
Locking Conformance Tests

INVARIANT: Once an account is locked it stays locked, and deposits and
withdrawals against it never change its balances.

    locked(a, t) ⟹ locked(a, t') for all t' > t
    locked(a) ∧ kind(T) ∈ {DEPOSIT, WITHDRAWAL} ⟹ balances(a) unchanged by T
"""

from decimal import Decimal

from hypothesis import given, settings

from txledger import LedgerEngine, Transaction, TransactionKind, ApplyResult

from .strategies import transaction_log


class TestLockingProperties:

    @given(transaction_log(max_size=80))
    @settings(max_examples=200)
    def test_locked_accounts_refuse_money_movements(self, log):
        engine = LedgerEngine()
        for tx in log:
            account = engine.accounts.get(tx.client)
            was_locked = account is not None and account.locked
            before = (account.available, account.held, account.total) if account else None

            result = engine.apply(tx)

            if was_locked:
                assert engine.accounts[tx.client].locked
                if tx.kind.carries_amount:
                    assert result == ApplyResult.IGNORED
                    after = engine.accounts[tx.client]
                    assert (after.available, after.held, after.total) == before

    @given(transaction_log(max_size=80))
    @settings(max_examples=100)
    def test_lock_only_set_by_chargeback(self, log):
        engine = LedgerEngine()
        for tx in log:
            locked_before = {c for c, a in engine.accounts.items() if a.locked}
            result = engine.apply(tx)
            locked_after = {c for c, a in engine.accounts.items() if a.locked}
            if locked_after != locked_before:
                assert tx.kind == TransactionKind.CHARGEBACK
                assert result == ApplyResult.APPLIED
                assert locked_after - locked_before == {tx.client}


class TestLockingExamples:

    def test_scenario_c_chargeback_then_deposit(self):
        """Deposit, Dispute, Chargeback, Deposit - the last deposit is refused."""
        engine = LedgerEngine()
        engine.apply(Transaction(TransactionKind.DEPOSIT, 1, 1, Decimal("1.0")))
        engine.apply(Transaction(TransactionKind.DISPUTE, 1, 1))
        engine.apply(Transaction(TransactionKind.CHARGEBACK, 1, 1))
        result = engine.apply(Transaction(TransactionKind.DEPOSIT, 1, 2, Decimal("1.0")))

        assert result == ApplyResult.IGNORED
        view = engine.get_account(1)
        assert (view.available, view.held, view.total, view.locked) == (
            Decimal("0"), Decimal("0"), Decimal("0"), True
        )
