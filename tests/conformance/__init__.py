"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the ledger engine.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_balance_invariants.py - total == available + held, held >= 0, no overdraft
2. test_dispute_lifecycle.py - dispute state machine transitions and idempotency
3. test_locking.py - locked accounts refuse deposits and withdrawals
4. test_replay_determinism.py - identical logs produce identical snapshots
5. test_snapshot.py - presentation rounding and snapshot stability

These tests use hypothesis for property-based testing. Shared strategies live in
strategies.py.
"""
