"""
Concurrency tests: many callers hitting one engine from worker threads.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

from mutualpool.core.constants import ClaimStatus, NotificationKind
from mutualpool.core.exceptions import InsufficientPoolFunds

from conftest import OWNER, THIRTY_DAYS

WORKERS = 8


def _run_together(count, task):
    """Run ``task(i)`` for each i on worker threads released at the same moment."""
    barrier = threading.Barrier(count)

    def gated(i):
        barrier.wait()
        try:
            return i, task(i), None
        except Exception as e:
            return i, None, e

    with ThreadPoolExecutor(max_workers=count) as pool:
        return list(pool.map(gated, range(count)))


class TestConcurrentPurchases:

    def test_ids_are_dense_and_funds_add_up(self, engine):
        count = 24
        results = _run_together(count, lambda i: engine.create_policy(f"holder-{i}", 10_000, THIRTY_DAYS, 100))

        assert all(error is None for _, _, error in results)
        assert sorted(receipt.policy_id for _, receipt, _ in results) == list(range(1, count + 1))
        assert engine.get_available_funds() == count * 100
        assert engine.get_pool_summary().policy_count == count

    def test_notifications_follow_commit_order(self, engine):
        count = 16
        _run_together(count, lambda i: engine.create_policy(f"holder-{i}", 10_000, THIRTY_DAYS, 100))

        notifications = engine.get_notifications()
        assert [n.sequence for n in notifications] == list(range(1, 2 * count + 1))
        # each purchase emits its pair back to back, and purchases appear in id order
        kinds = [n.kind for n in notifications]
        assert kinds == [NotificationKind.POLICY_CREATED, NotificationKind.PREMIUM_PAID] * count
        assert [n.payload["policy_id"] for n in notifications] == [i // 2 + 1 for i in range(2 * count)]


class TestConcurrentApprovals:

    def _pool_with_pending_claims(self, engine, clock, holders):
        # five premiums of 1,000 fund the pool with 5,000
        for holder in holders:
            engine.create_policy(holder, 100_000, THIRTY_DAYS, 1_000)
        clock.advance(days=30)
        return [engine.submit_claim(holder, i + 1, 2_000, "flood") for i, holder in enumerate(holders)]

    def test_only_affordable_claims_are_approved(self, engine, clock):
        holders = [f"holder-{i}" for i in range(5)]
        claim_ids = self._pool_with_pending_claims(engine, clock, holders)

        results = _run_together(len(claim_ids), lambda i: engine.process_claim(OWNER, claim_ids[i], True))

        approved = [claim for _, claim, error in results if error is None]
        refused = [error for _, _, error in results if error is not None]
        assert len(approved) == 2
        assert len(refused) == 3
        assert all(isinstance(error, InsufficientPoolFunds) for error in refused)

        summary = engine.get_pool_summary()
        assert summary.available_funds == 1_000
        assert summary.outstanding_balances == 4_000
        assert summary.funds_held == summary.available_funds + summary.outstanding_balances
        assert summary.claims_by_status[ClaimStatus.APPROVED.value] == 2
        assert summary.claims_by_status[ClaimStatus.PENDING.value] == 3

    def test_subscribers_see_the_commit_they_announce(self, engine, clock):
        holders = [f"holder-{i}" for i in range(5)]
        claim_ids = self._pool_with_pending_claims(engine, clock, holders)
        observed = []

        def record(notification):
            if notification.kind == NotificationKind.CLAIM_PROCESSED:
                observed.append(engine.get_available_funds())

        engine.notifications.subscribe(record)
        _run_together(len(claim_ids), lambda i: engine.process_claim(OWNER, claim_ids[i], True))

        assert observed == [3_000, 1_000]

    def test_concurrent_withdrawals_pay_each_balance_once(self, engine, clock):
        holders = [f"holder-{i}" for i in range(5)]
        claim_ids = self._pool_with_pending_claims(engine, clock, holders)
        for claim_id in claim_ids[:2]:
            engine.process_claim(OWNER, claim_id, True)

        results = _run_together(WORKERS, lambda i: engine.withdraw(holders[i % 2]))

        paid = [amount for _, amount, error in results if error is None]
        assert paid == [2_000, 2_000]
        summary = engine.get_pool_summary()
        assert summary.total_paid_out == 4_000
        assert summary.funds_held == summary.available_funds == 1_000
