# mutualpool/storage/ledger_store.py
"""Ledger store: records, balances, pool counters and the transaction lock.

No business rules live here. The engine validates, then calls these
mutators inside ``transaction()``.
"""

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Optional, List, Iterator

from mutualpool.core.config import settings
from mutualpool.core.exceptions import RecordNotFoundError
from mutualpool.core.logging import get_logger
from mutualpool.models.claim import Claim
from mutualpool.models.ledger import PoolState, PoolSummary
from mutualpool.models.policy import Policy
from mutualpool.storage.base import read_json, write_json
from mutualpool.storage.claim_store import ClaimStore
from mutualpool.storage.policy_store import PolicyStore

logger = get_logger(__name__)


class LedgerStore:
    """Single shared mutable ledger state."""

    def __init__(self, data_dir: Optional[str] = None):
        self.policies = PolicyStore(data_dir)
        self.claims = ClaimStore(data_dir)
        self._state_path = Path(data_dir) / "ledger.json" if data_dir else None
        self._state = PoolState.model_validate(read_json(self._state_path))
        self._state_dirty = False
        self._lock = threading.RLock()
        self._depth = 0
        self._on_commit: List[Callable[[], None]] = []

    # ===================
    # Transactions
    # ===================

    @contextmanager
    def transaction(self) -> Iterator["LedgerStore"]:
        """Serialize a check-then-mutate unit; undo everything if it raises.

        The outermost transaction flushes to disk before it counts as
        committed, so a failed write rolls the in-memory state back too.
        ``after_commit`` callbacks run once the commit succeeded, still
        under the lock, so their side effects follow commit order.
        """
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                saved = (
                    self._state.snapshot(),
                    self.policies.checkpoint(),
                    self.claims.checkpoint(),
                )
            self._depth += 1
            try:
                yield self
                if outermost:
                    self.flush()
            except Exception:
                if outermost:
                    self._on_commit.clear()
                    self._state = saved[0]
                    self.policies.restore(saved[1])
                    self.claims.restore(saved[2])
                    # disk may hold part of the failed flush; rewrite it on the next commit
                    self._mark_dirty()
                    logger.warning("Ledger transaction rolled back")
                raise
            finally:
                self._depth -= 1
            if outermost:
                callbacks, self._on_commit = self._on_commit, []
                for callback in callbacks:
                    callback()

    def after_commit(self, callback: Callable[[], None]):
        """Run ``callback`` when the enclosing transaction commits."""
        self._on_commit.append(callback)

    def _mark_dirty(self):
        self._state_dirty = True
        self.policies.mark_dirty()
        self.claims.mark_dirty()

    def flush(self):
        self.policies.flush()
        self.claims.flush()
        if self._state_path is not None and self._state_dirty:
            write_json(self._state_path, self._state.model_dump(mode='json'))
            self._state_dirty = False

    def _touch(self):
        self._state_dirty = True

    # ===================
    # Id counters
    # ===================

    def next_policy_id(self) -> int:
        with self._lock:
            self._state.last_policy_id += 1
            self._touch()
            return self._state.last_policy_id

    def next_claim_id(self) -> int:
        with self._lock:
            self._state.last_claim_id += 1
            self._touch()
            return self._state.last_claim_id

    # ===================
    # Records
    # ===================

    def get_policy(self, policy_id: int) -> Policy:
        if not 1 <= policy_id <= self._state.last_policy_id:
            raise RecordNotFoundError(self.policies.kind, policy_id)
        return self.policies.get(policy_id)

    def get_claim(self, claim_id: int) -> Claim:
        if not 1 <= claim_id <= self._state.last_claim_id:
            raise RecordNotFoundError(self.claims.kind, claim_id)
        return self.claims.get(claim_id)

    def put_policy(self, policy: Policy) -> Policy:
        with self._lock:
            return self.policies.save(policy)

    def put_claim(self, claim: Claim) -> Claim:
        with self._lock:
            return self.claims.save(claim)

    def policy_ids_for(self, holder: str) -> List[int]:
        return self.policies.get_ids_by_holder(holder)

    def claim_ids_for(self, claimant: str) -> List[int]:
        return self.claims.get_ids_by_claimant(claimant)

    def approved_claim_ids_for(self, claimant: str) -> List[int]:
        return self.claims.get_approved_ids(claimant)

    # ===================
    # Balances
    # ===================

    def balance_of(self, holder: str) -> int:
        return self._state.balances.get(holder, 0)

    def credit_balance(self, holder: str, amount: int):
        with self._lock:
            balances = dict(self._state.balances)
            balances[holder] = balances.get(holder, 0) + amount
            self._state.balances = balances
            self._touch()

    def debit_all_and_zero(self, holder: str) -> int:
        with self._lock:
            balances = dict(self._state.balances)
            amount = balances.pop(holder, 0)
            self._state.balances = balances
            self._touch()
            return amount

    # ===================
    # Pool
    # ===================

    def available_funds(self) -> int:
        return self._state.available_funds

    def deposit(self, amount: int):
        """Premium received: held and immediately available."""
        with self._lock:
            self._state.funds_held += amount
            self._state.available_funds += amount
            self._state.total_premiums += amount
            self._touch()

    def earmark(self, amount: int):
        """Reserve available funds for an approved claim."""
        with self._lock:
            self._state.available_funds -= amount
            self._touch()

    def pay_out(self, amount: int):
        """Earmarked funds leave the pool."""
        with self._lock:
            self._state.funds_held -= amount
            self._state.total_paid_out += amount
            self._touch()

    def sweep(self) -> int:
        """Drain every available unit; earmarked funds stay."""
        with self._lock:
            amount = self._state.available_funds
            self._state.available_funds = 0
            self._state.funds_held -= amount
            self._state.total_swept += amount
            self._touch()
            return amount

    def summary(self) -> PoolSummary:
        with self._lock:
            state = self._state
            return PoolSummary(
                funds_held=state.funds_held,
                available_funds=state.available_funds,
                outstanding_balances=state.outstanding_balances,
                total_premiums=state.total_premiums,
                total_paid_out=state.total_paid_out,
                total_swept=state.total_swept,
                policy_count=state.last_policy_id,
                claim_count=state.last_claim_id,
                claims_by_status=self.claims.count_by_status(),
            )


# Singleton instance
_ledger_store: Optional[LedgerStore] = None


def get_ledger_store() -> LedgerStore:
    """Get the ledger store singleton."""
    global _ledger_store
    if _ledger_store is None:
        _ledger_store = LedgerStore(settings.ledger_dir)
        logger.info("Ledger store initialized", persistent=settings.PERSIST_LEDGER)
    return _ledger_store
