# mutualpool/services/insurance_engine.py
"""Policy/claim state machine and premium pool accounting."""

from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple, Dict, Any

from mutualpool.core.config import Settings, settings as default_settings
from mutualpool.core.constants import (
    ClaimStatus, NotificationKind, TransferReason, SECONDS_PER_DAY
)
from mutualpool.core.exceptions import (
    LedgerException, RecordNotFoundError,
    InvalidPolicy, InvalidClaim, NotHolder, NotOwner,
    AlreadyClaimed, AlreadyProcessed, ExceedsCoverage, PolicyExpired,
    ClaimWindowNotOpen, InsufficientPayment, InsufficientPoolFunds,
    NothingToWithdraw, InvalidCoverage, InvalidDuration,
    InvalidClaimStatusTransition, InvalidClaimAmount,
)
from mutualpool.core.logging import get_logger
from mutualpool.models.base import utcnow
from mutualpool.models.claim import Claim
from mutualpool.models.ledger import Notification, PoolSummary, Transfer
from mutualpool.models.policy import Policy, PolicyReceipt
from mutualpool.services.notifications import NotificationLog
from mutualpool.services.transfers import TransferOutbox
from mutualpool.storage.ledger_store import LedgerStore, get_ledger_store

logger = get_logger(__name__)

Clock = Callable[[], datetime]


class InsuranceEngine:
    """Operations over the shared ledger.

    Every mutating call validates and mutates inside one store transaction,
    so a rejected call leaves the ledger untouched. Notifications and
    transfers go out once the transaction commits, in commit order.
    """

    def __init__(
        self,
        store: LedgerStore,
        notifications: Optional[NotificationLog] = None,
        transfers: Optional[TransferOutbox] = None,
        config: Optional[Settings] = None,
        clock: Clock = utcnow
    ):
        self.store = store
        self.notifications = notifications or NotificationLog()
        self.transfers = transfers or TransferOutbox()
        self.config = config or default_settings
        self.clock = clock

    # ===================
    # Configuration
    # ===================

    @property
    def owner(self) -> str:
        return self.config.OWNER_ID

    @property
    def min_duration_seconds(self) -> int:
        return self.config.MIN_POLICY_DURATION_DAYS * SECONDS_PER_DAY

    @property
    def max_duration_seconds(self) -> Optional[int]:
        if self.config.MAX_POLICY_DURATION_DAYS is None:
            return None
        return self.config.MAX_POLICY_DURATION_DAYS * SECONDS_PER_DAY

    @property
    def waiting_period(self) -> timedelta:
        return timedelta(days=self.config.CLAIM_WAITING_PERIOD_DAYS)

    def premium_for(self, coverage_amount: int) -> int:
        """Premium in whole units, rounded down."""
        return coverage_amount * self.config.PREMIUM_RATE_BPS // self.config.BASIS_POINTS

    # ===================
    # Helpers
    # ===================

    def _reject(self, error: LedgerException) -> LedgerException:
        logger.warning(f"Rejected: {error.message}", error_code=error.error_code)
        return error

    def _require_owner(self, caller: str):
        if caller != self.owner:
            raise self._reject(NotOwner(caller))

    def _load_policy(self, policy_id: int) -> Policy:
        try:
            return self.store.get_policy(policy_id)
        except RecordNotFoundError:
            raise self._reject(InvalidPolicy(policy_id)) from None

    def _load_claim(self, claim_id: int) -> Claim:
        try:
            return self.store.get_claim(claim_id)
        except RecordNotFoundError:
            raise self._reject(InvalidClaim(claim_id)) from None

    @staticmethod
    def _transition(claim: Claim, new_status: ClaimStatus) -> Claim:
        if not claim.status.can_transition_to(new_status):
            raise InvalidClaimStatusTransition(claim.status.value, new_status.value)
        claim.status = new_status
        return claim

    def _publish(
        self,
        store: LedgerStore,
        events: List[Tuple[NotificationKind, Dict[str, Any]]],
        transfers: List[Tuple[str, int, TransferReason, Dict[str, Any]]]
    ):
        """Queue notifications and transfers to go out when ``store`` commits."""
        def emit():
            for kind, payload in events:
                self.notifications.emit(kind, **payload)
            for recipient, amount, reason, reference in transfers:
                self.transfers.send(recipient, amount, reason, **reference)

        store.after_commit(emit)

    # ===================
    # Policies
    # ===================

    def create_policy(
        self,
        caller: str,
        coverage_amount: int,
        duration_seconds: int,
        payment: int
    ) -> PolicyReceipt:
        """Buy a policy; any payment above the premium is refunded."""
        if coverage_amount <= 0:
            raise self._reject(InvalidCoverage(coverage_amount))
        maximum = self.max_duration_seconds
        if duration_seconds < self.min_duration_seconds or (maximum is not None and duration_seconds > maximum):
            raise self._reject(InvalidDuration(duration_seconds, self.min_duration_seconds, maximum))

        premium = self.premium_for(coverage_amount)
        if payment < premium:
            raise self._reject(InsufficientPayment(payment, premium))
        refund = payment - premium

        with self.store.transaction() as store:
            now = self.clock()
            try:
                end_time = now + timedelta(seconds=duration_seconds)
            except OverflowError:
                # end time past the last representable datetime
                raise self._reject(
                    InvalidDuration(duration_seconds, self.min_duration_seconds, maximum)
                ) from None

            policy = Policy(
                policy_id=store.next_policy_id(),
                holder=caller,
                coverage_amount=coverage_amount,
                premium=premium,
                start_time=now,
                end_time=end_time,
            )
            store.put_policy(policy)
            store.deposit(premium)
            self._publish(
                store,
                events=[
                    (NotificationKind.POLICY_CREATED, {
                        "policy_id": policy.policy_id,
                        "holder": caller,
                        "coverage_amount": coverage_amount,
                    }),
                    (NotificationKind.PREMIUM_PAID, {
                        "policy_id": policy.policy_id,
                        "holder": caller,
                        "premium": premium,
                    }),
                ],
                transfers=[
                    (caller, refund, TransferReason.PREMIUM_REFUND, {"policy_id": policy.policy_id})
                ] if refund > 0 else [],
            )

        logger.info(
            f"Policy {policy.policy_id} created",
            holder=caller, coverage=coverage_amount, premium=premium
        )
        return PolicyReceipt(policy_id=policy.policy_id, premium=premium, refund=refund)

    def get_policy(self, policy_id: int) -> Policy:
        return self._load_policy(policy_id)

    def get_user_policies(self, holder: str) -> List[int]:
        return self.store.policy_ids_for(holder)

    # ===================
    # Claims
    # ===================

    def submit_claim(
        self,
        caller: str,
        policy_id: int,
        claim_amount: int,
        description: str
    ) -> int:
        """File a claim against the caller's own policy; returns the claim id."""
        with self.store.transaction() as store:
            policy = self._load_policy(policy_id)
            if not policy.is_active:
                raise self._reject(InvalidPolicy(policy_id, reason="inactive"))
            if caller != policy.holder:
                raise self._reject(NotHolder(caller, policy_id))
            if policy.has_claimed:
                raise self._reject(AlreadyClaimed(policy_id))
            if claim_amount < 0:
                raise self._reject(InvalidClaimAmount(claim_amount))
            if claim_amount > policy.coverage_amount:
                raise self._reject(ExceedsCoverage(claim_amount, policy.coverage_amount))

            now = self.clock()
            if policy.is_expired_at(now):
                raise self._reject(PolicyExpired(policy_id, policy.end_time.isoformat()))
            opens_at = policy.claim_window_opens_at(self.waiting_period)
            if now < opens_at:
                raise self._reject(ClaimWindowNotOpen(policy_id, opens_at.isoformat()))

            claim = Claim(
                claim_id=store.next_claim_id(),
                policy_id=policy_id,
                claimant=caller,
                claim_amount=claim_amount,
                description=description,
                timestamp=now,
            )
            store.put_claim(claim)
            policy.has_claimed = True
            store.put_policy(policy)
            self._publish(
                store,
                events=[(NotificationKind.CLAIM_SUBMITTED, {
                    "claim_id": claim.claim_id,
                    "policy_id": policy_id,
                    "claimant": caller,
                    "claim_amount": claim_amount,
                })],
                transfers=[],
            )

        logger.info(f"Claim {claim.claim_id} submitted", policy_id=policy_id, amount=claim_amount)
        return claim.claim_id

    def process_claim(self, caller: str, claim_id: int, approve: bool) -> Claim:
        """Owner decision on a pending claim."""
        self._require_owner(caller)
        with self.store.transaction() as store:
            claim = self._load_claim(claim_id)
            if not claim.is_pending:
                raise self._reject(AlreadyProcessed(claim_id, claim.status.value))

            if approve:
                available = store.available_funds()
                if available < claim.claim_amount:
                    raise self._reject(InsufficientPoolFunds(claim.claim_amount, available))
                self._transition(claim, ClaimStatus.APPROVED)
                store.put_claim(claim)
                store.earmark(claim.claim_amount)
                store.credit_balance(claim.claimant, claim.claim_amount)
            else:
                self._transition(claim, ClaimStatus.REJECTED)
                store.put_claim(claim)
                policy = store.get_policy(claim.policy_id)
                policy.has_claimed = False
                store.put_policy(policy)
            self._publish(
                store,
                events=[(NotificationKind.CLAIM_PROCESSED, {
                    "claim_id": claim_id,
                    "status": claim.status.value,
                    "claim_amount": claim.claim_amount,
                })],
                transfers=[],
            )

        logger.info(
            f"Claim {claim_id} {claim.status.value}",
            claimant=claim.claimant, amount=claim.claim_amount
        )
        return claim

    def get_claim(self, claim_id: int) -> Claim:
        return self._load_claim(claim_id)

    def get_user_claims(self, holder: str) -> List[int]:
        return self.store.claim_ids_for(holder)

    # ===================
    # Settlement
    # ===================

    def withdraw(self, caller: str) -> int:
        """Pay out the caller's whole balance and mark their approved claims paid."""
        with self.store.transaction() as store:
            if store.balance_of(caller) <= 0:
                raise self._reject(NothingToWithdraw(caller))
            amount = store.debit_all_and_zero(caller)
            store.pay_out(amount)
            settled = store.approved_claim_ids_for(caller)
            for claim_id in settled:
                claim = store.get_claim(claim_id)
                self._transition(claim, ClaimStatus.PAID)
                store.put_claim(claim)
            self._publish(
                store,
                events=[],
                transfers=[(caller, amount, TransferReason.CLAIM_PAYOUT, {"claim_ids": settled})],
            )

        logger.info("Balance withdrawn", holder=caller, amount=amount, claims=settled)
        return amount

    def emergency_withdraw(self, caller: str) -> int:
        """Sweep every available unit to the owner. Outstanding balances stay owed."""
        self._require_owner(caller)
        with self.store.transaction() as store:
            amount = store.sweep()
            if amount > 0:
                self._publish(store, events=[], transfers=[(caller, amount, TransferReason.EMERGENCY_SWEEP, {})])

        logger.warning("Emergency withdrawal", owner=caller, amount=amount)
        return amount

    # ===================
    # Views
    # ===================

    def get_available_funds(self) -> int:
        return self.store.available_funds()

    def get_balance(self, holder: str) -> int:
        return self.store.balance_of(holder)

    def get_pool_summary(self) -> PoolSummary:
        return self.store.summary()

    def get_notifications(self, after: int = 0, limit: Optional[int] = None) -> List[Notification]:
        return self.notifications.list(after=after, limit=limit)

    def get_transfers(self, recipient: Optional[str] = None) -> List[Transfer]:
        return self.transfers.list(recipient)


# Singleton
_insurance_engine: Optional[InsuranceEngine] = None


def get_insurance_engine() -> InsuranceEngine:
    """Get insurance engine singleton."""
    global _insurance_engine
    if _insurance_engine is None:
        _insurance_engine = InsuranceEngine(store=get_ledger_store())
        logger.info("Insurance engine initialized", owner=_insurance_engine.owner)
    return _insurance_engine
