from pydantic import BaseModel, Field
from typing import Dict, Any
from datetime import datetime

from mutualpool.core.constants import NotificationKind, TransferReason
from mutualpool.models.base import LedgerRecord, utcnow


# ===================
# Pool Accounting
# ===================

class PoolState(LedgerRecord):
    """Counters and balances owned by the ledger store."""
    last_policy_id: int = 0
    last_claim_id: int = 0
    funds_held: int = 0
    available_funds: int = 0
    total_premiums: int = 0
    total_paid_out: int = 0
    total_swept: int = 0
    balances: Dict[str, int] = Field(default_factory=dict)

    @property
    def outstanding_balances(self) -> int:
        return sum(self.balances.values())


class PoolSummary(BaseModel):
    """Read-only view of the pool."""
    funds_held: int
    available_funds: int
    outstanding_balances: int
    total_premiums: int
    total_paid_out: int
    total_swept: int
    policy_count: int
    claim_count: int
    claims_by_status: Dict[str, int] = Field(default_factory=dict)


# ===================
# Collaborator Signals
# ===================

class Notification(BaseModel):
    """Append-only signal for indexers and dashboards."""
    sequence: int
    kind: NotificationKind
    payload: Dict[str, Any] = Field(default_factory=dict)
    emitted_at: datetime = Field(default_factory=utcnow)


class Transfer(BaseModel):
    """Outgoing payment handed to the external payment rail."""
    recipient: str
    amount: int = Field(..., gt=0)
    reason: TransferReason
    reference: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
