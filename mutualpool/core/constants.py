# mutualpool/core/constants.py
"""Application constants and enums."""

from enum import Enum
from typing import List


SECONDS_PER_DAY = 24 * 60 * 60


# ===================
# Claim Constants
# ===================

class ClaimStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"

    @classmethod
    def values(cls) -> List[str]:
        return [e.value for e in cls]

    @classmethod
    def valid_transitions(cls) -> dict:
        """Valid status transitions."""
        return {
            cls.PENDING: [cls.APPROVED, cls.REJECTED],
            cls.APPROVED: [cls.PAID],
            cls.REJECTED: [],
            cls.PAID: [],
        }

    def can_transition_to(self, new_status: "ClaimStatus") -> bool:
        return new_status in self.valid_transitions()[self]


# ===================
# Notification Constants
# ===================

class NotificationKind(str, Enum):
    POLICY_CREATED = "policy_created"
    PREMIUM_PAID = "premium_paid"
    CLAIM_SUBMITTED = "claim_submitted"
    CLAIM_PROCESSED = "claim_processed"


# ===================
# Transfer Constants
# ===================

class TransferReason(str, Enum):
    PREMIUM_REFUND = "premium_refund"
    CLAIM_PAYOUT = "claim_payout"
    EMERGENCY_SWEEP = "emergency_sweep"
