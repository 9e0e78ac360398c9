from pydantic import Field
from datetime import datetime

from mutualpool.core.constants import ClaimStatus
from mutualpool.models.base import LedgerRecord


class Claim(LedgerRecord):
    """Request for payout against a policy."""
    claim_id: int = Field(..., ge=1)
    policy_id: int = Field(..., ge=1)
    claimant: str
    claim_amount: int = Field(..., ge=0)
    description: str = ""
    timestamp: datetime
    status: ClaimStatus = ClaimStatus.PENDING

    class Config:
        json_schema_extra = {
            "example": {
                "claim_id": 1,
                "policy_id": 1,
                "claimant": "alice",
                "claim_amount": 5000,
                "description": "Water damage to kitchen",
                "timestamp": "2024-01-31T00:00:00+00:00",
                "status": "pending"
            }
        }

    @property
    def is_pending(self) -> bool:
        return self.status == ClaimStatus.PENDING

