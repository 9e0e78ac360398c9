from pydantic import BaseModel, Field
from datetime import datetime, timedelta

from mutualpool.models.base import LedgerRecord


# ===================
# Main Policy Model
# ===================

class Policy(LedgerRecord):
    """Coverage agreement held by a single identity."""
    policy_id: int = Field(..., ge=1)
    holder: str
    coverage_amount: int = Field(..., gt=0)
    premium: int = Field(..., ge=0)
    start_time: datetime
    end_time: datetime
    is_active: bool = True
    has_claimed: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "policy_id": 1,
                "holder": "alice",
                "coverage_amount": 10000,
                "premium": 100,
                "start_time": "2024-01-01T00:00:00+00:00",
                "end_time": "2024-01-31T00:00:00+00:00",
                "is_active": True,
                "has_claimed": False
            }
        }

    def claim_window_opens_at(self, waiting_period: timedelta) -> datetime:
        return self.start_time + waiting_period

    def is_expired_at(self, moment: datetime) -> bool:
        return moment > self.end_time


# ===================
# Engine Results
# ===================

class PolicyReceipt(BaseModel):
    """Outcome of a successful policy purchase."""
    policy_id: int
    premium: int
    refund: int = 0

