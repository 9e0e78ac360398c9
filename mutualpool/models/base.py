# mutualpool/models/base.py
"""Base models for all ledger records."""

from pydantic import BaseModel
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class LedgerRecord(BaseModel):
    """Base for records held by the ledger store."""

    class Config:
        validate_assignment = True
        json_encoders = {
            datetime: lambda v: v.isoformat()
        }

    def snapshot(self):
        """Detached copy safe to hand to readers."""
        return self.model_copy(deep=True)
