from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from pydantic import BaseModel

from mutualpool.core.dependencies import get_caller, get_engine
from mutualpool.models.ledger import Notification, PoolSummary
from mutualpool.services.insurance_engine import InsuranceEngine

router = APIRouter()

# ===================
# Response Models
# ===================

class WithdrawResponse(BaseModel):
    success: bool
    holder: str
    amount: int

class FundsResponse(BaseModel):
    available_funds: int

class BalanceResponse(BaseModel):
    holder: str
    balance: int

class NotificationListResponse(BaseModel):
    total: int
    notifications: List[Notification]

# ===================
# Endpoints
# ===================

@router.post("/withdraw", response_model=WithdrawResponse)
def withdraw(caller: str = Depends(get_caller), engine: InsuranceEngine = Depends(get_engine)):
    """Pay out the caller's approved balance."""
    amount = engine.withdraw(caller)
    return WithdrawResponse(success=True, holder=caller, amount=amount)

@router.get("/funds", response_model=FundsResponse)
def get_available_funds(engine: InsuranceEngine = Depends(get_engine)):
    return FundsResponse(available_funds=engine.get_available_funds())

@router.get("/summary", response_model=PoolSummary)
def get_pool_summary(engine: InsuranceEngine = Depends(get_engine)):
    """Pool totals and claim counts for dashboards."""
    return engine.get_pool_summary()

@router.get("/balances/{holder}", response_model=BalanceResponse)
def get_balance(holder: str, engine: InsuranceEngine = Depends(get_engine)):
    return BalanceResponse(holder=holder, balance=engine.get_balance(holder))

@router.get("/notifications", response_model=NotificationListResponse)
def list_notifications(
    after: int = Query(0, ge=0, description="Return notifications with a higher sequence"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    engine: InsuranceEngine = Depends(get_engine)
):
    """Ordered notification feed for indexers."""
    notifications = engine.get_notifications(after=after, limit=limit)
    return NotificationListResponse(total=len(engine.notifications), notifications=notifications)
