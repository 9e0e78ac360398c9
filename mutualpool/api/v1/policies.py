from fastapi import APIRouter, Depends
from typing import List
from pydantic import BaseModel, Field
from datetime import datetime

from mutualpool.core.dependencies import get_caller, get_engine
from mutualpool.services.insurance_engine import InsuranceEngine

router = APIRouter()

# ===================
# Request/Response Models
# ===================

class PolicyCreateRequest(BaseModel):
    coverage_amount: int = Field(..., ge=0, description="Maximum payable on a successful claim")
    duration_seconds: int = Field(..., ge=0, description="Policy length in seconds")
    payment: int = Field(..., ge=0, description="Amount sent with the purchase")

class PolicyCreateResponse(BaseModel):
    success: bool
    policy_id: int
    premium: int
    refund: int
    message: str

class PolicyResponse(BaseModel):
    policy_id: int
    holder: str
    coverage_amount: int
    premium: int
    start_time: datetime
    end_time: datetime
    is_active: bool
    has_claimed: bool

class HolderPoliciesResponse(BaseModel):
    holder: str
    policy_ids: List[int]

# ===================
# Endpoints
# ===================

@router.post("/", response_model=PolicyCreateResponse, status_code=201)
def create_policy(
    request: PolicyCreateRequest,
    caller: str = Depends(get_caller),
    engine: InsuranceEngine = Depends(get_engine)
):
    """Buy a policy. The premium is 1% of coverage; overpayment is refunded."""
    receipt = engine.create_policy(
        caller=caller,
        coverage_amount=request.coverage_amount,
        duration_seconds=request.duration_seconds,
        payment=request.payment,
    )
    return PolicyCreateResponse(
        success=True,
        policy_id=receipt.policy_id,
        premium=receipt.premium,
        refund=receipt.refund,
        message="Policy created",
    )

@router.get("/holder/{holder}", response_model=HolderPoliciesResponse)
def get_user_policies(holder: str, engine: InsuranceEngine = Depends(get_engine)):
    """List policy ids owned by a holder."""
    return HolderPoliciesResponse(holder=holder, policy_ids=engine.get_user_policies(holder))

@router.get("/{policy_id}", response_model=PolicyResponse)
def get_policy(policy_id: int, engine: InsuranceEngine = Depends(get_engine)):
    """Get complete policy details."""
    return PolicyResponse(**engine.get_policy(policy_id).model_dump())
