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

class ClaimCreateRequest(BaseModel):
    policy_id: int = Field(..., ge=1)
    claim_amount: int = Field(..., ge=0)
    description: str = ""

class ClaimSubmitResponse(BaseModel):
    success: bool
    claim_id: int
    message: str
    status: str

class ClaimResponse(BaseModel):
    claim_id: int
    policy_id: int
    claimant: str
    claim_amount: int
    description: str
    timestamp: datetime
    status: str

class HolderClaimsResponse(BaseModel):
    holder: str
    claim_ids: List[int]

# ===================
# Endpoints
# ===================

@router.post("/", response_model=ClaimSubmitResponse, status_code=201)
def submit_claim(
    claim: ClaimCreateRequest,
    caller: str = Depends(get_caller),
    engine: InsuranceEngine = Depends(get_engine)
):
    """Submit a claim against one of the caller's policies."""
    claim_id = engine.submit_claim(
        caller=caller,
        policy_id=claim.policy_id,
        claim_amount=claim.claim_amount,
        description=claim.description,
    )
    return ClaimSubmitResponse(
        success=True,
        claim_id=claim_id,
        message="Claim submitted successfully",
        status="pending",
    )

@router.get("/holder/{holder}", response_model=HolderClaimsResponse)
def get_user_claims(holder: str, engine: InsuranceEngine = Depends(get_engine)):
    return HolderClaimsResponse(holder=holder, claim_ids=engine.get_user_claims(holder))

@router.get("/{claim_id}", response_model=ClaimResponse)
def get_claim(claim_id: int, engine: InsuranceEngine = Depends(get_engine)):
    """Get complete claim details."""
    claim = engine.get_claim(claim_id)
    return ClaimResponse(**claim.model_dump(mode="json"))
