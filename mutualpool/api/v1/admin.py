from fastapi import APIRouter, Depends
from pydantic import BaseModel

from mutualpool.core.config import settings
from mutualpool.core.dependencies import get_caller, get_engine
from mutualpool.core.logging import get_logger
from mutualpool.services.insurance_engine import InsuranceEngine

logger = get_logger(__name__)
router = APIRouter()

class ProcessClaimRequest(BaseModel):
    approve: bool

class ProcessClaimResponse(BaseModel):
    success: bool
    claim_id: int
    status: str
    claim_amount: int

class EmergencyWithdrawResponse(BaseModel):
    success: bool
    amount: int

@router.get("/health")
def health_check(engine: InsuranceEngine = Depends(get_engine)):
    """Detailed health check."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "owner": engine.owner,
        "persistent": settings.PERSIST_LEDGER,
        "debug_mode": settings.DEBUG
    }

@router.post("/claims/{claim_id}/process", response_model=ProcessClaimResponse)
def process_claim(
    claim_id: int,
    request: ProcessClaimRequest,
    caller: str = Depends(get_caller),
    engine: InsuranceEngine = Depends(get_engine)
):
    """Approve or reject a pending claim (owner only)."""
    claim = engine.process_claim(caller, claim_id, request.approve)
    return ProcessClaimResponse(
        success=True,
        claim_id=claim.claim_id,
        status=claim.status.value,
        claim_amount=claim.claim_amount,
    )

@router.post("/emergency-withdraw", response_model=EmergencyWithdrawResponse)
def emergency_withdraw(caller: str = Depends(get_caller), engine: InsuranceEngine = Depends(get_engine)):
    """Sweep all available pool funds to the owner."""
    amount = engine.emergency_withdraw(caller)
    return EmergencyWithdrawResponse(success=True, amount=amount)
