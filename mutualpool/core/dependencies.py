from fastapi import Header

from mutualpool.core.logging import get_logger

logger = get_logger(__name__)

# ===================
# Service Instances
# ===================

def get_engine():
    """Get insurance engine instance."""
    from mutualpool.services.insurance_engine import get_insurance_engine
    return get_insurance_engine()

# ===================
# Caller Identity
# ===================

def get_caller(x_caller_id: str = Header(..., min_length=1, description="Identity of the calling account")) -> str:
    """Identity of the caller; signature checks happen upstream of this service."""
    return x_caller_id
