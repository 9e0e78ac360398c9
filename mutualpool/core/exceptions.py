# mutualpool/core/exceptions.py
"""Custom exceptions for the MutualPool ledger.

Every engine failure is a rejected precondition raised before any ledger
mutation, so callers may retry with corrected inputs.
"""

from typing import Optional, Dict, Any


class LedgerException(Exception):
    """Base exception for all MutualPool errors."""

    status_code: int = 400

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# ===================
# Access Exceptions
# ===================

class AccessException(LedgerException):
    """Base exception for caller identity errors."""
    status_code = 403


class NotOwner(AccessException):
    """Privileged operation called by someone other than the owner."""

    def __init__(self, caller: str):
        super().__init__(
            message=f"Caller {caller} is not the pool owner",
            error_code="NOT_OWNER",
            details={"caller": caller}
        )


class NotHolder(AccessException):
    """Caller does not hold the referenced policy."""

    def __init__(self, caller: str, policy_id: int):
        super().__init__(
            message=f"Caller {caller} is not the holder of policy {policy_id}",
            error_code="NOT_HOLDER",
            details={"caller": caller, "policy_id": policy_id}
        )


# ===================
# Policy Exceptions
# ===================

class PolicyException(LedgerException):
    """Base exception for policy-related errors."""
    pass


class InvalidPolicy(PolicyException):
    """Policy id out of range or policy inactive."""
    status_code = 404

    def __init__(self, policy_id: int, reason: str = "not found"):
        super().__init__(
            message=f"Invalid policy {policy_id}: {reason}",
            error_code="INVALID_POLICY",
            details={"policy_id": policy_id, "reason": reason}
        )


class PolicyValidationError(PolicyException):
    """Policy terms rejected at creation."""
    status_code = 422


class InvalidCoverage(PolicyValidationError):

    def __init__(self, coverage_amount: int):
        super().__init__(
            message=f"Coverage amount must be positive, got {coverage_amount}",
            error_code="INVALID_COVERAGE",
            details={"coverage_amount": coverage_amount}
        )


class InvalidDuration(PolicyValidationError):

    def __init__(self, duration_seconds: int, minimum_seconds: int, maximum_seconds: Optional[int] = None):
        bound = f">= {minimum_seconds}s"
        if maximum_seconds is not None:
            bound += f" and <= {maximum_seconds}s"
        super().__init__(
            message=f"Policy duration must be {bound}, got {duration_seconds}s",
            error_code="INVALID_DURATION",
            details={
                "duration_seconds": duration_seconds,
                "minimum_seconds": minimum_seconds,
                "maximum_seconds": maximum_seconds,
            }
        )


class InsufficientPayment(PolicyException):
    """Payment does not cover the premium."""
    status_code = 402

    def __init__(self, payment: int, premium: int):
        super().__init__(
            message=f"Payment {payment} is below the required premium {premium}",
            error_code="INSUFFICIENT_PAYMENT",
            details={"payment": payment, "premium": premium}
        )


class AlreadyClaimed(PolicyException):
    """Policy already has an open claim."""
    status_code = 409

    def __init__(self, policy_id: int):
        super().__init__(
            message=f"Policy {policy_id} already has an open claim",
            error_code="ALREADY_CLAIMED",
            details={"policy_id": policy_id}
        )


class PolicyExpired(PolicyException):
    status_code = 409

    def __init__(self, policy_id: int, end_time: str):
        super().__init__(
            message=f"Policy {policy_id} expired at {end_time}",
            error_code="POLICY_EXPIRED",
            details={"policy_id": policy_id, "end_time": end_time}
        )


class ClaimWindowNotOpen(PolicyException):
    status_code = 409

    def __init__(self, policy_id: int, opens_at: str):
        super().__init__(
            message=f"Claims on policy {policy_id} open at {opens_at}",
            error_code="CLAIM_WINDOW_NOT_OPEN",
            details={"policy_id": policy_id, "opens_at": opens_at}
        )


# ===================
# Claim Exceptions
# ===================

class ClaimException(LedgerException):
    """Base exception for claim-related errors."""
    pass


class InvalidClaim(ClaimException):
    """Claim id out of range."""
    status_code = 404

    def __init__(self, claim_id: int):
        super().__init__(
            message=f"Invalid claim {claim_id}",
            error_code="INVALID_CLAIM",
            details={"claim_id": claim_id}
        )


class ExceedsCoverage(ClaimException):
    status_code = 422

    def __init__(self, claim_amount: int, coverage_amount: int):
        super().__init__(
            message=f"Claim amount {claim_amount} exceeds coverage {coverage_amount}",
            error_code="EXCEEDS_COVERAGE",
            details={"claim_amount": claim_amount, "coverage_amount": coverage_amount}
        )


class InvalidClaimAmount(ClaimException):
    status_code = 422

    def __init__(self, claim_amount: int):
        super().__init__(
            message=f"Claim amount must not be negative, got {claim_amount}",
            error_code="INVALID_CLAIM_AMOUNT",
            details={"claim_amount": claim_amount}
        )


class AlreadyProcessed(ClaimException):
    status_code = 409

    def __init__(self, claim_id: int, status: str):
        super().__init__(
            message=f"Claim {claim_id} was already processed (status: {status})",
            error_code="ALREADY_PROCESSED",
            details={"claim_id": claim_id, "status": status}
        )


class InvalidClaimStatusTransition(ClaimException):
    """Invalid claim status transition."""
    status_code = 409

    def __init__(self, current_status: str, new_status: str):
        super().__init__(
            message=f"Cannot transition from {current_status} to {new_status}",
            error_code="INVALID_STATUS_TRANSITION",
            details={"current_status": current_status, "new_status": new_status}
        )


# ===================
# Pool Exceptions
# ===================

class PoolException(LedgerException):
    """Base exception for pool accounting errors."""
    status_code = 409


class InsufficientPoolFunds(PoolException):

    def __init__(self, requested: int, available: int):
        super().__init__(
            message=f"Pool has {available} available, {requested} requested",
            error_code="INSUFFICIENT_POOL_FUNDS",
            details={"requested": requested, "available": available}
        )


class NothingToWithdraw(PoolException):

    def __init__(self, holder: str):
        super().__init__(
            message=f"No balance to withdraw for {holder}",
            error_code="NOTHING_TO_WITHDRAW",
            details={"holder": holder}
        )


# ===================
# Storage Exceptions
# ===================

class StorageException(LedgerException):
    """Base exception for storage-related errors."""
    status_code = 500


class RecordNotFoundError(StorageException):
    """Record id outside the assigned range."""
    status_code = 404

    def __init__(self, kind: str, record_id: int):
        super().__init__(
            message=f"{kind} not found: {record_id}",
            error_code="RECORD_NOT_FOUND",
            details={"kind": kind, "record_id": record_id}
        )


class StorageError(StorageException):
    """Ledger snapshot could not be read or written."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(
            message=f"Ledger storage failed: {message}",
            error_code="STORAGE_ERROR",
            details={"path": path} if path else {}
        )
