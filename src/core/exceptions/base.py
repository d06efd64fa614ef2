from typing import Any, Dict, Optional
from fastapi import status


class ServiceErrorCode:
    """Standard error codes for services"""

    # Validation
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_ADDRESS = "INVALID_ADDRESS"
    INVALID_RARITY = "INVALID_RARITY"
    INVALID_TYPE = "INVALID_TYPE"
    INVALID_CURRENCY = "INVALID_CURRENCY"
    INVALID_TIER = "INVALID_TIER"
    AMOUNT_OUT_OF_LIMITS = "AMOUNT_OUT_OF_LIMITS"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    INSUFFICIENT_ALLOWANCE = "INSUFFICIENT_ALLOWANCE"

    # Lookup
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    CATALOG_ENTRY_NOT_FOUND = "CATALOG_ENTRY_NOT_FOUND"

    # Eligibility
    CLAIM_NOT_ALLOWED = "CLAIM_NOT_ALLOWED"
    CLAIM_ON_COOLDOWN = "CLAIM_ON_COOLDOWN"
    CLAIM_IN_PROGRESS = "CLAIM_IN_PROGRESS"
    DEPOSIT_NOT_ALLOWED = "DEPOSIT_NOT_ALLOWED"
    ACCOUNT_NOT_LINKED = "ACCOUNT_NOT_LINKED"

    # Consistency
    MINT_NOT_REFLECTED = "MINT_NOT_REFLECTED"
    TRANSFER_NOT_REFLECTED = "TRANSFER_NOT_REFLECTED"
    OFFCHAIN_UPDATE_FAILED = "OFFCHAIN_UPDATE_FAILED"
    CLAIM_RECORD_CONFLICT = "CLAIM_RECORD_CONFLICT"
    CATALOG_INCONSISTENT = "CATALOG_INCONSISTENT"

    # Upstream
    RPC_ERROR = "RPC_ERROR"
    TRANSACTION_FAILED = "TRANSACTION_FAILED"
    NOTION_ERROR = "NOTION_ERROR"
    PLAYFAB_ERROR = "PLAYFAB_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"

    # System
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ServiceError(Exception):
    """
    Standardized service error for internal use.
    Gets converted to proper HTTP response by error handler.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "status_code": self.status_code,
            "message": self.message,
            "details": self.details,
        }


class InvalidArgumentError(ServiceError):
    def __init__(
        self,
        message: str = "Invalid argument",
        code: str = ServiceErrorCode.INVALID_INPUT,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )


class NotFoundError(ServiceError):
    def __init__(
        self,
        message: str = "Resource not found",
        code: str = ServiceErrorCode.RECORD_NOT_FOUND,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )


class NotEligibleError(ServiceError):
    """A claim or deposit gate is closed, or a cooldown is still active."""

    def __init__(
        self,
        message: str = "Not eligible",
        code: str = ServiceErrorCode.CLAIM_NOT_ALLOWED,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
        )


class InconsistentStateError(ServiceError):
    """An external write did not take effect the way it reported."""

    def __init__(
        self,
        message: str = "Inconsistent state",
        code: str = ServiceErrorCode.MINT_NOT_REFLECTED,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


class UpstreamFailureError(ServiceError):
    """Wrapped network/provider error from an external collaborator."""

    def __init__(
        self,
        message: str = "Upstream service failed",
        code: str = ServiceErrorCode.SERVICE_UNAVAILABLE,
        details: Optional[Dict[str, Any]] = None,
    ):
        status_code = (
            status.HTTP_504_GATEWAY_TIMEOUT
            if code == ServiceErrorCode.TIMEOUT
            else status.HTTP_502_BAD_GATEWAY
        )
        super().__init__(
            code=code,
            message=message,
            status_code=status_code,
            details=details,
        )
