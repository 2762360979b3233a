from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: Any = None):
        message = f"{entity} not found" if entity_id is None else f"{entity} {entity_id} not found"
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details={"entity": entity, "id": entity_id}
        )

class InvalidAmountError(AppException):
    def __init__(self, message: str = "Credit amount must be greater than zero", amount: Any = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="INVALID_AMOUNT",
            details={"amount": amount}
        )

class InsufficientCreditsError(AppException):
    def __init__(self, required: int, available: Optional[int] = None):
        super().__init__(
            message="Company does not have enough credits",
            status_code=409,
            error_code="INSUFFICIENT_CREDITS",
            details={"required": required, "available": available}
        )

class BookingLimitReachedError(AppException):
    def __init__(self, limit: int):
        super().__init__(
            message="Daily booking limit reached for this company",
            status_code=409,
            error_code="BOOKING_LIMIT_REACHED",
            details={"limit": limit}
        )

class ConstraintViolationError(AppException):
    def __init__(self, message: str = "The change conflicts with existing data", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONSTRAINT_VIOLATION",
            details=details
        )

class StoreUnavailableError(AppException):
    def __init__(self, message: str = "The database is temporarily unavailable. Please retry.", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=503,
            error_code="STORE_UNAVAILABLE",
            details=details
        )

class AuthenticationError(AppException):
    def __init__(self, message: str = "User not authenticated"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="UNAUTHENTICATED"
        )

class AccessDeniedError(AppException):
    """Custom permission error. Named AccessDeniedError to avoid shadowing Python's built-in PermissionError."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="PERMISSION_DENIED"
        )
