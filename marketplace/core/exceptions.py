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

class ValidationError(AppException):
    """Form-level validation failure. `details` maps field name to message."""
    def __init__(self, errors: Dict[str, str], message: str = "Validation failed"):
        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_ERROR",
            details=errors
        )

    @property
    def errors(self) -> Dict[str, str]:
        return self.details or {}

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: Any = None):
        message = f"{entity} not found"
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details={"entity": entity, "id": entity_id} if entity_id is not None else None
        )

class InvalidStateError(AppException):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=409,
            error_code="INVALID_STATE",
            details=details
        )

class InvalidTransitionError(AppException):
    def __init__(self, entity: str, current: str, requested: str):
        super().__init__(
            message=f"Cannot move {entity} from '{current}' to '{requested}'",
            status_code=409,
            error_code="INVALID_TRANSITION",
            details={"entity": entity, "from": current, "to": requested}
        )

class OutOfRangeError(AppException):
    def __init__(self, amount: float, minimum: float, maximum: float):
        super().__init__(
            message=f"Bid amount {amount:g} is outside the job budget [{minimum:g}, {maximum:g}]",
            status_code=400,
            error_code="OUT_OF_RANGE",
            details={"amount": amount, "min": minimum, "max": maximum}
        )

class AuthenticationError(AppException):
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTH_FAILED"
        )

class AccessDeniedError(AppException):
    """Custom permission error. Named AccessDeniedError to avoid shadowing Python's built-in PermissionError."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="PERMISSION_DENIED"
        )
