"""
Custom Exceptions
=================

Raise these from endpoints and dependencies instead of HTTPException so that
every failure leaves the API in the same envelope:

    {"success": false, "message": "...", "error_code": "...", "details": {...}}

Usage:
    from app.core.exceptions import ComplaintNotFoundError

    if not complaint:
        raise ComplaintNotFoundError(complaint_id)
"""

from typing import Optional, Any, Dict, Iterable, List


class ComplaintSystemError(Exception):
    """Base exception for all service errors"""

    status_code: int = 500
    headers: Optional[Dict[str, str]] = None

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


# ============================================
# Validation Errors (400)
# ============================================

class ValidationError(ComplaintSystemError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, code: str = "VALIDATION_ERROR",
                 details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        if field:
            details.setdefault("field", field)
        super().__init__(message, code=code, details=details)


class MissingFieldsError(ValidationError):
    """One or more required fields are absent or blank"""

    def __init__(self, errors: Dict[str, str]):
        super().__init__(
            "Missing required fields",
            code="MISSING_FIELDS",
            details={"errors": errors}
        )


class InvalidChoiceError(ValidationError):
    """Value is not one of the allowed enum members"""

    def __init__(self, field: str, value: Any, allowed: Iterable[str], plural: Optional[str] = None):
        allowed = list(allowed)
        key = f"valid_{plural or field + 's'}"
        message = (
            f"Invalid {field}: '{value}'" if value not in (None, "")
            else f"{field.capitalize()} is required"
        )
        super().__init__(
            message,
            field=field,
            code=f"INVALID_{field.upper()}",
            details={key: allowed}
        )
        self.allowed = allowed


class NoUpdatesError(ValidationError):
    """Update request carried nothing to change"""

    def __init__(self, allowed_fields: List[str]):
        super().__init__(
            "No valid fields provided for update",
            code="NO_UPDATES",
            details={"allowed_fields": allowed_fields}
        )


class SelfProtectionError(ValidationError):
    """An administrator tried to demote or delete their own account"""

    def __init__(self, message: str, code: str):
        super().__init__(message, code=code)


# ============================================
# Authentication Errors (401)
# ============================================

class AuthenticationError(ComplaintSystemError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", code: str = "AUTH_FAILED"):
        super().__init__(message, code=code)


class TokenRequiredError(AuthenticationError):
    """No bearer token on a protected route"""

    def __init__(self):
        super().__init__("Access token required", code="TOKEN_REQUIRED")


class TokenExpiredError(AuthenticationError):
    """JWT token has expired"""

    def __init__(self):
        super().__init__("Token has expired", code="TOKEN_EXPIRED")


class InvalidTokenError(AuthenticationError):
    """JWT token is invalid"""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, code="INVALID_TOKEN")


class InvalidCredentialsError(AuthenticationError):
    """Computer number / password pair does not match"""

    def __init__(self):
        super().__init__("Invalid computer number or password", code="INVALID_CREDENTIALS")


# ============================================
# Authorization Errors (403)
# ============================================

class AuthorizationError(ComplaintSystemError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Access denied", code: str = "ACCESS_DENIED",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class InsufficientPermissionsError(AuthorizationError):
    """Caller's role is not in the route's allow-list"""

    def __init__(self, user_role: str, required_roles: List[str]):
        super().__init__(
            "Insufficient permissions",
            code="INSUFFICIENT_PERMISSIONS",
            details={"user_role": user_role, "required_roles": required_roles}
        )


# ============================================
# Resource Errors (404)
# ============================================

class ResourceNotFoundError(ComplaintSystemError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": str(resource_id)}
        )


class UserNotFoundError(ResourceNotFoundError):
    """User not found"""

    def __init__(self, computer_number: str):
        super().__init__("User", computer_number)


class ComplaintNotFoundError(ResourceNotFoundError):
    """Complaint not found"""

    def __init__(self, complaint_id: int):
        super().__init__("Complaint", complaint_id)


class MeetingNotFoundError(ResourceNotFoundError):
    """Meeting not found"""

    def __init__(self, meeting_id: int):
        super().__init__("Meeting", meeting_id)


# ============================================
# Conflict Errors (409)
# ============================================

class ConflictError(ComplaintSystemError):
    """Uniqueness constraint would be violated"""

    status_code = 409

    def __init__(self, message: str, code: str = "CONFLICT", field: Optional[str] = None):
        super().__init__(message, code=code, details={"field": field} if field else None)


# ============================================
# Rate Limit Errors (429)
# ============================================

class RateLimitExceededError(ComplaintSystemError):
    """Client used up its request allowance for the current window"""

    status_code = 429

    def __init__(self, limit: str, retry_after: int):
        super().__init__(
            "Too many requests from this client, please try again later.",
            code="RATE_LIMIT_EXCEEDED",
            details={"limit": limit}
        )
        self.headers = {"Retry-After": str(retry_after)}


# ============================================
# Helper function for API responses
# ============================================

def error_response(
    message: str,
    code: str,
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Build the failure envelope"""
    body: Dict[str, Any] = {
        "success": False,
        "message": message,
        "error_code": code,
    }
    if details:
        body["details"] = details
    return body


def exception_response(error: ComplaintSystemError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return error_response(error.message, error.code, error.details)
