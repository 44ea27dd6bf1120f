"""Custom exception classes for the School Management API.

Every error raised by the service layer derives from SchoolAPIError and
carries a human-readable message together with the HTTP status the API
returns for it.
"""

from typing import Optional


class SchoolAPIError(Exception):
    """Base exception for all School Management API errors."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        """Initialize the exception.

        Args:
            message: Human-readable description. Falls back to the class
                default message.
            status_code: Optional override of the class HTTP status.
        """
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(SchoolAPIError):
    """Raised when input is malformed or semantically invalid."""

    status_code = 400
    default_message = "Validation error"


class NotFoundError(SchoolAPIError):
    """Raised when a referenced entity does not exist."""

    status_code = 404
    default_message = "Resource not found"


class ConflictError(SchoolAPIError):
    """Raised on uniqueness or state violations."""

    status_code = 400
    default_message = "Resource already exists"


class UnauthenticatedError(SchoolAPIError):
    """Raised when a request carries no valid credentials."""

    status_code = 401
    default_message = "Authentication required"


class ForbiddenError(SchoolAPIError):
    """Raised when the caller's role or ownership is insufficient."""

    status_code = 403
    default_message = "Insufficient permissions"


class BusinessRuleViolation(SchoolAPIError):
    """Raised when a domain rule (capacity, marks, audience) rejects a write."""

    status_code = 400
    default_message = "Business rule violation"


# --- Authentication errors ---


class DuplicateEmailError(ConflictError):
    default_message = "User with this email already exists"


class InvalidCredentialsError(UnauthenticatedError):
    """Raised for unknown emails and wrong passwords alike."""

    default_message = "Invalid email or password"


class AccountNotActiveError(UnauthenticatedError):
    default_message = "Account is not active"


class TokenInvalidError(UnauthenticatedError):
    """Raised for any token verification failure (expired, malformed, signature)."""

    default_message = "Invalid or expired token"


class InvalidRefreshTokenError(UnauthenticatedError):
    default_message = "Invalid refresh token"


class InvalidOrExpiredTokenError(ValidationError):
    """Raised when a password reset token is unknown or past its expiry."""

    default_message = "Invalid or expired reset token"


class IncorrectCurrentPasswordError(ValidationError):
    default_message = "Current password is incorrect"


class EmailDeliveryFailedError(SchoolAPIError):
    status_code = 500
    default_message = "Failed to send email"


# --- Relational integrity errors ---


class AlreadyEnrolledError(ConflictError):
    default_message = "Student is already enrolled in this class"


class CapacityExceededError(BusinessRuleViolation):
    default_message = "Class is at maximum capacity"


class AlreadyEnrolledInSubjectError(ConflictError):
    default_message = "Student is already enrolled in this subject"


class DuplicateGradeError(ConflictError):
    default_message = "Grade already exists for this student in this exam"
