"""Custom exceptions for the password reset flow.

Every failure the reset endpoints can report is one of the classes below. The
message is user-facing and must never carry an OTP, reset token or password.
"""

from __future__ import annotations

from typing import Optional, Dict, Any


class ResetServiceException(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 400,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.headers = headers
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ValidationError(ResetServiceException):
    """Raised when a required input is missing or malformed."""

    def __init__(self, message: str = "Invalid request", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="VALIDATION_ERROR", details=details, status_code=400)


class NotFoundError(ResetServiceException):
    """Raised when no user matches the submitted email."""

    def __init__(self, message: str = "User not found", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="NOT_FOUND", details=details, status_code=404)


class InvalidCredentialError(ResetServiceException):
    """Raised when a submitted OTP does not match the stored one."""

    def __init__(self, message: str = "Invalid OTP"):
        super().__init__(message, error_code="INVALID_OTP", status_code=400)


class InvalidTokenError(ResetServiceException):
    """Raised when no record holds the submitted reset token."""

    def __init__(self, message: str = "Invalid reset token"):
        super().__init__(message, error_code="INVALID_TOKEN", status_code=404)


class ExpiredError(ResetServiceException):
    """Raised when an OTP or reset token is used after its window closed."""

    def __init__(self, message: str = "Expired"):
        super().__init__(message, error_code="EXPIRED", status_code=400)


class DeliveryError(ResetServiceException):
    """Raised when the email transport fails to deliver a message."""

    def __init__(self, message: str = "Failed to send OTP email"):
        super().__init__(message, error_code="DELIVERY_FAILED", status_code=500)


class ProviderError(ResetServiceException):
    """Raised when the identity provider rejects a credential update."""

    def __init__(self, message: str = "Identity provider rejected the update"):
        super().__init__(message, error_code="PROVIDER_ERROR", status_code=500)


class InternalError(ResetServiceException):
    """Raised for unexpected failures, e.g. an unreachable directory."""

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, error_code="INTERNAL_ERROR", status_code=500)
