"""Exceptions raised by the registration pipeline.

Every error carries a machine-readable ``code`` and the HTTP status the API
answers with. Handlers in ``main.py`` render them through the response
envelope; nothing below the routers knows about HTTP beyond these numbers.
"""

from typing import Any, Dict, Optional


class RegistrationError(Exception):
    """Base class for pipeline errors."""
    code = "REGISTRATION_ERROR"
    status_code = 400
    retryable = False

    def __init__(self, message: str = "", details: Optional[Dict[str, Any]] = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            out.update(self.details)
        if self.retryable:
            out["retryable"] = True
        return out


# ===================== Validation =====================

class ValidationFailed(RegistrationError):
    """Raised when a request is missing fields or carries malformed values."""
    code = "VALIDATION_ERROR"


class InvalidCapacity(ValidationFailed):
    """Raised when a vehicle capacity field is not positive."""
    code = "INVALID_CAPACITY"


class UnsupportedType(ValidationFailed):
    """Raised for a document type outside the closed set."""
    code = "UNSUPPORTED_TYPE"


class UnsupportedFormat(ValidationFailed):
    """Raised when the document content type is not accepted."""
    code = "UNSUPPORTED_FORMAT"


class PayloadTooLarge(ValidationFailed):
    """Raised when the document exceeds the configured size limit."""
    code = "PAYLOAD_TOO_LARGE"


# ===================== State =====================

class AlreadyRegistered(RegistrationError):
    """Raised when the user already holds a driver profile."""
    code = "ALREADY_REGISTERED"
    status_code = 409


class IncompleteRegistration(RegistrationError):
    """Raised by submit while documents or the vehicle are missing."""
    code = "INCOMPLETE_REGISTRATION"
    status_code = 409


class InvalidState(RegistrationError):
    """Raised when an operation is not allowed from the current status."""
    code = "INVALID_STATE"
    status_code = 409


# ===================== Lookup =====================

class ProfileNotFound(RegistrationError):
    code = "PROFILE_NOT_FOUND"
    status_code = 404


class DocumentNotFound(RegistrationError):
    code = "DOCUMENT_NOT_FOUND"
    status_code = 404


# ===================== Authorization =====================

class Unauthenticated(RegistrationError):
    code = "UNAUTHORIZED"
    status_code = 401


class Forbidden(RegistrationError):
    code = "FORBIDDEN"
    status_code = 403


# ===================== Infrastructure =====================

class TemporaryFailure(RegistrationError):
    """Storage or database did not answer in time; safe to retry."""
    code = "TEMPORARY_FAILURE"
    status_code = 503
    retryable = True
