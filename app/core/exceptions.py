"""Domain errors raised by the offer services and mapped to HTTP in app.main."""

from typing import Dict, Optional


class OfferServiceError(Exception):
    """Base error for the offer core."""

    status_code = 500
    code = "error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"detail": self.detail, "code": self.code}


class NotFound(OfferServiceError):
    """Raised when a referenced offer, company, category or user does not exist."""

    status_code = 404
    code = "not_found"


class ValidationError(OfferServiceError):
    """Raised when input is malformed or violates a business rule, before any write."""

    status_code = 422
    code = "validation_error"

    def __init__(self, detail: str, errors: Optional[Dict[str, str]] = None):
        super().__init__(detail)
        self.errors = errors or {}

    def to_dict(self) -> dict:
        return {**super().to_dict(), "errors": self.errors}


class Forbidden(OfferServiceError):
    """Raised when the actor lacks management rights over the target."""

    status_code = 403
    code = "forbidden"


class InvalidTransition(OfferServiceError):
    """Raised when a lifecycle move is not allowed from the current status."""

    status_code = 409
    code = "invalid_transition"

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot {requested} an offer in status '{current}'")
        self.current = current
        self.requested = requested

    def to_dict(self) -> dict:
        return {**super().to_dict(), "current": self.current, "requested": self.requested}


class ConcurrentModification(OfferServiceError):
    """Raised when a conditional update matched no row because the offer changed meanwhile."""

    status_code = 409
    code = "concurrent_modification"

    def to_dict(self) -> dict:
        return {**super().to_dict(), "retryable": True}


class DependencyFailure(OfferServiceError):
    """Raised when persistence fails during a write."""

    status_code = 503
    code = "dependency_failure"
