# school_billing/core/errors.py
"""
Domain error taxonomy for the billing core.

Services raise these before touching storage (or after translating a
storage failure); the API layer turns them into a structured JSON envelope.
"""

from typing import Any, Dict, Optional


class BillingError(Exception):
    """Base class for every error the billing core raises on purpose"""

    code = "BILLING_ERROR"
    status_code = 400

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self, include_details: bool = True) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if include_details and self.details:
            payload["details"] = self.details
        return payload

    def __repr__(self) -> str:
        return f"<{type(self).__name__} code={self.code} message={self.message!r}>"


class ValidationError(BillingError):
    code = "VALIDATION_ERROR"
    status_code = 400


class NotFound(BillingError):
    code = "NOT_FOUND"
    status_code = 404


class Conflict(BillingError):
    code = "CONFLICT"
    status_code = 409


class OverpaymentError(BillingError):
    code = "OVERPAYMENT"
    status_code = 400


class InvalidReference(BillingError):
    code = "INVALID_REFERENCE"
    status_code = 400


class InternalError(BillingError):
    code = "INTERNAL_ERROR"
    status_code = 500
