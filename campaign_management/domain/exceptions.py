"""
Domain Exceptions

Custom exceptions for the campaign management domain and application layers.
These exceptions represent malformed input, business rule violations and
failures of the collaborators the core depends on.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation failure."""

    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class DomainError(Exception):
    """Base exception for all campaign management errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class ValidationError(DomainError):
    """Raised when input is malformed or out of range, before any mutation."""

    def __init__(
        self,
        message: str,
        field_errors: Optional[List[FieldError]] = None,
        details: Optional[Dict[str, Any]] = None,
        error_code: str = "VALIDATION_ERROR",
    ):
        self.field_errors = list(field_errors or [])
        details = dict(details or {})
        if self.field_errors:
            details["field_errors"] = [error.to_dict() for error in self.field_errors]
        super().__init__(message=message, error_code=error_code, details=details)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        """Build a validation error describing a single field."""
        return cls(message, field_errors=[FieldError(field, message)])


class CurrencyMismatchError(ValidationError):
    """Raised when money operations with different currencies are attempted."""

    def __init__(
        self,
        message: str,
        currency_a: Optional[str] = None,
        currency_b: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        details = {
            "currency_a": currency_a,
            "currency_b": currency_b,
            "operation": operation,
        }
        super().__init__(
            message=message, details=details, error_code="CURRENCY_MISMATCH"
        )


class BusinessRuleError(DomainError):
    """Raised when an operation violates an aggregate invariant."""

    def __init__(
        self,
        message: str,
        campaign_id: Optional[str] = None,
        current_status: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        error_code: str = "BUSINESS_RULE_VIOLATION",
    ):
        details = dict(details or {})
        details.update({"campaign_id": campaign_id, "current_status": current_status})
        super().__init__(message=message, error_code=error_code, details=details)


class InvalidStatusTransitionError(BusinessRuleError):
    """Raised when a lifecycle transition is not allowed from the current status."""

    def __init__(
        self,
        message: str,
        current_status: Optional[str] = None,
        requested_status: Optional[str] = None,
        campaign_id: Optional[str] = None,
    ):
        super().__init__(
            message=message,
            campaign_id=campaign_id,
            current_status=current_status,
            details={"requested_status": requested_status},
            error_code="INVALID_STATUS_TRANSITION",
        )


class NotFoundError(DomainError):
    """Raised when a requested aggregate does not exist."""

    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
    ):
        details = {"resource_type": resource_type, "resource_id": resource_id}
        super().__init__(message=message, error_code="NOT_FOUND", details=details)


class ConflictError(DomainError):
    """Raised on duplicate names or optimistic concurrency version mismatches."""

    DUPLICATE_NAME = "duplicate_name"
    VERSION_MISMATCH = "version_mismatch"

    def __init__(
        self,
        message: str,
        reason: Optional[str] = None,
        resource_id: Optional[str] = None,
        expected_version: Optional[int] = None,
        actual_version: Optional[int] = None,
    ):
        self.reason = reason
        details = {
            "reason": reason,
            "resource_id": resource_id,
            "expected_version": expected_version,
            "actual_version": actual_version,
        }
        super().__init__(message=message, error_code="CONFLICT", details=details)


class InfrastructureError(DomainError):
    """Raised when a persistence or other infrastructure collaborator fails."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = dict(details or {})
        details["operation"] = operation
        super().__init__(
            message=message, error_code="INFRASTRUCTURE_ERROR", details=details
        )
