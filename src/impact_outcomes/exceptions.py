"""
Impact Outcomes - Exception Hierarchy.
Structured report-level faults with correlation tracking.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from pydantic import BaseModel, ConfigDict, Field
import structlog

from .observability import get_correlation_id

logger = structlog.get_logger(__name__)


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    NO_DATA = "no_data"
    DATABASE = "database"
    INTERNAL = "internal"


class ErrorContext(BaseModel):
    """Where and when a report fault happened."""
    correlation_id: str = Field(default_factory=get_correlation_id)
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    model_config = ConfigDict(frozen=True)

    def with_operation(self, operation: str) -> ErrorContext:
        return self.model_copy(update={"operation": operation})


class ImpactError(Exception):
    """Base exception for all outcome reporting errors.

    Subclasses pin ``error_code``, ``category``, ``severity`` and ``http_status``;
    the error logs itself once on construction.
    """
    error_code: str = "IMPACT_ERROR"
    category: ErrorCategory = ErrorCategory.INTERNAL
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    http_status: int = 500
    default_user_message = "The outcomes report could not be produced."

    def __init__(self, message: str, *, user_message: str | None = None,
                 context: ErrorContext | None = None, cause: Exception | None = None,
                 details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.user_message = user_message or self.default_user_message
        self.context = context or ErrorContext()
        self.cause = cause
        self.details = dict(details or {})
        self._log()

    def _log(self) -> None:
        log = logger.error if self.severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL) else logger.warning
        extra: dict[str, Any] = {}
        if self.cause is not None:
            extra["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        log(
            "impact_error",
            error_code=self.error_code,
            category=self.category.value,
            correlation_id=self.context.correlation_id,
            operation=self.context.operation,
            reason=self.message,
            details=self.details,
            **extra,
        )

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {
            "code": self.error_code,
            "message": self.user_message,
            "correlation_id": self.context.correlation_id,
            "timestamp": self.context.occurred_at.isoformat(),
        }
        if self.context.operation:
            error["operation"] = self.context.operation
        return {"error": error}


# Domain Layer Exceptions
class DomainError(ImpactError):
    error_code = "DOMAIN_ERROR"
    severity = ErrorSeverity.MEDIUM
    http_status = 422


class InvalidWindowError(DomainError):
    error_code = "INVALID_WINDOW"
    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.LOW
    http_status = 400

    def __init__(self, start: datetime, end: datetime, reason: str | None = None, **kwargs: Any) -> None:
        reason = reason or "The end of the time range must not precede its start"
        details = kwargs.pop("details", {})
        details.update({"start": start.isoformat(), "end": end.isoformat()})
        super().__init__(f"Invalid report window {start.isoformat()} to {end.isoformat()}: {reason}",
                         user_message=reason, details=details, **kwargs)
        self.start, self.end = start, end


class NoDataInRangeError(DomainError):
    error_code = "NO_DATA_IN_RANGE"
    category = ErrorCategory.NO_DATA
    severity = ErrorSeverity.LOW
    http_status = 404

    def __init__(self, outcome_set_id: str, start: datetime, end: datetime, **kwargs: Any) -> None:
        message = (f"No meetings for outcome set '{outcome_set_id}' were conducted between "
                   f"{start.isoformat()} and {end.isoformat()}")
        details = kwargs.pop("details", {})
        details.update({"outcome_set_id": outcome_set_id,
                        "start": start.isoformat(), "end": end.isoformat()})
        super().__init__(message, user_message="No data was recorded in the requested time range",
                         details=details, **kwargs)
        self.outcome_set_id = outcome_set_id


class EntityNotFoundError(DomainError):
    error_code = "ENTITY_NOT_FOUND"
    category = ErrorCategory.NOT_FOUND
    severity = ErrorSeverity.LOW
    http_status = 404

    def __init__(self, entity_type: str, entity_id: str, **kwargs: Any) -> None:
        message = f"{entity_type} with ID '{entity_id}' not found"
        user_message = f"The requested {entity_type.lower()} was not found"
        details = kwargs.pop("details", {})
        details.update({"entity_type": entity_type, "entity_id": entity_id})
        super().__init__(message, user_message=user_message, details=details, **kwargs)
        self.entity_type, self.entity_id = entity_type, entity_id


# Application Layer Exceptions
class AuthorizationError(ImpactError):
    error_code = "AUTHORIZATION_ERROR"
    category = ErrorCategory.AUTHORIZATION
    http_status = 403

    def __init__(self, message: str = "Access denied", **kwargs: Any) -> None:
        super().__init__(message, user_message="You don't have permission for this action", **kwargs)


# Infrastructure Layer Exceptions
class RepositoryError(ImpactError):
    error_code = "REPOSITORY_ERROR"
    category = ErrorCategory.DATABASE
    severity = ErrorSeverity.HIGH
    http_status = 503

    def __init__(self, message: str, *, operation: str | None = None, **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        if operation:
            details["db_operation"] = operation
        super().__init__(message, user_message="A database error occurred",
                         details=details, **kwargs)


class RepositoryUnavailableError(RepositoryError):
    error_code = "REPOSITORY_UNAVAILABLE"
