"""Error Hierarchy - typed, categorized exceptions for every domainguard failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors are recoverable; only GatewayError is critical
    - to_response() produces a JSON-safe envelope
    - log_extra() only emits keys listed in LOG_FIELDS
    - Errors are raised to the immediate caller, never swallowed inside the package

Design Decisions:
    - Single hierarchy with DomainGuardError base: callers may catch one type
    - ErrorContext as dataclass: rich observability without coupling to logging
    - This module imports nothing from domainguard so every layer may raise from it
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    CONSTRUCTION = "construction"
    INVARIANT = "invariant"
    RESOURCE_NOT_FOUND = "resource_not_found"
    SCOPE = "scope"
    GATEWAY = "gateway"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entity_type: str | None = None
    entity_id: str | None = None
    scope_id: str | None = None
    debug_info: dict[str, Any] | None = None


# Keys an error contributes to a log record; the JSON formatter surfaces exactly these
LOG_FIELDS = (
    "error_code", "error_category", "severity",
    "entity_type", "entity_id", "scope_id",
    "behavior", "failed_invariants", "operation",
)


class DomainGuardError(Exception):
    """Base exception for all domainguard errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    @property
    def recoverable(self) -> bool:
        return self.severity != ErrorSeverity.CRITICAL

    def to_response(self) -> dict:
        """Convert to a standardized, JSON-safe error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "recoverable": self.recoverable,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "entity_type": self.context.entity_type,
                    "entity_id": self.context.entity_id,
                    "scope_id": self.context.scope_id,
                },
            }
        }

    def log_extra(self) -> dict:
        """Fields for logging.Logger(..., extra=...), None values dropped."""
        extra = {
            "error_code": self.code,
            "error_category": self.category.value,
            "severity": self.severity.value,
            "entity_type": self.context.entity_type,
            "entity_id": self.context.entity_id,
            "scope_id": self.context.scope_id,
        }
        return {k: v for k, v in extra.items() if v is not None}


# ─── Construction-time Errors ───────────────────────────────────

class ValidationError(DomainGuardError):
    """Untrusted input rejected by a validation policy. Caller fixes input and retries."""

    def __init__(
        self,
        field_errors: dict[str, list[str]],
        context: ErrorContext | None = None,
    ):
        if not field_errors:
            raise ValueError("ValidationError requires at least one field error")
        self.field_errors = {name: list(reasons) for name, reasons in field_errors.items()}
        summary = "; ".join(
            f"{name}: {', '.join(reasons)}"
            for name, reasons in self.field_errors.items()
        )
        super().__init__(
            f"Invalid input ({summary})",
            "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context,
        )

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self.field_errors)

    @property
    def field(self) -> str:
        """First failing field."""
        return self.fields[0]

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["fields"] = self.field_errors
        return response


class ConstructionError(DomainGuardError):
    """Assembled values break entity invariants. No object was produced."""

    def __init__(
        self,
        entity_type: str,
        failed_invariants: list[str],
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.entity_type = entity_type
        super().__init__(
            f"Cannot construct {entity_type}: "
            f"invariants failed: {', '.join(failed_invariants)}",
            "CONSTRUCTION_FAILED", ErrorCategory.CONSTRUCTION,
            ErrorSeverity.ERROR, ctx,
        )
        self.entity_type = entity_type
        self.failed_invariants = tuple(failed_invariants)

    def log_extra(self) -> dict:
        return {**super().log_extra(), "failed_invariants": list(self.failed_invariants)}


# ─── Runtime Errors ─────────────────────────────────────────────

class InvariantViolation(DomainGuardError):
    """A behavior would break an invariant. Entity state is unchanged."""

    def __init__(
        self,
        entity_type: str,
        behavior: str,
        failed_invariants: list[str],
        entity_id: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.entity_type = entity_type
        ctx.entity_id = entity_id
        super().__init__(
            f"{entity_type}.{behavior} rejected: "
            f"invariants failed: {', '.join(failed_invariants)}",
            "INVARIANT_VIOLATION", ErrorCategory.INVARIANT,
            ErrorSeverity.ERROR, ctx,
        )
        self.entity_type = entity_type
        self.behavior = behavior
        self.failed_invariants = tuple(failed_invariants)

    def log_extra(self) -> dict:
        return {
            **super().log_extra(),
            "behavior": self.behavior,
            "failed_invariants": list(self.failed_invariants),
        }


class NotFoundError(DomainGuardError):
    """Identifier is absent in the given scope."""

    def __init__(
        self,
        identifier: str,
        scope_id: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.entity_id = identifier
        ctx.scope_id = scope_id
        super().__init__(
            f"Entity '{identifier}' not found",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx,
        )
        self.identifier = identifier


class ScopeExpiredError(DomainGuardError):
    """Scope was closed; re-resolve in a fresh scope."""

    def __init__(self, scope_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.scope_id = scope_id
        super().__init__(
            f"Scope '{scope_id}' has been closed",
            "SCOPE_EXPIRED", ErrorCategory.SCOPE,
            ErrorSeverity.ERROR, ctx,
        )
        self.scope_id = scope_id


class ForeignScopeError(DomainGuardError):
    """Entity belongs to a different scope than the one it was offered to."""

    def __init__(
        self, scope_id: str, entity_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.scope_id = scope_id
        ctx.entity_id = entity_id
        super().__init__(
            f"Entity '{entity_id}' is tracked by another scope than '{scope_id}'",
            "FOREIGN_SCOPE", ErrorCategory.SCOPE,
            ErrorSeverity.ERROR, ctx,
        )
        self.scope_id = scope_id


# ─── Collaborator Errors ────────────────────────────────────────

class GatewayError(DomainGuardError):
    """Persistence collaborator failed."""

    def __init__(
        self, message: str, operation: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Gateway {operation} failed: {message}",
            "GATEWAY_ERROR", ErrorCategory.GATEWAY,
            ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation

    def log_extra(self) -> dict:
        return {**super().log_extra(), "operation": self.operation}
