"""Error Hierarchy — typed, categorized exceptions for every FireCheck failure mode.

Invariants:
    - Every error class fixes its code, category, severity and http_status
    - ValidationError is raised before any persistence call, never by an adapter
    - Adapters raise only ResourceNotFoundError, ConflictError, PersistenceUnavailableError
    - to_response() produces the REST envelope; messages never carry driver internals

Design Decisions:
    - Single hierarchy under FireCheckError: the API registers one handler for all
    - Classification as class attributes: a subclass is its classification, and
      instances only carry message and context
    - ErrorContext as dataclass: which entity failed, without coupling to logging
    - No retry metadata: retry/backoff is a policy of the caller, not of the core
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    PERSISTENCE = "persistence"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Which entity an error is about, and when it happened."""
    entity_kind: str | None = None
    entity_id: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class FireCheckError(Exception):
    """Base exception for all FireCheck errors."""
    code = "INTERNAL_ERROR"
    category = ErrorCategory.INTERNAL
    severity = ErrorSeverity.ERROR
    http_status = 500

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()

    def to_response(self) -> dict:
        """Standardized REST error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "entity_kind": self.context.entity_kind,
                    "entity_id": self.context.entity_id,
                },
            }
        }


# ─── Client Errors (4xx) ─────────────────────────────────────────

class ValidationError(FireCheckError):
    """A required field is missing/empty or a value is outside its vocabulary."""
    code = "VALIDATION_ERROR"
    category = ErrorCategory.VALIDATION
    http_status = 400

    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(message, context)
        self.field = field


class ResourceNotFoundError(FireCheckError):
    """Referenced entity does not exist."""
    code = "RESOURCE_NOT_FOUND"
    category = ErrorCategory.RESOURCE_NOT_FOUND
    http_status = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            ErrorContext(entity_kind=resource_type, entity_id=resource_id),
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(FireCheckError):
    """Backend reported a duplicate key or another constraint clash."""
    code = "CONFLICT"
    category = ErrorCategory.CONFLICT
    http_status = 409


# ─── Persistence Errors (5xx) ────────────────────────────────────

class PersistenceUnavailableError(FireCheckError):
    """The persistence adapter could not complete an operation."""
    code = "PERSISTENCE_UNAVAILABLE"
    category = ErrorCategory.PERSISTENCE
    severity = ErrorSeverity.CRITICAL
    http_status = 503

    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(f"Persistence {operation} failed: {message}", context)
        self.operation = operation
