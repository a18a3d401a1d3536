"""
Custom exception hierarchy for the ongoing events context service.
Provides structured error handling with proper context.

None of these escape the component boundaries: they are raised where a
failure is detected and caught where the pipeline degrades to less
compression, coarser filtering or empty output.
"""

from typing import Optional, Dict, Any


class EventContextException(Exception):
    """Base exception for all ongoing events context errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize exception with message and optional context.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# ==================== Template Exceptions ====================


class TemplateException(EventContextException):
    """Base exception for compression template and rule errors."""

    pass


class TemplateParseError(TemplateException):
    """Raised when a bracket template cannot be used for extraction."""

    def __init__(self, template: str, reason: str):
        super().__init__(
            message=f"Cannot use template: {reason}",
            error_code="TEMPLATE_PARSE_ERROR",
            context={"template": template[:80], "reason": reason},
        )


class RuleLookupError(TemplateException):
    """Raised when a description rule needed for extraction is missing."""

    def __init__(self, source_type_id: str, rule_key: str):
        super().__init__(
            message=f"No '{rule_key}' rule for {source_type_id}",
            error_code="RULE_LOOKUP_ERROR",
            context={"source_type_id": source_type_id, "rule_key": rule_key},
        )


# ==================== Simulation Exceptions ====================


class SimulationException(EventContextException):
    """Base exception for errors reading the host simulation."""

    pass


class HostReadError(SimulationException):
    """Raised when an optional field of a host object cannot be read."""

    def __init__(self, owner: str, field: str, details: Optional[str] = None):
        super().__init__(
            message=f"Cannot read {owner}.{field}",
            error_code="HOST_READ_ERROR",
            context={"owner": owner, "field": field, "details": details},
        )


class SessionNotLoadedError(SimulationException):
    """Raised when a hook needs a loaded simulation session and none exists."""

    def __init__(self, hook: str):
        super().__init__(
            message=f"No simulation session loaded for {hook}",
            error_code="SESSION_NOT_LOADED",
            context={"hook": hook},
        )


# ==================== Validation Exceptions ====================


class ValidationException(EventContextException):
    """Base exception for validation errors."""

    pass


class InvalidInputError(ValidationException):
    """Raised when input validation fails."""

    def __init__(self, field: str, reason: str):
        super().__init__(
            message=f"Invalid input: {field} - {reason}",
            error_code="INVALID_INPUT",
            context={"field": field, "reason": reason},
        )


# ==================== Migration Exceptions ====================


class MigrationError(EventContextException):
    """Raised when the one-time legacy blacklist migration fails."""

    def __init__(self, details: Optional[str] = None):
        super().__init__(
            message="Legacy blacklist migration failed",
            error_code="MIGRATION_ERROR",
            context={"details": details} if details else {},
        )
