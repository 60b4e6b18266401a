"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines the exception hierarchy for the layout engine.

- Provides clear exception hierarchy
- Carries context for debugging
- Separates configuration faults from bad client input

Storage failures and invalid drag targets are NOT raised to
callers: the preference store and the drag controller degrade
to the previous or default layout instead.

============================================================
EXCEPTION HIERARCHY
============================================================
LayoutException (base)
├── ConfigurationError
├── LayoutValidationError
│   └── UnknownWidgetError
└── StorageError

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ============================================================
# SEVERITY LEVELS
# ============================================================

class Severity(Enum):
    """Exception severity levels."""

    LOW = "low"
    """Minor issue, informational."""

    MEDIUM = "medium"
    """Moderate issue, requires attention."""

    HIGH = "high"
    """Serious issue, the component cannot start."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class LayoutException(Exception):
    """
    Base exception for all layout engine errors.

    All exceptions carry:
    - severity: for log routing
    - context: for debugging
    - timestamp: when the error occurred
    """

    default_severity: Severity = Severity.MEDIUM

    def __init__(
        self,
        message: str,
        severity: Optional[Severity] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)

        self.message = message
        self.severity = severity or self.default_severity
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        if cause:
            self.context["cause_type"] = type(cause).__name__
            self.context["cause_message"] = str(cause)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging and API error bodies."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "severity": self.severity.value,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_log_format(self) -> str:
        """Format exception for structured logging."""
        ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        line = f"[{self.severity.value.upper()}] {type(self).__name__}: {self.message}"
        if ctx_str:
            line += f" | {ctx_str}"
        return line


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(LayoutException):
    """Error in configuration (units table, capacity, thresholds, backend)."""

    default_severity = Severity.HIGH

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        actual_value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if config_key:
            context["config_key"] = config_key
        if actual_value is not None:
            context["actual_value"] = str(actual_value)[:100]

        super().__init__(message, context=context, **kwargs)


# ============================================================
# VALIDATION ERRORS
# ============================================================

class LayoutValidationError(LayoutException):
    """Input could not be interpreted as layout data."""

    default_severity = Severity.LOW

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})

        if field:
            context["field"] = field
        if value is not None:
            context["value"] = str(value)[:100]

        super().__init__(message, context=context, **kwargs)


class UnknownWidgetError(LayoutValidationError):
    """Widget id is not present in the registry."""

    def __init__(self, widget_id: str):
        super().__init__(
            message=f"Unknown widget: {widget_id}",
            field="widget_id",
            value=widget_id,
        )
        self.widget_id = widget_id


# ============================================================
# STORAGE ERRORS
# ============================================================

class StorageError(LayoutException):
    """
    Local storage read or write failed.

    Raised inside storage adapters only. The StoragePort contract
    converts it into a failed StorageResult.
    """

    default_severity = Severity.LOW

    def __init__(self, message: str, key: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if key:
            context["key"] = key
        super().__init__(message, context=context, **kwargs)
