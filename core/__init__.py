"""
Core Module Package.

This package contains the infrastructure components
that the layout engine and the API depend on.

Components:
- exceptions: Custom exception hierarchy
- logging_config: Root logger setup
"""

from .exceptions import (
    Severity,
    LayoutException,
    ConfigurationError,
    LayoutValidationError,
    UnknownWidgetError,
    StorageError,
)
from .logging_config import setup_logging

__all__ = [
    "Severity",
    "LayoutException",
    "ConfigurationError",
    "LayoutValidationError",
    "UnknownWidgetError",
    "StorageError",
    "setup_logging",
]
