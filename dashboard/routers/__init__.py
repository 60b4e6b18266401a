"""
Dashboard API Routers.
"""
from . import health, widgets, columns, holdings

__all__ = ["health", "widgets", "columns", "holdings"]
