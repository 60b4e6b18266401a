#!/usr/bin/env python
"""
Dashboard Layout API Server Runner.

Usage:
    python run_dashboard.py

Environment:
    DASHBOARD_HOST / DASHBOARD_PORT   Bind address
    LOG_LEVEL / LOG_FORMAT            Logging (text or json)
    ENVIRONMENT=development           Enable auto-reload
"""

import os
import sys
import logging
import uvicorn

from core.logging_config import setup_logging
from layout_engine import get_config

logger = logging.getLogger(__name__)


def main():
    """Run the dashboard API server."""
    config = get_config()
    setup_logging(config.log_level, config.log_format, service_name="dashboard-layout")

    host = os.getenv("DASHBOARD_HOST", "0.0.0.0")
    port = int(os.getenv("DASHBOARD_PORT", os.getenv("PORT", "8000")))
    reload = os.getenv("ENVIRONMENT", "production") == "development"

    logger.info(f"Starting Dashboard Layout API on {host}:{port}")

    try:
        uvicorn.run(
            "dashboard.main:app",
            host=host,
            port=port,
            reload=reload,
            log_level=config.log_level.lower(),
            access_log=True,
        )
    except Exception as e:
        logger.error(f"Failed to start dashboard: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
