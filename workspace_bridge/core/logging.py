"""
Logging setup for applications embedding the workspace bridge.

Library modules only create module loggers; the host application decides
whether to call :func:`configure_logging`.
"""

import logging
import sys
from typing import Optional

from workspace_bridge.core.config import get_settings


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging with the package's standard line format.

    ``level`` defaults to the ``log_level`` setting (``GOOGLE_LOG_LEVEL``).
    """
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    # googleapiclient logs every discovery lookup at INFO.
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)


__all__ = ["configure_logging"]
