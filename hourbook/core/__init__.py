"""
Hourbook Core - Shared services for all modules.

Usage:
    from hourbook.core import get_config, get_logger, HOURBOOK_PATHS
"""

from hourbook.core.config import get_config, get_config_value, HOURBOOK_PATHS
from hourbook.core.logging import get_logger

__all__ = [
    "get_config",
    "get_config_value",
    "HOURBOOK_PATHS",
    "get_logger",
]
