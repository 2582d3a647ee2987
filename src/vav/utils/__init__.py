"""
Utility modules for vav.

Provides logging, timing, and other shared utilities.
"""

from .logging import WarningLimiter, get_console, setup_logging, timed

__all__ = [
    "WarningLimiter",
    "get_console",
    "setup_logging",
    "timed",
]
