"""
Logging utilities for vav.

Provides centralized logging configuration with dual output:
- Rich console output on stderr (stdout carries the JSON result)
- Optional plain-text log file
"""

import logging
import threading
import time
from contextlib import contextmanager

from rich.console import Console
from rich.logging import RichHandler

__all__ = [
    "WarningLimiter",
    "get_console",
    "setup_logging",
    "timed",
]

# Module-level console for rich output
_console = Console(stderr=True)


def get_console() -> Console:
    """Shared stderr console, also used for progress bars and CLI errors."""
    return _console


def setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    """
    Configure logging for vav.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise INFO.
        log_file: Optional path to write logs to file.
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers: list[logging.Handler] = [
        RichHandler(
            console=_console,
            rich_tracebacks=True,
            markup=False,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )


@contextmanager
def timed(operation: str, logger: logging.Logger | None = None):
    """
    Context manager for timing operations.

    Example:
        with timed("Scanning chr1:100A>T", logger):
            summary = scan(variant)
    """
    log = logger or logging.getLogger(__name__)
    start = time.perf_counter()
    log.debug("Starting: %s", operation)
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        log.debug("Completed: %s (%.3fs)", operation, elapsed)


class WarningLimiter:
    """
    Emit at most ``max_per_type`` warnings of each type, then one notice that
    further warnings of that type are suppressed.

    Safe to share between worker threads.
    """

    def __init__(self, logger: logging.Logger, max_per_type: int = 3):
        self.logger = logger
        self.max_per_type = max_per_type
        self.warning_counts: dict[str, int] = {}
        self._lock = threading.Lock()

    def warn(self, kind: str, msg: str, *args) -> bool:
        """Log the warning unless ``kind`` is over its limit. Returns True if logged."""
        with self._lock:
            seen = self.warning_counts.get(kind, 0)
            self.warning_counts[kind] = seen + 1
        if seen < self.max_per_type:
            self.logger.warning(msg, *args)
            return True
        if seen == self.max_per_type:
            self.logger.warning("Further '%s' warnings suppressed", kind)
        return False

    def count(self, kind: str) -> int:
        return self.warning_counts.get(kind, 0)
