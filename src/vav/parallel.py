"""Parallel processing of read batches with joblib."""

import logging
import os
from collections.abc import Callable, Sequence
from typing import Any

from joblib import Parallel, delayed
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from .utils.logging import get_console

logger = logging.getLogger(__name__)


class ParallelProcessor:
    """
    Map a function over items with joblib.

    The default ``threading`` backend keeps workers in-process, so batches of
    plain ReadRecords are passed without pickling.
    """

    def __init__(self, n_jobs: int = 1, backend: str = "threading", verbose: int = 0):
        """
        Initialize parallel processor.

        Args:
            n_jobs: Number of parallel jobs (-1 for all CPUs)
            backend: joblib backend ('threading', 'loky', 'multiprocessing')
            verbose: joblib verbosity level
        """
        self.n_jobs = n_jobs if n_jobs > 0 else (os.cpu_count() or 1)
        self.backend = backend
        self.verbose = verbose

    def map(
        self,
        func: Callable,
        items: Sequence[Any],
        description: str = "Processing",
        show_progress: bool = False,
    ) -> list[Any]:
        """
        Apply ``func`` to every item; results come back in input order.

        Args:
            func: Function to apply
            items: Items to process
            description: Description for progress bar
            show_progress: Whether to show progress bar (on stderr)

        Returns:
            List of results
        """
        if not items:
            return []
        if self.n_jobs == 1:
            # No pool for a single worker
            return [func(item) for item in items]

        logger.debug("%s: %d items on %d %s workers", description, len(items), self.n_jobs, self.backend)
        if not show_progress:
            return Parallel(n_jobs=self.n_jobs, backend=self.backend, verbose=self.verbose)(
                delayed(func)(item) for item in items
            )

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=get_console(),
            transient=True,
        ) as progress:
            task = progress.add_task(f"[cyan]{description}...", total=len(items))
            results = []
            with Parallel(
                n_jobs=self.n_jobs,
                backend=self.backend,
                verbose=self.verbose,
                return_as="generator",
            ) as parallel:
                for result in parallel(delayed(func)(item) for item in items):
                    results.append(result)
                    progress.update(task, advance=1)
            return results


def batched(items: Sequence[Any], batch_size: int) -> list[Sequence[Any]]:
    """Split ``items`` into consecutive slices of at most ``batch_size``."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    return [items[i : i + batch_size] for i in range(0, len(items), batch_size)]


def parallel_map(
    func: Callable,
    items: Sequence[Any],
    n_jobs: int = 1,
    backend: str = "threading",
    description: str = "Processing",
    show_progress: bool = False,
) -> list[Any]:
    """
    Convenience function for parallel mapping.

    Args:
        func: Function to apply
        items: Items to process
        n_jobs: Number of parallel jobs
        backend: Backend to use
        description: Progress description
        show_progress: Show progress bar

    Returns:
        List of results
    """
    processor = ParallelProcessor(n_jobs=n_jobs, backend=backend)
    return processor.map(func, items, description, show_progress)
