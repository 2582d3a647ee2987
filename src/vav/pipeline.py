"""
Pipeline Orchestrator: Manages the execution flow of vav.

This module handles:
1. De-duplicating the requested variants (input order kept).
2. Opening the alignment file once for the whole run.
3. Fetching the reads of each variant and counting their evidence.
4. Logging a per-variant summary line.
"""

import logging

from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)

from .counter import EvidenceCounter
from .io.input import AlignmentSource
from .io.output import format_summary_line
from .models.core import Variant, VariantSummary, VavConfig
from .utils.logging import get_console, timed
from .variant import dedupe_variants

logger = logging.getLogger(__name__)


class Pipeline:
    def __init__(self, config: VavConfig, show_progress: bool = False):
        self.config = config
        self.counter = EvidenceCounter.from_config(config)
        self.show_progress = show_progress
        self.console = get_console()

    def run(self) -> dict[str, VariantSummary]:
        """
        Scan every variant and return summaries keyed by canonical variant string.

        Raises:
            AlignmentFetchError: If the alignment file or a contig cannot be read.
        """
        variants = dedupe_variants(self.config.variants)
        if not variants:
            logger.warning("No variants given; nothing to scan")
            return {}

        logger.info(
            "Scanning %d variant(s) in %s", len(variants), self.config.bam_file.name
        )
        summaries: dict[str, VariantSummary] = {}

        with AlignmentSource(self.config.bam_file) as source:
            if not self.show_progress or len(variants) == 1:
                for variant in variants:
                    summaries[variant.canonical] = self._scan(source, variant)
                return summaries

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                TimeRemainingColumn(),
                console=self.console,
                transient=True,
            ) as progress:
                task = progress.add_task("[cyan]Scanning variants...", total=len(variants))
                for variant in variants:
                    progress.update(task, description=f"[cyan]Scanning {variant.canonical}...")
                    summaries[variant.canonical] = self._scan(source, variant)
                    progress.advance(task)

        return summaries

    def _scan(self, source: AlignmentSource, variant: Variant) -> VariantSummary:
        """Count the evidence for one variant."""
        with timed(f"Scanning {variant.canonical}", logger):
            records = source.fetch_all(variant)
            summary = self.counter.count_variant(variant, records).summary()
        skipped = len(records) - summary.total_count
        if skipped:
            logger.debug("%s: %d reads filtered or skipped", variant.canonical, skipped)
        logger.info(format_summary_line(variant.canonical, summary))
        return summary
