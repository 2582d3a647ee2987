"""
Evidence counting for one variant over a set of reads.

**Key Classes:**
- EvidenceCounter: filters reads, classifies them and tallies the results

**Usage:**
    from vav.counter import EvidenceCounter

    counter = EvidenceCounter(config)
    summary = counter.count_variant(variant, records).summary()
"""

import logging
from collections.abc import Iterable, Sequence

from .aggregate import EvidenceTally, merge_tallies
from .classifier import Evidence, EvidenceCategory, classify
from .core.cursor import AlignmentCursor
from .core.record import ReadRecord
from .exceptions import InconsistentAlignment
from .models.core import EvidenceThresholds, Variant, VavConfig
from .parallel import ParallelProcessor, batched
from .utils.logging import WarningLimiter

logger = logging.getLogger(__name__)

MAX_WARNING_PER_TYPE = 3


class EvidenceCounter:
    """
    Classifies reads against a variant and tallies the evidence.

    Holds no per-variant state: every call returns a fresh EvidenceTally, so
    batches of one variant can be classified concurrently.

    **Attributes:**
        thresholds: Classification thresholds
        exclude_secondary: Drop secondary alignments before classification
        exclude_supplementary: Drop supplementary alignments before classification
        warnings: Throttle for per-read warnings
    """

    def __init__(
        self,
        thresholds: EvidenceThresholds | None = None,
        exclude_secondary: bool = False,
        exclude_supplementary: bool = False,
        threads: int = 1,
        batch_size: int = 500,
    ):
        self.thresholds = thresholds or EvidenceThresholds()
        self.exclude_secondary = exclude_secondary
        self.exclude_supplementary = exclude_supplementary
        self.batch_size = batch_size
        self.processor = ParallelProcessor(n_jobs=threads, backend="threading")
        self.warnings = WarningLimiter(logger, MAX_WARNING_PER_TYPE)

    @classmethod
    def from_config(cls, config: VavConfig) -> "EvidenceCounter":
        return cls(
            thresholds=config.thresholds,
            exclude_secondary=config.exclude_secondary,
            exclude_supplementary=config.exclude_supplementary,
            threads=config.threads,
            batch_size=config.batch_size,
        )

    def _should_filter_record(self, record: ReadRecord) -> bool:
        """
        Check if a read is excluded before classification.

        Excluded reads are not counted in any category.
        """
        if record.is_unmapped:
            return True
        if record.mapping_quality < self.thresholds.min_mapq:
            return True
        if self.exclude_secondary and record.is_secondary:
            return True
        if self.exclude_supplementary and record.is_supplementary:
            return True
        return False

    def classify_record(self, variant: Variant, record: ReadRecord) -> Evidence | None:
        """
        Classify one read, or return None if it is filtered or inconsistent.
        """
        if self._should_filter_record(record):
            return None
        try:
            cursor = AlignmentCursor.from_record(record)
        except InconsistentAlignment as e:
            self.warnings.warn(
                "inconsistent_alignment", "Skipping read at %s: %s", variant.canonical, e
            )
            return None

        evidence = classify(variant, cursor, self.thresholds)
        if evidence.category is EvidenceCategory.UNKNOWN and evidence.reason == "reference mismatch":
            self.warnings.warn(
                "reference_mismatch",
                "Read %s disagrees with REF of %s",
                record.name,
                variant.canonical,
            )
        return evidence

    def tally_records(self, variant: Variant, records: Iterable[ReadRecord]) -> EvidenceTally:
        """Classify records sequentially into a new tally."""
        tally = EvidenceTally()
        for record in records:
            evidence = self.classify_record(variant, record)
            if evidence is not None:
                tally.add(evidence)
        return tally

    def count_variant(self, variant: Variant, records: Sequence[ReadRecord]) -> EvidenceTally:
        """
        Tally all reads of a variant, classifying batches in parallel.

        Args:
            variant: Variant being counted
            records: Reads overlapping the variant

        Returns:
            Merged tally over every batch
        """
        batches = batched(records, self.batch_size)
        logger.debug(
            "%s: %d reads in %d batches", variant.canonical, len(records), len(batches)
        )
        tallies = self.processor.map(lambda batch: self.tally_records(variant, batch), batches)
        return merge_tallies(tallies)
