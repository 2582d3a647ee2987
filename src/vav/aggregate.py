"""
Evidence tallies: per-variant counts merged across read batches.
"""

from collections.abc import Iterable

import numpy as np

from .classifier import Evidence, EvidenceCategory
from .config import SummaryField
from .models.core import VariantSummary

__all__ = ["CATEGORY_FIELDS", "EvidenceTally", "merge_tallies"]

# Every category lands in exactly one summary slot
CATEGORY_FIELDS: dict[EvidenceCategory, SummaryField] = {
    EvidenceCategory.REFERENCE: SummaryField.REFERENCE,
    EvidenceCategory.PROPER_ALT: SummaryField.PROPER,
    EvidenceCategory.MARGIN_ALT: SummaryField.MARGIN,
    EvidenceCategory.LOWQ_ALT: SummaryField.LOWQ,
    EvidenceCategory.EXCESSIVE_ALT: SummaryField.EXCESSIVE,
    EvidenceCategory.UNKNOWN: SummaryField.UNKNOWN,
}


class EvidenceTally:
    """
    Counts for one variant, indexed by SummaryField.

    A tally is owned by whoever builds it; batches each produce their own and
    the results are merged with ``combine``.
    """

    __slots__ = ("counts",)

    def __init__(self, counts: np.ndarray | None = None):
        if counts is None:
            counts = np.zeros(len(SummaryField), dtype=np.int64)
        self.counts = counts

    def add(self, evidence: Evidence) -> None:
        self.counts[CATEGORY_FIELDS[evidence.category]] += 1
        if evidence.informative:
            self.counts[SummaryField.ALLELES] += 1

    def combine(self, other: "EvidenceTally") -> "EvidenceTally":
        """Elementwise sum as a new tally; neither operand is modified."""
        return EvidenceTally(self.counts + other.counts)

    def __add__(self, other: "EvidenceTally") -> "EvidenceTally":
        return self.combine(other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EvidenceTally):
            return NotImplemented
        return bool(np.array_equal(self.counts, other.counts))

    def __getitem__(self, field: SummaryField) -> int:
        return int(self.counts[field])

    @property
    def classified(self) -> int:
        """Reads given a category (``alleles`` is not a category)."""
        return int(self.counts.sum() - self.counts[SummaryField.ALLELES])

    def summary(self) -> VariantSummary:
        return VariantSummary(**{f.name.lower(): int(self.counts[f]) for f in SummaryField})

    def __repr__(self) -> str:
        fields = ", ".join(f"{f.name.lower()}={int(self.counts[f])}" for f in SummaryField)
        return f"EvidenceTally({fields})"


def merge_tallies(tallies: Iterable[EvidenceTally]) -> EvidenceTally:
    """Fold tallies with ``combine``; the empty fold is a zero tally."""
    total = EvidenceTally()
    for tally in tallies:
        total = total.combine(tally)
    return total
