"""
Plain per-read data detached from pysam.

Reads are converted on the fetching thread so that worker threads never touch
pysam objects.
"""

from dataclasses import dataclass

import pysam

__all__ = ["ReadRecord"]


@dataclass(frozen=True)
class ReadRecord:
    """The alignment fields consumed by the evidence classifier."""

    name: str
    reference_start: int  # 0-based leftmost mapped position
    mapping_quality: int
    cigar: tuple[tuple[int, int], ...]
    md: str | None
    sequence: str
    qualities: tuple[int, ...] | None = None
    is_unmapped: bool = False
    is_secondary: bool = False
    is_supplementary: bool = False

    @classmethod
    def from_segment(cls, aln: pysam.AlignedSegment) -> "ReadRecord":
        """Copy the needed fields out of a pysam AlignedSegment."""
        quals = aln.query_qualities
        return cls(
            name=aln.query_name or "",
            reference_start=aln.reference_start,
            mapping_quality=aln.mapping_quality,
            cigar=tuple((op, length) for op, length in (aln.cigartuples or ())),
            md=aln.get_tag("MD") if aln.has_tag("MD") else None,
            sequence=aln.query_sequence or "",
            qualities=tuple(quals) if quals is not None else None,
            is_unmapped=aln.is_unmapped,
            is_secondary=aln.is_secondary,
            is_supplementary=aln.is_supplementary,
        )
