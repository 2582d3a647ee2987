"""
Coordinate Kernel: conversions between variant notation and BAM coordinates.

- Variant strings are 1-based; ``pos`` names the first REF base.
- Internal and pysam coordinates are 0-based, half-open [start, end).
- A pure insertion (empty REF) sits between ``pos`` and ``pos + 1``; both
  flanking bases must be fetched to observe it.
"""

from collections.abc import Sequence

from ..models.core import GenomicInterval, Variant


class CoordinateKernel:
    """
    Stateless helpers for coordinate transformations and contig naming.
    """

    @staticmethod
    def fetch_interval(variant: Variant) -> GenomicInterval:
        """
        Reference interval whose overlapping reads can carry evidence.

        Indels include the flanking bases on both sides so that reads ending
        right at the junction are fetched and classified (as Unknown).
        """
        if variant.is_substitution:
            return GenomicInterval(chrom=variant.chrom, start=variant.start, end=variant.end)
        if not variant.ref:
            return GenomicInterval(chrom=variant.chrom, start=variant.start, end=variant.start + 2)
        return GenomicInterval(
            chrom=variant.chrom, start=max(variant.start - 1, 0), end=variant.end + 1
        )

    @staticmethod
    def normalize_chromosome(chrom: str) -> str:
        """
        Normalize chromosome name (remove 'chr' prefix).
        """
        if chrom.lower().startswith("chr"):
            return chrom[3:]
        return chrom

    @staticmethod
    def resolve_contig(chrom: str, references: Sequence[str]) -> str | None:
        """
        Find the BAM contig naming ``chrom``.

        Tries the name as given, then with the 'chr' prefix removed or added.
        Returns None if no variant of the name is present.
        """
        available = set(references)
        if chrom in available:
            return chrom
        bare = CoordinateKernel.normalize_chromosome(chrom)
        for candidate in (bare, f"chr{bare}"):
            if candidate in available:
                return candidate
        return None
