"""
Input Adapters: reading alignments for a variant.

AlignmentSource wraps one pysam.AlignmentFile and hands out reads as plain
ReadRecords, converting pysam failures into AlignmentFetchError.
"""

import logging
from collections.abc import Iterator
from pathlib import Path

import pysam

from ..core.kernel import CoordinateKernel
from ..core.record import ReadRecord
from ..exceptions import AlignmentFetchError
from ..models.core import Variant

logger = logging.getLogger(__name__)


class AlignmentSource:
    """
    An indexed BAM file opened once for a whole run.

    Usable as a context manager. Not shared between threads: reads are
    fetched on the calling thread and converted to ReadRecords there.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        if not self.path.exists():
            raise AlignmentFetchError(f"Alignment file not found: {self.path}")
        try:
            self._bam = pysam.AlignmentFile(str(self.path), "rb")
        except (OSError, ValueError) as e:
            raise AlignmentFetchError(f"Cannot open alignment file {self.path}: {e}") from e
        if not self._bam.has_index():
            self._bam.close()
            raise AlignmentFetchError(f"No index found for {self.path}")
        self._contigs: dict[str, str | None] = {}

    def __enter__(self) -> "AlignmentSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def references(self) -> tuple[str, ...]:
        return tuple(self._bam.references)

    def resolve_contig(self, chrom: str) -> str:
        """
        BAM contig for a variant chromosome, allowing a 'chr' prefix mismatch.

        Raises:
            AlignmentFetchError: If the header has no matching contig.
        """
        if chrom not in self._contigs:
            contig = CoordinateKernel.resolve_contig(chrom, self.references)
            if contig is not None and contig != chrom:
                logger.debug("Chromosome %s resolved to BAM contig %s", chrom, contig)
            self._contigs[chrom] = contig
        contig = self._contigs[chrom]
        if contig is None:
            raise AlignmentFetchError(f"Contig '{chrom}' not found in {self.path.name} header")
        return contig

    def fetch(self, variant: Variant) -> Iterator[ReadRecord]:
        """
        Yield every read overlapping the variant's fetch interval.

        Raises:
            AlignmentFetchError: On a missing contig or a pysam I/O error.
        """
        interval = CoordinateKernel.fetch_interval(variant)
        contig = self.resolve_contig(variant.chrom)
        try:
            for aln in self._bam.fetch(contig, interval.start, interval.end):
                yield ReadRecord.from_segment(aln)
        except (OSError, ValueError) as e:
            raise AlignmentFetchError(
                f"Error reading {self.path.name} at {variant.canonical}: {e}"
            ) from e

    def fetch_all(self, variant: Variant) -> list[ReadRecord]:
        return list(self.fetch(variant))

    def close(self) -> None:
        self._bam.close()
