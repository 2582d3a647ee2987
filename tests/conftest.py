"""Pytest configuration and fixtures."""

import re
import sys
from pathlib import Path

import pysam
import pytest

# Add src directory to path so tests use local code, not installed package
project_root = Path(__file__).parent.parent
src_dir = project_root / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))


# chr1 of the synthetic genome; every test read is simulated against it
CONTIG = "chr1"
REFERENCE = "ACGTTGCA" * 125

_CIGAR_RE = re.compile(r"(\d+)([MIDNSHP=X])")


def simulate_read(
    start: int,
    cigar: str,
    subs: dict[int, str] | None = None,
    inserted: dict[int, str] | None = None,
    clip_base: str = "C",
) -> tuple[str, str]:
    """
    Query sequence and MD tag of a read aligned to REFERENCE.

    Args:
        start: 0-based reference start of the first aligned base
        cigar: CIGAR string
        subs: reference position -> read base at that position
        inserted: anchor position -> inserted bases (default all 'G')
        clip_base: Base used for soft-clipped query positions

    Returns:
        (sequence, md)
    """
    subs = subs or {}
    inserted = inserted or {}
    seq = []
    md = []
    run = 0
    ref_pos = start
    for length, op in _CIGAR_RE.findall(cigar):
        length = int(length)
        if op in "M=X":
            for r in range(ref_pos, ref_pos + length):
                base = subs.get(r, REFERENCE[r])
                seq.append(base)
                if base != REFERENCE[r]:
                    md.append(f"{run}{REFERENCE[r]}")
                    run = 0
                else:
                    run += 1
            ref_pos += length
        elif op == "I":
            bases = inserted.get(ref_pos - 1, "G" * length)
            assert len(bases) == length
            seq.append(bases)
        elif op == "D":
            md.append(f"{run}^{REFERENCE[ref_pos : ref_pos + length]}")
            run = 0
            ref_pos += length
        elif op == "N":
            ref_pos += length
        elif op == "S":
            seq.append(clip_base * length)
    md.append(str(run))
    return "".join(seq), "".join(md)


def make_segment(
    name: str,
    start: int,
    cigar: str,
    subs: dict[int, str] | None = None,
    inserted: dict[int, str] | None = None,
    mapq: int = 60,
    quals: list[int] | None = None,
    flag: int = 0,
    with_md: bool = True,
) -> pysam.AlignedSegment:
    """Create an AlignedSegment on chr1 with a consistent MD tag."""
    seq, md = simulate_read(start, cigar, subs, inserted)
    a = pysam.AlignedSegment()
    a.query_name = name
    a.query_sequence = seq
    a.flag = flag
    a.reference_id = 0
    a.reference_start = start
    a.mapping_quality = mapq
    a.cigarstring = cigar
    a.query_qualities = quals if quals else [30] * len(seq)
    if with_md:
        a.set_tag("MD", md)
    return a


@pytest.fixture
def reference() -> str:
    return REFERENCE


@pytest.fixture
def simulate():
    return simulate_read


@pytest.fixture
def make_read():
    return make_segment


@pytest.fixture
def build_bam(tmp_path: Path):
    """Factory writing reads to a sorted, indexed BAM under tmp_path."""

    def _build(reads, filename: str = "test.bam", contig: str = CONTIG, index: bool = True) -> Path:
        bam_path = tmp_path / filename
        header = {
            "HD": {"VN": "1.0", "SO": "coordinate"},
            "SQ": [{"LN": len(REFERENCE), "SN": contig}],
        }
        with pysam.AlignmentFile(str(bam_path), "wb", header=header) as outf:
            for r in reads:
                outf.write(r)
        sorted_bam = tmp_path / filename.replace(".bam", ".sorted.bam")
        pysam.sort("-o", str(sorted_bam), str(bam_path))
        if index:
            pysam.index(str(sorted_bam))
        return sorted_bam

    return _build
