"""Tests for counter module."""

import dataclasses

import pytest

from vav.config import SummaryField
from vav.core.record import ReadRecord
from vav.counter import EvidenceCounter
from vav.models.core import EvidenceThresholds
from vav.variant import parse_variant

# chr1:121A>C on the synthetic reference
VARIANT = parse_variant("chr1:121A>C")


@pytest.fixture
def records(make_read):
    """A mix of reference, alt, margin, unknown and low-mapq reads."""
    reads = [
        make_read("ref1", 100, "41M"),
        make_read("ref2", 95, "50M"),
        make_read("alt1", 100, "41M", subs={120: "C"}),
        make_read("alt2", 105, "35M", subs={120: "C"}),
        make_read("edge", 115, "10M", subs={120: "C"}),
        make_read("other", 100, "41M", subs={120: "G"}),
        make_read("del", 100, "20M2D21M"),
        make_read("lowmapq", 100, "41M", subs={120: "C"}, mapq=5),
    ]
    return [ReadRecord.from_segment(r) for r in reads]


def test_filter_low_mapq(records):
    counter = EvidenceCounter(EvidenceThresholds(min_mapq=30))
    lowmapq = records[-1]
    assert counter._should_filter_record(lowmapq) is True
    assert counter.classify_record(VARIANT, lowmapq) is None


def test_filter_flags(make_read):
    secondary = ReadRecord.from_segment(make_read("sec", 100, "41M", flag=256))
    supplementary = ReadRecord.from_segment(make_read("sup", 100, "41M", flag=2048))
    unmapped = dataclasses.replace(secondary, is_unmapped=True, is_secondary=False)

    counter = EvidenceCounter()
    assert counter._should_filter_record(secondary) is False
    assert counter._should_filter_record(supplementary) is False
    assert counter._should_filter_record(unmapped) is True

    strict = EvidenceCounter(exclude_secondary=True, exclude_supplementary=True)
    assert strict._should_filter_record(secondary) is True
    assert strict._should_filter_record(supplementary) is True


def test_tally_records(records):
    summary = EvidenceCounter().tally_records(VARIANT, records).summary()
    assert summary.reference == 2
    assert summary.proper == 2
    assert summary.margin == 1
    assert summary.unknown == 2
    assert summary.alleles == 4
    # lowmapq is excluded from every category
    assert summary.total_count == len(records) - 1


def test_inconsistent_read_is_skipped(records):
    broken = dataclasses.replace(records[0], name="broken", md="5")
    counter = EvidenceCounter()
    assert counter.classify_record(VARIANT, broken) is None
    assert counter.warnings.count("inconsistent_alignment") == 1

    tally = counter.tally_records(VARIANT, [broken, *records])
    assert tally.classified == len(records) - 1


def test_reference_mismatch_warning(records):
    counter = EvidenceCounter()
    evidence = counter.classify_record(parse_variant("chr1:121G>C"), records[0])
    assert evidence.reason == "reference mismatch"
    assert counter.warnings.count("reference_mismatch") == 1


def test_parallel_batches_match_sequential(records):
    sequential = EvidenceCounter().tally_records(VARIANT, records)
    parallel = EvidenceCounter(threads=3, batch_size=2).count_variant(VARIANT, records * 5)
    for field in SummaryField:
        assert parallel[field] == sequential[field] * 5


def test_count_variant_without_reads():
    tally = EvidenceCounter(threads=2).count_variant(VARIANT, [])
    assert tally.classified == 0
