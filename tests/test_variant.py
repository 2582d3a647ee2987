"""Tests for variant string parsing."""

import pytest

from vav.exceptions import MalformedVariant
from vav.models.core import VariantType
from vav.variant import dedupe_variants, has_ambiguity, load_variant_list, parse_variant


class TestParseVariant:
    def test_snp(self):
        v = parse_variant("chr1:12345A>C")
        assert v.chrom == "chr1"
        assert v.pos == 12345
        assert v.ref == "A"
        assert v.alt == "C"
        assert v.start == 12344
        assert v.end == 12345
        assert v.variant_type == VariantType.SNP

    def test_deletion(self):
        v = parse_variant("chr1:12345AT>-")
        assert v.ref == "AT"
        assert v.alt == ""
        assert v.variant_type == VariantType.DELETION
        assert v.end - v.start == 2

    def test_insertion(self):
        v = parse_variant("chr2:500->GC")
        assert v.ref == ""
        assert v.alt == "GC"
        assert v.variant_type == VariantType.INSERTION
        assert v.end == v.start == 499
        assert not v.is_substitution

    def test_mnp_and_complex(self):
        assert parse_variant("1:10AC>GT").variant_type == VariantType.MNP
        assert parse_variant("1:10AC>G").variant_type == VariantType.COMPLEX
        assert parse_variant("1:10AC>GT").is_substitution

    def test_whitespace_and_case(self):
        v = parse_variant("  chrX:7ac>gt \n")
        assert v.chrom == "chrX"
        assert v.ref == "AC"
        assert v.alt == "GT"

    def test_chromosome_with_colon(self):
        v = parse_variant("HLA-A*01:01:100A>G")
        assert v.chrom == "HLA-A*01:01"
        assert v.pos == 100

    def test_canonical_round_trip(self):
        for text in ["chr1:12345A>C", "chr1:12345AT>-", "chr2:500->GC"]:
            assert parse_variant(text).canonical == text
            assert str(parse_variant(text)) == text

    def test_ambiguity_code_accepted(self):
        v = parse_variant("chr1:100N>A")
        assert has_ambiguity(v)
        assert not has_ambiguity(parse_variant("chr1:100G>A"))

    @pytest.mark.parametrize(
        "text, offending",
        [
            ("chr112345A>C", "chr112345A>C"),
            (":12345A>C", ":12345A>C"),
            ("chr1:12345AC", "AC"),
            ("chr1:A>C", "A>C"),
            ("chr1:0A>C", "0"),
            ("chr1:100A>Z", "Z"),
            ("chr1:100->-", "->-"),
        ],
    )
    def test_malformed(self, text, offending):
        with pytest.raises(MalformedVariant) as excinfo:
            parse_variant(text)
        assert excinfo.value.offending == offending
        assert text.strip() in str(excinfo.value)

    def test_malformed_is_value_error(self):
        with pytest.raises(ValueError):
            parse_variant("garbage")


def test_dedupe_keeps_first_occurrence():
    variants = [parse_variant(t) for t in ["1:5A>C", "1:3G>T", "1:5a>c", "1:5A>G"]]
    unique = dedupe_variants(variants)
    assert [v.canonical for v in unique] == ["1:5A>C", "1:3G>T", "1:5A>G"]


def test_load_variant_list(tmp_path):
    path = tmp_path / "variants.txt"
    path.write_text("# header\nchr1:10A>C\n\n  chr1:20AT>-  \n")
    assert load_variant_list(path) == ["chr1:10A>C", "chr1:20AT>-"]
