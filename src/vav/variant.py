"""Variant string parsing and variant list loading."""

import logging
from pathlib import Path

from pydantic import ValidationError

from .exceptions import MalformedVariant
from .models.core import EMPTY_ALLELE, Variant

logger = logging.getLogger(__name__)

__all__ = [
    "AMBIGUITY_CODES",
    "NUCLEOTIDES",
    "RECOGNIZED_SYMBOLS",
    "dedupe_variants",
    "has_ambiguity",
    "load_variant_list",
    "parse_variant",
    "parse_variants",
]

NUCLEOTIDES = frozenset("ACGT")
# IUPAC codes are accepted in input but never match a read exactly
AMBIGUITY_CODES = frozenset("NRYKMSWBDHV")
RECOGNIZED_SYMBOLS = NUCLEOTIDES | AMBIGUITY_CODES


def _parse_allele(text: str, allele: str, name: str) -> str:
    """Validate one allele string; ``-`` stands for an empty allele."""
    if allele == EMPTY_ALLELE:
        return ""
    if not allele:
        raise MalformedVariant(text, allele or text, f"missing {name} allele")
    for symbol in allele:
        if symbol.upper() not in RECOGNIZED_SYMBOLS:
            raise MalformedVariant(text, allele, f"unrecognized nucleotide '{symbol}' in {name}")
    return allele.upper()


def parse_variant(text: str) -> Variant:
    """
    Parse a variant string of the form ``<chrom>:<pos><ref>><alt>``.

    ``-`` denotes an empty allele, e.g. ``chr1:12345AT>-`` (deletion) or
    ``chr1:12345->GC`` (insertion between 12345 and 12346).

    Args:
        text: Variant string

    Returns:
        Parsed Variant

    Raises:
        MalformedVariant: If any part of the string is invalid.
    """
    raw = text.strip()
    chrom, sep, rest = raw.rpartition(":")
    if not sep:
        raise MalformedVariant(text, raw, "missing ':' between chromosome and position")
    if not chrom:
        raise MalformedVariant(text, raw, "empty chromosome")

    digits = 0
    while digits < len(rest) and rest[digits] in "0123456789":
        digits += 1
    pos_text, alleles = rest[:digits], rest[digits:]
    if not pos_text:
        raise MalformedVariant(text, rest, "position is not a positive integer")
    pos = int(pos_text)
    if pos < 1:
        raise MalformedVariant(text, pos_text, "position is not a positive integer")

    ref_text, sep, alt_text = alleles.partition(">")
    if not sep:
        raise MalformedVariant(text, alleles or rest, "missing '>' between REF and ALT")

    ref = _parse_allele(text, ref_text, "REF")
    alt = _parse_allele(text, alt_text, "ALT")
    if not ref and not alt:
        raise MalformedVariant(text, alleles, "REF and ALT cannot both be empty")

    try:
        return Variant(chrom=chrom, pos=pos, ref=ref, alt=alt)
    except ValidationError as e:
        raise MalformedVariant(text, raw, str(e)) from e


def parse_variants(texts: list[str]) -> list[Variant]:
    """Parse every string; the first malformed one aborts."""
    return [parse_variant(t) for t in texts]


def dedupe_variants(variants: list[Variant]) -> list[Variant]:
    """Drop repeated variants (same canonical form), keeping the first occurrence."""
    seen: set[str] = set()
    unique = []
    for v in variants:
        if v.canonical in seen:
            logger.debug("Skipping duplicate variant %s", v.canonical)
            continue
        seen.add(v.canonical)
        unique.append(v)
    return unique


def has_ambiguity(variant: Variant) -> bool:
    """True when REF or ALT carries an IUPAC ambiguity code."""
    return any(b not in NUCLEOTIDES for b in variant.ref + variant.alt)


def load_variant_list(path: Path) -> list[str]:
    """
    Read variant strings from a text file, one per line.

    Blank lines and lines starting with ``#`` are ignored.
    """
    texts = []
    with open(path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            texts.append(line)
    logger.info("%d variants read from %s", len(texts), path)
    return texts
