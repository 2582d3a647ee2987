"""
Evidence classification of one read against one variant.

Decision sequence (first match wins):

1. Span not observable (outside the read, soft-clipped, skipped by an N,
   a substitution span that the read deletes, or a deleted
   insertion site)                                             -> UNKNOWN
2. Observed allele has ambiguous bases, or the MD reference
   disagrees with the variant REF                              -> UNKNOWN
3. Observed allele == REF                                     -> REFERENCE
4. Observed allele == ALT, then in order:
   supporting base closer than ``min_margin`` to a read edge   -> MARGIN_ALT
   supporting base quality below ``min_baseq``                 -> LOWQ_ALT
   extra variation abutting the allele or too much nearby      -> EXCESSIVE_ALT
   otherwise                                                   -> PROPER_ALT
5. Anything else (a third allele)                             -> UNKNOWN

Reference calls are never margin/quality/excess flagged.
"""

from enum import Enum
from typing import NamedTuple

from .core.cigar import CigarKind
from .core.cursor import AlignmentCursor, AlignmentEvent
from .models.core import EvidenceThresholds, Variant, VariantType
from .variant import NUCLEOTIDES, has_ambiguity

__all__ = ["Evidence", "EvidenceCategory", "classify"]


class EvidenceCategory(str, Enum):
    """Outcome for one read relative to one variant."""

    REFERENCE = "reference"
    PROPER_ALT = "proper"
    MARGIN_ALT = "margin"
    LOWQ_ALT = "lowq"
    EXCESSIVE_ALT = "excessive"
    UNKNOWN = "unknown"

    @property
    def is_alt(self) -> bool:
        return self in _ALT_CATEGORIES


_ALT_CATEGORIES = frozenset(
    {
        EvidenceCategory.PROPER_ALT,
        EvidenceCategory.MARGIN_ALT,
        EvidenceCategory.LOWQ_ALT,
        EvidenceCategory.EXCESSIVE_ALT,
    }
)


class Evidence(NamedTuple):
    """
    Classification result with the context used for reporting.

    ``informative`` is set when the read shows a fully observable allele other
    than the reference (the expected ALT or a third allele).
    """

    category: EvidenceCategory
    reason: str
    observed: str | None = None
    margin: int | None = None
    min_quality: int | None = None
    informative: bool = False


class _AlleleLayout(NamedTuple):
    """Reference geometry of a variant allele."""

    span: range  # reference positions replaced by the allele
    flanks: tuple[int, int]  # the reference bases bracketing the allele
    junctions: range  # insertion anchors whose bases belong to the allele


def _layout(variant: Variant) -> _AlleleLayout:
    s, e = variant.start, variant.end
    if variant.variant_type is VariantType.INSERTION:
        # Pure insertion between pos and pos + 1
        return _AlleleLayout(range(s, s), (s, s + 1), range(s, s + 1))
    if variant.is_substitution:
        return _AlleleLayout(range(s, e), (s - 1, e), range(s, e - 1))
    return _AlleleLayout(range(s, e), (s - 1, e), range(s - 1, e))


def _unknown(reason: str, observed: str | None = None, informative: bool = False) -> Evidence:
    return Evidence(EvidenceCategory.UNKNOWN, reason, observed, informative=informative)


def _is_own_event(event: AlignmentEvent, layout: _AlleleLayout) -> bool:
    """True if the event is part of the allele itself."""
    if event.kind is CigarKind.INSERTION:
        return event.start in layout.junctions
    if event.kind is CigarKind.SEQ_MISMATCH:
        return event.start in layout.span
    return bool(layout.span) and event.start >= layout.span.start and event.end <= layout.span.stop


def _is_excessive(
    cursor: AlignmentCursor, layout: _AlleleLayout, thresholds: EvidenceThresholds
) -> bool:
    """
    Artifact heuristic: extra variation touching the allele footprint, or more
    than ``max_nearby_events`` events within ``excess_window`` bases of it.
    """
    left, right = layout.flanks
    lo = left + 1 - thresholds.excess_window
    hi = right + thresholds.excess_window
    nearby = 0
    for event in cursor.events():
        if _is_own_event(event, layout):
            continue
        if event.kind is CigarKind.INSERTION:
            if left <= event.start < right:
                return True
            if lo - 1 <= event.start < hi:
                nearby += 1
        else:
            if event.start <= right and event.end > left:
                return True
            if event.start < hi and event.end > lo:
                nearby += 1
    return nearby > thresholds.max_nearby_events


def classify(
    variant: Variant, cursor: AlignmentCursor, thresholds: EvidenceThresholds
) -> Evidence:
    """
    Classify one read (as an AlignmentCursor) against a variant.

    Mapping-quality filtering happens before this call; every read that reaches
    it gets exactly one category.

    Args:
        variant: The variant being tested
        cursor: Coordinate map of the read
        thresholds: Margin, base quality and excess thresholds

    Returns:
        Evidence for the read
    """
    if has_ambiguity(variant):
        return _unknown("ambiguous variant allele")
    if not cursor.has_md:
        return _unknown("missing MD tag")

    layout = _layout(variant)

    for r in layout.span:
        if not cursor.covers(r):
            return _unknown("span not covered by read")
    if not variant.is_substitution:
        for r in layout.flanks:
            if not cursor.covers(r):
                return _unknown("flank not covered by read")

    # Skipped (N) bases are neither observed nor deleted
    footprint = layout.span if variant.is_substitution else [*layout.span, *layout.flanks]
    if any(r in cursor.skips for r in footprint):
        return _unknown("span skipped in read")
    if variant.is_substitution and any(cursor.is_deleted(r) for r in layout.span):
        return _unknown("span deleted in read")
    if not variant.ref and any(cursor.is_deleted(f) for f in layout.flanks):
        return _unknown("insertion site deleted in read", informative=True)

    # Observed allele: aligned span bases plus insertions at allele junctions
    parts: list[str] = []
    supporting: list[int] = []

    def collect_inserted(anchor: int) -> None:
        if anchor in layout.junctions:
            for q in cursor.inserted_after(anchor):
                parts.append(cursor.sequence[q])
                supporting.append(q)

    collect_inserted(variant.start - 1)
    for r in layout.span:
        q = cursor.query_index(r)
        if q is not None:
            parts.append(cursor.sequence[q])
            supporting.append(q)
        collect_inserted(r)
    if not variant.ref:
        collect_inserted(variant.start)
    observed = "".join(parts)

    if any(b not in NUCLEOTIDES for b in observed):
        return _unknown("ambiguous base in read", observed)

    read_ref = [cursor.ref_bases.get(r) for r in layout.span]
    if None not in read_ref and "".join(read_ref) != variant.ref:
        return _unknown("reference mismatch", observed)

    if observed == variant.ref:
        return Evidence(EvidenceCategory.REFERENCE, "reference allele", observed)

    if observed != variant.alt:
        return _unknown("other allele", observed, informative=True)

    if not variant.is_substitution and any(cursor.is_deleted(f) for f in layout.flanks):
        return _unknown("deletion extends past the allele", observed, informative=True)

    if not supporting:
        # Pure deletion: the bases bracketing the junction carry the evidence
        supporting = [cursor.query_index(f) for f in layout.flanks]

    margin = min(int(cursor.edge_distance[q]) for q in supporting)
    min_quality = None
    if cursor.qualities is not None:
        min_quality = min(cursor.qualities[q] for q in supporting)

    if margin < thresholds.min_margin:
        category, reason = EvidenceCategory.MARGIN_ALT, "alt near read edge"
    elif min_quality is not None and min_quality < thresholds.min_baseq:
        category, reason = EvidenceCategory.LOWQ_ALT, "alt with low base quality"
    elif _is_excessive(cursor, layout, thresholds):
        category, reason = EvidenceCategory.EXCESSIVE_ALT, "alt amid extra variation"
    else:
        category, reason = EvidenceCategory.PROPER_ALT, "alt allele"

    return Evidence(category, reason, observed, margin, min_quality, informative=True)
