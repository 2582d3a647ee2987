"""
Alignment Cursor: reference <-> query correspondence for one read.

The cursor walks the CIGAR operations and the MD tag in lockstep:

- M/=/X consume both coordinates and one MD position each (match or mismatch).
- I consumes query only; the bases are recorded as inserted after the last
  reference position seen (the anchor).
- D consumes reference only and must meet a ``^bases`` MD token of equal length.
- N consumes reference only; MD does not describe skipped bases.
- S consumes query only and marks the edges of the aligned region.
- H consumes nothing.

A cursor belongs to one read and is discarded after classification.
"""

from collections.abc import Iterator, Sequence
from typing import NamedTuple

import numpy as np

from ..exceptions import InconsistentAlignment
from .cigar import (
    AlignmentOperation,
    CigarKind,
    MdOp,
    MdToken,
    iter_md_tokens,
)
from .record import ReadRecord

__all__ = ["AlignedPosition", "AlignmentCursor", "AlignmentEvent"]


class AlignedPosition(NamedTuple):
    """One step of the CIGAR/MD walk."""

    kind: CigarKind
    ref_pos: int | None  # None for inserted bases
    query_pos: int | None  # None for deleted/skipped reference bases
    ref_base: str | None  # From MD; None for insertions, skips and reads without MD
    is_mismatch: bool


class AlignmentEvent(NamedTuple):
    """
    A departure from the reference.

    Mismatches and deletions cover ``[start, end)``; an insertion sits after
    ``start`` and has ``end == start``.
    """

    kind: CigarKind
    start: int
    end: int


class _MdStream:
    """MD tokens consumed one reference base at a time."""

    def __init__(self, md: str, read_name: str | None):
        self._md = md
        self._name = read_name
        self._tokens = iter_md_tokens(md)
        self._pending = 0

    def _fail(self, message: str) -> InconsistentAlignment:
        return InconsistentAlignment(f"MD tag '{self._md}': {message}", self._name)

    def _next(self) -> MdToken | None:
        return next(self._tokens, None)

    def take_aligned(self) -> str | None:
        """Consume one aligned base; returns the reference base on a mismatch, else None."""
        while self._pending == 0:
            token = self._next()
            if token is None:
                raise self._fail("covers fewer aligned bases than the CIGAR")
            if token.op is MdOp.MATCH:
                self._pending = token.length
            elif token.op is MdOp.MISMATCH:
                return token.bases
            else:
                raise self._fail(f"deletion '^{token.bases}' where the CIGAR has aligned bases")
        self._pending -= 1
        return None

    def take_deletion(self, length: int) -> str:
        """Consume the ``^bases`` token of a CIGAR deletion."""
        if self._pending:
            raise self._fail("match run continues into a CIGAR deletion")
        token = self._next()
        while token is not None and token.op is MdOp.MATCH and token.length == 0:
            token = self._next()
        if token is None or token.op is not MdOp.DELETION:
            raise self._fail(f"no '^' token for a {length}D operation")
        if token.length != length:
            raise self._fail(f"'^{token.bases}' does not match a {length}D operation")
        return token.bases

    def finish(self) -> None:
        if self._pending:
            raise self._fail("covers more aligned bases than the CIGAR")
        for token in self._tokens:
            if token.op is not MdOp.MATCH or token.length:
                raise self._fail("covers more aligned bases than the CIGAR")


class AlignmentCursor:
    """
    Coordinate map of one read.

    Attributes:
        ref_to_query: reference position -> query index, or None when the base
            is deleted or skipped. Defined for every position of the aligned span.
        ref_bases: reference base per aligned/deleted position (needs MD).
        mismatches: reference positions that MD marks as mismatches.
        insertions: anchor reference position -> query indices inserted after it.
        deletions: ``(start, length)`` of every D operation.
        skips: reference positions covered by N operations.
        edge_distance: per query index, distance to the nearest read edge
            (sequence end or soft-clip boundary); -1 for clipped bases.
    """

    def __init__(
        self,
        cigar: Sequence[tuple[int, int]],
        md: str | None,
        sequence: str,
        qualities: Sequence[int] | None = None,
        reference_start: int = 0,
        name: str | None = None,
    ):
        self.name = name
        self.cigar = [AlignmentOperation(CigarKind(kind), length) for kind, length in cigar]
        self.md = md
        self.sequence = sequence.upper()
        self.qualities = list(qualities) if qualities is not None else None
        self.reference_start = reference_start

        self.ref_to_query: dict[int, int | None] = {}
        self.ref_bases: dict[int, str] = {}
        self.mismatches: set[int] = set()
        self.insertions: dict[int, list[int]] = {}
        self.deletions: list[tuple[int, int]] = []
        self.skips: set[int] = set()
        self.soft_clip_left = 0
        self.soft_clip_right = 0
        self.hard_clip_left = 0
        self.hard_clip_right = 0

        self._check_layout()
        self._build()
        self.edge_distance = self._edge_distances()

    @classmethod
    def from_record(cls, record: ReadRecord) -> "AlignmentCursor":
        return cls(
            record.cigar,
            record.md,
            record.sequence,
            record.qualities,
            record.reference_start,
            name=record.name,
        )

    @property
    def has_md(self) -> bool:
        return self.md is not None

    @property
    def reference_end(self) -> int:
        """0-based exclusive end of the aligned reference span."""
        return self.reference_start + len(self.ref_to_query)

    @property
    def aligned_query_start(self) -> int:
        return self.soft_clip_left

    @property
    def aligned_query_end(self) -> int:
        return len(self.sequence) - self.soft_clip_right

    def _fail(self, message: str) -> InconsistentAlignment:
        return InconsistentAlignment(message, self.name)

    def _check_layout(self) -> None:
        """Validate clip placement and the query length implied by the CIGAR."""
        if not self.cigar:
            raise self._fail("read has no CIGAR")
        if not self.sequence:
            raise self._fail("read has no query sequence")

        ops = [op for op in self.cigar if op.kind is not CigarKind.PAD]
        lo, hi = 0, len(ops)
        if ops and ops[0].kind is CigarKind.HARD_CLIP:
            self.hard_clip_left = ops[0].length
            lo += 1
        if hi - lo > 0 and ops[hi - 1].kind is CigarKind.HARD_CLIP:
            self.hard_clip_right = ops[hi - 1].length
            hi -= 1
        if hi - lo > 0 and ops[lo].kind is CigarKind.SOFT_CLIP:
            self.soft_clip_left = ops[lo].length
            lo += 1
        if hi - lo > 0 and ops[hi - 1].kind is CigarKind.SOFT_CLIP:
            self.soft_clip_right = ops[hi - 1].length
            hi -= 1
        for op in ops[lo:hi]:
            if op.kind in (CigarKind.HARD_CLIP, CigarKind.SOFT_CLIP):
                raise self._fail(f"{op.kind.symbol} operation inside the alignment")
        if not any(op.kind.is_aligned for op in ops[lo:hi]):
            raise self._fail("CIGAR has no aligned bases")

        query_length = sum(op.length for op in ops if op.kind.consumes_query)
        if query_length != len(self.sequence):
            raise self._fail(
                f"CIGAR query length {query_length} != sequence length {len(self.sequence)}"
            )
        if self.qualities is not None and len(self.qualities) != len(self.sequence):
            raise self._fail("quality and sequence lengths differ")

    def walk(self) -> Iterator[AlignedPosition]:
        """
        Yield one AlignedPosition per aligned, inserted, deleted or skipped base.

        Soft- and hard-clipped bases are not yielded.

        Raises:
            InconsistentAlignment: If the MD tag disagrees with the CIGAR.
        """
        md = _MdStream(self.md, self.name) if self.md is not None else None
        ref_pos = self.reference_start
        query_pos = 0

        for kind, length in self.cigar:
            if kind.is_aligned:
                for _ in range(length):
                    mismatch_base = md.take_aligned() if md is not None else None
                    if mismatch_base is not None:
                        yield AlignedPosition(kind, ref_pos, query_pos, mismatch_base, True)
                    else:
                        ref_base = self.sequence[query_pos] if md is not None else None
                        yield AlignedPosition(kind, ref_pos, query_pos, ref_base, False)
                    ref_pos += 1
                    query_pos += 1
            elif kind is CigarKind.INSERTION:
                for _ in range(length):
                    yield AlignedPosition(kind, None, query_pos, None, False)
                    query_pos += 1
            elif kind is CigarKind.DELETION:
                bases = md.take_deletion(length) if md is not None else None
                for i in range(length):
                    yield AlignedPosition(kind, ref_pos, None, bases[i] if bases else None, False)
                    ref_pos += 1
            elif kind is CigarKind.REF_SKIP:
                for _ in range(length):
                    yield AlignedPosition(kind, ref_pos, None, None, False)
                    ref_pos += 1
            elif kind is CigarKind.SOFT_CLIP:
                query_pos += length
            # H and P consume nothing

        if md is not None:
            md.finish()

    def _build(self) -> None:
        anchor = self.reference_start - 1
        for step in self.walk():
            if step.kind is CigarKind.INSERTION:
                self.insertions.setdefault(anchor, []).append(step.query_pos)
                continue

            r = step.ref_pos
            anchor = r
            self.ref_to_query[r] = step.query_pos
            if step.ref_base is not None:
                self.ref_bases[r] = step.ref_base
            if step.is_mismatch:
                self.mismatches.add(r)
            if step.kind is CigarKind.DELETION:
                if self.deletions and sum(self.deletions[-1]) == r:
                    start, length = self.deletions[-1]
                    self.deletions[-1] = (start, length + 1)
                else:
                    self.deletions.append((r, 1))
            elif step.kind is CigarKind.REF_SKIP:
                self.skips.add(r)

    def _edge_distances(self) -> np.ndarray:
        idx = np.arange(len(self.sequence))
        lo, hi = self.aligned_query_start, self.aligned_query_end
        dist = np.minimum(idx - lo, hi - 1 - idx)
        dist[(idx < lo) | (idx >= hi)] = -1
        return dist

    # ------------------------------------------------------------------
    # Lookups used by the classifier
    # ------------------------------------------------------------------

    def covers(self, ref_pos: int) -> bool:
        """True if ``ref_pos`` lies within the read's aligned reference span."""
        return ref_pos in self.ref_to_query

    def query_index(self, ref_pos: int) -> int | None:
        return self.ref_to_query.get(ref_pos)

    def is_deleted(self, ref_pos: int) -> bool:
        """True for positions inside the span that have no query base (D or N)."""
        return ref_pos in self.ref_to_query and self.ref_to_query[ref_pos] is None

    def inserted_after(self, ref_pos: int) -> list[int]:
        return self.insertions.get(ref_pos, [])

    def events(self) -> list[AlignmentEvent]:
        """Mismatches, insertions and deletions of this read, in reference order."""
        events = [AlignmentEvent(CigarKind.SEQ_MISMATCH, r, r + 1) for r in self.mismatches]
        events.extend(
            AlignmentEvent(CigarKind.INSERTION, anchor, anchor) for anchor in self.insertions
        )
        events.extend(
            AlignmentEvent(CigarKind.DELETION, start, start + length)
            for start, length in self.deletions
        )
        events.sort(key=lambda e: (e.start, e.kind))
        return events

    # ------------------------------------------------------------------
    # Re-derivation of the encoding
    # ------------------------------------------------------------------

    def cigar_totals(self) -> dict[CigarKind, int]:
        """
        Per-kind operation lengths re-derived from the coordinate map.

        Comparable with ``operation_totals(cigar)``.
        """
        derived = {
            CigarKind.MATCH: sum(1 for q in self.ref_to_query.values() if q is not None),
            CigarKind.INSERTION: sum(len(q) for q in self.insertions.values()),
            CigarKind.DELETION: sum(length for _, length in self.deletions),
            CigarKind.REF_SKIP: len(self.skips),
            CigarKind.SOFT_CLIP: self.soft_clip_left + self.soft_clip_right,
            CigarKind.HARD_CLIP: self.hard_clip_left + self.hard_clip_right,
        }
        return {kind: total for kind, total in derived.items() if total}

    def md_string(self) -> str | None:
        """Canonical MD tag re-derived from the recorded reference bases."""
        if not self.has_md:
            return None
        parts: list[str] = []
        run = 0
        in_deletion = False
        for r in range(self.reference_start, self.reference_end):
            if r in self.skips:
                continue
            if self.ref_to_query[r] is None:
                if not in_deletion:
                    parts.append(f"{run}^")
                    run = 0
                    in_deletion = True
                parts.append(self.ref_bases[r])
                continue
            in_deletion = False
            if r in self.mismatches:
                parts.append(f"{run}{self.ref_bases[r]}")
                run = 0
            else:
                run += 1
        parts.append(str(run))
        return "".join(parts)
