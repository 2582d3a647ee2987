"""
CIGAR operations and MD tag tokens.

CIGAR kinds use the BAM operation codes, so ``pysam.AlignedSegment.cigartuples``
can be consumed directly as ``(kind, length)`` pairs.
"""

from collections.abc import Iterable, Iterator
from enum import Enum, IntEnum
from typing import NamedTuple

from ..exceptions import InconsistentAlignment

__all__ = [
    "AlignmentOperation",
    "CigarKind",
    "MdOp",
    "MdToken",
    "cigar_string",
    "iter_md_tokens",
    "operation_totals",
    "parse_cigar",
]


class CigarKind(IntEnum):
    """CIGAR operation kinds (BAM_C* codes)."""

    MATCH = 0  # M
    INSERTION = 1  # I
    DELETION = 2  # D
    REF_SKIP = 3  # N
    SOFT_CLIP = 4  # S
    HARD_CLIP = 5  # H
    PAD = 6  # P
    SEQ_MATCH = 7  # =
    SEQ_MISMATCH = 8  # X

    @property
    def symbol(self) -> str:
        return CIGAR_SYMBOLS[self.value]

    @property
    def consumes_query(self) -> bool:
        return self in _QUERY_CONSUMING

    @property
    def consumes_reference(self) -> bool:
        return self in _REFERENCE_CONSUMING

    @property
    def is_aligned(self) -> bool:
        """True for M, = and X, which all pair a query base with a reference base."""
        return self in _ALIGNED


CIGAR_SYMBOLS = "MIDNSHP=X"
_DIGITS = "0123456789"
_MD_BASES = frozenset("ACGTNRYKMSWBDHVacgtnrykmswbdhv")

_ALIGNED = frozenset({CigarKind.MATCH, CigarKind.SEQ_MATCH, CigarKind.SEQ_MISMATCH})
_QUERY_CONSUMING = _ALIGNED | {CigarKind.INSERTION, CigarKind.SOFT_CLIP}
_REFERENCE_CONSUMING = _ALIGNED | {CigarKind.DELETION, CigarKind.REF_SKIP}


class AlignmentOperation(NamedTuple):
    """One CIGAR run, in pysam order: ``(kind, length)``."""

    kind: CigarKind
    length: int


def parse_cigar(cigar: str) -> list[AlignmentOperation]:
    """
    Parse a CIGAR string such as ``5S10M2D3M``.

    Raises:
        InconsistentAlignment: If the string is not a valid CIGAR.
    """
    ops: list[AlignmentOperation] = []
    num = ""
    for ch in cigar:
        if ch in _DIGITS:
            num += ch
            continue
        idx = CIGAR_SYMBOLS.find(ch)
        if idx < 0 or not num or int(num) == 0:
            raise InconsistentAlignment(f"malformed CIGAR '{cigar}'")
        ops.append(AlignmentOperation(CigarKind(idx), int(num)))
        num = ""
    if num:
        raise InconsistentAlignment(f"trailing length in CIGAR '{cigar}'")
    return ops


def cigar_string(ops: Iterable[tuple[int, int]]) -> str:
    """Render ``(kind, length)`` pairs back into a CIGAR string."""
    return "".join(f"{length}{CIGAR_SYMBOLS[kind]}" for kind, length in ops)


def operation_totals(ops: Iterable[tuple[int, int]]) -> dict[CigarKind, int]:
    """
    Sum operation lengths per kind.

    ``=`` and ``X`` are folded into ``M``; padding is dropped.
    """
    totals: dict[CigarKind, int] = {}
    for kind, length in ops:
        kind = CigarKind(kind)
        if kind is CigarKind.PAD:
            continue
        if kind.is_aligned:
            kind = CigarKind.MATCH
        totals[kind] = totals.get(kind, 0) + length
    return totals


class MdOp(Enum):
    MATCH = "match"
    MISMATCH = "mismatch"
    DELETION = "deletion"


class MdToken(NamedTuple):
    """
    One MD tag token.

    MATCH carries a run length (possibly 0), MISMATCH the single reference base,
    DELETION the deleted reference bases.
    """

    op: MdOp
    length: int
    bases: str = ""


def iter_md_tokens(md: str) -> Iterator[MdToken]:
    """
    Tokenize an MD tag, e.g. ``10A5^AC6`` ->
    ``MATCH 10, MISMATCH A, MATCH 5, DELETION AC, MATCH 6``.

    Raises:
        InconsistentAlignment: On characters outside the MD grammar.
    """
    i = 0
    n = len(md)
    while i < n:
        ch = md[i]
        if ch in _DIGITS:
            j = i
            while j < n and md[j] in _DIGITS:
                j += 1
            yield MdToken(MdOp.MATCH, int(md[i:j]))
            i = j
        elif ch == "^":
            j = i + 1
            while j < n and md[j] in _MD_BASES:
                j += 1
            if j == i + 1:
                raise InconsistentAlignment(f"malformed MD tag '{md}': empty deletion")
            yield MdToken(MdOp.DELETION, j - i - 1, md[i + 1 : j].upper())
            i = j
        elif ch in _MD_BASES:
            yield MdToken(MdOp.MISMATCH, 1, ch.upper())
            i += 1
        else:
            raise InconsistentAlignment(f"malformed MD tag '{md}': unexpected '{ch}'")
