"""Core alignment coordinate handling."""

from .cigar import AlignmentOperation, CigarKind, iter_md_tokens, operation_totals, parse_cigar
from .cursor import AlignedPosition, AlignmentCursor, AlignmentEvent
from .kernel import CoordinateKernel
from .record import ReadRecord

__all__ = [
    "AlignedPosition",
    "AlignmentCursor",
    "AlignmentEvent",
    "AlignmentOperation",
    "CigarKind",
    "CoordinateKernel",
    "ReadRecord",
    "iter_md_tokens",
    "operation_totals",
    "parse_cigar",
]
