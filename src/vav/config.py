"""Summary slots and default thresholds for evidence counting."""

from enum import IntEnum

DEFAULT_MIN_MAPQ = 30
DEFAULT_MIN_MARGIN = 10
DEFAULT_MIN_BASEQ = 20
DEFAULT_EXCESS_WINDOW = 10
DEFAULT_MAX_NEARBY_EVENTS = 2
DEFAULT_BATCH_SIZE = 500


class SummaryField(IntEnum):
    """Enumeration for the slots of a per-variant evidence tally."""

    REFERENCE = 0  # Reads showing the reference allele
    PROPER = 1  # Confident alt support
    MARGIN = 2  # Alt support too close to a read edge
    LOWQ = 3  # Alt support with low base quality
    EXCESSIVE = 4  # Alt support amid extra nearby variation
    ALLELES = 5  # Informative non-reference reads (alt buckets + other alleles)
    UNKNOWN = 6  # Unobservable span, other alleles, ambiguous bases
