"""
Core data models for vav.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_EXCESS_WINDOW,
    DEFAULT_MAX_NEARBY_EVENTS,
    DEFAULT_MIN_BASEQ,
    DEFAULT_MIN_MAPQ,
    DEFAULT_MIN_MARGIN,
)

EMPTY_ALLELE = "-"


class VariantType(str, Enum):
    """Type of genomic variant."""
    SNP = "SNP"
    MNP = "MNP"
    INSERTION = "INSERTION"
    DELETION = "DELETION"
    COMPLEX = "COMPLEX"


class GenomicInterval(BaseModel):
    """
    Represents a 0-based, half-open genomic interval [start, end).

    This is the representation handed to the alignment fetch layer.
    """
    chrom: str
    start: int = Field(ge=0, description="0-based start position (inclusive)")
    end: int = Field(ge=0, description="0-based end position (exclusive)")

    @model_validator(mode="after")
    def validate_interval(self) -> "GenomicInterval":
        if self.end < self.start:
            raise ValueError(f"End position ({self.end}) must be >= start position ({self.start})")
        return self


class Variant(BaseModel):
    """
    One variant call, as given on the command line.

    ``pos`` is 1-based and names the first reference base affected. For a pure
    insertion (empty ``ref``) the inserted bases sit between ``pos`` and
    ``pos + 1``.
    """
    model_config = ConfigDict(frozen=True)

    chrom: str = Field(min_length=1)
    pos: int = Field(ge=1, description="1-based position of the first affected base")
    ref: str = ""
    alt: str = ""

    @field_validator("ref", "alt")
    @classmethod
    def normalize_allele(cls, v: str) -> str:
        v = v.upper()
        return "" if v == EMPTY_ALLELE else v

    @model_validator(mode="after")
    def validate_alleles(self) -> "Variant":
        if not self.ref and not self.alt:
            raise ValueError("REF and ALT cannot both be empty")
        return self

    @property
    def start(self) -> int:
        """0-based position of the first reference base."""
        return self.pos - 1

    @property
    def end(self) -> int:
        """0-based exclusive end of the reference span."""
        return self.start + len(self.ref)

    @property
    def variant_type(self) -> VariantType:
        if len(self.ref) == len(self.alt):
            return VariantType.SNP if len(self.ref) == 1 else VariantType.MNP
        if not self.ref:
            return VariantType.INSERTION
        if not self.alt:
            return VariantType.DELETION
        return VariantType.COMPLEX

    @property
    def is_substitution(self) -> bool:
        return self.variant_type in (VariantType.SNP, VariantType.MNP)

    @property
    def canonical(self) -> str:
        """String form ``chrom:posREF>ALT`` with ``-`` for an empty allele."""
        return f"{self.chrom}:{self.pos}{self.ref or EMPTY_ALLELE}>{self.alt or EMPTY_ALLELE}"

    def __str__(self) -> str:
        return self.canonical


class EvidenceThresholds(BaseModel):
    """
    Thresholds consumed by the read filter and the evidence classifier.
    """
    model_config = ConfigDict(frozen=True)

    min_mapq: int = Field(default=DEFAULT_MIN_MAPQ, ge=0)
    min_margin: int = Field(default=DEFAULT_MIN_MARGIN, ge=0)
    min_baseq: int = Field(default=DEFAULT_MIN_BASEQ, ge=0)
    excess_window: int = Field(default=DEFAULT_EXCESS_WINDOW, ge=0)
    max_nearby_events: int = Field(default=DEFAULT_MAX_NEARBY_EVENTS, ge=0)


class VariantSummary(BaseModel):
    """
    Per-variant evidence counts. Immutable once the scan of a variant is done.
    """
    model_config = ConfigDict(frozen=True)

    reference: int = Field(default=0, ge=0)
    proper: int = Field(default=0, ge=0)
    margin: int = Field(default=0, ge=0)
    lowq: int = Field(default=0, ge=0)
    excessive: int = Field(default=0, ge=0)
    alleles: int = Field(default=0, ge=0)
    unknown: int = Field(default=0, ge=0)

    @property
    def total_count(self) -> int:
        """Number of classified reads (every category once; ``alleles`` excluded)."""
        return (
            self.reference + self.proper + self.margin + self.lowq + self.excessive + self.unknown
        )

    @property
    def alt_count(self) -> int:
        return self.proper + self.margin + self.lowq + self.excessive

    def _freq(self, count: int) -> float:
        total = self.total_count
        if total == 0:
            return 0.0
        return round(count / total, 4)

    @property
    def ref_freq(self) -> float:
        return self._freq(self.reference)

    @property
    def alt_freq(self) -> float:
        return self._freq(self.alt_count)

    @property
    def proper_freq(self) -> float:
        return self._freq(self.proper)

    @property
    def margin_freq(self) -> float:
        return self._freq(self.margin)

    @property
    def lowq_freq(self) -> float:
        return self._freq(self.lowq)


class VavConfig(BaseModel):
    """
    Global configuration for a vav run.
    """
    # Input
    bam_file: Path
    variants: list[Variant] = Field(default_factory=list)

    # Output
    output: Path | None = None

    # Filters
    min_mapq: int = Field(default=DEFAULT_MIN_MAPQ, ge=0)
    exclude_secondary: bool = False
    exclude_supplementary: bool = False

    # Classification
    min_margin: int = Field(default=DEFAULT_MIN_MARGIN, ge=0)
    min_baseq: int = Field(default=DEFAULT_MIN_BASEQ, ge=0)
    excess_window: int = Field(default=DEFAULT_EXCESS_WINDOW, ge=0)
    max_nearby_events: int = Field(default=DEFAULT_MAX_NEARBY_EVENTS, ge=0)

    # Performance
    threads: int = Field(default=1, ge=1)
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1)

    @field_validator("variants", mode="before")
    @classmethod
    def parse_variant_strings(cls, v):
        """Accept variant strings alongside Variant objects."""
        from ..variant import parse_variant

        if isinstance(v, (list, tuple)):
            return [parse_variant(item) if isinstance(item, str) else item for item in v]
        return v

    @field_validator("bam_file")
    @classmethod
    def validate_file_exists(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"File not found: {v}")
        return v

    @field_validator("output")
    @classmethod
    def validate_output(cls, v: Path | None) -> Path | None:
        if v is not None and v.is_dir():
            raise ValueError(f"Output path must be a file, not a directory: {v}")
        return v

    @property
    def thresholds(self) -> EvidenceThresholds:
        return EvidenceThresholds(
            min_mapq=self.min_mapq,
            min_margin=self.min_margin,
            min_baseq=self.min_baseq,
            excess_window=self.excess_window,
            max_nearby_events=self.max_nearby_events,
        )
