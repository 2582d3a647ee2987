"""
Data models for vav.

Provides Pydantic models for variants, thresholds, configuration and summaries.
"""

from .core import (
    EvidenceThresholds,
    GenomicInterval,
    Variant,
    VariantSummary,
    VariantType,
    VavConfig,
)

__all__ = [
    "EvidenceThresholds",
    "GenomicInterval",
    "Variant",
    "VariantSummary",
    "VariantType",
    "VavConfig",
]
