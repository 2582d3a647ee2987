"""
vav (Validate Alignment support for Variants) - read-level evidence for variant calls.

This package provides a command-line interface and Python API that classify
every read overlapping a variant as reference, alternate (proper, near a read
edge, low quality or amid excessive variation) or unknown support.

Example usage:
    $ vav run -b sample.bam -v 'chr1:12345A>C' -v 'chr2:500AT>-'
"""

__version__ = "0.3.0"

from .classifier import Evidence, EvidenceCategory, classify
from .models.core import EvidenceThresholds, Variant, VariantSummary, VariantType, VavConfig
from .pipeline import Pipeline
from .variant import parse_variant

__all__ = [
    "__version__",
    "Evidence",
    "EvidenceCategory",
    "EvidenceThresholds",
    "Pipeline",
    "Variant",
    "VariantSummary",
    "VariantType",
    "VavConfig",
    "classify",
    "parse_variant",
]
