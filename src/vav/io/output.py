"""
Output Writers: JSON rendering of per-variant summaries.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any

from ..models.core import VariantSummary

logger = logging.getLogger(__name__)

JSON_INDENT = 2


def render_summaries(summaries: dict[str, VariantSummary]) -> dict[str, Any]:
    """
    JSON-ready form of the results.

    A single variant renders as its summary object; several render as a
    mapping from canonical variant string to summary, in input order.
    """
    if len(summaries) == 1:
        return next(iter(summaries.values())).model_dump()
    return {key: summary.model_dump() for key, summary in summaries.items()}


def write_json(data: dict[str, Any], path: Path | None = None) -> None:
    """Pretty-print ``data`` to ``path``, or to stdout when no path is given."""
    text = json.dumps(data, indent=JSON_INDENT)
    if path is None:
        sys.stdout.write(text + "\n")
        sys.stdout.flush()
        return
    with open(path, "w") as f:
        f.write(text + "\n")
    logger.info("Results written to %s", path)


def format_summary_line(canonical: str, summary: VariantSummary) -> str:
    """One-line digest of a variant's counts and frequencies for the log."""
    return (
        f"Variant {canonical} total {summary.total_count}; "
        f"Ref {summary.reference}({summary.ref_freq}); "
        f"Proper alt {summary.proper}({summary.proper_freq}); "
        f"Margin alt {summary.margin}({summary.margin_freq}); "
        f"Lowq alt {summary.lowq}({summary.lowq_freq})"
    )
