from .input import AlignmentSource
from .output import format_summary_line, render_summaries, write_json

__all__ = ["AlignmentSource", "format_summary_line", "render_summaries", "write_json"]
