"""
CLI Entry Point: Exposes the vav functionality via command line.
"""

import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.markup import escape

from . import __version__
from .config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_EXCESS_WINDOW,
    DEFAULT_MAX_NEARBY_EVENTS,
    DEFAULT_MIN_BASEQ,
    DEFAULT_MIN_MAPQ,
    DEFAULT_MIN_MARGIN,
)
from .exceptions import VavError
from .io.output import render_summaries, write_json
from .models.core import VavConfig
from .pipeline import Pipeline
from .utils.logging import get_console, setup_logging
from .variant import load_variant_list, parse_variants

app = typer.Typer(help="vav: Validate Alignment support for Variants")

logger = logging.getLogger(__name__)


@app.callback()
def main():
    """
    vav: Validate Alignment support for Variants
    """
    pass


@app.command()
def run(
    bam_file: Path = typer.Option(..., "--bam", "-b", help="Indexed BAM file to scan"),
    variant_strings: list[str] | None = typer.Option(
        None,
        "--var",
        "-v",
        help="Variant as chrom:posREF>ALT ('-' for an empty allele). Can be specified multiple times.",
    ),
    variant_file: Path | None = typer.Option(
        None, "--var-file", help="File containing variants (one per line)"
    ),
    min_mapq: int = typer.Option(
        DEFAULT_MIN_MAPQ, "--mapq", help="Reads below this mapping quality are not counted"
    ),
    min_margin: int = typer.Option(
        DEFAULT_MIN_MARGIN, "--margin", help="Minimum distance of alt support from a read edge"
    ),
    min_baseq: int = typer.Option(
        DEFAULT_MIN_BASEQ, "--baseq", help="Minimum base quality of alt support"
    ),
    excess_window: int = typer.Option(
        DEFAULT_EXCESS_WINDOW, "--excess-window", help="Window (bp) for counting nearby events"
    ),
    max_nearby_events: int = typer.Option(
        DEFAULT_MAX_NEARBY_EVENTS,
        "--max-nearby-events",
        help="Nearby events tolerated before alt support is excessive",
    ),
    exclude_secondary: bool = typer.Option(
        False, "--exclude-secondary", help="Do not count secondary alignments"
    ),
    exclude_supplementary: bool = typer.Option(
        False, "--exclude-supplementary", help="Do not count supplementary alignments"
    ),
    threads: int = typer.Option(1, "--threads", "-t", help="Number of worker threads"),
    batch_size: int = typer.Option(
        DEFAULT_BATCH_SIZE, "--batch-size", help="Reads per classification batch"
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write JSON here instead of stdout"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose debug logging"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """
    Count read evidence for one or more variants in a BAM file.
    """
    setup_logging(verbose=verbose, log_file=str(log_file) if log_file else None)
    console = get_console()

    try:
        texts = list(variant_strings or [])
        if variant_file is not None:
            if not variant_file.exists():
                console.print(f"[bold red]Error: Variant file not found: {variant_file}[/bold red]")
                raise typer.Exit(code=1)
            texts.extend(load_variant_list(variant_file))

        variants = parse_variants(texts)
        if not variants:
            logger.warning("No variants given; writing an empty result")
            write_json({}, output)
            return

        config = VavConfig(
            bam_file=bam_file,
            variants=variants,
            output=output,
            min_mapq=min_mapq,
            min_margin=min_margin,
            min_baseq=min_baseq,
            excess_window=excess_window,
            max_nearby_events=max_nearby_events,
            exclude_secondary=exclude_secondary,
            exclude_supplementary=exclude_supplementary,
            threads=threads,
            batch_size=batch_size,
        )

        summaries = Pipeline(config, show_progress=not verbose).run()
        write_json(render_summaries(summaries), config.output)

    except (VavError, ValidationError, OSError) as e:
        console.print(f"[bold red]Error: {escape(str(e))}[/bold red]")
        raise typer.Exit(code=1) from e


@app.command()
def version():
    """
    Print the vav version.
    """
    typer.echo(f"vav {__version__}")


if __name__ == "__main__":
    app()
