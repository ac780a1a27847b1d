"""Render reports that already sit in a local directory."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from ivyreport.adapters.graphviz import DotRunner
from ivyreport.core.collector import collect
from ivyreport.core.context import ReportConfiguration
from ivyreport.core.exceptions import ReportGenerationError
from ivyreport.core.pipeline import ReportPipeline

from .._options import (
    ConfsOption,
    DotOption,
    JobsOption,
    OutputDirOption,
    ResolveIdOption,
    TimeoutOption,
)
from ..diagnostics import CliEmitter
from ..presenter import present_bundle
from ..state import emit_error, get_cli_state


def render(
    source: Annotated[
        Path,
        typer.Argument(
            metavar="SOURCE_DIR",
            help="Directory containing the <resolveId>-<conf>.xml reports.",
            exists=True,
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ],
    confs: ConfsOption,
    resolve_id: ResolveIdOption,
    output: OutputDirOption,
    dot: DotOption = None,
    jobs: JobsOption = 4,
    timeout: TimeoutOption = None,
) -> None:
    """Render HTML pages and dependency graphs from existing XML reports."""
    try:
        report = ReportConfiguration.parse(confs, resolve_id)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--confs/--resolve-id") from exc

    emitter = CliEmitter(get_cli_state())
    pipeline = ReportPipeline(DotRunner(dot), max_workers=jobs, timeout=timeout, emitter=emitter)
    try:
        collect(source, report.confs, report.resolve_id, output, emitter=emitter)
        bundle = pipeline.run(report.confs, report.resolve_id, output, output)
    except ReportGenerationError as exc:
        emit_error(f"Could not generate dependency reports: {exc}", exception=exc)
        raise typer.Exit(code=1) from exc

    present_bundle(bundle, report.confs, report.resolve_id)


__all__ = ["render"]
