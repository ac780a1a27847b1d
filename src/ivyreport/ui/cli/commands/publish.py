"""Locate, collect, and render the dependency report of a build."""

from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor
import os
from pathlib import Path
from typing import Annotated

import typer

from ivyreport.adapters.graphviz import DotRunner
from ivyreport.core.context import BuildContext, ReportConfiguration
from ivyreport.core.pipeline import ReportPipeline
from ivyreport.core.publisher import ReportPublisher

from .._options import (
    SETTINGS_PANEL,
    BranchOption,
    ConfsOption,
    DotOption,
    EnvOption,
    IsolatedEnvOption,
    JobsOption,
    OutputDirOption,
    PropertyFilesOption,
    ResolveIdOption,
    SettingsFileOption,
    TimeoutOption,
    WorkspaceOption,
    parse_env_pairs,
)
from ..diagnostics import CliEmitter
from ..presenter import present_bundle
from ..state import emit_warning, get_cli_state


def build_context(
    workspace: Path,
    settings: str | None,
    property_files: str | None,
    branch: str | None,
    env: list[str] | None,
    isolated_env: bool,
) -> BuildContext:
    """Assemble a `BuildContext` from shared command options."""
    overrides = parse_env_pairs(env)
    if isolated_env:
        variables = overrides
    else:
        variables = {**os.environ, **overrides}
    return BuildContext.capture(
        workspace,
        settings_file=settings,
        property_files=property_files,
        branch=branch,
        env=variables,
    )


def publish(
    workspace: WorkspaceOption,
    confs: ConfsOption,
    resolve_id: ResolveIdOption,
    output: OutputDirOption,
    settings: SettingsFileOption = None,
    property_files: PropertyFilesOption = None,
    branch: BranchOption = None,
    env: EnvOption = None,
    isolated_env: IsolatedEnvOption = False,
    dot: DotOption = None,
    jobs: JobsOption = 4,
    timeout: TimeoutOption = None,
    remote: Annotated[
        bool,
        typer.Option(
            "--remote",
            help="Resolve the cache location in a separate worker process.",
            rich_help_panel=SETTINGS_PANEL,
        ),
    ] = False,
) -> None:
    """Publish the dependency report. A skipped report never fails the command."""
    try:
        report = ReportConfiguration.parse(confs, resolve_id)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--confs/--resolve-id") from exc
    ctx = build_context(workspace, settings, property_files, branch, env, isolated_env)

    emitter = CliEmitter(get_cli_state())
    pipeline = ReportPipeline(DotRunner(dot), max_workers=jobs, timeout=timeout, emitter=emitter)

    if remote:
        with ProcessPoolExecutor(max_workers=1) as executor:
            publisher = ReportPublisher(pipeline, executor=executor, emitter=emitter)
            bundle = publisher.publish(ctx, report, output)
    else:
        publisher = ReportPublisher(pipeline, emitter=emitter)
        bundle = publisher.publish(ctx, report, output)

    if bundle is None:
        emit_warning("Dependency report was not generated for this build.")
        return
    present_bundle(bundle, report.confs, report.resolve_id)


__all__ = ["build_context", "publish"]
