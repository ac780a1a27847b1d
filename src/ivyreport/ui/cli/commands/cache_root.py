"""Print the resolution cache location computed from resolver settings."""

from __future__ import annotations

import typer

from ivyreport.core.exceptions import ConfigurationError
from ivyreport.core.location import resolve_cache_root

from .._options import (
    BranchOption,
    EnvOption,
    IsolatedEnvOption,
    PropertyFilesOption,
    SettingsFileOption,
    WorkspaceOption,
)
from ..state import emit_error
from .publish import build_context


def cache_root(
    workspace: WorkspaceOption,
    settings: SettingsFileOption = None,
    property_files: PropertyFilesOption = None,
    branch: BranchOption = None,
    env: EnvOption = None,
    isolated_env: IsolatedEnvOption = False,
) -> None:
    """Print the directory where the resolver stores its XML reports."""
    ctx = build_context(workspace, settings, property_files, branch, env, isolated_env)
    try:
        root = resolve_cache_root(ctx)
    except ConfigurationError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    if root is None:
        emit_error("The resolver settings could not be loaded.")
        raise typer.Exit(code=1)
    typer.echo(str(root))


__all__ = ["cache_root"]
