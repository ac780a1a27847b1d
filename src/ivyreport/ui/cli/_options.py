"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


SETTINGS_PANEL = "Resolver Settings"
REPORT_PANEL = "Report"
RENDERING_PANEL = "Rendering"

WorkspaceOption = Annotated[
    Path,
    typer.Option(
        "--workspace",
        "-w",
        help="Workspace root the settings and property files are relative to.",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        rich_help_panel=SETTINGS_PANEL,
    ),
]

SettingsFileOption = Annotated[
    str | None,
    typer.Option(
        "--settings",
        help="Workspace-relative ivysettings.xml. Built-in defaults apply when omitted.",
        rich_help_panel=SETTINGS_PANEL,
    ),
]

PropertyFilesOption = Annotated[
    str | None,
    typer.Option(
        "--property-files",
        help="Comma-separated, workspace-relative property files loaded before the settings.",
        rich_help_panel=SETTINGS_PANEL,
    ),
]

BranchOption = Annotated[
    str | None,
    typer.Option(
        "--branch",
        help="Default branch applied to unqualified dependencies.",
        rich_help_panel=SETTINGS_PANEL,
    ),
]

EnvOption = Annotated[
    list[str] | None,
    typer.Option(
        "--env",
        "-e",
        metavar="KEY=VALUE",
        help="Build environment variable exposed to the settings. Repeatable.",
        rich_help_panel=SETTINGS_PANEL,
    ),
]

IsolatedEnvOption = Annotated[
    bool,
    typer.Option(
        "--isolated-env",
        help="Do not inherit the current process environment, only --env values.",
        rich_help_panel=SETTINGS_PANEL,
    ),
]

ConfsOption = Annotated[
    str,
    typer.Option(
        "--confs",
        "-c",
        help="Comma-separated configurations to report on, in display order.",
        rich_help_panel=REPORT_PANEL,
    ),
]

ResolveIdOption = Annotated[
    str,
    typer.Option(
        "--resolve-id",
        "-r",
        help="Resolve identifier prefixing the <resolveId>-<conf>.xml reports.",
        rich_help_panel=REPORT_PANEL,
    ),
]

OutputDirOption = Annotated[
    Path,
    typer.Option(
        "--output",
        "-o",
        help="Directory receiving the HTML pages and SVG graphs.",
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        rich_help_panel=REPORT_PANEL,
    ),
]

DotOption = Annotated[
    str | None,
    typer.Option(
        "--dot",
        envvar="IVYREPORT_DOT_EXE",
        help="Graphviz dot executable. Defaults to 'dot' ('dot.exe' on Windows).",
        rich_help_panel=RENDERING_PANEL,
    ),
]

JobsOption = Annotated[
    int,
    typer.Option(
        "--jobs",
        "-j",
        min=1,
        help="Maximum number of graphs rendered concurrently.",
        rich_help_panel=RENDERING_PANEL,
    ),
]

TimeoutOption = Annotated[
    float | None,
    typer.Option(
        "--timeout",
        min=0.0,
        help="Seconds allowed for each graph before dot is stopped.",
        rich_help_panel=RENDERING_PANEL,
    ),
]


def parse_env_pairs(pairs: list[str] | None) -> dict[str, str]:
    """Turn repeated ``KEY=VALUE`` options into a mapping."""
    values: dict[str, str] = {}
    for pair in pairs or []:
        key, separator, value = pair.partition("=")
        if not separator or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got '{pair}'.", param_hint="--env")
        values[key] = value
    return values


__all__ = [
    "BranchOption",
    "ConfsOption",
    "DotOption",
    "EnvOption",
    "IsolatedEnvOption",
    "JobsOption",
    "OutputDirOption",
    "PropertyFilesOption",
    "ResolveIdOption",
    "SettingsFileOption",
    "TimeoutOption",
    "WorkspaceOption",
    "parse_env_pairs",
]
