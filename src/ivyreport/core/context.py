"""Value objects describing a report run.

BuildContext

`settings_file` (`str | None`)
: Workspace-relative path of the ``ivysettings.xml`` document. Built-in
  defaults are used when omitted.

`property_files` (`str | None`)
: Comma-separated, workspace-relative property files loaded before the
  settings document. Later files override earlier keys.

`branch` (`str | None`)
: Default branch applied to unqualified dependency references.

`workspace_root` (`Path`)
: Absolute workspace path on the host that runs the resolver.

`env` (`dict[str, str]`)
: Snapshot of the build environment, reachable from settings through the
  environment prefix declared by ``<properties environment="..."/>``.

ReportConfiguration

`confs` (`tuple[str, ...]`)
: Configuration names in output order. Duplicates are kept.

`resolve_id` (`str`)
: Filename prefix shared by the input reports and generated artifacts.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BuildContext(BaseModel):
    """Self-contained inputs needed to locate the resolution cache."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    settings_file: str | None = None
    property_files: str | None = None
    branch: str | None = None
    workspace_root: Path
    env: dict[str, str] = Field(default_factory=dict)

    @field_validator("settings_file", "property_files", "branch")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None

    @classmethod
    def capture(
        cls,
        workspace_root: Path | str,
        *,
        settings_file: str | None = None,
        property_files: str | None = None,
        branch: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> BuildContext:
        """Snapshot the current environment into a transferable context."""
        snapshot = dict(os.environ if env is None else env)
        return cls(
            settings_file=settings_file,
            property_files=property_files,
            branch=branch,
            workspace_root=Path(workspace_root).expanduser().absolute(),
            env=snapshot,
        )

    def property_file_list(self) -> list[str]:
        """Return the trimmed, non-blank property file entries in order."""
        if not self.property_files:
            return []
        entries = (entry.strip() for entry in self.property_files.split(","))
        return [entry for entry in entries if entry]


class ReportConfiguration(BaseModel):
    """Ordered configuration names plus the resolve identifier."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    confs: tuple[str, ...]
    resolve_id: str

    @field_validator("confs")
    @classmethod
    def _require_confs(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("at least one configuration is required")
        if any(not conf for conf in value):
            raise ValueError("configuration names cannot be empty")
        return value

    @field_validator("resolve_id")
    @classmethod
    def _require_resolve_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("resolve identifier cannot be empty")
        return value.strip()

    @classmethod
    def parse(cls, confs: str | Iterable[str], resolve_id: str) -> ReportConfiguration:
        """Build a configuration from a comma-separated list such as ``"default, test"``."""
        if isinstance(confs, str):
            names = confs.replace(" ", "").split(",")
        else:
            names = [name.strip() for name in confs]
        return cls(confs=tuple(name for name in names if name), resolve_id=resolve_id)

    def joined(self) -> str:
        """Return the comma-joined configuration list passed to stylesheets."""
        return ",".join(self.confs)


class IntermediateArtifact(Enum):
    """Files produced along the pipeline, keyed by their extension."""

    SOURCE_XML = "xml"
    STYLED_HTML = "html"
    GRAPH_DESCRIPTION = "dot"
    RENDERED_SVG = "svg"


def artifact_name(resolve_id: str, conf: str, kind: IntermediateArtifact) -> str:
    """Return the ``<resolveId>-<conf>.<ext>`` name of an artifact."""
    return f"{resolve_id}-{conf}.{kind.value}"


__all__ = [
    "BuildContext",
    "IntermediateArtifact",
    "ReportConfiguration",
    "artifact_name",
]
