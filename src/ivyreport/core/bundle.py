"""Description of a generated report directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .exceptions import RasterizationError


@dataclass(slots=True)
class ReportBundle:
    """Files making up a rendered dependency report."""

    directory: Path
    entry: Path
    html_files: list[Path] = field(default_factory=list)
    svg_files: list[Path] = field(default_factory=list)
    stylesheet: Path | None = None
    failures: dict[str, RasterizationError] = field(default_factory=dict)

    @property
    def index_name(self) -> str:
        """Name of the document served as the report index."""
        return self.entry.name

    @property
    def complete(self) -> bool:
        """Return True when every configuration produced its graph."""
        return not self.failures

    def files(self) -> list[Path]:
        """Return every bundle file that exists on disk, in output order."""
        candidates = [*self.html_files, *self.svg_files]
        if self.stylesheet is not None:
            candidates.append(self.stylesheet)
        seen: set[Path] = set()
        present: list[Path] = []
        for candidate in candidates:
            if candidate in seen or not candidate.exists():
                continue
            seen.add(candidate)
            present.append(candidate)
        return present


__all__ = ["ReportBundle"]
