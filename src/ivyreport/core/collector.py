"""Copy per-configuration XML reports out of the resolution cache."""

from __future__ import annotations

from collections.abc import Sequence
import logging
from pathlib import Path
import shutil

from .context import IntermediateArtifact, artifact_name
from .diagnostics import DiagnosticEmitter, record_event
from .exceptions import MissingReportError


logger = logging.getLogger(__name__)


def report_source(cache_root: Path, resolve_id: str, conf: str) -> Path:
    """Return the cached XML report path for ``conf``."""
    return Path(cache_root) / artifact_name(resolve_id, conf, IntermediateArtifact.SOURCE_XML)


def collect(
    cache_root: Path | str,
    confs: Sequence[str],
    resolve_id: str,
    target_dir: Path | str,
    *,
    emitter: DiagnosticEmitter | None = None,
) -> list[Path]:
    """Copy every configuration's report into ``target_dir``.

    All reports are checked before the first copy so that a missing one
    leaves ``target_dir`` untouched.
    """
    cache_root = Path(cache_root)
    target_dir = Path(target_dir)

    sources: list[tuple[str, Path]] = []
    for conf in confs:
        source = report_source(cache_root, resolve_id, conf)
        if not source.is_file():
            raise MissingReportError(conf, source)
        sources.append((conf, source))

    target_dir.mkdir(parents=True, exist_ok=True)
    copied: list[Path] = []
    for conf, source in sources:
        destination = target_dir / source.name
        if source.resolve() != destination.resolve():
            shutil.copyfile(source, destination)
        logger.debug("Copied %s to %s", source, destination)
        record_event(emitter, "report_collected", {"conf": conf, "path": str(destination)})
        copied.append(destination)
    return copied


__all__ = ["collect", "report_source"]
