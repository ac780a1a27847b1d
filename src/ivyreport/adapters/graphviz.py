"""Abstractions for invoking the Graphviz ``dot`` layout tool."""

from __future__ import annotations

import logging
import os
from pathlib import Path
import shutil
import subprocess
import tempfile
import threading
import time

from ivyreport.core.exceptions import RasterizationError, ReportCancelled


logger = logging.getLogger(__name__)

DOT_ENV_VAR = "IVYREPORT_DOT_EXE"


def default_dot_executable() -> str:
    """Return the platform default name of the layout executable."""
    return "dot.exe" if os.name == "nt" else "dot"


def _part_path(target: Path) -> Path:
    return target.with_name(f"{target.name}.part")


class DotRunner:
    """Render graph descriptions to SVG through a ``dot`` subprocess."""

    def __init__(self, executable: str | None = None, *, poll_interval: float = 0.1) -> None:
        self._explicit_executable = (executable or "").strip() or None
        self._cached_executable: str | None = None
        self.poll_interval = poll_interval

    def is_available(self) -> bool:
        """Return True when the layout executable can be located."""
        try:
            return self._resolve_executable(optional=True) is not None
        except RasterizationError:
            return False

    def reset(self) -> None:
        """Clear cached executable lookup results."""
        self._cached_executable = None

    def rasterize(
        self,
        input_path: Path | str,
        *,
        output_path: Path | str | None = None,
        conf: str | None = None,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> Path:
        """Render ``input_path`` to SVG and return the written file.

        Output is streamed into a ``.part`` sibling that only replaces the
        target once ``dot`` exits successfully. A cancelled wait kills the
        subprocess and raises `ReportCancelled`.
        """
        source = Path(input_path)
        target = Path(output_path) if output_path is not None else source.with_suffix(".svg")
        partial = _part_path(target)
        command = [self._resolve_executable(optional=False, conf=conf), "-Tsvg"]

        succeeded = False
        try:
            with (
                source.open("rb") as stdin,
                partial.open("wb") as stdout,
                tempfile.TemporaryFile() as stderr,
            ):
                try:
                    process = subprocess.Popen(command, stdin=stdin, stdout=stdout, stderr=stderr)
                except FileNotFoundError as exc:
                    self._cached_executable = None
                    raise RasterizationError(
                        f"Graph layout executable '{command[0]}' could not be located.", conf
                    ) from exc
                except OSError as exc:
                    raise RasterizationError(
                        f"Failed to invoke '{command[0]}': {exc}", conf
                    ) from exc

                returncode = self._wait(
                    process, target, conf=conf, timeout=timeout, cancel_event=cancel_event
                )
                if returncode != 0:
                    stderr.seek(0)
                    detail = stderr.read().decode("utf-8", "replace").strip()
                    message = f"'{command[0]}' exited with status {returncode} for '{source.name}'"
                    if detail:
                        message = f"{message}: {detail}"
                    raise RasterizationError(message, conf)
            partial.replace(target)
            succeeded = True
        except OSError as exc:
            raise RasterizationError(f"Failed to render '{source}': {exc}", conf) from exc
        finally:
            if not succeeded:
                partial.unlink(missing_ok=True)
        return target

    def _wait(
        self,
        process: subprocess.Popen[bytes],
        target: Path,
        *,
        conf: str | None,
        timeout: float | None,
        cancel_event: threading.Event | None,
    ) -> int:
        deadline = None if timeout is None else time.monotonic() + timeout
        try:
            while True:
                try:
                    return process.wait(timeout=self.poll_interval)
                except subprocess.TimeoutExpired:
                    pass
                if cancel_event is not None and cancel_event.is_set():
                    logger.error("Cancelled while waiting for '%s' to be created", target)
                    self._kill(process)
                    raise ReportCancelled(f"Rendering of '{target.name}' was cancelled")
                if deadline is not None and time.monotonic() >= deadline:
                    self._kill(process)
                    raise RasterizationError(
                        f"Rendering of '{target.name}' timed out after {timeout}s", conf
                    )
        except KeyboardInterrupt:
            logger.error("Interrupted while waiting for '%s' to be created", target)
            self._kill(process)
            raise

    def _kill(self, process: subprocess.Popen[bytes]) -> None:
        try:
            process.kill()
            process.wait(timeout=5)
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.warning("Unable to stop layout process %s: %s", process.pid, exc)

    def _resolve_executable(self, *, optional: bool, conf: str | None = None) -> str | None:
        if self._explicit_executable:
            return self._explicit_executable

        if self._cached_executable:
            return self._cached_executable

        configured = os.environ.get(DOT_ENV_VAR, "").strip()
        name = configured or default_dot_executable()
        if os.sep in name or (os.altsep and os.altsep in name):
            self._cached_executable = name
            return name

        try:
            executable = shutil.which(name)
        except (AssertionError, OSError, ValueError):
            executable = None

        if executable:
            self._cached_executable = executable
            return executable

        if optional:
            return None

        raise RasterizationError(
            f"Graph layout executable '{name}' is required but was not found on PATH.", conf
        )


_default_runner = DotRunner()


def is_dot_available() -> bool:
    """Check if the layout executable can be run."""
    return _default_runner.is_available()


def rasterize(
    input_path: Path | str,
    *,
    output_path: Path | str | None = None,
    conf: str | None = None,
    timeout: float | None = None,
    cancel_event: threading.Event | None = None,
) -> Path:
    """Render a graph description using the shared runner."""
    return _default_runner.rasterize(
        input_path,
        output_path=output_path,
        conf=conf,
        timeout=timeout,
        cancel_event=cancel_event,
    )


__all__ = [
    "DOT_ENV_VAR",
    "DotRunner",
    "default_dot_executable",
    "is_dot_available",
    "rasterize",
]
