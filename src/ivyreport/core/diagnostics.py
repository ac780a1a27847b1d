"""Diagnostics raised while locating, collecting, and rendering reports.

Library code never prints. It hands warnings, errors, and structured events to
a `DiagnosticEmitter`; the CLI and the default logging emitter decide how they
surface.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
import logging
from typing import Any, Protocol, runtime_checkable


logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Receiver for pipeline warnings, errors, and structured events."""

    debug_enabled: bool

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...

    def event(self, name: str, payload: Mapping[str, Any]) -> None: ...


class NullEmitter:
    """Discard every diagnostic."""

    debug_enabled: bool = False

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        return

    def error(self, message: str, exc: BaseException | None = None) -> None:
        return

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        return


class LoggingEmitter:
    """Forward diagnostics to a `logging.Logger`.

    Events with a known summary are logged at INFO, the others at DEBUG.
    """

    def __init__(
        self, *, logger_obj: logging.Logger | None = None, debug_enabled: bool = False
    ) -> None:
        self._logger = logger_obj or logger
        self.debug_enabled = debug_enabled

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self._logger.warning(message, exc_info=exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self._logger.error(message, exc_info=exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        summary = format_event_message(name, payload)
        if summary is None:
            self._logger.debug("diagnostic event %s: %s", name, dict(payload))
        else:
            self._logger.info(summary)


def ensure_emitter(emitter: DiagnosticEmitter | None) -> DiagnosticEmitter:
    return emitter if emitter is not None else NullEmitter()


def record_event(
    emitter: DiagnosticEmitter | None,
    event: str,
    payload: Mapping[str, Any],
) -> None:
    """Forward a structured event, ignoring it when no emitter is configured."""
    ensure_emitter(emitter).event(event, payload)


def _graph_failed(data: Mapping[str, Any]) -> str:
    reason = data.get("reason")
    suffix = f": {reason}" if reason else ""
    return f"No dependency graph for '{data.get('conf') or '<unknown>'}'{suffix}"


_EVENT_SUMMARIES: dict[str, Callable[[Mapping[str, Any]], str]] = {
    "cache_root_resolved": lambda data: f"Resolution cache root: {data.get('root') or '<none>'}",
    "report_collected": lambda data: (
        f"Collected report for configuration '{data.get('conf') or '<unknown>'}'"
    ),
    "stylesheet_applied": lambda data: (
        f"Applied {data.get('stylesheet') or '<unknown>'} to {data.get('count', 0)} report(s)"
    ),
    "graph_rendered": lambda data: (
        f"Rendered dependency graph for '{data.get('conf') or '<unknown>'}'"
    ),
    "graph_failed": _graph_failed,
    "report_skipped": lambda data: (
        f"Skipping dependency report ({data.get('reason') or 'unknown reason'})"
    ),
}


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return a one-line summary for a known event, ``None`` otherwise."""
    formatter = _EVENT_SUMMARIES.get(name)
    return formatter(dict(payload)) if formatter is not None else None


__all__ = [
    "DiagnosticEmitter",
    "LoggingEmitter",
    "NullEmitter",
    "ensure_emitter",
    "format_event_message",
    "record_event",
]
