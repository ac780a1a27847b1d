"""Show report pipeline diagnostics on the CLI consoles."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ivyreport.core.diagnostics import format_event_message

from .state import CLIState, emit_error, emit_warning, get_cli_state, render_message


class CliEmitter:
    """`DiagnosticEmitter` printing through the rich consoles of a `CLIState`.

    Events are always recorded on the state. They are printed from ``-v`` on,
    and events without a summary only from ``-vv``.
    """

    def __init__(self, state: CLIState | None = None, *, debug_enabled: bool | None = None) -> None:
        self.state = state if state is not None else get_cli_state()
        self.debug_enabled = (
            self.state.show_tracebacks if debug_enabled is None else bool(debug_enabled)
        )

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        emit_warning(message, exception=exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        emit_error(message, exception=exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.state.record_event(name, payload)
        if self.state.verbosity < 1:
            return
        summary = format_event_message(name, payload)
        if summary is not None:
            render_message("info", summary)
        elif self.state.verbosity >= 2:
            render_message("info", f"{name}: {dict(payload)}")


__all__ = ["CliEmitter"]
