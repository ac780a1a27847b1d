"""Per-invocation CLI state: verbosity, consoles, and recorded report events."""

from __future__ import annotations

from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
import logging
import sys
from typing import TYPE_CHECKING, Any, TextIO

import click

from ivyreport.core.exceptions import exception_hint, exception_messages


if TYPE_CHECKING:
    from rich.console import Console

__all__ = [
    "CLIState",
    "configure_logging",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "get_cli_state",
    "render_message",
    "set_cli_state",
]

_LEVEL_STYLES = {"warning": "yellow", "error": "red"}


def _bound_console(current: Console | None, stream: TextIO, **options: Any) -> Console:
    from rich.console import Console

    # CliRunner and pytest swap the standard streams between invocations.
    if current is None or current.file is not stream:
        return Console(file=stream, **options)
    return current


@dataclass(slots=True)
class CLIState:
    """Options shared by every command of one ``ivyreport`` invocation."""

    verbosity: int = 0
    show_tracebacks: bool = False
    events: dict[str, list[dict[str, Any]]] = field(default_factory=dict, init=False)
    _console: Console | None = field(default=None, init=False, repr=False)
    _err_console: Console | None = field(default=None, init=False, repr=False)

    @property
    def console(self) -> Console:
        """Console bound to the current stdout, used for report summaries."""
        self._console = _bound_console(self._console, sys.stdout)
        return self._console

    @property
    def err_console(self) -> Console:
        """Console bound to the current stderr, used for warnings and errors."""
        self._err_console = _bound_console(self._err_console, sys.stderr, highlight=False)
        return self._err_console

    def record_event(self, name: str, payload: Mapping[str, Any] | None = None) -> None:
        self.events.setdefault(name, []).append(dict(payload or {}))

    def consume_events(self, name: str) -> list[dict[str, Any]]:
        """Return and forget the events recorded under ``name``."""
        return self.events.pop(name, [])


_STATE_VAR: ContextVar[CLIState | None] = ContextVar("ivyreport_cli_state", default=None)


def get_cli_state(ctx: click.Context | None = None, *, create: bool = True) -> CLIState:
    """Return the state attached to the active click context.

    Outside of a command (library use, tests) the last state seen in this
    context variable scope is reused.
    """
    if ctx is None:
        ctx = click.get_current_context(silent=True)

    if ctx is not None:
        state = ctx.find_object(CLIState)
        if state is None and create:
            state = ctx.ensure_object(CLIState)
        if state is not None:
            _STATE_VAR.set(state)
            return state

    state = _STATE_VAR.get()
    if state is None:
        if not create:
            raise RuntimeError("CLI state is not initialised for this context.")
        state = CLIState()
        _STATE_VAR.set(state)
    return state


def set_cli_state(
    *,
    ctx: click.Context | None = None,
    verbosity: int | None = None,
    debug: bool | None = None,
) -> CLIState:
    state = get_cli_state(ctx)
    if verbosity is not None:
        state.verbosity = max(0, verbosity)
    if debug is not None:
        state.show_tracebacks = debug
    return state


def configure_logging(state: CLIState) -> None:
    """Send ``ivyreport`` log records to stderr, more of them with each ``-v``."""
    from rich.console import Console
    from rich.logging import RichHandler

    levels = (logging.WARNING, logging.INFO, logging.DEBUG)
    level = levels[min(state.verbosity, len(levels) - 1)]

    package_logger = logging.getLogger("ivyreport")
    for existing in list(package_logger.handlers):
        if isinstance(existing, RichHandler):
            package_logger.removeHandler(existing)
    # stderr=True makes rich look sys.stderr up on every write.
    package_logger.addHandler(
        RichHandler(
            console=Console(stderr=True, highlight=False),
            show_path=False,
            rich_tracebacks=state.show_tracebacks,
        )
    )
    package_logger.setLevel(level)


def _details(message: str, exception: BaseException, verbosity: int) -> list[str]:
    chain = exception_messages(exception)
    lines: list[str] = []
    if chain and chain[0] not in message:
        lines.append(chain[0])
    lines.append(f"type: {type(exception).__name__}")
    if verbosity >= 2 and len(chain) > 1:
        lines.append("caused by:")
        lines.extend(f"  {entry}" for entry in chain[1:])
        return lines
    hint = exception_hint(exception)
    if hint and hint != chain[0] and hint not in message:
        lines.append(f"hint: {hint}")
    return lines


def render_message(
    level: str,
    message: str,
    *,
    exception: BaseException | None = None,
) -> None:
    """Print ``message``; warnings and errors go to stderr with optional details."""
    state = get_cli_state()

    if level == "info":
        state.console.log(message)
        return

    from rich.text import Text

    style = _LEVEL_STYLES.get(level, "yellow")
    text = Text.assemble((f"{level}: ", f"bold {style}"), (message, style))
    if exception is not None and state.verbosity >= 1:
        text.append("\n" + "\n".join(_details(message, exception, state.verbosity)), style=style)
    state.err_console.print(text)


def emit_warning(message: str, *, exception: BaseException | None = None) -> None:
    render_message("warning", message, exception=exception)


def emit_error(message: str, *, exception: BaseException | None = None) -> None:
    render_message("error", message, exception=exception)


def debug_enabled() -> bool:
    """Return whether ``--debug`` asked for full tracebacks."""
    try:
        return get_cli_state(create=False).show_tracebacks
    except RuntimeError:
        return False
