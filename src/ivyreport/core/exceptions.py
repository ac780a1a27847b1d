"""Custom exception hierarchy for the dependency report pipeline."""

from __future__ import annotations

from pathlib import Path


class ReportGenerationError(RuntimeError):
    """Base exception for report generation failures."""


class ConfigurationError(ReportGenerationError):
    """Raised when a settings or property file named by the build is missing."""

    def __init__(self, message: str, path: Path | str) -> None:
        super().__init__(f"{message}: {path}")
        self.message = message
        self.path = Path(path)

    def __reduce__(self) -> tuple[type[ConfigurationError], tuple[str, str]]:
        return (type(self), (self.message, str(self.path)))


class CacheRootUnavailable(ReportGenerationError):
    """Raised when the resolver settings cannot be loaded or parsed."""


class MissingReportError(ReportGenerationError):
    """Raised when a configuration's XML report is absent from the cache."""

    def __init__(self, conf: str, path: Path | str) -> None:
        super().__init__(f"Report file does not exist for configuration '{conf}': {path}")
        self.conf = conf
        self.path = Path(path)

    def __reduce__(self) -> tuple[type[MissingReportError], tuple[str, str]]:
        return (type(self), (self.conf, str(self.path)))


class TransformError(ReportGenerationError):
    """Raised when a stylesheet cannot be compiled or applied."""


class RasterizationError(ReportGenerationError):
    """Raised when the graph layout tool fails for a configuration."""

    def __init__(self, message: str, conf: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.conf = conf

    def __reduce__(self) -> tuple[type[RasterizationError], tuple[str, str | None]]:
        return (type(self), (self.message, self.conf))


class ReportCancelled(Exception):
    """Raised when report generation is interrupted by the caller."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "CacheRootUnavailable",
    "ConfigurationError",
    "MissingReportError",
    "RasterizationError",
    "ReportCancelled",
    "ReportGenerationError",
    "TransformError",
    "exception_hint",
    "exception_messages",
]
