"""Variable sources used while evaluating resolver settings."""

from __future__ import annotations

from collections.abc import Mapping
import os
import re
from typing import Protocol, runtime_checkable


_REFERENCE = re.compile(r"\$\{([^}]+)\}")


@runtime_checkable
class VariableSource(Protocol):
    """Name lookup used when expanding ``${...}`` references."""

    def resolve(self, name: str) -> str | None: ...

    def set(self, name: str, value: str, *, overwrite: bool = True) -> None: ...

    def clone(self) -> VariableSource: ...


class BaseSource:
    """Plain variable store populated from property files and settings."""

    def __init__(self, variables: Mapping[str, str] | None = None) -> None:
        self.variables: dict[str, str] = dict(variables or {})

    def resolve(self, name: str) -> str | None:
        return self.variables.get(name)

    def set(self, name: str, value: str, *, overwrite: bool = True) -> None:
        if not overwrite and name in self.variables:
            return
        self.variables[name] = value

    def clone(self) -> BaseSource:
        return BaseSource(self.variables)


class OverlaySource:
    """Layer build environment variables over a wrapped source.

    Names starting with ``prefix`` are looked up in ``env`` with the prefix
    stripped and never fall through to the wrapped source. Every other name
    is delegated.
    """

    def __init__(
        self,
        wrapped: VariableSource,
        env: Mapping[str, str],
        *,
        prefix: str | None = None,
        case_sensitive: bool | None = None,
    ) -> None:
        self.wrapped = wrapped
        self.case_sensitive = os.name != "nt" if case_sensitive is None else case_sensitive
        self.env: dict[str, str] = {self._key(key): value for key, value in env.items()}
        self._prefix: str | None = None
        self.prefix = prefix

    @property
    def prefix(self) -> str | None:
        return self._prefix

    @prefix.setter
    def prefix(self, value: str | None) -> None:
        if value and not value.endswith("."):
            value = f"{value}."
        self._prefix = value or None

    def _key(self, name: str) -> str:
        return name if self.case_sensitive else name.upper()

    def resolve(self, name: str) -> str | None:
        if self._prefix is not None and name.startswith(self._prefix):
            return self.env.get(self._key(name[len(self._prefix) :]))
        return self.wrapped.resolve(name)

    def set(self, name: str, value: str, *, overwrite: bool = True) -> None:
        self.wrapped.set(name, value, overwrite=overwrite)

    def clone(self) -> OverlaySource:
        return OverlaySource(
            self.wrapped.clone(),
            dict(self.env),
            prefix=self._prefix,
            case_sensitive=self.case_sensitive,
        )


def substitute(text: str, source: VariableSource) -> str:
    """Expand ``${name}`` references, leaving unknown ones untouched."""

    def _replace(match: re.Match[str]) -> str:
        value = source.resolve(match.group(1))
        return match.group(0) if value is None else value

    return _REFERENCE.sub(_replace, text)


__all__ = ["BaseSource", "OverlaySource", "VariableSource", "substitute"]
