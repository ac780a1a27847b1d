"""Adapters wrapping external tools used by the report pipeline."""

from __future__ import annotations

from .graphviz import DotRunner, default_dot_executable, is_dot_available, rasterize


__all__ = ["DotRunner", "default_dot_executable", "is_dot_available", "rasterize"]
