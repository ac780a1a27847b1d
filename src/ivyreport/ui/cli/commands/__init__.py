"""CLI command implementations."""

from __future__ import annotations

from .cache_root import cache_root
from .publish import build_context, publish
from .render import render


__all__ = ["build_context", "cache_root", "publish", "render"]
