"""Locate the resolver's resolution cache for a build.

`resolve_cache_root` only reads from its `BuildContext` argument and returns a
plain `Path`, so it can run in-process or be shipped to another worker through
a `concurrent.futures.Executor`.
"""

from __future__ import annotations

from concurrent.futures import Executor
import logging
from pathlib import Path

from .context import BuildContext
from .exceptions import ConfigurationError
from .settings import IvySettings
from .variables import BaseSource, OverlaySource


logger = logging.getLogger(__name__)


def _settings_location(ctx: BuildContext) -> Path | None:
    if ctx.settings_file is None:
        return None
    location = ctx.workspace_root / ctx.settings_file
    if not location.exists():
        raise ConfigurationError("no such settings file", location.absolute())
    return location


def _property_locations(ctx: BuildContext) -> list[Path]:
    locations: list[Path] = []
    for entry in ctx.property_file_list():
        location = ctx.workspace_root / entry
        if not location.exists():
            raise ConfigurationError("no such property file", location.absolute())
        locations.append(location)
    return locations


def _build_settings(
    ctx: BuildContext, settings_path: Path | None, property_paths: list[Path]
) -> IvySettings:
    variables = OverlaySource(BaseSource(), ctx.env)
    settings = IvySettings(variables, basedir=ctx.workspace_root)
    for path in property_paths:
        settings.load_properties(path)
    if settings_path is not None:
        settings.load(settings_path)
    else:
        settings.load_default()
    if ctx.branch is not None:
        settings.default_branch = ctx.branch
    return settings


def load_settings(ctx: BuildContext) -> IvySettings:
    """Load resolver settings for ``ctx``, letting any failure propagate."""
    return _build_settings(ctx, _settings_location(ctx), _property_locations(ctx))


def resolve_cache_root(ctx: BuildContext) -> Path | None:
    """Return the resolution cache root, or ``None`` when settings cannot be read.

    Missing settings or property files raise `ConfigurationError`. Every other
    failure is logged and reported as ``None``.
    """
    settings_path = _settings_location(ctx)
    property_paths = _property_locations(ctx)
    try:
        settings = _build_settings(ctx, settings_path, property_paths)
        return settings.resolution_cache_root
    except Exception as exc:
        origin = settings_path or "built-in defaults"
        logger.error(
            "Error while reading the resolver settings (%s): %s", origin, exc, exc_info=exc
        )
        return None


def resolve_cache_root_with(ctx: BuildContext, executor: Executor | None = None) -> Path | None:
    """Run `resolve_cache_root` in-process or on ``executor``."""
    if executor is None:
        return resolve_cache_root(ctx)
    future = executor.submit(resolve_cache_root, ctx)
    return future.result()


__all__ = ["load_settings", "resolve_cache_root", "resolve_cache_root_with"]
