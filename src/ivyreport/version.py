"""Installed package version, shared by the CLI and the public API."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _distribution_version


DISTRIBUTION = "ivyreport"


def get_version() -> str:
    # Running from a source checkout without an install has no metadata.
    try:
        return _distribution_version(DISTRIBUTION)
    except PackageNotFoundError:
        return "0+unknown"


__all__ = ["DISTRIBUTION", "get_version"]
