"""Render Ivy dependency resolution reports as HTML pages and SVG graphs."""

from __future__ import annotations

from ivyreport.adapters.graphviz import DotRunner
from ivyreport.core import (
    BuildContext,
    CacheRootUnavailable,
    ConfigurationError,
    MissingReportError,
    RasterizationError,
    ReportBundle,
    ReportCancelled,
    ReportConfiguration,
    ReportGenerationError,
    ReportPipeline,
    ReportPublisher,
    TransformError,
    collect,
    resolve_cache_root,
)
from ivyreport.version import get_version


__version__ = get_version()

__all__ = [
    "BuildContext",
    "CacheRootUnavailable",
    "ConfigurationError",
    "DotRunner",
    "MissingReportError",
    "RasterizationError",
    "ReportBundle",
    "ReportCancelled",
    "ReportConfiguration",
    "ReportGenerationError",
    "ReportPipeline",
    "ReportPublisher",
    "TransformError",
    "__version__",
    "collect",
    "resolve_cache_root",
]
