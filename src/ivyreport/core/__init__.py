"""Core report generation primitives."""

from __future__ import annotations

from .bundle import ReportBundle
from .collector import collect, report_source
from .context import BuildContext, IntermediateArtifact, ReportConfiguration, artifact_name
from .diagnostics import DiagnosticEmitter, LoggingEmitter, NullEmitter
from .exceptions import (
    CacheRootUnavailable,
    ConfigurationError,
    MissingReportError,
    RasterizationError,
    ReportCancelled,
    ReportGenerationError,
    TransformError,
)
from .location import load_settings, resolve_cache_root, resolve_cache_root_with
from .pipeline import ReportPipeline
from .publisher import ReportPublisher
from .settings import IvySettings
from .variables import BaseSource, OverlaySource, VariableSource, substitute


__all__ = [
    "BaseSource",
    "BuildContext",
    "CacheRootUnavailable",
    "ConfigurationError",
    "DiagnosticEmitter",
    "IntermediateArtifact",
    "IvySettings",
    "LoggingEmitter",
    "MissingReportError",
    "NullEmitter",
    "OverlaySource",
    "RasterizationError",
    "ReportBundle",
    "ReportCancelled",
    "ReportConfiguration",
    "ReportGenerationError",
    "ReportPipeline",
    "ReportPublisher",
    "TransformError",
    "VariableSource",
    "artifact_name",
    "collect",
    "load_settings",
    "report_source",
    "resolve_cache_root",
    "resolve_cache_root_with",
    "substitute",
]
