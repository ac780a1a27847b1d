"""Best-effort publication of the dependency report for a build."""

from __future__ import annotations

from concurrent.futures import Executor
import logging
from pathlib import Path
import threading

from .bundle import ReportBundle
from .collector import collect
from .context import BuildContext, ReportConfiguration
from .diagnostics import DiagnosticEmitter, LoggingEmitter, record_event
from .exceptions import ReportGenerationError
from .location import resolve_cache_root_with
from .pipeline import ReportPipeline


logger = logging.getLogger(__name__)


class ReportPublisher:
    """Locate, collect, and render a build's dependency reports.

    Report generation never fails the surrounding build: problems are
    reported through the emitter and `publish` returns ``None``. Only
    cancellation propagates.
    """

    def __init__(
        self,
        pipeline: ReportPipeline | None = None,
        *,
        executor: Executor | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.emitter = emitter if emitter is not None else LoggingEmitter(logger_obj=logger)
        self.pipeline = pipeline if pipeline is not None else ReportPipeline(emitter=self.emitter)
        self.executor = executor

    def locate(self, ctx: BuildContext) -> Path | None:
        """Return the resolution cache root, or ``None`` when it cannot be determined."""
        try:
            root = resolve_cache_root_with(ctx, self.executor)
        except Exception as exc:
            self.emitter.warning(f"Cannot get the resolution cache root: {exc}", exc)
            return None
        if root is None:
            record_event(self.emitter, "report_skipped", {"reason": "no resolution cache root"})
            return None
        record_event(self.emitter, "cache_root_resolved", {"root": str(root)})
        return root

    def publish(
        self,
        ctx: BuildContext,
        report: ReportConfiguration,
        reports_dir: Path | str,
        *,
        cancel_event: threading.Event | None = None,
    ) -> ReportBundle | None:
        """Publish the report into ``reports_dir`` and return the bundle."""
        logger.info("Publishing dependency report...")
        cache_root = self.locate(ctx)
        if cache_root is None:
            return None

        reports_dir = Path(reports_dir)
        try:
            collect(cache_root, report.confs, report.resolve_id, reports_dir, emitter=self.emitter)
            bundle = self.pipeline.run(
                report.confs,
                report.resolve_id,
                reports_dir,
                reports_dir,
                cancel_event=cancel_event,
            )
        except (ReportGenerationError, OSError) as exc:
            self.emitter.warning(f"Could not generate dependency reports: {exc}", exc)
            return None

        if not bundle.complete:
            missing = ", ".join(bundle.failures)
            self.emitter.warning(f"Dependency graphs missing for: {missing}")
        return bundle


__all__ = ["ReportPublisher"]
