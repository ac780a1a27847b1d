"""Turn collected XML reports into HTML pages and SVG dependency graphs."""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from importlib import resources
import logging
from pathlib import Path
import shutil
import threading
from typing import Protocol

from lxml import etree

from .bundle import ReportBundle
from .collector import report_source
from .context import IntermediateArtifact, artifact_name
from .diagnostics import DiagnosticEmitter, ensure_emitter, record_event
from .exceptions import RasterizationError, ReportCancelled, ReportGenerationError, TransformError


logger = logging.getLogger(__name__)

_DATA_PACKAGE = "ivyreport.resources"

HTML_STYLESHEET = "ivy-report.xsl"
DOT_STYLESHEET = "ivy-report-dot.xsl"
REPORT_CSS = "ivy-report.css"


class GraphRasterizer(Protocol):
    """Renders one graph description file to SVG."""

    def rasterize(
        self,
        input_path: Path | str,
        *,
        output_path: Path | str | None = None,
        conf: str | None = None,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> Path: ...


def _check_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ReportCancelled("Report generation was cancelled")


class ReportPipeline:
    """Apply the report stylesheets and render graphs for each configuration."""

    def __init__(
        self,
        rasterizer: GraphRasterizer | None = None,
        *,
        max_workers: int = 4,
        timeout: float | None = None,
        stylesheet_dir: Path | str | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        if rasterizer is None:
            from ivyreport.adapters.graphviz import DotRunner

            rasterizer = DotRunner()
        self.rasterizer = rasterizer
        self.max_workers = max(1, max_workers)
        self.timeout = timeout
        self.stylesheet_dir = Path(stylesheet_dir) if stylesheet_dir is not None else None
        self.emitter = ensure_emitter(emitter)

    def generate(
        self,
        confs: Sequence[str],
        resolve_id: str,
        cache_root: Path | str,
        target_dir: Path | str,
        *,
        cancel_event: threading.Event | None = None,
    ) -> Path:
        """Build the report and return the entry HTML document."""
        return self.run(confs, resolve_id, cache_root, target_dir, cancel_event=cancel_event).entry

    def run(
        self,
        confs: Sequence[str],
        resolve_id: str,
        cache_root: Path | str,
        target_dir: Path | str,
        *,
        cancel_event: threading.Event | None = None,
    ) -> ReportBundle:
        """Build the report and describe every produced file."""
        confs = list(confs)
        if not confs:
            raise ValueError("at least one configuration is required")
        cache_root = Path(cache_root)
        target_dir = Path(target_dir)
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ReportGenerationError(f"Unable to create directory: {target_dir}") from exc

        _check_cancelled(cancel_event)
        html_files = self._apply_stylesheet(
            HTML_STYLESHEET,
            IntermediateArtifact.STYLED_HTML,
            confs,
            resolve_id,
            cache_root,
            target_dir,
        )
        stylesheet = self._copy_resource(REPORT_CSS, target_dir)

        _check_cancelled(cancel_event)
        dot_paths = [
            target_dir / artifact_name(resolve_id, conf, IntermediateArtifact.GRAPH_DESCRIPTION)
            for conf in confs
        ]
        try:
            dot_files = self._apply_stylesheet(
                DOT_STYLESHEET,
                IntermediateArtifact.GRAPH_DESCRIPTION,
                confs,
                resolve_id,
                cache_root,
                target_dir,
            )
            svg_files, failures = self._rasterize_all(list(zip(confs, dot_files)), cancel_event)
        finally:
            # Graph descriptions never outlive a run, including failed or cancelled ones.
            for dot_file in dot_paths:
                dot_file.unlink(missing_ok=True)

        return ReportBundle(
            directory=target_dir,
            entry=html_files[0],
            html_files=html_files,
            svg_files=svg_files,
            stylesheet=stylesheet,
            failures=failures,
        )

    # ---------------------------------------------------------------- resources

    def _read_resource(self, name: str) -> bytes:
        if self.stylesheet_dir is not None:
            override = self.stylesheet_dir / name
            if override.is_file():
                return override.read_bytes()
        return (resources.files(_DATA_PACKAGE) / name).read_bytes()

    def _copy_resource(self, name: str, target_dir: Path) -> Path:
        destination = target_dir / name
        if self.stylesheet_dir is not None and (self.stylesheet_dir / name).is_file():
            shutil.copyfile(self.stylesheet_dir / name, destination)
        else:
            destination.write_bytes(self._read_resource(name))
        return destination

    def load_stylesheet(self, name: str) -> etree.XSLT:
        """Parse and compile a stylesheet, raising `TransformError` on failure."""
        try:
            document = etree.fromstring(self._read_resource(name))
            return etree.XSLT(document)
        except (etree.XMLSyntaxError, etree.XSLTParseError, OSError) as exc:
            raise TransformError(f"Unable to compile stylesheet '{name}': {exc}") from exc

    # --------------------------------------------------------------- transforms

    def _apply_stylesheet(
        self,
        name: str,
        kind: IntermediateArtifact,
        confs: list[str],
        resolve_id: str,
        cache_root: Path,
        target_dir: Path,
    ) -> list[Path]:
        transform = self.load_stylesheet(name)
        parameters = {
            "confs": etree.XSLT.strparam(",".join(confs)),
            "extension": etree.XSLT.strparam(IntermediateArtifact.STYLED_HTML.value),
            "resolveId": etree.XSLT.strparam(resolve_id),
        }

        generated: list[Path] = []
        for conf in confs:
            source = report_source(cache_root, resolve_id, conf)
            target = target_dir / artifact_name(resolve_id, conf, kind)
            try:
                document = etree.parse(str(source))
                result = transform(document, **parameters)
            except (etree.XMLSyntaxError, etree.XSLTApplyError, OSError) as exc:
                raise TransformError(f"Failed to apply {name} to '{source.name}': {exc}") from exc
            for entry in transform.error_log:
                logger.debug("%s: %s", name, entry.message)
            target.write_bytes(bytes(result))
            generated.append(target)

        record_event(self.emitter, "stylesheet_applied", {"stylesheet": name, "count": len(confs)})
        return generated

    # ------------------------------------------------------------ rasterization

    def _rasterize_all(
        self,
        graphs: list[tuple[str, Path]],
        cancel_event: threading.Event | None,
    ) -> tuple[list[Path], dict[str, RasterizationError]]:
        # Duplicate configurations share one output file and render once.
        unique: dict[Path, str] = {}
        for conf, dot_file in graphs:
            unique.setdefault(dot_file, conf)

        cancel = cancel_event if cancel_event is not None else threading.Event()
        svg_files: list[Path] = []
        failures: dict[str, RasterizationError] = {}

        with ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(unique)), thread_name_prefix="ivyreport-dot"
        ) as pool:
            futures: list[tuple[str, Future[Path]]] = [
                (conf, pool.submit(self._render_graph, conf, dot_file, cancel))
                for dot_file, conf in unique.items()
            ]
            try:
                for conf, future in futures:
                    try:
                        svg_files.append(future.result())
                    except RasterizationError as exc:
                        failures[conf] = exc
                        logger.warning("Could not render the graph for '%s': %s", conf, exc)
                        record_event(
                            self.emitter, "graph_failed", {"conf": conf, "reason": str(exc)}
                        )
            except BaseException:
                cancel.set()
                for _, future in futures:
                    future.cancel()
                raise

        return svg_files, failures

    def _render_graph(self, conf: str, dot_file: Path, cancel_event: threading.Event) -> Path:
        svg_file = dot_file.with_suffix(f".{IntermediateArtifact.RENDERED_SVG.value}")
        try:
            _check_cancelled(cancel_event)
            svg_file.unlink(missing_ok=True)
            rendered = self.rasterizer.rasterize(
                dot_file,
                output_path=svg_file,
                conf=conf,
                timeout=self.timeout,
                cancel_event=cancel_event,
            )
        finally:
            dot_file.unlink(missing_ok=True)
        record_event(self.emitter, "graph_rendered", {"conf": conf, "path": str(rendered)})
        return rendered


__all__ = [
    "DOT_STYLESHEET",
    "GraphRasterizer",
    "HTML_STYLESHEET",
    "REPORT_CSS",
    "ReportPipeline",
]
