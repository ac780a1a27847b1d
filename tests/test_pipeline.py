from __future__ import annotations

from pathlib import Path
import threading

import pytest

from ivyreport.core.collector import collect
from ivyreport.core.exceptions import ReportCancelled, ReportGenerationError, TransformError
from ivyreport.core.pipeline import REPORT_CSS, ReportPipeline


def test_generate_builds_complete_bundle(cache_dir: Path, tmp_path: Path, make_rasterizer) -> None:
    target = tmp_path / "report"
    rasterizer = make_rasterizer()
    pipeline = ReportPipeline(rasterizer, max_workers=2)

    collect(cache_dir, ["default", "test"], "build", target)
    bundle = pipeline.run(["default", "test"], "build", target, target)

    assert bundle.entry == target / "build-default.html"
    assert bundle.index_name == "build-default.html"
    assert bundle.html_files == [target / "build-default.html", target / "build-test.html"]
    assert bundle.svg_files == [target / "build-default.svg", target / "build-test.svg"]
    assert bundle.stylesheet == target / REPORT_CSS
    assert bundle.complete
    assert sorted(path.name for path in target.iterdir()) == [
        "build-default.html",
        "build-default.svg",
        "build-default.xml",
        "build-test.html",
        "build-test.svg",
        "build-test.xml",
        "ivy-report.css",
    ]
    assert not list(target.glob("*.dot"))
    assert not list(target.glob("*.part"))


def test_generate_returns_entry_document(cache_dir: Path, tmp_path: Path, make_rasterizer) -> None:
    entry = ReportPipeline(make_rasterizer()).generate(
        ["test", "default"], "build", cache_dir, tmp_path / "out"
    )

    assert entry == tmp_path / "out" / "build-test.html"


def test_html_pages_cross_link_configurations(
    cache_dir: Path, tmp_path: Path, make_rasterizer
) -> None:
    target = tmp_path / "out"
    ReportPipeline(make_rasterizer()).run(["default", "test"], "build", cache_dir, target)

    page = (target / "build-default.html").read_text(encoding="utf-8")
    assert 'href="build-test.html"' in page
    assert 'href="build-default.svg"' in page
    assert 'href="ivy-report.css"' in page
    assert '<li class="current">default</li>' in page
    assert "Evicted dependencies" in page
    assert "Apache-2.0" in page


def test_graph_description_lists_dependencies(
    cache_dir: Path, tmp_path: Path, make_rasterizer
) -> None:
    rasterizer = make_rasterizer()
    ReportPipeline(rasterizer, max_workers=1).run(["default"], "build", cache_dir, tmp_path / "out")

    [(conf, graph)] = rasterizer.calls
    assert conf == "default"
    assert graph.startswith('digraph "app" {')
    assert '"org.example#app;1.0" -> "org.example#lib;2.0" [label="2.0"];' in graph
    assert '"org.example#lib;1.5"' in graph
    assert "dashed" in graph


def test_failed_graph_is_isolated(cache_dir: Path, tmp_path: Path, make_rasterizer) -> None:
    target = tmp_path / "out"
    rasterizer = make_rasterizer(fail_for=("test",))

    bundle = ReportPipeline(rasterizer).run(["default", "test"], "build", cache_dir, target)

    assert not bundle.complete
    assert list(bundle.failures) == ["test"]
    assert bundle.failures["test"].conf == "test"
    assert bundle.svg_files == [target / "build-default.svg"]
    assert (target / "build-test.html").exists()
    assert not (target / "build-test.svg").exists()
    assert not list(target.glob("*.dot"))
    assert target / "build-test.svg" not in bundle.files()


def test_duplicate_configurations_render_once(
    cache_dir: Path, tmp_path: Path, make_rasterizer
) -> None:
    rasterizer = make_rasterizer()

    bundle = ReportPipeline(rasterizer).run(
        ["default", "default"], "build", cache_dir, tmp_path / "out"
    )

    assert len(rasterizer.calls) == 1
    assert bundle.html_files == [tmp_path / "out" / "build-default.html"] * 2
    assert bundle.files().count(tmp_path / "out" / "build-default.html") == 1


def test_empty_configuration_list_rejected(
    cache_dir: Path, tmp_path: Path, make_rasterizer
) -> None:
    with pytest.raises(ValueError):
        ReportPipeline(make_rasterizer()).run([], "build", cache_dir, tmp_path / "out")


def test_invalid_report_raises_transform_error(
    tmp_path: Path, make_report, make_rasterizer
) -> None:
    cache = tmp_path / "cache"
    make_report(cache, "build", "default")
    (cache / "build-broken.xml").write_text("<ivy-report><info", encoding="utf-8")

    with pytest.raises(TransformError, match="build-broken.xml"):
        ReportPipeline(make_rasterizer()).run(
            ["default", "broken"], "build", cache, tmp_path / "out"
        )


def test_missing_report_raises_transform_error(tmp_path: Path, make_rasterizer) -> None:
    with pytest.raises(TransformError):
        ReportPipeline(make_rasterizer()).run(
            ["default"], "build", tmp_path / "empty", tmp_path / "out"
        )


def test_unwritable_target_directory(cache_dir: Path, tmp_path: Path, make_rasterizer) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(ReportGenerationError, match="Unable to create directory"):
        ReportPipeline(make_rasterizer()).run(["default"], "build", cache_dir, blocker / "out")


def test_stylesheet_override_directory(cache_dir: Path, tmp_path: Path, make_rasterizer) -> None:
    overrides = tmp_path / "styles"
    overrides.mkdir()
    (overrides / REPORT_CSS).write_text("body { color: black; }", encoding="utf-8")
    target = tmp_path / "out"

    bundle = ReportPipeline(make_rasterizer(), stylesheet_dir=overrides).run(
        ["default"], "build", cache_dir, target
    )

    assert bundle.stylesheet is not None
    assert bundle.stylesheet.read_text(encoding="utf-8") == "body { color: black; }"
    assert (target / "build-default.html").exists()


def test_broken_stylesheet_raises_transform_error(
    cache_dir: Path, tmp_path: Path, make_rasterizer
) -> None:
    overrides = tmp_path / "styles"
    overrides.mkdir()
    (overrides / "ivy-report.xsl").write_text("<xsl:stylesheet", encoding="utf-8")

    with pytest.raises(TransformError, match="Unable to compile stylesheet"):
        ReportPipeline(make_rasterizer(), stylesheet_dir=overrides).run(
            ["default"], "build", cache_dir, tmp_path / "out"
        )


def test_cancelled_run_stops_before_rendering(
    cache_dir: Path, tmp_path: Path, make_rasterizer
) -> None:
    rasterizer = make_rasterizer()
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(ReportCancelled):
        ReportPipeline(rasterizer).run(
            ["default"], "build", cache_dir, tmp_path / "out", cancel_event=cancel
        )

    assert rasterizer.calls == []


def test_end_to_end_with_stub_dot(cache_dir: Path, tmp_path: Path, stub_dot: Path) -> None:
    from ivyreport.adapters.graphviz import DotRunner

    target = tmp_path / "bundle"
    collect(cache_dir, ["default", "test"], "build", target)
    bundle = ReportPipeline(DotRunner(str(stub_dot))).run(
        ["default", "test"], "build", target, target
    )

    assert bundle.complete
    assert {path.name for path in bundle.files()} == {
        "build-default.html",
        "build-test.html",
        "build-default.svg",
        "build-test.svg",
        "ivy-report.css",
    }
    assert not list(target.glob("*.dot"))


def test_cancellation_during_rendering_removes_graph_descriptions(
    tmp_path: Path, make_report, make_rasterizer
) -> None:
    confs = [f"conf{index}" for index in range(8)]
    cache = tmp_path / "cache"
    for conf in confs:
        make_report(cache, "build", conf)
    target = tmp_path / "out"
    cancel = threading.Event()

    class CancellingRasterizer(make_rasterizer):
        def rasterize(self, input_path, *, cancel_event=None, **options):
            assert cancel_event is not None
            cancel_event.set()
            raise ReportCancelled("stopped by user")

    with pytest.raises(ReportCancelled):
        ReportPipeline(CancellingRasterizer(), max_workers=2).run(
            confs, "build", cache, target, cancel_event=cancel
        )

    assert cancel.is_set()
    assert len(list(target.glob("*.html"))) == len(confs)
    assert not list(target.glob("*.dot"))
    assert not list(target.glob("*.svg"))


def test_graph_stylesheet_failure_removes_graph_descriptions(
    cache_dir: Path, tmp_path: Path, make_rasterizer
) -> None:
    overrides = tmp_path / "styles"
    overrides.mkdir()
    (overrides / "ivy-report-dot.xsl").write_text(
        """<xsl:stylesheet version="1.0" xmlns:xsl="http://www.w3.org/1999/XSL/Transform">
  <xsl:output method="text"/>
  <xsl:template match="/ivy-report">
    <xsl:if test="info/@conf = 'test'">
      <xsl:message terminate="yes">no graph for test</xsl:message>
    </xsl:if>
    <xsl:text>digraph "app" {}</xsl:text>
  </xsl:template>
</xsl:stylesheet>
""",
        encoding="utf-8",
    )
    target = tmp_path / "out"
    rasterizer = make_rasterizer()

    with pytest.raises(TransformError, match="ivy-report-dot.xsl"):
        ReportPipeline(rasterizer, stylesheet_dir=overrides).run(
            ["default", "test"], "build", cache_dir, target
        )

    assert rasterizer.calls == []
    assert (target / "build-default.html").exists()
    assert not list(target.glob("*.dot"))


def test_stub_dot_failure_is_isolated(tmp_path: Path, make_report, make_script) -> None:
    from ivyreport.adapters.graphviz import DotRunner

    cache = tmp_path / "cache"
    make_report(cache, "build", "default")
    broken = make_report(cache, "build", "test")
    broken.write_text(
        broken.read_text(encoding="utf-8").replace('module="app"', 'module="unlaidout"'),
        encoding="utf-8",
    )
    dot = make_script(
        tmp_path / "bin" / "dot",
        'input=$(cat)\n'
        'case "$input" in *unlaidout*) echo "syntax error in graph" >&2; exit 1;; esac\n'
        "echo '<svg xmlns=\"http://www.w3.org/2000/svg\"/>'",
    )
    target = tmp_path / "bundle"

    bundle = ReportPipeline(DotRunner(str(dot)), max_workers=2).run(
        ["default", "test"], "build", cache, target
    )

    assert list(bundle.failures) == ["test"]
    assert "syntax error in graph" in str(bundle.failures["test"])
    assert bundle.svg_files == [target / "build-default.svg"]
    assert (target / "build-default.svg").read_text(encoding="utf-8").startswith("<svg")
    assert (target / "build-test.html").exists()
    assert not (target / "build-test.svg").exists()
    assert not list(target.glob("*.dot"))
    assert not list(target.glob("*.part"))
