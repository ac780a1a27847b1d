from __future__ import annotations

import logging
import os
from pathlib import Path
import threading

import pytest

from ivyreport.adapters import graphviz as graphviz_mod
from ivyreport.core.exceptions import RasterizationError


REPORT_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<ivy-report version="1.0">
  <info organisation="org.example" module="app" revision="1.0" conf="{conf}"
        confs="default, test" date="20240101120000"/>
  <dependencies>
    <module organisation="org.example" name="lib">
      <revision name="2.0" status="release" resolver="public" downloaded="true"
                homepage="https://example.org/lib" conf="{conf}" position="0">
        <license name="Apache-2.0" url="https://www.apache.org/licenses/LICENSE-2.0"/>
        <caller organisation="org.example" name="app" conf="{conf}" rev="2.0" callerrev="1.0"/>
        <artifacts>
          <artifact name="lib" type="jar" ext="jar" status="successful" size="4096"/>
        </artifacts>
      </revision>
      <revision name="1.5" status="release" resolver="public" evicted="latest-revision"
                evicted-reason="conflict" conf="{conf}" position="1">
        <evicted-by rev="2.0"/>
        <caller organisation="org.example" name="app" conf="{conf}" rev="1.5" callerrev="1.0"/>
      </revision>
    </module>
  </dependencies>
</ivy-report>
"""

STUB_SVG = '<svg xmlns="http://www.w3.org/2000/svg"/>'


def write_report(directory: Path, resolve_id: str, conf: str) -> Path:
    """Write a small resolve report for ``conf`` into ``directory``."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{resolve_id}-{conf}.xml"
    path.write_text(REPORT_TEMPLATE.format(conf=conf), encoding="utf-8")
    return path


def write_script(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
    path.chmod(0o755)
    return path


class RecordingRasterizer:
    """In-process rasterizer that records the graph descriptions it receives."""

    def __init__(self, fail_for: tuple[str, ...] = ()) -> None:
        self.fail_for = set(fail_for)
        self.calls: list[tuple[str | None, str]] = []
        self._lock = threading.Lock()

    def rasterize(
        self,
        input_path: Path | str,
        *,
        output_path: Path | str | None = None,
        conf: str | None = None,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> Path:
        source = Path(input_path)
        with self._lock:
            self.calls.append((conf, source.read_text(encoding="utf-8")))
        if conf in self.fail_for:
            raise RasterizationError(f"layout failed for {conf}", conf)
        target = Path(output_path) if output_path is not None else source.with_suffix(".svg")
        target.write_text(STUB_SVG, encoding="utf-8")
        return target


@pytest.fixture
def posix_only() -> None:
    if os.name == "nt":
        pytest.skip("stub executables are POSIX shell scripts")


@pytest.fixture
def stub_dot(tmp_path: Path, posix_only: None) -> Path:
    """Executable standing in for Graphviz ``dot``."""
    return write_script(tmp_path / "bin" / "dot", f"cat > /dev/null\necho '{STUB_SVG}'")


@pytest.fixture(autouse=True)
def _isolate_dot_lookup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(graphviz_mod.DOT_ENV_VAR, raising=False)
    graphviz_mod._default_runner.reset()


@pytest.fixture(autouse=True)
def _isolate_package_logger():
    package_logger = logging.getLogger("ivyreport")
    level = package_logger.level
    handlers = list(package_logger.handlers)
    yield
    package_logger.setLevel(level)
    package_logger.handlers[:] = handlers


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """Resolution cache holding ``build-default.xml`` and ``build-test.xml``."""
    directory = tmp_path / "cache"
    write_report(directory, "build", "default")
    write_report(directory, "build", "test")
    return directory


@pytest.fixture
def make_report():
    return write_report


@pytest.fixture
def make_rasterizer():
    return RecordingRasterizer


@pytest.fixture
def make_script(posix_only: None):
    return write_script
