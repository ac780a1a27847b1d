"""Console presentation of generated report bundles."""

from __future__ import annotations

from collections.abc import Sequence

from ivyreport.core.bundle import ReportBundle
from ivyreport.core.context import IntermediateArtifact, artifact_name

from .state import get_cli_state


def present_bundle(bundle: ReportBundle, confs: Sequence[str], resolve_id: str) -> None:
    """Print a per-configuration table followed by the entry document path."""
    from rich import box
    from rich.markup import escape
    from rich.table import Table

    console = get_cli_state().console
    table = Table(title="Dependency report", box=box.SQUARE, header_style="bold cyan")
    table.add_column("Configuration", style="magenta")
    table.add_column("Page")
    table.add_column("Graph")

    rendered = {path.name for path in bundle.svg_files}
    for conf in dict.fromkeys(confs):
        page = artifact_name(resolve_id, conf, IntermediateArtifact.STYLED_HTML)
        graph = artifact_name(resolve_id, conf, IntermediateArtifact.RENDERED_SVG)
        if graph in rendered:
            status = f"[green]{graph}[/green]"
        else:
            failure = bundle.failures.get(conf)
            reason = f" ({escape(failure.message)})" if failure is not None else ""
            status = f"[red]missing{reason}[/red]"
        table.add_row(conf, page, status)

    console.print(table)
    console.print(f"Report index: [bold]{bundle.entry}[/bold]")


__all__ = ["present_bundle"]
