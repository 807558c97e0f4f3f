"""Command group: dependency queries and graph export."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from depgraph.commands._base import DepGroup
from depgraph.services.builder import GraphBuilderService
from depgraph.services.export import FORMATS, ExportService
from depgraph.services.result import ServiceResult

if TYPE_CHECKING:
    from depgraph.commands._context import AppContext

_GRAPH_EXAMPLES = """\
  depgraph graph deps express-app
  depgraph graph stats express-app
  depgraph graph shared
  depgraph graph users lodash
  depgraph graph visualize express-app
  depgraph graph export --format json --output graph.json"""


def _builder(app: AppContext) -> GraphBuilderService:
    return GraphBuilderService(app.store, analysis=app.settings.analysis)


@click.group(cls=DepGroup, examples=_GRAPH_EXAMPLES)
def graph() -> None:
    """Query the stored dependency graph."""


@graph.command(
    examples="""\
  depgraph graph deps express-app
  depgraph -v graph deps express-app""",
)
@click.argument("name")
@click.pass_obj
def deps(app: AppContext, name: str) -> None:
    """List NAME's direct dependencies."""
    app.emit(_builder(app).get_project_dependencies(name))


@graph.command(examples="  depgraph graph stats express-app")
@click.argument("name")
@click.pass_obj
def stats(app: AppContext, name: str) -> None:
    """Count NAME's dependencies per type."""
    app.emit(_builder(app).get_dependency_stats(name))


@graph.command(examples="  depgraph graph shared")
@click.pass_obj
def shared(app: AppContext) -> None:
    """List packages used by more than one project."""
    app.emit(_builder(app).find_shared_dependencies())


@graph.command(examples="  depgraph graph users lodash")
@click.argument("package")
@click.pass_obj
def users(app: AppContext, package: str) -> None:
    """List projects that depend on PACKAGE."""
    app.emit(_builder(app).find_projects_using_package(package))


@graph.command(examples="  depgraph graph visualize express-app")
@click.argument("name")
@click.pass_obj
def visualize(app: AppContext, name: str) -> None:
    """Print a graph-browser query that draws NAME's dependencies."""
    app.emit(_builder(app).visualize_project_graph(name))


@graph.command(
    examples="""\
  depgraph graph export
  depgraph graph export --format json --output graph.json""",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(FORMATS),
    default="dot",
    help="Output format (default: dot).",
)
@click.option(
    "--output",
    "output_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write to this file instead of stdout.",
)
@click.pass_obj
def export(app: AppContext, fmt: str, output_path: Path | None) -> None:
    """Export the full graph as Graphviz DOT or D3 JSON."""
    result = ExportService(app.store, analysis=app.settings.analysis).export_graph(fmt=fmt)
    if not result.ok or output_path is None:
        app.emit(result)
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(result.data["content"], encoding="utf-8")
    data = {k: v for k, v in result.data.items() if k != "content"}
    app.emit(ServiceResult(ok=True, op=result.op, data={**data, "output": str(output_path)}))
