"""Command group: version conflict analysis."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from depgraph.commands._base import DepGroup
from depgraph.services.conflicts import ConflictService

if TYPE_CHECKING:
    from depgraph.commands._context import AppContext

_CONFLICTS_EXAMPLES = """\
  depgraph conflicts all
  depgraph conflicts all --basic
  depgraph conflicts stats
  depgraph conflicts package lodash"""


def _service(app: AppContext) -> ConflictService:
    return ConflictService(app.store, analysis=app.settings.analysis)


@click.group(cls=DepGroup, examples=_CONFLICTS_EXAMPLES)
def conflicts() -> None:
    """Detect packages required at different versions."""


@conflicts.command(
    "all",
    examples="""\
  depgraph conflicts all
  depgraph conflicts all --basic
  depgraph --json conflicts all""",
)
@click.option("--basic", is_flag=True, help="Skip JSON aggregation in the store.")
@click.pass_obj
def all_conflicts(app: AppContext, basic: bool) -> None:
    """List every package with more than one version constraint."""
    service = _service(app)
    app.emit(service.find_version_conflicts_basic() if basic else service.find_version_conflicts())


@conflicts.command(examples="  depgraph conflicts stats")
@click.pass_obj
def stats(app: AppContext) -> None:
    """Count total, shared and conflicting packages."""
    app.emit(_service(app).get_statistics())


@conflicts.command(examples="  depgraph conflicts package express")
@click.argument("name", required=False)
@click.pass_obj
def package(app: AppContext, name: str | None) -> None:
    """Show who depends on NAME and at which versions."""
    if not name:
        app.fail("conflicts_package", "MISSING_ARGUMENT", "Please provide a package name")
        return
    app.emit(_service(app).find_package_conflict(name))
