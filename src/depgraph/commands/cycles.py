"""Command group: circular dependency analysis."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from depgraph.commands._base import DepGroup
from depgraph.services.cycles import CycleService

if TYPE_CHECKING:
    from depgraph.commands._context import AppContext

_CYCLES_EXAMPLES = """\
  depgraph cycles all
  depgraph cycles direct
  depgraph cycles stats
  depgraph cycles project authService
  depgraph --json cycles all"""


def _service(app: AppContext) -> CycleService:
    return CycleService(app.store, analysis=app.settings.analysis)


@click.group(cls=DepGroup, examples=_CYCLES_EXAMPLES)
def cycles() -> None:
    """Detect circular dependencies between packages."""


@cycles.command(
    "all",
    examples="""\
  depgraph cycles all
  depgraph -q cycles all""",
)
@click.pass_obj
def all_cycles(app: AppContext) -> None:
    """List every cycle, shortest first."""
    app.emit(_service(app).find_all_cycles())


@cycles.command(examples="  depgraph cycles direct")
@click.pass_obj
def direct(app: AppContext) -> None:
    """List package pairs that depend on each other."""
    app.emit(_service(app).find_direct_cycles())


@cycles.command(examples="  depgraph cycles stats")
@click.pass_obj
def stats(app: AppContext) -> None:
    """Summarise cycle count and lengths."""
    app.emit(_service(app).get_statistics())


@cycles.command(examples="  depgraph cycles project authService")
@click.argument("name", required=False)
@click.pass_obj
def project(app: AppContext, name: str | None) -> None:
    """List cycles that pass through NAME's direct dependencies."""
    if not name:
        app.fail("cycles_project", "MISSING_ARGUMENT", "Please provide a project name")
        return
    app.emit(_service(app).find_project_cycles(name))
