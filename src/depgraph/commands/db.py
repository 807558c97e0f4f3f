"""Command group: store maintenance."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from depgraph.commands._base import DepGroup
from depgraph.services.builder import GraphBuilderService

if TYPE_CHECKING:
    from depgraph.commands._context import AppContext

_DB_EXAMPLES = """\
  depgraph db stats
  depgraph db init
  depgraph db clear --yes"""


@click.group(cls=DepGroup, examples=_DB_EXAMPLES)
def db() -> None:
    """Inspect or reset the graph store."""


@db.command(examples="  depgraph db stats")
@click.pass_obj
def stats(app: AppContext) -> None:
    """Show node and edge totals."""
    app.emit(GraphBuilderService(app.store).get_database_stats())


@db.command(examples="  depgraph db init")
@click.pass_obj
def init(app: AppContext) -> None:
    """Create the store and its constraints if missing."""
    app.emit(GraphBuilderService(app.store).ensure_constraints())


@db.command(examples="  depgraph db clear --yes")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_obj
def clear(app: AppContext, yes: bool) -> None:
    """Delete every node and edge in the store."""
    if not yes:
        click.confirm(f"Delete everything in {app.settings.store_path}?", abort=True)
    app.emit(GraphBuilderService(app.store).clear_graph())
