"""Command: parse a project manifest and load it into the graph."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from depgraph.commands._base import DepCommand
from depgraph.services.ingest import IngestService

if TYPE_CHECKING:
    from depgraph.commands._context import AppContext


@click.command(
    cls=DepCommand,
    examples="""\
  depgraph ingest ./my-service
  depgraph ingest ./my-service --clear
  depgraph --json ingest sample_projects/flask_app""",
)
@click.argument("path", type=click.Path(file_okay=False, path_type=str))
@click.option("--clear", is_flag=True, help="Clear the graph before loading.")
@click.pass_obj
def ingest(app: AppContext, path: str, clear: bool) -> None:
    """Parse PATH's package.json or requirements.txt and build its graph."""
    app.emit(IngestService(app.store, analysis=app.settings.analysis).ingest(path, clear=clear))
