"""Command: write sample projects, optionally loading them."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from depgraph.commands._base import DepCommand
from depgraph.services.ingest import IngestService
from depgraph.services.result import ServiceResult
from depgraph.services.samples import SAMPLE_KINDS, SampleService

if TYPE_CHECKING:
    from depgraph.commands._context import AppContext


@click.command(
    cls=DepCommand,
    examples="""\
  depgraph sample javascript
  depgraph sample circular --ingest --clear
  depgraph sample python --output /tmp/samples""",
)
@click.argument("kind", type=click.Choice(SAMPLE_KINDS))
@click.option("--ingest", "do_ingest", is_flag=True, help="Load the projects after writing.")
@click.option("--clear", is_flag=True, help="Clear the graph before loading.")
@click.option(
    "--output",
    "output_dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory to write into (default: [samples] output_dir).",
)
@click.pass_obj
def sample(
    app: AppContext, kind: str, do_ingest: bool, clear: bool, output_dir: Path | None
) -> None:
    """Create the KIND sample project set."""
    base = output_dir if output_dir is not None else app.resolve_path(app.settings.samples.output_dir)
    created = SampleService(base).create(kind)
    if not created.ok or not do_ingest:
        app.emit(created)
        return

    batch = IngestService(app.store, analysis=app.settings.analysis).ingest_many(
        created.data["projects"], clear=clear
    )
    app.emit(
        ServiceResult(
            ok=True,
            op="sample",
            data={
                **created.data,
                "ingested": batch.data["projects"],
                "links": batch.data["links"],
                "database": batch.data["database"],
            },
            warnings=batch.warnings,
        )
    )
