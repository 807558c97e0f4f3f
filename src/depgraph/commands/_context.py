"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy store connection and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from depgraph.output.formatters import OutputSettings, format_result
from depgraph.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from depgraph.config.settings import DepGraphSettings
    from depgraph.infrastructure.store import GraphStore


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The store is connected on first use so ``--help``, ``--version`` and
    ``sample`` without ``--ingest`` never touch the database. The root
    group registers :meth:`close` with ``ctx.call_on_close``.
    """

    def __init__(self, settings: DepGraphSettings) -> None:
        self.settings = settings
        self._store: GraphStore | None = None

        from depgraph.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from depgraph.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def store(self) -> GraphStore:
        """The connected graph store (opened lazily on first access)."""
        if self._store is None:
            from depgraph.infrastructure.store import GraphStore

            store = GraphStore.from_settings(self.settings)
            store.connect()
            self._store = store
        return self._store

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None

    def resolve_path(self, path: Path) -> Path:
        """Resolve *path* against the project root unless already absolute."""
        return path if path.is_absolute() else self.settings.project_root / path

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if settings.quiet and not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

    def fail(self, op: str, code: str, message: str, **detail: str) -> None:
        """Emit a failed result built from a code and message (exits 1)."""
        self.emit(
            ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code=code, message=message, detail=detail),
            )
        )
