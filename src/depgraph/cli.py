"""Root CLI group for depgraph with global flags and command registration."""

from __future__ import annotations

import click

from depgraph import __version__
from depgraph.commands import register_commands
from depgraph.commands._base import DepGroup
from depgraph.commands._context import AppContext
from depgraph.config.settings import DepGraphSettings


@click.group(
    cls=DepGroup,
    invoke_without_command=True,
    examples="""\
  depgraph sample circular --ingest --clear
  depgraph cycles all
  depgraph conflicts all
  depgraph --json graph shared""",
)
@click.version_option(version=__version__, prog_name="depgraph")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """depgraph — dependency graph analysis for JavaScript and Python projects."""
    settings = DepGraphSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
