"""Custom Click base classes with --examples support and error conversion.

DepCommand and DepGroup accept an ``examples`` parameter; ``--examples``
prints them and exits, keeping ``--help`` short. DepCommand also turns
any :class:`DepGraphError` raised by a service into a failed
ServiceResult emitted through the shared AppContext (exit code 1).
"""

from __future__ import annotations

from typing import Any

import click

from depgraph.errors import DepGraphError
from depgraph.services.result import ServiceResult


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


def op_name(ctx: click.Context) -> str:
    """Operation label for a command: ``cycles project`` -> ``cycles_project``."""
    parts = ctx.command_path.split()[1:]
    return "_".join(parts) or ctx.info_name or "depgraph"


class DepCommand(click.Command):
    """Click Command subclass with ``--examples`` and DepGraphError handling."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except DepGraphError as exc:
            from depgraph.commands._context import AppContext

            app = ctx.find_object(AppContext)
            if app is None:
                raise
            app.emit(ServiceResult.failure(op_name(ctx), exc))


class DepGroup(click.Group):
    """Click Group subclass that supports an ``--examples`` flag.

    Sets ``command_class = DepCommand`` so all subcommands get examples
    and error conversion without explicit ``cls=`` each time.
    """

    command_class = DepCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)
