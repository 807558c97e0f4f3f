"""Subcommand modules for depgraph.

Provides register_commands() which uses deferred imports to keep
``depgraph --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from depgraph.commands.conflicts import conflicts
    from depgraph.commands.cycles import cycles
    from depgraph.commands.db import db
    from depgraph.commands.graph import graph

    cli.add_command(cycles)
    cli.add_command(conflicts)
    cli.add_command(graph)
    cli.add_command(db)

    # --- Standalone commands ---
    from depgraph.commands.ingest import ingest
    from depgraph.commands.sample import sample

    cli.add_command(ingest)
    cli.add_command(sample)
