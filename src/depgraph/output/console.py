"""Rich Console factory and theme for depgraph output.

Consoles render into a StringIO buffer so every renderer returns a plain
string. Rich drops color codes on its own when no terminal is attached.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DEPGRAPH_THEME = Theme(
    {
        "dg.ok": "bold green",
        "dg.error": "bold red",
        "dg.warning": "bold yellow",
        "dg.op": "bold cyan",
        "dg.key": "dim",
        "dg.name": "bold blue",
        "dg.version": "magenta",
        "dg.path": "dim",
        "dg.heading": "bold",
        "dg.type.production": "green",
        "dg.type.development": "yellow",
        "dg.type.peer": "cyan",
    }
)

_TYPE_STYLES: dict[str, str] = {
    "production": "dg.type.production",
    "development": "dg.type.development",
    "peer": "dg.type.peer",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=DEPGRAPH_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_type(dependency_type: str) -> str:
    """Return the Rich style name for a dependency type."""
    return _TYPE_STYLES.get(dependency_type, "")
