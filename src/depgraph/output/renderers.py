"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from depgraph.domain.cycles import format_cycle
from depgraph.output.console import create_console, get_output, style_for_type

if TYPE_CHECKING:
    from rich.console import Console

    from depgraph.services.result import ServiceResult

CYCLE_TIPS = (
    "Build failures",
    "Installation issues",
    "Runtime errors",
    "Difficulty in testing and maintenance",
)

CONFLICT_RECOMMENDATIONS = (
    "Align versions across projects for consistency",
    "Test for runtime conflicts",
    "Consider using a shared dependency version file",
    "Major version differences are most likely to cause issues",
)


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
        _render_warnings(console, result)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    cycles = result.data.get("cycles")
    if isinstance(cycles, list):
        return "\n".join(format_cycle(c["packages"]) for c in cycles)

    items = result.data.get("items") or result.data.get("conflicts")
    if items and isinstance(items, list):
        return "\n".join(name for name in (_extract_name(item) for item in items) if name)

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_name(item: Any) -> str:
    if isinstance(item, dict):
        if "package_a" in item:
            return f"{item['package_a']} {item['package_b']}"
        for key in ("package_name", "package", "name", "project"):
            val = item.get(key)
            if val is not None:
                return str(val)
    return ""


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="dg.ok")
    op = Text(f"  {result.op}", style="dg.op")
    console.print(Text.assemble(label, op))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="dg.key")
    if key in ("project", "package", "package_name"):
        v = Text(str(value), style="dg.name")
    elif key in ("path", "file", "dependency_file", "store", "output"):
        v = Text(str(value), style="dg.path")
    else:
        v = Text(str(value))
    console.print(k + v)


def _banner(console: Console, title: str) -> None:
    console.print(Rule(style="dim"))
    console.print(Text(title, style="dg.heading"))
    console.print(Rule(style="dim"))


def _render_warnings(console: Console, result: ServiceResult) -> None:
    for warning in result.warnings:
        console.print(Text("  warning: ", style="dg.warning") + Text(warning))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))

    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)
    style = "bold red" if duration > 1000 else "yellow" if duration > 100 else "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    counts = span_data.get("counts") or {}
    if counts:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in counts.items()) + ")"
    console.print(line)

    for step in span_data.get("steps", []):
        _render_telemetry_tree(console, step, indent=indent + 4)

    totals = span_data.get("totals")
    if totals:
        console.print(f"{prefix}totals: " + ", ".join(f"{k}={v}" for k, v in totals.items()))


def _dependency_table(items: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Package", style="dg.name", no_wrap=True)
    table.add_column("Constraint", style="dg.version")
    table.add_column("Type")
    if verbose:
        table.add_column("Line", justify="right", style="dim")

    for item in items:
        dep_type = str(item.get("type", ""))
        row: list[Any] = [
            str(item.get("name", "")),
            str(item.get("constraint", "")),
            Text(dep_type, style=style_for_type(dep_type)),
        ]
        if verbose:
            row.append(str(item.get("line_number", 0)))
        table.add_row(*row)
    return table


def _stats_block(console: Console, stats: dict[str, Any], labels: dict[str, str]) -> None:
    for key, label in labels.items():
        if key in stats:
            console.print(f"  {label}: {stats[key]}")


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR:", style="dg.error")
    op = Text(f" {result.op}", style="dg.op")
    console.print(Text.assemble(label, op, " — ", msg))

    if err and err.detail.get("guidance"):
        console.print(f"  {err.detail['guidance']}")
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Ingest and builder renderers ──────────────────────────────────────


def _render_ingest(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    for key in ("project", "language", "version", "dependency_file", "dependencies_processed"):
        if d.get(key) is not None:
            _field(console, key, d[key])

    grouped: dict[str, list[dict[str, Any]]] = d.get("dependencies", {})
    total = sum(len(deps) for deps in grouped.values())
    console.print(f"\nFound {total} dependencies:")
    for dep_type, deps in grouped.items():
        console.print()
        console.print(Text(f"  {dep_type.upper()}", style=style_for_type(dep_type) or "dg.heading"))
        for dep in deps:
            console.print(f"    - {dep['name']} {dep['constraint']}")

    console.print()
    console.print(Text("Dependency Statistics:", style="dg.heading"))
    for dep_type, count in d.get("stats", {}).items():
        console.print(f"  {dep_type}: {count}")

    console.print()
    console.print(Text("Visualization query:", style="dg.heading"))
    console.print(d.get("query", ""), markup=False)

    console.print()
    _render_database(console, d.get("database", {}))
    if verbose:
        _render_meta(console, result)


def _render_database(console: Console, stats: dict[str, Any]) -> None:
    console.print(Text("Database Statistics", style="dg.heading"))
    _stats_block(
        console,
        stats,
        {
            "projects": "Total Projects",
            "packages": "Total Packages",
            "dependencies": "Total Dependencies",
            "files": "Total Files",
        },
    )


def _render_db_stats(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _render_database(console, result.data)


def _render_project_dependencies(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print(f"No dependencies recorded for {result.data.get('project')}")
        return
    console.print(_dependency_table(items, verbose=verbose))
    console.print(f"\n{result.data.get('count', len(items))} dependencies")


def _render_dependency_stats(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    _status_line(console, result)
    _field(console, "project", result.data.get("project"))
    for dep_type, count in result.data.get("stats", {}).items():
        console.print(f"  {dep_type}: {count}")


def _render_shared(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print("No packages are shared between projects")
        return
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Package", style="dg.name", no_wrap=True)
    table.add_column("Used By", justify="right")
    table.add_column("Projects")
    for item in items:
        table.add_row(item["package"], str(item["usage_count"]), ", ".join(item["projects"]))
    console.print(table)


def _render_package_users(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print(f"No projects depend on {result.data.get('package')}")
        return
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Project", style="dg.name", no_wrap=True)
    table.add_column("Language")
    table.add_column("Constraint", style="dg.version")
    table.add_column("Type")
    for item in items:
        dep_type = str(item.get("dependency_type", ""))
        table.add_row(
            str(item["project"]),
            str(item.get("language", "")),
            str(item.get("version_constraint", "")),
            Text(dep_type, style=style_for_type(dep_type)),
        )
    console.print(table)


def _render_visualize(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    console.print(
        Panel(
            Text(result.data.get("query", "")),
            title=f"Visualization query: {result.data.get('project')}",
            border_style="dim",
            expand=False,
        )
    )


# ── Cycle renderers ───────────────────────────────────────────────────


def _render_cycles(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    cycles = d.get("cycles", [])
    scope = f" in {d['project']}" if d.get("project") else ""
    if not cycles:
        console.print(Text(f"No circular dependencies detected{scope}", style="dg.ok"))
        return

    _banner(console, "CIRCULAR DEPENDENCY REPORT")
    console.print(f"\nFound {d.get('count', len(cycles))} circular dependencies{scope}:\n")
    for index, cycle in enumerate(cycles, start=1):
        console.print(f"{index}. Cycle of length {cycle['length']}:")
        console.print(f"   {format_cycle(cycle['packages'])}")
        console.print()
    if d.get("truncated"):
        console.print(Text("  (list truncated; see `depgraph cycles stats` for totals)", style="dim"))
    console.print(Rule(style="dim"))
    console.print("Tip: Circular dependencies can cause:")
    for tip in CYCLE_TIPS:
        console.print(f"   - {tip}")
    if verbose:
        _render_meta(console, result)


def _render_direct_cycles(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    if not items:
        console.print(Text("No direct circular dependencies detected", style="dg.ok"))
        return
    _banner(console, "DIRECT CIRCULAR DEPENDENCIES")
    for index, item in enumerate(items, start=1):
        console.print(f"{index}. {item['package_a']} ⟷ {item['package_b']}")


def _render_cycle_stats(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _banner(console, "CIRCULAR DEPENDENCY STATISTICS")
    if not d.get("total_cycles"):
        console.print(Text("No circular dependencies found!", style="dg.ok"))
        return
    console.print(f"Total Cycles: {d['total_cycles']}")
    console.print(f"Shortest Cycle: {d['shortest_cycle']} packages")
    console.print(f"Longest Cycle: {d['longest_cycle']} packages")
    console.print(f"Average Cycle Length: {d['avg_cycle_length']} packages")


# ── Conflict renderers ────────────────────────────────────────────────


def _dependent_line(dep: dict[str, Any], bullet: str | None = None) -> str:
    icon = bullet or ("dev" if dep.get("type") == "development" else "pkg")
    return f"[{icon}] {dep['project']}: {dep['version']} ({dep.get('type', '')})"


def _render_conflicts(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    conflicts = result.data.get("conflicts", [])
    if not conflicts:
        console.print(Text("No version conflicts detected", style="dg.ok"))
        return

    _banner(console, "VERSION CONFLICT REPORT")
    console.print(f"\nFound {len(conflicts)} packages with version conflicts:\n")
    for index, conflict in enumerate(conflicts, start=1):
        console.print(Text(f"{index}. {conflict['package_name']}", style="dg.name"))
        for dep in conflict["dependencies"]:
            console.print(f"   {_dependent_line(dep)}", markup=False)
        if conflict.get("compatible"):
            console.print(Text("   Versions may be compatible (same major version)", style="dg.ok"))
        else:
            console.print(
                Text("   Potential incompatibility - different major versions", style="dg.warning")
            )
        console.print()

    console.print(Rule(style="dim"))
    console.print("Recommendations:")
    for rec in CONFLICT_RECOMMENDATIONS:
        console.print(f"   • {rec}")
    if verbose:
        _field(console, "strategy", result.data.get("strategy"))
        _render_meta(console, result)


def _render_package_conflict(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    d = result.data
    name = d.get("package_name")
    conflict = d.get("conflict")
    if conflict is None:
        if not d.get("dependents"):
            console.print(f'Package "{name}" not found in graph')
        else:
            versions = d.get("distinct_versions") or []
            console.print(Text(f"No conflicts for {name} - all use {versions[0]}", style="dg.ok"))
        return

    _banner(console, f"Package: {name}")
    console.print("Used by:")
    for dep in conflict["dependencies"]:
        console.print(f"  • {dep['project']}: {dep['version']} ({dep.get('type', '')})")
    console.print("\nVersion Summary:")
    for version, users in conflict["versions"].items():
        console.print(f"  {version}: {', '.join(users)}", markup=False)


def _render_conflict_stats(
    result: ServiceResult, console: Console, *, verbose: bool = False
) -> None:
    d = result.data
    _banner(console, "VERSION CONFLICT STATISTICS")
    console.print(f"Total Packages: {d['total_packages']}")
    console.print(f"Shared Packages: {d['shared_packages']} (used by multiple projects)")
    console.print(f"Conflicting Packages: {d['conflicting_packages']} (different versions)")
    if not d["conflicting_packages"]:
        console.print(Text("No version conflicts found!", style="dg.ok"))
    elif d["shared_packages"]:
        rate = d["conflicting_packages"] / d["shared_packages"] * 100
        console.print(f"Conflict Rate: {rate:.1f}% of shared packages have version conflicts")


# ── Maintenance renderers ─────────────────────────────────────────────


def _render_export(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    if "output" not in d:
        console.print(d.get("content", ""), end="", markup=False, soft_wrap=True)
        return
    _status_line(console, result)
    for key in ("format", "output", "node_count", "edge_count"):
        if key in d:
            _field(console, key, d[key])


def _render_sample(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "kind", result.data.get("kind"))
    for path in result.data.get("projects", []):
        console.print(f"  created {path}", markup=False)
    ingested = result.data.get("ingested")
    if ingested:
        console.print()
        for entry in ingested:
            console.print(f"  loaded {entry['project']} ({entry['dependencies_processed']} dependencies)")
        _field(console, "links", result.data.get("links", 0))
        console.print()
        _render_database(console, result.data.get("database", {}))


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Ingest / builder
    "ingest": _render_ingest,
    "project_dependencies": _render_project_dependencies,
    "dependency_stats": _render_dependency_stats,
    "shared_dependencies": _render_shared,
    "package_users": _render_package_users,
    "visualize": _render_visualize,
    "db_stats": _render_db_stats,
    "clear": _render_db_stats,
    # Cycles
    "cycles": _render_cycles,
    "project_cycles": _render_cycles,
    "direct_cycles": _render_direct_cycles,
    "cycle_stats": _render_cycle_stats,
    # Conflicts
    "conflicts": _render_conflicts,
    "package_conflict": _render_package_conflict,
    "conflict_stats": _render_conflict_stats,
    # Export / samples
    "export_graph": _render_export,
    "sample": _render_sample,
}
