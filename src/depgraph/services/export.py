"""ExportService — write the whole dependency graph in portable formats.

Node ids are ``<Label>:<key>`` so a project and a package that share a
name stay distinct; each node keeps its ``label`` and each edge its
relationship ``type``, matching the stored layout.
"""

from __future__ import annotations

import json
from typing import Any

import networkx as nx
from sqlalchemy import select

from depgraph.domain.types import EdgeType, NodeLabel
from depgraph.infrastructure.database.schema import depends_on, files, has_file, packages, projects
from depgraph.services.base import BaseService
from depgraph.services.result import ServiceError, ServiceResult
from depgraph.services.telemetry import trace_span, traced

FORMATS = ("dot", "json")


def node_id(label: NodeLabel | str, key: str) -> str:
    return f"{label}:{key}"


def _dot_quote(value: object) -> str:
    """A DOT double-quoted string; backslashes first so quote escapes survive."""
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


class ExportService(BaseService):
    """Serialize the stored graph to Graphviz DOT or D3 JSON."""

    @traced
    def export_graph(self, *, fmt: str = "dot") -> ServiceResult:
        """Export the full Project/Package/File graph.

        Formats:
        - ``dot`` — Graphviz DOT language
        - ``json`` — D3-compatible ``{"nodes": [...], "links": [...]}``

        Returns the content as a string in ``data["content"]``.
        """
        if fmt not in FORMATS:
            return ServiceResult(
                ok=False,
                op="export_graph",
                error=ServiceError(
                    code="INVALID_FORMAT",
                    message=f"Unknown graph format: {fmt}",
                    detail={"format": fmt, "valid": list(FORMATS)},
                ),
            )

        with trace_span("load_graph"):
            g = self._load_full_graph()

        content = self._to_dot(g) if fmt == "dot" else self._to_d3_json(g)
        return ServiceResult(
            ok=True,
            op="export_graph",
            data={
                "format": fmt,
                "content": content,
                "node_count": g.number_of_nodes(),
                "edge_count": g.number_of_edges(),
            },
        )

    def _load_full_graph(self) -> nx.MultiDiGraph:
        g = nx.MultiDiGraph()
        for row in self._store.execute_query(select(projects)):
            g.add_node(node_id(NodeLabel.PROJECT, row["name"]), label=NodeLabel.PROJECT, **row)
        for row in self._store.execute_query(select(packages)):
            g.add_node(node_id(NodeLabel.PACKAGE, row["name"]), label=NodeLabel.PACKAGE, **row)
        for row in self._store.execute_query(select(files)):
            g.add_node(node_id(NodeLabel.FILE, row["path"]), label=NodeLabel.FILE, **row)

        for row in self._store.execute_query(select(depends_on)):
            g.add_edge(
                node_id(row["source_label"], row["source_name"]),
                node_id(NodeLabel.PACKAGE, row["target_name"]),
                type=EdgeType.DEPENDS_ON,
                version_constraint=row["version_constraint"],
                dependency_type=row["type"],
                source=row["source"],
            )
        for row in self._store.execute_query(select(has_file)):
            g.add_edge(
                node_id(NodeLabel.PROJECT, row["project_name"]),
                node_id(NodeLabel.FILE, row["file_path"]),
                type=EdgeType.HAS_FILE,
            )
        return g

    @staticmethod
    def _to_dot(g: nx.MultiDiGraph) -> str:
        """Generate Graphviz DOT notation."""
        lines = ["digraph dependencies {", "  rankdir=LR;", "  node [shape=box];"]

        for nid, attrs in g.nodes(data=True):
            label = _dot_quote(attrs.get("name") or attrs.get("path") or nid)
            kind = _dot_quote(attrs.get("label", ""))
            lines.append(f"  {_dot_quote(nid)} [label={label} kind={kind}];")

        for src, tgt, attrs in g.edges(data=True):
            edge_label = _dot_quote(attrs.get("version_constraint") or attrs["type"])
            lines.append(
                f"  {_dot_quote(src)} -> {_dot_quote(tgt)}"
                f" [label={edge_label} type={_dot_quote(attrs['type'])}];"
            )

        lines.append("}")
        return "\n".join(lines) + "\n"

    @staticmethod
    def _to_d3_json(g: nx.MultiDiGraph) -> str:
        """Generate D3-compatible JSON."""
        d3_nodes: list[dict[str, Any]] = [
            {"id": nid, **{k: (str(v) if k == "label" else v) for k, v in attrs.items()}}
            for nid, attrs in g.nodes(data=True)
        ]
        d3_links: list[dict[str, Any]] = [
            {
                "source": src,
                "target": tgt,
                **{k: (str(v) if k == "type" else v) for k, v in attrs.items()},
            }
            for src, tgt, attrs in g.edges(data=True)
        ]
        return json.dumps({"nodes": d3_nodes, "links": d3_links}, indent=2) + "\n"
