"""SQLAlchemy Core table definitions for the dependency graph.

Each node label is a table keyed by its identity attribute and each
relationship type is an edge table with a uniqueness constraint on its
endpoints, so ``INSERT ... ON CONFLICT`` gives the MERGE semantics the
builder relies on. Column names mirror the graph attribute names.
"""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

projects = Table(
    "projects",
    metadata,
    Column("name", Text, primary_key=True),
    Column("path", Text),
    Column("language", Text),
    Column("version", Text),
    Column("description", Text),
    Column("total_dependencies", Integer, default=0, server_default="0"),
    Column("updated_at", Text),
)

packages = Table(
    "packages",
    metadata,
    Column("name", Text, primary_key=True),
    Column("version", Text),
    Column("operator", Text),
    Column("language", Text),
    Column("updated_at", Text),
)

files = Table(
    "files",
    metadata,
    Column("path", Text, primary_key=True),
    Column("name", Text),
    Column("type", Text),
    Column("language", Text),
    Column("updated_at", Text),
)

# DEPENDS_ON: Project -> Package (direct) or Package -> Package (derived).
# The source is not a foreign key because it may live in either node table.
depends_on = Table(
    "depends_on",
    metadata,
    Column("source_label", Text, nullable=False),
    Column("source_name", Text, nullable=False),
    Column("target_name", Text, ForeignKey("packages.name"), nullable=False),
    Column("version_constraint", Text),
    Column("type", Text),
    Column("direct", Integer, default=1, server_default="1"),
    Column("line_number", Integer, default=0, server_default="0"),
    Column("source", Text),  # "derived" for inferred edges
    Column("created_at", Text),
    Column("updated_at", Text),
    UniqueConstraint("source_label", "source_name", "target_name", name="uq_depends_on"),
    CheckConstraint("source_label IN ('Project', 'Package')", name="ck_depends_on_label"),
)

has_file = Table(
    "has_file",
    metadata,
    Column("project_name", Text, ForeignKey("projects.name"), nullable=False),
    Column("file_path", Text, ForeignKey("files.path"), nullable=False),
    UniqueConstraint("project_name", "file_path", name="uq_has_file"),
)

# ---------------------------------------------------------------------------
# Indexes for frequently filtered columns
# ---------------------------------------------------------------------------

Index("ix_depends_on_source", depends_on.c.source_label, depends_on.c.source_name)
Index("ix_depends_on_target", depends_on.c.target_name)
Index("ix_has_file_project", has_file.c.project_name)

# Delete order for a full clear: edges before the nodes they reference.
CLEAR_ORDER = (has_file, depends_on, files, packages, projects)
