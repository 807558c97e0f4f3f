"""Tests for GraphBuilderService — idempotent graph construction and queries."""

from __future__ import annotations

from sqlalchemy import select

from depgraph.domain.manifest import DependencyRecord
from depgraph.infrastructure.database.schema import depends_on, files, has_file, packages, projects
from depgraph.infrastructure.store import GraphStore
from depgraph.services.builder import GraphBuilderService, visualization_query
from tests.conftest import ingest, make_record


class TestBuildProjectGraph:
    def test_creates_nodes_and_edges(self, store: GraphStore) -> None:
        record = make_record("app", {"lodash": "^4.17.21"}, dev={"jest": "^29.6.1"})
        result = GraphBuilderService(store).build_project_graph(record)

        assert result.ok
        assert result.data["dependencies_processed"] == 2
        assert result.data["project"] == "app"
        assert store.get_stats() == {"projects": 1, "packages": 2, "dependencies": 2, "files": 1}

        [project] = store.execute_query(select(projects))
        assert project["language"] == "javascript"
        assert project["version"] == "1.0.0"
        assert project["total_dependencies"] == 2

        [file_row] = store.execute_query(select(files))
        assert file_row["name"] == "package.json"
        assert file_row["type"] == "dependency_manifest"
        assert len(store.execute_query(select(has_file))) == 1

    def test_idempotent(self, store: GraphStore) -> None:
        record = make_record("app", {"lodash": "^4.17.21", "express": "^4.18.2"})
        builder = GraphBuilderService(store)
        builder.build_project_graph(record)
        before = store.get_stats()
        builder.build_project_graph(record)
        assert store.get_stats() == before

    def test_reingest_updates_constraint(self, store: GraphStore) -> None:
        builder = GraphBuilderService(store)
        builder.build_project_graph(make_record("app", {"lodash": "^4.0.0"}))
        builder.build_project_graph(make_record("app", {"lodash": "^4.17.21"}))
        [edge] = store.execute_query(select(depends_on.c.version_constraint))
        assert edge["version_constraint"] == "^4.17.21"

    def test_package_attributes_last_write_wins(self, store: GraphStore) -> None:
        ingest(
            store,
            make_record("one", {"lodash": "^4.16.0"}),
            make_record("two", {"lodash": "^4.17.21"}),
        )
        [pkg] = store.execute_query(select(packages).where(packages.c.name == "lodash"))
        assert pkg["version"] == "4.17.21"

    def test_dependency_language_override(self, store: GraphStore) -> None:
        record = make_record(
            "app",
            language="python",
            dependencies=[DependencyRecord(name="left-pad", version="1", language="javascript")],
        )
        GraphBuilderService(store).build_project_graph(record)
        [pkg] = store.execute_query(select(packages.c.language))
        assert pkg["language"] == "javascript"

    def test_empty_manifest(self, store: GraphStore) -> None:
        result = GraphBuilderService(store).build_project_graph(make_record("empty"))
        assert result.data["dependencies_processed"] == 0
        assert store.get_stats()["projects"] == 1


class TestLinkPackageDependencies:
    def test_links_only_projects_that_are_packages(self, store: GraphStore) -> None:
        builder = GraphBuilderService(store)
        builder.build_project_graph(make_record("A", {"B": "^1.0.0"}))
        builder.build_project_graph(make_record("B", {"lodash": "^4.0.0"}))
        result = builder.link_package_dependencies()
        assert result.data == {"links": 1, "created": 1}

        rows = store.execute_query(
            select(depends_on).where(depends_on.c.source_label == "Package")
        )
        assert len(rows) == 1
        assert (rows[0]["source_name"], rows[0]["target_name"]) == ("B", "lodash")
        assert rows[0]["source"] == "derived"

    def test_repeat_link_same_count(self, store: GraphStore) -> None:
        builder = GraphBuilderService(store)
        builder.build_project_graph(make_record("A", {"B": "^1.0.0"}))
        builder.build_project_graph(make_record("B", {"A": "^1.0.0"}))
        first = builder.link_package_dependencies()
        second = builder.link_package_dependencies()
        assert first.data["links"] == second.data["links"] == 2
        assert second.data["created"] == 0

    def test_derived_edge_keeps_original_constraint(self, store: GraphStore) -> None:
        builder = GraphBuilderService(store)
        builder.build_project_graph(make_record("A", {"B": "^1.0.0"}))
        builder.build_project_graph(make_record("B", {"A": "^1.0.0"}))
        builder.link_package_dependencies()

        builder.build_project_graph(make_record("A", {"B": "^2.0.0"}))
        assert builder.link_package_dependencies().data["created"] == 0

        def edge(label: str) -> dict[str, object]:
            [row] = store.execute_query(
                select(depends_on).where(
                    depends_on.c.source_label == label,
                    depends_on.c.source_name == "A",
                    depends_on.c.target_name == "B",
                )
            )
            return row

        assert edge("Project")["version_constraint"] == "^2.0.0"
        assert edge("Package")["version_constraint"] == "^1.0.0"
        assert edge("Package")["source"] == "derived"

    def test_no_projects_no_links(self, store: GraphStore) -> None:
        assert GraphBuilderService(store).link_package_dependencies().data["links"] == 0


class TestQueries:
    def test_project_dependencies_sorted(self, store: GraphStore) -> None:
        ingest(store, make_record("app", {"lodash": "^4.17.21"}, dev={"jest": "^29.6.1"}))
        items = GraphBuilderService(store).get_project_dependencies("app").data["items"]
        assert [(i["name"], i["constraint"], i["type"]) for i in items] == [
            ("jest", "^29.6.1", "development"),
            ("lodash", "^4.17.21", "production"),
        ]

    def test_unknown_project_is_empty(self, store: GraphStore) -> None:
        result = GraphBuilderService(store).get_project_dependencies("ghost")
        assert result.ok
        assert result.data["items"] == []

    def test_dependency_stats(self, store: GraphStore) -> None:
        ingest(store, make_record("app", {"lodash": "^4.17.21"}, dev={"jest": "^29.6.1"}))
        stats = GraphBuilderService(store).get_dependency_stats("app").data["stats"]
        assert stats == {"development": 1, "production": 1}

    def test_shared_dependencies(self, store: GraphStore) -> None:
        ingest(
            store,
            make_record("a", {"lodash": "^4", "axios": "^1"}),
            make_record("b", {"lodash": "^4", "axios": "^1"}),
            make_record("c", {"lodash": "^4"}),
        )
        items = GraphBuilderService(store).find_shared_dependencies().data["items"]
        assert [(i["package"], i["usage_count"]) for i in items] == [("lodash", 3), ("axios", 2)]
        assert items[0]["projects"] == ["a", "b", "c"]

    def test_projects_using_package(self, store: GraphStore) -> None:
        ingest(
            store,
            make_record("b", {"lodash": "^4.17.0"}),
            make_record("a", {"lodash": "^4.16.0"}, language="python"),
        )
        items = GraphBuilderService(store).find_projects_using_package("lodash").data["items"]
        assert items == [
            {
                "project": "a",
                "language": "python",
                "version_constraint": "^4.16.0",
                "dependency_type": "production",
            },
            {
                "project": "b",
                "language": "javascript",
                "version_constraint": "^4.17.0",
                "dependency_type": "production",
            },
        ]

    def test_visualize(self, store: GraphStore) -> None:
        result = GraphBuilderService(store).visualize_project_graph("app")
        assert "Project {name: 'app'}" in result.data["query"]
        assert result.data["query"].endswith("LIMIT 50")


def test_visualization_query_escapes_quotes() -> None:
    assert "{name: 'o\\'brien'}" in visualization_query("o'brien", limit=5)


class TestMaintenance:
    def test_clear_graph(self, store: GraphStore) -> None:
        ingest(store, make_record("app", {"lodash": "^4"}))
        result = GraphBuilderService(store).clear_graph()
        assert result.data == {"projects": 0, "packages": 0, "dependencies": 0, "files": 0}

    def test_database_stats(self, store: GraphStore) -> None:
        ingest(store, make_record("app", {"lodash": "^4"}))
        assert GraphBuilderService(store).get_database_stats().data["packages"] == 1
