"""Tests for CycleService — enumeration, direct pairs, scoping, and stats."""

from __future__ import annotations

from depgraph.config.models import AnalysisConfig
from depgraph.infrastructure.store import GraphStore
from depgraph.services.cycles import CycleService
from tests.conftest import ingest, make_record


def _three_cycle(store: GraphStore) -> None:
    """A -> B -> C -> A, each also a package via the others' manifests."""
    ingest(
        store,
        make_record("A", {"B": "^1.0.0"}),
        make_record("B", {"C": "^1.0.0"}),
        make_record("C", {"A": "^1.0.0"}),
    )


def _direct_pair(store: GraphStore) -> None:
    ingest(
        store,
        make_record("D", {"E": "^1.0.0", "lodash": "^4.16.0"}),
        make_record("E", {"D": "^1.0.0"}),
    )


class TestFindAllCycles:
    def test_three_cycle_reported_once(self, store: GraphStore) -> None:
        _three_cycle(store)
        result = CycleService(store).find_all_cycles()
        assert result.ok
        assert result.data["count"] == 1
        assert result.data["truncated"] is False
        assert result.data["cycles"] == [{"packages": ["A", "B", "C", "A"], "length": 3}]

    def test_sorted_shortest_first(self, store: GraphStore) -> None:
        _three_cycle(store)
        _direct_pair(store)
        cycles = CycleService(store).find_all_cycles().data["cycles"]
        assert [c["length"] for c in cycles] == [2, 3]
        assert cycles[0]["packages"] == ["D", "E", "D"]

    def test_acyclic_graph(self, store: GraphStore) -> None:
        ingest(store, make_record("A", {"B": "^1"}), make_record("B", {"lodash": "^4"}))
        assert CycleService(store).find_all_cycles().data["cycles"] == []

    def test_empty_graph(self, store: GraphStore) -> None:
        result = CycleService(store).find_all_cycles()
        assert result.data == {"count": 0, "truncated": False, "cycles": []}

    def test_self_dependency_ignored(self, store: GraphStore) -> None:
        ingest(store, make_record("A", {"A": "^1.0.0"}))
        assert CycleService(store).find_all_cycles().data["count"] == 0

    def test_cap_marks_truncation(self, store: GraphStore) -> None:
        _three_cycle(store)
        _direct_pair(store)
        service = CycleService(store, analysis=AnalysisConfig(max_cycles=1))
        result = service.find_all_cycles()
        assert result.data["count"] == 1
        assert result.data["truncated"] is True
        # Statistics are never capped.
        assert service.get_statistics().data["total_cycles"] == 2

    def test_cycles_need_linking(self, store: GraphStore) -> None:
        from depgraph.services.builder import GraphBuilderService

        builder = GraphBuilderService(store)
        builder.build_project_graph(make_record("A", {"B": "^1"}))
        builder.build_project_graph(make_record("B", {"A": "^1"}))
        assert CycleService(store).find_all_cycles().data["count"] == 0
        builder.link_package_dependencies()
        assert CycleService(store).find_all_cycles().data["count"] == 1


class TestFindDirectCycles:
    def test_pair_reported_once(self, store: GraphStore) -> None:
        _direct_pair(store)
        result = CycleService(store).find_direct_cycles()
        assert result.data["items"] == [{"package_a": "D", "package_b": "E"}]

    def test_three_cycle_has_no_direct_pairs(self, store: GraphStore) -> None:
        _three_cycle(store)
        assert CycleService(store).find_direct_cycles().data["items"] == []


class TestFindProjectCycles:
    def test_scoped_to_direct_dependencies(self, store: GraphStore) -> None:
        _three_cycle(store)
        _direct_pair(store)
        result = CycleService(store).find_project_cycles("A")
        assert result.data["project"] == "A"
        assert [c["packages"] for c in result.data["cycles"]] == [["A", "B", "C", "A"]]

    def test_unknown_project(self, store: GraphStore) -> None:
        _three_cycle(store)
        result = CycleService(store).find_project_cycles("ghost")
        assert result.ok
        assert result.data["cycles"] == []


class TestStatistics:
    def test_zeros_when_acyclic(self, store: GraphStore) -> None:
        assert CycleService(store).get_statistics().data == {
            "total_cycles": 0,
            "shortest_cycle": 0,
            "longest_cycle": 0,
            "avg_cycle_length": 0,
        }

    def test_mixed_lengths(self, store: GraphStore) -> None:
        _three_cycle(store)
        _direct_pair(store)
        assert CycleService(store).get_statistics().data == {
            "total_cycles": 2,
            "shortest_cycle": 2,
            "longest_cycle": 3,
            "avg_cycle_length": 2.5,
        }
