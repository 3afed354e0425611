"""Tests for single-query and one-hop-at-a-time subgraph expansion."""
from collections import Counter

import pytest

from models.graph import DataContractViolation, Link
from services_expansion import MissingSeedNode, expand_apoc, expand_dfs, graph_from_paths
from tests.mock_helpers import FakeNeo4jNode, FakeNeo4jRelationship, FakePath


def _chain(store, labels):
    for label in labels:
        store.add_node(f"n-{label}", label=label)
    for source, target in zip(labels, labels[1:]):
        store.add_relationship(f"n-{source}", f"n-{target}", label="related")
    return store


class TestGraphFromPaths:
    def test_collects_nodes_and_links_of_all_paths(self):
        a = FakeNeo4jNode("1", label="mensa")
        b = FakeNeo4jNode("2", label="tabula")
        c = FakeNeo4jNode("3", label="sella")
        ab = FakeNeo4jRelationship("r1", a, b, label="related")
        bc = FakeNeo4jRelationship("r2", b, c, label="related")

        graph = graph_from_paths([FakePath([a, b], [ab]), FakePath([a, b, c], [ab, bc])])

        assert {node.label for node in graph.nodes} == {"mensa", "tabula", "sella"}
        assert graph.links == {
            Link(label="related", source_node_id="1", target_node_id="2"),
            Link(label="related", source_node_id="2", target_node_id="3"),
        }

    def test_no_paths_is_empty_graph(self):
        assert graph_from_paths([]).is_empty()

    def test_record_without_label_aborts(self):
        a = FakeNeo4jNode("1", label="mensa")
        b = FakeNeo4jNode("2", name="tabula")

        with pytest.raises(DataContractViolation):
            graph_from_paths([FakePath([a, b], [FakeNeo4jRelationship("r1", a, b, label="related")])])


class TestExpandApoc:
    def test_single_round_trip_with_hop_bound(self, graph_store):
        _chain(graph_store, ["A", "B", "C", "D"])

        graph = expand_apoc(graph_store, "A", 2)

        assert graph_store.expansion_calls == [("A", "LINK", 1, 2)]
        assert {node.label for node in graph.nodes} == {"A", "B", "C"}
        assert len(graph.links) == 2

    def test_unbounded(self, graph_store):
        _chain(graph_store, ["A", "B", "C", "D"])

        graph = expand_apoc(graph_store, "A")

        assert graph_store.expansion_calls == [("A", "LINK", 1, -1)]
        assert {node.label for node in graph.nodes} == {"A", "B", "C", "D"}

    def test_relationship_filter(self, graph_store):
        _chain(graph_store, ["A", "B"])
        graph_store.add_node("n-X", label="X")
        graph_store.add_relationship("n-A", "n-X", type="DEFINITION", label="definition")

        assert {n.label for n in expand_apoc(graph_store, "A", relationship_filter="LINK").nodes} == {"A", "B"}
        assert {n.label for n in expand_apoc(graph_store, "A", relationship_filter="LINK|DEFINITION").nodes} == {
            "A", "B", "X"
        }

    def test_unknown_seed_is_empty_graph(self, graph_store):
        assert expand_apoc(graph_store, "nowhere", 3).is_empty()

    def test_connection_error_propagates(self, graph_store):
        graph_store.error = ConnectionError("down")

        with pytest.raises(ConnectionError):
            expand_apoc(graph_store, "A", 1)


class TestExpandDfs:
    def test_three_cycle(self, triangle_store):
        graph = expand_dfs(triangle_store, "A")

        assert {node.label for node in graph.nodes} == {"A", "B", "C"}
        assert graph.links == {
            Link(label="related", source_node_id="a", target_node_id="b"),
            Link(label="related", source_node_id="b", target_node_id="c"),
            Link(label="related", source_node_id="c", target_node_id="a"),
        }

    def test_each_label_expanded_once(self, triangle_store):
        expand_dfs(triangle_store, "A")

        seeds = Counter(call[0] for call in triangle_store.expansion_calls)
        assert seeds == {"A": 1, "B": 1, "C": 1}
        assert all(call[2:] == (1, 1) for call in triangle_store.expansion_calls)

    def test_two_cycle_keeps_both_directions(self, mensa_store):
        graph = expand_dfs(mensa_store, "mensa")

        assert {node.label for node in graph.nodes} == {"mensa", "tabula"}
        assert graph.links == {
            Link(label="related", source_node_id="n-mensa", target_node_id="n-tabula"),
            Link(label="related", source_node_id="n-tabula", target_node_id="n-mensa"),
        }
        assert len(mensa_store.expansion_calls) == 2

    def test_reaches_beyond_one_hop(self, graph_store):
        _chain(graph_store, ["A", "B", "C", "D", "E"])

        graph = expand_dfs(graph_store, "C")

        assert {node.label for node in graph.nodes} == {"A", "B", "C", "D", "E"}
        assert len(graph.links) == 4
        assert len(graph_store.expansion_calls) == 5

    def test_matches_unbounded_single_query(self, graph_store):
        _chain(graph_store, ["A", "B", "C", "D"])
        graph_store.add_relationship("n-D", "n-B", label="related")
        graph_store.add_node("n-E", label="E")
        graph_store.add_relationship("n-E", "n-C", label="definition")

        assert expand_dfs(graph_store, "A") == expand_apoc(graph_store, "A")

    def test_does_not_leave_component(self, graph_store):
        _chain(graph_store, ["A", "B"])
        _chain(graph_store, ["Y", "Z"])

        graph = expand_dfs(graph_store, "A")

        assert {node.label for node in graph.nodes} == {"A", "B"}

    def test_unknown_seed_is_empty_graph(self, graph_store):
        assert expand_dfs(graph_store, "nowhere").is_empty()
        assert len(graph_store.expansion_calls) == 1

    def test_independent_calls_do_not_share_visited(self, triangle_store):
        first = expand_dfs(triangle_store, "A")
        second = expand_dfs(triangle_store, "A")

        assert first == second
        assert len(triangle_store.expansion_calls) == 6

    def test_missing_seed_node(self, graph_store):
        graph_store.add_node("x", label="tabula")

        def expansion_without_seed(seed_label, relationship_filter, min_hops, max_hops):
            node = FakeNeo4jNode("x", label="tabula")
            other = FakeNeo4jNode("y", label="sella")
            return [FakePath([node, other], [FakeNeo4jRelationship("r", node, other, label="related")])]

        graph_store.run_expansion = expansion_without_seed

        with pytest.raises(MissingSeedNode) as excinfo:
            expand_dfs(graph_store, "mensa")

        assert excinfo.value.label == "mensa"
        assert "'mensa' was not found in graph" in str(excinfo.value)
        assert not excinfo.value.graph.is_empty()
