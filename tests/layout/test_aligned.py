import pytest

from strata.graph import Edge, Graph, Node
from strata.layout.aligned import DagAligned


def _pipeline():
    return Graph.from_records(
        [
            {"id": "fetch", "srank": 0},
            {"id": "build", "srank": 1},
            {"id": "lint", "srank": 1},
            {"id": "deploy", "srank": 3},
        ],
        [
            {"source": "fetch", "target": "build"},
            {"source": "fetch", "target": "lint"},
            {"source": "build", "target": "deploy"},
            {"source": "fetch", "target": "deploy"},
        ],
    )


class TestDagAligned:
    def test_fit(self):
        g = _pipeline()
        result = DagAligned(rank="srank").fit(g)

        ys = {node.id: result.layout.get_node_center(node.id)[1] for node in g.nodes}
        assert ys == {"fetch": 0, "build": 40, "lint": 40, "deploy": 120}
        assert result.metadata["height"] == 120
        assert result.metadata["ranks"] == {"fetch": 0, "build": 1, "lint": 1, "deploy": 3}
        assert len(result.layout.centers) == 2 * len(g.nodes)

    def test_rank_callable_gets_graph_node(self):
        seen = []

        def rank(node):
            seen.append(node)
            return node.get_property("srank")

        g = _pipeline()
        DagAligned(rank=rank).fit(g)
        assert all(isinstance(node, Node) for node in seen)

    def test_undirected_edges_are_ignored(self):
        g = Graph(
            [Node("a", {"srank": 0}), Node("b", {"srank": 1})],
            [Edge("a", "b"), Edge("b", "a", directed=False)],
        )
        result = DagAligned(rank="srank").fit(g)
        assert len(result.metadata["links"]) == 1

    def test_edge_positions(self):
        g = _pipeline()
        engine = DagAligned(rank="srank")
        engine.fit(g)

        short = engine.get_edge_position(g.edges[0])
        assert short["type"] == "line"
        assert short["control_points"] == []
        assert short["source_position"] == engine.get_node_position("fetch")

        long = engine.get_edge_position(g.edges[3])
        assert long["type"] == "spline"
        assert [point[1] for point in long["control_points"]] == [40]

    def test_locked_positions_override(self):
        g = _pipeline()
        engine = DagAligned(rank="srank")
        engine.lock_node_position("lint", 500.0, -10.0)

        result = engine.fit(g)
        assert result.layout.get_node_center("lint") == (500.0, -10.0)

        engine.unlock_node_position("lint")
        result = engine.fit(g)
        assert result.layout.get_node_center("lint")[1] == 40

    def test_node_size(self):
        g = _pipeline()
        narrow = DagAligned(rank="srank").fit(g)
        wide = DagAligned(rank="srank", node_size=lambda node: (80, 20)).fit(g)
        assert wide.metadata["width"] > narrow.metadata["width"]

    def test_empty_graph(self):
        result = DagAligned(rank="srank").fit(Graph([], []))
        assert result.layout.centers == []
        assert result.metadata["links"] == []

    def test_invalid_gap(self):
        with pytest.raises(ValueError, match="gap"):
            DagAligned(rank="srank", gap=(1,))
