from strata.graph import Graph, Layout


class TestGraph:
    def test_from_records(self):
        g = Graph.from_records(
            [{"id": "a", "srank": 0}, {"id": 2}],
            [{"source": "a", "target": 2, "directed": False, "weight": 3}],
        )
        assert g.find_node("a").get_property("srank") == 0
        assert g.find_node("2") is g.nodes[1]
        assert g.find_node("missing") is None

        (edge,) = g.edges
        assert edge.id == "a->2"
        assert not edge.directed
        assert edge.data == {"weight": 3}
        assert g.outgoing["a"] == ["2"]
        assert g.incoming["2"] == ["a"]

    def test_layout_centers(self):
        g = Graph.from_records([{"id": "a"}, {"id": "b"}], [])
        layout = Layout(g, [1.0, 2.0, 3.0, 4.0])
        assert layout.get_node_center("b") == (3.0, 4.0)
