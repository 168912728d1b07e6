import pytest

from strata.dag import CycleError, build_dag
from strata.layout.layering import (
    LayeringError,
    LongestPathLayering,
    SimplexLayering,
    TopologicalLayering,
)


def _dag(node_ids, pairs, **data):
    nodes = [{"id": k, **data.get(k, {})} for k in node_ids]
    return build_dag(nodes, [{"source": s, "target": t} for s, t in pairs])


def _layers(dag):
    return {node.id: node.layer for node in dag}


def _rank(node):
    return None if node.data is None else node.data.get("rank")


ALL_LAYERINGS = [SimplexLayering(), LongestPathLayering(), TopologicalLayering()]


class TestLayerings:
    @pytest.mark.parametrize("layering", ALL_LAYERINGS, ids=lambda layering: type(layering).__name__)
    def test_links_point_down(self, layering):
        dag = _dag("abcde", [("a", "b"), ("b", "c"), ("a", "c"), ("d", "c"), ("c", "e")])
        n_layers = layering(dag)
        for link in dag.links():
            assert link.target.layer > link.source.layer
        assert n_layers == max(node.layer for node in dag) + 1
        assert min(node.layer for node in dag) == 0

    @pytest.mark.parametrize("layering", ALL_LAYERINGS, ids=lambda layering: type(layering).__name__)
    def test_cycle(self, layering):
        dag = _dag("ab", [("a", "b"), ("b", "a")])
        with pytest.raises(CycleError):
            layering(dag)

    @pytest.mark.parametrize("layering", ALL_LAYERINGS, ids=lambda layering: type(layering).__name__)
    def test_empty(self, layering):
        assert layering(_dag("", [])) == 0

    def test_longest_path_puts_sources_on_top(self):
        dag = _dag("abce", [("a", "b"), ("b", "c"), ("e", "c")])
        LongestPathLayering()(dag)
        assert _layers(dag) == {"a": 0, "b": 1, "c": 2, "e": 0}

    def test_topological_one_node_per_layer(self):
        dag = _dag("abc", [("a", "c")])
        assert TopologicalLayering()(dag) == 3
        assert _layers(dag) == {"a": 0, "b": 1, "c": 2}


class TestSimplexLayering:
    def test_short_links(self):
        """A source feeding only the bottom node sits right above it."""
        dag = _dag("abce", [("a", "b"), ("b", "c"), ("e", "c")])
        assert SimplexLayering()(dag) == 3
        assert _layers(dag) == {"a": 0, "b": 1, "c": 2, "e": 1}

    def test_rank_groups_share_a_layer(self):
        dag = _dag(
            "abcx",
            [("a", "b"), ("a", "c")],
            a={"rank": 0}, b={"rank": 1}, c={"rank": 1}, x={"rank": 1},
        )
        SimplexLayering(rank=_rank)(dag)
        assert _layers(dag) == {"a": 0, "b": 1, "c": 1, "x": 1}

    def test_rank_order_is_strict(self):
        """Distinct ranks land on distinct layers even without links."""
        dag = _dag("pq", [], p={"rank": 5}, q={"rank": 2})
        assert SimplexLayering(rank=_rank)(dag) == 2
        assert _layers(dag) == {"p": 1, "q": 0}

    def test_unranked_nodes_are_free(self):
        dag = _dag("abm", [("a", "m"), ("m", "b")], a={"rank": 0}, b={"rank": 1})
        SimplexLayering(rank=_rank)(dag)
        assert _layers(dag) == {"a": 0, "m": 1, "b": 2}

    def test_contradicting_ranks(self):
        dag = _dag("ab", [("a", "b")], a={"rank": 1}, b={"rank": 0})
        with pytest.raises(LayeringError):
            SimplexLayering(rank=_rank)(dag)

    def test_with_rank_copies(self):
        base = SimplexLayering()
        ranked = base.with_rank(_rank)
        assert ranked is not base
        assert base.rank is None
        assert ranked.rank is _rank
