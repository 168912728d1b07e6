import pytest

from strata.layout import Vertex
from strata.layout.decross import (
    DfsDecross,
    OptDecross,
    TwoLayerDecross,
    count_crossings,
)


def _connect(upper, lower):
    upper.children.append(lower)
    lower.parents.append(upper)


def _crossed():
    """Two layers where the initial order crosses both links."""
    a, b = Vertex(0), Vertex(0)
    c, d = Vertex(1), Vertex(1)
    _connect(a, d)
    _connect(b, c)
    return [[a, b], [c, d]]


def _k23():
    """Three layers with a removable crossing on each gap."""
    top = [Vertex(0) for _ in range(3)]
    mid = [Vertex(1) for _ in range(3)]
    bottom = [Vertex(2) for _ in range(3)]
    for u, v in [(0, 2), (1, 1), (2, 0)]:
        _connect(top[u], mid[v])
    for u, v in [(0, 1), (1, 2), (2, 0)]:
        _connect(mid[u], bottom[v])
    return [top, mid, bottom]


ALL_DECROSSES = [TwoLayerDecross(), DfsDecross(), OptDecross()]


class TestCountCrossings:
    def test_crossed(self):
        assert count_crossings(_crossed()) == 1

    def test_shared_endpoints_do_not_cross(self):
        a = Vertex(0)
        c, d = Vertex(1), Vertex(1)
        _connect(a, c)
        _connect(a, d)
        assert count_crossings([[a], [c, d]]) == 0

    def test_single_layer(self):
        assert count_crossings([[Vertex(0), Vertex(0)]]) == 0


class TestDecross:
    @pytest.mark.parametrize("decross", ALL_DECROSSES, ids=lambda d: type(d).__name__)
    def test_removes_simple_crossing(self, decross):
        layers = _crossed()
        decross(layers)
        assert count_crossings(layers) == 0

    @pytest.mark.parametrize("decross", ALL_DECROSSES, ids=lambda d: type(d).__name__)
    def test_keeps_layer_membership(self, decross):
        layers = _k23()
        before = [{id(v) for v in layer} for layer in layers]
        decross(layers)
        assert [{id(v) for v in layer} for layer in layers] == before

    @pytest.mark.parametrize("decross", ALL_DECROSSES, ids=lambda d: type(d).__name__)
    def test_never_worse(self, decross):
        layers = _k23()
        before = count_crossings(layers)
        decross(layers)
        assert count_crossings(layers) <= before

    def test_opt_is_exact(self):
        layers = _k23()
        OptDecross()(layers)
        assert count_crossings(layers) == 0

    def test_opt_variable_limit(self):
        with pytest.raises(ValueError, match="variables"):
            OptDecross(max_variables=1)(_k23())

    def test_empty(self):
        for decross in ALL_DECROSSES:
            layers = []
            decross(layers)
            assert layers == []
