import pytest

from strata.dag import DagNode
from strata.layout import Vertex, separation
from strata.layout.coord import CenterCoord, GreedyCoord, SimplexCoord, TopologicalCoord
from strata.layout.engines import COORDS


def _connect(upper, lower):
    upper.children.append(lower)
    lower.parents.append(upper)


def _sized(layer, width):
    v = Vertex(layer)
    # no node attached, so segment weights treat it as a dummy
    v.width = width
    return v


def _fan(width=10.0):
    """One vertex on top feeding two below it."""
    a = _sized(0, width)
    b, c = _sized(1, width), _sized(1, width)
    _connect(a, b)
    _connect(a, c)
    return [[a], [b, c]]


def _long_link_graph():
    """A three layer graph where one link runs through a dummy."""
    top = [_sized(0, 10), _sized(0, 10)]
    dummy = Vertex(1)
    mid = [_sized(1, 10), dummy]
    bottom = [_sized(2, 10)]
    _connect(top[0], mid[0])
    _connect(top[1], dummy)
    _connect(mid[0], bottom[0])
    _connect(dummy, bottom[0])
    return [top, mid, bottom]


class TestCoords:
    @pytest.mark.parametrize("name", sorted(COORDS))
    @pytest.mark.parametrize("make_layers", [_fan, _long_link_graph])
    def test_keeps_separation_and_order(self, name, make_layers):
        layers = make_layers()
        COORDS[name]()(layers, 5.0)
        for layer in layers:
            for left, right in zip(layer, layer[1:]):
                assert right.x - left.x >= separation(left, right, 5.0) - 1e-6

    def test_center_coord(self):
        layers = _fan()
        CenterCoord()(layers, 5.0)
        (a,), (b, c) = layers
        assert (a.x, b.x, c.x) == (12.5, 5.0, 20.0)

    def test_greedy_coord(self):
        """The lone child moves under the mean of its two parents."""
        a, b = _sized(0, 0), _sized(0, 0)
        c = _sized(1, 0)
        _connect(a, c)
        _connect(b, c)
        layers = [[a, b], [c]]

        GreedyCoord()(layers, 10.0)

        assert (a.x, b.x, c.x) == (0.0, 10.0, 5.0)

    def test_simplex_centers_parent_over_children(self):
        layers = _fan()
        SimplexCoord()(layers, 5.0)
        (a,), (b, c) = layers
        assert c.x - b.x == pytest.approx(15.0)
        assert b.x <= a.x <= c.x

    def test_simplex_straightens_dummy_chain(self):
        top, mid, bottom = [Vertex(0)], [Vertex(1), _sized(1, 10)], [Vertex(2)]
        _connect(top[0], mid[0])
        _connect(mid[0], bottom[0])
        layers = [top, mid, bottom]

        SimplexCoord()(layers, 5.0)

        assert top[0].x == pytest.approx(mid[0].x)
        assert bottom[0].x == pytest.approx(mid[0].x)

    def test_topological_moves_dummies_after_real_vertices(self):
        first, second = Vertex(1), Vertex(1)
        real = Vertex(1, node=DagNode("r"))
        real.width = 10
        layer = [first, real, second]

        TopologicalCoord()([layer], 5.0)

        assert layer == [real, first, second]
        assert real.x == 5.0
        assert first.x == 15.0
        assert second.x == 20.0

    @pytest.mark.parametrize("name", sorted(COORDS))
    def test_empty(self, name):
        COORDS[name]()([], 5.0)
