"""Coordinate assignment strategies: x positions for layered vertices."""

from abc import ABC, abstractmethod

import numpy as np
from scipy import sparse
from scipy.optimize import linprog, minimize

from strata.layout import Vertex, separation

# Segment weights by endpoint kind: straighter long links read better
REAL_REAL_WEIGHT = 1.0
REAL_DUMMY_WEIGHT = 2.0
DUMMY_DUMMY_WEIGHT = 8.0


def _segment_weight(a: Vertex, b: Vertex) -> float:
    dummies = a.is_dummy + b.is_dummy
    return (REAL_REAL_WEIGHT, REAL_DUMMY_WEIGHT, DUMMY_DUMMY_WEIGHT)[dummies]


def _index(layers: list[list[Vertex]]) -> tuple[list[Vertex], dict[int, int]]:
    vertices = [v for layer in layers for v in layer]
    return vertices, {id(v): i for i, v in enumerate(vertices)}


def _segments(layers: list[list[Vertex]]) -> list[tuple[Vertex, Vertex]]:
    return [(u, child) for layer in layers for u in layer for child in u.children]


def _pack(layer: list[Vertex], gap: float, start: float = 0.0) -> float:
    """Place a layer's vertices tightly from ``start``; return its span."""
    cursor = start
    for i, vertex in enumerate(layer):
        if i:
            cursor += separation(layer[i - 1], vertex, gap)
        vertex.x = cursor
    if not layer:
        return 0.0
    return (layer[-1].x + layer[-1].width / 2) - (layer[0].x - layer[0].width / 2)


class Coord(ABC):
    """Base class for coordinate assignment strategies."""

    @abstractmethod
    def __call__(self, layers: list[list[Vertex]], gap: float) -> None:
        """Set ``x`` on every vertex, keeping neighbours ``separation`` apart."""
        ...


class CenterCoord(Coord):
    """Pack every layer tightly and center it within the widest layer."""

    def __call__(self, layers: list[list[Vertex]], gap: float) -> None:
        spans = [_pack(layer, gap) for layer in layers]
        widest = max(spans, default=0.0)
        for layer, span in zip(layers, spans):
            if not layer:
                continue
            offset = (widest - span) / 2 + layer[0].width / 2
            for vertex in layer:
                vertex.x += offset


class TopologicalCoord(Coord):
    """
    Keep real nodes on one shared vertical axis with link dummies to the right.

    Meant for topological layerings, where each layer holds one real node.
    Each layer list is reordered in place with its dummies moved after its
    real vertices. Order within each group is kept, but the interleaving the
    decross stage chose is lost.
    """

    def __call__(self, layers: list[list[Vertex]], gap: float) -> None:
        axis = max(
            (v.width / 2 for layer in layers for v in layer if not v.is_dummy),
            default=0.0
        )
        for layer in layers:
            layer[:] = [v for v in layer if not v.is_dummy] + [v for v in layer if v.is_dummy]
            if not layer:
                continue
            start = axis if not layer[0].is_dummy else 2 * axis + gap
            _pack(layer, gap, start=start)


class GreedyCoord(Coord):
    """
    Pull each vertex toward the mean x of its neighbours on the adjacent layer.

    Vertices are then pushed apart left to right where they overlap, and the
    layer is shifted back so the total displacement from the desired spots
    is zero. One pass is a sweep down followed by a sweep up.
    """

    def __init__(self, passes: int = 1):
        self.passes = passes

    def __call__(self, layers: list[list[Vertex]], gap: float) -> None:
        for layer in layers:
            _pack(layer, gap)
        for _ in range(self.passes):
            for layer in layers[1:]:
                self._place(layer, "parents", gap)
            for layer in reversed(layers[:-1]):
                self._place(layer, "children", gap)

    @staticmethod
    def _place(layer: list[Vertex], direction: str, gap: float) -> None:
        if not layer:
            return
        desired = []
        for vertex in layer:
            neighbors = getattr(vertex, direction)
            if neighbors:
                desired.append(sum(n.x for n in neighbors) / len(neighbors))
            else:
                desired.append(vertex.x)

        placed: list[float] = []
        for i, vertex in enumerate(layer):
            if i == 0:
                placed.append(desired[0])
            else:
                placed.append(max(desired[i], placed[-1] + separation(layer[i - 1], vertex, gap)))

        shift = sum(p - d for p, d in zip(placed, desired)) / len(placed)
        for vertex, x in zip(layer, placed):
            vertex.x = x - shift


class SimplexCoord(Coord):
    """
    Minimize the weighted horizontal length of every segment.

    Linear program over vertex positions x and segment lengths d:

        minimize    sum w_e * d_e + eps * sum x
        subject to  d_e >= |x_u - x_v|              for each segment u -> v
                    x_right - x_left >= separation  for layer neighbours
    """

    def __call__(self, layers: list[list[Vertex]], gap: float) -> None:
        vertices, index = _index(layers)
        n = len(vertices)
        if n == 0:
            return
        segments = _segments(layers)
        m = len(segments)

        cost = np.zeros(n + m)
        cost[:n] = 1.0 / (n + 1)
        rows: list[int] = []
        cols: list[int] = []
        vals: list[float] = []
        bounds: list[float] = []

        def add_row(terms: list[tuple[int, float]], ub: float) -> None:
            row = len(bounds)
            for col, val in terms:
                rows.append(row)
                cols.append(col)
                vals.append(val)
            bounds.append(ub)

        for layer in layers:
            for left, right in zip(layer, layer[1:]):
                add_row(
                    [(index[id(left)], 1.0), (index[id(right)], -1.0)],
                    -separation(left, right, gap)
                )

        for k, (u, v) in enumerate(segments):
            cost[n + k] = _segment_weight(u, v)
            iu, iv = index[id(u)], index[id(v)]
            add_row([(iu, 1.0), (iv, -1.0), (n + k, -1.0)], 0.0)
            add_row([(iv, 1.0), (iu, -1.0), (n + k, -1.0)], 0.0)

        a_ub = None
        if bounds:
            a_ub = sparse.csr_matrix((vals, (rows, cols)), shape=(len(bounds), n + m))
        result = linprog(
            cost,
            A_ub=a_ub,
            b_ub=np.array(bounds) if bounds else None,
            bounds=(0, None),
            method="highs",
        )
        if result.status != 0:
            raise ValueError(f"Simplex coordinate assignment failed: {result.message}")

        for vertex, x in zip(vertices, result.x[:n]):
            vertex.x = float(x)


class QuadCoord(Coord):
    """
    Minimize squared segment lengths plus the bend at every link dummy.

    Quadratic program solved with SLSQP, started from a centered packing. A
    final pass re-applies the layer separation to absorb solver tolerance.
    """

    def __init__(self, curvature: float = 1.0, max_iter: int = 500):
        self.curvature = curvature
        self.max_iter = max_iter

    def __call__(self, layers: list[list[Vertex]], gap: float) -> None:
        vertices, index = _index(layers)
        n = len(vertices)
        if n == 0:
            return

        quad = np.eye(n) * 1e-6

        def add_term(terms: list[tuple[int, float]], weight: float) -> None:
            vec = np.zeros(n)
            for col, val in terms:
                vec[col] += val
            quad[:] += weight * np.outer(vec, vec)

        for u, v in _segments(layers):
            add_term([(index[id(u)], 1.0), (index[id(v)], -1.0)], _segment_weight(u, v))
        for vertex in vertices:
            if vertex.is_dummy and vertex.parents and vertex.children:
                add_term([
                    (index[id(vertex.parents[0])], 1.0),
                    (index[id(vertex)], -2.0),
                    (index[id(vertex.children[0])], 1.0),
                ], self.curvature)

        constraint_rows = []
        constraint_bounds = []
        for layer in layers:
            for left, right in zip(layer, layer[1:]):
                row = np.zeros(n)
                row[index[id(right)]] = 1.0
                row[index[id(left)]] = -1.0
                constraint_rows.append(row)
                constraint_bounds.append(separation(left, right, gap))

        CenterCoord()(layers, gap)
        x0 = np.array([v.x for v in vertices])

        constraints = []
        if constraint_rows:
            a = np.array(constraint_rows)
            b = np.array(constraint_bounds)
            constraints.append({
                "type": "ineq",
                "fun": lambda x: a @ x - b,
                "jac": lambda x: a,
            })

        result = minimize(
            lambda x: float(x @ quad @ x),
            x0=x0,
            jac=lambda x: 2 * quad @ x,
            method="SLSQP",
            constraints=constraints,
            options={"maxiter": self.max_iter},
        )

        for vertex, x in zip(vertices, result.x):
            vertex.x = float(x)
        for layer in layers:
            for left, right in zip(layer, layer[1:]):
                right.x = max(right.x, left.x + separation(left, right, gap))
