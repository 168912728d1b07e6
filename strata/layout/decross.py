"""Crossing reduction strategies: reorder vertices within each layer."""

from abc import ABC, abstractmethod
from itertools import combinations

import numpy as np
from scipy import sparse
from scipy.optimize import Bounds, LinearConstraint, milp

from strata.layout import Vertex


def count_crossings(layers: list[list[Vertex]]) -> int:
    """Count pairwise crossings of the segments between adjacent layers."""
    total = 0
    for upper, lower in zip(layers, layers[1:]):
        lower_pos = {id(v): i for i, v in enumerate(lower)}
        segments = [
            (i, lower_pos[id(child)])
            for i, vertex in enumerate(upper)
            for child in vertex.children
        ]
        for (a, b), (c, d) in combinations(segments, 2):
            if (a - c) * (b - d) < 0:
                total += 1
    return total


class Decross(ABC):
    """Base class for crossing reduction strategies."""

    @abstractmethod
    def __call__(self, layers: list[list[Vertex]]) -> None:
        """Reorder every layer list in place."""
        ...


class TwoLayerDecross(Decross):
    """Barycenter heuristic, sweeping down then up for a few passes."""

    def __init__(self, passes: int = 4):
        self.passes = passes

    def __call__(self, layers: list[list[Vertex]]) -> None:
        if len(layers) < 2:
            return

        positions: dict[int, float] = {}
        for layer in layers:
            for i, vertex in enumerate(layer):
                positions[id(vertex)] = float(i)

        best = [list(layer) for layer in layers]
        best_crossings = count_crossings(layers)

        for _ in range(self.passes):
            if best_crossings == 0:
                break

            # Sweep down (top to bottom)
            for layer in layers[1:]:
                self._barycenter_sort(layer, positions, "parents")

            # Sweep up (bottom to top)
            for layer in reversed(layers[:-1]):
                self._barycenter_sort(layer, positions, "children")

            crossings = count_crossings(layers)
            if crossings < best_crossings:
                best = [list(layer) for layer in layers]
                best_crossings = crossings

        for layer, order in zip(layers, best):
            layer[:] = order

    @staticmethod
    def _barycenter_sort(
        layer: list[Vertex],
        positions: dict[int, float],
        direction: str
    ) -> None:
        """
        Sort vertices in a layer by barycenter (average position of neighbors).

        Modifies layer in place.
        """
        def barycenter(vertex: Vertex) -> float:
            neighbors = getattr(vertex, direction)
            if not neighbors:
                # Keep original position if no neighbors
                return positions[id(vertex)]
            return sum(positions[id(n)] for n in neighbors) / len(neighbors)

        layer.sort(key=barycenter)
        for i, vertex in enumerate(layer):
            positions[id(vertex)] = float(i)


class DfsDecross(Decross):
    """Order each layer by depth-first visit order from the roots."""

    def __call__(self, layers: list[list[Vertex]]) -> None:
        visited: dict[int, int] = {}

        def dfs(vertex: Vertex) -> None:
            visited[id(vertex)] = len(visited)
            for child in vertex.children:
                if id(child) not in visited:
                    dfs(child)

        for layer in layers:
            for vertex in layer:
                if not vertex.parents and id(vertex) not in visited:
                    dfs(vertex)

        for layer in layers:
            layer.sort(key=lambda v: visited.get(id(v), len(visited)))


class OptDecross(Decross):
    """
    Exact crossing minimization as a 0/1 integer program.

    For every pair of vertices (a, b) sharing a layer there is a variable
    o_ab that is 1 when a is left of b, bound by transitivity constraints.
    Every pair of segments between two layers gets an indicator that must be
    1 when the two endpoint orders disagree; the sum of indicators is
    minimized. The program grows cubically with layer width, so it refuses
    to run past ``max_variables``.
    """

    def __init__(self, max_variables: int = 2000):
        self.max_variables = max_variables

    def __call__(self, layers: list[list[Vertex]]) -> None:
        order_vars: dict[tuple[int, int], int] = {}
        for layer in layers:
            for a, b in combinations(layer, 2):
                order_vars[(id(a), id(b))] = len(order_vars)
        if not order_vars:
            return

        def order(a: Vertex, b: Vertex) -> tuple[int, int, int]:
            """(constant, sign, variable) such that a-left-of-b = constant + sign * o."""
            if (id(a), id(b)) in order_vars:
                return 0, 1, order_vars[(id(a), id(b))]
            return 1, -1, order_vars[(id(b), id(a))]

        segment_pairs = []
        for upper in layers[:-1]:
            segments = [(u, child) for u in upper for child in u.children]
            for (u1, w1), (u2, w2) in combinations(segments, 2):
                if u1 is not u2 and w1 is not w2:
                    segment_pairs.append((order(u1, u2), order(w1, w2)))

        n_vars = len(order_vars) + len(segment_pairs)
        if n_vars > self.max_variables:
            raise ValueError(
                f"Exact decrossing needs {n_vars} variables "
                f"(limit {self.max_variables}); use a heuristic strategy instead"
            )

        rows: list[int] = []
        cols: list[int] = []
        vals: list[float] = []
        lower: list[float] = []
        upper: list[float] = []

        def add_row(terms: list[tuple[int, float]], lb: float, ub: float) -> None:
            row = len(lower)
            for col, val in terms:
                rows.append(row)
                cols.append(col)
                vals.append(val)
            lower.append(lb)
            upper.append(ub)

        # transitivity: 0 <= o_ab + o_bc - o_ac <= 1
        for layer in layers:
            for a, b, c in combinations(layer, 3):
                add_row([
                    (order_vars[(id(a), id(b))], 1.0),
                    (order_vars[(id(b), id(c))], 1.0),
                    (order_vars[(id(a), id(c))], -1.0),
                ], 0.0, 1.0)

        # crossing indicator k >= |order(u1, u2) - order(w1, w2)|
        for k, ((s1, t1, v1), (s2, t2, v2)) in enumerate(segment_pairs):
            col = len(order_vars) + k
            add_row([(col, 1.0), (v1, -t1), (v2, t2)], s1 - s2, np.inf)
            add_row([(col, 1.0), (v1, t1), (v2, -t2)], s2 - s1, np.inf)

        cost = np.zeros(n_vars)
        cost[len(order_vars):] = 1.0
        constraints = []
        if lower:
            matrix = sparse.csr_matrix((vals, (rows, cols)), shape=(len(lower), n_vars))
            constraints.append(LinearConstraint(matrix, lower, upper))

        result = milp(
            cost,
            constraints=constraints,
            integrality=np.ones(n_vars),
            bounds=Bounds(0, 1),
        )
        if result.x is None:
            raise ValueError(f"Exact decrossing failed: {result.message}")
        solution = np.rint(result.x)

        for layer in layers:
            left_counts = {}
            for vertex in layer:
                count = 0
                for other in layer:
                    if other is not vertex:
                        constant, sign, var = order(other, vertex)
                        count += int(constant + sign * solution[var])
                left_counts[id(vertex)] = count
            layer.sort(key=lambda v: left_counts[id(v)])
