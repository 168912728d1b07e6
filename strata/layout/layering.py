"""Layer assignment strategies."""

import copy
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import numpy as np
from scipy.optimize import linprog

from strata.dag import Dag, DagNode
from strata.rank import finite_rank


class LayeringError(ValueError):
    """Raised when no layering satisfies the edge and rank constraints."""


class Layering(ABC):
    """Base class for layering strategies."""

    @abstractmethod
    def __call__(self, dag: Dag) -> int:
        """Set ``layer`` on every node and return the number of layers."""
        ...


class LongestPathLayering(Layering):
    """Sources on top, every other node one layer below its deepest parent."""

    def __call__(self, dag: Dag) -> int:
        if not len(dag):
            return 0
        for node in dag.topological_order():
            node.layer = max((p.layer + 1 for p in node.parents), default=0)
        return max(node.layer for node in dag) + 1


class TopologicalLayering(Layering):
    """One node per layer, in topological order."""

    def __call__(self, dag: Dag) -> int:
        order = dag.topological_order()
        for idx, node in enumerate(order):
            node.layer = idx
        return len(order)


class SimplexLayering(Layering):
    """
    Layering that minimizes the total vertical length of all links.

    Solved as the linear program

        minimize    sum over links (layer[t] - layer[s])
        subject to  layer[t] - layer[s] >= 1   for every link s -> t
                    layer[v] >= 0

    Every constraint is a difference constraint, so the matrix is totally
    unimodular and the simplex vertex the solver returns is integral. A small
    per-node cost pulls unconstrained nodes to the top without ever trading
    against link length.

    With a rank accessor, nodes sharing a finite rank are tied to one layer
    and each rank lies strictly below the previous one.
    """

    def __init__(self, rank: Callable[[DagNode], Any] | None = None):
        self.rank = rank

    def with_rank(self, rank: Callable[[DagNode], Any] | None) -> "SimplexLayering":
        """Return a copy of this strategy using the given rank accessor."""
        configured = copy.copy(self)
        configured.rank = rank
        return configured

    def _rank_groups(self, nodes: list[DagNode]) -> list[list[int]]:
        if self.rank is None:
            return []
        groups: dict[float, list[int]] = {}
        for idx, node in enumerate(nodes):
            value = finite_rank(self.rank(node))
            if value is not None:
                groups.setdefault(value, []).append(idx)
        return [groups[value] for value in sorted(groups)]

    def __call__(self, dag: Dag) -> int:
        dag.topological_order()
        nodes = list(dag)
        n = len(nodes)
        if n == 0:
            return 0
        index = {id(node): idx for idx, node in enumerate(nodes)}

        cost = np.full(n, 1.0 / (n + 1))
        a_ub: list[np.ndarray] = []
        b_ub: list[float] = []
        a_eq: list[np.ndarray] = []
        b_eq: list[float] = []

        def difference(lower: int, upper: int) -> np.ndarray:
            row = np.zeros(n)
            row[lower] += 1.0
            row[upper] -= 1.0
            return row

        for link in dag.links():
            s, t = index[id(link.source)], index[id(link.target)]
            cost[t] += 1.0
            cost[s] -= 1.0
            a_ub.append(difference(s, t))
            b_ub.append(-1.0)

        groups = self._rank_groups(nodes)
        for group in groups:
            for member in group[1:]:
                a_eq.append(difference(group[0], member))
                b_eq.append(0.0)
        for upper, lower in zip(groups, groups[1:]):
            a_ub.append(difference(upper[0], lower[0]))
            b_ub.append(-1.0)

        result = linprog(
            cost,
            A_ub=np.array(a_ub) if a_ub else None,
            b_ub=np.array(b_ub) if b_ub else None,
            A_eq=np.array(a_eq) if a_eq else None,
            b_eq=np.array(b_eq) if b_eq else None,
            bounds=(0, None),
            method="highs",
        )
        if result.status != 0:
            raise LayeringError(
                f"Simplex layering failed ({result.message}); "
                "check that ranks increase along every link"
            )

        layers = np.rint(result.x).astype(int)
        layers -= layers.min()
        for node, layer in zip(nodes, layers):
            node.layer = int(layer)
        return int(layers.max()) + 1
