"""Sugiyama-style layered layout pipeline over a Dag."""

import dataclasses
import logging
import time
from collections.abc import Callable

from strata.dag import Dag, DagNode
from strata.layout import Vertex
from strata.layout.coord import Coord, SimplexCoord
from strata.layout.decross import Decross, TwoLayerDecross
from strata.layout.layering import Layering, SimplexLayering

logger = logging.getLogger(__name__)

NodeSize = Callable[[DagNode], tuple[float, float]]


@dataclasses.dataclass(frozen=True)
class LayoutSize:
    width: float
    height: float


class Sugiyama:
    """
    Layered layout: layering, dummy insertion, decrossing, coordinates.

    Mutates the Dag it is called on: every DagNode gets ``layer``, ``x`` and
    ``y``; every DagLink gets ``points``, the polyline from source through
    its dummies to target.
    """

    def __init__(
        self,
        layering: Layering | None = None,
        decross: Decross | None = None,
        coord: Coord | None = None,
        gap: tuple[float, float] = (24.0, 40.0),
        node_size: NodeSize | None = None,
    ):
        if len(gap) != 2:
            raise ValueError(f"Invalid gap: {gap}. Must be a (horizontal, vertical) pair")
        self.layering = layering or SimplexLayering()
        self.decross = decross or TwoLayerDecross()
        self.coord = coord or SimplexCoord()
        self.gap = (float(gap[0]), float(gap[1]))
        self.node_size = node_size

    def __call__(self, dag: Dag) -> LayoutSize:
        if not len(dag):
            return LayoutSize(0.0, 0.0)

        # Phase 1: Assign layers
        started = time.perf_counter()
        n_layers = self.layering(dag)

        # Phase 2: Split long links into per-layer dummies
        layers, chains = self._build_layers(dag, n_layers)

        # Phase 3: Minimize crossings
        self.decross(layers)

        # Phase 4: Assign coordinates
        self._assign_sizes(layers)
        self.coord(layers, self.gap[0])
        width = self._normalize_x(layers)
        height = self._assign_y(layers)

        for layer in layers:
            for vertex in layer:
                if not vertex.is_dummy:
                    vertex.node.x = vertex.x
                    vertex.node.y = vertex.y
        for link, chain in chains:
            link.points = [[v.x, v.y] for v in chain]

        logger.debug(
            "Sugiyama layout: %d nodes on %d layers, %.1f x %.1f in %.3fs",
            len(dag), n_layers, width, height, time.perf_counter() - started
        )
        return LayoutSize(width, height)

    @staticmethod
    def _build_layers(dag: Dag, n_layers: int):
        layers: list[list[Vertex]] = [[] for _ in range(n_layers)]
        vertices: dict[int, Vertex] = {}
        for node in dag:
            vertex = Vertex(node.layer, node=node)
            vertices[id(node)] = vertex
            layers[node.layer].append(vertex)

        chains = []
        for link in dag.links():
            source = vertices[id(link.source)]
            target = vertices[id(link.target)]
            if target.layer <= source.layer:
                raise ValueError(
                    f"Layering placed {link.target.id!r} at layer {target.layer}, "
                    f"not below {link.source.id!r} at layer {source.layer}"
                )
            chain = [source]
            for layer_idx in range(source.layer + 1, target.layer):
                dummy = Vertex(layer_idx, link=link)
                layers[layer_idx].append(dummy)
                chain.append(dummy)
            chain.append(target)
            for upper, lower in zip(chain, chain[1:]):
                upper.children.append(lower)
                lower.parents.append(upper)
            chains.append((link, chain))
        return layers, chains

    def _assign_sizes(self, layers: list[list[Vertex]]) -> None:
        if self.node_size is None:
            return
        for layer in layers:
            for vertex in layer:
                if not vertex.is_dummy:
                    vertex.width, vertex.height = self.node_size(vertex.node)

    @staticmethod
    def _normalize_x(layers: list[list[Vertex]]) -> float:
        vertices = [v for layer in layers for v in layer]
        left = min(v.x - v.width / 2 for v in vertices)
        for vertex in vertices:
            vertex.x -= left
        return max(v.x + v.width / 2 for v in vertices)

    def _assign_y(self, layers: list[list[Vertex]]) -> float:
        heights = [max((v.height for v in layer), default=0.0) for layer in layers]
        y = 0.0
        for idx, (layer, height) in enumerate(zip(layers, heights)):
            if idx == 0:
                y = height / 2
            else:
                y += heights[idx - 1] / 2 + self.gap[1] + height / 2
            for vertex in layer:
                vertex.y = y
        return y + heights[-1] / 2
