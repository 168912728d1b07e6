"""Layout engine running the rank-aligned DAG layout on a Graph."""

import logging
from collections.abc import Callable
from typing import Any

from strata import graph
from strata.align import ALIGN_DEFAULT_GAP, DebugSink, YScale, layout_dag_aligned
from strata.layout import LayoutEngine, Result
from strata.layout.engines import CoordOption, DecrossOption, LayeringOption
from strata.rank import RankAccessor, make_rank_getter

logger = logging.getLogger(__name__)


class DagAligned(LayoutEngine):
    """
    Layered layout whose layers follow each node's rank.

    Only directed edges take part. Positions locked with
    ``lock_node_position`` override the computed ones and survive re-fits.
    """

    def __init__(
        self,
        rank: RankAccessor,
        y_scale: YScale | None = None,
        layering: LayeringOption = None,
        decross: DecrossOption = None,
        coord: CoordOption = None,
        gap: tuple[float, float] = ALIGN_DEFAULT_GAP,
        node_size: Callable[[graph.Node], tuple[float, float]] | None = None,
        debug: bool | DebugSink = False,
    ):
        if len(gap) != 2:
            raise ValueError(f"Invalid gap: {gap}. Must be a (horizontal, vertical) pair")
        self.rank = make_rank_getter(rank)
        self.y_scale = y_scale
        self.layering = layering
        self.decross = decross
        self.coord = coord
        self.gap = (float(gap[0]), float(gap[1]))
        self.node_size = node_size
        self.debug = debug

        self._positions: dict[str, tuple[float, float]] = {}
        self._locked: dict[str, tuple[float, float]] = {}
        self._edge_points: dict[int, list[tuple[float, float]]] = {}

    def fit(self, g: graph.Graph) -> Result:
        """
        Lay out the graph.

        Args:
            g: Graph object containing nodes and edges.

        Returns:
            A Result whose layout holds node centers in ``g.nodes`` order.
            Metadata carries "width", "height", "links" (aligned link
            records with their points) and "ranks" (node id to rank).
        """
        self._positions.clear()
        self._edge_points.clear()

        if not g.nodes:
            self._positions.update(self._locked)
            return Result(graph.Layout(g, []), metadata={
                "width": 0.0,
                "height": 0.0,
                "links": [],
                "ranks": {},
            })

        directed = [edge for edge in g.edges if edge.directed]
        records = [{"id": node.id, "data": node} for node in g.nodes]
        links = [
            {"id": edge.id, "source": edge.source, "target": edge.target}
            for edge in directed
        ]

        aligned = layout_dag_aligned(
            records,
            links,
            rank=lambda record: self.rank(record["data"]),
            y_scale=self.y_scale,
            layering=self.layering,
            decross=self.decross,
            coord=self.coord,
            gap=self.gap,
            node_size=self._record_size if self.node_size is not None else None,
            debug=self.debug,
        )

        ranks = {}
        for record in aligned.nodes:
            key = str(record["id"])
            self._positions[key] = (record["x"], record["y"])
            ranks[record["id"]] = record["rank"]
        self._positions.update(self._locked)

        for edge, link in zip(directed, aligned.links):
            self._edge_points[id(edge)] = link["points"]

        centers: list[float] = []
        for node in g.nodes:
            centers.extend(self.get_node_position(node.id))

        return Result(graph.Layout(g, centers), metadata={
            "width": aligned.width,
            "height": aligned.height,
            "links": aligned.links,
            "ranks": ranks,
        })

    def _record_size(self, record: dict[str, Any]) -> tuple[float, float]:
        return self.node_size(record["data"])

    def get_node_position(self, node_id: graph.NodeId) -> tuple[float, float]:
        key = str(node_id)
        if key in self._locked:
            return self._locked[key]
        return self._positions.get(key, (0.0, 0.0))

    def get_edge_position(self, edge: graph.Edge) -> dict[str, Any]:
        """Endpoints and interior control points of an edge's polyline."""
        points = self._edge_points.get(id(edge), [])
        control_points = list(points[1:-1])
        return {
            "type": "spline" if control_points else "line",
            "source_position": self.get_node_position(edge.source),
            "target_position": self.get_node_position(edge.target),
            "control_points": control_points,
        }

    def lock_node_position(self, node_id: graph.NodeId, x: float, y: float) -> None:
        key = str(node_id)
        self._locked[key] = (x, y)
        self._positions[key] = (x, y)

    def unlock_node_position(self, node_id: graph.NodeId) -> None:
        key = str(node_id)
        self._locked.pop(key, None)
        self._positions.pop(key, None)
        logger.debug("Unlocked node %r; position resets until the next fit", node_id)
