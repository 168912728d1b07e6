"""Rank-aligned DAG layout.

The generic layered layout spaces layers one unit apart. The functions here
move every layer onto the caller's own rank axis (pipeline step, elapsed
time, ...) while keeping the layer order intact.
"""

import dataclasses
import logging
import math
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import numpy as np

from strata import diagnostics
from strata.dag import Dag, DagLink, DagNode, build_dag
from strata.layout.engines import (
    CoordOption,
    DecrossOption,
    LayeringOption,
    pick_coord,
    pick_decross,
    pick_layering,
)
from strata.layout.sugiyama import Sugiyama
from strata.rank import RankAccessor, make_rank_getter

logger = logging.getLogger(__name__)

ALIGN_DEFAULT_GAP = (24.0, 40.0)

# Layout stages may produce equal y values that differ in the last bits;
# buckets are compared after rounding to this many decimals.
FLOAT_KEY_PRECISION = 8
_KEY_SCALE = 10 ** FLOAT_KEY_PRECISION

YScale = Callable[[float], float]
NodeSize = Callable[[Any], tuple[float, float]]
DebugSink = Callable[[list[dict[str, float]]], None]


@dataclasses.dataclass(frozen=True)
class YExtent:
    min_y: float
    max_y: float


@dataclasses.dataclass(frozen=True)
class AlignedLayout:
    nodes: list[dict[str, Any]]
    links: list[dict[str, Any]]
    width: float
    height: float


def quantize(value: float) -> int:
    """Bucket key for a y value."""
    return round(value * _KEY_SCALE)


def align_dag_y_by_rank(
    dag: Dag | None,
    rank_accessor: RankAccessor,
    y_scale: YScale | None = None,
    gap_y: float | None = None,
    debug: bool | DebugSink = False,
) -> YExtent | None:
    """
    Rewrite the y coordinates of a laid out DAG onto the caller's rank axis.

    Every distinct node y is a bucket. Buckets holding a node with a finite
    rank take that rank; the others count up from the previous bucket, so
    unranked layers between two ranked ones get the integers in between.
    Ranks then go through ``y_scale`` (default ``(rank - min_rank) * gap_y``).
    Link points are rewritten through the same table, keyed by their
    original y; points on layers with no node are interpolated between the
    neighbouring buckets.

    Args:
        dag: A Dag whose nodes already carry ``y`` (may be None).
        rank_accessor: Callable or property name applied to each node's data.
        y_scale: Maps a rank to its final y.
        gap_y: Spacing for the default scale.
        debug: True to log the bucket table, or a callable receiving its rows.

    Returns:
        The extent of the mapped y values, or None (and no change at all)
        when no node has a finite rank.
    """
    if dag is None:
        return None

    get_rank = make_rank_getter(rank_accessor)
    entries: list[tuple[DagNode, float]] = []
    known_ranks: dict[int, float] = {}

    for node in dag:
        original_y = node.y if node.y is not None else 0.0
        entries.append((node, original_y))
        if node.data is not None:
            rank = get_rank(node.data)
            if rank is not None:
                known_ranks[quantize(original_y)] = rank

    if not entries or not known_ranks:
        return None

    buckets: dict[int, float] = {}
    for _, original_y in entries:
        buckets.setdefault(quantize(original_y), original_y)
    sorted_keys = sorted(buckets)

    min_rank = min(known_ranks.values())
    gap = gap_y if gap_y is not None else ALIGN_DEFAULT_GAP[1]
    scale = y_scale or (lambda rank: (rank - min_rank) * gap)

    bucket_ranks: dict[int, float] = {}
    current_rank = min_rank - 1
    for key in sorted_keys:
        if key in known_ranks:
            current_rank = known_ranks[key]
        else:
            current_rank += 1
        bucket_ranks[key] = current_rank

    mapping = {key: scale(rank) for key, rank in bucket_ranks.items()}
    min_y = min(mapping.values())
    max_y = max(mapping.values())

    for node, original_y in entries:
        node.y = mapping[quantize(original_y)]

    source_y = [buckets[key] for key in sorted_keys]
    mapped_y = [mapping[key] for key in sorted_keys]
    for link in dag.links():
        for point in link.points:
            key = quantize(point[1])
            if key in mapping:
                point[1] = mapping[key]
            else:
                point[1] = float(np.interp(point[1], source_y, mapped_y))

    if debug:
        rows = [
            {"original_y": buckets[key], "rank": bucket_ranks[key], "mapped_y": mapping[key]}
            for key in sorted_keys
        ]
        if callable(debug):
            debug(rows)
        else:
            diagnostics.log_rank_table(rows)

    return YExtent(min_y, max_y)


def _finite_or_zero(value: float | None) -> float:
    return value if value is not None and math.isfinite(value) else 0.0


def _node_record(node: DagNode, rank: float | None) -> dict[str, Any]:
    datum = node.data
    record = dict(datum) if isinstance(datum, Mapping) else {"id": node.id, "data": datum}
    record["x"] = _finite_or_zero(node.x)
    record["y"] = _finite_or_zero(node.y)
    record["rank"] = rank
    return record


def _link_record(link: DagLink) -> dict[str, Any]:
    if isinstance(link.data, Mapping):
        record = dict(link.data)
    else:
        record = {"source": link.source.id, "target": link.target.id, "data": link.data}
    record["points"] = [(float(x), float(y)) for x, y in link.points]
    return record


def _dag_node_size(node_size: NodeSize) -> Callable[[DagNode], tuple[float, float]]:
    def size(dag_node: DagNode) -> tuple[float, float]:
        if dag_node.data is None:
            return (0.0, 0.0)
        width, height = node_size(dag_node.data)
        return (float(width), float(height))
    return size


def layout_dag_aligned(
    nodes: Iterable[Any],
    links: Iterable[Any],
    rank: RankAccessor,
    y_scale: YScale | None = None,
    layering: LayeringOption = None,
    decross: DecrossOption = None,
    coord: CoordOption = None,
    gap: tuple[float, float] = ALIGN_DEFAULT_GAP,
    node_size: NodeSize | None = None,
    debug: bool | DebugSink = False,
) -> AlignedLayout:
    """
    Lay out a DAG in layers and align the layers with the nodes' ranks.

    Args:
        nodes: Node records with an "id".
        links: Link records with "source" and "target".
        rank: Callable or property name giving each node record's rank.
        y_scale: Maps a rank to its y; defaults to uniform ``gap[1]`` spacing.
        layering, decross, coord: Strategy names or strategy objects.
        gap: Horizontal and vertical spacing between nodes.
        node_size: Callable giving (width, height) for a node record.
        debug: True to log the rank table, or a callable receiving its rows.

    Returns:
        An AlignedLayout snapshot. Nodes are new dicts with "x", "y" and
        "rank" added, links are new dicts with their "points" polyline.

    Raises:
        CycleError: if the links form a cycle.
        LayeringError: if the ranks contradict the link directions.
    """
    get_rank = make_rank_getter(rank)
    dag = build_dag(nodes, links)

    layering_impl = pick_layering(layering)
    if hasattr(layering_impl, "with_rank"):
        layering_impl = layering_impl.with_rank(
            lambda dag_node: get_rank(dag_node.data) if dag_node.data is not None else None
        )

    layout = Sugiyama(
        layering=layering_impl,
        decross=pick_decross(decross),
        coord=pick_coord(coord),
        gap=gap,
        node_size=_dag_node_size(node_size) if node_size is not None else None,
    )
    size = layout(dag)

    extent = align_dag_y_by_rank(dag, get_rank, y_scale=y_scale, gap_y=gap[1], debug=debug)
    height = extent.max_y - extent.min_y if extent is not None else size.height

    out_nodes = [
        _node_record(node, get_rank(node.data))
        for node in dag
        if node.data is not None
    ]
    out_links = [_link_record(link) for link in dag.links()]

    logger.debug(
        "Aligned layout: %d nodes, %d links, %.1f x %.1f%s",
        len(out_nodes), len(out_links), size.width, height,
        "" if extent is not None else " (no ranks, layers kept)"
    )
    return AlignedLayout(out_nodes, out_links, size.width, height)
