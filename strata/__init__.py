"""Rank-aligned layered layout for directed acyclic graphs."""

from strata.align import (
    ALIGN_DEFAULT_GAP,
    AlignedLayout,
    YExtent,
    align_dag_y_by_rank,
    layout_dag_aligned,
)
from strata.dag import CycleError, Dag, DagLink, DagNode, build_dag
from strata.grid import RankPosition, map_ranks_to_y_positions, select_rank_lines
from strata.layout.layering import LayeringError

__version__ = "0.1.0"

__all__ = [
    "ALIGN_DEFAULT_GAP",
    "AlignedLayout",
    "CycleError",
    "Dag",
    "DagLink",
    "DagNode",
    "LayeringError",
    "RankPosition",
    "YExtent",
    "align_dag_y_by_rank",
    "build_dag",
    "layout_dag_aligned",
    "map_ranks_to_y_positions",
    "select_rank_lines",
]
