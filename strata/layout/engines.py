"""Strategy registries and selector resolution for the layout stages.

A selector is either a registered name or an already built strategy: a
stage object or any plain callable with the stage's call signature.
Strategies pass through untouched. Missing or empty selectors pick the stage
default; unknown names fall back to it with a warning, so a typo in
interactive settings degrades the layout instead of breaking it.
"""

import logging
from collections.abc import Callable
from typing import TypeVar

from strata.dag import Dag
from strata.layout import Vertex
from strata.layout.coord import (
    CenterCoord,
    Coord,
    GreedyCoord,
    QuadCoord,
    SimplexCoord,
    TopologicalCoord,
)
from strata.layout.decross import Decross, DfsDecross, OptDecross, TwoLayerDecross
from strata.layout.layering import (
    Layering,
    LongestPathLayering,
    SimplexLayering,
    TopologicalLayering,
)

logger = logging.getLogger(__name__)

LAYERINGS: dict[str, type[Layering]] = {
    "simplex": SimplexLayering,
    "longestPath": LongestPathLayering,
    "longest_path": LongestPathLayering,
    "topological": TopologicalLayering,
}

DECROSSES: dict[str, type[Decross]] = {
    "twoLayer": TwoLayerDecross,
    "two_layer": TwoLayerDecross,
    "opt": OptDecross,
    "dfs": DfsDecross,
}

COORDS: dict[str, type[Coord]] = {
    "simplex": SimplexCoord,
    "greedy": GreedyCoord,
    "quad": QuadCoord,
    "center": CenterCoord,
    "topological": TopologicalCoord,
}

DEFAULT_LAYERING = "simplex"
DEFAULT_DECROSS = "twoLayer"
DEFAULT_COORD = "simplex"

Strategy = TypeVar("Strategy")
LayeringOption = str | Layering | Callable[[Dag], int] | None
DecrossOption = str | Decross | Callable[[list[list[Vertex]]], None] | None
CoordOption = str | Coord | Callable[[list[list[Vertex]], float], None] | None


def _pick(
    stage: str,
    option: object,
    base: type[Strategy],
    registry: dict[str, Callable[[], Strategy]],
    default: str,
) -> Strategy:
    match option:
        case base():
            return option
        case str() if option in registry:
            return registry[option]()
        case None | "":
            return registry[default]()
        case _ if callable(option) and not isinstance(option, type):
            return option
        case _:
            logger.warning(
                "Unknown %s strategy %r, falling back to %r. Available: %s",
                stage, option, default, sorted(registry)
            )
            return registry[default]()


def pick_layering(option: LayeringOption) -> Layering:
    """Resolve a layering selector to a strategy object."""
    return _pick("layering", option, Layering, LAYERINGS, DEFAULT_LAYERING)


def pick_decross(option: DecrossOption) -> Decross:
    """Resolve a crossing reduction selector to a strategy object."""
    return _pick("decross", option, Decross, DECROSSES, DEFAULT_DECROSS)


def pick_coord(option: CoordOption) -> Coord:
    """Resolve a coordinate assignment selector to a strategy object."""
    return _pick("coord", option, Coord, COORDS, DEFAULT_COORD)
