from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel

if TYPE_CHECKING:
    from strata.grid import PositionAccessor, RankPosition
    from strata.layout.aligned import DagAligned
    from strata.rank import RankAccessor


class LayoutConfig(BaseModel):
    """Configuration for the rank-aligned DAG layout.

    Strategy fields are plain names; unknown names fall back to the stage
    default when the layout runs.
    """

    layering: str = "simplex"
    decross: str = "twoLayer"
    coord: str = "simplex"
    gap: tuple[float, float] = (24.0, 40.0)
    debug: bool = False

    def bind(
        self,
        rank: RankAccessor,
        y_scale: Callable[[float], float] | None = None,
        node_size: Callable[[Any], tuple[float, float]] | None = None,
    ) -> DagAligned:
        from strata.layout.aligned import DagAligned

        return DagAligned(rank=rank, y_scale=y_scale, node_size=node_size, **self.model_dump())


class GridConfig(BaseModel):
    """Configuration for rank guide lines."""

    rank_property: str = "srank"
    label_property: str = "rankLabel"
    max_count: int = 8

    def rank_lines(
        self,
        nodes: Iterable[Any],
        get_position: PositionAccessor,
        y_min: float,
        y_max: float,
    ) -> list[RankPosition]:
        """Aggregate rank positions and select the lines to draw."""
        from strata.grid import map_ranks_to_y_positions, select_rank_lines

        ranks = map_ranks_to_y_positions(
            nodes,
            get_position,
            rank_accessor=self.rank_property,
            label_accessor=self.label_property,
        )
        return select_rank_lines(ranks, y_min=y_min, y_max=y_max, max_count=self.max_count)


class StrataConfig(BaseModel):
    """Top-level configuration file contents."""

    layout: LayoutConfig = LayoutConfig()
    grid: GridConfig = GridConfig()


def load_config(path: str | Path) -> StrataConfig:
    """Load a StrataConfig from a YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f)
    return StrataConfig.model_validate(data or {})
