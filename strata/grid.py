"""Rank guide lines for positioned nodes.

``map_ranks_to_y_positions`` averages node y positions per rank;
``select_rank_lines`` picks an evenly spread subset of those ranks to draw.
"""

import dataclasses
import math
import numbers
from bisect import bisect_left
from collections.abc import Callable, Iterable
from typing import Any

from strata.rank import LabelAccessor, RankAccessor, make_label_getter, make_rank_getter

PositionAccessor = Callable[[Any], tuple[float, float] | None]

DEFAULT_MAX_COUNT = 8


@dataclasses.dataclass
class RankPosition:
    rank: float
    y_position: float
    label: str | int | float


@dataclasses.dataclass
class _RankAggregate:
    sum: float = 0.0
    count: int = 0
    label: str | int | float | None = None


def _finite(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(float(value))


def _target_range(
    observed: tuple[float, float],
    override: tuple[float | None, float | None] | None,
) -> tuple[float, float]:
    low, high = observed
    if override is not None:
        override_low, override_high = override
        if _finite(override_low):
            low = override_low
        if _finite(override_high):
            high = override_high
    return low, high


def _enforce_monotonic(positions: list[RankPosition], low: float, high: float) -> None:
    """
    Make y positions non-decreasing in rank order.

    With a usable range the ranks are spread evenly from ``low`` to ``high``.
    Otherwise one forward pass clamps the first entry down to ``low``, gives
    an interior entry that does not exceed its predecessor the predecessor's
    value, and raises the last entry to at least its predecessor and
    ``high``. Ties survive that pass.
    """
    if _finite(low) and _finite(high) and high > low:
        step = (high - low) / (len(positions) - 1)
        for i, entry in enumerate(positions):
            entry.y_position = low + step * i
        return

    first = positions[0]
    if _finite(low) and first.y_position > low:
        first.y_position = low

    previous = first.y_position
    for entry in positions[1:-1]:
        if not entry.y_position > previous:
            entry.y_position = previous
        previous = entry.y_position

    last = positions[-1]
    floor = previous if not _finite(high) else max(previous, high)
    if last.y_position < floor:
        last.y_position = floor


def map_ranks_to_y_positions(
    nodes: Iterable[Any],
    get_position: PositionAccessor,
    rank_accessor: RankAccessor | None = None,
    label_accessor: LabelAccessor | None = None,
    y_range: tuple[float | None, float | None] | None = None,
) -> list[RankPosition]:
    """
    Average the y position of the nodes of every rank.

    Nodes without a finite rank or without a finite position are skipped.
    If the averages are not increasing in rank order they are repaired to a
    non-decreasing sequence between the lowest and highest y seen (or the
    bounds given in ``y_range``).

    Args:
        nodes: Positioned nodes.
        get_position: Returns a node's (x, y), or None if unknown.
        rank_accessor: Callable or property name; defaults to "srank".
        label_accessor: Callable or property name; defaults to "rankLabel".
        y_range: Optional (min, max) overriding the observed y range used
            by the repair; None entries keep the observed bound.

    Returns:
        One RankPosition per rank, sorted by rank. The label is the first
        label found among the rank's nodes, else the rank itself.
    """
    get_rank = make_rank_getter(rank_accessor)
    get_label = make_label_getter(label_accessor)

    aggregates: dict[float, _RankAggregate] = {}
    y_min = math.inf
    y_max = -math.inf

    for node in nodes:
        rank = get_rank(node)
        if rank is None:
            continue
        position = get_position(node)
        if position is None or len(position) < 2:
            continue
        y = position[1]
        if not _finite(y):
            continue
        y = float(y)

        entry = aggregates.setdefault(rank, _RankAggregate())
        entry.sum += y
        entry.count += 1
        if entry.label is None:
            entry.label = get_label(node)
        y_min = min(y_min, y)
        y_max = max(y_max, y)

    positions = [
        RankPosition(
            rank=rank,
            y_position=entry.sum / entry.count,
            label=entry.label if entry.label is not None else rank,
        )
        for rank, entry in aggregates.items()
    ]
    positions.sort(key=lambda p: p.rank)

    needs_repair = any(
        current.y_position <= previous.y_position
        for previous, current in zip(positions, positions[1:])
    )
    if needs_repair:
        low, high = _target_range((y_min, y_max), y_range)
        _enforce_monotonic(positions, low, high)

    return positions


def _insertion_index(ranks: list[RankPosition], target: float) -> int:
    """Leftmost index whose y is >= target, capped at the last index."""
    keys = [entry.y_position for entry in ranks]
    return min(bisect_left(keys, target), len(ranks) - 1)


def _nearest_unused_index(
    ranks: list[RankPosition],
    target: float,
    start: int,
    used: set[int],
) -> int:
    best_index = -1
    best_distance = math.inf

    def consider(index: int) -> None:
        nonlocal best_index, best_distance
        if index < 0 or index >= len(ranks) or index in used:
            return
        distance = abs(ranks[index].y_position - target)
        closer = distance < best_distance
        tie = distance == best_distance and best_index != -1
        if closer or (tie and (
            ranks[index].y_position < ranks[best_index].y_position or index < best_index
        )):
            best_distance = distance
            best_index = index

    consider(start)
    consider(start - 1)

    offset = 1
    while best_index == -1 and (start - offset >= 0 or start + offset < len(ranks)):
        consider(start - offset)
        consider(start + offset)
        offset += 1

    return best_index


def _closest_available_index(ranks: list[RankPosition], target: float, used: set[int]) -> int:
    if not ranks:
        return -1
    start = _insertion_index(ranks, target)
    nearest = _nearest_unused_index(ranks, target, start, used)
    if nearest != -1:
        return nearest
    return next((i for i in range(len(ranks)) if i not in used), -1)


def _target_ratios(count: int) -> list[float]:
    if count <= 1:
        return [0.5]
    step = 1 / (count - 1)
    return [i * step for i in range(count)]


def _evenly_spaced_indices(ranks: list[RankPosition], max_count: int) -> list[int]:
    start = ranks[0].y_position
    span = ranks[-1].y_position - start
    used: set[int] = set()

    for ratio in _target_ratios(max_count):
        target = start + ratio * span if span != 0 else start
        index = _closest_available_index(ranks, target, used)
        if index != -1:
            used.add(index)

    # Backfill collisions with the lowest unused entries
    for i in range(len(ranks)):
        if len(used) >= max_count:
            break
        used.add(i)

    return sorted(used)[:max_count]


def select_rank_lines(
    ranks: list[RankPosition],
    y_min: float,
    y_max: float,
    max_count: int = DEFAULT_MAX_COUNT,
) -> list[RankPosition]:
    """
    Pick at most ``max_count`` ranks within [y_min, y_max], spread evenly.

    Targets are evenly spaced across the span of the ranks in range (the
    midpoint when ``max_count`` is 1); each target takes the closest rank
    not already taken, preferring the lower one on exact ties.

    Returns:
        The chosen entries in ascending y order; empty for non-finite bounds
        or a non-positive ``max_count``.
    """
    if not _finite(y_min) or not _finite(y_max) or max_count <= 0:
        return []

    low, high = min(y_min, y_max), max(y_min, y_max)
    filtered = sorted(
        (entry for entry in ranks if _finite(entry.y_position) and low <= entry.y_position <= high),
        key=lambda entry: entry.y_position,
    )
    if len(filtered) <= max_count:
        return filtered

    return [filtered[i] for i in _evenly_spaced_indices(filtered, max_count)]
