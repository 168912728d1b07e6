"""Rank and label extraction from caller-supplied node data."""

import math
import numbers
from collections.abc import Callable, Mapping
from typing import Any

RankAccessor = str | Callable[[Any], Any]
LabelAccessor = str | Callable[[Any], Any]

DEFAULT_RANK_PROPERTY = "srank"
DEFAULT_LABEL_PROPERTY = "rankLabel"


def finite_rank(value: Any) -> float | None:
    """
    Coerce a raw rank value to a finite number.

    Real numbers (numpy scalars included) come back as builtin ints or
    floats, numeric strings are parsed. Anything else (None, bools, NaN,
    infinities, junk strings) yields None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        if not math.isfinite(float(value)):
            return None
        return int(value) if isinstance(value, numbers.Integral) else float(value)
    if isinstance(value, str):
        try:
            parsed = float(value)
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def read_property(obj: Any, key: str) -> Any:
    """
    Read a named property from a mapping, a graph node, or a plain object.

    Mappings that lack the key are searched through their nested "data"
    entry, which is where wrapped records keep the original datum.
    """
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        if key in obj:
            return obj[key]
        return read_property(obj.get("data"), key)
    getter = getattr(obj, "get_property", None)
    if callable(getter):
        return getter(key)
    return getattr(obj, key, None)


def make_rank_getter(
    accessor: RankAccessor | None,
    default: str = DEFAULT_RANK_PROPERTY
) -> Callable[[Any], float | None]:
    """Build a function returning a node's finite rank, or None."""
    if accessor is None:
        accessor = default
    if isinstance(accessor, str):
        key = accessor
        return lambda node: finite_rank(read_property(node, key))
    return lambda node: finite_rank(accessor(node))


def _clean_label(value: Any) -> str | int | float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value or None
    if isinstance(value, numbers.Real):
        return int(value) if isinstance(value, numbers.Integral) else float(value)
    return None


def make_label_getter(
    accessor: LabelAccessor | None,
    default: str = DEFAULT_LABEL_PROPERTY
) -> Callable[[Any], str | int | float | None]:
    """Build a function returning a node's display label, or None."""
    if accessor is None:
        accessor = default
    if isinstance(accessor, str):
        key = accessor
        return lambda node: _clean_label(read_property(node, key))
    return lambda node: _clean_label(accessor(node))
