import logging
from collections.abc import Callable

import pandas as pd

logger = logging.getLogger(__name__)

RANK_TABLE_COLUMNS = ["original_y", "rank", "mapped_y"]


def rank_table(rows: list[dict[str, float]]) -> pd.DataFrame:
    """Tabulate rank alignment rows, one per original y bucket."""
    return pd.DataFrame(rows, columns=RANK_TABLE_COLUMNS)


def log_rank_table(
    rows: list[dict[str, float]],
    logfunc: Callable[..., None] = logger.debug,
) -> None:
    """Log the rank alignment table, e.g. for ``debug=True`` layouts."""
    if not rows:
        logfunc("Rank alignment: no buckets")
        return
    logfunc("Rank alignment:\n%s", rank_table(rows).to_string(index=False))
