from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

import pandas as pd

from ev_core.errors import ConfigError
from ev_core.filters import FilterConfig
from ev_core.grouping import make_model_aggregate
from ev_core.ranking import SortSpec, rank

MODEL_TOP_N = 20
DEFAULT_MODEL_SORT = SortSpec("count", "desc")
MODEL_SORT_KEYS = ("make", "model", "count", "avg_range", "avg_price", "ev_type")


def compute_top_models(
    filters: FilterConfig,
    ctx: Dict[str, Any],
    *,
    sort: Optional[SortSpec] = None,
    top_n: int = MODEL_TOP_N,
) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    sort = sort or DEFAULT_MODEL_SORT
    if sort.key not in MODEL_SORT_KEYS:
        raise ConfigError(f"top models cannot be sorted by {sort.key!r}")
    payload = {"filters": asdict(filters), "sort": asdict(sort), "top": []}
    if df.empty:
        return payload

    top = rank(make_model_aggregate(df), sort, top_n)
    top.insert(0, "rank", range(1, len(top) + 1))
    payload["top"] = top.to_dict(orient="records")
    return payload
