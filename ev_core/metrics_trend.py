from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from ev_core.filters import FilterConfig
from ev_core.grouping import range_stats_by_year
from ev_core.ranking import SortSpec, rank


def compute_range_trend(filters: FilterConfig, ctx: Dict[str, Any]) -> Dict[str, Any]:
    """Average/min/max electric range per model year, always in chronological order."""
    df: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    if df.empty:
        return {"filters": asdict(filters), "trend": []}

    trend = rank(range_stats_by_year(df), SortSpec("year", "asc"))
    return {"filters": asdict(filters), "trend": trend.to_dict(orient="records")}
