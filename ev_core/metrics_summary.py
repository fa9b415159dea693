from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from ev_core.filters import FilterConfig
from ev_core.grouping import round_half_up


def _mean_int(series: pd.Series) -> int:
    if series.empty:
        return 0
    return int(round_half_up(series.sum() / len(series)))


def compute_summary(filters: FilterConfig, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    if df.empty:
        kpis = {"total_vehicles": 0, "unique_makes": 0, "unique_states": 0, "avg_range": 0, "avg_price": 0}
        return {"filters": asdict(filters), "kpis": kpis}

    # Unknown range/price stay in as zeros for the dashboard tiles.
    kpis = {
        "total_vehicles": int(len(df)),
        "unique_makes": int(df["make"].nunique()),
        "unique_states": int(df["state"].nunique()),
        "avg_range": _mean_int(df["electric_range"]),
        "avg_price": _mean_int(df["base_msrp"]),
    }
    return {"filters": asdict(filters), "kpis": kpis}
