from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from ev_core.filters import FilterConfig
from ev_core.grouping import count_by_make, count_by_type
from ev_core.ranking import SortSpec, rank

MAKE_TOP_N = 10


def compute_make_distribution(filters: FilterConfig, ctx: Dict[str, Any], *, top_n: int = MAKE_TOP_N) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    if df.empty:
        return {"filters": asdict(filters), "top": [], "total_shown": 0}

    top = rank(count_by_make(df), SortSpec("count", "desc"), top_n)
    return {
        "filters": asdict(filters),
        "top": top[["make", "count"]].to_dict(orient="records"),
        "total_shown": int(top["count"].sum()) if not top.empty else 0,
    }


def compute_type_distribution(filters: FilterConfig, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("filtered_records", pd.DataFrame())
    if df.empty:
        return {"filters": asdict(filters), "types": [], "total": 0}

    types = rank(count_by_type(df), SortSpec("count", "desc"))
    return {
        "filters": asdict(filters),
        "types": types[["ev_type", "count", "percentage"]].to_dict(orient="records"),
        "total": int(len(df)),
    }
