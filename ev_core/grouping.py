from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

KeySpec = Union[str, Sequence[str], Callable[[pd.DataFrame], pd.Series]]
Aggregations = Dict[str, Tuple[str, str]]


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def rounded_average(totals: pd.Series, counts: pd.Series) -> pd.Series:
    """Integer average per row, rounded once on the final division."""
    if totals.empty:
        return pd.Series(dtype="int64", index=totals.index)
    return (totals / counts).apply(round_half_up).astype("int64")


def group_by(
    records: pd.DataFrame,
    key: KeySpec,
    aggregations: Optional[Aggregations] = None,
    *,
    key_name: str = "key",
) -> pd.DataFrame:
    """Group records by ``key`` in first-seen order and reduce each group.

    ``key`` is a column, a list of columns, or a callable deriving the key
    series from the frame. Text keys are stripped and blank keys never form a
    group. The result always carries a ``count`` column plus one column per
    named aggregation.
    """
    aggregations = dict(aggregations or {})
    work = records.copy()

    if callable(key):
        key_cols: List[str] = [key_name]
    elif isinstance(key, str):
        key_cols = [key]
    else:
        key_cols = list(key)

    out_cols = key_cols + ["count"] + list(aggregations)
    if work.empty:
        return pd.DataFrame(columns=out_cols)
    if callable(key):
        work[key_name] = key(work)

    for col in key_cols:
        if pd.api.types.is_numeric_dtype(work[col]):
            work = work.dropna(subset=[col])
            continue
        text = work[col].astype("string").str.strip()
        keep = (text.notna() & text.ne("")).fillna(False).astype(bool)
        work = work.assign(**{col: text.astype(object)})[keep]

    if work.empty:
        return pd.DataFrame(columns=out_cols)

    grouped = work.groupby(key_cols, sort=False)
    out = grouped.size().rename("count").to_frame()
    if aggregations:
        out = out.join(grouped.agg(**aggregations))
    return out.reset_index()[out_cols]


def count_by_make(records: pd.DataFrame) -> pd.DataFrame:
    return group_by(records, "make")


def count_by_type(records: pd.DataFrame) -> pd.DataFrame:
    groups = group_by(records, "ev_type")
    total = len(records)
    if groups.empty or not total:
        return groups.assign(percentage=pd.Series(dtype=float))
    groups["percentage"] = (groups["count"] / total * 100).apply(lambda v: round_half_up(v, 1))
    return groups


def range_stats_by_year(records: pd.DataFrame) -> pd.DataFrame:
    cols = ["year", "average", "min", "max", "count"]
    if records.empty:
        return pd.DataFrame(columns=cols)
    # Zero range means unknown; it must not drag the average or min down.
    known = records[records["electric_range"] > 0]
    groups = group_by(
        known,
        "model_year",
        {
            "total_range": ("electric_range", "sum"),
            "min": ("electric_range", "min"),
            "max": ("electric_range", "max"),
        },
    )
    if groups.empty:
        return pd.DataFrame(columns=cols)
    groups["average"] = rounded_average(groups["total_range"], groups["count"])
    return groups.rename(columns={"model_year": "year"})[cols]


def make_model_aggregate(records: pd.DataFrame) -> pd.DataFrame:
    cols = ["make", "model", "count", "avg_range", "avg_price", "ev_type"]
    groups = group_by(
        records,
        ["make", "model"],
        {
            "total_range": ("electric_range", "sum"),
            "total_price": ("base_msrp", "sum"),
            "ev_type": ("ev_type", "first"),
        },
    )
    if groups.empty:
        return pd.DataFrame(columns=cols)
    # Zero range counts as a real zero here, unlike range_stats_by_year.
    groups["avg_range"] = rounded_average(groups["total_range"], groups["count"])
    groups["avg_price"] = rounded_average(groups["total_price"], groups["count"])
    return groups[cols]
