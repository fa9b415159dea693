from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

import pandas as pd

from ev_core.filters import (
    FilterConfig,
    active_filter_chips,
    active_filter_count,
    apply_filters,
    count_make_matches,
    filter_options,
    normalize_filters,
    validate_filters,
)
from ev_core.metrics_distribution import compute_make_distribution, compute_type_distribution
from ev_core.metrics_models import compute_top_models
from ev_core.metrics_summary import compute_summary
from ev_core.metrics_trend import compute_range_trend
from ev_core.ranking import SortSpec


def prepare_context(filters: dict | FilterConfig, records: Optional[pd.DataFrame]) -> Dict[str, Any]:
    """Filter once; every view is then computed from the same filtered set."""
    filt = filters if isinstance(filters, FilterConfig) else normalize_filters(filters)
    records = records if records is not None else pd.DataFrame()
    validate_filters(filt)
    filtered = apply_filters(records, filt) if not records.empty else records.copy()
    return {
        "filters": filt,
        "records": records,
        "filtered_records": filtered,
    }


def compute_dashboard(filters: FilterConfig, ctx: Dict[str, Any], *, sort: Optional[SortSpec] = None) -> Dict[str, Any]:
    records: pd.DataFrame = ctx.get("records", pd.DataFrame())
    makes = compute_make_distribution(filters, ctx)
    types = compute_type_distribution(filters, ctx)
    models = compute_top_models(filters, ctx, sort=sort)
    return {
        "filters": asdict(filters),
        "active_filters": {
            "count": active_filter_count(filters),
            "chips": active_filter_chips(filters),
            "make_matches": count_make_matches(filter_options(records)["makes"], filters.make),
        },
        "loaded_records": int(len(records)),
        "summary": compute_summary(filters, ctx)["kpis"],
        "make_distribution": {"top": makes["top"], "total_shown": makes["total_shown"]},
        "type_distribution": {"types": types["types"], "total": types["total"]},
        "range_trend": compute_range_trend(filters, ctx)["trend"],
        "top_models": {"sort": models["sort"], "top": models["top"]},
    }
