from __future__ import annotations

import logging
import math
from typing import Literal, Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from ev_api.schemas import FilterConfigModel, FilterOptionsResponse
from ev_api.source import load_dashboard_data
from ev_core.dashboard import compute_dashboard, prepare_context
from ev_core.errors import ConfigError
from ev_core.filters import FilterConfig, filter_options, normalize_filters
from ev_core.metrics_distribution import compute_make_distribution, compute_type_distribution
from ev_core.metrics_models import DEFAULT_MODEL_SORT, compute_top_models
from ev_core.metrics_summary import compute_summary
from ev_core.metrics_trend import compute_range_trend
from ev_core.ranking import SortSpec, normalize_sort

app = FastAPI(title="EV Population Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

EXPORT_VIEWS = ("records", "makes", "types", "trend", "models")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _filters_from_model(model: FilterConfigModel) -> FilterConfig:
    return normalize_filters(model.model_dump())


def _sort_from_query(sort_key: Optional[str], direction: Optional[str]) -> SortSpec:
    return normalize_sort({"key": sort_key, "direction": direction}, DEFAULT_MODEL_SORT)


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(exc: Exception, name: str) -> JSONResponse:
    if isinstance(exc, ConfigError):
        return JSONResponse(status_code=422, content={"error": str(exc), "type": type(exc).__name__})
    logger.exception("%s failed", name)
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/meta/options")
def meta_options():
    try:
        options = FilterOptionsResponse(**filter_options(load_dashboard_data()))
        return _json(options.model_dump())
    except Exception as exc:
        return _error(exc, "meta_options")


@app.post("/summary")
def summary(filters: FilterConfigModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())
        return _json(compute_summary(f, ctx))
    except Exception as exc:
        return _error(exc, "summary")


@app.post("/distribution/make")
def make_distribution(filters: FilterConfigModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())
        return _json(compute_make_distribution(f, ctx))
    except Exception as exc:
        return _error(exc, "make_distribution")


@app.post("/distribution/type")
def type_distribution(filters: FilterConfigModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())
        return _json(compute_type_distribution(f, ctx))
    except Exception as exc:
        return _error(exc, "type_distribution")


@app.post("/trend/range")
def range_trend(filters: FilterConfigModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())
        return _json(compute_range_trend(f, ctx))
    except Exception as exc:
        return _error(exc, "range_trend")


@app.post("/models/top")
def top_models(
    filters: FilterConfigModel,
    sort_key: Optional[str] = Query(default=None),
    direction: Optional[Literal["asc", "desc"]] = Query(default=None),
):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())
        return _json(compute_top_models(f, ctx, sort=_sort_from_query(sort_key, direction)))
    except Exception as exc:
        return _error(exc, "top_models")


@app.post("/dashboard")
def dashboard(
    filters: FilterConfigModel,
    sort_key: Optional[str] = Query(default=None),
    direction: Optional[Literal["asc", "desc"]] = Query(default=None),
):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())
        return _json(compute_dashboard(f, ctx, sort=_sort_from_query(sort_key, direction)))
    except Exception as exc:
        return _error(exc, "dashboard")


@app.post("/export/{view}")
def export_view(
    view: str,
    filters: FilterConfigModel,
    sort_key: Optional[str] = Query(default=None),
    direction: Optional[Literal["asc", "desc"]] = Query(default=None),
):
    if view not in EXPORT_VIEWS:
        return JSONResponse(status_code=404, content={"error": f"unknown export view {view!r}", "type": "NotFound"})
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, load_dashboard_data())

        # Each download carries the same rows, in the same order, as its JSON view.
        if view == "records":
            export_df = ctx["filtered_records"]
        elif view == "makes":
            export_df = pd.DataFrame(compute_make_distribution(f, ctx)["top"])
        elif view == "types":
            export_df = pd.DataFrame(compute_type_distribution(f, ctx)["types"])
        elif view == "trend":
            export_df = pd.DataFrame(compute_range_trend(f, ctx)["trend"])
        else:
            export_df = pd.DataFrame(compute_top_models(f, ctx, sort=_sort_from_query(sort_key, direction))["top"])

        csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    except Exception as exc:
        return _error(exc, "export")

    return Response(
        content=csv_bytes,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={view}.csv"},
    )
