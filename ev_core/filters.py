from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Dict, List, Optional, Tuple

import pandas as pd

from ev_core.errors import ConfigError

FILTER_DIMENSIONS = ("make", "year", "ev_type", "state", "range")

FILTER_LABELS = {
    "make": "Make",
    "year": "Year",
    "ev_type": "Type",
    "state": "State",
    "range": "Range",
}

RANGE_OPTIONS: List[Dict[str, str]] = [
    {"label": "0-100 miles", "value": "0-100"},
    {"label": "101-200 miles", "value": "101-200"},
    {"label": "201-300 miles", "value": "201-300"},
    {"label": "301+ miles", "value": "301-500"},
]


@dataclass(frozen=True)
class FilterConfig:
    make: str = ""
    year: str = ""
    ev_type: str = ""
    state: str = ""
    range: str = ""


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_year(value: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"year filter must be an integer, got {value!r}") from None


def parse_range(value: str) -> Tuple[int, int]:
    """Parse a ``"min-max"`` interval into inclusive integer bounds."""
    parts = value.split("-")
    if len(parts) != 2:
        raise ConfigError(f"range filter must look like 'min-max', got {value!r}")
    try:
        low, high = (int(p.strip()) for p in parts)
    except ValueError:
        raise ConfigError(f"range filter bounds must be integers, got {value!r}") from None
    if low > high:
        raise ConfigError(f"range filter minimum exceeds maximum in {value!r}")
    return low, high


def validate_filters(filters: FilterConfig) -> FilterConfig:
    if filters.year:
        parse_year(filters.year)
    if filters.range:
        parse_range(filters.range)
    return filters


def normalize_filters(raw: Optional[dict]) -> FilterConfig:
    raw = raw or {}
    ev_type = raw.get("ev_type", raw.get("evType"))
    return validate_filters(
        FilterConfig(
            make=_as_text(raw.get("make")),
            year=_as_text(raw.get("year")),
            ev_type=_as_text(ev_type),
            state=_as_text(raw.get("state")),
            range=_as_text(raw.get("range")),
        )
    )


def update_filters(filters: FilterConfig, **changes: object) -> FilterConfig:
    unknown = set(changes) - set(FILTER_DIMENSIONS)
    if unknown:
        raise ConfigError(f"unknown filter dimension(s): {', '.join(sorted(unknown))}")
    return validate_filters(replace(filters, **{k: _as_text(v) for k, v in changes.items()}))


def clear_filters() -> FilterConfig:
    return FilterConfig()


def active_filter_count(filters: FilterConfig) -> int:
    return sum(1 for value in asdict(filters).values() if value)


def active_filter_chips(filters: FilterConfig) -> List[Dict[str, str]]:
    range_labels = {opt["value"]: opt["label"] for opt in RANGE_OPTIONS}
    chips: List[Dict[str, str]] = []
    for key, value in asdict(filters).items():
        if not value:
            continue
        display = range_labels.get(value, value) if key == "range" else value
        chips.append({"key": key, "label": FILTER_LABELS[key], "value": value, "display": display})
    return chips


def apply_filters(records: pd.DataFrame, filters: FilterConfig) -> pd.DataFrame:
    validate_filters(filters)
    filtered = records.copy()

    if filters.make:
        q = filters.make.lower()
        filtered = filtered[filtered["make"].astype(str).str.lower().str.contains(q, regex=False, na=False)]

    if filters.year:
        filtered = filtered[filtered["model_year"] == parse_year(filters.year)]

    if filters.ev_type:
        filtered = filtered[filtered["ev_type"] == filters.ev_type]

    if filters.state:
        filtered = filtered[filtered["state"] == filters.state]

    if filters.range:
        low, high = parse_range(filters.range)
        filtered = filtered[filtered["electric_range"].between(low, high, inclusive="both")]

    return filtered


def filter_options(records: pd.DataFrame) -> Dict[str, list]:
    """Selectable values for each filter dimension, taken from the full record set."""
    if records.empty:
        return {"makes": [], "years": [], "ev_types": [], "states": [], "counties": [], "ranges": RANGE_OPTIONS}

    def _distinct_text(col: str) -> List[str]:
        values = records[col].astype(str).str.strip()
        return sorted(v for v in values.unique().tolist() if v)

    years = sorted((int(y) for y in records["model_year"].unique() if y), reverse=True)
    return {
        "makes": _distinct_text("make"),
        "years": years,
        "ev_types": _distinct_text("ev_type"),
        "states": _distinct_text("state"),
        "counties": _distinct_text("county"),
        "ranges": RANGE_OPTIONS,
    }


def count_make_matches(makes: List[str], query: str) -> int:
    q = (query or "").strip().lower()
    if not q:
        return len(makes)
    return sum(1 for make in makes if q in make.lower())
