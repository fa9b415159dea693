from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

import pandas as pd

from ev_core.errors import ConfigError

Direction = Literal["asc", "desc"]

# camelCase names used by the browser table -> payload columns.
SORT_KEY_ALIASES = {
    "avgRange": "avg_range",
    "avgPrice": "avg_price",
    "evType": "ev_type",
}


@dataclass(frozen=True)
class SortSpec:
    key: str
    direction: Direction = "asc"

    def __post_init__(self) -> None:
        if not self.key:
            raise ConfigError("sort key must not be empty")
        if self.direction not in ("asc", "desc"):
            raise ConfigError(f"sort direction must be 'asc' or 'desc', got {self.direction!r}")

    def toggled(self, key: str) -> "SortSpec":
        key = SORT_KEY_ALIASES.get(key, key)
        if key == self.key:
            return SortSpec(key, "desc" if self.direction == "asc" else "asc")
        return SortSpec(key, "asc")


def normalize_sort(raw: Optional[dict], default: SortSpec) -> SortSpec:
    raw = raw or {}
    key = str(raw.get("key") or "").strip() or default.key
    direction = str(raw.get("direction") or "").strip().lower() or default.direction
    return SortSpec(SORT_KEY_ALIASES.get(key, key), direction)  # type: ignore[arg-type]


def rank(groups: pd.DataFrame, sort: SortSpec, limit: Optional[int] = None) -> pd.DataFrame:
    """Stable sort on one key, then keep the first ``limit`` rows."""
    if limit is not None and limit < 0:
        raise ConfigError(f"limit must be non-negative, got {limit}")
    if sort.key not in groups.columns:
        raise ConfigError(f"cannot sort by unknown key {sort.key!r}")

    ranked = groups.copy()
    if not ranked.empty:
        column = ranked[sort.key]
        if pd.api.types.is_numeric_dtype(column):
            sort_key = None
        elif column.map(lambda v: isinstance(v, (int, float)) and not isinstance(v, bool)).all():
            sort_key = lambda s: pd.to_numeric(s)  # noqa: E731
        else:
            sort_key = lambda s: s.astype(str).str.lower()  # noqa: E731
        ranked = ranked.sort_values(sort.key, ascending=sort.direction == "asc", kind="stable", key=sort_key)

    if limit is not None:
        ranked = ranked.head(limit)
    return ranked.reset_index(drop=True)
