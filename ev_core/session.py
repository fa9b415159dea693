from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import pandas as pd

from ev_core.dashboard import compute_dashboard, prepare_context
from ev_core.filters import FilterConfig, clear_filters, update_filters
from ev_core.metrics_models import DEFAULT_MODEL_SORT
from ev_core.ranking import SortSpec
from ev_core.records import load_records, records_frame

logger = logging.getLogger(__name__)

Listener = Callable[[Dict[str, Any]], None]


class DashboardSession:
    """Holds the current inputs of the dashboard and recomputes on every change.

    Records, filters and sort are replaced wholesale, never patched; each
    replacement re-runs filter -> aggregate -> rank from scratch and pushes
    the fresh payload to subscribers.
    """

    def __init__(
        self,
        records: Optional[pd.DataFrame] = None,
        filters: Optional[FilterConfig] = None,
        sort: Optional[SortSpec] = None,
    ):
        self._listeners: List[Listener] = []
        self._commit(
            records if records is not None else records_frame([]),
            filters or FilterConfig(),
            sort or DEFAULT_MODEL_SORT,
        )

    @property
    def records(self) -> pd.DataFrame:
        return self._records

    @property
    def filters(self) -> FilterConfig:
        return self._filters

    @property
    def sort(self) -> SortSpec:
        return self._sort

    @property
    def view(self) -> Dict[str, Any]:
        return self._view

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def load(self, rows: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
        records = load_records(rows)
        logger.info("Loaded %d EV records", len(records))
        return self._commit(records, self._filters, self._sort)

    def set_filters(self, **changes: object) -> Dict[str, Any]:
        return self._commit(self._records, update_filters(self._filters, **changes), self._sort)

    def clear_filters(self) -> Dict[str, Any]:
        return self._commit(self._records, clear_filters(), self._sort)

    def toggle_sort(self, key: str) -> Dict[str, Any]:
        return self._commit(self._records, self._filters, self._sort.toggled(key))

    def _commit(self, records: pd.DataFrame, filters: FilterConfig, sort: SortSpec) -> Dict[str, Any]:
        # Nothing is replaced unless the whole pipeline succeeds.
        ctx = prepare_context(filters, records)
        view = compute_dashboard(filters, ctx, sort=sort)
        self._records, self._filters, self._sort, self._view = records, filters, sort, view
        for listener in list(self._listeners):
            try:
                listener(self._view)
            except Exception:
                logger.exception("Dashboard listener %r failed", listener)
        return self._view
