from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

import pandas as pd

from ev_core.records import load_records, records_frame

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1]
DATA_FILE_NAME = "Electric_Vehicle_Population_Data.csv"


def get_source_file() -> Optional[Path]:
    path = Path(os.environ.get("EV_DASHBOARD_DATA", DATA_DIR / DATA_FILE_NAME))
    return path if path.is_file() else None


def file_signature(path: Path) -> Tuple[str, float]:
    return (str(path), path.stat().st_mtime)


@lru_cache(maxsize=2)
def _load_records_cached(file_sig: Tuple[str, float]) -> pd.DataFrame:
    path = Path(file_sig[0])
    raw = pd.read_csv(path, skip_blank_lines=True, low_memory=False)
    records = load_records(raw.to_dict(orient="records"))
    logger.info("Loaded %d EV records from %s (%d raw rows)", len(records), path.name, len(raw))
    return records


def load_dashboard_data() -> pd.DataFrame:
    """Normalized record set for the configured CSV; empty when no file is present yet."""
    path = get_source_file()
    if path is None:
        return records_frame([])
    return _load_records_cached(file_signature(path))
