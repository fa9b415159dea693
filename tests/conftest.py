"""Shared fixtures: raw rows as the data source hands them over, and their normalized frame."""

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd
import pytest

from ev_core.dashboard import prepare_context
from ev_core.filters import FilterConfig
from ev_core.records import load_records

SCENARIO_ROWS: List[Dict[str, Any]] = [
    {"make": "Tesla", "model": "Model 3", "modelYear": 2022, "evType": "BEV", "electricRange": 250, "baseMsrp": 40000, "state": "WA"},
    {"make": "Tesla", "model": "Model 3", "modelYear": 2022, "evType": "BEV", "electricRange": 260, "baseMsrp": 42000, "state": "WA"},
    {"make": "Ford", "model": "Mach-E", "modelYear": 2021, "evType": "BEV", "electricRange": 0, "baseMsrp": 0, "state": "CA"},
]


def make_row(make: str, model: str = "Base", year: int = 2022, ev_type: str = "BEV", rng: int = 100, msrp: int = 0, state: str = "WA") -> Dict[str, Any]:
    return {
        "Make": make,
        "Model": model,
        "Model Year": year,
        "Electric Vehicle Type": ev_type,
        "Electric Range": rng,
        "Base MSRP": msrp,
        "State": state,
    }


@pytest.fixture()
def scenario_rows() -> List[Dict[str, Any]]:
    return [dict(row) for row in SCENARIO_ROWS]


@pytest.fixture()
def scenario_records(scenario_rows) -> pd.DataFrame:
    return load_records(scenario_rows)


@pytest.fixture()
def mixed_records() -> pd.DataFrame:
    """A broader set with ties, mixed types and several years."""
    return load_records(
        [
            make_row("FORD", "Mustang Mach-E", 2021, "Battery Electric Vehicle (BEV)", 230, 0, "WA"),
            make_row("TESLA", "Model Y", 2023, "Battery Electric Vehicle (BEV)", 0, 0, "WA"),
            make_row("TOYOTA", "Prius Prime", 2020, "Plug-in Hybrid Electric Vehicle (PHEV)", 25, 27000, "OR"),
            make_row("FORD", "Escape", 2022, "Plug-in Hybrid Electric Vehicle (PHEV)", 37, 0, "WA"),
            make_row("TESLA", "Model 3", 2020, "Battery Electric Vehicle (BEV)", 322, 0, "CA"),
            make_row("KIA", "Niro", 2022, "Plug-in Hybrid Electric Vehicle (PHEV)", 26, 0, "WA"),
            make_row("TESLA", "Model Y", 2023, "Battery Electric Vehicle (BEV)", 0, 0, "WA"),
            make_row("NISSAN", "Leaf", 2020, "Battery Electric Vehicle (BEV)", 149, 0, "WA"),
        ]
    )


@pytest.fixture()
def scenario_ctx(scenario_records) -> Dict[str, Any]:
    return prepare_context(FilterConfig(), scenario_records)
