"""Tests for grouping/reduction and the four concrete reductions."""

from __future__ import annotations

import pandas as pd
import pytest

from ev_core.grouping import (
    count_by_make,
    count_by_type,
    group_by,
    make_model_aggregate,
    range_stats_by_year,
    round_half_up,
)
from ev_core.records import load_records
from tests.conftest import make_row


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value, ndigits, expected",
        [(2.5, 0, 3.0), (3.5, 0, 4.0), (-2.5, 0, -3.0), (2.4, 0, 2.0), (66.66666666666667, 1, 66.7), (0.05, 1, 0.1)],
    )
    def test_rounds_half_away_from_zero(self, value, ndigits, expected):
        assert round_half_up(value, ndigits) == expected

    def test_missing(self):
        assert round_half_up(None) is None


class TestGroupBy:
    def test_blank_keys_never_form_a_group(self):
        df = pd.DataFrame({"make": ["Tesla", " Tesla ", "", None, "Ford", "   "], "n": [1, 2, 3, 4, 5, 6]})
        groups = group_by(df, "make", {"total": ("n", "sum")})
        assert groups.to_dict(orient="records") == [
            {"make": "Tesla", "count": 2, "total": 3},
            {"make": "Ford", "count": 1, "total": 5},
        ]

    def test_first_seen_order(self, mixed_records):
        groups = group_by(mixed_records, "make")
        assert groups["make"].tolist() == ["FORD", "TESLA", "TOYOTA", "KIA", "NISSAN"]

    def test_counts_cover_every_non_blank_record(self, mixed_records):
        for key in ("make", "ev_type", "model_year", ["make", "model"]):
            assert group_by(mixed_records, key)["count"].sum() == len(mixed_records)

    def test_callable_key(self, mixed_records):
        groups = group_by(mixed_records, lambda d: d["model_year"] // 10 * 10, key_name="decade")
        assert groups.to_dict(orient="records") == [{"decade": 2020, "count": 8}]

    def test_empty_input(self):
        groups = group_by(load_records([]), "make", {"total": ("electric_range", "sum")})
        assert groups.empty
        assert list(groups.columns) == ["make", "count", "total"]


class TestReductions:
    def test_make_model_scenario(self, scenario_records):
        table = make_model_aggregate(scenario_records)
        assert table.to_dict(orient="records") == [
            {"make": "Tesla", "model": "Model 3", "count": 2, "avg_range": 255, "avg_price": 41000, "ev_type": "BEV"},
            {"make": "Ford", "model": "Mach-E", "count": 1, "avg_range": 0, "avg_price": 0, "ev_type": "BEV"},
        ]

    def test_range_stats_scenario_excludes_unknown_range(self, scenario_records):
        stats = range_stats_by_year(scenario_records)
        assert stats.to_dict(orient="records") == [{"year": 2022, "average": 255, "min": 250, "max": 260, "count": 2}]

    def test_make_model_counts_zero_range_as_zero(self):
        records = load_records([make_row("Kia", "EV6", rng=300), make_row("Kia", "EV6", rng=0)])
        assert make_model_aggregate(records)["avg_range"].tolist() == [150]
        assert range_stats_by_year(records)["average"].tolist() == [300]

    def test_averages_round_half_up(self):
        records = load_records([make_row("Kia", "EV6", rng=2, msrp=1), make_row("Kia", "EV6", rng=3, msrp=2)])
        row = make_model_aggregate(records).iloc[0]
        assert row["avg_range"] == 3
        assert row["avg_price"] == 2

    def test_first_seen_ev_type_is_kept(self):
        records = load_records([make_row("Ford", "Escape", ev_type="PHEV"), make_row("Ford", "Escape", ev_type="BEV")])
        assert make_model_aggregate(records)["ev_type"].tolist() == ["PHEV"]

    def test_count_by_make(self, mixed_records):
        assert count_by_make(mixed_records).to_dict(orient="records") == [
            {"make": "FORD", "count": 2},
            {"make": "TESLA", "count": 3},
            {"make": "TOYOTA", "count": 1},
            {"make": "KIA", "count": 1},
            {"make": "NISSAN", "count": 1},
        ]

    def test_type_percentages_use_full_filtered_set(self):
        records = load_records([make_row("A", ev_type="BEV"), make_row("B", ev_type="BEV"), make_row("C", ev_type="PHEV")])
        types = count_by_type(records)
        assert types["percentage"].tolist() == [66.7, 33.3]
        assert types["percentage"].sum() == pytest.approx(100.0, abs=0.1 * len(types))

    def test_type_percentages_sum_to_hundred(self, mixed_records):
        types = count_by_type(mixed_records)
        assert types["percentage"].sum() == pytest.approx(100.0, abs=0.1 * len(types))

    def test_range_stats_min_max(self, mixed_records):
        stats = range_stats_by_year(mixed_records).set_index("year")
        assert stats.loc[2020, "min"] == 25
        assert stats.loc[2020, "max"] == 322
        assert stats.loc[2020, "count"] == 3
        assert stats.loc[2020, "average"] == 165
        assert 2023 not in stats.index

    @pytest.mark.parametrize("reduction", [count_by_make, count_by_type, range_stats_by_year, make_model_aggregate])
    def test_empty_in_empty_out(self, reduction):
        assert reduction(load_records([])).empty
