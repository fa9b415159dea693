from __future__ import annotations

import logging
import math
import re
from dataclasses import astuple, dataclass, fields
from typing import Any, Dict, Iterable, List, Mapping

import pandas as pd

from ev_core.errors import NormalizationError

logger = logging.getLogger(__name__)

# Source CSV headers, snake_case and camelCase spellings -> record field.
RECORD_COLUMNS = {
    "Make": "make",
    "make": "make",
    "Model": "model",
    "model": "model",
    "Model Year": "model_year",
    "model_year": "model_year",
    "modelYear": "model_year",
    "year": "model_year",
    "Electric Vehicle Type": "ev_type",
    "ev_type": "ev_type",
    "evType": "ev_type",
    "Electric Range": "electric_range",
    "electric_range": "electric_range",
    "electricRange": "electric_range",
    "Base MSRP": "base_msrp",
    "base_msrp": "base_msrp",
    "baseMsrp": "base_msrp",
    "County": "county",
    "county": "county",
    "City": "city",
    "city": "city",
    "State": "state",
    "state": "state",
    "VIN (1-10)": "vin",
    "VIN": "vin",
    "vin": "vin",
    "Postal Code": "postal_code",
    "postal_code": "postal_code",
    "postalCode": "postal_code",
    "Clean Alternative Fuel Vehicle (CAFV) Eligibility": "clean_alternative_fuel",
    "Clean Alternative Fuel": "clean_alternative_fuel",
    "clean_alternative_fuel": "clean_alternative_fuel",
    "Legislative District": "legislative_district",
    "legislative_district": "legislative_district",
    "DOL Vehicle ID": "dol_vehicle_id",
    "dol_vehicle_id": "dol_vehicle_id",
    "Vehicle Location": "vehicle_location",
    "vehicle_location": "vehicle_location",
    "Electric Utility": "electric_utility",
    "electric_utility": "electric_utility",
    "2020 Census Tract": "census_tract",
    "Census Tract": "census_tract",
    "census_tract": "census_tract",
}

INT_FIELDS = ("model_year", "electric_range", "base_msrp")
REQUIRED_FIELDS = ("make", "model", "model_year", "ev_type")

_LEADING_INT = re.compile(r"^[+-]?\d+")


@dataclass(frozen=True)
class VehicleRecord:
    make: str
    model: str
    model_year: int
    ev_type: str
    electric_range: int = 0
    base_msrp: int = 0
    county: str = ""
    city: str = ""
    state: str = ""
    vin: str = ""
    postal_code: str = ""
    clean_alternative_fuel: str = ""
    legislative_district: str = ""
    dol_vehicle_id: str = ""
    vehicle_location: str = ""
    electric_utility: str = ""
    census_tract: str = ""


RECORD_FIELDS: List[str] = [f.name for f in fields(VehicleRecord)]


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def as_int(value: object) -> int:
    """Parse an integer the lenient way: leading digits of strings, truncated floats, else 0."""
    if _is_missing(value) or isinstance(value, bool):
        return 0
    if isinstance(value, str):
        match = _LEADING_INT.match(value.strip())
        return int(match.group(0)) if match else 0
    try:
        number = float(value)  # type: ignore[arg-type]
    except Exception:
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return int(number)


def as_str(value: object) -> str:
    if _is_missing(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def normalize_row(row: Mapping[str, Any]) -> VehicleRecord:
    values: Dict[str, Any] = {}
    for column, raw in row.items():
        field_name = RECORD_COLUMNS.get(str(column).strip())
        if field_name is None or field_name in values:
            continue
        values[field_name] = raw

    normalized: Dict[str, Any] = {}
    for name in RECORD_FIELDS:
        raw = values.get(name)
        normalized[name] = as_int(raw) if name in INT_FIELDS else as_str(raw)

    # 0 already means unknown for range and price.
    normalized["electric_range"] = max(0, normalized["electric_range"])
    normalized["base_msrp"] = max(0, normalized["base_msrp"])

    missing = [name for name in REQUIRED_FIELDS if not normalized[name]]
    if missing:
        raise NormalizationError(f"row is missing required fields: {', '.join(missing)}")
    return VehicleRecord(**normalized)


def normalize_rows(rows: Iterable[Mapping[str, Any]]) -> List[VehicleRecord]:
    records: List[VehicleRecord] = []
    dropped = 0
    for row in rows:
        try:
            records.append(normalize_row(row))
        except NormalizationError:
            dropped += 1
            continue
    if dropped:
        logger.debug("Dropped %d incomplete rows during normalization", dropped)
    return records


def records_frame(records: Iterable[VehicleRecord]) -> pd.DataFrame:
    df = pd.DataFrame([astuple(r) for r in records], columns=RECORD_FIELDS)
    return df.astype({name: "int64" for name in INT_FIELDS})


def load_records(rows: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """Normalize raw rows into the typed record frame every view consumes."""
    return records_frame(normalize_rows(rows))
