from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class FilterConfigModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    make: str = ""
    year: Optional[Union[int, str]] = ""
    ev_type: str = Field(default="", alias="evType")
    state: str = ""
    range: str = ""


class FilterOptionsResponse(BaseModel):
    makes: List[str]
    years: List[int]
    ev_types: List[str]
    states: List[str]
    counties: List[str]
    ranges: List[Dict[str, str]]
