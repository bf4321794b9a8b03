from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class FilterCriteriaModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    search: str = ""
    state: str = ""
    county: str = ""
    city: str = ""
    make: str = ""
    model: str = ""
    year: str = ""
    ev_type: str = Field(default="", alias="evType")
    cafv_eligibility: str = Field(default="", alias="cafvEligibility")


class MetaOptionsResponse(BaseModel):
    source: str
    total_records: int
    options: Dict[str, List[str]]
