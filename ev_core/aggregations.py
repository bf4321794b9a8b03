from __future__ import annotations

from typing import Any, Dict, List, Optional

import pandas as pd

from ev_core.records import CAFV_ELIGIBILITY, CITY, EV_TYPE, MAKE, MODEL_YEAR, STATE


TOP_CITIES_LIMIT = 10
TOP_MAKES_LIMIT = 8

CHART_KEYS = ("top_cities", "state_data", "make_data", "year_data", "ev_type_data", "cafv_data")


def group_counts(records: pd.DataFrame, column: str) -> pd.Series:
    """Row count per non-empty value of ``column``, in first-seen order."""
    if records.empty or column not in records.columns:
        return pd.Series(dtype="int64")
    values = records[column].dropna().astype(str)
    values = values[values != ""]
    if values.empty:
        return pd.Series(dtype="int64")
    return values.groupby(values, sort=False).size()


def rank_by_count(counts: pd.Series, limit: Optional[int] = None) -> pd.Series:
    # Stable descending sort: equal counts stay first-seen first.
    ranked = counts.sort_values(ascending=False, kind="stable")
    if limit is not None:
        ranked = ranked.head(limit)
    return ranked


def _name_value(counts: pd.Series) -> List[Dict[str, Any]]:
    return [{"name": str(name), "value": int(value)} for name, value in counts.items()]


def _year_count(counts: pd.Series) -> List[Dict[str, Any]]:
    # String order on purpose, matching the year option list.
    ordered = sorted(((str(year), int(count)) for year, count in counts.items()), key=lambda kv: kv[0])
    return [{"year": year, "count": count} for year, count in ordered]


def compute_chart_data(filtered: pd.DataFrame) -> Dict[str, List[Dict[str, Any]]]:
    """All six chart summaries for one filtered record frame."""
    return {
        "top_cities": _name_value(rank_by_count(group_counts(filtered, CITY), TOP_CITIES_LIMIT)),
        "state_data": _name_value(rank_by_count(group_counts(filtered, STATE))),
        "make_data": _name_value(rank_by_count(group_counts(filtered, MAKE), TOP_MAKES_LIMIT)),
        "year_data": _year_count(group_counts(filtered, MODEL_YEAR)),
        "ev_type_data": _name_value(group_counts(filtered, EV_TYPE)),
        "cafv_data": _name_value(group_counts(filtered, CAFV_ELIGIBILITY)),
    }
