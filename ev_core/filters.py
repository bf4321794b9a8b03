from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from typing import Dict, Mapping, Optional, Tuple

import pandas as pd

from ev_core.records import (
    CAFV_ELIGIBILITY,
    CITY,
    COUNTY,
    EV_TYPE,
    MAKE,
    MODEL,
    MODEL_YEAR,
    RECORD_FIELDS,
    STATE,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterCriteria:
    search: str = ""
    state: str = ""
    county: str = ""
    city: str = ""
    make: str = ""
    model: str = ""
    year: str = ""
    ev_type: str = ""
    cafv_eligibility: str = ""


FILTER_KEYS: Tuple[str, ...] = tuple(f.name for f in fields(FilterCriteria))

# Exact-match criteria key -> record column. Search is handled separately.
EXACT_MATCH_FIELDS: Dict[str, str] = {
    "state": STATE,
    "county": COUNTY,
    "city": CITY,
    "make": MAKE,
    "model": MODEL,
    "year": MODEL_YEAR,
    "ev_type": EV_TYPE,
    "cafv_eligibility": CAFV_ELIGIBILITY,
}

KEY_ALIASES: Dict[str, str] = {
    "evType": "ev_type",
    "cafvEligibility": "cafv_eligibility",
}


def canonical_key(key: object) -> Optional[str]:
    name = KEY_ALIASES.get(str(key), str(key))
    return name if name in FILTER_KEYS else None


def _as_text(value: object) -> str:
    if value is None or pd.isna(value):
        return ""
    return str(value)


def normalize_criteria(raw: Optional[Mapping[str, object]]) -> FilterCriteria:
    """Build criteria from a loose mapping (request body, session state).

    Unknown keys are dropped and ``None`` means no constraint.
    """
    values: Dict[str, str] = {}
    for key, value in (raw or {}).items():
        name = canonical_key(key)
        if name is None:
            continue
        values[name] = _as_text(value)
    return FilterCriteria(**values)


def update_criteria(criteria: FilterCriteria, key: str, value: object) -> FilterCriteria:
    name = canonical_key(key)
    if name is None:
        logger.warning("Ignoring update for unknown filter key %r", key)
        return criteria
    return replace(criteria, **{name: _as_text(value)})


def clear_criteria() -> FilterCriteria:
    return FilterCriteria()


def active_filters(criteria: FilterCriteria) -> Dict[str, str]:
    return {name: getattr(criteria, name) for name in FILTER_KEYS if getattr(criteria, name)}


def matches(record: Mapping[str, object], criteria: FilterCriteria) -> bool:
    """Decide whether a single record passes the criteria."""
    if criteria.search:
        needle = criteria.search.lower()
        if not any(needle in _as_text(record.get(col)).lower() for col in RECORD_FIELDS):
            return False
    for name, column in EXACT_MATCH_FIELDS.items():
        wanted = getattr(criteria, name)
        if wanted and _as_text(record.get(column)) != wanted:
            return False
    return True


def filter_records(records: pd.DataFrame, criteria: FilterCriteria) -> pd.DataFrame:
    """Vectorized ``matches`` over the record store, keeping load order and index."""
    if records.empty:
        return records.iloc[0:0]

    mask = pd.Series(True, index=records.index)
    if criteria.search:
        needle = criteria.search.lower()
        hit = pd.Series(False, index=records.index)
        for col in RECORD_FIELDS:
            hit |= records[col].astype(str).str.lower().str.contains(needle, regex=False, na=False)
        mask &= hit

    for name, column in EXACT_MATCH_FIELDS.items():
        wanted = getattr(criteria, name)
        if wanted:
            mask &= records[column] == wanted

    return records[mask]
