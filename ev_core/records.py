from __future__ import annotations

from typing import Iterable, List, Mapping, Tuple

import pandas as pd

from ev_core.exceptions import DataLoadError


VIN = "VIN (1-10)"
COUNTY = "County"
CITY = "City"
STATE = "State"
POSTAL_CODE = "Postal Code"
MODEL_YEAR = "Model Year"
MAKE = "Make"
MODEL = "Model"
EV_TYPE = "Electric Vehicle Type"
CAFV_ELIGIBILITY = "Clean Alternative Fuel Vehicle (CAFV) Eligibility"

# Column order of the published dataset; exports keep it.
RECORD_FIELDS: Tuple[str, ...] = (
    VIN,
    COUNTY,
    CITY,
    STATE,
    POSTAL_CODE,
    MODEL_YEAR,
    MAKE,
    MODEL,
    EV_TYPE,
    CAFV_ELIGIBILITY,
)


def empty_records() -> pd.DataFrame:
    return pd.DataFrame({col: pd.Series(dtype=object) for col in RECORD_FIELDS})


def coerce_records(df: pd.DataFrame) -> pd.DataFrame:
    """Reduce a raw frame to the ten record columns, all plain strings.

    Missing values become empty strings. Extra columns are dropped and a
    missing record column raises ``DataLoadError``.
    """
    missing = [col for col in RECORD_FIELDS if col not in df.columns]
    if missing:
        raise DataLoadError(f"EV dataset is missing columns: {', '.join(missing)}")
    out = df.loc[:, list(RECORD_FIELDS)].copy()
    for col in RECORD_FIELDS:
        out[col] = out[col].fillna("").astype(str)
    return out.reset_index(drop=True)


def records_from_rows(rows: Iterable[Mapping[str, object]]) -> pd.DataFrame:
    """Build a record store from row mappings; absent fields are empty strings."""
    data: List[dict] = []
    for row in rows:
        data.append({col: ("" if row.get(col) is None else str(row.get(col))) for col in RECORD_FIELDS})
    if not data:
        return empty_records()
    return pd.DataFrame(data, columns=list(RECORD_FIELDS))
