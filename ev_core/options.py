from __future__ import annotations

from typing import Dict, List

import pandas as pd

from ev_core.filters import EXACT_MATCH_FIELDS


def distinct_values(records: pd.DataFrame, column: str) -> List[str]:
    """Distinct non-empty values of a column in plain string order.

    Model years sort as strings too, so "9" lands after "2020".
    """
    if records.empty or column not in records.columns:
        return []
    values = records[column].dropna().astype(str).unique().tolist()
    return sorted(v for v in values if v)


def extract_options(records: pd.DataFrame) -> Dict[str, List[str]]:
    """Option lists for every exact-match filter, taken from the full record store."""
    return {name: distinct_values(records, column) for name, column in EXACT_MATCH_FIELDS.items()}
