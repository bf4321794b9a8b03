from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

import pandas as pd

from ev_core.records import MODEL_YEAR, STATE


RECENT_MODEL_YEAR = 2020

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_model_year(value: object) -> Optional[int]:
    """Leading integer of a model year string ("2021", " 2019x"); None when absent."""
    if value is None:
        return None
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def share_pct(part: float, total: float) -> float:
    return (part / total) * 100 if total else 0.0


def round_half_up(value: float, ndigits: int = 1) -> Decimal:
    # Exact float value, ties away from zero: 0.25 -> 0.3, not 0.2.
    return Decimal(value).quantize(Decimal(10) ** -ndigits, rounding=ROUND_HALF_UP)


def format_pct(value: float) -> str:
    return str(round_half_up(value, 1))


def count_recent_models(filtered: pd.DataFrame, min_year: int = RECENT_MODEL_YEAR) -> int:
    if filtered.empty or MODEL_YEAR not in filtered.columns:
        return 0
    years = filtered[MODEL_YEAR].map(parse_model_year)
    return int(sum(1 for y in years if y is not None and y >= min_year))


def count_states(filtered: pd.DataFrame) -> int:
    if filtered.empty or STATE not in filtered.columns:
        return 0
    # A blank State counts as one more distinct value.
    return int(filtered[STATE].astype(str).nunique())


def compute_insights(filtered: pd.DataFrame, chart_data: Dict[str, Any]) -> List[Dict[str, str]]:
    """Rotating banner highlights; empty when nothing passes the filters."""
    total = len(filtered)
    if not total:
        return []

    make_data = chart_data.get("make_data") or []
    top_make = make_data[0]["name"] if make_data else "N/A"
    top_make_pct = format_pct(share_pct(make_data[0]["value"], total)) if make_data else "0"
    recent_pct = format_pct(share_pct(count_recent_models(filtered), total))

    return [
        {
            "value": f"{top_make} leads with {top_make_pct}%",
            "description": "of the total EV market share",
            "trend": "up",
            "color": "blue",
        },
        {
            "value": f"{recent_pct}% are from {RECENT_MODEL_YEAR}+",
            "description": "showing accelerating EV adoption",
            "trend": "up",
            "color": "green",
        },
        {
            "value": f"{count_states(filtered)} states covered",
            "description": "demonstrating nationwide EV presence",
            "trend": "neutral",
            "color": "purple",
        },
        {
            "value": f"{total:,} vehicles",
            "description": "in current dataset analysis",
            "trend": "neutral",
            "color": "orange",
        },
    ]


def next_insight_index(current: int, count: int) -> int:
    if count <= 0:
        return 0
    return (current + 1) % count
