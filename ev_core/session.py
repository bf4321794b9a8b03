"""Single-user dashboard session.

The session owns the read-only record store and the current filter criteria.
Every user action swaps in a new ``FilterCriteria`` value; the filtered frame,
chart data and insights are recomputed from (records, criteria) on demand and
memoized against the criteria they were built from.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

import pandas as pd

from ev_core.aggregations import compute_chart_data
from ev_core.filters import FilterCriteria, clear_criteria, filter_records, update_criteria
from ev_core.metrics_insights import compute_insights, next_insight_index
from ev_core.options import extract_options
from ev_core.records import coerce_records


logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1000


@dataclass(frozen=True, eq=False)
class DashboardView:
    criteria: FilterCriteria
    filtered_records: pd.DataFrame = field(repr=False)
    chart_data: Dict[str, List[Dict[str, Any]]] = field(repr=False)
    insights: List[Dict[str, str]] = field(repr=False)

    @property
    def filtered_count(self) -> int:
        return int(len(self.filtered_records))


def iter_chunks(records: pd.DataFrame, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[pd.DataFrame]:
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    for start in range(0, len(records), chunk_size):
        yield records.iloc[start : start + chunk_size]


def build_view(criteria: FilterCriteria, filtered: pd.DataFrame) -> DashboardView:
    chart_data = compute_chart_data(filtered)
    return DashboardView(
        criteria=criteria,
        filtered_records=filtered,
        chart_data=chart_data,
        insights=compute_insights(filtered, chart_data),
    )


class DashboardSession:
    def __init__(self, records: pd.DataFrame, criteria: Optional[FilterCriteria] = None) -> None:
        self._records = coerce_records(records)
        self._options = extract_options(self._records)
        self._criteria = criteria or FilterCriteria()
        self._revision = 0
        self._view: Optional[DashboardView] = None
        self._active_insight = 0

    @property
    def records(self) -> pd.DataFrame:
        return self._records

    @property
    def options(self) -> Dict[str, List[str]]:
        return self._options

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def current_view(self) -> Optional[DashboardView]:
        """Last accepted view, without recomputing."""
        return self._view

    @property
    def active_insight(self) -> int:
        return self._active_insight

    def _set_criteria(self, criteria: FilterCriteria) -> FilterCriteria:
        if criteria != self._criteria:
            self._criteria = criteria
            self._revision += 1
            self._active_insight = 0
        return self._criteria

    def update_filter(self, key: str, value: object) -> FilterCriteria:
        return self._set_criteria(update_criteria(self._criteria, key, value))

    def clear_filters(self) -> FilterCriteria:
        return self._set_criteria(clear_criteria())

    def compute(self, criteria: Optional[FilterCriteria] = None) -> DashboardView:
        criteria = criteria or self._criteria
        return build_view(criteria, filter_records(self._records, criteria))

    def accept(self, view: DashboardView) -> bool:
        """Install a computed view unless the criteria moved on since it started."""
        if view.criteria != self._criteria:
            logger.debug("Dropping stale view computed for %s", view.criteria)
            return False
        self._view = view
        return True

    def view(self) -> DashboardView:
        if self._view is None or self._view.criteria != self._criteria:
            self.accept(self.compute())
        return self._view

    def context(self) -> Dict[str, Any]:
        """Current view in the ``prepare_context`` shape used by the compute functions."""
        view = self.view()
        return {
            "criteria": view.criteria,
            "records": self._records,
            "filtered_records": view.filtered_records,
            "options": self._options,
            "chart_data": view.chart_data,
        }

    def refresh_in_chunks(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[int]:
        """Filter chunk by chunk, yielding the number of rows processed so far.

        The work is abandoned as soon as the session's criteria change between
        chunks; only a run that finishes on current criteria updates ``view()``.
        """
        criteria = self._criteria
        parts: List[pd.DataFrame] = []
        processed = 0
        for chunk in iter_chunks(self._records, chunk_size):
            parts.append(filter_records(chunk, criteria))
            processed += len(chunk)
            yield processed
            if self._criteria != criteria:
                logger.debug("Abandoning chunked refresh for superseded criteria %s", criteria)
                return
        filtered = pd.concat(parts) if parts else self._records.iloc[0:0]
        self.accept(build_view(criteria, filtered))

    def advance_insight(self) -> int:
        self._active_insight = next_insight_index(self._active_insight, len(self.view().insights))
        return self._active_insight
