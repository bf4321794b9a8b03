from __future__ import annotations


class EvDashboardError(Exception):
    """Base error for the EV dashboard core."""


class DataLoadError(EvDashboardError):
    """The EV dataset is missing, unreadable or does not have the expected columns."""
