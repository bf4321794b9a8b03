"""Core (UI-agnostic) EV registration dashboard logic.

This package contains:
- data loading (CSV -> pandas) and the read-only record store
- filter criteria normalization and the record filter
- filter option extraction
- aggregation and insight compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
