from __future__ import annotations

import logging
import os
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple, Union

import pandas as pd

from ev_core.aggregations import compute_chart_data
from ev_core.exceptions import DataLoadError
from ev_core.filters import FilterCriteria, filter_records, normalize_criteria
from ev_core.options import extract_options
from ev_core.records import coerce_records, empty_records


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DATA_FILE_NAME = "Electric_Vehicle_Population_Data.csv"
DATA_PATH_ENV = "EV_DATA_PATH"
EXPORT_PREFIX = "ev_analytics"


def get_source_file() -> Path:
    override = os.environ.get(DATA_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return DATA_DIR / DATA_FILE_NAME


def file_signature(path: Path) -> Tuple[str, float]:
    return str(path), path.stat().st_mtime


# ---------------- Loaders ----------------
def read_ev_csv(path: Union[str, Path]) -> pd.DataFrame:
    """Read the registration CSV into a record store (ten string columns)."""
    try:
        raw = pd.read_csv(path, dtype=str, keep_default_na=False, skip_blank_lines=True)
    except FileNotFoundError as exc:
        raise DataLoadError(f"EV dataset not found: {path}") from exc
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise DataLoadError(f"Failed to parse EV dataset {path}: {exc}") from exc
    return coerce_records(raw)


# ---------------- Public API (Streamlit parity + FastAPI use) ----------------
@lru_cache(maxsize=4)
def _load_dashboard_data_cached(file_sig: Tuple[str, float]) -> Dict[str, object]:
    path = Path(file_sig[0])
    records = read_ev_csv(path)
    logger.info("Loaded %d EV records from %s", len(records), path)
    return {
        "source": path.name,
        "records": records,
        "options": extract_options(records),
    }


def load_dashboard_data() -> Dict[str, object]:
    """Load (once per file version) the record store and its filter options.

    Raises ``DataLoadError`` when the dataset is missing or malformed.
    """
    path = get_source_file()
    if not path.is_file():
        raise DataLoadError(f"EV dataset not found: {path}")
    return _load_dashboard_data_cached(file_signature(path))


def build_data_context(records: pd.DataFrame, source: str = "") -> Dict[str, object]:
    records = coerce_records(records)
    return {"source": source, "records": records, "options": extract_options(records)}


def prepare_context(criteria: Union[Mapping[str, object], FilterCriteria], data_ctx: Dict[str, object]) -> Dict[str, object]:
    records: pd.DataFrame = data_ctx.get("records")
    if records is None:
        records = empty_records()
    filt = criteria if isinstance(criteria, FilterCriteria) else normalize_criteria(criteria)

    filtered = filter_records(records, filt)
    options = data_ctx.get("options")
    if options is None:
        options = extract_options(records)

    return {
        "criteria": filt,
        "records": records,
        "filtered_records": filtered,
        "options": options,
        "chart_data": compute_chart_data(filtered),
    }


# ---------------- Export ----------------
def export_csv(filtered: pd.DataFrame) -> bytes:
    return filtered.to_csv(index=False).encode("utf-8")


def export_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"{EXPORT_PREFIX}_{day.isoformat()}.csv"
