from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from ev_api.schemas import FilterCriteriaModel, MetaOptionsResponse
from ev_core.data import export_csv, export_filename, load_dashboard_data, prepare_context
from ev_core.exceptions import DataLoadError
from ev_core.filters import FilterCriteria, normalize_criteria
from ev_core.metrics_overview import compute_charts, compute_overview


app = FastAPI(title="EV Analytics Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _criteria_from_model(model: FilterCriteriaModel) -> FilterCriteria:
    return normalize_criteria(model.model_dump())


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/meta/options", response_model=MetaOptionsResponse)
def meta_options():
    try:
        data_ctx = load_dashboard_data()
        records: pd.DataFrame = data_ctx["records"]
        return _json({"source": data_ctx.get("source", ""), "total_records": int(len(records)), "options": data_ctx["options"]})
    except DataLoadError as exc:
        logger.error("meta_options: dataset unavailable: %s", exc)
        return _error(exc, status_code=503)
    except Exception as exc:
        logger.exception("meta_options failed")
        return _error(exc)


@app.post("/overview")
def overview(filters: FilterCriteriaModel):
    try:
        data_ctx = load_dashboard_data()
        f = _criteria_from_model(filters)
        ctx = prepare_context(f, data_ctx)
        return _json(compute_overview(f, ctx))
    except DataLoadError as exc:
        logger.error("overview: dataset unavailable: %s", exc)
        return _error(exc, status_code=503)
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.post("/records")
def records(filters: FilterCriteriaModel):
    try:
        data_ctx = load_dashboard_data()
        f = _criteria_from_model(filters)
        ctx = prepare_context(f, data_ctx)
        filtered: pd.DataFrame = ctx["filtered_records"]
        return _json({"count": int(len(filtered)), "records": filtered.to_dict(orient="records")})
    except DataLoadError as exc:
        logger.error("records: dataset unavailable: %s", exc)
        return _error(exc, status_code=503)
    except Exception as exc:
        logger.exception("records failed")
        return _error(exc)


@app.post("/charts")
def charts(filters: FilterCriteriaModel):
    try:
        data_ctx = load_dashboard_data()
        f = _criteria_from_model(filters)
        ctx = prepare_context(f, data_ctx)
        return _json(compute_charts(f, ctx))
    except DataLoadError as exc:
        logger.error("charts: dataset unavailable: %s", exc)
        return _error(exc, status_code=503)
    except Exception as exc:
        logger.exception("charts failed")
        return _error(exc)


@app.post("/export")
def export(filters: FilterCriteriaModel):
    try:
        data_ctx = load_dashboard_data()
    except DataLoadError as exc:
        logger.error("export: dataset unavailable: %s", exc)
        return _error(exc, status_code=503)
    ctx = prepare_context(_criteria_from_model(filters), data_ctx)
    filename = export_filename()
    return Response(
        content=export_csv(ctx["filtered_records"]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
