from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Any, Dict

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import FilterCriteriaModel, MetaFiltersResponse
from salesboard.config import Clock, load_settings, system_clock
from salesboard.data import filter_options, load_dashboard_data, prepare_context
from salesboard.filters import FilterCriteria, normalize_filters
from salesboard.metrics_invoices import compute_invoice_dashboard
from salesboard.metrics_sales import compute_monthly_revenue, compute_sales_dashboard, compute_sales_stats
from salesboard.records import RECORD_COLUMNS
from salesboard.source import MongoRecordSource, RecordSource, RetrievalError

settings = load_settings()
logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Sales Dashboard API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Swappable collaborators; tests replace these with in-memory ones.
app.state.source = None
app.state.clock = system_clock


def get_source() -> RecordSource:
    if app.state.source is None:
        app.state.source = MongoRecordSource.from_settings(settings)
    return app.state.source


@lru_cache(maxsize=1)
def _cached_batch() -> Dict[str, Any]:
    return load_dashboard_data(get_source())


def _filters_from_model(model: FilterCriteriaModel) -> FilterCriteria:
    return normalize_filters(model.model_dump())


def _context(filters: FilterCriteria) -> Dict[str, Any]:
    clock: Clock = app.state.clock
    return prepare_context(
        filters,
        _cached_batch(),
        clock=clock,
        default_year=settings.default_year,
        table_limit=settings.table_limit,
    )


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/meta/filters", response_model=MetaFiltersResponse)
def meta_filters():
    try:
        return _json(filter_options(_context(FilterCriteria())))
    except RetrievalError as exc:
        logger.exception("meta_filters failed")
        return _error(exc, 503)
    except Exception as exc:
        logger.exception("meta_filters failed")
        return _error(exc)


@app.post("/sales")
def sales(filters: FilterCriteriaModel):
    try:
        f = _filters_from_model(filters)
        return _json(compute_sales_dashboard(f, _context(f)))
    except RetrievalError as exc:
        logger.exception("sales failed")
        return _error(exc, 503)
    except Exception as exc:
        logger.exception("sales failed")
        return _error(exc)


@app.post("/sales/stats")
def sales_stats(filters: FilterCriteriaModel):
    try:
        f = _filters_from_model(filters)
        return _json(compute_sales_stats(f, _context(f)))
    except RetrievalError as exc:
        logger.exception("sales_stats failed")
        return _error(exc, 503)
    except Exception as exc:
        logger.exception("sales_stats failed")
        return _error(exc)


@app.post("/sales/monthly-revenue")
def sales_monthly_revenue(filters: FilterCriteriaModel):
    try:
        f = _filters_from_model(filters)
        return _json(compute_monthly_revenue(f, _context(f)))
    except RetrievalError as exc:
        logger.exception("sales_monthly_revenue failed")
        return _error(exc, 503)
    except Exception as exc:
        logger.exception("sales_monthly_revenue failed")
        return _error(exc)


@app.post("/invoices")
def invoices(filters: FilterCriteriaModel):
    try:
        f = _filters_from_model(filters)
        return _json(compute_invoice_dashboard(f, _context(f)))
    except RetrievalError as exc:
        logger.exception("invoices failed")
        return _error(exc, 503)
    except Exception as exc:
        logger.exception("invoices failed")
        return _error(exc)


@app.post("/refresh")
def refresh():
    _cached_batch.cache_clear()
    logger.info("Record batch cache cleared")
    return _json({"refreshed": True})


@app.post("/export/{page}")
def export_page(page: str, filters: FilterCriteriaModel):
    try:
        f = _filters_from_model(filters)
        ctx = _context(f)
    except RetrievalError as exc:
        logger.exception("export failed")
        return _error(exc, 503)

    filename = f"{page}.csv"
    if page == "sales":
        export_df = ctx.get("filtered_orders")
    elif page == "invoices":
        export_df = ctx.get("filtered_invoices")
    else:
        export_df = pd.DataFrame()

    if export_df is None or not hasattr(export_df, "to_csv"):
        export_df = pd.DataFrame()
    cols = [c for c in list(RECORD_COLUMNS) + ["status_category", "branch", "department_name", "department_category"] if c in export_df.columns]
    csv_bytes = export_df[cols].to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
