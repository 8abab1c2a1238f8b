from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, Optional

import pandas as pd

from salesboard.config import Clock, system_clock
from salesboard.filters import FilterCriteria, filter_records, normalize_filters
from salesboard.records import annotate, invoices_frame, orders_frame, unique_values
from salesboard.source import RecordSource
from salesboard.status import STATUS_PRIORITY
from salesboard.taxonomy import DEFAULT_TAXONOMY, Taxonomy

logger = logging.getLogger(__name__)


# ---------------- Public API (FastAPI use) ----------------
def load_dashboard_data(source: RecordSource) -> Dict[str, Any]:
    """Fetch one immutable batch of orders and invoices.

    ``RetrievalError`` from the source propagates unchanged; nothing is
    aggregated from a partial batch.
    """
    orders = orders_frame(source.fetch_orders())
    invoices = invoices_frame(source.fetch_invoices())
    logger.info("Loaded batch: %d orders, %d invoices", len(orders), len(invoices))
    return {"orders": orders, "invoices": invoices, "loaded_at": datetime.now()}


def prepare_context(
    filters: dict | FilterCriteria,
    data_ctx: Dict[str, Any],
    *,
    clock: Clock = system_clock,
    taxonomy: Taxonomy = DEFAULT_TAXONOMY,
    default_year: Optional[int] = None,
    table_limit: int = 50,
) -> Dict[str, Any]:
    """Annotate the batch for ``clock()`` and apply the criteria.

    The raw batch in ``data_ctx`` is left untouched; everything here is
    recomputed per call.
    """
    today: date = clock()
    filt = filters if isinstance(filters, FilterCriteria) else normalize_filters(filters)

    orders = annotate(data_ctx.get("orders", pd.DataFrame()), today=today, taxonomy=taxonomy)
    invoices = annotate(data_ctx.get("invoices", pd.DataFrame()), today=today, taxonomy=taxonomy)

    return {
        "filters": filt,
        "today": today,
        "taxonomy": taxonomy,
        "target_year": filt.year if filt.year is not None else (default_year or today.year),
        "orders": orders,
        "invoices": invoices,
        "filtered_orders": filter_records(orders, filt, today=today, taxonomy=taxonomy),
        "filtered_invoices": filter_records(invoices, filt, today=today, taxonomy=taxonomy),
        "table_limit": table_limit,
        "loaded_at": data_ctx.get("loaded_at"),
    }


def filter_options(ctx: Dict[str, Any]) -> Dict[str, Any]:
    """Selectable values for every filter dimension."""
    taxonomy: Taxonomy = ctx.get("taxonomy", DEFAULT_TAXONOMY)
    orders: pd.DataFrame = ctx.get("orders", pd.DataFrame())
    branches = list(taxonomy.branches) + [b for b in unique_values(orders, "branch") if b and b not in taxonomy.branches]
    months = []
    if not orders.empty:
        dated = orders.dropna(subset=["month_key"]).drop_duplicates("month_key").sort_values("month_key")
        months = dated["month_label"].tolist()
    years = sorted({int(y) for y in orders["year"].dropna()}) if not orders.empty else []
    return {
        "statuses": list(STATUS_PRIORITY),
        "collections": list(taxonomy.collections),
        "branches": branches,
        "departments": list(taxonomy.departments),
        "categories": list(taxonomy.categories),
        "months": months,
        "years": years,
    }
