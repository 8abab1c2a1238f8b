from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from salesboard.aggregations import (
    aggregate_collection_breakdown,
    aggregate_department_counts,
    aggregate_invoice_totals,
    aggregate_monthly_revenue,
    aggregate_raw_status_breakdown,
    order_table,
)
from salesboard.charts import monthly_revenue_chart
from salesboard.filters import FilterCriteria, filter_records


def compute_invoice_dashboard(filters: FilterCriteria, ctx: Dict[str, Any]) -> Dict[str, Any]:
    invoices: pd.DataFrame = ctx.get("invoices", pd.DataFrame())
    filtered: pd.DataFrame = ctx.get("filtered_invoices", pd.DataFrame())
    today, taxonomy = ctx["today"], ctx["taxonomy"]

    by_collection = filter_records(invoices, filters.without("collection"), today=today, taxonomy=taxonomy)
    by_month = filter_records(invoices, filters.without("month"), today=today, taxonomy=taxonomy)
    monthly = aggregate_monthly_revenue(by_month, ctx["target_year"], today=today, taxonomy=taxonomy)

    return {
        "filters": asdict(filters),
        "as_of": today.isoformat(),
        "totals": aggregate_invoice_totals(filtered),
        "status_breakdown": aggregate_raw_status_breakdown(filtered),
        "collection_breakdown": aggregate_collection_breakdown(
            by_collection, known_only=False, today=today, taxonomy=taxonomy
        ),
        "department_counts": aggregate_department_counts(filtered),
        "monthly_revenue": monthly,
        "invoices": order_table(filtered, limit=ctx.get("table_limit", 50), today=today, taxonomy=taxonomy),
        "charts": {"monthly_revenue": monthly_revenue_chart(monthly)} if not invoices.empty else {},
    }
