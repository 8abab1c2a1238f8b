from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from salesboard.aggregations import (
    aggregate_branch_revenue,
    aggregate_collection_breakdown,
    aggregate_department_breakdown,
    aggregate_department_tree,
    aggregate_monthly_revenue,
    aggregate_revenue_by_month,
    aggregate_status_breakdown,
    aggregate_totals,
    order_table,
)
from salesboard.charts import branch_revenue_chart, monthly_revenue_chart
from salesboard.filters import FilterCriteria, filter_records


def compute_sales_stats(filters: FilterCriteria, ctx: Dict[str, Any]) -> Dict[str, Any]:
    """Headline cards: totals over every active criterion."""
    df: pd.DataFrame = ctx.get("filtered_orders", pd.DataFrame())
    return {"filters": asdict(filters), "totals": aggregate_totals(df, today=ctx["today"], taxonomy=ctx["taxonomy"])}


def compute_monthly_revenue(filters: FilterCriteria, ctx: Dict[str, Any]) -> Dict[str, Any]:
    """Revenue trend.

    With no criteria the trend is every month that has orders. Otherwise it is
    the twelve months of the target year, ignoring the month criterion so the
    selected month stays visible next to its neighbours.
    """
    orders: pd.DataFrame = ctx.get("orders", pd.DataFrame())
    today, taxonomy = ctx["today"], ctx["taxonomy"]
    if not filters.is_active:
        series = aggregate_revenue_by_month(orders, today=today, taxonomy=taxonomy)
    else:
        scoped = filter_records(orders, filters.without("month"), today=today, taxonomy=taxonomy)
        series = aggregate_monthly_revenue(scoped, ctx["target_year"], today=today, taxonomy=taxonomy)
    return {"filters": asdict(filters), "gap_filled": filters.is_active, "series": series}


def compute_sales_dashboard(filters: FilterCriteria, ctx: Dict[str, Any]) -> Dict[str, Any]:
    """Full sales page payload.

    Every breakdown is computed over the orders matching all criteria except
    the breakdown's own dimension, so clicking a segment narrows the other
    widgets while its siblings remain selectable.
    """
    orders: pd.DataFrame = ctx.get("orders", pd.DataFrame())
    filtered: pd.DataFrame = ctx.get("filtered_orders", pd.DataFrame())
    today, taxonomy = ctx["today"], ctx["taxonomy"]

    def scoped(*dims: str) -> pd.DataFrame:
        return filter_records(orders, filters.without(*dims), today=today, taxonomy=taxonomy)

    branch_revenue = aggregate_branch_revenue(scoped("branch"), today=today, taxonomy=taxonomy)
    monthly = compute_monthly_revenue(filters, ctx)

    charts: Dict[str, Any] = {}
    if not orders.empty:
        charts = {
            "branch_revenue": branch_revenue_chart(branch_revenue),
            "monthly_revenue": monthly_revenue_chart(monthly["series"]),
        }

    return {
        "filters": asdict(filters),
        "as_of": today.isoformat(),
        "totals": aggregate_totals(filtered, today=today, taxonomy=taxonomy),
        "status_breakdown": aggregate_status_breakdown(scoped("status"), today=today, taxonomy=taxonomy),
        "collection_breakdown": aggregate_collection_breakdown(scoped("collection"), today=today, taxonomy=taxonomy),
        "branch_revenue": branch_revenue,
        "department_breakdown": aggregate_department_breakdown(
            scoped("department", "category"), today=today, taxonomy=taxonomy
        ),
        "department_tree": aggregate_department_tree(scoped("department", "category"), today=today, taxonomy=taxonomy),
        "monthly_revenue": monthly["series"],
        "orders": order_table(filtered, limit=ctx.get("table_limit", 50), today=today, taxonomy=taxonomy),
        "charts": charts,
    }
