from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

import pandas as pd

from salesboard.config import system_clock
from salesboard.records import annotate, is_annotated, month_key, month_label, normalize_records
from salesboard.status import COMPLETED, STATUS_CATEGORIES, STATUS_PRIORITY, is_settled
from salesboard.taxonomy import DEFAULT_TAXONOMY, Taxonomy

UNKNOWN = "Unknown"
TABLE_COLUMNS = (
    "record_id",
    "customer_name",
    "order_date",
    "due_date",
    "transaction_date",
    "status",
    "status_category",
    "branch",
    "collection",
    "department",
    "amount",
)


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def share_pct(part: float, total: float) -> int:
    """Whole-number percentage of ``part`` in ``total``, 0 for an empty total."""
    if not total:
        return 0
    return int(round_half_up(float(part) / float(total) * 100) or 0)


def _annotated(df: pd.DataFrame, today: Optional[date], taxonomy: Taxonomy) -> pd.DataFrame:
    if is_annotated(df):
        return df
    return annotate(df, today=today or system_clock(), taxonomy=taxonomy)


def _by_value_desc(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(rows, key=lambda r: r["value"], reverse=True)


def aggregate_totals(df: pd.DataFrame, *, today: Optional[date] = None, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> Dict[str, Any]:
    df = _annotated(df, today, taxonomy)
    open_orders = df[df["status_category"] != COMPLETED]
    return {
        "count": int(len(df)),
        "revenue": float(df["amount"].sum()),
        "non_completed_count": int(len(open_orders)),
        "non_completed_revenue": float(open_orders["amount"].sum()),
    }


def aggregate_status_breakdown(
    df: pd.DataFrame, *, today: Optional[date] = None, taxonomy: Taxonomy = DEFAULT_TAXONOMY
) -> Dict[str, Any]:
    """Counts per status category, every category present, in priority order."""
    df = _annotated(df, today, taxonomy)
    total = int(len(df))
    counts = df["status_category"].value_counts().reindex(list(STATUS_CATEGORIES), fill_value=0)
    breakdown = [
        {"status": status, "count": int(counts[status]), "percentage": share_pct(counts[status], total)}
        for status in STATUS_PRIORITY
    ]
    return {"total": total, "breakdown": breakdown}


def aggregate_collection_breakdown(
    df: pd.DataFrame,
    *,
    known_only: bool = True,
    today: Optional[date] = None,
    taxonomy: Taxonomy = DEFAULT_TAXONOMY,
) -> List[Dict[str, Any]]:
    """Record counts per collection tag.

    With ``known_only`` the fixed collection set is reported (zero-filled);
    otherwise every observed tag is reported in first-seen order, untagged
    records under ``Unknown``.
    """
    df = _annotated(df, today, taxonomy)
    total = int(len(df))
    if known_only:
        names = list(taxonomy.collections)
        counts = df["collection"].value_counts().reindex(names, fill_value=0)
    else:
        tags = df["collection"].fillna(UNKNOWN)
        names = [str(t) for t in pd.unique(tags)]
        counts = tags.value_counts()
    return [{"name": n, "value": int(counts[n]), "percentage": share_pct(counts[n], total)} for n in names]


def aggregate_branch_revenue(
    df: pd.DataFrame, *, today: Optional[date] = None, taxonomy: Taxonomy = DEFAULT_TAXONOMY
) -> List[Dict[str, Any]]:
    """Revenue per branch; every known branch is listed, unknown prefixes follow."""
    df = _annotated(df, today, taxonomy)
    sums = df.groupby("branch", sort=False)["amount"].sum()
    known = list(taxonomy.branches)
    names = known + [str(b) for b in sums.index if b not in known]
    return [{"name": n, "value": float(sums.get(n, 0.0))} for n in names]


def _department_scope(df: pd.DataFrame, taxonomy: Taxonomy) -> pd.DataFrame:
    return df[df["collection"].isin(list(taxonomy.collections))]


def aggregate_department_breakdown(
    df: pd.DataFrame, *, today: Optional[date] = None, taxonomy: Taxonomy = DEFAULT_TAXONOMY
) -> List[Dict[str, Any]]:
    """Flat revenue per department, largest first, empty departments dropped.

    Percentages are shares of the revenue of every record in the known
    collections, including records whose department is unmapped.
    """
    scope = _department_scope(_annotated(df, today, taxonomy), taxonomy)
    total = float(scope["amount"].sum())
    sums = scope.groupby("department_name")["amount"].sum().reindex(list(taxonomy.departments), fill_value=0.0)
    rows = [
        {"name": name, "value": float(value), "percentage": share_pct(value, total)}
        for name, value in sums.items()
        if value > 0
    ]
    return _by_value_desc(rows)


def aggregate_department_tree(
    df: pd.DataFrame, *, today: Optional[date] = None, taxonomy: Taxonomy = DEFAULT_TAXONOMY
) -> List[Dict[str, Any]]:
    """Department -> category revenue tree.

    Each child's percentage is its share of the parent department, each
    parent's percentage its share of the whole tree.
    """
    scope = _department_scope(_annotated(df, today, taxonomy), taxonomy)
    sums = scope.groupby(["department_name", "department_category"])["amount"].sum()
    lookup = {key: float(value) for key, value in sums.items()}

    tree: List[Dict[str, Any]] = []
    for dept in taxonomy.departments:
        children = [
            {"name": cat, "value": lookup.get((dept, cat), 0.0)}
            for cat in taxonomy.categories
            if lookup.get((dept, cat), 0.0) > 0
        ]
        parent_value = sum(c["value"] for c in children)
        if parent_value <= 0:
            continue
        for child in children:
            child["percentage"] = share_pct(child["value"], parent_value)
        tree.append({"name": dept, "value": parent_value, "children": _by_value_desc(children)})

    grand_total = sum(node["value"] for node in tree)
    for node in tree:
        node["percentage"] = share_pct(node["value"], grand_total)
    return _by_value_desc(tree)


def aggregate_monthly_revenue(
    df: pd.DataFrame,
    year: Optional[int] = None,
    *,
    today: Optional[date] = None,
    taxonomy: Taxonomy = DEFAULT_TAXONOMY,
) -> List[Dict[str, Any]]:
    """Twelve ``{month, revenue}`` points, January to December of ``year``.

    ``year`` defaults to the current year; months without records are 0.
    Records without a transaction date are ignored.
    """
    today = today or system_clock()
    df = _annotated(df, today, taxonomy)
    target = int(year) if year is not None else today.year
    sums = df.dropna(subset=["month_key"]).groupby("month_key")["amount"].sum()
    return [
        {"month": month_label(target, m), "revenue": float(sums.get(month_key(target, m), 0.0))}
        for m in range(1, 13)
    ]


def aggregate_revenue_by_month(
    df: pd.DataFrame, *, today: Optional[date] = None, taxonomy: Taxonomy = DEFAULT_TAXONOMY
) -> List[Dict[str, Any]]:
    """Revenue for every month that has dated records, oldest first, no gap filling."""
    df = _annotated(df, today, taxonomy)
    sums = df.dropna(subset=["month_key"]).groupby("month_key")["amount"].sum().sort_index()
    out = []
    for key, value in sums.items():
        y, m = (int(part) for part in str(key).split("-"))
        out.append({"month": month_label(y, m), "revenue": float(value)})
    return out


def aggregate_invoice_totals(df: pd.DataFrame) -> Dict[str, Any]:
    df = normalize_records(df)
    paid_mask = df["status"].apply(is_settled).astype(bool) if not df.empty else pd.Series(dtype=bool)
    total_amount = float(df["amount"].sum())
    paid_amount = float(df["paid_amount"].sum())
    paid_count = int(paid_mask.sum())
    return {
        "count": int(len(df)),
        "paid_count": paid_count,
        "outstanding_count": int(len(df)) - paid_count,
        "total_amount": total_amount,
        "paid_amount": paid_amount,
        "outstanding_amount": total_amount - paid_amount,
    }


def aggregate_raw_status_breakdown(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Invoice statuses as written in the source, with count and amount each."""
    df = normalize_records(df)
    if df.empty:
        return []
    grouped = (
        df.assign(status_label=df["status"].fillna(UNKNOWN))
        .groupby("status_label", sort=False)
        .agg(count=("amount", "size"), amount=("amount", "sum"))
    )
    return [{"status": str(s), "count": int(r["count"]), "amount": float(r["amount"])} for s, r in grouped.iterrows()]


def aggregate_department_counts(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Record count per raw department label, most frequent first."""
    df = normalize_records(df)
    if df.empty:
        return []
    counts = df["department"].fillna(UNKNOWN).value_counts(sort=False)
    total = int(len(df))
    rows = [{"name": str(n), "count": int(c), "percentage": share_pct(c, total)} for n, c in counts.items()]
    return sorted(rows, key=lambda r: r["count"], reverse=True)


def _date_str(value: object) -> Optional[str]:
    if value is None or pd.isna(value):
        return None
    return pd.Timestamp(value).strftime("%Y-%m-%d")


def order_table(
    df: pd.DataFrame,
    *,
    limit: int = 50,
    today: Optional[date] = None,
    taxonomy: Taxonomy = DEFAULT_TAXONOMY,
) -> List[Dict[str, Any]]:
    """Open records first, then oldest order date first, at most ``limit`` rows."""
    df = _annotated(df, today, taxonomy)
    if df.empty:
        return []
    ordered = (
        df.assign(_completed=df["status_category"] == COMPLETED)
        .sort_values(["_completed", "order_date"], na_position="last", kind="stable")
        .head(max(0, int(limit)))
    )
    rows = []
    for rec in ordered[list(TABLE_COLUMNS)].to_dict(orient="records"):
        for col in ("order_date", "due_date", "transaction_date"):
            rec[col] = _date_str(rec[col])
        rec["amount"] = float(rec["amount"])
        rows.append(rec)
    return rows
