"""Record frames: normalisation of raw order/invoice documents plus derived columns."""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from salesboard.status import classify_statuses
from salesboard.taxonomy import DEFAULT_TAXONOMY, Taxonomy, branch_of, category_of, department_of

TEXT_COLUMNS: Tuple[str, ...] = ("record_id", "customer_name", "status", "cost_center", "collection", "department")
DATE_COLUMNS: Tuple[str, ...] = ("order_date", "due_date", "transaction_date")
AMOUNT_COLUMNS: Tuple[str, ...] = ("amount", "paid_amount")
RECORD_COLUMNS: Tuple[str, ...] = TEXT_COLUMNS[:2] + DATE_COLUMNS + AMOUNT_COLUMNS + TEXT_COLUMNS[2:]

DERIVED_COLUMNS: Tuple[str, ...] = (
    "status_category",
    "branch",
    "department_name",
    "department_category",
    "month_key",
    "month_label",
    "year",
)

MONTH_ABBR: Tuple[str, ...] = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Source field names per record kind, first present wins.
ORDER_FIELDS: Mapping[str, Tuple[str, ...]] = {
    "record_id": ("order_id", "name"),
    "customer_name": ("customer_name",),
    "order_date": ("order_date", "po_date"),
    "due_date": ("delivery_date",),
    "transaction_date": ("transaction_date",),
    "amount": ("base_total", "total_amount"),
    "paid_amount": (),
    "status": ("status",),
    "cost_center": ("cost_center",),
    "collection": ("collection",),
    "department": ("department",),
}
INVOICE_FIELDS: Mapping[str, Tuple[str, ...]] = {
    "record_id": ("invoice_id", "order_id"),
    "customer_name": ("customer_name",),
    "order_date": ("invoice_date",),
    "due_date": ("due_date",),
    "transaction_date": ("invoice_date",),
    "amount": ("total_amount",),
    "paid_amount": ("paid_amount",),
    "status": ("status",),
    "cost_center": ("cost_center",),
    "collection": ("collection",),
    "department": ("department",),
}


def month_label(year: int, month: int) -> str:
    """``(2025, 3)`` -> ``"Mar 2025"``."""
    return f"{MONTH_ABBR[int(month) - 1]} {int(year)}"


def month_key(year: int, month: int) -> str:
    return f"{int(year):04d}-{int(month):02d}"


def clean_text(series: pd.Series) -> pd.Series:
    series = series.astype("string").str.strip()
    series = series.replace({"nan": pd.NA, "None": pd.NA, "": pd.NA})
    return series.astype(object).where(series.notna(), None)


def _wall_clock(value: object) -> pd.Timestamp:
    """Parse ``value`` keeping its local wall-clock time; offsets are dropped, not applied."""
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError, OverflowError):
        return pd.NaT
    if ts is pd.NaT or pd.isna(ts):
        return pd.NaT
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts


def to_naive_datetime(series: pd.Series) -> pd.Series:
    if series.empty:
        return pd.Series(pd.NaT, index=series.index, dtype="datetime64[ns]")
    return pd.Series([_wall_clock(v) for v in series], index=series.index, dtype="datetime64[ns]")


def to_amount(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce").fillna(0.0).astype(float)


def normalize_records(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``df`` with every record column present and typed.

    Missing text becomes ``None``, unparseable dates ``NaT`` and missing
    amounts ``0.0``. Columns outside the record schema are kept as-is.
    """
    out = df.copy()
    for col in RECORD_COLUMNS:
        if col not in out.columns:
            out[col] = None
    for col in TEXT_COLUMNS:
        out[col] = clean_text(out[col])
    for col in DATE_COLUMNS:
        out[col] = to_naive_datetime(out[col])
    for col in AMOUNT_COLUMNS:
        out[col] = to_amount(out[col])
    return out


def _first_present(raw: pd.DataFrame, names: Iterable[str]) -> pd.Series:
    out: Optional[pd.Series] = None
    for name in names:
        if name not in raw.columns:
            continue
        col = raw[name].astype(object).where(raw[name].notna(), None)
        out = col if out is None else out.where(out.notna(), col)
    if out is None:
        return pd.Series(None, index=raw.index, dtype=object)
    return out


def _records_frame(docs: Iterable[Mapping[str, object]], fields: Mapping[str, Tuple[str, ...]]) -> pd.DataFrame:
    raw = pd.DataFrame(list(docs))
    frame = pd.DataFrame({col: _first_present(raw, fields[col]) for col in RECORD_COLUMNS}, index=raw.index)
    return normalize_records(frame.reset_index(drop=True))


def orders_frame(docs: Iterable[Mapping[str, object]]) -> pd.DataFrame:
    """Build a record frame from raw sales-order documents."""
    return _records_frame(docs, ORDER_FIELDS)


def invoices_frame(docs: Iterable[Mapping[str, object]]) -> pd.DataFrame:
    """Build a record frame from raw invoice documents."""
    return _records_frame(docs, INVOICE_FIELDS)


def is_annotated(df: pd.DataFrame) -> bool:
    return set(DERIVED_COLUMNS).issubset(df.columns)


def annotate(df: pd.DataFrame, *, today: date, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> pd.DataFrame:
    """Attach the derived columns every filter and aggregation reads.

    Derived values are computed once per batch; predicates compare against them
    instead of the raw fields.
    """
    out = normalize_records(df)
    out["status_category"] = classify_statuses(out, today)
    out["branch"] = pd.Series([branch_of(c, taxonomy) for c in out["cost_center"]], index=out.index, dtype=object)
    out["department_name"] = pd.Series(
        [department_of(d, c, taxonomy) for d, c in zip(out["department"], out["collection"])],
        index=out.index,
        dtype=object,
    )
    out["department_category"] = pd.Series([category_of(d, taxonomy) for d in out["department"]], index=out.index, dtype=object)

    tx = out["transaction_date"]
    has_date = tx.notna()
    years = tx.dt.year
    months = tx.dt.month
    out["month_key"] = pd.Series(
        [month_key(y, m) if ok else None for y, m, ok in zip(years, months, has_date)], index=out.index, dtype=object
    )
    out["month_label"] = pd.Series(
        [month_label(y, m) if ok else None for y, m, ok in zip(years, months, has_date)], index=out.index, dtype=object
    )
    out["year"] = years.astype("Int64")
    return out


def unique_values(df: pd.DataFrame, col: str) -> List[str]:
    if df.empty or col not in df.columns:
        return []
    return sorted(str(v) for v in df[col].dropna().unique())
