from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Tuple

import pandas as pd

OVERDUE = "Overdue"
TO_DELIVER_AND_BILL = "To Deliver and Bill"
TO_DELIVER = "To Deliver"
TO_BILL = "To Bill"
COMPLETED = "Completed"

# Seed order for breakdowns.
STATUS_CATEGORIES: Tuple[str, ...] = (TO_DELIVER_AND_BILL, TO_DELIVER, TO_BILL, COMPLETED, OVERDUE)
STATUS_PRIORITY: Tuple[str, ...] = (OVERDUE, TO_DELIVER_AND_BILL, TO_DELIVER, TO_BILL, COMPLETED)
DEFAULT_STATUS = TO_DELIVER_AND_BILL

_COMPLETED_TOKENS = ("complete", "delivered", "finished")


def _as_day(value: object) -> Optional[date]:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return None
    return ts.date()


def classify_status(raw_status: object, due_date: object, today: date) -> str:
    """Map a raw order/invoice status onto one of the five status categories.

    Rules are evaluated in order and the first match wins:

    1. an open "deliver" status whose delivery/due date lies before ``today``
       is ``Overdue``
    2. "complete", "delivered" or "finished" -> ``Completed``
    3. "deliver" and "bill" -> ``To Deliver and Bill``
    4. "deliver" -> ``To Deliver``
    5. "bill" -> ``To Bill``
    6. anything else (including an empty status) -> ``To Deliver and Bill``

    Matching is a case-insensitive substring test. Both dates are compared at
    day precision.
    """
    status = "" if raw_status is None or (not isinstance(raw_status, str) and pd.isna(raw_status)) else str(raw_status).lower()
    due = _as_day(due_date)
    ref = _as_day(today)

    if due is not None and ref is not None and "deliver" in status and due < ref:
        return OVERDUE
    if any(token in status for token in _COMPLETED_TOKENS):
        return COMPLETED
    if "deliver" in status and "bill" in status:
        return TO_DELIVER_AND_BILL
    if "deliver" in status:
        return TO_DELIVER
    if "bill" in status:
        return TO_BILL
    return DEFAULT_STATUS


def classify_statuses(df: pd.DataFrame, today: date, *, status_col: str = "status", due_col: str = "due_date") -> pd.Series:
    """Column form of :func:`classify_status` for a record frame."""
    if df.empty:
        return pd.Series(dtype="object", index=df.index)
    statuses = df[status_col] if status_col in df.columns else pd.Series(None, index=df.index, dtype="object")
    dues = df[due_col] if due_col in df.columns else pd.Series(pd.NaT, index=df.index)
    return pd.Series(
        [classify_status(s, d, today) for s, d in zip(statuses, dues)],
        index=df.index,
        dtype="object",
    )


def is_settled(raw_status: object) -> bool:
    """Invoice settlement test: paid or complete, but never "unpaid"."""
    if raw_status is None or (not isinstance(raw_status, str) and pd.isna(raw_status)):
        return False
    status = str(raw_status).lower()
    if "unpaid" in status:
        return False
    return "paid" in status or "complete" in status
