from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import date
from typing import Optional

import pandas as pd

from salesboard.config import system_clock
from salesboard.records import annotate, is_annotated
from salesboard.taxonomy import DEFAULT_TAXONOMY, Taxonomy

DIMENSIONS = ("status", "collection", "branch", "month", "year", "department", "category")


@dataclass(frozen=True)
class FilterCriteria:
    status: Optional[str] = None
    collection: Optional[str] = None
    branch: Optional[str] = None
    month: Optional[str] = None
    year: Optional[int] = None
    department: Optional[str] = None
    category: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return any(getattr(self, f.name) is not None for f in fields(self))

    def without(self, *dimensions: str) -> "FilterCriteria":
        """Copy with the named dimensions cleared."""
        return replace(self, **{d: None for d in dimensions})

    def toggle(self, dimension: str, value: object) -> "FilterCriteria":
        """Click-to-filter selection: selecting the active value clears it."""
        if dimension not in DIMENSIONS:
            raise ValueError(f"Unknown filter dimension: {dimension}")
        new_value = _clean_year(value) if dimension == "year" else _clean_str(value)
        if getattr(self, dimension) == new_value:
            new_value = None
        return replace(self, **{dimension: new_value})


def _clean_str(value: object) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    if not s or s.lower() == "all":
        return None
    return s


def _clean_year(value: object) -> Optional[int]:
    s = _clean_str(value)
    if s is None:
        return None
    try:
        return int(s)
    except ValueError:
        return None


def normalize_filters(raw: Optional[dict]) -> FilterCriteria:
    raw = raw or {}
    category = raw.get("category")
    if category is None:
        # Older callers name the department-category dimension after the cost center.
        category = raw.get("cost_center_category")
    return FilterCriteria(
        status=_clean_str(raw.get("status")),
        collection=_clean_str(raw.get("collection")),
        branch=_clean_str(raw.get("branch")),
        month=_clean_str(raw.get("month")),
        year=_clean_year(raw.get("year")),
        department=_clean_str(raw.get("department")),
        category=_clean_str(category),
    )


def filter_records(
    df: pd.DataFrame,
    criteria: FilterCriteria,
    *,
    today: Optional[date] = None,
    taxonomy: Taxonomy = DEFAULT_TAXONOMY,
) -> pd.DataFrame:
    """Rows of ``df`` passing every active criterion.

    Unannotated frames are annotated first. Rows missing a value an active
    criterion needs (no transaction date under a month/year filter, no mapped
    department under a department filter) never match.
    """
    if not is_annotated(df):
        df = annotate(df, today=today or system_clock(), taxonomy=taxonomy)
    if df.empty or not criteria.is_active:
        return df.copy()

    mask = pd.Series(True, index=df.index)
    if criteria.collection is not None:
        mask &= df["collection"] == criteria.collection
    if criteria.status is not None:
        mask &= df["status_category"] == criteria.status
    if criteria.branch is not None:
        mask &= df["branch"] == criteria.branch
    if criteria.month is not None:
        mask &= df["month_label"] == criteria.month
    if criteria.year is not None:
        mask &= df["year"].eq(criteria.year).fillna(False).astype(bool)
    if criteria.department is not None:
        # department_name resolves automotive-collection rows to the automotive department.
        mask &= df["department_name"] == criteria.department
    if criteria.category is not None:
        mask &= df["department_category"] == criteria.category
    return df[mask].copy()
