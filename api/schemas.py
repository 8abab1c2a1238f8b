from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, Field


class FilterCriteriaModel(BaseModel):
    status: Optional[str] = None
    collection: Optional[str] = None
    branch: Optional[str] = None
    month: Optional[str] = Field(default=None, description='Month bucket, e.g. "Mar 2025"')
    year: Optional[Union[int, str]] = Field(default=None, description='Calendar year or "all"')
    department: Optional[str] = None
    category: Optional[str] = None


class MetaFiltersResponse(BaseModel):
    statuses: List[str]
    collections: List[str]
    branches: List[str]
    departments: List[str]
    categories: List[str]
    months: List[str]
    years: List[int]
