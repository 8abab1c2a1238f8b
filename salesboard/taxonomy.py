from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

import pandas as pd


BRANCH_CODES: Mapping[str, str] = MappingProxyType(
    {
        "JKT": "JAKARTA",
        "SBY": "SURABAYA",
        "SMG": "SEMARANG",
        "MKS": "MAKASSAR",
        "MDN": "MEDAN",
        "JBR": "JEMBER",
        "BDL": "LAMPUNG",
    }
)

# Exact cost-center values that win over prefix decoding.
SPECIAL_COST_CENTERS: Mapping[str, str] = MappingProxyType({"SBY-PG": "SURABAYA-PG"})

DEPARTMENT_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "CONDITION BASE MONITORING - IDS": "CONDITION BASE MONITORING",
        "ELECTRICAL PANEL - IDS": "ELECTRICAL PANEL",
        "FABRIKASI INDUSTRIAL BLOWER - IDS": "BLOWER",
        "FABRIKASI INDUSTRIAL COMPRESSOR - IDS": "COMPRESSOR",
        "FABRIKASI INDUSTRIAL VACUUM - IDS": "VACUUM",
        "GENERAL FABRIKASI INDUSTRIAL - IDS": "GENERAL INDUSTRI",
        "GENERAL INDUSTRI - IDS": "GENERAL INDUSTRI",
        "INDUSTRIAL REPAIR - IDS": "INDUSTRIAL REPAIR",
        "REWINDING - IDS": "REWINDING",
        "SERVICE BLOWER - IDS": "BLOWER",
        "SERVICE COMPRESSOR - IDS": "COMPRESSOR",
        "SERVICE VACUUM - IDS": "VACUUM",
        "SPARE PART BLOWER - IDS": "BLOWER",
        "SPARE PART COMPRESSOR - IDS": "COMPRESSOR",
        "SPARE PART VACUUM - IDS": "VACUUM",
        "UNIT BLOWER - IDS": "BLOWER",
        "UNIT COMPRESSOR - IDS": "COMPRESSOR",
        "UNIT VACUUM - IDS": "VACUUM",
    }
)

DEPARTMENT_CATEGORIES: Mapping[str, str] = MappingProxyType(
    {
        "CONDITION BASE MONITORING - IDS": "OTHER",
        "ELECTRICAL PANEL - IDS": "FABRIKASI",
        "FABRIKASI INDUSTRIAL BLOWER - IDS": "FABRIKASI",
        "FABRIKASI INDUSTRIAL COMPRESSOR - IDS": "FABRIKASI",
        "FABRIKASI INDUSTRIAL VACUUM - IDS": "FABRIKASI",
        "GENERAL FABRIKASI INDUSTRIAL - IDS": "FABRIKASI",
        "GENERAL INDUSTRI - IDS": "OTHER",
        "INDUSTRIAL REPAIR - IDS": "SERVICE",
        "OTOMOTIF BANYUWANGI - IDS": "SERVICE",
        "OTOMOTIF BONDOWOSO - IDS": "SERVICE",
        "OTOMOTIF JEMBER - IDS": "SERVICE",
        "OTOMOTIF LUMAJANG - IDS": "SERVICE",
        "OTOMOTIF PROBOLINGGO - IDS": "SERVICE",
        "REWINDING - IDS": "SERVICE",
        "SERVICE BLOWER - IDS": "SERVICE",
        "SERVICE COMPRESSOR - IDS": "SERVICE",
        "SERVICE VACUUM - IDS": "SERVICE",
        "SPARE PART BLOWER - IDS": "SPARE PART",
        "SPARE PART COMPRESSOR - IDS": "SPARE PART",
        "SPARE PART VACUUM - IDS": "SPARE PART",
        "UNIT BLOWER - IDS": "UNIT",
        "UNIT COMPRESSOR - IDS": "UNIT",
        "UNIT VACUUM - IDS": "UNIT",
    }
)

DEPARTMENTS: Tuple[str, ...] = (
    "CONDITION BASE MONITORING",
    "ELECTRICAL PANEL",
    "BLOWER",
    "COMPRESSOR",
    "VACUUM",
    "GENERAL INDUSTRI",
    "INDUSTRIAL REPAIR",
    "OTOMOTIF",
    "REWINDING",
)
CATEGORIES: Tuple[str, ...] = ("UNIT", "SPARE PART", "FABRIKASI", "SERVICE", "OTHER")
DEFAULT_CATEGORY = "OTHER"

INDUSTRY_COLLECTION = "Industry"
AUTOMOTIVE_COLLECTION = "Otomotive"
AUTOMOTIVE_DEPARTMENT = "OTOMOTIF"
COLLECTIONS: Tuple[str, ...] = (INDUSTRY_COLLECTION, AUTOMOTIVE_COLLECTION)


@dataclass(frozen=True)
class Taxonomy:
    """Lookup tables used to decode branches, departments and categories.

    Tables are read-only mappings; build a new instance to swap any of them.
    """

    branch_codes: Mapping[str, str] = field(default_factory=lambda: BRANCH_CODES)
    special_cost_centers: Mapping[str, str] = field(default_factory=lambda: SPECIAL_COST_CENTERS)
    department_names: Mapping[str, str] = field(default_factory=lambda: DEPARTMENT_NAMES)
    department_categories: Mapping[str, str] = field(default_factory=lambda: DEPARTMENT_CATEGORIES)
    departments: Tuple[str, ...] = DEPARTMENTS
    categories: Tuple[str, ...] = CATEGORIES
    collections: Tuple[str, ...] = COLLECTIONS
    automotive_collection: str = AUTOMOTIVE_COLLECTION
    automotive_department: str = AUTOMOTIVE_DEPARTMENT

    @property
    def branches(self) -> Tuple[str, ...]:
        named = list(self.branch_codes.values())
        extra = [b for b in self.special_cost_centers.values() if b not in named]
        return tuple(named + extra)


DEFAULT_TAXONOMY = Taxonomy()


def _clean(value: object) -> str:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value).strip()


def branch_of(cost_center: object, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> str:
    """Decode a cost-center code into a branch name.

    ``SBY-PG`` -> ``SURABAYA-PG``, ``JKT001`` -> ``JAKARTA``, ``XYZ999`` -> ``XYZ``.
    A missing cost center decodes to the empty prefix.
    """
    code = _clean(cost_center)
    if code in taxonomy.special_cost_centers:
        return taxonomy.special_cost_centers[code]
    prefix = code[:3].upper()
    return taxonomy.branch_codes.get(prefix, prefix)


def department_of(
    raw_department: object,
    collection: Optional[object] = None,
    taxonomy: Taxonomy = DEFAULT_TAXONOMY,
) -> Optional[str]:
    """Canonical department name, or ``None`` when the label is unmapped.

    Records tagged with the automotive collection always belong to the
    automotive department, whatever their literal label says.
    """
    if _clean(collection) == taxonomy.automotive_collection:
        return taxonomy.automotive_department
    label = _clean(raw_department)
    if not label:
        return None
    return taxonomy.department_names.get(label)


def category_of(raw_department: object, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> str:
    label = _clean(raw_department)
    if not label:
        return DEFAULT_CATEGORY
    return taxonomy.department_categories.get(label, DEFAULT_CATEGORY)
