from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from salesboard.config import Settings, load_settings
from salesboard.taxonomy import AUTOMOTIVE_COLLECTION, INDUSTRY_COLLECTION

logger = logging.getLogger(__name__)

# (collection name, collection tag, forced cost center)
ORDER_COLLECTIONS: Tuple[Tuple[str, str, Optional[str]], ...] = (
    ("erp_so", INDUSTRY_COLLECTION, None),
    ("erp_so_oto", AUTOMOTIVE_COLLECTION, None),
    ("erp_so_pg", INDUSTRY_COLLECTION, "SBY-PG"),
)
INVOICE_COLLECTION = "erp_si"


class RetrievalError(Exception):
    """The record source could not be reached or read."""

    def __init__(self, message: str, *, collection: Optional[str] = None):
        super().__init__(message)
        self.collection = collection


class RecordSource(Protocol):
    def fetch_orders(self) -> List[Dict[str, Any]]: ...

    def fetch_invoices(self) -> List[Dict[str, Any]]: ...


class MongoRecordSource:
    """Bulk reads of sales orders and invoices from the ERP document store."""

    def __init__(self, db: Any):
        self.db = db

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "MongoRecordSource":
        settings = settings or load_settings()
        try:
            client: MongoClient = MongoClient(settings.mongodb_uri)
            db = client[settings.mongodb_db_name]
        except PyMongoError as exc:
            logger.error("Connecting to %s failed: %s", settings.mongodb_db_name, exc)
            raise RetrievalError(f"Failed to connect to database {settings.mongodb_db_name}") from exc
        return cls(db)

    def _read(self, name: str) -> List[Dict[str, Any]]:
        try:
            docs = list(self.db[name].find({}, {"_id": 0}))
        except PyMongoError as exc:
            logger.error("Reading collection %s failed: %s", name, exc)
            raise RetrievalError(f"Failed to read collection {name}", collection=name) from exc
        logger.debug("Read %d documents from %s", len(docs), name)
        return docs

    def fetch_orders(self) -> List[Dict[str, Any]]:
        orders: List[Dict[str, Any]] = []
        for name, tag, cost_center in ORDER_COLLECTIONS:
            for doc in self._read(name):
                doc = dict(doc, collection=tag)
                if cost_center is not None:
                    doc["cost_center"] = cost_center
                orders.append(doc)
        logger.info("Fetched %d sales orders", len(orders))
        return orders

    def fetch_invoices(self) -> List[Dict[str, Any]]:
        invoices = self._read(INVOICE_COLLECTION)
        logger.info("Fetched %d invoices", len(invoices))
        return invoices


class StaticRecordSource:
    """In-memory source, for fixtures and offline runs."""

    def __init__(self, orders: Optional[List[Dict[str, Any]]] = None, invoices: Optional[List[Dict[str, Any]]] = None):
        self.orders = list(orders or [])
        self.invoices = list(invoices or [])

    def fetch_orders(self) -> List[Dict[str, Any]]:
        return [dict(o) for o in self.orders]

    def fetch_invoices(self) -> List[Dict[str, Any]]:
        return [dict(i) for i in self.invoices]
