from datetime import date

import pytest

from salesboard.records import annotate, orders_frame

TODAY = date(2025, 6, 15)

ORDER_DOCS = [
    {
        "order_id": "SO-001",
        "customer_name": "PT Maju Jaya",
        "order_date": "2025-01-10",
        "delivery_date": "2025-01-20",
        "transaction_date": "2025-01-10",
        "status": "Completed",
        "base_total": 25_000_000,
        "cost_center": "JKT001",
        "collection": "Industry",
        "department": "UNIT BLOWER - IDS",
    },
    {
        "order_id": "SO-002",
        "customer_name": "CV Sejahtera",
        "order_date": "2025-03-01",
        "delivery_date": "2025-03-15",
        "transaction_date": "2025-03-15",
        "status": "To Deliver and Bill",
        "base_total": 18_000_000,
        "cost_center": "SBY002",
        "collection": "Industry",
        "department": "SPARE PART BLOWER - IDS",
    },
    {
        "order_id": "SO-003",
        "customer_name": "UD Bersama",
        "order_date": "2025-06-01",
        "delivery_date": "2025-07-05",
        "transaction_date": "2025-06-02",
        "status": "To Deliver",
        "base_total": 15_000_000,
        "cost_center": "SMG003",
        "collection": "Industry",
        "department": "SERVICE COMPRESSOR - IDS",
    },
    {
        "order_id": "SO-004",
        "customer_name": "PT Sentosa",
        "order_date": "2025-02-05",
        "delivery_date": "2025-02-10",
        "transaction_date": "2025-03-20",
        "status": "To Bill",
        "base_total": 22_000_000,
        "cost_center": "SBY-PG",
        "collection": "Industry",
        "department": "UNIT COMPRESSOR - IDS",
    },
    {
        "order_id": "SO-005",
        "customer_name": "Bengkel Jaya",
        "order_date": "2025-04-11",
        "delivery_date": "2025-08-01",
        "transaction_date": "2025-04-11",
        "status": "To Deliver and Bill",
        "base_total": 5_000_000,
        "cost_center": "JBR010",
        "collection": "Otomotive",
        "department": "OTOMOTIF JEMBER - IDS",
    },
    {
        "order_id": "SO-006",
        "customer_name": "PT Lama",
        "order_date": "2024-11-20",
        "delivery_date": "2024-12-01",
        "transaction_date": "2024-11-20",
        "status": "Draft",
        "base_total": None,
        "cost_center": "XYZ999",
        "collection": "Industry",
        "department": "",
    },
    {
        "order_id": "SO-007",
        "customer_name": "PT Tanpa Tanggal",
        "order_date": None,
        "delivery_date": None,
        "transaction_date": None,
        "status": "To Bill",
        "base_total": 1_000_000,
        "cost_center": None,
        "collection": None,
        "department": "MYSTERY - IDS",
    },
]

INVOICE_DOCS = [
    {
        "invoice_id": "SI-001",
        "customer_name": "PT Maju Jaya",
        "invoice_date": "2025-02-01",
        "due_date": "2025-03-01",
        "status": "Paid",
        "total_amount": 10_000_000,
        "paid_amount": 10_000_000,
        "cost_center": "JKT001",
        "collection": "Industry",
        "department": "UNIT BLOWER - IDS",
    },
    {
        "invoice_id": "SI-002",
        "customer_name": "CV Sejahtera",
        "invoice_date": "2025-02-15",
        "due_date": "2025-03-15",
        "status": "Unpaid",
        "total_amount": 4_000_000,
        "paid_amount": 1_000_000,
        "cost_center": "SBY002",
        "collection": "Otomotive",
        "department": "OTOMOTIF JEMBER - IDS",
    },
    {
        "invoice_id": "SI-003",
        "customer_name": "UD Bersama",
        "invoice_date": "2025-05-10",
        "due_date": "2025-06-10",
        "status": None,
        "total_amount": 6_000_000,
        "paid_amount": None,
        "cost_center": "MDN001",
        "collection": None,
        "department": None,
    },
]


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def order_docs():
    return [dict(d) for d in ORDER_DOCS]


@pytest.fixture
def invoice_docs():
    return [dict(d) for d in INVOICE_DOCS]


@pytest.fixture
def orders(order_docs):
    return orders_frame(order_docs)


@pytest.fixture
def annotated_orders(orders):
    return annotate(orders, today=TODAY)
