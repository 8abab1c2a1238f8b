import pandas as pd
import pytest

from salesboard.aggregations import (
    aggregate_branch_revenue,
    aggregate_collection_breakdown,
    aggregate_department_breakdown,
    aggregate_department_counts,
    aggregate_department_tree,
    aggregate_invoice_totals,
    aggregate_monthly_revenue,
    aggregate_raw_status_breakdown,
    aggregate_revenue_by_month,
    aggregate_status_breakdown,
    aggregate_totals,
    order_table,
    round_half_up,
    share_pct,
)
from salesboard.records import invoices_frame, orders_frame

from conftest import TODAY

M = 1_000_000


def test_totals(annotated_orders):
    assert aggregate_totals(annotated_orders) == {
        "count": 7,
        "revenue": 86 * M,
        "non_completed_count": 6,
        "non_completed_revenue": 61 * M,
    }


def test_status_breakdown_in_priority_order(annotated_orders):
    out = aggregate_status_breakdown(annotated_orders)
    assert out["total"] == 7
    assert [(r["status"], r["count"], r["percentage"]) for r in out["breakdown"]] == [
        ("Overdue", 1, 14),
        ("To Deliver and Bill", 2, 29),
        ("To Deliver", 1, 14),
        ("To Bill", 2, 29),
        ("Completed", 1, 14),
    ]
    assert sum(r["count"] for r in out["breakdown"]) == out["total"]


def test_status_breakdown_reports_every_category_on_empty_input():
    out = aggregate_status_breakdown(orders_frame([]), today=TODAY)
    assert out["total"] == 0
    assert len(out["breakdown"]) == 5
    assert all(r["count"] == 0 and r["percentage"] == 0 for r in out["breakdown"])


def test_collection_breakdown(annotated_orders):
    assert aggregate_collection_breakdown(annotated_orders) == [
        {"name": "Industry", "value": 5, "percentage": 71},
        {"name": "Otomotive", "value": 1, "percentage": 14},
    ]


def test_collection_breakdown_with_unknown_tags(annotated_orders):
    out = aggregate_collection_breakdown(annotated_orders, known_only=False)
    assert [(r["name"], r["value"]) for r in out] == [("Industry", 5), ("Otomotive", 1), ("Unknown", 1)]


def test_branch_revenue_lists_known_branches_then_unknown(annotated_orders):
    out = aggregate_branch_revenue(annotated_orders)
    names = [r["name"] for r in out]
    assert names == [
        "JAKARTA",
        "SURABAYA",
        "SEMARANG",
        "MAKASSAR",
        "MEDAN",
        "JEMBER",
        "LAMPUNG",
        "SURABAYA-PG",
        "XYZ",
        "",
    ]
    values = {r["name"]: r["value"] for r in out}
    assert values["SURABAYA"] == 18 * M
    assert values["SURABAYA-PG"] == 22 * M
    assert values["MAKASSAR"] == 0.0
    assert values[""] == 1 * M
    assert sum(values.values()) == 86 * M


def test_department_breakdown(annotated_orders):
    out = aggregate_department_breakdown(annotated_orders)
    assert out == [
        {"name": "BLOWER", "value": 43 * M, "percentage": 51},
        {"name": "COMPRESSOR", "value": 37 * M, "percentage": 44},
        {"name": "OTOMOTIF", "value": 5 * M, "percentage": 6},
    ]


def test_department_tree(annotated_orders):
    tree = aggregate_department_tree(annotated_orders)
    assert [n["name"] for n in tree] == ["BLOWER", "COMPRESSOR", "OTOMOTIF"]
    blower = tree[0]
    assert blower["value"] == 43 * M
    assert blower["children"] == [
        {"name": "UNIT", "value": 25 * M, "percentage": 58},
        {"name": "SPARE PART", "value": 18 * M, "percentage": 42},
    ]
    compressor = tree[1]
    assert [(c["name"], c["percentage"]) for c in compressor["children"]] == [("UNIT", 59), ("SERVICE", 41)]
    assert tree[2]["children"] == [{"name": "SERVICE", "value": 5 * M, "percentage": 100}]
    for node in tree:
        assert node["value"] == sum(c["value"] for c in node["children"])
        assert abs(sum(c["percentage"] for c in node["children"]) - 100) <= 1
        assert all(c["value"] > 0 for c in node["children"])


def test_department_tree_empty():
    assert aggregate_department_tree(orders_frame([]), today=TODAY) == []
    assert aggregate_department_breakdown(orders_frame([]), today=TODAY) == []


def test_monthly_revenue_is_twelve_sorted_months(annotated_orders):
    out = aggregate_monthly_revenue(annotated_orders, 2025)
    assert [r["month"] for r in out] == [
        "Jan 2025", "Feb 2025", "Mar 2025", "Apr 2025", "May 2025", "Jun 2025",
        "Jul 2025", "Aug 2025", "Sep 2025", "Oct 2025", "Nov 2025", "Dec 2025",
    ]
    revenue = {r["month"]: r["revenue"] for r in out}
    assert revenue["Jan 2025"] == 25 * M
    assert revenue["Mar 2025"] == 40 * M
    assert revenue["Apr 2025"] == 5 * M
    assert revenue["Jun 2025"] == 15 * M
    assert revenue["Feb 2025"] == 0.0


def test_monthly_revenue_single_record():
    frame = orders_frame([{"order_id": "A", "transaction_date": "2025-03-15", "base_total": 1_000_000, "status": "To Bill"}])
    out = aggregate_monthly_revenue(frame, 2025, today=TODAY)
    assert out[2] == {"month": "Mar 2025", "revenue": 1_000_000.0}
    assert sum(r["revenue"] for r in out) == 1_000_000.0


def test_monthly_revenue_defaults_to_current_year(annotated_orders):
    out = aggregate_monthly_revenue(annotated_orders, today=TODAY)
    assert out[0]["month"] == "Jan 2025"


def test_revenue_by_month_is_unfilled(annotated_orders):
    out = aggregate_revenue_by_month(annotated_orders)
    assert [r["month"] for r in out] == ["Nov 2024", "Jan 2025", "Mar 2025", "Apr 2025", "Jun 2025"]
    assert out[0]["revenue"] == 0.0


def test_order_table_puts_open_orders_first(annotated_orders):
    rows = order_table(annotated_orders)
    assert [r["record_id"] for r in rows] == ["SO-006", "SO-004", "SO-002", "SO-005", "SO-003", "SO-007", "SO-001"]
    assert rows[0]["order_date"] == "2024-11-20"
    assert rows[5]["order_date"] is None
    assert rows[2]["status_category"] == "Overdue"


def test_order_table_limit(annotated_orders):
    assert len(order_table(annotated_orders, limit=3)) == 3
    assert order_table(annotated_orders, limit=0) == []


def test_invoice_totals(invoice_docs):
    out = aggregate_invoice_totals(invoices_frame(invoice_docs))
    assert out == {
        "count": 3,
        "paid_count": 1,
        "outstanding_count": 2,
        "total_amount": 20 * M,
        "paid_amount": 11 * M,
        "outstanding_amount": 9 * M,
    }


def test_invoice_totals_empty():
    out = aggregate_invoice_totals(invoices_frame([]))
    assert out["count"] == 0 and out["paid_count"] == 0 and out["total_amount"] == 0.0


def test_raw_status_breakdown(invoice_docs):
    out = aggregate_raw_status_breakdown(invoices_frame(invoice_docs))
    assert out == [
        {"status": "Paid", "count": 1, "amount": 10 * M},
        {"status": "Unpaid", "count": 1, "amount": 4 * M},
        {"status": "Unknown", "count": 1, "amount": 6 * M},
    ]


def test_department_counts(invoice_docs):
    out = aggregate_department_counts(invoices_frame(invoice_docs))
    assert {r["name"] for r in out} == {"UNIT BLOWER - IDS", "OTOMOTIF JEMBER - IDS", "Unknown"}
    assert all(r["count"] == 1 and r["percentage"] == 33 for r in out)


@pytest.mark.parametrize(
    "value, expected",
    [(2.5, 3.0), (3.5, 4.0), (-2.5, -3.0), (0.125, 0.0), (None, None), (float("nan"), None)],
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_share_pct():
    assert share_pct(1, 8) == 13
    assert share_pct(5, 0) == 0
    assert share_pct(0, 10) == 0


def test_inputs_are_not_mutated(annotated_orders):
    before = annotated_orders.copy()
    aggregate_department_tree(annotated_orders)
    order_table(annotated_orders)
    pd.testing.assert_frame_equal(annotated_orders, before)
