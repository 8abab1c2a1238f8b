import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ConfigurationError

from api import main
from salesboard import source
from salesboard.config import system_clock
from salesboard.source import RetrievalError, StaticRecordSource

from conftest import TODAY


@pytest.fixture
def client(order_docs, invoice_docs):
    main.app.state.source = StaticRecordSource(order_docs, invoice_docs)
    main.app.state.clock = lambda: TODAY
    main._cached_batch.cache_clear()
    yield TestClient(main.app)
    main._cached_batch.cache_clear()
    main.app.state.source = None
    main.app.state.clock = system_clock


def test_meta_filters(client):
    res = client.get("/meta/filters")
    assert res.status_code == 200
    body = res.json()
    assert body["statuses"][0] == "Overdue"
    assert body["years"] == [2024, 2025]


def test_sales_stats(client):
    res = client.post("/sales/stats", json={})
    assert res.status_code == 200
    assert res.json()["totals"]["count"] == 7
    assert res.json()["totals"]["revenue"] == 86_000_000


def test_sales_with_filters(client):
    res = client.post("/sales", json={"status": "Overdue", "year": "all"})
    assert res.status_code == 200
    body = res.json()
    assert body["filters"]["status"] == "Overdue"
    assert body["filters"]["year"] is None
    assert body["totals"]["count"] == 1
    assert body["status_breakdown"]["total"] == 7
    assert body["orders"][0]["record_id"] == "SO-002"
    assert body["orders"][0]["due_date"] == "2025-03-15"


def test_sales_monthly_revenue(client):
    res = client.post("/sales/monthly-revenue", json={"year": 2025, "branch": "SURABAYA-PG"})
    body = res.json()
    assert body["gap_filled"] is True
    assert len(body["series"]) == 12
    assert body["series"][2] == {"month": "Mar 2025", "revenue": 22_000_000}


def test_invoices(client):
    res = client.post("/invoices", json={})
    assert res.status_code == 200
    assert res.json()["totals"]["paid_count"] == 1


def test_refresh_reloads_batch(client):
    assert client.post("/sales/stats", json={}).json()["totals"]["count"] == 7
    main.app.state.source = StaticRecordSource([{"order_id": "X", "status": "To Bill", "base_total": 10}])
    assert client.post("/sales/stats", json={}).json()["totals"]["count"] == 7
    assert client.post("/refresh").json() == {"refreshed": True}
    assert client.post("/sales/stats", json={}).json()["totals"]["count"] == 1


def test_export_sales_csv(client):
    res = client.post("/export/sales", json={"status": "Overdue"})
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    lines = res.text.strip().splitlines()
    assert lines[0].startswith("record_id,customer_name")
    assert len(lines) == 2
    assert lines[1].startswith("SO-002,")


def test_unavailable_source_returns_503(client):
    class Down:
        def fetch_orders(self):
            raise RetrievalError("Failed to read collection erp_so", collection="erp_so")

        def fetch_invoices(self):
            return []

    main.app.state.source = Down()
    main._cached_batch.cache_clear()
    res = client.post("/sales", json={})
    assert res.status_code == 503
    assert res.json() == {"error": "Failed to read collection erp_so", "type": "RetrievalError"}


def test_unreachable_database_returns_503(client, monkeypatch):
    def refuse(uri):
        raise ConfigurationError("invalid uri")

    monkeypatch.setattr(source, "MongoClient", refuse)
    main.app.state.source = None
    main._cached_batch.cache_clear()
    res = client.post("/sales/stats", json={})
    assert res.status_code == 503
    assert res.json()["type"] == "RetrievalError"
