# tests/test_finance.py

import pytest
from fastapi.testclient import TestClient

from app.modules.finance.service import summarize_transactions

BASE = "/api/v1/finance"


@pytest.fixture
def finance_db(db):
    db.tables["finance_accounts"] = [
        {"id": "acc-cash", "name": "Cash", "account_type": "cash", "currency": "TRY",
         "opening_balance": 100, "current_balance": 100, "is_active": True, "created_at": "2024-01-01T00:00:00"},
        {"id": "acc-bank", "name": "Bank", "account_type": "bank", "currency": "TRY",
         "opening_balance": 0, "current_balance": 0, "is_active": True, "created_at": "2024-01-02T00:00:00"},
        {"id": "acc-old", "name": "Old", "account_type": "other", "currency": "EUR",
         "opening_balance": 0, "current_balance": 50, "is_active": False, "created_at": "2024-01-03T00:00:00"},
    ]
    db.tables["finance_account_summary"] = [{"account_id": "acc-bank", "current_balance": 1900}]
    db.tables["finance_categories"] = [
        {"id": "cat-dues", "name": "Dues", "category_type": "income", "is_active": True},
        {"id": "cat-rent", "name": "Rent", "category_type": "expense", "is_active": True},
        {"id": "cat-move", "name": "Internal", "category_type": "transfer", "is_active": True},
    ]
    db.tables["finance_transactions"] = [
        {"id": "tx-1", "account_id": "acc-bank", "category_id": "cat-dues", "transaction_type": "income",
         "amount": 2500, "transaction_date": "2024-05-01", "member_id": "member-izmir"},
        {"id": "tx-2", "account_id": "acc-bank", "category_id": "cat-rent", "transaction_type": "expense",
         "amount": 600, "transaction_date": "2024-05-03"},
        {"id": "tx-3", "account_id": "acc-bank", "category_id": "cat-move", "transaction_type": "transfer",
         "amount": 200, "transaction_date": "2024-05-04", "transfer_account_id": "acc-cash"},
        {"id": "tx-old", "account_id": "acc-cash", "category_id": "cat-dues", "transaction_type": "income",
         "amount": 75, "transaction_date": "2023-01-10"},
    ]
    return db


def test_summarize_transactions():
    categories = {"cat-dues": {"id": "cat-dues", "name": "Dues", "category_type": "income"}}
    summary = summarize_transactions([
        {"transaction_type": "income", "amount": 10, "category_id": "cat-dues"},
        {"transaction_type": "income", "amount": "5.5", "category_id": "cat-dues"},
        {"transaction_type": "expense", "amount": 3, "category_id": "unknown"},
        {"transaction_type": "transfer", "amount": 7, "account_id": "a", "transfer_account_id": "b"},
    ], categories)
    assert summary["totals"] == {"income": 15.5, "expense": 3.0, "transfer_in": 7.0, "transfer_out": 7.0}
    assert len(summary["breakdown"]) == 1
    assert summary["breakdown"][0].total_amount == 15.5


def test_finance_is_head_office_only(client: TestClient, login_as, regional_manager, finance_db):
    login_as(regional_manager)
    assert client.get(f"{BASE}/accounts").status_code == 403
    assert client.get(f"{BASE}/summary").status_code == 403


def test_list_active_accounts(client: TestClient, login_as, general_manager, finance_db):
    login_as(general_manager)
    assert [a["id"] for a in client.get(f"{BASE}/accounts").json()] == ["acc-cash", "acc-bank"]
    everything = client.get(f"{BASE}/accounts", params={"include_inactive": True}).json()
    assert len(everything) == 3


def test_create_account_normalizes_currency(client: TestClient, login_as, general_manager, finance_db):
    login_as(general_manager)
    response = client.post(f"{BASE}/accounts", json={
        "name": " Petty cash ", "account_type": "cash", "currency": "usd", "opening_balance": 25,
    })
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["name"] == "Petty cash"
    assert body["currency"] == "USD"
    assert body["current_balance"] == 25

    odd = client.post(f"{BASE}/accounts", json={"name": "Odd", "account_type": "other", "currency": "euro"})
    assert odd.json()["currency"] == "TRY"


def test_categories_by_type(client: TestClient, login_as, general_manager, finance_db):
    login_as(general_manager)
    response = client.get(f"{BASE}/categories", params={"type": "income,expense"})
    assert {c["id"] for c in response.json()} == {"cat-dues", "cat-rent"}


def test_transaction_filters(client: TestClient, login_as, general_manager, finance_db):
    login_as(general_manager)
    response = client.get(f"{BASE}/transactions", params={
        "type": "income,expense", "start_date": "2024-01-01", "end_date": "2024-12-31",
    })
    assert [t["id"] for t in response.json()] == ["tx-2", "tx-1"]

    by_member = client.get(f"{BASE}/transactions", params={"member_id": "member-izmir"}).json()
    assert [t["id"] for t in by_member] == ["tx-1"]

    assert client.get(f"{BASE}/transactions", params={"limit": 0}).status_code == 422


def test_create_transaction(client: TestClient, login_as, general_manager, finance_db):
    login_as(general_manager)
    response = client.post(f"{BASE}/transactions", json={
        "account_id": "acc-cash", "category_id": "cat-dues", "transaction_type": "income",
        "amount": 150, "transaction_date": "2024-05-10", "description": "  ", "reference_code": " R-1 ",
    })
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["created_by"] == "admin-general"
    assert body["description"] is None
    assert body["reference_code"] == "R-1"
    assert finance_db.rows("audit_logs")[-1]["entity_type"] == "FINANCE"


@pytest.mark.parametrize("payload", [
    {"transaction_type": "transfer"},
    {"transaction_type": "transfer", "transfer_account_id": "acc-cash"},
    {"transaction_type": "income", "amount": 0},
    {"transaction_type": "refund"},
])
def test_invalid_transactions(client: TestClient, login_as, general_manager, finance_db, payload):
    login_as(general_manager)
    body = {
        "account_id": "acc-cash", "category_id": "cat-move", "amount": 10, "transaction_date": "2024-05-10",
    }
    body.update(payload)
    assert client.post(f"{BASE}/transactions", json=body).status_code == 422
    assert len(finance_db.rows("finance_transactions")) == 4


def test_summary(client: TestClient, login_as, general_manager, finance_db):
    login_as(general_manager)
    response = client.get(f"{BASE}/summary", params={"start_date": "2024-01-01", "end_date": "2024-12-31"})
    assert response.status_code == 200, response.text
    body = response.json()
    overview = body["overview"]
    # Bank balance comes from the account summary view, cash from the account row
    assert overview["total_balance"] == 2000
    assert overview["total_income"] == 2500
    assert overview["total_expense"] == 600
    assert overview["total_incoming_transfer"] == 200
    assert overview["total_outgoing_transfer"] == 200
    assert [t["id"] for t in body["recent_transactions"]] == ["tx-3", "tx-2", "tx-1"]
    totals = {c["category_id"]: c["total_amount"] for c in body["category_breakdown"]}
    assert totals == {"cat-dues": 2500, "cat-rent": 600, "cat-move": 200}
    assert body["period_start"] == "2024-01-01"


def test_summary_rejects_inverted_range(client: TestClient, login_as, general_manager, finance_db):
    login_as(general_manager)
    response = client.get(f"{BASE}/summary", params={"start_date": "2024-12-31", "end_date": "2024-01-01"})
    assert response.status_code == 400
