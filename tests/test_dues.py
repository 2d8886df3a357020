# tests/test_dues.py

import pytest
from fastapi.testclient import TestClient

from app.modules.dues.service import compute_due_totals

BASE = "/api/v1/dues/periods"


@pytest.fixture
def dues_db(db):
    db.tables["member_due_periods"] = [
        {"id": "period-q1", "name": "2024 Q1", "period_start": "2024-01-01", "period_end": "2024-03-31",
         "due_date": "2024-03-31", "due_amount": 150, "status": "closed"},
        {"id": "period-q2", "name": "2024 Q2", "period_start": "2024-04-01", "period_end": "2024-06-30",
         "due_date": "2024-06-30", "due_amount": 150, "status": "collecting"},
    ]
    db.tables["member_due_period_summary"] = [
        {"period_id": "period-q2", "member_count": 2, "total_paid": 100},
    ]
    db.tables["member_dues"] = [
        {"id": "due-izmir", "member_id": "member-izmir", "period_id": "period-q2", "due_date": "2024-06-30",
         "amount_due": 150, "discount_amount": 20, "penalty_amount": 5, "paid_amount": 100, "status": "partial"},
        {"id": "due-ankara", "member_id": "member-ankara", "period_id": "period-q2", "due_date": "2024-06-30",
         "amount_due": 150, "paid_amount": 0, "status": "pending"},
    ]
    db.tables["member_due_payments"] = [
        {"id": "pay-1", "member_due_id": "due-izmir", "amount": 60, "payment_date": "2024-04-10"},
        {"id": "pay-2", "member_due_id": "due-izmir", "amount": 40, "payment_date": "2024-05-02"},
    ]
    return db


def test_compute_due_totals():
    totals = compute_due_totals(
        {"amount_due": 150, "discount_amount": 20, "penalty_amount": 5, "paid_amount": 100},
        [{"payment_date": "2024-04-10"}, {"payment_date": "2024-05-02"}, {"payment_date": None}],
    )
    assert totals == {"total_due_amount": 135, "outstanding_amount": 35, "last_payment_at": "2024-05-02"}


def test_compute_due_totals_never_negative():
    totals = compute_due_totals({"amount_due": 10, "discount_amount": 50, "paid_amount": 5}, [])
    assert totals["total_due_amount"] == 0
    assert totals["outstanding_amount"] == 0
    assert totals["last_payment_at"] is None


def test_list_periods_with_status_filter(client: TestClient, login_as, branch_manager, dues_db):
    login_as(branch_manager)
    response = client.get(BASE, params={"status": "collecting,draft"})
    assert response.status_code == 200
    body = response.json()
    assert [p["id"] for p in body] == ["period-q2"]
    assert body[0]["summary"]["member_count"] == 2


def test_list_periods_newest_first(client: TestClient, login_as, general_manager, dues_db):
    login_as(general_manager)
    assert [p["id"] for p in client.get(BASE).json()] == ["period-q2", "period-q1"]


def test_create_period_generates_dues(client: TestClient, login_as, regional_manager, dues_db):
    dues_db.rpc_handlers["generate_member_dues_for_period"] = lambda params: 42
    login_as(regional_manager)
    response = client.post(BASE, json={
        "name": " 2024 Q3 ", "period_start": "2024-07-01", "period_end": "2024-09-30",
        "due_date": "2024-09-30", "due_amount": 150, "auto_generate": True,
    })
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["name"] == "2024 Q3"
    assert body["generated_member_count"] == 42
    name, params = dues_db.rpc_calls[0]
    assert name == "generate_member_dues_for_period"
    assert params == {"p_period_id": body["id"], "p_include_inactive": False}
    stored = next(p for p in dues_db.rows("member_due_periods") if p["id"] == body["id"])
    assert "auto_generate" not in stored
    assert dues_db.rows("audit_logs")[-1]["entity_type"] == "DUES"


def test_generation_failure_keeps_period(client: TestClient, login_as, general_manager, dues_db):
    login_as(general_manager)
    response = client.post(BASE, json={
        "name": "2024 Q4", "period_start": "2024-10-01", "period_end": "2024-12-31",
        "due_date": "2024-12-31", "due_amount": 0, "auto_generate": True,
    })
    assert response.status_code == 201
    assert response.json()["generated_member_count"] == 0
    assert len(dues_db.rows("member_due_periods")) == 3


def test_period_end_before_start(client: TestClient, login_as, general_manager, dues_db):
    login_as(general_manager)
    response = client.post(BASE, json={
        "name": "Broken", "period_start": "2024-10-01", "period_end": "2024-09-01",
        "due_date": "2024-10-31", "due_amount": 10,
    })
    assert response.status_code == 400


def test_branch_manager_cannot_create_periods(client: TestClient, login_as, branch_manager, dues_db):
    login_as(branch_manager)
    response = client.post(BASE, json={
        "name": "Nope", "period_start": "2024-10-01", "period_end": "2024-12-31",
        "due_date": "2024-12-31", "due_amount": 10,
    })
    assert response.status_code == 403


def test_period_detail_is_scoped(client: TestClient, login_as, branch_manager, dues_db):
    login_as(branch_manager)
    response = client.get(f"{BASE}/period-q2")
    assert response.status_code == 200, response.text
    body = response.json()
    assert [d["member_id"] for d in body["member_dues"]] == ["member-izmir"]
    due = body["member_dues"][0]
    assert due["member"]["first_name"] == "Ayse"
    assert len(due["payments"]) == 2
    assert due["total_due_amount"] == 135
    assert due["outstanding_amount"] == 35
    assert due["last_payment_at"] == "2024-05-02"


def test_period_detail_for_head_office(client: TestClient, login_as, general_manager, dues_db):
    login_as(general_manager)
    body = client.get(f"{BASE}/period-q2").json()
    assert {d["member_id"] for d in body["member_dues"]} == {"member-izmir", "member-ankara"}


def test_missing_period(client: TestClient, login_as, general_manager, dues_db):
    login_as(general_manager)
    assert client.get(f"{BASE}/missing").status_code == 404


def test_status_transitions(client: TestClient, login_as, general_manager, dues_db):
    login_as(general_manager)
    response = client.patch(f"{BASE}/period-q2", json={"status": "closed"})
    assert response.status_code == 200
    assert response.json()["closed_at"] is not None

    response = client.patch(f"{BASE}/period-q1", json={"status": "collecting"})
    assert response.json()["published_at"] is not None
    assert response.json()["closed_at"] is None

    assert client.patch(f"{BASE}/period-q1", json={"status": "archived"}).status_code == 422
