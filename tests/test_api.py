import pytest
from fastapi.testclient import TestClient
from app.main import app
from app.routers import users, groups, expenses, balances, debts, settlements, goals, revenues, reports

ROUTERS = (users, groups, expenses, balances, debts, settlements, goals, revenues, reports)

@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()
    for module in ROUTERS:
        app.dependency_overrides[module.get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

def test_health(client):
    assert client.get("/").json() == {"status": "ok"}

def test_expense_to_settlement_flow(client):
    ana = client.post("/users", json={"name": "Ana", "email": "ana@mail.com"}).json()
    bia = client.post("/users", json={"name": "Bia", "email": "bia@mail.com"}).json()
    group = client.post("/groups", json={"name": "Flat", "member_ids": [ana["id"], bia["id"]]}).json()
    assert [m["id"] for m in group["members"]] == [ana["id"], bia["id"]]
    gid = group["id"]

    r = client.post(f"/groups/{gid}/expenses", json={
        "description": "Groceries", "amount": 150, "category": "groceries",
        "payers": [{"user_id": ana["id"], "amount": 150}], "participant_ids": [ana["id"], bia["id"]],
    })
    assert r.status_code == 200
    assert r.json()["outstanding"] == 0.0

    bals = client.get(f"/groups/{gid}/balances").json()
    assert [(b["user"]["id"], b["amount"], b["status"]) for b in bals] == [(ana["id"], 75.0, "creditor"), (bia["id"], -75.0, "debtor")]

    owed = client.get(f"/groups/{gid}/debts").json()
    assert owed == [{"from": bia, "to": ana, "amount": 75.0}]

    r = client.post(f"/groups/{gid}/settlements", json={"debtor_id": bia["id"], "creditor_id": ana["id"], "amount": 75.0})
    assert r.status_code == 200
    assert r.json()["category"] == "transfer"
    assert client.get(f"/groups/{gid}/debts").json() == []

    history = client.get(f"/groups/{gid}/expenses", params={"category": "transfer"}).json()
    assert len(history) == 1

def test_errors(client):
    assert client.get("/groups/404/balances").status_code == 404
    ana = client.post("/users", json={"name": "Ana", "email": "ana@mail.com"}).json()
    gid = client.post("/groups", json={"name": "Solo", "member_ids": [ana["id"]]}).json()["id"]
    bad_category = client.post(f"/groups/{gid}/expenses", json={"amount": 10, "category": "yachts"})
    assert bad_category.status_code == 422
    overpaid = client.post(f"/groups/{gid}/expenses", json={"amount": 10, "payers": [{"user_id": ana["id"], "amount": 12}]})
    assert overpaid.status_code == 400

def test_edit_filter_and_delete_group(client):
    ana = client.post("/users", json={"name": "Ana", "email": "ana@mail.com"}).json()
    bia = client.post("/users", json={"name": "Bia", "email": "bia@mail.com"}).json()
    gid = client.post("/groups", json={"name": "Flat", "member_ids": [ana["id"], bia["id"]]}).json()["id"]
    r = client.post(f"/groups/{gid}/expenses", json={
        "amount": 80, "date": "2024-01-10T12:00:00+00:00", "payers": [{"user_id": ana["id"], "amount": 80}],
    })
    eid = r.json()["id"]
    assert r.json()["date"] == "2024-01-10T12:00:00"

    listed = client.get(f"/groups/{gid}/expenses", params={"start": "2024-01-01T00:00:00Z"})
    assert listed.status_code == 200
    assert [e["id"] for e in listed.json()] == [eid]
    assert client.get(f"/groups/{gid}/expenses", params={"end": "2024-01-10T08:00:00-03:00"}).json() == []

    r = client.put(f"/groups/{gid}/expenses/{eid}", json={
        "amount": 80, "payers": [{"user_id": bia["id"], "amount": 80}], "participant_ids": [ana["id"], bia["id"]],
    })
    assert r.status_code == 200
    owed = client.get(f"/groups/{gid}/debts").json()
    assert [(d["from"]["id"], d["to"]["id"], d["amount"]) for d in owed] == [(ana["id"], bia["id"], 40.0)]

    assert client.delete(f"/groups/{gid}").json() == {"message": "Group deleted"}
    assert client.get(f"/groups/{gid}").status_code == 404
    assert client.get(f"/groups/{gid}/expenses").status_code == 404

def test_revenue_toggle(client):
    ana = client.post("/users", json={"name": "Ana", "email": "ana@mail.com"}).json()
    rid = client.post(f"/users/{ana['id']}/revenues", json={"amount": 500, "date": "2024-03-05T00:00:00Z"}).json()["id"]
    assert client.post(f"/users/{ana['id']}/revenues/{rid}/toggle-received").json()["received"] is True
    assert client.post(f"/users/{ana['id']}/revenues/{rid}/toggle-received").json()["received"] is False
    assert client.get(f"/users/{ana['id']}/revenues").json()["total_forecast"] == 500.0
