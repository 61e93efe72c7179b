"""
Tests for the REST endpoints.
"""
import csv
import io
from datetime import datetime

from expensebot.core.config import settings


def now_stamp():
    return datetime.now().strftime(settings.DATE_FORMAT)


def seed(store, *rows):
    store.worksheets[settings.EXPENSE_WORKSHEET].extend(list(row) for row in rows)


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_create_expense(client, store):
    response = client.post(
        "/api/expenses",
        json={"username": "alice", "amount": 12.5, "category": "Food", "description": "lunch"}
    )

    assert response.status_code == 201
    data = response.json()
    assert data["expense"]["username"] == "alice"
    assert float(data["expense"]["amount"]) == 12.5
    assert data["alerts"] == []
    assert store.worksheets[settings.EXPENSE_WORKSHEET][-1][1:] == ["alice", 12.5, "Food", "lunch"]


def test_create_expense_rejects_non_positive_amount(client):
    response = client.post(
        "/api/expenses",
        json={"username": "alice", "amount": 0, "category": "Food"}
    )

    assert response.status_code == 422


def test_create_expense_reports_budget_alerts(client):
    client.post("/api/budget/alice", json={"monthly_budget": 20, "categories": {"Food": 5}})

    response = client.post(
        "/api/expenses",
        json={"username": "alice", "amount": 25, "category": "Food", "description": "feast"}
    )

    alerts = response.json()["alerts"]
    assert [a["category"] for a in alerts] == [None, "Food"]
    assert "exceeded your monthly budget" in alerts[0]["message"]


def test_list_expenses_filters_and_limits(client, store):
    seed(
        store,
        ["2026-10-01 10:00:00", "alice", 5, "Food", "a"],
        ["2026-10-02 10:00:00", "bob", 7, "food", "b"],
        ["2026-10-03 10:00:00", "alice", 9, "Food", "c"],
        ["2026-10-04 10:00:00", "alice", 11, "Rent", "d"],
    )

    response = client.get("/api/expenses", params={"category": "FOOD", "limit": 2})

    data = response.json()
    assert [e["description"] for e in data["expenses"]] == ["c", "b"]
    assert float(data["total_amount"]) == 16


def test_list_expenses_with_utc_from_date(client, store):
    seed(
        store,
        ["2026-09-29 10:00:00", "alice", 5, "Food", "old"],
        ["2026-10-03 10:00:00", "alice", 7, "Food", "new"],
    )

    response = client.get("/api/expenses", params={"from_date": "2026-10-01T00:00:00Z"})

    assert response.status_code == 200
    assert [e["description"] for e in response.json()["expenses"]] == ["new"]


def test_list_expenses_limit_is_bounded(client):
    assert client.get("/api/expenses", params={"limit": 26}).status_code == 422


def test_summary(client, store):
    stamp = now_stamp()
    seed(
        store,
        [stamp, "alice", 10, "Food", "x"],
        [stamp, "bob", 30, "Rent", "y"],
        ["2001-01-01 00:00:00", "bob", 500, "Rent", "old"],
    )

    response = client.get("/api/summary/month")

    data = response.json()
    assert data["expense_count"] == 2
    assert float(data["total_amount"]) == 40
    assert [c["name"] for c in data["categories"]] == ["Rent", "Food"]
    assert [u["name"] for u in data["users"]] == ["bob", "alice"]


def test_summary_invalid_period(client):
    response = client.get("/api/summary/year")

    assert response.status_code == 400
    assert "Invalid period" in response.json()["error"]


def test_split(client, store):
    response = client.post(
        "/api/expenses/split",
        json={"amount": 100, "description": "Dinner", "participants": ["alice", "bob", "alice"]}
    )

    assert response.status_code == 201
    data = response.json()
    assert data["participants"] == ["alice", "bob"]
    assert float(data["per_person_amount"]) == 50
    assert len(store.worksheets[settings.EXPENSE_WORKSHEET]) == 3


def test_split_single_participant(client):
    response = client.post(
        "/api/expenses/split",
        json={"amount": 100, "description": "Dinner", "participants": ["alice", "alice"]}
    )

    assert response.status_code == 400


def test_export_csv(client, store):
    seed(
        store,
        ["2026-10-01 10:00:00", "alice", 5, "Food", 'said "hi"'],
        ["2026-10-02 10:00:00", "bob", 7.25, "Rent", "rent, october"],
    )

    response = client.get("/api/expenses/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment" in response.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == ["Timestamp", "Username", "Amount", "Category", "Description"]
    assert rows[1] == ["2026-10-02 10:00:00", "bob", "7.25", "Rent", "rent, october"]
    assert rows[2][4] == 'said "hi"'


def test_budget_round_trip(client):
    response = client.post("/api/budget/alice", json={"monthly_budget": 500, "categories": {"Food": 100}})
    assert response.status_code == 201

    data = client.get("/api/budget/Alice").json()
    assert float(data["monthly_budget"]) == 500
    assert {k: float(v) for k, v in data["categories"].items()} == {"Food": 100}


def test_budget_rejects_negative_category_limit(client, store):
    response = client.post("/api/budget/alice", json={"monthly_budget": 100, "categories": {"Food": -5}})

    assert response.status_code == 422
    assert settings.BUDGET_WORKSHEET not in store.worksheets


def test_budget_not_found(client):
    assert client.get("/api/budget/nobody").status_code == 404


def test_budget_status(client, store):
    client.post("/api/budget/alice", json={"monthly_budget": 50})
    seed(store, [now_stamp(), "alice", 20, "Food", "x"])

    data = client.get("/api/budget/alice/status").json()

    assert float(data["total_spent"]) == 20
    assert float(data["remaining"]) == 30
    assert data["alerts"] == []


def test_malformed_budget_is_reported(client, store):
    store.worksheets[settings.BUDGET_WORKSHEET] = [
        ["Username", "MonthlyBudget", "CategoryBudgets"],
        ["alice", 10, "{broken"],
    ]

    assert client.get("/api/budget/alice").status_code == 500


def test_store_unavailable(client, store):
    store.fail_with = "auth failed"

    response = client.get("/api/expenses")

    assert response.status_code == 503
    assert response.json()["error"] == "Expense store is unavailable"


def test_export_month_excludes_older_rows(client, store):
    seed(
        store,
        [now_stamp(), "alice", 5, "Food", "recent"],
        ["2001-01-01 00:00:00", "alice", 9, "Food", "ancient"],
    )

    response = client.get("/api/expenses/export", params={"period": "month", "username": "ALICE"})

    rows = list(csv.reader(io.StringIO(response.text)))
    assert [row[4] for row in rows[1:]] == ["recent"]
    assert "expenses-month-" in response.headers["content-disposition"]


def test_export_rejects_unknown_period(client):
    assert client.get("/api/expenses/export", params={"period": "year"}).status_code == 422
