"""
API route tests (FastAPI TestClient, in-memory collections)
"""
from datetime import date, timedelta

from tests.helpers import expense_doc


class TestAuth:

    def test_login_and_me(self, anonymous_client):
        response = anonymous_client.post("/auth/login", json={"user_id": "admin", "password": "admin123"})
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        token = body["data"]["access_token"]

        me = anonymous_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["data"]["id"] == "admin"

    def test_login_rejects_bad_password(self, anonymous_client):
        response = anonymous_client.post("/auth/login", json={"user_id": "admin", "password": "nope"})
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_data_routes_require_token(self, anonymous_client):
        assert anonymous_client.get("/api/expenses").status_code == 401
        garbage = {"Authorization": "Bearer not-a-jwt"}
        assert anonymous_client.get("/api/notifications", headers=garbage).status_code == 401


class TestExpenseRoutes:

    def test_create_recurring_expense(self, client, expenses_collection):
        base = date.today() - timedelta(days=40)
        response = client.post("/api/expenses", json={
            "name": "Internet",
            "category": "Subscription",
            "amount": 999,
            "date": base.isoformat(),
            "recurring": True,
            "recurring_interval": "monthly",
            "reminder_enabled": True,
        })
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["id"] == expenses_collection.docs[0]["_id"]
        assert date.fromisoformat(data["next_due_date"]) > date.today()

    def test_create_rejects_unknown_category(self, client):
        response = client.post("/api/expenses", json={"name": "X", "category": "Snacks", "amount": 1})
        assert response.status_code == 422

    def test_list_get_update_delete(self, client, expenses_collection):
        expenses_collection.docs.append(expense_doc("e1", amount=100))

        listed = client.get("/api/expenses").json()["data"]
        assert [e["id"] for e in listed] == ["e1"]

        assert client.get("/api/expenses/e1").json()["data"]["amount"] == 100
        assert client.get("/api/expenses/missing").status_code == 404

        updated = client.put("/api/expenses/e1", json={"amount": 150})
        assert updated.status_code == 200
        assert updated.json()["data"]["amount"] == 150

        assert client.put("/api/expenses/e1", json={}).status_code == 400
        assert client.delete("/api/expenses/e1").status_code == 200
        assert client.delete("/api/expenses/e1").status_code == 404

    def test_null_update_leaves_feeds_working(self, client, expenses_collection):
        expenses_collection.docs.append(expense_doc("e1", name="Electricity", amount=100))

        for body in ({"name": None}, {"date": None}, {"amount": None}):
            response = client.put("/api/expenses/e1", json=body)
            assert response.status_code == 400, body

        assert expenses_collection.docs[0]["name"] == "Electricity"
        assert client.get("/api/expenses").status_code == 200
        assert client.get("/api/notifications").status_code == 200

    def test_monthly_report(self, client, expenses_collection):
        expenses_collection.docs.append(expense_doc("e1", amount=300, on=date(2024, 2, 5), category="Travel"))
        response = client.get("/api/expenses/report", params={"month": 2, "year": 2024})
        data = response.json()["data"]
        assert data["month"] == "February"
        assert data["total"] == 300
        assert data["by_category"]["Travel"] == 300

    def test_report_rejects_month_out_of_range(self, client):
        assert client.get("/api/expenses/report", params={"month": 0, "year": 2024}).status_code == 422

    def test_upcoming_and_total(self, client, expenses_collection):
        expenses_collection.docs.append(expense_doc("e1", recurring=True, next_due_date=date(2030, 1, 1)))
        expenses_collection.aggregate_results.append([{"_id": None, "total": 999}])

        upcoming = client.get("/api/expenses/upcoming").json()["data"]
        assert [e["id"] for e in upcoming] == ["e1"]
        assert client.get("/api/expenses/total").json()["data"] == {"total": 999}


class TestNotificationRoutes:

    def test_list_mark_read_and_count(self, client, expenses_collection):
        today = date.today()
        expenses_collection.docs.append(expense_doc(
            "bill", name="Electricity", amount=2400, recurring=True,
            recurring_interval="monthly", next_due_date=today + timedelta(days=1), on=today,
        ))

        data = client.get("/api/notifications").json()["data"]
        ids = [n["id"] for n in data["notifications"]]
        assert ids == ["due-bill", f"monthly-{today.month - 1}-{today.year}"]
        assert data["unread_count"] == 2
        assert "in 1 day(s)" in data["notifications"][0]["message"]

        assert client.post("/api/notifications/due-bill/read").status_code == 200
        assert client.get("/api/notifications/unread-count").json()["data"] == {"unread_count": 1}

        assert client.post("/api/notifications/read-all").json()["data"] == {"marked": 2}
        assert client.get("/api/notifications/unread-count").json()["data"] == {"unread_count": 0}


class TestAnalyticsRoutes:

    def test_endpoints_wrap_data(self, client, analytics_collections):
        analytics_collections.expenses.aggregate_results = [[{"name": "Travel", "value": 10}]]
        response = client.get("/api/analytics/expense-breakdown")
        assert response.json() == {"success": True, "data": [{"name": "Travel", "value": 10}]}

        for path in ("kpi", "revenue-chart", "daily-income", "employee-performance"):
            response = client.get(f"/api/analytics/{path}")
            assert response.status_code == 200, path
            assert response.json()["success"] is True


def test_root(anonymous_client):
    assert anonymous_client.get("/").json()["status"] == "running"


def test_cors_uses_configured_origins(anonymous_client):
    response = anonymous_client.get("/", headers={"Origin": "http://dashboard.example"})
    assert response.headers["access-control-allow-origin"] in ("*", "http://dashboard.example")
