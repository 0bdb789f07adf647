from datetime import timedelta

from tests.helpers import ApiTestCase

from teenbudget.core.config import settings
from teenbudget.db import models
from teenbudget.schemas.common import utcnow
from teenbudget.services.security import create_access_token


class AuthApiTests(ApiTestCase):
    def test_health(self) -> None:
        response = self.client.get("/api/v1/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_demo_login_is_idempotent(self) -> None:
        first = self.client.post("/api/v1/auth/demo")
        second = self.client.post("/api/v1/auth/demo")

        self.assertEqual(first.status_code, 200)
        body = first.json()
        self.assertEqual(body["tokenType"], "bearer")
        self.assertEqual(body["user"]["email"], settings.DEMO_EMAIL)
        self.assertFalse(body["user"]["hasPin"])
        self.assertEqual(second.json()["user"]["id"], body["user"]["id"])

    def test_register_then_pin_login(self) -> None:
        response = self.client.post(
            "/api/v1/auth/register",
            json={"name": "Jo", "email": "jo@example.com", "pin": "4321"},
        )
        self.assertEqual(response.status_code, 201)
        user_id = response.json()["user"]["id"]

        profiles = self.client.get("/api/v1/auth/users").json()["users"]
        self.assertIn(user_id, [p["id"] for p in profiles])

        login = self.client.post("/api/v1/auth/pin", json={"userId": user_id, "pin": "4321"})
        self.assertEqual(login.status_code, 200)
        token = login.json()["accessToken"]

        me = self.client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(me.json()["email"], "jo@example.com")
        self.assertTrue(me.json()["hasPin"])

        categories = self.client.get("/api/v1/categories", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(len(categories.json()), 10)

    def test_register_duplicate_email_conflicts(self) -> None:
        response = self.client.post(
            "/api/v1/auth/register",
            json={"name": "Sam again", "email": self.user.email, "pin": "1111"},
        )

        self.assertEqual(response.status_code, 409)
        self.assertIn("error", response.json())

    def test_wrong_pin_is_unauthorized(self) -> None:
        response = self.client.post("/api/v1/auth/pin", json={"userId": self.user.id, "pin": "9999"})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Invalid PIN"})

    def test_change_pin(self) -> None:
        bad = self.client.put(
            "/api/v1/auth/pin", json={"currentPin": "0000", "newPin": "5678"}, headers=self.headers
        )
        self.assertEqual(bad.status_code, 401)

        ok = self.client.put(
            "/api/v1/auth/pin", json={"currentPin": "1234", "newPin": "5678"}, headers=self.headers
        )
        self.assertEqual(ok.json(), {"success": True})

        login = self.client.post("/api/v1/auth/pin", json={"userId": self.user.id, "pin": "5678"})
        self.assertEqual(login.status_code, 200)

    def test_missing_token_is_unauthorized(self) -> None:
        response = self.client.get("/api/v1/transactions")

        self.assertEqual(response.status_code, 401)
        self.assertIn("error", response.json())

    def test_expired_token_is_unauthorized(self) -> None:
        token = create_access_token(self.user.id, expires_delta=timedelta(minutes=-1))

        response = self.client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

        self.assertEqual(response.status_code, 401)

    def test_token_for_deleted_user_is_unauthorized(self) -> None:
        headers = self.auth_headers(self.user)
        self.db.delete(self.user)
        self.db.commit()

        response = self.client.get("/api/v1/auth/me", headers=headers)

        self.assertEqual(response.status_code, 401)


class TransactionApiTests(ApiTestCase):
    def test_validation_error_shape(self) -> None:
        response = self.client.post(
            "/api/v1/transactions",
            json={"amount": -5, "type": "EXPENSE", "date": "2026-10-01T10:00:00Z", "categoryId": 1},
            headers=self.headers,
        )

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["error"], "Validation error")
        self.assertEqual(body["details"][0]["field"], "amount")

    def test_type_mismatch_is_400(self) -> None:
        allowance = self.category("Allowance")

        response = self.client.post(
            "/api/v1/transactions",
            json={"amount": 5, "type": "EXPENSE", "date": "2026-10-01T10:00:00Z", "categoryId": allowance.id},
            headers=self.headers,
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["details"][0]["field"], "type")

    def test_crud_round_trip(self) -> None:
        food = self.category("Food & Drinks")
        created = self.client.post(
            "/api/v1/transactions",
            json={"amount": 4.5, "type": "EXPENSE", "date": "2026-10-01T10:00:00Z", "categoryId": food.id, "description": "Bubble tea"},
            headers=self.headers,
        )
        self.assertEqual(created.status_code, 201)
        body = created.json()
        self.assertEqual(body["amount"], 4.5)
        self.assertEqual(body["category"]["name"], "Food & Drinks")

        txn_id = body["id"]
        updated = self.client.put(f"/api/v1/transactions/{txn_id}", json={"description": "Boba"}, headers=self.headers)
        self.assertEqual(updated.json()["description"], "Boba")

        listed = self.client.get("/api/v1/transactions", params={"categoryId": food.id}, headers=self.headers).json()
        self.assertEqual(listed["pagination"]["totalCount"], 1)

        deleted = self.client.delete(f"/api/v1/transactions/{txn_id}", headers=self.headers)
        self.assertEqual(deleted.json(), {"success": True})
        self.assertEqual(self.client.get(f"/api/v1/transactions/{txn_id}", headers=self.headers).status_code, 404)

    def test_limit_above_max_is_rejected(self) -> None:
        response = self.client.get("/api/v1/transactions", params={"limit": 101}, headers=self.headers)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["details"][0]["field"], "limit")

    def test_stats_route(self) -> None:
        self.add_transaction("30", "Allowance", utcnow())

        response = self.client.get("/api/v1/transactions/stats", headers=self.headers)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["monthlyIncome"], 30)
        self.assertEqual(response.json()["balanceChangePercent"], 0)

    def test_unknown_route_uses_error_body(self) -> None:
        response = self.client.get("/api/v1/nope", headers=self.headers)

        self.assertEqual(response.status_code, 404)
        self.assertIn("error", response.json())


class DashboardApiTests(ApiTestCase):
    def test_budget_overview_reports_overspend(self) -> None:
        now = utcnow()
        food = self.category("Food & Drinks")
        self.client.post(
            "/api/v1/budgets",
            json={
                "name": "This month",
                "period": "MONTHLY",
                "startDate": (now - timedelta(days=10)).isoformat(),
                "endDate": (now + timedelta(days=10)).isoformat(),
                "budgetItems": [{"categoryId": food.id, "amount": 60, "type": "EXPENSE"}],
            },
            headers=self.headers,
        )
        self.add_transaction("45", "Food & Drinks", now - timedelta(days=1))
        self.add_transaction("20", "Food & Drinks", now - timedelta(days=2))

        rows = self.client.get("/api/v1/dashboard/budget-overview", headers=self.headers).json()

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["spentAmount"], 65)
        self.assertEqual(rows[0]["remainingAmount"], -5)
        self.assertEqual(rows[0]["percentage"], 100)
        self.assertEqual(rows[0]["status"], "over")

    def test_budget_overview_empty_without_budgets(self) -> None:
        response = self.client.get("/api/v1/dashboard/budget-overview", headers=self.headers)

        self.assertEqual(response.json(), [])

    def test_summary_includes_goal_progress(self) -> None:
        goal = self.client.post(
            "/api/v1/savings-goal", json={"title": "Headphones", "targetAmount": 200}, headers=self.headers
        ).json()
        self.add_transaction("50", "Allowance", utcnow(), savings_goal_id=goal["id"])

        summary = self.client.get("/api/v1/dashboard/summary", headers=self.headers).json()

        self.assertEqual(summary["monthlyIncome"], 50)
        self.assertEqual(summary["savingsGoalProgress"], 25)


class SavingsGoalApiTests(ApiTestCase):
    def test_goal_lifecycle(self) -> None:
        self.assertIsNone(self.client.get("/api/v1/savings-goal", headers=self.headers).json())

        created = self.client.post(
            "/api/v1/savings-goal",
            json={"title": "Bike", "targetAmount": 500, "deadline": (utcnow() + timedelta(days=30)).isoformat()},
            headers=self.headers,
        )
        self.assertEqual(created.status_code, 201)
        goal_id = created.json()["id"]

        second = self.client.post("/api/v1/savings-goal", json={"title": "Phone", "targetAmount": 300}, headers=self.headers)
        self.assertEqual(second.status_code, 409)

        achieved = self.client.patch(f"/api/v1/savings-goal/{goal_id}/status", json={"status": "ACHIEVED"}, headers=self.headers)
        self.assertEqual(achieved.json()["status"], "ACHIEVED")

        again = self.client.patch(f"/api/v1/savings-goal/{goal_id}/status", json={"status": "ACHIEVED"}, headers=self.headers)
        self.assertEqual(again.status_code, 400)

        deleted = self.client.delete(f"/api/v1/savings-goal/{goal_id}", headers=self.headers)
        self.assertEqual(deleted.json(), {"success": True})
        self.assertEqual(self.db.query(models.SavingsGoal).count(), 0)
