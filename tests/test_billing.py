from decimal import Decimal

import pytest

from yogastudio.models import SubscriptionPlan


@pytest.fixture
def plans(db_session):
    unlimited = SubscriptionPlan(name="Unlimited", price=Decimal("129.00"), features=["All classes"])
    ten_pack = SubscriptionPlan(name="10 Class Pack", price=Decimal("150.00"), billing_interval="once", features=[])
    retired = SubscriptionPlan(name="Legacy", price=Decimal("20.00"), is_active=False, features=[])
    db_session.add_all([unlimited, ten_pack, retired])
    db_session.commit()
    return {"unlimited": unlimited, "ten_pack": ten_pack, "retired": retired}


class TestPlans:
    def test_active_plans_by_price(self, client, plans):
        names = [p["name"] for p in client.get("/plans").json()]
        assert names == ["Unlimited", "10 Class Pack"]


class TestSubscriptions:
    def test_requires_admin(self, client, member_headers):
        assert client.get("/admin/subscriptions", headers=member_headers).status_code == 403

    def test_record_subscription(self, client, admin_headers, member, plans):
        response = client.post(
            "/admin/subscriptions",
            json={"user_id": member.id, "plan_id": plans["unlimited"].id, "expires_at": "2031-01-01T00:00:00Z"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "active"
        assert body["plan_name"] == "Unlimited"
        assert Decimal(str(body["plan_price"])) == Decimal("129.00")
        assert body["expires_at"].startswith("2031-01-01T00:00:00")

    def test_unknown_user_or_plan_is_404(self, client, admin_headers, member, plans):
        unknown_user = client.post(
            "/admin/subscriptions", json={"user_id": "nobody", "plan_id": plans["unlimited"].id}, headers=admin_headers
        )
        unknown_plan = client.post(
            "/admin/subscriptions", json={"user_id": member.id, "plan_id": "nothing"}, headers=admin_headers
        )
        assert unknown_user.status_code == 404
        assert unknown_plan.status_code == 404

    def test_cancel_sets_timestamp(self, client, admin_headers, member, plans):
        subscription_id = client.post(
            "/admin/subscriptions", json={"user_id": member.id, "plan_id": plans["unlimited"].id}, headers=admin_headers
        ).json()["id"]

        cancelled = client.patch(
            f"/admin/subscriptions/{subscription_id}/status", json={"status": "cancelled"}, headers=admin_headers
        ).json()
        assert cancelled["status"] == "cancelled"
        assert cancelled["cancelled_at"] is not None

        reactivated = client.patch(
            f"/admin/subscriptions/{subscription_id}/status", json={"status": "active"}, headers=admin_headers
        ).json()
        assert reactivated["cancelled_at"] is None

    def test_filter_by_status(self, client, admin_headers, member, admin, plans):
        first = client.post(
            "/admin/subscriptions", json={"user_id": member.id, "plan_id": plans["unlimited"].id}, headers=admin_headers
        ).json()["id"]
        client.post(
            "/admin/subscriptions", json={"user_id": admin.id, "plan_id": plans["ten_pack"].id}, headers=admin_headers
        )
        client.patch(f"/admin/subscriptions/{first}/status", json={"status": "expired"}, headers=admin_headers)

        expired = client.get("/admin/subscriptions?status=expired", headers=admin_headers).json()
        assert [s["id"] for s in expired] == [first]
        assert len(client.get("/admin/subscriptions?status=all", headers=admin_headers).json()) == 2

    def test_invalid_status_rejected(self, client, admin_headers, member, plans):
        subscription_id = client.post(
            "/admin/subscriptions", json={"user_id": member.id, "plan_id": plans["unlimited"].id}, headers=admin_headers
        ).json()["id"]
        response = client.patch(
            f"/admin/subscriptions/{subscription_id}/status", json={"status": "paused"}, headers=admin_headers
        )
        assert response.status_code == 422


class TestTransactions:
    def test_record_transaction(self, client, admin_headers, member):
        response = client.post(
            "/admin/transactions",
            json={"user_id": member.id, "amount": "49.50", "currency": " eur ", "payment_method": "card"},
            headers=admin_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["currency"] == "EUR"
        assert body["status"] == "pending"
        assert Decimal(str(body["amount"])) == Decimal("49.50")

    @pytest.mark.parametrize("payload", [{"amount": "0"}, {"amount": "-5"}, {"amount": "10", "currency": "EURO"}])
    def test_invalid_transaction_rejected(self, client, admin_headers, payload):
        assert client.post("/admin/transactions", json=payload, headers=admin_headers).status_code == 422

    def test_unknown_subscription_is_404(self, client, admin_headers):
        response = client.post(
            "/admin/transactions", json={"amount": "10", "subscription_id": "missing"}, headers=admin_headers
        )
        assert response.status_code == 404

    def test_update_status_and_filter(self, client, admin_headers, member):
        transaction_id = client.post(
            "/admin/transactions", json={"user_id": member.id, "amount": "30"}, headers=admin_headers
        ).json()["id"]
        client.post("/admin/transactions", json={"amount": "15"}, headers=admin_headers)

        updated = client.patch(
            f"/admin/transactions/{transaction_id}/status", json={"status": "completed"}, headers=admin_headers
        )
        assert updated.json()["status"] == "completed"

        completed = client.get("/admin/transactions?status=completed", headers=admin_headers).json()
        assert [t["id"] for t in completed] == [transaction_id]
        mine = client.get(f"/admin/transactions?user_id={member.id}", headers=admin_headers).json()
        assert [t["id"] for t in mine] == [transaction_id]

    def test_unknown_transaction_is_404(self, client, admin_headers):
        response = client.patch("/admin/transactions/missing/status", json={"status": "failed"}, headers=admin_headers)
        assert response.status_code == 404
