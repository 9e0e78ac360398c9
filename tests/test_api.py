"""API tests for the v1 routes.
Ensures requests reach the engine and ledger errors map to HTTP responses.
"""

import pytest

from conftest import ALICE, BOB, OWNER, THIRTY_DAYS

pytestmark = pytest.mark.api


def _headers(caller: str) -> dict:
    return {"X-Caller-Id": caller}


def _create_policy(client, caller: str, coverage: int = 10_000, payment: int = 100):
    return client.post(
        "/api/v1/policies/",
        json={"coverage_amount": coverage, "duration_seconds": THIRTY_DAYS, "payment": payment},
        headers=_headers(caller),
    )


class TestRoot:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_admin_health_reports_owner(self, client):
        assert client.get("/api/v1/admin/health").json()["owner"] == OWNER


class TestPolicyRoutes:

    def test_create_and_get(self, client):
        response = _create_policy(client, ALICE, payment=150)
        assert response.status_code == 201
        body = response.json()
        assert body["policy_id"] == 1
        assert body["premium"] == 100
        assert body["refund"] == 50

        policy = client.get("/api/v1/policies/1").json()
        assert policy["holder"] == ALICE
        assert policy["has_claimed"] is False

    def test_holder_policies(self, client):
        _create_policy(client, ALICE)
        _create_policy(client, BOB)
        response = client.get(f"/api/v1/policies/holder/{ALICE}")
        assert response.json() == {"holder": ALICE, "policy_ids": [1]}

    def test_missing_caller_header(self, client):
        response = client.post(
            "/api/v1/policies/",
            json={"coverage_amount": 10_000, "duration_seconds": THIRTY_DAYS, "payment": 100},
        )
        assert response.status_code == 422

    def test_insufficient_payment_error_body(self, client):
        response = _create_policy(client, ALICE, payment=10)
        assert response.status_code == 402
        assert response.json() == {
            "error_code": "INSUFFICIENT_PAYMENT",
            "message": "Payment 10 is below the required premium 100",
            "details": {"payment": 10, "premium": 100},
        }

    def test_duration_past_datetime_range(self, client):
        response = client.post(
            "/api/v1/policies/",
            json={"coverage_amount": 10_000, "duration_seconds": 10**12, "payment": 100},
            headers=_headers(ALICE),
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_DURATION"

    def test_unknown_policy(self, client):
        response = client.get("/api/v1/policies/42")
        assert response.status_code == 404
        assert response.json()["error_code"] == "INVALID_POLICY"


class TestClaimFlow:

    def test_full_lifecycle(self, client, clock):
        _create_policy(client, BOB, coverage=1_000_000, payment=10_000)
        _create_policy(client, ALICE)
        clock.advance(days=30)

        response = client.post(
            "/api/v1/claims/",
            json={"policy_id": 2, "claim_amount": 5_000, "description": "storm"},
            headers=_headers(ALICE),
        )
        assert response.status_code == 201
        claim_id = response.json()["claim_id"]

        response = client.post(
            f"/api/v1/admin/claims/{claim_id}/process",
            json={"approve": True},
            headers=_headers(OWNER),
        )
        assert response.json()["status"] == "approved"
        assert client.get(f"/api/v1/pool/balances/{ALICE}").json()["balance"] == 5_000
        assert client.get("/api/v1/pool/funds").json()["available_funds"] == 5_100

        response = client.post("/api/v1/pool/withdraw", headers=_headers(ALICE))
        assert response.json()["amount"] == 5_000
        assert client.get(f"/api/v1/claims/{claim_id}").json()["status"] == "paid"

        response = client.post("/api/v1/pool/withdraw", headers=_headers(ALICE))
        assert response.status_code == 409
        assert response.json()["error_code"] == "NOTHING_TO_WITHDRAW"

    def test_claim_window_not_open(self, client):
        _create_policy(client, ALICE)
        response = client.post(
            "/api/v1/claims/",
            json={"policy_id": 1, "claim_amount": 5_000},
            headers=_headers(ALICE),
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == "CLAIM_WINDOW_NOT_OPEN"

    @pytest.mark.parametrize("body", [
        {"policy_id": 0, "claim_amount": 10},
        {"policy_id": 1, "claim_amount": -1},
    ])
    def test_out_of_range_claim_fields(self, client, clock, body):
        _create_policy(client, ALICE)
        clock.advance(days=30)
        response = client.post("/api/v1/claims/", json=body, headers=_headers(ALICE))
        assert response.status_code == 422
        assert client.get(f"/api/v1/claims/holder/{ALICE}").json()["claim_ids"] == []

    def test_process_requires_owner(self, client, clock):
        _create_policy(client, ALICE)
        clock.advance(days=30)
        client.post(
            "/api/v1/claims/",
            json={"policy_id": 1, "claim_amount": 50},
            headers=_headers(ALICE),
        )
        response = client.post(
            "/api/v1/admin/claims/1/process",
            json={"approve": True},
            headers=_headers(ALICE),
        )
        assert response.status_code == 403
        assert response.json()["error_code"] == "NOT_OWNER"

    def test_holder_claims(self, client, clock):
        _create_policy(client, ALICE)
        clock.advance(days=30)
        client.post("/api/v1/claims/", json={"policy_id": 1, "claim_amount": 50}, headers=_headers(ALICE))
        assert client.get(f"/api/v1/claims/holder/{ALICE}").json()["claim_ids"] == [1]


class TestPoolRoutes:

    def test_summary_and_notifications(self, client):
        _create_policy(client, ALICE)
        summary = client.get("/api/v1/pool/summary").json()
        assert summary["funds_held"] == 100
        assert summary["policy_count"] == 1
        assert summary["claims_by_status"]["pending"] == 0

        feed = client.get("/api/v1/pool/notifications", params={"after": 1}).json()
        assert feed["total"] == 2
        assert [n["kind"] for n in feed["notifications"]] == ["premium_paid"]

    def test_emergency_withdraw(self, client):
        _create_policy(client, ALICE, coverage=100_000, payment=1_000)
        assert client.post("/api/v1/admin/emergency-withdraw", headers=_headers(BOB)).status_code == 403

        response = client.post("/api/v1/admin/emergency-withdraw", headers=_headers(OWNER))
        assert response.json() == {"success": True, "amount": 1_000}
        assert client.get("/api/v1/pool/funds").json()["available_funds"] == 0
