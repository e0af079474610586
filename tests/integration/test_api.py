"""End-to-end tests through the HTTP surface.

The application runs its real lifespan with the in-process store, an
in-process cache and the scripted payment gateway.
"""

from typing import Any

from fastapi.testclient import TestClient

from tests.conftest import FakeGateway

POLICY = {
    "title": "Family Shield",
    "category": "Term Life",
    "description": "Twenty year term cover",
    "minAge": 18,
    "maxAge": 60,
    "coverage": 500000,
    "duration": 20,
    "basePremium": 120,
    "image": "https://img.example.com/family.png",
}


def create_policy(client: TestClient, **overrides: Any) -> dict[str, Any]:
    response = client.post("/api/create-policies", json={**POLICY, **overrides})
    assert response.status_code == 201
    return response.json()["data"]


def submit(client: TestClient, policy_id: str | None, email: str = "a@x.com") -> str:
    response = client.post(
        "/api/submit-application",
        json={"name": "Alice", "email": email, "phone": "555", "policy_id": policy_id},
    )
    assert response.status_code == 201
    return response.json()["data"]["insertedId"]


def purchase_count(client: TestClient, policy_id: str) -> int:
    return client.get(f"/api/policies/{policy_id}").json()["data"]["purchaseCount"]


class TestPlatformEndpoints:
    def test_root(self, client: TestClient) -> None:
        body = client.get("/").json()

        assert body["status"] == "operational"
        assert body["environment"] == "development"

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "components": {"database": True, "cache": True},
        }


class TestEnvelope:
    """Success and error envelopes with their status codes."""

    def test_missing_name_names_the_field(self, client: TestClient) -> None:
        response = client.post(
            "/api/submit-application", json={"email": "a@x.com", "phone": "555"}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "validation_error"
        assert body["field"] == "name"

    def test_malformed_id_is_bad_request(self, client: TestClient) -> None:
        response = client.get("/api/applications/not-an-id")

        assert response.status_code == 400
        assert response.json()["field"] == "applicationId"

    def test_unknown_policy_is_not_found(self, client: TestClient) -> None:
        response = client.get("/api/policies/7a4c1e0e-6f4a-4c8e-9a57-1d2b3c4d5e6f")

        assert response.status_code == 404
        assert response.json()["error_code"] == "not_found"

    def test_duplicate_claim_is_conflict(self, client: TestClient) -> None:
        policy = create_policy(client)
        claim = {"policy_id": policy["id"], "customerEmail": "a@x.com", "reason": "Injury"}

        assert client.post("/api/claim-request", json=claim).status_code == 201
        response = client.post("/api/claim-request", json=claim)

        assert response.status_code == 409
        assert response.json()["error"] == "Claim already submitted for this policy"

    def test_gateway_failure_is_bad_gateway(self, client: TestClient) -> None:
        response = client.post(
            "/api/save-transaction",
            json={
                "paymentIntentId": "pi_unknown",
                "email": "a@x.com",
                "policyId": "7a4c1e0e-6f4a-4c8e-9a57-1d2b3c4d5e6f",
                "applicationId": "0c6f7d1a-2b3c-4d5e-8f90-a1b2c3d4e5f6",
            },
        )

        assert response.status_code == 502
        assert response.json()["error_code"] == "external_service_error"

    def test_missing_transaction_field_is_named(self, client: TestClient) -> None:
        response = client.post("/api/save-transaction", json={"paymentIntentId": "pi_1"})

        assert response.status_code == 400
        assert response.json()["field"] == "email"


class TestLifecycle:
    """Policy to application to payment to claim."""

    def test_full_lifecycle(self, client: TestClient, gateway: FakeGateway) -> None:
        policy = create_policy(client)
        assert policy["purchaseCount"] == 0

        application_id = submit(client, policy["id"])
        application = client.get(f"/api/applications/{application_id}").json()["data"]
        assert application["status"] == "Pending"
        assert application["payment"]["status"] == "Due"
        assert application["payment"]["amount"] == 120
        assert application["policyDetails"]["title"] == "Family Shield"

        assigned = client.patch(
            f"/api/application/{application_id}/assign-agent", json={"agent": "agent@x.com"}
        )
        assert assigned.json() == {"success": True, "data": {"modifiedCount": 1}}

        secret = client.post(
            "/api/create-payment",
            json={
                "policyId": policy["id"],
                "policyName": policy["title"],
                "amount": 120,
                "customerEmail": "a@x.com",
            },
        ).json()["data"]["clientSecret"]
        assert secret == "pi_1_secret"
        assert gateway.created[0]["amount"] == 12000

        gateway.add_intent("pi_1", 12000)
        saved = client.post(
            "/api/save-transaction",
            json={
                "paymentIntentId": "pi_1",
                "email": "a@x.com",
                "policyId": policy["id"],
                "applicationId": application_id,
            },
        )
        assert saved.status_code == 201
        assert saved.json()["data"]["transaction"]["paidAmount"] == 120

        application = client.get(f"/api/applications/{application_id}").json()["data"]
        assert application["status"] == "Approved"
        assert application["payment"]["status"] == "Paid"
        assert purchase_count(client, policy["id"]) == 1

        transactions = client.get("/api/transactions", params={"email": "a@x.com"}).json()
        assert [t["transactionId"] for t in transactions["data"]] == ["pi_1"]

        claim = client.post(
            "/api/claim-request",
            json={"policy_id": policy["id"], "customerEmail": "a@x.com", "reason": "Injury"},
        ).json()["data"]
        approved = client.patch(
            f"/api/claim-approve/{claim['id']}",
            json={"status": "Approved", "agentEmail": "agent@x.com"},
        ).json()["data"]
        assert approved["status"] == "Approved"
        assert approved["approvedAt"] is not None
        assert purchase_count(client, policy["id"]) == 2

        overview = client.get("/api/agent/agent@x.com/overview").json()["data"]
        assert overview["statusCounts"]["Approved"] == 1
        assert overview["claimsResolvedThisMonth"] == 1

    def test_double_approval_counts_once(self, client: TestClient) -> None:
        policy = create_policy(client)
        application_id = submit(client, policy["id"])
        url = f"/api/agent/application/{application_id}/status"

        assert client.patch(url, json={"status": "Approved"}).status_code == 200
        assert client.patch(url, json={"status": "Approved"}).status_code == 200

        assert purchase_count(client, policy["id"]) == 1

    def test_invalid_status(self, client: TestClient) -> None:
        policy = create_policy(client)
        application_id = submit(client, policy["id"])

        response = client.patch(
            f"/api/agent/application/{application_id}/status", json={"status": "Cancelled"}
        )

        assert response.status_code == 400
        assert response.json()["field"] == "status"

    def test_list_applications_by_status(self, client: TestClient) -> None:
        policy = create_policy(client)
        approved = submit(client, policy["id"])
        submit(client, policy["id"])
        client.patch(f"/api/agent/application/{approved}/status", json={"status": "Approved"})

        body = client.get("/api/applications", params={"status": "Approved"}).json()

        assert [application["id"] for application in body["data"]] == [approved]


class TestCatalog:
    def test_update_and_delete(self, client: TestClient) -> None:
        policy = create_policy(client)

        updated = client.put(f"/api/update-policy/{policy['id']}", json={"basePremium": 150})
        assert updated.json()["data"]["basePremium"] == 150

        assert client.delete(f"/api/delete-policy/{policy['id']}").status_code == 200
        assert client.get(f"/api/policies/{policy['id']}").status_code == 404

    def test_list_by_category(self, client: TestClient) -> None:
        create_policy(client)
        create_policy(client, title="Nest Egg", category="Retirement")

        body = client.get("/api/get-policies", params={"category": "Retirement"}).json()

        assert [policy["title"] for policy in body["data"]] == ["Nest Egg"]

    def test_popular_policies_ordering(self, client: TestClient) -> None:
        quiet = create_policy(client, title="Quiet")
        busy = create_policy(client, title="Busy")
        for _ in range(2):
            application_id = submit(client, busy["id"])
            client.patch(
                f"/api/agent/application/{application_id}/status", json={"status": "Approved"}
            )

        body = client.get("/api/policies/popular", params={"limit": 5}).json()

        assert [policy["title"] for policy in body["data"]] == ["Busy", "Quiet"]
        assert quiet["id"] != busy["id"]


class TestUsers:
    def test_register_and_promote(self, client: TestClient) -> None:
        created = client.post("/api/users", json={"email": "a@x.com", "name": "Alice"})
        assert created.json()["data"]["role"] == "customer"

        client.patch("/api/users/a@x.com/role", json={"role": "agent"})

        assert client.get("/api/users/a@x.com/role").json() == {
            "success": True,
            "data": {"role": "agent"},
        }

    def test_unknown_role_value(self, client: TestClient) -> None:
        client.post("/api/users", json={"email": "a@x.com"})

        response = client.patch("/api/users/a@x.com/role", json={"role": "superuser"})

        assert response.status_code == 400
        assert response.json()["field"] == "role"
