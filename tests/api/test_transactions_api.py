"""
Integration tests for the transaction group API.

These exercise the full request path:
HTTP → FastAPI → Service → Database → Response
"""

from decimal import Decimal


def group_json(description="Office supplies", amount=100, **extra):
    return {
        "description": description,
        "transaction_date": "2024-03-15",
        "entries": [
            {"account_id": "ACC1", "debit_amount": amount},
            {"account_id": "ACC2", "credit_amount": amount},
        ],
        **extra,
    }


def create_group(client, **kwargs):
    """Helper: create a draft through the API and return its JSON."""
    response = client.post("/transactions", json=group_json(**kwargs))
    assert response.status_code == 201
    return response.json()


# --- Validation ---

class TestValidateEndpoint:

    def test_valid_candidate(self, client):
        response = client.post("/transactions/validate", json=group_json())
        assert response.status_code == 200
        assert response.json() == {"is_valid": True, "errors": []}

    def test_invalid_candidate_still_200(self, client):
        data = group_json()
        data["entries"] = data["entries"][:1]

        response = client.post("/transactions/validate", json=data)

        assert response.status_code == 200
        body = response.json()
        assert body["is_valid"] is False
        assert len(body["errors"]) == 2  # entry count and imbalance

    def test_entries_that_are_not_a_list_still_200(self, client):
        data = group_json(entries=5)

        response = client.post("/transactions/validate", json=data)

        assert response.status_code == 200
        assert response.json() == {
            "is_valid": False,
            "errors": ["A transaction needs at least 2 entries"],
        }

    def test_create_with_entries_that_are_not_a_list_returns_400(self, client):
        response = client.post("/transactions", json=group_json(entries=True))

        assert response.status_code == 400
        assert response.json()["detail"]["errors"] == [
            "A transaction needs at least 2 entries"
        ]


# --- Create / Read ---

class TestCreateTransaction:

    def test_create_returns_draft_with_permissions(self, client):
        data = create_group(client)

        assert data["group_number"] == "TXN-20240315-001"
        assert data["status"] == "draft"
        assert data["funding_type"] == "original"
        assert Decimal(str(data["total_amount"])) == Decimal("100")
        assert len(data["entries"]) == 2
        assert data["permissions"] == {
            "status": "draft",
            "can_edit": True,
            "can_delete": True,
            "can_confirm": True,
        }

    def test_invalid_group_returns_400_with_every_error(self, client):
        data = group_json(description="   ")
        data["entries"][1]["credit_amount"] = 90

        response = client.post("/transactions", json=data)

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["message"] == "Transaction is invalid"
        assert len(detail["errors"]) == 2

    def test_get_transaction(self, client):
        created = create_group(client)
        response = client.get(f"/transactions/{created['id']}")

        assert response.status_code == 200
        assert response.json()["group_number"] == created["group_number"]

    def test_unknown_transaction_returns_404(self, client):
        response = client.get("/transactions/ffffffffffffffffffffffff")
        assert response.status_code == 404

    def test_malformed_id_returns_404(self, client):
        response = client.get("/transactions/123")
        assert response.status_code == 404

    def test_list_filters_by_status(self, client):
        create_group(client, description="Draft")
        confirmed = create_group(client, description="Confirmed")
        client.post(f"/transactions/{confirmed['id']}/confirm")

        response = client.get("/transactions", params={"status": "confirmed"})

        assert response.status_code == 200
        assert [g["description"] for g in response.json()] == ["Confirmed"]


# --- Lifecycle ---

class TestLifecycleEndpoints:

    def test_update_draft(self, client):
        created = create_group(client)

        response = client.put(
            f"/transactions/{created['id']}",
            json=group_json(description="Office chairs", amount=250),
        )

        assert response.status_code == 200
        assert response.json()["description"] == "Office chairs"

    def test_confirm_then_edit_returns_409(self, client):
        created = create_group(client)

        response = client.post(f"/transactions/{created['id']}/confirm")
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"
        assert response.json()["permissions"]["can_edit"] is False

        response = client.put(
            f"/transactions/{created['id']}",
            json=group_json(description="Too late"),
        )
        assert response.status_code == 409

    def test_confirm_twice_returns_409(self, client):
        created = create_group(client)
        client.post(f"/transactions/{created['id']}/confirm")

        response = client.post(f"/transactions/{created['id']}/confirm")
        assert response.status_code == 409

    def test_cancel_then_confirm_returns_409(self, client):
        created = create_group(client)

        response = client.post(f"/transactions/{created['id']}/cancel")
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

        response = client.post(f"/transactions/{created['id']}/confirm")
        assert response.status_code == 409

    def test_delete_draft(self, client):
        created = create_group(client)

        response = client.delete(f"/transactions/{created['id']}")
        assert response.status_code == 204

        response = client.get(f"/transactions/{created['id']}")
        assert response.status_code == 404

    def test_delete_confirmed_returns_409(self, client):
        created = create_group(client)
        client.post(f"/transactions/{created['id']}/confirm")

        response = client.delete(f"/transactions/{created['id']}")
        assert response.status_code == 409

    def test_permissions_endpoint(self, client):
        created = create_group(client)
        client.post(f"/transactions/{created['id']}/cancel")

        response = client.get(f"/transactions/{created['id']}/permissions")

        assert response.status_code == 200
        assert response.json() == {
            "status": "cancelled",
            "can_edit": False,
            "can_delete": False,
            "can_confirm": False,
        }


# --- Copy ---

class TestCopyEndpoint:

    def test_copy_keeps_amounts_and_drops_lineage(self, client):
        source = create_group(client, description="Source")
        created = create_group(
            client,
            description="Funded order",
            source_transaction_id=source["id"],
            linked_transaction_ids=[source["id"]],
            funding_type="extended",
            invoice_no="INV-9",
        )

        response = client.get(f"/transactions/{created['id']}/copy")

        assert response.status_code == 200
        copy = response.json()
        assert copy["description"] == ""
        assert copy["invoice_no"] == ""
        assert copy["status"] == "draft"
        assert copy["funding_type"] == "original"
        assert "source_transaction_id" not in copy
        assert "linked_transaction_ids" not in copy
        assert [e["account_id"] for e in copy["entries"]] == ["ACC1", "ACC2"]
        assert float(copy["entries"][0]["debit_amount"]) == 100
        assert all(e["description"] == "" for e in copy["entries"])

    def test_copy_of_unknown_transaction_returns_404(self, client):
        response = client.get("/transactions/ffffffffffffffffffffffff/copy")
        assert response.status_code == 404
