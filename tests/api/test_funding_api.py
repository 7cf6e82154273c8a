"""
Integration tests for the funding lineage API.
"""

from decimal import Decimal


def create_group(client, description, amount, source_id=None):
    """Helper: create a draft, optionally drawing its debit on source_id."""
    data = {
        "description": description,
        "transaction_date": "2024-03-15",
        "entries": [
            {"account_id": "ACC1", "debit_amount": amount},
            {"account_id": "ACC2", "credit_amount": amount},
        ],
    }
    if source_id:
        data["source_transaction_id"] = source_id
        data["funding_type"] = "extended"
        data["entries"][0]["source_transaction_id"] = source_id
    response = client.post("/transactions", json=data)
    assert response.status_code == 201
    return response.json()


def create_confirmed_source(client, amount=1000):
    source = create_group(client, "Supplier credit", amount)
    response = client.post(f"/transactions/{source['id']}/confirm")
    assert response.status_code == 200
    return source


def test_usage_of_source(client):
    source = create_confirmed_source(client)
    create_group(client, "Order", 300, source_id=source["id"])

    response = client.get(f"/funding/{source['id']}/usage")

    assert response.status_code == 200
    data = response.json()
    assert Decimal(str(data["used_amount"])) == Decimal("300")
    assert Decimal(str(data["remaining_amount"])) == Decimal("700")
    assert len(data["usage_details"]) == 1


def test_allocation_over_remaining_funds(client):
    source = create_confirmed_source(client, amount=500)
    create_group(client, "First order", 400, source_id=source["id"])
    second = create_group(client, "Second order", 200, source_id=source["id"])

    response = client.get(f"/funding/{second['id']}/validation")

    assert response.status_code == 200
    data = response.json()
    assert data["is_valid"] is False
    assert len(data["issues"]) == 1


def test_funding_path(client):
    source = create_confirmed_source(client)
    child = create_group(client, "Order", 300, source_id=source["id"])

    response = client.get(f"/funding/{child['id']}/path")

    assert response.status_code == 200
    assert [item["transaction_id"] for item in response.json()] == [
        source["id"], child["id"],
    ]


def test_unknown_transaction_returns_404(client):
    for path in ("usage", "validation", "path"):
        response = client.get(f"/funding/ffffffffffffffffffffffff/{path}")
        assert response.status_code == 404
