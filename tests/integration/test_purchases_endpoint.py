"""Integration tests for the purchase endpoints."""

from __future__ import annotations

import pytest
from fastapi import status

from tests.integration.utils import create_item, create_member


def _purchase_with_items(client, member_id, item_ids, day="2025-02-02"):
    return client.post(
        "/purchases/with-items",
        json={"member_id": member_id, "date_purchased": day, "item_ids": item_ids},
    )


def test_purchase_with_items_and_delete(client):
    alice = create_member(client, "Alice")
    milk = create_item(client, "Milk", quantity=2, unit_price=15)
    bread = create_item(client, "Bread", quantity=1, unit_price=10)

    response = _purchase_with_items(client, alice, [milk, bread])
    assert response.status_code == status.HTTP_201_CREATED
    purchase_id = response.json()["created_id"]
    assert client.get("/pending").json() == []

    response = client.get(f"/purchases/{purchase_id}")
    assert response.status_code == status.HTTP_200_OK
    record = response.json()
    assert record["member_name"] == "Alice"
    assert record["item_names"] == ["Milk", "Bread"]
    assert record["total_amount"] == pytest.approx(40)
    assert record["date_purchased"] == "2025-02-02"

    response = client.delete(f"/purchases/{purchase_id}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["messages"] == ["Purchase deleted successfully."]
    assert sorted(item["id"] for item in client.get("/pending").json()) == sorted([milk, bread])
    assert client.get(f"/purchases/{purchase_id}").status_code == status.HTTP_404_NOT_FOUND

    response = client.delete(f"/purchases/{purchase_id}")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_purchase_with_missing_item_writes_nothing(client):
    alice = create_member(client, "Alice")
    milk = create_item(client, "Milk", quantity=1, unit_price=2)

    response = _purchase_with_items(client, alice, [milk, 404])
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert client.get("/purchases").json() == []
    assert [item["id"] for item in client.get("/pending").json()] == [milk]


def test_purchase_requires_items(client):
    alice = create_member(client, "Alice")

    response = _purchase_with_items(client, alice, [])
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_plain_purchase_and_update(client):
    alice = create_member(client, "Alice")
    bob = create_member(client, "Bob")

    response = client.post("/purchases", json={"member_id": 99, "date_purchased": "2025-03-01"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.post("/purchases", json={"member_id": alice, "date_purchased": "2025-03-01"})
    assert response.status_code == status.HTTP_201_CREATED
    purchase_id = response.json()["created_id"]

    response = client.put(
        f"/purchases/{purchase_id}",
        json={"id": purchase_id, "member_id": bob, "date_purchased": "2025-03-02"},
    )
    assert response.status_code == status.HTTP_200_OK
    record = client.get(f"/purchases/{purchase_id}").json()
    assert record["member_name"] == "Bob"
    assert record["item_names"] == []


def test_link_and_unlink_item(client):
    alice = create_member(client, "Alice")
    jam = create_item(client, "Jam", quantity=1, unit_price=4)
    purchase_id = client.post(
        "/purchases", json={"member_id": alice, "date_purchased": "2025-03-01"}
    ).json()["created_id"]

    response = client.post(f"/purchases/{purchase_id}/items/{jam}")
    assert response.status_code == status.HTTP_201_CREATED

    response = client.post(f"/purchases/{purchase_id}/items/{jam}")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "already linked" in response.json()["messages"][0]

    response = client.delete(f"/purchases/{purchase_id}/items/{jam}")
    assert response.status_code == status.HTTP_200_OK

    response = client.delete(f"/purchases/{purchase_id}/items/{jam}")
    assert response.status_code == status.HTTP_404_NOT_FOUND
