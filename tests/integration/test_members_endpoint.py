"""Integration tests for the member endpoints."""

from __future__ import annotations

import pytest
from fastapi import status

from tests.integration.utils import create_item, create_member


def test_member_crud(client):
    response = client.get("/members")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == []

    member_id = create_member(client, "Alice")

    response = client.get(f"/members/{member_id}")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["name"] == "Alice"
    assert body["email"] == "alice@example.com"
    assert body["amount_paid"] == pytest.approx(0)

    response = client.put(
        f"/members/{member_id}",
        json={"id": member_id, "name": "Alicia", "email": "alicia@example.com"},
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "Updated"

    response = client.delete(f"/members/{member_id}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "Deleted"

    response = client.get(f"/members/{member_id}")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_member_update_with_mismatched_id(client):
    member_id = create_member(client, "Bob")

    response = client.put(
        f"/members/{member_id}",
        json={"id": member_id + 1, "name": "Bob", "email": "bob@example.com"},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {
        "status": "Error",
        "created_id": None,
        "messages": ["Member ID mismatch."],
    }


def test_delete_missing_member(client):
    response = client.delete("/members/321")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["status"] == "NotFound"


def test_duplicate_member_email_is_rejected(client):
    create_member(client, "Carol", email="carol@example.com")

    response = client.post("/members", json={"name": "Caroline", "email": "carol@example.com"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["status"] == "Error"


def test_invalid_member_payload_returns_422(client):
    response = client.post("/members", json={"name": "", "email": "not-an-email"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    fields = {tuple(error["loc"])[-1] for error in response.json()["detail"]}
    assert {"name", "email"} <= fields


def test_member_items(client):
    alice = create_member(client, "Alice")
    create_item(client, "Coffee", quantity=1, unit_price=8, member_id=alice)
    create_item(client, "Tea", quantity=1, unit_price=4)

    response = client.get(f"/members/{alice}/items")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == ["Coffee"]

    response = client.get("/members/999/items")
    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.parametrize("name", ["   ", "\t", " \n "])
def test_whitespace_only_member_name_returns_422(client, name):
    response = client.post("/members", json={"name": name, "email": "blank@example.com"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert client.get("/members").json() == []

    member_id = create_member(client, "Dana")
    response = client.put(
        f"/members/{member_id}",
        json={"id": member_id, "name": name, "email": "dana@example.com"},
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert client.get(f"/members/{member_id}").json()["name"] == "Dana"


def test_member_name_is_stored_trimmed(client):
    member_id = create_member(client, "  Erin  ", email="erin@example.com")

    assert client.get(f"/members/{member_id}").json()["name"] == "Erin"
