"""Shared helpers for integration tests."""

from __future__ import annotations

from fastapi.testclient import TestClient


def create_member(client: TestClient, name: str, email: str | None = None) -> int:
    response = client.post(
        "/members",
        json={"name": name, "email": email or f"{name.lower()}@example.com"},
    )
    assert response.status_code == 201, response.text
    return response.json()["created_id"]


def create_item(
    client: TestClient,
    name: str,
    quantity: int,
    unit_price: float,
    member_id: int | None = None,
) -> int:
    payload: dict[str, object] = {"name": name, "quantity": quantity, "unit_price": unit_price}
    if member_id is not None:
        payload["member_id"] = member_id
    response = client.post("/grocery-items", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["created_id"]
