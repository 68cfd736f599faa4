"""Integration tests for metrics endpoint."""

from __future__ import annotations

from tests.integration.utils import create_item


def test_metrics_endpoint_available(client):
    client.get("/members")
    response = client.get("/metrics")
    assert response.status_code == 200
    body = response.content.decode()
    assert "splitbasket_http_requests_total" in body


def test_item_transitions_are_counted(client):
    create_item(client, "Milk", quantity=1, unit_price=1)

    body = client.get("/metrics").content.decode()
    assert 'splitbasket_item_transitions_total{transition="created_pending"}' in body
