"""Tests for the command-line interface."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from splitbasket.cli import app

runner = CliRunner()


def test_init_db_creates_database(tmp_path):
    result = runner.invoke(app, ["init-db"])

    assert result.exit_code == 0
    assert (tmp_path / "test_splitbasket.db").exists()


def test_ledger_without_members_exits_nonzero():
    result = runner.invoke(app, ["ledger"])

    assert result.exit_code == 1


def test_ledger_and_purchases_output(make_member, make_item, make_purchase):
    alice = make_member("Alice")
    make_member("Bob")
    milk = make_item("Milk", quantity=2, unit_price=15)
    purchase_id = make_purchase(alice, [milk])

    result = runner.invoke(app, ["ledger"])
    assert result.exit_code == 0
    ledger = json.loads(result.stdout)
    assert ledger["total_spent"] == pytest.approx(30)
    assert ledger["fair_share"] == pytest.approx(15)

    result = runner.invoke(app, ["purchases", str(purchase_id), "--pretty"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["item_names"] == ["Milk"]

    result = runner.invoke(app, ["purchases", "999"])
    assert result.exit_code == 1


def test_pending_output(make_item):
    make_item("Tea", quantity=1, unit_price=2)

    result = runner.invoke(app, ["pending"])

    assert result.exit_code == 0
    assert [item["name"] for item in json.loads(result.stdout)] == ["Tea"]
