"""Tests for purchase history projections."""

from __future__ import annotations

from datetime import date

import pytest

from splitbasket.db.purchases import add_purchase, update_purchase
from splitbasket.db.repository import session_scope
from splitbasket.engine.history import find_purchase_history, list_purchase_history
from splitbasket.models.responses import ServiceStatus


def test_history_lists_items_and_totals(make_member, make_item, make_purchase):
    alice = make_member("Alice")
    bob = make_member("Bob")
    milk = make_item("Milk", quantity=2, unit_price=1.5)
    bread = make_item("Bread", quantity=1, unit_price=4)
    eggs = make_item("Eggs", quantity=6, unit_price=0.5)
    first = make_purchase(alice, [milk, bread], purchased_on=date(2025, 1, 10))
    second = make_purchase(bob, [eggs], purchased_on=date(2025, 1, 12))

    with session_scope() as session:
        history = list_purchase_history(session)

    assert [record.purchase_id for record in history] == [first, second]
    assert history[0].member_name == "Alice"
    assert history[0].item_names == ["Milk", "Bread"]
    assert history[0].total_amount == pytest.approx(7.0)
    assert history[0].date_purchased == date(2025, 1, 10)
    assert history[1].member_name == "Bob"
    assert history[1].total_amount == pytest.approx(3.0)


def test_purchase_without_items_has_zero_total(make_member):
    alice = make_member("Alice")
    with session_scope() as session:
        purchase_id = add_purchase(
            session, member_id=alice, date_purchased=date(2025, 5, 5)
        ).created_id

    with session_scope() as session:
        record = find_purchase_history(session, purchase_id)

    assert record is not None
    assert record.item_names == []
    assert record.total_amount == 0


def test_find_missing_purchase_returns_none():
    with session_scope() as session:
        assert find_purchase_history(session, 42) is None
        assert list_purchase_history(session) == []


def test_add_purchase_for_unknown_member_is_error():
    with session_scope() as session:
        result = add_purchase(session, member_id=3, date_purchased=date(2025, 5, 5))

    assert result.status is ServiceStatus.ERROR
    assert result.messages == ["Invalid member id."]


def test_update_purchase_changes_payer(make_member, make_item, make_purchase):
    alice = make_member("Alice")
    bob = make_member("Bob")
    milk = make_item("Milk", quantity=1, unit_price=2)
    purchase_id = make_purchase(alice, [milk])

    with session_scope() as session:
        mismatch = update_purchase(session, purchase_id, body_id=purchase_id + 1, member_id=bob)
        bad_member = update_purchase(session, purchase_id, member_id=77)
    assert mismatch.messages == ["Purchase ID mismatch."]
    assert bad_member.messages == ["Invalid member id."]

    with session_scope() as session:
        result = update_purchase(
            session,
            purchase_id,
            body_id=purchase_id,
            member_id=bob,
            date_purchased=date(2025, 6, 1),
        )
    assert result.status is ServiceStatus.UPDATED

    with session_scope() as session:
        record = find_purchase_history(session, purchase_id)
    assert record.member_name == "Bob"
    assert record.date_purchased == date(2025, 6, 1)
