"""Unit tests for link persistence helpers."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from splitbasket.db.links import (
    delete_link,
    get_link,
    link_for_pair,
    list_links,
    pending_link_for,
    release_purchase_links,
)
from splitbasket.db.models import LinkORM
from splitbasket.db.repository import session_scope
from splitbasket.models.link import Bought, Pending
from splitbasket.models.responses import ServiceStatus


def test_link_state_reflects_purchase(make_member, make_item, make_purchase):
    alice = make_member("Alice")
    milk = make_item("Milk")
    bread = make_item("Bread")
    purchase_id = make_purchase(alice, [milk])

    with session_scope() as session:
        links = {link.grocery_item_id: link for link in list_links(session)}

    assert links[milk].state == Bought(purchase_id)
    assert links[bread].state == Pending()
    assert links[bread].model_dump()["is_bought"] is False


def test_pending_and_pair_lookups(make_member, make_item, make_purchase):
    alice = make_member("Alice")
    milk = make_item("Milk")
    purchase_id = make_purchase(alice, [milk])

    with session_scope() as session:
        assert pending_link_for(session, milk) is None
        pair = link_for_pair(session, milk, purchase_id)
        assert pair is not None
        assert get_link(session, pair.id).purchase_id == purchase_id
        assert get_link(session, 999) is None


def test_store_rejects_second_pending_link(make_item):
    milk = make_item("Milk")

    with pytest.raises(IntegrityError):
        with session_scope() as session:
            session.add(LinkORM(grocery_item_id=milk, purchase_id=None))
            session.flush()


def test_release_purchase_links_merges_duplicates(make_member, make_item, make_purchase):
    alice = make_member("Alice")
    milk = make_item("Milk")
    first = make_purchase(alice, [milk])
    second = make_purchase(alice, [milk])

    with session_scope() as session:
        released = release_purchase_links(session, [first, second])
        session.flush()
    assert released == 1

    with session_scope() as session:
        links = list_links(session)
    assert [(link.grocery_item_id, link.purchase_id) for link in links] == [(milk, None)]


def test_release_with_no_purchases_is_a_no_op():
    with session_scope() as session:
        assert release_purchase_links(session, []) == 0


def test_delete_link(make_item):
    milk = make_item("Milk")
    with session_scope() as session:
        link_id = list_links(session)[0].id

    with session_scope() as session:
        assert delete_link(session, link_id).status is ServiceStatus.DELETED
    with session_scope() as session:
        assert delete_link(session, link_id).status is ServiceStatus.NOT_FOUND
        assert pending_link_for(session, milk) is None
