from __future__ import annotations

import pytest
from pydantic import ValidationError

from domain.catalog.cart import CartLineInput, CartStore
from session.storage import MemoryStorage


def _line(item_id=100, quantity=1, subitems=(), item_type="dish"):
    return CartLineInput(item_type=item_type, item_id=item_id, quantity=quantity, subitems=[{"item_id": s} for s in subitems])


def test_add_merges_same_item_and_options():
    cart = CartStore()
    assert cart.add(_line(subitems=[501, 502])) == 0
    assert cart.add(_line(quantity=2, subitems=[502, 501])) == 0
    assert cart.add(_line(subitems=[501])) == 1
    assert len(cart) == 2
    assert cart.lines[0].quantity == 3


def test_remove_and_set_quantity():
    cart = CartStore([_line(100), _line(101), _line(102)])
    removed = cart.remove(1)
    assert removed.item_id == 101
    assert [l.item_id for l in cart] == [100, 102]

    assert cart.set_quantity(0, 5).quantity == 5
    assert cart.set_quantity(1, 0) is None
    assert [l.item_id for l in cart] == [100]

    with pytest.raises(IndexError):
        cart.remove(3)
    with pytest.raises(IndexError):
        cart.set_quantity(-1, 1)

    cart.clear()
    assert len(cart) == 0


def test_lines_are_copies():
    cart = CartStore([_line()])
    cart.lines.append(_line(101))
    assert len(cart) == 1


def test_quantity_must_be_positive():
    with pytest.raises(ValidationError):
        _line(quantity=0)
    with pytest.raises(ValidationError):
        CartLineInput(item_type="combo", item_id=1)


def test_persist_round_trip():
    storage = MemoryStorage()
    cart = CartStore([_line(100, 2, [501]), _line(1021, item_type="variant")])
    cart.save(storage, "s1")

    restored = CartStore.load(storage, "s1")
    assert restored.lines == cart.lines


def test_empty_cart_removes_key():
    storage = MemoryStorage()
    CartStore([_line()]).save(storage, "s1")
    CartStore().save(storage, "s1")
    assert storage.get("s1") is None


def test_from_payload_drops_broken_lines():
    cart = CartStore.from_payload([
        {"item_type": "dish", "item_id": 100, "quantity": 1, "subitems": []},
        {"item_type": "dish"},
        "garbage",
    ])
    assert [l.item_id for l in cart] == [100]
    assert len(CartStore.from_payload(None)) == 0
