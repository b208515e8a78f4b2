"""Cart service: stock guard, line merging, ownership, stale-cart purge."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from common.exceptions import ValidationError, NotFoundError, StockError
from common.helpers import now_utc
from modules.cart.models import CartItem
from modules.cart.service import cart_service
from modules.catalog.service import product_service


def test_add_then_add_again_merges_into_one_line(db, make_product):
    p = make_product(stock=10)
    cart_service.add_item(db, "s1", p.id, 2)
    cart_service.add_item(db, "s1", p.id, 3)

    items = cart_service.get_cart(db, "s1")
    assert len(items) == 1
    assert items[0].quantity == 5
    assert cart_service.get_count(db, "s1") == 5


def test_add_beyond_stock_leaves_line_unchanged(db, make_product):
    p = make_product(stock=5)
    item = cart_service.add_item(db, "s1", p.id, 3)
    assert item.quantity == 3

    with pytest.raises(StockError) as exc:
        cart_service.add_item(db, "s1", p.id, 3)
    assert "Available: 5" in exc.value.message
    assert exc.value.available == 5
    assert cart_service.get_cart(db, "s1")[0].quantity == 3


def test_quantity_never_exceeds_stock(db, make_product):
    p = make_product(stock=4)
    item = cart_service.add_item(db, "s1", p.id, 1)
    for qty in (2, 9, 4, 5, 3):
        try:
            cart_service.update_quantity(db, "s1", item.id, qty)
        except StockError:
            pass
        assert cart_service.get_cart(db, "s1")[0].quantity <= p.stock
    with pytest.raises(StockError):
        cart_service.add_item(db, "s1", p.id, 2)
    assert cart_service.get_cart(db, "s1")[0].quantity == 3


@pytest.mark.parametrize("qty", [0, -1])
def test_add_rejects_non_positive_quantity(db, make_product, qty):
    p = make_product()
    with pytest.raises(ValidationError):
        cart_service.add_item(db, "s1", p.id, qty)


def test_add_unknown_or_deleted_product(db, make_product):
    with pytest.raises(NotFoundError):
        cart_service.add_item(db, "s1", 12345, 1)

    p = make_product()
    product_service.soft_delete(db, p.id)
    with pytest.raises(NotFoundError):
        cart_service.add_item(db, "s1", p.id, 1)


def test_sessions_are_isolated(db, make_product):
    p = make_product(stock=10)
    item = cart_service.add_item(db, "alice", p.id, 2)
    cart_service.add_item(db, "bob", p.id, 1)

    assert cart_service.get_count(db, "alice") == 2
    assert cart_service.get_count(db, "bob") == 1

    with pytest.raises(NotFoundError) as exc:
        cart_service.update_quantity(db, "bob", item.id, 1)
    assert exc.value.message == "Cart item not found."
    with pytest.raises(NotFoundError):
        cart_service.remove_item(db, "bob", item.id)


def test_remove_and_clear(db, make_product):
    a = make_product(name="A")
    b = make_product(name="B")
    first = cart_service.add_item(db, "s1", a.id, 1)
    cart_service.add_item(db, "s1", b.id, 1)

    assert cart_service.remove_item(db, "s1", first.id) is True
    assert [i.product_id for i in cart_service.get_cart(db, "s1")] == [b.id]

    cart_service.clear(db, "s1")
    assert cart_service.get_cart(db, "s1") == []
    # Clearing an empty cart is a no-op
    cart_service.clear(db, "s1")
    assert cart_service.get_count(db, "s1") == 0


def test_total_uses_current_prices(db, make_product):
    a = make_product(name="A", price="19.99", stock=10)
    b = make_product(name="B", price="5.50", stock=10)
    cart_service.add_item(db, "s1", a.id, 3)
    cart_service.add_item(db, "s1", b.id, 2)
    assert cart_service.get_total(db, "s1") == Decimal("70.97")
    assert cart_service.get_total(db, "empty") == Decimal("0.00")


def test_deleted_product_line_resolves_but_cannot_grow(db, make_product):
    p = make_product(name="Headphones", stock=20)
    item = cart_service.add_item(db, "s1", p.id, 1)

    product_service.soft_delete(db, p.id)
    assert p.id not in [x.id for x in product_service.list_active(db)]

    line = cart_service.get_cart(db, "s1")[0]
    assert line.product.name == "Headphones"
    assert line.is_available is False
    assert line.to_dict()["available"] is False

    with pytest.raises(StockError):
        cart_service.update_quantity(db, "s1", item.id, 1)


def test_purge_stale_removes_only_old_lines(db, make_product):
    a = make_product(name="A")
    b = make_product(name="B")
    db.add(CartItem(
        session_id="abandoned", product_id=a.id, quantity=1,
        created_at=datetime(2000, 1, 1), updated_at=datetime(2000, 1, 1),
    ))
    cart_service.add_item(db, "active", b.id, 1)
    db.flush()

    removed = cart_service.purge_stale(db, now_utc() - timedelta(days=7))
    assert removed == 1
    assert cart_service.get_cart(db, "abandoned") == []
    assert cart_service.get_count(db, "active") == 1


def test_scheduler_job_purges_abandoned_carts(make_product, db):
    from config.database import SessionLocal
    from main import _cleanup_stale_carts

    p = make_product()
    db.add(CartItem(
        session_id="abandoned", product_id=p.id, quantity=1,
        created_at=datetime(2000, 1, 1), updated_at=datetime(2000, 1, 1),
    ))
    db.commit()

    _cleanup_stale_carts()

    with SessionLocal() as s:
        assert s.query(CartItem).count() == 0
