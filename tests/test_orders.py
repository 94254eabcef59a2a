from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from bledor.core import orders as engine
from bledor.core.errors import (
    EmptyCart,
    Forbidden,
    InvalidStatus,
    MissingCustomerName,
    OrderNotFound,
    ProductNotFound,
    StorageError,
    TicketGenerationFailed,
    Unauthenticated,
)
from bledor.models.log import Log
from bledor.models.order import Order, OrderItem, OrderStatus, PaymentMethod
from bledor.models.users import Role
from bledor.schemas.order import MAX_LINE_QUANTITY, CartLine, ClientOrderCreate, OrderCreate
from bledor.utils.audit import write_log
from tests.conftest import actor_of, make_user


def cart(*lines, **fields):
    return OrderCreate(items=[CartLine(product_id=pid, quantity=qty) for pid, qty in lines], **fields)


# ---------- creation ----------

def test_create_order_prices_from_catalog(db, manager, bread):
    order = engine.create_order(db, actor_of(manager), cart(("bread-1", 2)))

    assert order.status == OrderStatus.PENDING
    assert order.total == Decimal("2.40")
    assert order.manager_id == manager.id
    assert order.ticket_number.startswith("BLE-")
    assert len(order.items) == 1
    item = order.items[0]
    assert item.product_id == "bread-1"
    assert item.quantity == 2
    assert item.unit_price == Decimal("1.20")


def test_caller_supplied_price_is_ignored(db, manager, bread):
    line = CartLine.model_validate({"product_id": "bread-1", "quantity": 3, "unit_price": "0.01"})
    order = engine.create_order(db, actor_of(manager), OrderCreate(items=[line]))

    assert order.items[0].unit_price == Decimal("1.20")
    assert order.total == Decimal("3.60")


def test_missing_quantity_defaults_to_one(db, manager, bread):
    line = CartLine.model_validate({"product_id": "bread-1", "quantity": None})
    order = engine.create_order(db, actor_of(manager), OrderCreate(items=[line]))

    assert order.items[0].quantity == 1
    assert order.total == Decimal("1.20")


def test_items_keep_cart_order_and_repeated_lines(db, owner, bread, croissant):
    order = engine.create_order(
        db, actor_of(owner), cart(("croissant-1", 2), ("bread-1", 1), ("croissant-1", 1)),
        payment_method=PaymentMethod.CARD, customer_name="  Jules ", customer_note="",
    )

    assert [(i.product_id, i.quantity) for i in order.items] == [
        ("croissant-1", 2), ("bread-1", 1), ("croissant-1", 1),
    ]
    assert order.total == Decimal("4.50")
    assert order.payment_method == PaymentMethod.CARD
    assert order.customer_name == "Jules"
    assert order.customer_note is None


def test_unknown_product_persists_nothing(db, manager, bread):
    with pytest.raises(ProductNotFound) as excinfo:
        engine.create_order(db, actor_of(manager), cart(("bread-1", 1), ("ghost", 2)))

    assert excinfo.value.product_ids == ["ghost"]
    assert "ghost" in excinfo.value.message
    assert db.query(Order).count() == 0
    assert db.query(OrderItem).count() == 0


def test_empty_cart_is_rejected(db, manager):
    with pytest.raises(EmptyCart):
        engine.create_order(db, actor_of(manager), OrderCreate(items=[]))
    assert db.query(Order).count() == 0


def test_create_order_requires_staff(db, customer, bread):
    with pytest.raises(Forbidden):
        engine.create_order(db, actor_of(customer), cart(("bread-1", 1)))
    with pytest.raises(Unauthenticated):
        engine.create_order(db, None, cart(("bread-1", 1)))
    assert db.query(Order).count() == 0


def test_price_change_does_not_touch_existing_orders(db, manager, bread):
    first = engine.create_order(db, actor_of(manager), cart(("bread-1", 1)))

    bread.price = Decimal("1.50")
    db.commit()
    second = engine.create_order(db, actor_of(manager), cart(("bread-1", 1)))

    db.expire_all()
    first = db.get(Order, first.id)
    assert first.items[0].unit_price == Decimal("1.20")
    assert first.total == Decimal("1.20")
    assert second.items[0].unit_price == Decimal("1.50")
    assert second.total == Decimal("1.50")


def test_creation_is_audited(db, manager, bread):
    order = engine.create_order(db, actor_of(manager), cart(("bread-1", 2)), ip="10.0.0.1")

    entry = db.query(Log).filter(Log.action == "ORDER_CREATE").one()
    assert entry.user_id == manager.id
    assert entry.ip == "10.0.0.1"
    assert entry.meta["ticket"] == order.ticket_number
    assert entry.meta["total"] == "2.40"


# ---------- ticket collisions ----------

def test_ticket_collision_retries_with_fresh_ticket(db, manager, bread, monkeypatch):
    tickets = iter(["BLE-20251118-0742-1111", "BLE-20251118-0742-1111", "BLE-20251118-0742-2222"])
    calls = []

    def fake_ticket():
        value = next(tickets)
        calls.append(value)
        return value

    monkeypatch.setattr(engine, "generate_ticket_number", fake_ticket)

    first = engine.create_order(db, actor_of(manager), cart(("bread-1", 1)))
    second = engine.create_order(db, actor_of(manager), cart(("bread-1", 2)))

    assert first.ticket_number == "BLE-20251118-0742-1111"
    assert second.ticket_number == "BLE-20251118-0742-2222"
    assert len(calls) == 3
    assert db.query(Order).count() == 2
    assert db.query(OrderItem).count() == 2


def test_ticket_generation_gives_up_after_max_attempts(db, manager, bread, monkeypatch):
    calls = []

    def same_ticket():
        calls.append(1)
        return "BLE-20251118-0742-1111"

    monkeypatch.setattr(engine, "generate_ticket_number", same_ticket)
    engine.create_order(db, actor_of(manager), cart(("bread-1", 1)))
    calls.clear()

    with pytest.raises(TicketGenerationFailed):
        engine.create_order(db, actor_of(manager), cart(("bread-1", 1)))

    assert len(calls) == engine.settings.TICKET_MAX_ATTEMPTS
    assert db.query(Order).count() == 1
    assert db.query(OrderItem).count() == 1


# ---------- client variant ----------

def test_client_order_defaults_name_from_profile(db, customer, bread):
    payload = ClientOrderCreate(items=[CartLine(product_id="bread-1", quantity=2)], customer_note="Bien cuite")
    order = engine.create_client_order(db, actor_of(customer), payload)

    assert order.customer_name == "Camille"
    assert order.customer_id == customer.id
    assert order.manager_id is None
    assert order.payment_method == PaymentMethod.CASH
    assert order.customer_note == "Bien cuite"
    assert order.total == Decimal("2.40")


def test_client_order_without_any_name_is_rejected(db, bread):
    anonymous = make_user(db, "noname@bledor.fr", Role.CLIENT)
    payload = ClientOrderCreate(items=[CartLine(product_id="bread-1")], customer_name="   ")

    with pytest.raises(MissingCustomerName):
        engine.create_client_order(db, actor_of(anonymous), payload)
    assert db.query(Order).count() == 0


def test_client_order_is_for_clients_only(db, manager, bread):
    payload = ClientOrderCreate(items=[CartLine(product_id="bread-1")], customer_name="Jules")
    with pytest.raises(Forbidden):
        engine.create_client_order(db, actor_of(manager), payload)


# ---------- status ----------

@pytest.mark.parametrize("start", [OrderStatus.DELIVERED, OrderStatus.CANCELED])
@pytest.mark.parametrize("target", list(OrderStatus))
def test_status_can_move_anywhere(db, manager, bread, start, target):
    order = engine.create_order(db, actor_of(manager), cart(("bread-1", 1)))
    engine.set_order_status(db, actor_of(manager), order.id, start)

    updated = engine.set_order_status(db, actor_of(manager), order.id, target.value)
    assert updated.status == target


def test_unknown_status_leaves_order_unchanged(db, manager, bread):
    order = engine.create_order(db, actor_of(manager), cart(("bread-1", 1)))

    with pytest.raises(InvalidStatus):
        engine.set_order_status(db, actor_of(manager), order.id, "BOGUS")
    with pytest.raises(InvalidStatus):
        engine.set_order_status(db, actor_of(manager), order.id, "ready")

    db.expire_all()
    assert db.get(Order, order.id).status == OrderStatus.PENDING


def test_client_cannot_change_status(db, manager, customer, bread):
    order = engine.create_order(db, actor_of(manager), cart(("bread-1", 1)))

    with pytest.raises(Forbidden):
        engine.set_order_status(db, actor_of(customer), order.id, "READY")
    with pytest.raises(Unauthenticated):
        engine.set_order_status(db, None, order.id, "READY")

    db.expire_all()
    assert db.get(Order, order.id).status == OrderStatus.PENDING


def test_status_change_on_missing_order(db, owner):
    with pytest.raises(OrderNotFound):
        engine.set_order_status(db, actor_of(owner), "nope", "READY")


def test_status_change_is_audited_with_old_value(db, owner, bread):
    order = engine.create_order(db, actor_of(owner), cart(("bread-1", 1)))
    engine.set_order_status(db, actor_of(owner), order.id, "PREPARATION")

    entry = db.query(Log).filter(Log.action == "ORDER_STATUS_CHANGE").one()
    assert entry.meta == {"order_id": order.id, "old": "PENDING", "new": "PREPARATION"}


# ---------- reads ----------

def test_client_reads_only_own_orders(db, manager, customer, bread):
    other = make_user(db, "other@bledor.fr", Role.CLIENT, name="Léa")
    mine = engine.create_client_order(db, actor_of(customer), ClientOrderCreate(items=[CartLine(product_id="bread-1")]))
    theirs = engine.create_client_order(db, actor_of(other), ClientOrderCreate(items=[CartLine(product_id="bread-1")]))

    assert engine.get_order(db, actor_of(customer), mine.id).id == mine.id
    with pytest.raises(Forbidden):
        engine.get_order(db, actor_of(customer), theirs.id)
    with pytest.raises(Forbidden):
        engine.get_order(db, actor_of(customer), "does-not-exist")
    with pytest.raises(OrderNotFound):
        engine.get_order(db, actor_of(manager), "does-not-exist")

    assert [o.id for o in engine.list_client_orders(db, actor_of(customer))] == [mine.id]


def test_list_orders_filters_by_status(db, manager, bread):
    a = engine.create_order(db, actor_of(manager), cart(("bread-1", 1)))
    engine.create_order(db, actor_of(manager), cart(("bread-1", 2)))
    engine.set_order_status(db, actor_of(manager), a.id, "READY")

    ready = engine.list_orders(db, actor_of(manager), status="READY")
    assert [o.id for o in ready] == [a.id]
    assert len(engine.list_orders(db, actor_of(manager))) == 2
    with pytest.raises(InvalidStatus):
        engine.list_orders(db, actor_of(manager), status="BOGUS")


def test_list_orders_defaults_to_today(db, manager, bread):
    old = engine.create_order(db, actor_of(manager), cart(("bread-1", 1)))
    fresh = engine.create_order(db, actor_of(manager), cart(("bread-1", 2)))
    old.created_at = datetime.now() - timedelta(days=2)
    db.commit()

    assert [o.id for o in engine.list_orders(db, actor_of(manager))] == [fresh.id]
    since = engine.list_orders(db, actor_of(manager), date_from=datetime.now() - timedelta(days=3))
    assert {o.id for o in since} == {old.id, fresh.id}


# ---------- quantity bounds and storage failures ----------

def fail_next_commit(monkeypatch, db, exc):
    """Make the next commit write its rows, then fail like the database would."""
    real_commit = db.commit

    def commit_once():
        monkeypatch.setattr(db, "commit", real_commit)
        db.flush()
        raise exc

    monkeypatch.setattr(db, "commit", commit_once)


def test_quantity_is_bounded():
    assert CartLine(product_id="bread-1", quantity=MAX_LINE_QUANTITY).quantity == MAX_LINE_QUANTITY
    with pytest.raises(ValidationError):
        CartLine(product_id="bread-1", quantity=MAX_LINE_QUANTITY + 1)
    with pytest.raises(ValidationError):
        CartLine(product_id="bread-1", quantity=10**20)
    with pytest.raises(ValidationError):
        CartLine(product_id="bread-1", quantity=0)


def test_failed_insert_leaves_no_order_items_or_log(db, manager, bread, monkeypatch):
    fail_next_commit(monkeypatch, db, OperationalError("INSERT INTO order_items", {}, Exception("disk I/O error")))

    with pytest.raises(StorageError):
        engine.create_order(db, actor_of(manager), cart(("bread-1", 2)))

    assert db.query(Order).count() == 0
    assert db.query(OrderItem).count() == 0
    assert db.query(Log).filter(Log.action == "ORDER_CREATE").count() == 0


def test_driver_error_rolls_back_the_session(db, manager, bread, monkeypatch):
    fail_next_commit(monkeypatch, db, OverflowError("Python int too large to convert to SQLite INTEGER"))

    with pytest.raises(OverflowError):
        engine.create_order(db, actor_of(manager), cart(("bread-1", 2)))

    # The session is usable again and nothing was kept
    assert db.query(Order).count() == 0
    order = engine.create_order(db, actor_of(manager), cart(("bread-1", 1)))
    assert order.total == Decimal("1.20")


def test_status_change_and_audit_commit_together(db, manager, bread, monkeypatch):
    order = engine.create_order(db, actor_of(manager), cart(("bread-1", 1)))
    fail_next_commit(monkeypatch, db, OperationalError("UPDATE orders", {}, Exception("database is locked")))

    with pytest.raises(StorageError):
        engine.set_order_status(db, actor_of(manager), order.id, "READY")

    db.expire_all()
    assert db.get(Order, order.id).status == OrderStatus.PENDING
    assert db.query(Log).filter(Log.action == "ORDER_STATUS_CHANGE").count() == 0


def test_audit_write_failure_is_a_storage_error(db, monkeypatch):
    fail_next_commit(monkeypatch, db, OperationalError("INSERT INTO logs", {}, Exception("disk I/O error")))

    with pytest.raises(StorageError):
        write_log(db, user_id=None, action="LOGIN", resource="auth", status="FAIL")

    assert db.query(Log).count() == 0
