"""Unit tests for the OrderService domain orchestration.

These tests validate placing, fetching, cancelling and listing orders
against hand-written port stubs. The stubs record every call in a shared
log so tests can assert both call counts and call order.
"""

from decimal import Decimal

import pytest

from apps.orders.domain import Order, OrderNotFoundError, OrderService


class RecordingRepository:
    """Repository stub returning canned results and recording calls."""

    def __init__(self, log, found=None, orders=None, fail_on=None):
        self.log = log
        self.found = found
        self.orders = orders if orders is not None else []
        self.fail_on = fail_on or {}

    def _call(self, name, arg):
        self.log.append((name, arg))
        if name in self.fail_on:
            raise self.fail_on[name]

    def save(self, order):
        self._call("save", order)

    def find_by_id(self, order_id):
        self._call("find_by_id", order_id)
        return self.found

    def delete(self, order):
        self._call("delete", order)

    def find_all(self):
        self._call("find_all", None)
        return self.orders


class RecordingPayments:
    """Payments stub that answers with a fixed result (or raises)."""

    def __init__(self, log, result=True, error=None):
        self.log = log
        self.result = result
        self.error = error

    def process_payment(self, amount):
        self.log.append(("process_payment", amount))
        if self.error is not None:
            raise self.error
        return self.result


def make_order():
    return Order(id=1, amount=Decimal("10.0"))


def test_place_order_returns_true_when_payment_authorized():
    """Happy path: save first, then charge exactly the order amount."""
    log = []
    order = make_order()
    service = OrderService(RecordingRepository(log), RecordingPayments(log, result=True))

    assert service.place_order(order) is True
    assert log == [("save", order), ("process_payment", Decimal("10.0"))]
    assert log[0][1] is order


def test_place_order_returns_false_when_payment_declined():
    """Business rejection: no error raised and the order was still saved."""
    log = []
    order = make_order()
    service = OrderService(RecordingRepository(log), RecordingPayments(log, result=False))

    assert service.place_order(order) is False
    assert [name for name, _ in log] == ["save", "process_payment"]


def test_place_order_save_failure_propagates_and_skips_payment():
    log = []
    repo = RecordingRepository(log, fail_on={"save": ValueError("Illegal argument")})
    service = OrderService(repo, RecordingPayments(log, result=True))

    with pytest.raises(ValueError) as e:
        service.place_order(make_order())
    assert str(e.value) == "Illegal argument"
    assert log == [("save", log[0][1])]


def test_place_order_payment_failure_propagates_after_save():
    log = []
    service = OrderService(
        RecordingRepository(log),
        RecordingPayments(log, error=ConnectionError("gateway down")),
    )

    with pytest.raises(ConnectionError):
        service.place_order(make_order())
    assert [name for name, _ in log] == ["save", "process_payment"]


def test_get_order_by_id_returns_same_instance():
    log = []
    order = make_order()
    service = OrderService(RecordingRepository(log, found=order), RecordingPayments(log))

    assert service.get_order_by_id(1) is order
    assert log == [("find_by_id", 1)]


def test_get_order_by_id_propagates_repository_error():
    log = []
    repo = RecordingRepository(log, fail_on={"find_by_id": ValueError("test")})
    service = OrderService(repo, RecordingPayments(log))

    with pytest.raises(ValueError) as e:
        service.get_order_by_id(1)
    assert str(e.value) == "test"
    assert log == [("find_by_id", 1)]


def test_get_order_by_id_raises_not_found_when_absent():
    log = []
    service = OrderService(RecordingRepository(log, found=None), RecordingPayments(log))

    with pytest.raises(OrderNotFoundError) as e:
        service.get_order_by_id(42)
    assert str(e.value) == "ORDER_NOT_FOUND"
    assert e.value.order_id == 42


def test_cancel_order_deletes_found_order_once():
    log = []
    order = make_order()
    service = OrderService(RecordingRepository(log, found=order), RecordingPayments(log))

    assert service.cancel_order(1) is None
    assert log == [("find_by_id", 1), ("delete", order)]
    assert log[1][1] is order


def test_cancel_order_propagates_delete_error():
    log = []
    repo = RecordingRepository(log, found=make_order(), fail_on={"delete": ValueError("test")})
    service = OrderService(repo, RecordingPayments(log))

    with pytest.raises(ValueError):
        service.cancel_order(1)
    assert [name for name, _ in log] == ["find_by_id", "delete"]


def test_cancel_order_missing_raises_illegal_argument_without_delete():
    log = []
    service = OrderService(RecordingRepository(log, found=None), RecordingPayments(log))

    with pytest.raises(ValueError):
        service.cancel_order(1)
    assert log == [("find_by_id", 1)]


def test_list_all_orders_returns_repository_sequence():
    log = []
    orders = [make_order(), Order(id=2, amount=Decimal("0"))]
    service = OrderService(RecordingRepository(log, orders=orders), RecordingPayments(log))

    out = service.list_all_orders()
    assert out is orders
    assert [o.id for o in out] == [1, 2]


def test_list_all_orders_empty():
    log = []
    orders = []
    service = OrderService(RecordingRepository(log, orders=orders), RecordingPayments(log))

    out = service.list_all_orders()
    assert out == [] and out is orders
    assert log == [("find_all", None)]


def test_list_all_orders_propagates_repository_error():
    log = []
    repo = RecordingRepository(log, fail_on={"find_all": ValueError("foo")})
    service = OrderService(repo, RecordingPayments(log))

    with pytest.raises(ValueError):
        service.list_all_orders()
    assert log == [("find_all", None)]
