"""Repository layer for persisting orders.

This module implements ``OrderRepositoryPort`` on top of the Django ORM so
the domain layer is not coupled to ORM details. Rows are mapped to and from
the domain ``Order`` dataclass; callers never see ``OrderModel`` instances.
"""

from typing import List, Optional

from django.core.management.color import no_style
from django.db import connection, transaction

from .models import OrderModel
from .domain import Order, OrderRepositoryPort


class OrderDeletionError(ValueError):
    """Raised when a delete does not remove any row."""

    def __init__(self, order_id):
        super().__init__("DELETE_REJECTED")
        self.order_id = order_id


def _advance_id_sequence() -> None:
    """Move the PK sequence past caller-chosen ids.

    Backends with a separate sequence (PostgreSQL) do not advance it on an
    explicit-id INSERT, so the next generated id could collide. SQLite
    yields no statements here.
    """
    statements = connection.ops.sequence_reset_sql(no_style(), [OrderModel])
    if statements:
        with connection.cursor() as cur:
            for sql in statements:
                cur.execute(sql)


def _to_domain(obj: OrderModel) -> Order:
    return Order(id=obj.id, amount=obj.amount)


class OrderRepository(OrderRepositoryPort):
    """Repository that persists Order domain objects using Django ORM."""

    def save(self, order: Order) -> None:
        """Insert a new order record.

        When ``order.id`` is None the primary key generated by the database
        is written back onto the order. Caller-chosen ids push the id
        sequence forward so later generated ids do not collide.

        Args:
            order: Domain ``Order`` instance to persist.

        Raises:
            django.db.IntegrityError: If the id is already taken or the
                amount violates the non-negative constraint.
        """
        # Savepoint: a failed insert must not poison an outer transaction.
        with transaction.atomic():
            obj = OrderModel.objects.create(id=order.id, amount=order.amount)
            if order.id is not None:
                _advance_id_sequence()
        order.id = obj.id

    def find_by_id(self, order_id: int) -> Optional[Order]:
        obj = OrderModel.objects.filter(id=order_id).first()
        return _to_domain(obj) if obj is not None else None

    def delete(self, order: Order) -> None:
        """Delete the row backing ``order``.

        Raises:
            OrderDeletionError: If no row with ``order.id`` exists anymore.
        """
        deleted, _ = OrderModel.objects.filter(id=order.id).delete()
        if not deleted:
            raise OrderDeletionError(order.id)

    def find_all(self) -> List[Order]:
        return [_to_domain(obj) for obj in OrderModel.objects.order_by("id")]
