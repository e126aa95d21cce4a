"""In-process stub adapters for the orders domain ports.

These stubs implement ``OrderRepositoryPort`` and ``PaymentsPort`` without
a database or network calls. They are intended for unit tests and local
development where deterministic behavior is useful and external services
are not required.
"""

from decimal import Decimal
from typing import Dict, List, Optional

from .domain import Order, OrderRepositoryPort, PaymentsPort


class InMemoryOrderRepository(OrderRepositoryPort):
    """Dict-backed implementation of ``OrderRepositoryPort``.

    Not wired by ``providers.get_order_service``, which always persists
    through the ORM; it exists for unit tests that exercise the domain
    service without a database.

    Stored orders are the very objects passed to ``save`` (no copies), kept
    in insertion order. Orders without an id get the next free integer.
    """

    def __init__(self):
        self._orders: Dict[int, Order] = {}
        self._next_id = 1

    def save(self, order: Order) -> None:
        """Store the order, assigning an id when it has none.

        Raises:
            ValueError: If an order with the same id is already stored.
        """
        if order.id is None:
            while self._next_id in self._orders:
                self._next_id += 1
            order.id = self._next_id
        elif order.id in self._orders:
            raise ValueError("ORDER_ALREADY_EXISTS")
        self._orders[order.id] = order

    def find_by_id(self, order_id: int) -> Optional[Order]:
        return self._orders.get(order_id)

    def delete(self, order: Order) -> None:
        if self._orders.pop(order.id, None) is None:
            raise ValueError("DELETE_REJECTED")

    def find_all(self) -> List[Order]:
        return list(self._orders.values())


class PaymentsStub(PaymentsPort):
    """Stub implementation of ``PaymentsPort``.

    Approves charges with a positive amount. Zero amounts are declined.
    """

    def process_payment(self, amount: Decimal) -> bool:
        """Charge a mock payment.

        Args:
            amount: Amount to charge.

        Returns:
            bool: True when ``amount`` > 0, otherwise False.
        """
        return amount > 0
