"""Domain models, ports and service for orders.

This module contains the ``Order`` dataclass, protocol definitions (ports)
for the collaborators the domain depends on (order persistence and
payments), and the domain service that places, fetches, cancels and lists
orders. Nothing here touches Django or the network: adapters live in
``repository``, ``adapters`` and ``http_adapters``.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Protocol


# ---- Errors ----
class OrderNotFoundError(ValueError):
    """Raised when an order id does not match any stored order."""

    def __init__(self, order_id: int):
        super().__init__("ORDER_NOT_FOUND")
        self.order_id = order_id


# ---- Entities / DTOs ----
@dataclass
class Order:
    """Container for order data.

    Attributes:
        id: Identifier for the order, or None until the store assigns one.
        amount: Non-negative monetary amount charged when the order is
            placed.
    """

    id: int | None
    amount: Decimal


# ---- Ports (DIP) ----
class OrderRepositoryPort(Protocol):
    """Port describing order persistence used by the domain."""

    def save(self, order: Order) -> None:
        """Persist the given order.

        Raises:
            Exception: Implementation specific, e.g. on a constraint
                violation.
        """
        raise NotImplementedError()

    def find_by_id(self, order_id: int) -> Optional[Order]:
        """Return the stored order for ``order_id`` or None when absent."""
        raise NotImplementedError()

    def delete(self, order: Order) -> None:
        """Remove the given order from the store."""
        raise NotImplementedError()

    def find_all(self) -> List[Order]:
        """Return every stored order."""
        raise NotImplementedError()


class PaymentsPort(Protocol):
    """Port describing payment operations used by the domain.

    Implementers authorize a charge and return a boolean indicating
    success.
    """

    def process_payment(self, amount: Decimal) -> bool:
        """Authorize a charge of ``amount``.

        Args:
            amount: Amount to charge.

        Returns:
            True if the charge was authorized, False if it was declined.
        """
        raise NotImplementedError()


# ---- Domain service ----
class OrderService:
    """Domain service orchestrating order placement and lookups.

    Persistence is delegated to the repository port and charge
    authorization to the payments port. Errors raised by either port are
    never caught here: they reach the caller unchanged.
    """

    def __init__(self, repository: OrderRepositoryPort, payments: PaymentsPort):
        """Initialize the service with required dependencies.

        Args:
            repository: OrderRepositoryPort used to store orders.
            payments: PaymentsPort used to charge customers.
        """
        self.repository = repository
        self.payments = payments

    def place_order(self, order: Order) -> bool:
        """Save the order, then charge its amount.

        The save always happens first. If payment is declined the order
        stays persisted; there is no compensating delete.

        Args:
            order: Order instance to place.

        Returns:
            The payment result: True when authorized, False when declined.
        """
        # 1) Persist
        self.repository.save(order)

        # 2) Charge payment
        return self.payments.process_payment(order.amount)

    def get_order_by_id(self, order_id: int) -> Order:
        """Return the stored order for ``order_id``.

        Raises:
            OrderNotFoundError: If the repository has no such order.
        """
        order = self.repository.find_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def cancel_order(self, order_id: int) -> None:
        """Delete the order identified by ``order_id``.

        Raises:
            OrderNotFoundError: If the repository has no such order. The
                repository's delete is not called in that case.
        """
        order = self.repository.find_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        self.repository.delete(order)

    def list_all_orders(self) -> List[Order]:
        return self.repository.find_all()
