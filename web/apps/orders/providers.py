"""Service provider helpers for wiring OrderService with its ports.

This module exposes a small factory function `get_order_service` that
returns a configured `OrderService` instance. Orders are always persisted
through the Django ORM repository. Payments go through the HTTP adapter
client when settings.USE_HTTP_ADAPTERS is enabled, and through the
in-process stub otherwise (tests and local development).
"""

from django.conf import settings

from .domain import OrderService
from .adapters import PaymentsStub
from .http_adapters import HttpPaymentsClient
from .repository import OrderRepository


def get_order_service() -> OrderService:
    """Return a configured OrderService instance.

    Returns:
        OrderService: A service instance with appropriate ports.
    """
    if getattr(settings, "USE_HTTP_ADAPTERS", True):
        payments = HttpPaymentsClient()
    else:
        payments = PaymentsStub()
    return OrderService(repository=OrderRepository(), payments=payments)
