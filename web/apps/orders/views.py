"""HTTP views for the orders app.

Views are kept intentionally small: they validate requests (via Pydantic),
map to domain objects, delegate to the domain service, and translate the
outcome into an HTTP response.

The service comes from ``providers.get_order_service()``, which wires the
ORM repository with either the HTTP payments client or the in-process
stub depending on runtime settings. Tests can swap implementations by
patching the provider without changing view logic.
"""

import logging

import httpx
from django.core.paginator import Paginator
from django.db import IntegrityError
from pydantic import ValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from . import providers
from .domain import Order, OrderNotFoundError
from .http_adapters import CircuitOpenError
from .repository import OrderDeletionError
from .schemas import MAX_ORDER_ID, OrderReadDTO, PlaceOrderDTO

logger = logging.getLogger(__name__)


def _render(order: Order) -> dict:
    return OrderReadDTO.model_validate(order).model_dump(mode="json")


class OrdersCollectionView(APIView):
    """List orders and place new ones.

    ``POST`` saves the order and then charges its amount. A declined
    payment answers 402 but, as the order was saved first, the response
    still carries the stored id.
    """

    throttle_classes = [ScopedRateThrottle]

    def get_throttles(self):
        # DRF evaluates throttles in initial(), before get/post
        self.throttle_scope = "orders_list" if self.request.method == "GET" else "orders_create"
        return [throttle() for throttle in self.throttle_classes]

    def get(self, request):
        try:
            page = int(request.GET.get("page", 1))
            page_size = int(request.GET.get("page_size", 20))
        except ValueError:
            return Response({"detail": "INVALID_PAGINATION"}, status=status.HTTP_400_BAD_REQUEST)
        if page_size < 1:
            return Response({"detail": "INVALID_PAGINATION"}, status=status.HTTP_400_BAD_REQUEST)

        orders = providers.get_order_service().list_all_orders()
        p = Paginator(orders, page_size)
        page_obj = p.get_page(page)

        return Response(
            {
                "count": p.count,
                "page": page_obj.number,
                "page_size": page_size,
                "results": [_render(o) for o in page_obj.object_list],
            },
            status=status.HTTP_200_OK,
        )

    def post(self, request):
        """Place a new order.

        Returns:
            Response: One of the following responses.
            - 201 with {id, amount, paid} when the payment is authorized.
            - 402 with {detail: "PAYMENT_DECLINED", id} when it is declined.
            - 400 for DTO validation errors.
            - 409 with {detail: "ORDER_ALREADY_EXISTS"} when the id is taken.
            - 503 with {detail: "UPSTREAM_UNAVAILABLE"} when the payments
              service cannot be reached.
        """
        try:
            dto = PlaceOrderDTO.model_validate(request.data)
        except ValidationError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        order = Order(id=dto.id, amount=dto.amount)
        service = providers.get_order_service()

        try:
            paid = service.place_order(order)
        except IntegrityError:
            logger.info("order rejected by store", extra={"order_id": order.id})
            return Response({"detail": "ORDER_ALREADY_EXISTS"}, status=status.HTTP_409_CONFLICT)
        except (httpx.HTTPError, CircuitOpenError):
            logger.exception("payments unavailable", extra={"order_id": order.id})
            return Response({"detail": "UPSTREAM_UNAVAILABLE"}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        if not paid:
            logger.info("payment declined", extra={"order_id": order.id, "amount": str(order.amount)})
            return Response(
                {"detail": "PAYMENT_DECLINED", "id": order.id},
                status=status.HTTP_402_PAYMENT_REQUIRED,
            )

        logger.info("order placed", extra={"order_id": order.id, "amount": str(order.amount)})
        body = _render(order)
        body["paid"] = True
        return Response(body, status=status.HTTP_201_CREATED)


class OrderDetailView(APIView):
    """Fetch or cancel a single order."""

    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "orders_detail"

    def get(self, request, oid: int):
        if oid > MAX_ORDER_ID:
            return Response({"detail": "NOT_FOUND"}, status=status.HTTP_404_NOT_FOUND)
        try:
            order = providers.get_order_service().get_order_by_id(oid)
        except OrderNotFoundError:
            return Response({"detail": "NOT_FOUND"}, status=status.HTTP_404_NOT_FOUND)
        return Response(_render(order), status=status.HTTP_200_OK)

    def delete(self, request, oid: int):
        if oid > MAX_ORDER_ID:
            return Response({"detail": "NOT_FOUND"}, status=status.HTTP_404_NOT_FOUND)
        try:
            providers.get_order_service().cancel_order(oid)
        except OrderNotFoundError:
            return Response({"detail": "NOT_FOUND"}, status=status.HTTP_404_NOT_FOUND)
        except OrderDeletionError:
            # Removed concurrently between lookup and delete
            return Response({"detail": "DELETE_REJECTED"}, status=status.HTTP_409_CONFLICT)

        logger.info("order cancelled", extra={"order_id": oid})
        return Response(status=status.HTTP_204_NO_CONTENT)
