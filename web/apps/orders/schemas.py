"""Pydantic schemas for orders.

This module exposes the request/response schemas used by the orders API.
Amounts travel as decimal strings in JSON so no precision is lost.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer

# Upper bound of the BIGINT primary key
MAX_ORDER_ID = 2**63 - 1


class PlaceOrderDTO(BaseModel):
    """Schema for placing an order.

    Attributes:
        id: Optional client-chosen identifier (positive integer that fits
            the BIGINT primary key). When omitted, the database assigns one.
        amount: Non-negative amount with at most two decimal places.
    """

    model_config = ConfigDict(extra="forbid")

    id: int | None = Field(default=None, gt=0, le=MAX_ORDER_ID)
    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)


class OrderReadDTO(BaseModel):
    """Schema used to render an order in API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: Decimal

    @field_serializer("amount")
    def serialize_amount(self, v: Decimal) -> str:
        return f"{v:.2f}"
