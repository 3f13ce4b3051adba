"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

Duplicate product IDs are accepted here on purpose: the service applies
its count-based existence check to the request exactly as received.
"""

from __future__ import annotations

from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator


class CreateOrderProductDTO(BaseModel):
    """A single requested product.

    The caller sends ``id`` and ``quantity``; the price is resolved by
    the Service Layer from the product catalogue.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests."""

    model_config = ConfigDict(frozen=True)

    customer_id: UUID
    products: List[CreateOrderProductDTO]

    @field_validator("products")
    @classmethod
    def products_must_not_be_empty(
        cls, v: List[CreateOrderProductDTO]
    ) -> List[CreateOrderProductDTO]:
        if not v:
            raise ValueError("Order must have at least one product.")
        return v
