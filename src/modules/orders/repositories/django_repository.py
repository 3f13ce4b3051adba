"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
Creation is wrapped in ``transaction.atomic()`` so the Order aggregate
(Order + OrderItems) is persisted as a whole or not at all.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` keys:
        - ``customer`` (required): the owning ``Customer`` instance
        - ``items`` (required): list of dicts with ``product_id``,
          ``price``, ``quantity``
        """
        order = Order.objects.create(customer=data["customer"])

        items = data["items"]
        for item_data in items:
            OrderItem.objects.create(
                order=order,
                product_id=item_data["product_id"],
                price=item_data["price"],
                quantity=item_data["quantity"],
            )

        logger.info(
            "order.persisted", order_id=str(order.id), item_count=len(items)
        )
        return order

    def find_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Uses ``select_related`` for the customer FK and ``prefetch_related``
        for items and items→product.  Returns ``None`` for non-existent or
        invalid IDs.
        """
        try:
            return (
                Order.objects.select_related("customer")
                .prefetch_related("items__product")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None
