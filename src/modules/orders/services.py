"""Order service layer (Use Cases).

Orchestrates order creation: validate the customer, validate that every
requested product exists and has enough stock, decrement stock, then
persist the order with price snapshots.  The whole use case is one
unit of work: if the order write fails, the stock decrement is rolled
back with it.

Duplicate product IDs in a request are processed as received:
- the existence check compares the number of products found against the
  number of requested entries, so a duplicated ID counts twice;
- each line item takes its quantity from the first requested entry for
  that product, while stock is decremented once per requested entry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from django.db import transaction

from modules.orders.exceptions import (
    CustomerNotFound,
    InsufficientStock,
    OrderNotFound,
    ProductNotFound,
)

if TYPE_CHECKING:
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.orders.dtos import CreateOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        customer_repository: ICustomerRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._order_repo = order_repository
        self._customer_repo = customer_repository
        self._product_repo = product_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Create a new order and reserve its stock.

        Steps:
        1. Look up the customer.
        2. Look up all requested products in one batch.
        3. Check every requested quantity against available stock.
        4. Build line items from the found products (price snapshot).
        5. Decrement stock for every requested entry.
        6. Persist the order.

        Nothing is written before all checks pass.

        Raises:
            CustomerNotFound: customer does not exist.
            ProductNotFound: at least one product does not exist.
            InsufficientStock: at least one product lacks stock.
        """
        log = logger.bind(customer_id=str(dto.customer_id))
        log.info("order.creation_started", requested_count=len(dto.products))

        customer = self._customer_repo.find_by_id(str(dto.customer_id))
        if not customer:
            log.warning("order.customer_not_found")
            raise CustomerNotFound(f"Customer {dto.customer_id} not found.")

        found_products = self._product_repo.find_all_by_id(
            [str(requested.id) for requested in dto.products]
        )
        if len(found_products) < len(dto.products):
            log.warning(
                "order.unknown_product",
                requested_count=len(dto.products),
                found_count=len(found_products),
            )
            raise ProductNotFound("There is at least one non-existent product.")

        for requested in dto.products:
            short = next(
                (
                    product
                    for product in found_products
                    if str(product.id) == str(requested.id)
                    and product.quantity < requested.quantity
                ),
                None,
            )
            if short is not None:
                log.warning(
                    "order.insufficient_stock",
                    product_id=str(short.id),
                    requested=requested.quantity,
                    available=short.quantity,
                )
                raise InsufficientStock(
                    f"Product {short.id}: requested {requested.quantity}, "
                    f"available {short.quantity}."
                )

        items = [
            {
                "product_id": product.id,
                "price": product.price,
                "quantity": next(
                    requested.quantity
                    for requested in dto.products
                    if str(requested.id) == str(product.id)
                ),
            }
            for product in found_products
        ]

        self._product_repo.update_quantity(
            [
                {"id": str(requested.id), "quantity": requested.quantity}
                for requested in dto.products
            ]
        )

        order = self._order_repo.create({"customer": customer, "items": items})

        log.info("order.created", order_id=str(order.id), item_count=len(items))
        return order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.find_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order
