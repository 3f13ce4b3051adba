"""Unit tests for OrderService with stubbed collaborators.

Covers:
- create_order happy path: line items, price snapshot, stock decrement.
- Fail-fast validation: unknown customer, unknown product, low stock;
  none of them touches stock or writes an order.
- Line item ordering follows the product look-up.
- Duplicate product IDs in the request.
- Repeated calls are not idempotent.
- get_order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest

from modules.orders.dtos import CreateOrderDTO, CreateOrderProductDTO
from modules.orders.exceptions import (
    CustomerNotFound,
    InsufficientStock,
    NotFoundError,
    OrderNotFound,
    ProductNotFound,
    ValidationError,
)
from modules.orders.services import OrderService

pytestmark = pytest.mark.unit


@dataclass
class StubCustomer:
    id: UUID
    name: str = "Stub Customer"


@dataclass
class StubProduct:
    id: UUID
    price: Decimal
    quantity: int


class StubProductRepository:
    """In-memory product catalogue recording every call it receives."""

    def __init__(self, *products: StubProduct, reverse_lookup: bool = False):
        self._products: Dict[UUID, StubProduct] = {p.id: p for p in products}
        self._reverse_lookup = reverse_lookup
        self.lookups: List[List[str]] = []
        self.updates: List[List[dict]] = []

    def find_all_by_id(self, ids):
        ids = list(ids)
        self.lookups.append(ids)
        found = [p for p in self._products.values() if str(p.id) in ids]
        return list(reversed(found)) if self._reverse_lookup else found

    def update_quantity(self, updates):
        updates = list(updates)
        self.updates.append(updates)
        for update in updates:
            self._products[UUID(update["id"])].quantity -= update["quantity"]


class NonDeduplicatingProductRepository(StubProductRepository):
    """Returns one record per requested ID, duplicates included."""

    def find_all_by_id(self, ids):
        ids = list(ids)
        self.lookups.append(ids)
        by_str = {str(p.id): p for p in self._products.values()}
        return [by_str[i] for i in ids if i in by_str]


def _dto(customer_id: UUID, *requested: tuple) -> CreateOrderDTO:
    return CreateOrderDTO(
        customer_id=customer_id,
        products=[
            CreateOrderProductDTO(id=product_id, quantity=quantity)
            for product_id, quantity in requested
        ],
    )


@pytest.fixture()
def customer():
    return StubCustomer(id=uuid4())


@pytest.fixture()
def p1():
    return StubProduct(id=uuid4(), price=Decimal("10.00"), quantity=5)


@pytest.fixture()
def p2():
    return StubProduct(id=uuid4(), price=Decimal("20.00"), quantity=3)


@pytest.fixture()
def order_repo():
    repo = MagicMock()
    repo.create.side_effect = lambda data: MagicMock(id=uuid4(), data=data)
    return repo


@pytest.fixture()
def customer_repo(customer):
    repo = MagicMock()
    repo.find_by_id.return_value = customer
    return repo


@pytest.fixture()
def product_repo(p1, p2):
    return StubProductRepository(p1, p2)


@pytest.fixture()
def service(order_repo, customer_repo, product_repo):
    return OrderService(order_repo, customer_repo, product_repo)


class TestCreateOrder:
    def test_creates_order_with_price_snapshots(
        self, service, order_repo, customer, p1, p2
    ):
        order = service.create_order(_dto(customer.id, (p1.id, 2), (p2.id, 1)))

        order_repo.create.assert_called_once()
        payload = order_repo.create.call_args.args[0]
        assert order.data is payload
        assert payload["customer"] is customer
        assert payload["items"] == [
            {"product_id": p1.id, "price": Decimal("10.00"), "quantity": 2},
            {"product_id": p2.id, "price": Decimal("20.00"), "quantity": 1},
        ]

    def test_decrements_stock_for_every_requested_entry(
        self, service, product_repo, customer, p1, p2
    ):
        service.create_order(_dto(customer.id, (p1.id, 2), (p2.id, 1)))

        assert product_repo.updates == [
            [{"id": str(p1.id), "quantity": 2}, {"id": str(p2.id), "quantity": 1}]
        ]
        assert p1.quantity == 3
        assert p2.quantity == 2

    def test_looks_up_products_in_one_batch(
        self, service, product_repo, customer_repo, customer, p1, p2
    ):
        service.create_order(_dto(customer.id, (p1.id, 1), (p2.id, 1)))

        customer_repo.find_by_id.assert_called_once_with(str(customer.id))
        assert product_repo.lookups == [[str(p1.id), str(p2.id)]]

    def test_requesting_exact_stock_is_allowed(self, service, customer, p2):
        service.create_order(_dto(customer.id, (p2.id, 3)))

        assert p2.quantity == 0

    def test_line_items_follow_lookup_order(
        self, order_repo, customer_repo, customer, p1, p2
    ):
        product_repo = StubProductRepository(p1, p2, reverse_lookup=True)
        service = OrderService(order_repo, customer_repo, product_repo)

        service.create_order(_dto(customer.id, (p1.id, 2), (p2.id, 1)))

        items = order_repo.create.call_args.args[0]["items"]
        assert [item["product_id"] for item in items] == [p2.id, p1.id]
        assert [item["quantity"] for item in items] == [1, 2]

    def test_logs_order_created(self, service, customer, p1, caplog):
        with caplog.at_level(logging.INFO):
            service.create_order(_dto(customer.id, (p1.id, 1)))

        messages = [record.getMessage() for record in caplog.records]
        assert any("order.created" in message for message in messages)


class TestCreateOrderFailures:
    def test_unknown_customer_raises_not_found(
        self, service, customer_repo, product_repo, order_repo, p1
    ):
        customer_repo.find_by_id.return_value = None

        with pytest.raises(CustomerNotFound) as exc_info:
            service.create_order(_dto(uuid4(), (p1.id, 1)))

        assert isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.resource == "customer"
        assert product_repo.lookups == []
        assert product_repo.updates == []
        order_repo.create.assert_not_called()

    def test_unknown_product_raises_validation_error(
        self, service, product_repo, order_repo, customer, p1
    ):
        with pytest.raises(ProductNotFound) as exc_info:
            service.create_order(_dto(customer.id, (p1.id, 1), (uuid4(), 1)))

        assert isinstance(exc_info.value, ValidationError)
        assert product_repo.updates == []
        assert p1.quantity == 5
        order_repo.create.assert_not_called()

    def test_insufficient_stock_raises_validation_error(
        self, service, product_repo, order_repo, customer, p1, p2
    ):
        with pytest.raises(InsufficientStock) as exc_info:
            service.create_order(_dto(customer.id, (p1.id, 1), (p2.id, 4)))

        assert isinstance(exc_info.value, ValidationError)
        assert str(p2.id) in str(exc_info.value)
        assert product_repo.updates == []
        assert (p1.quantity, p2.quantity) == (5, 3)
        order_repo.create.assert_not_called()

    def test_stock_update_failure_propagates_without_order_write(
        self, order_repo, customer_repo, customer, p1
    ):
        product_repo = MagicMock()
        product_repo.find_all_by_id.return_value = [p1]
        product_repo.update_quantity.side_effect = RuntimeError("storage down")
        service = OrderService(order_repo, customer_repo, product_repo)

        with pytest.raises(RuntimeError, match="storage down"):
            service.create_order(_dto(customer.id, (p1.id, 1)))

        order_repo.create.assert_not_called()

    def test_order_write_failure_propagates_unwrapped(
        self, service, order_repo, customer, p1
    ):
        order_repo.create.side_effect = RuntimeError("write failed")

        with pytest.raises(RuntimeError, match="write failed"):
            service.create_order(_dto(customer.id, (p1.id, 1)))


class TestDuplicateProductIds:
    def test_duplicate_ids_fail_the_existence_count(
        self, service, product_repo, order_repo, customer, p1
    ):
        with pytest.raises(ProductNotFound):
            service.create_order(_dto(customer.id, (p1.id, 1), (p1.id, 1)))

        assert product_repo.updates == []
        order_repo.create.assert_not_called()

    def test_each_duplicate_is_checked_against_stock(
        self, order_repo, customer_repo, customer, p1
    ):
        product_repo = NonDeduplicatingProductRepository(p1)
        service = OrderService(order_repo, customer_repo, product_repo)

        with pytest.raises(InsufficientStock):
            service.create_order(_dto(customer.id, (p1.id, 1), (p1.id, 6)))

    def test_line_items_take_first_requested_quantity(
        self, order_repo, customer_repo, customer, p1
    ):
        product_repo = NonDeduplicatingProductRepository(p1)
        service = OrderService(order_repo, customer_repo, product_repo)

        service.create_order(_dto(customer.id, (p1.id, 1), (p1.id, 2)))

        items = order_repo.create.call_args.args[0]["items"]
        assert [item["quantity"] for item in items] == [1, 1]
        assert product_repo.updates == [
            [{"id": str(p1.id), "quantity": 1}, {"id": str(p1.id), "quantity": 2}]
        ]
        assert p1.quantity == 2


class TestRepeatedCalls:
    def test_same_request_twice_creates_two_orders(
        self, service, order_repo, customer, p1
    ):
        dto = _dto(customer.id, (p1.id, 2))

        first = service.create_order(dto)
        second = service.create_order(dto)

        assert first.id != second.id
        assert order_repo.create.call_count == 2
        assert p1.quantity == 1

    def test_second_call_fails_once_stock_runs_out(
        self, service, order_repo, customer, p1
    ):
        dto = _dto(customer.id, (p1.id, 3))

        service.create_order(dto)
        with pytest.raises(InsufficientStock):
            service.create_order(dto)

        assert order_repo.create.call_count == 1
        assert p1.quantity == 2


class TestGetOrder:
    def test_returns_order(self, service, order_repo):
        order = MagicMock()
        order_repo.find_by_id.return_value = order

        assert service.get_order("some-id") is order
        order_repo.find_by_id.assert_called_once_with("some-id")

    def test_missing_order_raises(self, service, order_repo):
        order_repo.find_by_id.return_value = None

        with pytest.raises(OrderNotFound) as exc_info:
            service.get_order(str(uuid4()))

        assert exc_info.value.resource == "order"
