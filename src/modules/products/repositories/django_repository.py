"""Django ORM implementation of the Product repository.

Look-ups follow the Null Object pattern: unknown or malformed IDs are
simply absent from the result.  Stock decrements run as database-side
arithmetic (``F`` expressions) inside a single atomic block, so the
non-negative ``quantity`` constraint guards against overselling and any
failure rolls back the whole batch.
"""

from __future__ import annotations

from typing import Iterable, List, Mapping, Sequence
from uuid import UUID

import structlog
from django.db import transaction
from django.db.models import F

from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


def _parse_ids(ids: Iterable[str]) -> List[UUID]:
    parsed = []
    for raw in ids:
        try:
            parsed.append(raw if isinstance(raw, UUID) else UUID(str(raw)))
        except ValueError:
            continue
    return parsed


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def find_all_by_id(self, ids: Iterable[str]) -> List[Product]:
        """Retrieve every existing product among ``ids`` in one query."""
        return list(Product.objects.filter(id__in=_parse_ids(ids)))

    @transaction.atomic
    def update_quantity(self, updates: Sequence[Mapping[str, object]]) -> None:
        """Subtract each entry's ``quantity`` from the matching product.

        Raises:
            Product.DoesNotExist: an entry references no product.
            IntegrityError: a decrement would make stock negative.
        """
        for update in updates:
            product_id = update["id"]
            quantity = update["quantity"]
            affected = Product.objects.filter(id=product_id).update(
                quantity=F("quantity") - quantity
            )
            if not affected:
                raise Product.DoesNotExist(f"Product {product_id} not found.")

            logger.info(
                "product.stock_decremented",
                product_id=str(product_id),
                quantity=quantity,
            )
