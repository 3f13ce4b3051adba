"""Product repository interface.

Covers the two collaborator roles the order workflow needs from the
product catalogue: batch look-up and batch stock decrement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable, List, Mapping, Sequence

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(ABC):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def find_all_by_id(self, ids: Iterable[str]) -> List[Product]:
        """Return the products whose primary key is in ``ids``.

        Only existing records are returned, each at most once; the result
        order is not tied to the order of ``ids``.
        """

    @abstractmethod
    def update_quantity(self, updates: Sequence[Mapping[str, object]]) -> None:
        """Decrement stock for every ``{"id": ..., "quantity": ...}`` entry.

        All-or-nothing: if any entry cannot be applied, none is.
        """
