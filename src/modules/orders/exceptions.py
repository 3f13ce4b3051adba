"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.  Two kinds exist: ``NotFoundError`` for a
referenced entity that does not exist, ``ValidationError`` for a request
that cannot be fulfilled as asked.
"""

from __future__ import annotations


class OrderError(Exception):
    """Base class for every order domain error."""


class NotFoundError(OrderError):
    """A referenced entity does not exist."""

    resource = "entity"


class ValidationError(OrderError):
    """The order request breaks a business rule."""


class CustomerNotFound(NotFoundError):
    """The customer referenced by the order does not exist."""

    resource = "customer"


class OrderNotFound(NotFoundError):
    """The requested order does not exist."""

    resource = "order"


class ProductNotFound(ValidationError):
    """At least one requested product does not exist."""


class InsufficientStock(ValidationError):
    """At least one requested product has less stock than requested."""
