"""
Read-only lookups consumed by commands.
"""

from typing import Optional, Protocol

from ordering.domain.models.customers import Customer, CustomerId
from ordering.domain.models.products import Product, ProductId


class IProductLookup(Protocol):
    """Finds the current snapshot of a product."""

    def get_product(self, product_id: ProductId) -> Optional[Product]: ...


class ICustomerLookup(Protocol):
    """Finds a customer orders can be placed for."""

    def get_customer(self, customer_id: CustomerId) -> Optional[Customer]: ...
