"""
Contains the ``GetProductQuery``.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ordering.application.payload import id_field
from ordering.domain.interfaces.base import DomainService, ILogger
from ordering.domain.interfaces.store import IProductStore
from ordering.domain.models.products import Product, ProductId


@dataclass(frozen=True)
class GetProduct:
    """Input for a ``GetProductQuery``."""

    id: ProductId

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'GetProduct':
        return cls(id=id_field(payload, 'id'))


class GetProductQuery(DomainService):
    """Get a product; also serves as the product lookup for order commands."""

    def __init__(self, store: IProductStore, logger: ILogger):
        super().__init__(logger)
        self.store = store

    def __call__(self, query: GetProduct) -> Optional[Product]:
        return self.execute(query)

    def execute(self, query: GetProduct) -> Optional[Product]:
        product = self.store.get_product(query.id)
        if product is None:
            self.logger.debug(f"Product {query.id} not found", component='products', product_id=query.id)
        return product

    def get_product(self, product_id: ProductId) -> Optional[Product]:
        return self.execute(GetProduct(id=product_id))
