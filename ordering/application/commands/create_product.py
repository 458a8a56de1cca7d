"""
Contains the ``CreateProductCommand``.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict

from ordering.application.payload import require, str_field
from ordering.domain.interfaces.base import DomainService, ILogger
from ordering.domain.interfaces.store import IProductStore, ITransactionProvider
from ordering.domain.models.identity import IdProvider
from ordering.domain.models.products import Product, ProductData, ProductId, parse_price


@dataclass(frozen=True)
class CreateProduct:
    """Input for a ``CreateProductCommand``."""

    title: str
    price: Decimal

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'CreateProduct':
        return cls(
            title=str_field(payload, 'title'),
            price=parse_price(require(payload, 'price')),
        )


class CreateProductCommand(DomainService):
    """Add a product to the catalog."""

    def __init__(self, transactions: ITransactionProvider, store: IProductStore,
                 id_provider: IdProvider[ProductData], logger: ILogger):
        super().__init__(logger)
        self.transactions = transactions
        self.store = store
        self.id_provider = id_provider

    def __call__(self, command: CreateProduct) -> ProductId:
        return self.execute(command)

    def execute(self, command: CreateProduct) -> ProductId:
        with self.transactions.active() as transaction:
            product = Product.new(self.id_provider, command.title, command.price)
            self.store.set_product(transaction, product)

        self.logger.info(
            f"Created product {product.id}",
            component='products', product_id=product.id, price=product.price
        )

        return product.id
