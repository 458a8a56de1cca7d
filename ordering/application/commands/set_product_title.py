"""
Contains the ``SetProductTitleCommand``.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ordering.application.payload import id_field, str_field
from ordering.domain.exceptions import NotFoundError
from ordering.domain.interfaces.base import DomainService, ILogger
from ordering.domain.interfaces.store import IProductStore, ITransactionProvider
from ordering.domain.models.products import ProductId


@dataclass(frozen=True)
class SetProductTitle:
    """Input for a ``SetProductTitleCommand``."""

    id: ProductId
    title: str

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'SetProductTitle':
        return cls(
            id=id_field(payload, 'id'),
            title=str_field(payload, 'title'),
        )


class SetProductTitleCommand(DomainService):
    """Set a new title for a product."""

    def __init__(self, transactions: ITransactionProvider, store: IProductStore, logger: ILogger):
        super().__init__(logger)
        self.transactions = transactions
        self.store = store

    def __call__(self, command: SetProductTitle) -> None:
        self.execute(command)

    def execute(self, command: SetProductTitle) -> None:
        self.logger.debug(
            f"Updating product {command.id} title to {command.title!r}",
            component='products', product_id=command.id
        )

        with self.transactions.active() as transaction:
            product = self.store.get_product(command.id)
            if product is None:
                raise NotFoundError(f"Product {command.id} not found", entity='product', entity_id=command.id)

            product.set_title(command.title)
            self.store.set_product(transaction, product)

        self.logger.info(f"Updated product {command.id} title", component='products', product_id=command.id)
