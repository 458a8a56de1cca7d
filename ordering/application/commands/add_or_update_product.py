"""
Contains the ``AddOrUpdateProductCommand``.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ordering.application.payload import id_field, int_field
from ordering.domain.exceptions import NotFoundError
from ordering.domain.interfaces.base import DomainService, ILogger
from ordering.domain.interfaces.lookups import IProductLookup
from ordering.domain.interfaces.store import IOrderStore, ITransactionProvider
from ordering.domain.models.identity import IdProvider, provide_id
from ordering.domain.models.orders import InOrder, LineItemData, LineItemId, OrderId
from ordering.domain.models.products import ProductId


@dataclass(frozen=True)
class AddOrUpdateProduct:
    """Input for an ``AddOrUpdateProductCommand``."""

    id: OrderId
    product_id: ProductId
    quantity: int

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'AddOrUpdateProduct':
        return cls(
            id=id_field(payload, 'id'),
            product_id=id_field(payload, 'product_id'),
            quantity=int_field(payload, 'quantity'),
        )


class AddOrUpdateProductCommand(DomainService):
    """Add a product line item to an order, or update its quantity if it is already there."""

    def __init__(self, transactions: ITransactionProvider, store: IOrderStore,
                 id_provider: IdProvider[LineItemData], products: IProductLookup, logger: ILogger):
        super().__init__(logger)
        self.transactions = transactions
        self.store = store
        self.id_provider = id_provider
        self.products = products

    def __call__(self, command: AddOrUpdateProduct) -> LineItemId:
        return self.execute(command)

    def execute(self, command: AddOrUpdateProduct) -> LineItemId:
        """Return the id of the new or updated line item."""
        self.logger.debug(
            f"Updating product {command.product_id} in order {command.id}",
            component='orders', order_id=command.id, product_id=command.product_id
        )

        with self.transactions.active() as transaction:
            order = self.store.get_order(command.id)
            if order is None:
                raise NotFoundError(f"Order {command.id} not found", entity='order', entity_id=command.id)

            classified = order.into_line_item_for_product(command.product_id)

            if isinstance(classified, InOrder):
                self.logger.debug(
                    f"Updating existing product {command.product_id} in order {command.id}",
                    component='orders', order_id=command.id, product_id=command.product_id
                )

                line_item = classified.line_item
                line_item.set_quantity(command.quantity)
                self.store.set_line_item(transaction, line_item)

                line_item_id = line_item.id
            else:
                self.logger.debug(
                    f"Adding new product {command.product_id} to order {command.id}",
                    component='orders', order_id=command.id, product_id=command.product_id
                )

                order = classified.order
                product = self.products.get_product(command.product_id)
                if product is None:
                    raise NotFoundError(
                        f"Product {command.product_id} not found",
                        entity='product', entity_id=command.product_id
                    )

                line_item_id = provide_id(self.id_provider, role="line item id")
                order.add_product(line_item_id, product, command.quantity)
                self.store.set_order(transaction, order)

        self.logger.info(
            f"Updated product {command.product_id} in order {command.id}",
            component='orders', order_id=command.id, product_id=command.product_id,
            line_item_id=line_item_id, quantity=command.quantity
        )

        return line_item_id
