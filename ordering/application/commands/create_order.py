"""
Contains the ``CreateOrderCommand``.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ordering.application.payload import id_field
from ordering.domain.exceptions import NotFoundError
from ordering.domain.interfaces.base import DomainService, ILogger
from ordering.domain.interfaces.lookups import ICustomerLookup
from ordering.domain.interfaces.store import IOrderStore, ITransactionProvider
from ordering.domain.models.customers import CustomerId
from ordering.domain.models.identity import IdProvider
from ordering.domain.models.orders import Order, OrderData, OrderId


@dataclass(frozen=True)
class CreateOrder:
    """Input for a ``CreateOrderCommand``."""

    customer_id: CustomerId

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'CreateOrder':
        return cls(customer_id=id_field(payload, 'customer_id'))


class CreateOrderCommand(DomainService):
    """Start an empty order for an existing customer."""

    def __init__(self, transactions: ITransactionProvider, store: IOrderStore,
                 id_provider: IdProvider[OrderData], customers: ICustomerLookup, logger: ILogger):
        super().__init__(logger)
        self.transactions = transactions
        self.store = store
        self.id_provider = id_provider
        self.customers = customers

    def __call__(self, command: CreateOrder) -> OrderId:
        return self.execute(command)

    def execute(self, command: CreateOrder) -> OrderId:
        self.logger.debug(
            f"Creating order for customer {command.customer_id}",
            component='orders', customer_id=command.customer_id
        )

        with self.transactions.active() as transaction:
            customer = self.customers.get_customer(command.customer_id)
            if customer is None:
                raise NotFoundError(
                    f"Customer {command.customer_id} not found",
                    entity='customer', entity_id=command.customer_id
                )

            order = Order.new(self.id_provider, customer)
            self.store.set_order(transaction, order)

        self.logger.info(
            f"Created order {order.id}",
            component='orders', order_id=order.id, customer_id=command.customer_id
        )

        return order.id
