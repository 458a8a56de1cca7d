"""
Contains the ``CreateCustomerCommand``.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ordering.application.payload import str_field
from ordering.domain.interfaces.base import DomainService, ILogger
from ordering.domain.interfaces.store import ICustomerStore, ITransactionProvider
from ordering.domain.models.customers import Customer, CustomerData, CustomerId
from ordering.domain.models.identity import IdProvider


@dataclass(frozen=True)
class CreateCustomer:
    """Input for a ``CreateCustomerCommand``."""

    name: str

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'CreateCustomer':
        return cls(name=str_field(payload, 'name'))


class CreateCustomerCommand(DomainService):
    """Register a customer that orders can be placed for."""

    def __init__(self, transactions: ITransactionProvider, store: ICustomerStore,
                 id_provider: IdProvider[CustomerData], logger: ILogger):
        super().__init__(logger)
        self.transactions = transactions
        self.store = store
        self.id_provider = id_provider

    def __call__(self, command: CreateCustomer) -> CustomerId:
        return self.execute(command)

    def execute(self, command: CreateCustomer) -> CustomerId:
        with self.transactions.active() as transaction:
            customer = Customer.new(self.id_provider, command.name)
            self.store.set_customer(transaction, customer)

        self.logger.info(f"Created customer {customer.id}", component='customers', customer_id=customer.id)

        return customer.id
