"""
Contains the ``GetCustomerQuery``.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ordering.application.payload import id_field
from ordering.domain.interfaces.base import DomainService, ILogger
from ordering.domain.interfaces.store import ICustomerStore
from ordering.domain.models.customers import Customer, CustomerId


@dataclass(frozen=True)
class GetCustomer:
    """Input for a ``GetCustomerQuery``."""

    id: CustomerId

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'GetCustomer':
        return cls(id=id_field(payload, 'id'))


class GetCustomerQuery(DomainService):
    """Get a customer; also serves as the customer lookup for order creation."""

    def __init__(self, store: ICustomerStore, logger: ILogger):
        super().__init__(logger)
        self.store = store

    def __call__(self, query: GetCustomer) -> Optional[Customer]:
        return self.execute(query)

    def execute(self, query: GetCustomer) -> Optional[Customer]:
        return self.store.get_customer(query.id)

    def get_customer(self, customer_id: CustomerId) -> Optional[Customer]:
        return self.execute(GetCustomer(id=customer_id))
