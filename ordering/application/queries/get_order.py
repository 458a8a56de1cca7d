"""
Contains the ``GetOrderQuery``.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ordering.application.payload import id_field
from ordering.domain.interfaces.base import DomainService, ILogger
from ordering.domain.interfaces.store import IOrderStore
from ordering.domain.models.orders import Order, OrderId


@dataclass(frozen=True)
class GetOrder:
    """Input for a ``GetOrderQuery``."""

    id: OrderId

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'GetOrder':
        return cls(id=id_field(payload, 'id'))


class GetOrderQuery(DomainService):
    """Get an order with its line items."""

    def __init__(self, store: IOrderStore, logger: ILogger):
        super().__init__(logger)
        self.store = store

    def __call__(self, query: GetOrder) -> Optional[Order]:
        return self.execute(query)

    def execute(self, query: GetOrder) -> Optional[Order]:
        return self.store.get_order(query.id)
