"""
Store and transaction interface definitions.

Reads take no transaction and see committed state only. Writes take the
active transaction of the calling command and become visible when that
transaction commits.
"""

from abc import ABC, abstractmethod
from typing import ContextManager, Optional

from ordering.domain.models.customers import Customer, CustomerId
from ordering.domain.models.orders import LineItemId, Order, OrderId, OrderLineItem
from ordering.domain.models.products import Product, ProductId


class IActiveTransaction(ABC):
    """Handle for a unit of writes that commit or roll back together."""

    @property
    @abstractmethod
    def transaction_id(self) -> str:
        """Identifier used in logs."""
        pass

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether writes can still be staged on this transaction."""
        pass


class ITransactionProvider(ABC):
    """Interface for obtaining the active transaction."""

    @abstractmethod
    def active(self) -> ContextManager[IActiveTransaction]:
        """Begin a transaction, or join the one already open for this caller.

        The transaction is released when the outermost scope exits, on success
        and on error alike.
        """
        pass


class IOrderStore(ABC):
    """Interface for reading and writing order aggregates."""

    @abstractmethod
    def get_order(self, order_id: OrderId) -> Optional[Order]:
        """Get an order and its line items, or None if it does not exist."""
        pass

    @abstractmethod
    def set_order(self, transaction: IActiveTransaction, order: Order) -> None:
        """Persist an order together with all of its line items."""
        pass

    @abstractmethod
    def set_line_item(self, transaction: IActiveTransaction, line_item: OrderLineItem) -> None:
        """Persist a single line item of an existing order."""
        pass

    @abstractmethod
    def get_line_item(self, order_id: OrderId, line_item_id: LineItemId) -> Optional[OrderLineItem]:
        """Get one line item of an order, or None if either does not exist."""
        pass


class IProductStore(ABC):
    """Interface for reading and writing products."""

    @abstractmethod
    def get_product(self, product_id: ProductId) -> Optional[Product]:
        pass

    @abstractmethod
    def set_product(self, transaction: IActiveTransaction, product: Product) -> None:
        pass


class ICustomerStore(ABC):
    """Interface for reading and writing customers."""

    @abstractmethod
    def get_customer(self, customer_id: CustomerId) -> Optional[Customer]:
        pass

    @abstractmethod
    def set_customer(self, transaction: IActiveTransaction, customer: Customer) -> None:
        pass
