"""
In-memory store for orders, products and customers.

Committed records live in maps guarded by a single lock. Writes are staged
on a ``MemoryTransaction`` and applied together by ``commit`` so a reader
never sees half of a transaction.

Conflict policy: every staged record carries the version its writer read. A
record that is not stored yet must carry the default version. If the
committed version differs, staging (and later commit) fails with
``ConcurrencyConflictError`` and nothing from the transaction is applied.
Callers are not retried.

Reads made on the thread that owns the active transaction see its staged
writes, so several commands sharing one transaction build on each other.
Commit also rejects a transaction that would leave two line items for the
same product in one order.
"""

import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Any, Dict, Generic, Iterator, List, Optional, TypeVar

from ordering.domain.exceptions import (
    ConcurrencyConflictError, InvariantViolationError, NotFoundError, ProviderFailureError
)
from ordering.domain.interfaces.base import ILogger
from ordering.domain.interfaces.store import (
    IActiveTransaction, ICustomerStore, IOrderStore, IProductStore
)
from ordering.domain.models.configuration import NO_TIMEOUT
from ordering.domain.models.customers import Customer, CustomerId
from ordering.domain.models.orders import (
    LineItemData, LineItemId, Order, OrderId, OrderLineItem
)
from ordering.domain.models.products import Product, ProductId
from ordering.domain.models.version import Version, next_version
from ordering.infrastructure.storage.transactions import MemoryTransaction, StagedWrite

K = TypeVar('K')
D = TypeVar('D')

ORDERS = 'order'
LINE_ITEMS = 'line item'
PRODUCTS = 'product'
CUSTOMERS = 'customer'


class VersionedTable(Generic[K, D]):
    """Committed data records keyed by id; every record has a ``version`` field."""

    def __init__(self, name: str):
        self.name = name
        self._rows: Dict[K, D] = {}

    def get(self, key: K) -> Optional[D]:
        return self._rows.get(key)

    def __contains__(self, key: K) -> bool:
        return key in self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def check(self, key: K, record: D) -> None:
        """Raise if ``record`` was not derived from the committed version of ``key``."""
        stored = self._rows.get(key)
        actual = stored.version if stored is not None else Version.default()

        if record.version != actual:
            raise ConcurrencyConflictError(
                f"Stale {self.name} write: expected version {record.version}, stored version is {actual}",
                entity=self.name, entity_id=_entity_id(key),
                expected_version=record.version, actual_version=actual
            )

    def apply(self, key: K, record: D, always_advance: bool = False) -> bool:
        """Store ``record`` with its version advanced; returns False if nothing changed."""
        stored = self._rows.get(key)
        if stored is not None and stored == record and not always_advance:
            return False

        self._rows[key] = replace(record, version=next_version(record.version))
        return True


def _entity_id(key: Any) -> Any:
    # line items are keyed by (order id, line item id)
    return key[-1] if isinstance(key, tuple) else key


class InMemoryStore(IOrderStore, IProductStore, ICustomerStore):
    """Thread-safe in-memory implementation of every store interface."""

    def __init__(self, logger: ILogger, lock_timeout: float = NO_TIMEOUT):
        self.logger = logger
        self.lock_timeout = lock_timeout
        self._lock = threading.RLock()

        self._tables: Dict[str, VersionedTable] = {
            ORDERS: VersionedTable(ORDERS),
            LINE_ITEMS: VersionedTable(LINE_ITEMS),
            PRODUCTS: VersionedTable(PRODUCTS),
            CUSTOMERS: VersionedTable(CUSTOMERS),
        }
        # line item ids per order, in insertion order
        self._order_line_items: Dict[OrderId, List[LineItemId]] = {}
        self._reading = threading.local()

    def use_transaction(self, transaction: Optional[MemoryTransaction]) -> None:
        """Make ``transaction``'s staged writes visible to reads on the calling thread."""
        self._reading.transaction = transaction

    def _reading_transaction(self) -> Optional[MemoryTransaction]:
        transaction = getattr(self._reading, 'transaction', None)
        if transaction is not None and transaction.store is self and transaction.is_open:
            return transaction
        return None

    def _read(self, table: str, key: Any, transaction: Optional[MemoryTransaction]) -> Any:
        if transaction is not None:
            write = transaction.staged_write(table, key)
            if write is not None:
                return write.record
        return self._tables[table].get(key)

    def _line_item_ids(self, order_id: OrderId, transaction: Optional[MemoryTransaction]) -> List[LineItemId]:
        item_ids = list(self._order_line_items.get(order_id, []))
        if transaction is not None:
            known = set(item_ids)
            for write in transaction.staged():
                if write.table == LINE_ITEMS and write.key[0] == order_id and write.key[1] not in known:
                    item_ids.append(write.key[1])
                    known.add(write.key[1])
        return item_ids

    @contextmanager
    def _locked(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self.lock_timeout):
            raise ProviderFailureError(
                f"Timed out after {self.lock_timeout}s waiting for the store lock",
                provider='store'
            )
        try:
            yield
        finally:
            self._lock.release()

    # Orders

    def get_order(self, order_id: OrderId) -> Optional[Order]:
        transaction = self._reading_transaction()
        with self._locked():
            order = self._read(ORDERS, order_id, transaction)
            if order is None:
                return None

            line_items = [
                self._read(LINE_ITEMS, (order_id, item_id), transaction)
                for item_id in self._line_item_ids(order_id, transaction)
            ]
            return Order.from_data(order, line_items)

    def set_order(self, transaction: IActiveTransaction, order: Order) -> None:
        transaction = self._own(transaction)
        order_data, line_items = order.to_data()

        with self._locked():
            self._tables[ORDERS].check(order_data.id, order_data)
            for item in line_items:
                self._tables[LINE_ITEMS].check((order_data.id, item.id), item)

        transaction.stage(StagedWrite(ORDERS, order_data.id, order_data, always_advance=True))
        for item in line_items:
            transaction.stage(StagedWrite(LINE_ITEMS, (order_data.id, item.id), item))

        self.logger.debug(
            f"Staged order {order_data.id} with {len(line_items)} line items",
            component='store', transaction_id=transaction.transaction_id, order_id=order_data.id
        )

    def set_line_item(self, transaction: IActiveTransaction, line_item: OrderLineItem) -> None:
        transaction = self._own(transaction)
        order_id, item = line_item.to_data()
        key = (order_id, item.id)

        with self._locked():
            if self._read(ORDERS, order_id, transaction) is None:
                raise NotFoundError(f"Order {order_id} not found", entity=ORDERS, entity_id=order_id)

            if self._read(LINE_ITEMS, key, transaction) is None:
                raise NotFoundError(
                    f"Line item {item.id} not found in order {order_id}",
                    entity=LINE_ITEMS, entity_id=item.id
                )

            self._tables[LINE_ITEMS].check(key, item)

        transaction.stage(StagedWrite(LINE_ITEMS, key, item))

        self.logger.debug(
            f"Staged line item {item.id} of order {order_id}",
            component='store', transaction_id=transaction.transaction_id,
            order_id=order_id, line_item_id=item.id
        )

    def get_line_item(self, order_id: OrderId, line_item_id: LineItemId) -> Optional[OrderLineItem]:
        transaction = self._reading_transaction()
        with self._locked():
            order = self._read(ORDERS, order_id, transaction)
            item = self._read(LINE_ITEMS, (order_id, line_item_id), transaction)
            if order is None or item is None:
                return None

            return OrderLineItem.from_data(order, item)

    # Products

    def get_product(self, product_id: ProductId) -> Optional[Product]:
        transaction = self._reading_transaction()
        with self._locked():
            data = self._read(PRODUCTS, product_id, transaction)
            return Product.from_data(data) if data is not None else None

    def set_product(self, transaction: IActiveTransaction, product: Product) -> None:
        self._stage_entity(transaction, PRODUCTS, product.to_data())

    # Customers

    def get_customer(self, customer_id: CustomerId) -> Optional[Customer]:
        transaction = self._reading_transaction()
        with self._locked():
            data = self._read(CUSTOMERS, customer_id, transaction)
            return Customer.from_data(data) if data is not None else None

    def set_customer(self, transaction: IActiveTransaction, customer: Customer) -> None:
        self._stage_entity(transaction, CUSTOMERS, customer.to_data())

    # Transactions

    def commit(self, transaction: MemoryTransaction) -> None:
        """Check every staged write against committed state, then apply them all."""
        writes = transaction.staged()

        with self._locked():
            for write in writes:
                self._tables[write.table].check(write.key, write.record)
            self._check_unique_products(writes)

            applied = 0
            for write in writes:
                is_new = write.key not in self._tables[write.table]
                if self._tables[write.table].apply(write.key, write.record, write.always_advance):
                    applied += 1
                if write.table == LINE_ITEMS and is_new:
                    order_id, item_id = write.key
                    self._order_line_items.setdefault(order_id, []).append(item_id)

        self.logger.debug(
            f"Transaction {transaction.transaction_id} committed",
            component='store', transaction_id=transaction.transaction_id,
            staged=len(writes), applied=applied
        )

    def _check_unique_products(self, writes: List[StagedWrite]) -> None:
        """Raise if committing ``writes`` would put a product in an order twice."""
        merged: Dict[OrderId, Dict[LineItemId, LineItemData]] = {}
        for write in writes:
            if write.table != LINE_ITEMS:
                continue

            order_id, item_id = write.key
            if order_id not in merged:
                merged[order_id] = {
                    committed_id: self._tables[LINE_ITEMS].get((order_id, committed_id))
                    for committed_id in self._order_line_items.get(order_id, [])
                }
            merged[order_id][item_id] = write.record

        for order_id, items in merged.items():
            seen = set()
            for item in items.values():
                if item.product_id in seen:
                    raise InvariantViolationError(
                        "Product is already in order", field='product_id', value=item.product_id,
                        context={'order_id': order_id}
                    )
                seen.add(item.product_id)

    def _stage_entity(self, transaction: IActiveTransaction, table: str, data: Any) -> None:
        transaction = self._own(transaction)

        with self._locked():
            self._tables[table].check(data.id, data)

        transaction.stage(StagedWrite(table, data.id, data))

        self.logger.debug(
            f"Staged {table} {data.id}",
            component='store', transaction_id=transaction.transaction_id, entity_id=data.id
        )

    def _own(self, transaction: IActiveTransaction) -> MemoryTransaction:
        if not isinstance(transaction, MemoryTransaction) or transaction.store is not self:
            raise ProviderFailureError("Transaction does not belong to this store", provider='transaction')

        if not transaction.is_open:
            raise ProviderFailureError(
                f"Transaction {transaction.transaction_id} is no longer active",
                provider='transaction'
            )

        return transaction
