"""
Transactions for the in-memory store.

A transaction only collects staged writes. The store checks and applies them
in one step when the outermost ``active()`` scope exits cleanly; when the
scope exits with an error the staged writes are dropped.

While a scope is open, store reads on the same thread see its staged writes
on top of committed state. Other threads only see committed state.
"""

import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple, TYPE_CHECKING

from ordering.domain.exceptions import ProviderFailureError
from ordering.domain.interfaces.base import ILogger
from ordering.domain.interfaces.store import IActiveTransaction, ITransactionProvider

if TYPE_CHECKING:
    from ordering.infrastructure.storage.memory import InMemoryStore


@dataclass(frozen=True)
class StagedWrite:
    """One record waiting for commit.

    ``record`` carries the version the writer last read; the store checks it
    against the committed version before applying. ``always_advance`` bumps
    the version even when the record is otherwise unchanged.
    """
    table: str
    key: Any
    record: Any
    always_advance: bool = False


class MemoryTransaction(IActiveTransaction):
    """Staged writes for one command invocation against an ``InMemoryStore``."""

    def __init__(self, store: 'InMemoryStore'):
        self.store = store
        self._transaction_id = uuid.uuid4().hex[:12]
        self._writes: Dict[Tuple[str, Any], StagedWrite] = {}
        self._open = True

    @property
    def transaction_id(self) -> str:
        return self._transaction_id

    @property
    def is_open(self) -> bool:
        return self._open

    def stage(self, write: StagedWrite) -> None:
        if not self._open:
            raise ProviderFailureError(
                f"Transaction {self._transaction_id} is no longer active",
                provider='transaction'
            )
        # A later write of the same record replaces the earlier one in place,
        # so records keep the position they were first staged at
        self._writes[(write.table, write.key)] = write

    def staged(self) -> List[StagedWrite]:
        return list(self._writes.values())

    def staged_write(self, table: str, key: Any) -> Optional[StagedWrite]:
        return self._writes.get((table, key))

    def close(self) -> None:
        self._writes.clear()
        self._open = False


class InMemoryTransactionProvider(ITransactionProvider):
    """Hands out the active transaction for the calling thread."""

    def __init__(self, store: 'InMemoryStore', logger: ILogger):
        self.store = store
        self.logger = logger
        self._local = threading.local()

    def current(self) -> Optional[MemoryTransaction]:
        transaction = getattr(self._local, 'transaction', None)
        if transaction is not None and transaction.is_open:
            return transaction
        return None

    @contextmanager
    def active(self) -> Iterator[MemoryTransaction]:
        """Begin a transaction, or join the one already open on this thread."""
        existing = self.current()
        if existing is not None:
            yield existing
            return

        transaction = MemoryTransaction(self.store)
        self._local.transaction = transaction
        self.store.use_transaction(transaction)
        self.logger.debug(
            f"Transaction {transaction.transaction_id} started",
            component='transactions', transaction_id=transaction.transaction_id
        )

        try:
            yield transaction
        except BaseException:
            self.logger.debug(
                f"Transaction {transaction.transaction_id} rolled back",
                component='transactions', transaction_id=transaction.transaction_id,
                discarded=len(transaction.staged())
            )
            raise
        else:
            self.store.commit(transaction)
        finally:
            transaction.close()
            self.store.use_transaction(None)
            self._local.transaction = None
