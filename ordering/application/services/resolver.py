"""
Explicit wiring of commands and queries from their collaborators.

A ``Resolver`` owns one store, one transaction provider and one id provider
per entity type. Nothing here is global: each resolver is independent, and
tests replace collaborators by passing them in or by overriding an id
provider attribute with a fixed ``Id``.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ordering.application.commands.add_or_update_product import AddOrUpdateProductCommand
from ordering.application.commands.create_customer import CreateCustomerCommand
from ordering.application.commands.create_order import CreateOrderCommand
from ordering.application.commands.create_product import CreateProductCommand
from ordering.application.commands.set_product_title import SetProductTitleCommand
from ordering.application.queries.get_customer import GetCustomerQuery
from ordering.application.queries.get_order import GetOrderQuery
from ordering.application.queries.get_product import GetProductQuery
from ordering.domain.exceptions import ConfigurationError, OrderingError
from ordering.domain.interfaces.base import IConfigurationManager, IErrorHandler, ILogger
from ordering.domain.interfaces.store import IOrderStore, ITransactionProvider
from ordering.domain.models.configuration import OrderingConfiguration
from ordering.domain.models.customers import NextCustomerId
from ordering.domain.models.identity import IdProvider
from ordering.domain.models.orders import NextLineItemId, NextOrderId
from ordering.domain.models.products import NextProductId
from ordering.infrastructure.configuration.manager import ConfigurationManager
from ordering.infrastructure.error_handling.handler import ErrorHandler, ErrorResolution
from ordering.infrastructure.logging.logger import LoggerFactory
from ordering.infrastructure.storage.memory import InMemoryStore
from ordering.infrastructure.storage.transactions import InMemoryTransactionProvider


@dataclass(frozen=True)
class Outcome:
    """Result of ``Resolver.execute``: the operation's value, or the handled error."""

    value: Any = None
    error: Optional[OrderingError] = None
    message: Optional[str] = None
    resolution: Optional[ErrorResolution] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Resolver:
    """Builds commands and queries against one set of collaborators."""

    def __init__(self, config: Optional[OrderingConfiguration] = None,
                 logger: Optional[ILogger] = None,
                 store: Optional[IOrderStore] = None,
                 transactions: Optional[ITransactionProvider] = None):
        self.config = config or OrderingConfiguration()
        self._logger = logger
        self._loggers: Dict[str, ILogger] = {}

        self.store = store or InMemoryStore(self.logger_for('store'), lock_timeout=self.config.lock_timeout)

        if transactions is None:
            if not isinstance(self.store, InMemoryStore):
                raise ConfigurationError("A transaction provider is required for a custom store")
            transactions = InMemoryTransactionProvider(self.store, self.logger_for('transactions'))
        self.transactions = transactions

        self.order_id_provider: IdProvider[Any] = NextOrderId()
        self.line_item_id_provider: IdProvider[Any] = NextLineItemId()
        self.product_id_provider: IdProvider[Any] = NextProductId()
        self.customer_id_provider: IdProvider[Any] = NextCustomerId()

        self.error_handler: IErrorHandler = ErrorHandler(self.logger_for('errors'))
        self.config_manager: Optional[IConfigurationManager] = None

    @classmethod
    def from_config_file(cls, config_file_path: str, hot_reload: bool = False) -> 'Resolver':
        """Create a resolver from a JSON configuration file, optionally following its changes."""
        bootstrap_logger = LoggerFactory.create_logger("ordering.configuration")
        manager = ConfigurationManager(config_file_path, bootstrap_logger)

        resolver = cls(config=manager.get_ordering_config())
        resolver.config_manager = manager

        if hot_reload:
            manager.add_change_callback(lambda _: resolver.apply_config(manager.get_ordering_config()))
            manager.start_hot_reload()

        return resolver

    def apply_config(self, config: OrderingConfiguration) -> None:
        """Pick up settings that can change while running."""
        self.config = config
        if isinstance(self.store, InMemoryStore):
            self.store.lock_timeout = config.lock_timeout

        self.logger_for('resolver').info(
            "Configuration applied", component='resolver', lock_timeout=config.lock_timeout
        )

    def close(self) -> None:
        if self.config_manager is not None:
            self.config_manager.stop_hot_reload()

    def logger_for(self, component: str) -> ILogger:
        if self._logger is not None:
            return self._logger

        if component not in self._loggers:
            self._loggers[component] = LoggerFactory.create_component_logger(component, self.config)
        return self._loggers[component]

    def execute(self, operation: Callable[[Any], Any], request: Any) -> Outcome:
        """Run a command or query, turning a domain failure into an ``Outcome``.

        The error is logged through the error handler. Its message and
        resolution tell a caller whether to resubmit against fresh state.
        Errors outside the domain hierarchy propagate.
        """
        try:
            return Outcome(value=operation(request))
        except OrderingError as e:
            message = self.error_handler.handle_error(e, {'request': type(request).__name__})
            return Outcome(error=e, message=message, resolution=self.error_handler.resolution(e))

    # Commands

    def add_or_update_product_command(self) -> AddOrUpdateProductCommand:
        return AddOrUpdateProductCommand(
            self.transactions, self.store, self.line_item_id_provider,
            self.get_product_query(), self.logger_for('orders')
        )

    def create_order_command(self) -> CreateOrderCommand:
        return CreateOrderCommand(
            self.transactions, self.store, self.order_id_provider,
            self.get_customer_query(), self.logger_for('orders')
        )

    def create_product_command(self) -> CreateProductCommand:
        return CreateProductCommand(
            self.transactions, self.store, self.product_id_provider, self.logger_for('products')
        )

    def set_product_title_command(self) -> SetProductTitleCommand:
        return SetProductTitleCommand(self.transactions, self.store, self.logger_for('products'))

    def create_customer_command(self) -> CreateCustomerCommand:
        return CreateCustomerCommand(
            self.transactions, self.store, self.customer_id_provider, self.logger_for('customers')
        )

    # Queries

    def get_order_query(self) -> GetOrderQuery:
        return GetOrderQuery(self.store, self.logger_for('orders'))

    def get_product_query(self) -> GetProductQuery:
        return GetProductQuery(self.store, self.logger_for('products'))

    def get_customer_query(self) -> GetCustomerQuery:
        return GetCustomerQuery(self.store, self.logger_for('customers'))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
