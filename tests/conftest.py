"""
Pytest configuration and shared fixtures.
"""

import pytest
import tempfile
import shutil
from decimal import Decimal
from pathlib import Path
from unittest.mock import Mock

from ordering.domain.interfaces.base import ILogger
from ordering.domain.models.configuration import OrderingConfiguration
from ordering.domain.models.customers import Customer, CustomerId
from ordering.domain.models.orders import Order, OrderId
from ordering.domain.models.products import Product, ProductId
from ordering.infrastructure.storage.memory import InMemoryStore
from ordering.infrastructure.storage.transactions import InMemoryTransactionProvider


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing."""
    logger = Mock(spec=ILogger)
    logger.debug = Mock()
    logger.info = Mock()
    logger.warning = Mock()
    logger.error = Mock()
    logger.critical = Mock()
    return logger


@pytest.fixture
def sample_config():
    """Create a sample configuration for testing."""
    return OrderingConfiguration(lock_timeout=0.5, log_level="DEBUG")


@pytest.fixture
def sample_config_dict():
    """Create a sample configuration dictionary for testing."""
    return {
        'lock_timeout': 2.5,
        'log_level': "WARNING",
    }


@pytest.fixture
def customer():
    """A customer with a fixed id."""
    return Customer.new(CustomerId.new(), "Ada Lovelace")


@pytest.fixture
def product():
    """A product priced at 9.99."""
    return Product.new(ProductId.new(), "Widget", Decimal("9.99"))


@pytest.fixture
def other_product():
    """A second product priced at 4.50."""
    return Product.new(ProductId.new(), "Gadget", "4.50")


@pytest.fixture
def order(customer):
    """An empty order for the sample customer."""
    return Order.new(OrderId.new(), customer)


@pytest.fixture
def store(mock_logger):
    """An empty in-memory store."""
    return InMemoryStore(mock_logger, lock_timeout=1.0)


@pytest.fixture
def transactions(store, mock_logger):
    """Transaction provider for the in-memory store."""
    return InMemoryTransactionProvider(store, mock_logger)


@pytest.fixture
def seeded_store(store, transactions, customer, product, order):
    """A store holding the sample customer, product and empty order."""
    with transactions.active() as transaction:
        store.set_customer(transaction, customer)
        store.set_product(transaction, product)
        store.set_order(transaction, order)
    return store
