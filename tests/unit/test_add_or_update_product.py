"""
Unit tests for AddOrUpdateProductCommand.
"""

import threading
from decimal import Decimal
from unittest.mock import Mock

import pytest

from ordering.application.commands.add_or_update_product import (
    AddOrUpdateProduct, AddOrUpdateProductCommand
)
from ordering.application.queries.get_product import GetProductQuery
from ordering.domain.exceptions import (
    ConcurrencyConflictError, InvalidInputError, InvariantViolationError, NotFoundError,
    ProviderFailureError
)
from ordering.domain.models.orders import LineItemId, NextLineItemId, OrderId
from ordering.domain.models.products import ProductId
from ordering.domain.models.version import Version, next_version


@pytest.fixture
def products(seeded_store, mock_logger):
    """Product lookup over the seeded store."""
    return GetProductQuery(seeded_store, mock_logger)


@pytest.fixture
def command(seeded_store, transactions, products, mock_logger):
    """Command wired against the seeded store with a fresh id per line item."""
    return AddOrUpdateProductCommand(transactions, seeded_store, NextLineItemId(), products, mock_logger)


class TestAddOrUpdateProduct:
    """Test adding and updating products in an order."""

    def test_add_new_product(self, command, seeded_store, order, product):
        """Test adding a product the order does not have yet."""
        line_item_id = command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=3))

        line_item = seeded_store.get_line_item(order.id, line_item_id)
        order_id, data = line_item.to_data()
        assert order_id == order.id
        assert data.product_id == product.id
        assert data.quantity == 3
        assert data.price == Decimal("9.99")

    def test_update_existing_product(self, command, seeded_store, order, product):
        """Test a second call for the same product updates the existing line item."""
        first = command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=3))
        second = command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=5))

        assert second == first
        assert seeded_store.get_line_item(order.id, first).to_data()[1].quantity == 5
        assert len(seeded_store.get_order(order.id).line_items) == 1

    def test_update_does_not_touch_order_record(self, command, seeded_store, order, product):
        """Test updating a quantity writes only the line item."""
        line_item_id = command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=1))
        order_version = seeded_store.get_order(order.id).version
        item_version = seeded_store.get_line_item(order.id, line_item_id).version

        command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=2))

        assert seeded_store.get_order(order.id).version == order_version
        assert seeded_store.get_line_item(order.id, line_item_id).version == next_version(item_version)

    def test_update_skips_product_lookup(self, seeded_store, transactions, order, product, mock_logger):
        """Test the catalog is not consulted for a product already in the order."""
        lookup = Mock()
        lookup.get_product.return_value = product
        command = AddOrUpdateProductCommand(transactions, seeded_store, NextLineItemId(), lookup, mock_logger)

        command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=1))
        command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=4))

        lookup.get_product.assert_called_once_with(product.id)

    def test_fixed_line_item_id(self, seeded_store, transactions, products, order, product, mock_logger):
        """Test a fixed id provider decides the new line item id."""
        fixed = LineItemId.new()
        command = AddOrUpdateProductCommand(transactions, seeded_store, fixed, products, mock_logger)

        assert command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=1)) == fixed

    def test_two_products_in_one_order(self, command, seeded_store, transactions, order, product, other_product):
        """Test distinct products get distinct line items."""
        with transactions.active() as transaction:
            seeded_store.set_product(transaction, other_product)

        with_product = command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=1))
        with_other = command(AddOrUpdateProduct(id=order.id, product_id=other_product.id, quantity=2))

        assert with_product != with_other
        stored = seeded_store.get_order(order.id)
        assert [item.product_id for item in stored.line_items] == [product.id, other_product.id]

    def test_unknown_product(self, command, seeded_store, order):
        """Test adding a product missing from the catalog."""
        with pytest.raises(NotFoundError, match="Product"):
            command(AddOrUpdateProduct(id=order.id, product_id=ProductId.new(), quantity=1))

        assert seeded_store.get_order(order.id).line_items == ()

    def test_unknown_order(self, command, seeded_store, product):
        """Test targeting an order that does not exist creates nothing."""
        missing = OrderId.new()

        with pytest.raises(NotFoundError, match="Order") as exc_info:
            command(AddOrUpdateProduct(id=missing, product_id=product.id, quantity=1))

        assert exc_info.value.entity_id == missing
        assert seeded_store.get_order(missing) is None

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_invalid_quantity_for_new_product(self, command, seeded_store, order, product, quantity):
        """Test a rejected quantity on add writes nothing."""
        version = seeded_store.get_order(order.id).version

        with pytest.raises(InvariantViolationError):
            command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=quantity))

        stored = seeded_store.get_order(order.id)
        assert stored.line_items == ()
        assert stored.version == version

    def test_invalid_quantity_for_existing_product(self, command, seeded_store, order, product):
        """Test a rejected quantity on update keeps the previous quantity."""
        line_item_id = command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=2))

        with pytest.raises(InvariantViolationError):
            command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=0))

        assert seeded_store.get_line_item(order.id, line_item_id).to_data()[1].quantity == 2

    def test_provider_failure(self, seeded_store, transactions, products, order, product, mock_logger):
        """Test a failing id provider aborts the command."""
        class BrokenProvider:
            def get_id(self):
                raise OSError("no randomness")

        command = AddOrUpdateProductCommand(transactions, seeded_store, BrokenProvider(), products, mock_logger)

        with pytest.raises(ProviderFailureError):
            command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=1))

        assert seeded_store.get_order(order.id).line_items == ()

    def test_concurrent_add_conflicts(self, seeded_store, transactions, products, order, product, mock_logger):
        """Test an add that races another add of the same product is rejected."""
        racing = threading.Event()

        class RacingLookup:
            """Lets a second writer commit between this command's read and write."""

            def get_product(self, product_id):
                if not racing.is_set():
                    racing.set()
                    worker = threading.Thread(
                        target=command, args=(AddOrUpdateProduct(id=order.id, product_id=product_id, quantity=7),)
                    )
                    worker.start()
                    worker.join()
                return products.get_product(product_id)

        command = AddOrUpdateProductCommand(
            transactions, seeded_store, NextLineItemId(), RacingLookup(), mock_logger
        )

        with pytest.raises(ConcurrencyConflictError):
            command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=1))

        stored = seeded_store.get_order(order.id)
        assert len(stored.line_items) == 1
        assert stored.line_items[0].quantity == 7

    def test_commands_sharing_a_transaction(self, command, seeded_store, transactions, order, product):
        """Test a second command in the same transaction updates the line item the first one added."""
        with transactions.active():
            first = command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=1))
            second = command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=2))

        assert second == first
        stored = seeded_store.get_order(order.id)
        assert len(stored.line_items) == 1
        assert stored.line_items[0].id == first
        assert stored.line_items[0].quantity == 2

    def test_shared_transaction_rolls_back_together(self, command, seeded_store, transactions, order, product):
        """Test a failure after several commands discards all of them."""
        with pytest.raises(NotFoundError):
            with transactions.active():
                command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=1))
                command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=3))
                command(AddOrUpdateProduct(id=order.id, product_id=ProductId.new(), quantity=1))

        assert seeded_store.get_order(order.id).line_items == ()

    def test_logs_success(self, command, order, product, mock_logger):
        """Test the command logs its outcome."""
        command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=1))

        mock_logger.info.assert_called_once()
        assert "Updated product" in mock_logger.info.call_args[0][0]


class TestAddOrUpdateProductPayload:
    """Test building the command input from a payload."""

    def test_from_dict(self, order, product):
        """Test a valid payload."""
        command = AddOrUpdateProduct.from_dict({
            'id': str(order.id), 'product_id': str(product.id), 'quantity': 4
        })

        assert command == AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=4)

    @pytest.mark.parametrize("payload, field", [
        ({'product_id': str(ProductId.new()), 'quantity': 1}, 'id'),
        ({'id': "nope", 'product_id': str(ProductId.new()), 'quantity': 1}, 'id'),
        ({'id': str(OrderId.new()), 'quantity': 1}, 'product_id'),
        ({'id': str(OrderId.new()), 'product_id': str(ProductId.new()), 'quantity': "1"}, 'quantity'),
        ({'id': str(OrderId.new()), 'product_id': str(ProductId.new()), 'quantity': True}, 'quantity'),
    ])
    def test_from_dict_invalid(self, payload, field):
        """Test malformed payloads are invalid input."""
        with pytest.raises(InvalidInputError) as exc_info:
            AddOrUpdateProduct.from_dict(payload)

        assert exc_info.value.field == field

    def test_from_dict_not_an_object(self):
        """Test a payload that is not a dict."""
        with pytest.raises(InvalidInputError, match="Payload must be an object"):
            AddOrUpdateProduct.from_dict(["id"])


def test_version_of_new_line_item(command, seeded_store, order, product):
    """Test a newly added line item is stored once."""
    line_item_id = command(AddOrUpdateProduct(id=order.id, product_id=product.id, quantity=1))

    assert seeded_store.get_line_item(order.id, line_item_id).version == next_version(Version.default())
