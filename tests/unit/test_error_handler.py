"""
Unit tests for the error handler.
"""

import pytest

from ordering.domain.exceptions import (
    ConcurrencyConflictError, ConfigurationError, InvalidInputError, InvariantViolationError,
    NotFoundError, OrderingError, ProviderFailureError
)
from ordering.domain.models.orders import OrderId
from ordering.domain.models.version import Version, next_version
from ordering.infrastructure.error_handling.handler import ErrorHandler, ErrorResolution


@pytest.fixture
def handler(mock_logger):
    return ErrorHandler(mock_logger)


class TestErrorResolution:
    """Test classifying errors by what the caller should do."""

    @pytest.mark.parametrize("error, resolution", [
        (InvalidInputError("bad id"), ErrorResolution.FIX_INPUT),
        (InvariantViolationError("Quantity must be greater than 0"), ErrorResolution.FIX_INPUT),
        (NotFoundError("Order not found"), ErrorResolution.NOT_FOUND),
        (ConcurrencyConflictError("stale"), ErrorResolution.RETRY),
        (ProviderFailureError("timeout"), ErrorResolution.INFRASTRUCTURE),
        (ConfigurationError("broken"), ErrorResolution.INFRASTRUCTURE),
        (RuntimeError("boom"), ErrorResolution.INFRASTRUCTURE),
    ])
    def test_resolution(self, handler, error, resolution):
        assert handler.resolution(error) is resolution


class TestErrorHandler:
    """Test logging and user messages."""

    def test_not_found_is_logged_as_info(self, handler, mock_logger):
        """Test rejected commands are not logged as failures."""
        order_id = OrderId.new()
        error = NotFoundError(f"Order {order_id} not found", entity='order', entity_id=order_id)

        message = handler.handle_error(error, {'command': 'add_or_update_product'})

        assert message == f"Not found: Order {order_id} not found"
        mock_logger.info.assert_called_once()
        context = mock_logger.info.call_args[1]
        assert context['entity'] == 'order'
        assert context['entity_id'] == str(order_id)
        assert context['command'] == 'add_or_update_product'
        assert context['resolution'] == 'not_found'

    def test_conflict_is_logged_as_warning(self, handler, mock_logger):
        """Test concurrency conflicts carry both versions."""
        expected = Version.default()
        actual = next_version(expected)
        error = ConcurrencyConflictError(
            "Stale order write", entity='order', entity_id=OrderId.new(),
            expected_version=expected, actual_version=actual
        )

        message = handler.handle_error(error, {})

        assert message.startswith("Conflict: Stale order write")
        context = mock_logger.warning.call_args[1]
        assert context['expected_version'] == "0"
        assert context['actual_version'] == "1"
        assert context['resolution'] == 'retry'

    def test_invariant_violation_message(self, handler, mock_logger):
        """Test invariant violations include the field."""
        error = InvariantViolationError("Quantity must be greater than 0", field='quantity', value=0)

        message = handler.handle_error(error, {})

        assert message.startswith("Rejected: Quantity must be greater than 0")
        assert mock_logger.info.call_args[1]['field'] == 'quantity'
        assert mock_logger.info.call_args[1]['value'] == "0"

    def test_invalid_input_message(self, handler):
        """Test invalid input messages."""
        message = handler.create_user_message(InvalidInputError("Invalid id format: x"))
        assert message.startswith("Invalid input: Invalid id format: x")

    @pytest.mark.parametrize("error, prefix", [
        (ProviderFailureError("Timed out", provider='store'), "Service error: "),
        (ConfigurationError("missing file"), "Configuration error: "),
    ])
    def test_infrastructure_errors_are_critical(self, handler, mock_logger, error, prefix):
        """Test provider and configuration failures are logged as critical."""
        message = handler.handle_error(error, {})

        assert message.startswith(prefix)
        mock_logger.critical.assert_called_once()

    def test_provider_is_logged(self, handler, mock_logger):
        """Test the failing provider is part of the log context."""
        handler.log_error(ProviderFailureError("Timed out", provider='store'), {})
        assert mock_logger.critical.call_args[1]['provider'] == 'store'

    def test_error_context_is_merged(self, handler, mock_logger):
        """Test context attached to the error is logged."""
        handler.log_error(OrderingError("odd state", context={'order_id': 'abc'}), {})

        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args[1]['order_id'] == 'abc'

    def test_generic_ordering_error_message(self, handler):
        """Test the fallback message for domain errors."""
        assert handler.create_user_message(OrderingError("odd state")) == "Error: odd state"

    def test_unexpected_error(self, handler, mock_logger):
        """Test errors outside the domain hierarchy include a traceback."""
        try:
            raise KeyError("missing")
        except KeyError as e:
            message = handler.handle_error(e, {'command': 'create_order'})

        assert message.startswith("Unexpected error: ")
        mock_logger.error.assert_called_once()
        assert "KeyError" in mock_logger.error.call_args[1]['traceback']
