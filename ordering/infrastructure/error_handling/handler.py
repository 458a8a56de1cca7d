"""
Error handler implementation with structured logging and caller guidance.
"""

import traceback
from enum import Enum
from typing import Dict, Any
from datetime import datetime

from ordering.domain.interfaces.base import ILogger
from ordering.domain.exceptions import (
    OrderingError, ConfigurationError, NotFoundError, InvariantViolationError,
    ConcurrencyConflictError, InvalidInputError, ProviderFailureError
)


class ErrorResolution(Enum):
    """What a caller can do about a failed command."""
    FIX_INPUT = "fix_input"
    NOT_FOUND = "not_found"
    RETRY = "retry"
    INFRASTRUCTURE = "infrastructure"


class ErrorHandler:
    """Logs command failures and turns them into caller-facing messages."""

    def __init__(self, logger: ILogger):
        self.logger = logger

    def handle_error(self, error: Exception, context: Dict[str, Any]) -> str:
        """Handle error with logging and return user-friendly message."""
        self.log_error(error, context)
        return self.create_user_message(error)

    def resolution(self, error: Exception) -> ErrorResolution:
        """Classify an error by what the caller should do next."""
        if isinstance(error, (InvalidInputError, InvariantViolationError)):
            return ErrorResolution.FIX_INPUT
        if isinstance(error, NotFoundError):
            return ErrorResolution.NOT_FOUND
        if isinstance(error, ConcurrencyConflictError):
            return ErrorResolution.RETRY
        return ErrorResolution.INFRASTRUCTURE

    def log_error(self, error: Exception, context: Dict[str, Any]) -> None:
        """Log error with structured context."""
        error_context = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'resolution': self.resolution(error).value,
            'timestamp': datetime.now().isoformat(),
            **context
        }

        if isinstance(error, OrderingError):
            error_context.update(error.context)

            if isinstance(error, NotFoundError):
                error_context.update({
                    'entity': error.entity,
                    'entity_id': str(error.entity_id) if error.entity_id is not None else None
                })
            elif isinstance(error, ConcurrencyConflictError):
                error_context.update({
                    'entity': error.entity,
                    'entity_id': str(error.entity_id) if error.entity_id is not None else None,
                    'expected_version': str(error.expected_version),
                    'actual_version': str(error.actual_version)
                })
            elif isinstance(error, (InvariantViolationError, InvalidInputError)):
                error_context.update({
                    'field': error.field,
                    'value': str(error.value) if error.value is not None else None
                })
            elif isinstance(error, ProviderFailureError):
                error_context['provider'] = error.provider
        else:
            error_context['traceback'] = ''.join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )

        if isinstance(error, (ProviderFailureError, ConfigurationError)):
            self.logger.critical("Infrastructure error occurred", **error_context)
        elif isinstance(error, ConcurrencyConflictError):
            self.logger.warning("Concurrent write rejected", **error_context)
        elif isinstance(error, (NotFoundError, InvariantViolationError, InvalidInputError)):
            self.logger.info("Command rejected", **error_context)
        else:
            self.logger.error("Unexpected error occurred", **error_context)

    def create_user_message(self, error: Exception) -> str:
        """Create user-friendly error message."""
        if isinstance(error, NotFoundError):
            return f"Not found: {error.message}"

        elif isinstance(error, InvariantViolationError):
            return f"Rejected: {error.message}\nPlease adjust the request and resubmit."

        elif isinstance(error, InvalidInputError):
            return f"Invalid input: {error.message}\nPlease check the request parameters."

        elif isinstance(error, ConcurrencyConflictError):
            return f"Conflict: {error.message}\nThe data changed in the meantime; reload and retry."

        elif isinstance(error, ProviderFailureError):
            return f"Service error: {error.message}\nPlease try again later."

        elif isinstance(error, ConfigurationError):
            return f"Configuration error: {error.message}\nPlease check the configuration file."

        elif isinstance(error, OrderingError):
            return f"Error: {error.message}"

        else:
            return f"Unexpected error: {str(error)}\nPlease contact an administrator."
