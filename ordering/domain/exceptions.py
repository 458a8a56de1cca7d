"""
Domain exceptions and error hierarchy.
"""

from typing import Optional, Dict, Any


class OrderingError(Exception):
    """Base exception for order management errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class ConfigurationError(OrderingError):
    """Configuration related errors."""
    pass


class NotFoundError(OrderingError):
    """A referenced order, product, customer or line item does not exist."""

    def __init__(self, message: str, entity: Optional[str] = None,
                 entity_id: Optional[Any] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)
        self.entity = entity
        self.entity_id = entity_id


class InvariantViolationError(OrderingError):
    """An aggregate rule would be broken (duplicate product, quantity below 1)."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Optional[Any] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)
        self.field = field
        self.value = value


class ConcurrencyConflictError(OrderingError):
    """The stored version no longer matches the version the writer observed."""

    def __init__(self, message: str, entity: Optional[str] = None,
                 entity_id: Optional[Any] = None, expected_version: Optional[Any] = None,
                 actual_version: Optional[Any] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class InvalidInputError(OrderingError):
    """Malformed identifier text or command payload."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Optional[Any] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)
        self.field = field
        self.value = value


class ProviderFailureError(OrderingError):
    """An identity or transaction provider could not produce a result."""

    def __init__(self, message: str, provider: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)
        self.provider = provider
