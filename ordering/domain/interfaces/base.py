"""
Base interfaces and abstract classes for the domain layer.
"""

from abc import ABC
from enum import Enum
from typing import Any, Callable, Dict, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from ordering.domain.models.configuration import OrderingConfiguration


class ILogger(Protocol):
    """Logger interface for dependency injection."""

    def debug(self, message: str, **kwargs: Any) -> None: ...
    def info(self, message: str, **kwargs: Any) -> None: ...
    def warning(self, message: str, **kwargs: Any) -> None: ...
    def error(self, message: str, **kwargs: Any) -> None: ...
    def critical(self, message: str, **kwargs: Any) -> None: ...


class IConfigurationManager(Protocol):
    """Configuration management interface."""

    def get(self, key: str, default: Any = None) -> Any: ...
    def set(self, key: str, value: Any) -> None: ...
    def validate(self) -> bool: ...
    def reload(self) -> bool: ...
    def get_all(self) -> Dict[str, Any]: ...
    def get_ordering_config(self) -> 'OrderingConfiguration': ...
    def add_change_callback(self, callback: Callable[[Dict[str, Any]], None]) -> None: ...
    def start_hot_reload(self) -> None: ...
    def stop_hot_reload(self) -> None: ...


class IErrorHandler(Protocol):
    """Error handling interface."""

    def handle_error(self, error: Exception, context: Dict[str, Any]) -> str: ...
    def log_error(self, error: Exception, context: Dict[str, Any]) -> None: ...
    def create_user_message(self, error: Exception) -> str: ...
    def resolution(self, error: Exception) -> Enum: ...


class DomainService(ABC):
    """Base class for commands and queries that run against domain collaborators."""

    def __init__(self, logger: ILogger):
        self.logger = logger


class ValueObject(ABC):
    """Base class for value objects."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.__dict__.items())))
