"""
Opaque version stamps for optimistic concurrency.

Aggregates only carry and compare versions. A version moves forward when a
store persists a change, never when an aggregate is mutated in memory.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ordering.domain.exceptions import InvalidInputError

T = TypeVar('T')

_INITIAL_REVISION = 0


@dataclass(frozen=True)
class Version(Generic[T]):
    """Revision stamp of a stored entity of type ``T``."""

    value: int = _INITIAL_REVISION

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidInputError("Version must be an integer stamp", field='version', value=self.value)

        if self.value < _INITIAL_REVISION:
            raise InvalidInputError("Version cannot be negative", field='version', value=self.value)

    @classmethod
    def default(cls) -> 'Version[T]':
        """The version of an entity that has never been stored."""
        return cls(_INITIAL_REVISION)

    @classmethod
    def from_value(cls, value: Any) -> 'Version[T]':
        """Rebuild a version from its serialized value."""
        return cls(value)

    def __str__(self) -> str:
        return str(self.value)


def next_version(version: Version[T]) -> Version[T]:
    """The version a store assigns after persisting a change; not for aggregate code."""
    return type(version)(version.value + 1)
