"""
Typed identifiers and identity providers.

An ``Id[T]`` wraps a random UUID and is tagged with the data type it names, so
``Id[OrderData]`` and ``Id[LineItemData]`` are distinct to a type checker even
though both carry nothing but a UUID at runtime. Equality, ordering, hashing
and the text form only ever look at the UUID.
"""

from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar
import uuid

from ordering.domain.exceptions import InvalidInputError, OrderingError, ProviderFailureError

T = TypeVar('T')


@dataclass(frozen=True, order=True)
class Id(Generic[T]):
    """A globally unique identifier tagged with the entity data type it names."""

    value: uuid.UUID

    def __post_init__(self):
        if not isinstance(self.value, uuid.UUID):
            raise InvalidInputError(
                f"Id value must be a UUID, got {type(self.value).__name__}",
                field='id', value=self.value
            )

    @classmethod
    def new(cls) -> 'Id[T]':
        """Generate a fresh random identifier."""
        return cls(uuid.uuid4())

    @classmethod
    def parse(cls, text: Any) -> 'Id[T]':
        """Parse an identifier from its canonical UUID text."""
        if isinstance(text, Id):
            return cls(text.value)

        if not isinstance(text, str):
            raise InvalidInputError(
                f"Id must be a UUID string, got {type(text).__name__}",
                field='id', value=text
            )

        try:
            return cls(uuid.UUID(text))
        except ValueError:
            raise InvalidInputError(f"Invalid id format: {text!r}", field='id', value=text)

    def get_id(self) -> 'Id[T]':
        """A known id provides itself."""
        return self

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return f"Id('{self.value}')"


def generate() -> Id[Any]:
    """Generate a fresh identifier; the caller's annotation picks the tag."""
    return Id.new()


class IdProvider(Protocol[T]):
    """Produces the identifier for a new entity of type ``T``."""

    def get_id(self) -> Id[T]: ...


class NextId(Generic[T]):
    """Provider that mints a fresh random identifier on every call."""

    def next(self) -> Id[T]:
        return Id.new()

    def get_id(self) -> Id[T]:
        return self.next()

    def __repr__(self) -> str:
        return "NextId()"


def provide_id(provider: IdProvider[T], role: str = "id") -> Id[T]:
    """Ask a provider for an id, reporting any provider breakage as a ProviderFailureError."""
    try:
        new_id = provider.get_id()
    except OrderingError:
        raise
    except Exception as e:
        raise ProviderFailureError(
            f"Identity provider failed to produce {role}: {e}",
            provider=type(provider).__name__
        ) from e

    if not isinstance(new_id, Id):
        raise ProviderFailureError(
            f"Identity provider returned {type(new_id).__name__} instead of an id for {role}",
            provider=type(provider).__name__
        )

    return new_id
