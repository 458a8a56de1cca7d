"""
The capability contract shared by every aggregate type.

An entity names its id, version, data record and error types and can hand out
its data record. Nothing is inherited through this contract; it only lets
stores and commands be written against "any entity".
"""

from typing import Any, ClassVar, Protocol, Type, runtime_checkable


@runtime_checkable
class Entity(Protocol):
    """Contract satisfied by aggregates and the parts they expose."""

    id_type: ClassVar[Any]
    version_type: ClassVar[Any]
    data_type: ClassVar[Type[Any]]
    error_type: ClassVar[Type[Exception]]

    @property
    def id(self) -> Any: ...

    @property
    def version(self) -> Any: ...

    def to_data(self) -> Any: ...
