"""
Customer entity.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ordering.domain.exceptions import InvalidInputError, InvariantViolationError
from ordering.domain.models.identity import Id, IdProvider, NextId, provide_id
from ordering.domain.models.version import Version

CustomerId = Id['CustomerData']
NextCustomerId = NextId['CustomerData']
CustomerVersion = Version['CustomerData']


@dataclass(frozen=True)
class CustomerData:
    """Stored representation of a customer."""

    id: CustomerId
    version: CustomerVersion
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': str(self.id),
            'version': self.version.value,
            'name': self.name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CustomerData':
        try:
            return cls(
                id=Id.parse(data['id']),
                version=Version.from_value(data.get('version', 0)),
                name=_validate_name(data['name']),
            )
        except KeyError as e:
            raise InvalidInputError(f"Missing customer field: {e.args[0]}", field=e.args[0])


class Customer:
    """A customer that orders can be placed for."""

    id_type = CustomerId
    version_type = CustomerVersion
    data_type = CustomerData
    error_type = InvariantViolationError

    def __init__(self, data: CustomerData):
        self._data = data

    @classmethod
    def from_data(cls, data: CustomerData) -> 'Customer':
        return cls(data)

    @classmethod
    def new(cls, id_provider: IdProvider['CustomerData'], name: str) -> 'Customer':
        name = _validate_name(name)
        customer_id = provide_id(id_provider, role="customer id")

        return cls(CustomerData(id=customer_id, version=Version.default(), name=name))

    @property
    def id(self) -> CustomerId:
        return self._data.id

    @property
    def version(self) -> CustomerVersion:
        return self._data.version

    def to_data(self) -> CustomerData:
        return self._data


def _validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvariantViolationError("Customer name must be a non-empty string", field='name', value=name)
    return name.strip()
