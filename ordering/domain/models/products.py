"""
Product entity.

Orders never hold a product, only its id and the price it had when it was
added, so changes here do not reach existing line items.
"""

from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Dict

from ordering.domain.exceptions import InvalidInputError, InvariantViolationError
from ordering.domain.models.identity import Id, IdProvider, NextId, provide_id
from ordering.domain.models.version import Version

ProductId = Id['ProductData']
NextProductId = NextId['ProductData']
ProductVersion = Version['ProductData']


def parse_price(value: Any) -> Decimal:
    """Convert a price given as a string, int or Decimal; floats are rejected to avoid rounding noise."""
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidInputError("Price must be a decimal string or integer", field='price', value=value)

    try:
        price = Decimal(str(value)) if not isinstance(value, Decimal) else value
    except InvalidOperation:
        raise InvalidInputError(f"Invalid price: {value!r}", field='price', value=value)

    if not price.is_finite():
        raise InvalidInputError(f"Invalid price: {value!r}", field='price', value=value)

    if price < 0:
        raise InvariantViolationError("Price cannot be negative", field='price', value=value)

    return price


@dataclass(frozen=True)
class ProductData:
    """Stored representation of a product."""

    id: ProductId
    version: ProductVersion
    title: str
    price: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': str(self.id),
            'version': self.version.value,
            'title': self.title,
            'price': str(self.price),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProductData':
        try:
            return cls(
                id=Id.parse(data['id']),
                version=Version.from_value(data.get('version', 0)),
                title=_validate_title(data['title']),
                price=parse_price(data['price']),
            )
        except KeyError as e:
            raise InvalidInputError(f"Missing product field: {e.args[0]}", field=e.args[0])


class Product:
    """A catalog product with a title and current price."""

    id_type = ProductId
    version_type = ProductVersion
    data_type = ProductData
    error_type = InvariantViolationError

    def __init__(self, data: ProductData):
        self._data = data

    @classmethod
    def from_data(cls, data: ProductData) -> 'Product':
        return cls(data)

    @classmethod
    def new(cls, id_provider: IdProvider['ProductData'], title: str, price: Any) -> 'Product':
        title = _validate_title(title)
        price = parse_price(price)
        product_id = provide_id(id_provider, role="product id")

        return cls(ProductData(id=product_id, version=Version.default(), title=title, price=price))

    @property
    def id(self) -> ProductId:
        return self._data.id

    @property
    def version(self) -> ProductVersion:
        return self._data.version

    @property
    def price(self) -> Decimal:
        return self._data.price

    def to_data(self) -> ProductData:
        return self._data

    def set_title(self, title: str) -> None:
        self._data = replace(self._data, title=_validate_title(title))


def _validate_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise InvariantViolationError("Product title must be a non-empty string", field='title', value=title)
    return title.strip()
