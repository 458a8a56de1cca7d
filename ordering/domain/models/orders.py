"""
Entities for orders and line items.

An ``Order`` owns its line items and guarantees that no product appears on
it twice. Updating an existing line item goes through
``into_line_item_for_product``, which classifies the order against a product
and hands back either the matching ``OrderLineItem`` or the untouched order,
so callers branch once instead of looking a line item up and then mutating
the order it came from.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ordering.domain.exceptions import InvalidInputError, InvariantViolationError
from ordering.domain.interfaces.base import ValueObject
from ordering.domain.models.customers import Customer, CustomerId
from ordering.domain.models.identity import Id, IdProvider, NextId, provide_id
from ordering.domain.models.products import Product, ProductId, parse_price
from ordering.domain.models.version import Version

OrderId = Id['OrderData']
NextOrderId = NextId['OrderData']
OrderVersion = Version['OrderData']
LineItemId = Id['LineItemData']
NextLineItemId = NextId['LineItemData']
LineItemVersion = Version['LineItemData']


@dataclass(frozen=True)
class Quantity(ValueObject):
    """An order line item quantity; always at least 1."""

    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidInputError("Quantity must be an integer", field='quantity', value=self.value)

        if self.value < 1:
            raise InvariantViolationError("Quantity must be greater than 0", field='quantity', value=self.value)

    @classmethod
    def of(cls, quantity: Union['Quantity', int]) -> 'Quantity':
        if isinstance(quantity, Quantity):
            return quantity
        return cls(quantity)


@dataclass(frozen=True)
class OrderData:
    """Stored representation of an order, without its line items."""

    id: OrderId
    version: OrderVersion
    customer_id: CustomerId

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': str(self.id),
            'version': self.version.value,
            'customer_id': str(self.customer_id),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OrderData':
        try:
            return cls(
                id=Id.parse(data['id']),
                version=Version.from_value(data.get('version', 0)),
                customer_id=Id.parse(data['customer_id']),
            )
        except KeyError as e:
            raise InvalidInputError(f"Missing order field: {e.args[0]}", field=e.args[0])


@dataclass(frozen=True)
class LineItemData:
    """Stored representation of a line item; ``price`` is the product price captured when it was added."""

    id: LineItemId
    version: LineItemVersion
    product_id: ProductId
    price: Decimal
    quantity: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': str(self.id),
            'version': self.version.value,
            'product_id': str(self.product_id),
            'price': str(self.price),
            'quantity': self.quantity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LineItemData':
        try:
            return cls(
                id=Id.parse(data['id']),
                version=Version.from_value(data.get('version', 0)),
                product_id=Id.parse(data['product_id']),
                price=parse_price(data['price']),
                quantity=Quantity.of(data['quantity']).value,
            )
        except KeyError as e:
            raise InvalidInputError(f"Missing line item field: {e.args[0]}", field=e.args[0])


class OrderLineItem:
    """An order and one of its line items.

    Only the quantity can change; product and captured price are fixed once
    the line item exists.
    """

    id_type = LineItemId
    version_type = LineItemVersion
    data_type = LineItemData
    error_type = InvariantViolationError

    def __init__(self, order: OrderData, line_item: LineItemData):
        self._order = order
        self._line_item = line_item

    @classmethod
    def from_data(cls, order: OrderData, line_item: LineItemData) -> 'OrderLineItem':
        return cls(order, line_item)

    @property
    def id(self) -> LineItemId:
        return self._line_item.id

    @property
    def version(self) -> LineItemVersion:
        return self._line_item.version

    @property
    def order_id(self) -> OrderId:
        return self._order.id

    def to_data(self) -> Tuple[OrderId, LineItemData]:
        return self._order.id, self._line_item

    def set_quantity(self, quantity: Union[Quantity, int]) -> None:
        quantity = Quantity.of(quantity)
        self._line_item = replace(self._line_item, quantity=quantity.value)


class Order:
    """An order and its line items.

    Products can be added to an order as a line item, so long as it isn't already there.
    """

    id_type = OrderId
    version_type = OrderVersion
    data_type = OrderData
    error_type = InvariantViolationError

    def __init__(self, order: OrderData, line_items: Iterable[LineItemData] = ()):
        self._order = order
        self._line_items: List[LineItemData] = list(line_items)

    @classmethod
    def from_data(cls, order: OrderData, line_items: Iterable[LineItemData] = ()) -> 'Order':
        return cls(order, line_items)

    @classmethod
    def new(cls, id_provider: IdProvider['OrderData'], customer: Customer) -> 'Order':
        """Start an empty order for an existing customer."""
        order_id = provide_id(id_provider, role="order id")

        order = OrderData(
            id=order_id,
            version=Version.default(),
            customer_id=customer.id,
        )

        return cls(order, [])

    @property
    def id(self) -> OrderId:
        return self._order.id

    @property
    def version(self) -> OrderVersion:
        return self._order.version

    @property
    def customer_id(self) -> CustomerId:
        return self._order.customer_id

    @property
    def line_items(self) -> Tuple[LineItemData, ...]:
        return tuple(self._line_items)

    def to_data(self) -> Tuple[OrderData, Tuple[LineItemData, ...]]:
        return self._order, tuple(self._line_items)

    def to_dict(self) -> Dict[str, Any]:
        data = self._order.to_dict()
        data['line_items'] = [item.to_dict() for item in self._line_items]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Order':
        line_items = [LineItemData.from_dict(item) for item in data.get('line_items', [])]
        return cls(OrderData.from_dict(data), line_items)

    def contains_product(self, product_id: ProductId) -> bool:
        return any(item.product_id == product_id for item in self._line_items)

    def add_product(self, id_provider: IdProvider['LineItemData'], product: Product,
                    quantity: Union[Quantity, int]) -> LineItemId:
        """Add a product as a new line item, capturing its current price."""
        product_data = product.to_data()

        if self.contains_product(product_data.id):
            raise InvariantViolationError(
                "Product is already in order",
                field='product_id', value=str(product_data.id),
                context={'order_id': str(self.id)}
            )

        quantity = Quantity.of(quantity)
        line_item_id = provide_id(id_provider, role="line item id")

        self._line_items.append(LineItemData(
            id=line_item_id,
            version=Version.default(),
            product_id=product_data.id,
            price=product_data.price,
            quantity=quantity.value,
        ))

        return line_item_id

    def line_item_for_product(self, product_id: ProductId) -> Optional[LineItemData]:
        for item in self._line_items:
            if item.product_id == product_id:
                return item
        return None

    def into_line_item_for_product(self, product_id: ProductId) -> 'IntoLineItem':
        """Classify this order against a product.

        Returns ``InOrder`` with the matching line item when the product is
        already present, otherwise ``NotInOrder`` with this order. The order
        itself is not modified, and the returned line item does not share
        state with it: the order should be treated as handed over to
        whichever branch the caller takes.
        """
        item = self.line_item_for_product(product_id)

        if item is None:
            return NotInOrder(self)

        return InOrder(OrderLineItem.from_data(self._order, item))


@dataclass(frozen=True)
class InOrder:
    """The product is already on the order; its line item can be updated."""

    line_item: OrderLineItem


@dataclass(frozen=True)
class NotInOrder:
    """The product is not on the order; it can be added."""

    order: Order


IntoLineItem = Union[InOrder, NotInOrder]
