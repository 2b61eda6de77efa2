"""
Shopping cart of one browsing session.

Every add produces a new line, even for a configuration already in the cart.
A line keeps the price and quantity it was configured with; its total is
derived from them on every read, so editing the quantity never leaves a
stale total behind.
"""
import copy
import time
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from quikprint.core.entities import Configuration, Product
from quikprint.core.exceptions import InvalidDataError
from quikprint.core.money import ZERO, round_money


@dataclass
class CartItem:
    """One configured product at one quantity."""
    id: str
    product: Product
    quantity: int
    configuration: Configuration
    configured_price: Decimal
    configured_quantity: int
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def unit_price(self) -> Decimal:
        return round_money(self.configured_price / self.configured_quantity)

    @property
    def total_price(self) -> Decimal:
        """Configured price scaled to the current quantity."""
        if self.quantity == self.configured_quantity:
            return round_money(self.configured_price)
        return round_money(self.configured_price * self.quantity / self.configured_quantity)


@dataclass
class Cart:
    """Ordered list of cart lines; insertion order is display order."""
    items: List[CartItem] = field(default_factory=list)

    @property
    def item_count(self) -> int:
        """Number of distinct lines, not the sum of quantities."""
        return len(self.items)

    @property
    def subtotal(self) -> Decimal:
        return sum((item.total_price for item in self.items), ZERO)

    def is_empty(self) -> bool:
        return not self.items

    def get_item(self, item_id: str) -> Optional[CartItem]:
        return next((item for item in self.items if item.id == item_id), None)

    def add_item(self, product: Product, quantity: int, configuration: Configuration, total_price: Decimal) -> CartItem:
        """
        Appends a new line holding snapshots of the product and the configuration,
        so later catalog edits never change what is already in the cart.
        """
        if quantity is None or int(quantity) < 1:
            raise InvalidDataError("The quantity to add must be at least 1.")
        quantity = int(quantity)
        item = CartItem(
            id=self._new_item_id(product),
            product=copy.deepcopy(product),
            quantity=quantity,
            configuration=dict(configuration),
            configured_price=Decimal(total_price),
            configured_quantity=quantity,
        )
        self.items.append(item)
        return item

    def remove_item(self, item_id: str) -> None:
        """Removes the line with this id; unknown ids are ignored."""
        self.items = [item for item in self.items if item.id != item_id]

    def update_quantity(self, item_id: str, quantity: int) -> Optional[CartItem]:
        """
        Replaces a line's quantity. A quantity of zero or less removes the line.
        The quantity option of the configuration follows the line quantity.
        """
        item = self.get_item(item_id)
        if item is None:
            return None
        if quantity <= 0:
            self.remove_item(item_id)
            return None
        item.quantity = int(quantity)
        option = item.product.quantity_option
        if option is not None:
            item.configuration[option.id] = str(item.quantity) if option.is_choice else item.quantity
        return item

    def clear(self) -> None:
        self.items = []

    def _new_item_id(self, product: Product) -> str:
        # "<product id>-<timestamp ms>", bumped on collision within this cart
        timestamp = int(time.time() * 1000)
        taken = {item.id for item in self.items}
        item_id = f"{product.id}-{timestamp}"
        while item_id in taken:
            timestamp += 1
            item_id = f"{product.id}-{timestamp}"
        return item_id
