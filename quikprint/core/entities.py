from dataclasses import dataclass, field
from decimal import Decimal
from datetime import datetime
from typing import List, Optional, Dict, Any
import uuid

from quikprint.core.exceptions import InvalidDataError

# ====================================================================
# CORE ENTITIES
# Plain business objects, no framework dependencies.
# ====================================================================

# A configuration maps an option id to the chosen value: a choice value
# (str) for select/radio options, a number for dimension/quantity options.
Configuration = Dict[str, Any]


@dataclass
class User:
    """Customer or staff member, referenced by orders."""
    email: str
    name: str = ''
    phone: Optional[str] = None
    is_staff: bool = False
    id: Optional[int] = None
    date_joined: Optional[datetime] = None


@dataclass
class Category:
    """Product category (Business Cards, Flyers, Banners...)."""
    name: str
    slug: str
    description: str = ''
    image: Optional[str] = None
    product_count: int = 0
    id: Optional[int] = None


@dataclass(frozen=True)
class OptionChoice:
    """One selectable value of a select/radio option."""
    value: str
    label: str
    price_modifier: Optional[Decimal] = None


@dataclass(frozen=True)
class ProductOption:
    """
    One configurable dimension of a product.

    Choice options (select/radio) carry a non-empty list of choices with
    unique values; numeric options (dimension/quantity) carry bounds.
    """
    SELECT = 'select'
    RADIO = 'radio'
    DIMENSION = 'dimension'
    QUANTITY = 'quantity'
    TYPES = (SELECT, RADIO, DIMENSION, QUANTITY)

    id: str
    name: str
    type: str
    choices: tuple = ()
    min: Optional[Decimal] = None
    max: Optional[Decimal] = None
    step: Optional[Decimal] = None
    unit: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise InvalidDataError("Product options need an id.")
        if self.type not in self.TYPES:
            raise InvalidDataError(f"Unknown option type '{self.type}' for option '{self.id}'.")
        # Lists coming from JSON are frozen into tuples
        object.__setattr__(self, 'choices', tuple(self.choices))
        if self.is_choice:
            if not self.choices:
                raise InvalidDataError(f"Option '{self.id}' needs at least one choice.")
            values = [choice.value for choice in self.choices]
            if len(values) != len(set(values)):
                raise InvalidDataError(f"Option '{self.id}' has duplicated choice values.")

    @property
    def is_choice(self) -> bool:
        return self.type in (self.SELECT, self.RADIO)

    @property
    def is_numeric(self) -> bool:
        return self.type in (self.DIMENSION, self.QUANTITY)

    def find_choice(self, value) -> Optional[OptionChoice]:
        """Returns the choice with the given value, or None."""
        return next((choice for choice in self.choices if choice.value == value), None)


@dataclass(frozen=True)
class QuantityTier:
    """Replaces the base price when the configured quantity falls in [min_qty, max_qty]."""
    min_qty: int
    max_qty: int
    price: Decimal

    def matches(self, quantity: int) -> bool:
        return self.min_qty <= quantity <= self.max_qty


@dataclass(frozen=True)
class PricingRule:
    """Per-product fee or floor applied on top of the option formula."""
    SETUP_FEE = 'setup_fee'
    RUSH_FEE = 'rush_fee'
    MINIMUM_CHARGE = 'minimum_charge'
    TYPES = (SETUP_FEE, RUSH_FEE, MINIMUM_CHARGE)

    rule_type: str
    value: Decimal
    description: str = ''


@dataclass
class Product:
    """Catalog entry as seen by the configurator (read-only)."""
    name: str
    slug: str
    base_price: Decimal
    category: str = ''
    category_slug: str = ''
    description: str = ''
    short_description: str = ''
    images: List[str] = field(default_factory=list)
    options: List[ProductOption] = field(default_factory=list)
    features: List[str] = field(default_factory=list)
    turnaround: str = ''
    min_quantity: int = 1
    pricing_strategy: str = 'auto'
    quantity_tiers: List[QuantityTier] = field(default_factory=list)
    pricing_rules: List[PricingRule] = field(default_factory=list)
    is_active: bool = True
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def get_option(self, option_id: str) -> Optional[ProductOption]:
        return next((option for option in self.options if option.id == option_id), None)

    @property
    def quantity_option(self) -> Optional[ProductOption]:
        """The option that holds the ordered quantity, if the product has one."""
        option = self.get_option('quantity')
        if option is not None:
            return option
        return next((o for o in self.options if o.type == ProductOption.QUANTITY), None)

    @property
    def has_area_dimensions(self) -> bool:
        """True when the product has both a width and a height dimension option."""
        dimension_ids = {o.id for o in self.options if o.type == ProductOption.DIMENSION}
        return {'width', 'height'} <= dimension_ids

    def get_rule(self, rule_type: str) -> Optional[PricingRule]:
        return next((rule for rule in self.pricing_rules if rule.rule_type == rule_type), None)


# ====================================================================
# ORDERS
# ====================================================================

@dataclass
class ShippingAddress:
    """Delivery address, copied into the order at checkout."""
    name: str
    street: str
    city: str
    state: str
    zip: str = ''
    country: str = 'Nigeria'


@dataclass
class OrderItem:
    """Snapshot of a cart line at purchase time (immutable)."""
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    configuration: Configuration = field(default_factory=dict)
    product_id: Optional[str] = None
    product_slug: str = ''
    id: Optional[int] = None


@dataclass
class OrderStatusChange:
    """One entry of an order's status history."""
    status: str
    note: str = ''
    created_by_id: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class OrderNote:
    note: str
    created_by_id: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.now)
    id: Optional[int] = None


@dataclass
class ArtworkFile:
    """Print-ready artwork a customer attached to one order line."""
    order_item_id: int
    file_name: str
    file_size: int
    content_type: str
    url: str = ''
    uploaded_by_id: Optional[int] = None
    uploaded_at: datetime = field(default_factory=datetime.now)
    id: Optional[int] = None


@dataclass
class Order:
    """Customer order."""
    # Statuses, in lifecycle order
    PENDING = 'pending'
    AWAITING_PAYMENT = 'awaiting_payment'
    PAID = 'paid'
    PROCESSING = 'processing'
    PRINTING = 'printing'
    READY = 'ready'
    SHIPPED = 'shipped'
    DELIVERED = 'delivered'
    CANCELLED = 'cancelled'
    STATUSES = (
        PENDING, AWAITING_PAYMENT, PAID, PROCESSING, PRINTING,
        READY, SHIPPED, DELIVERED, CANCELLED,
    )

    user: User
    items: List[OrderItem]
    status: str
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal
    shipping_address: ShippingAddress
    order_number: str = ''
    payment_reference: Optional[str] = None
    status_history: List[OrderStatusChange] = field(default_factory=list)
    id: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: Optional[datetime] = None


@dataclass
class PaymentTransaction:
    """Record of a conversation with the payment gateway."""
    reference: str
    status: str             # 'success', 'failed', 'abandoned', 'pending'
    amount: Decimal
    authorization_url: Optional[str] = None
    access_code: Optional[str] = None
    channel: Optional[str] = None
    paid_at: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)
