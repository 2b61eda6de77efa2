# quikprint/presentation/cart_manager.py
# Keeps the shopping cart and the in-flight configurator state in the Django session.

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict

from django.core.exceptions import ImproperlyConfigured
from django.http import HttpRequest

from quikprint.core.cart import Cart, CartItem
from quikprint.core.configurator import ProductConfigurator
from quikprint.core.entities import Product, QuantityTier, PricingRule
from quikprint.infrastructure.mappers import option_to_dict, parse_options


def _require_session(request: HttpRequest):
    session = getattr(request, 'session', None)
    if session is None:
        raise ImproperlyConfigured(
            "The cart needs request.session; enable SessionMiddleware."
        )
    return session


# ====================================================================
# Product snapshot (JSON-safe)
# ====================================================================

def product_to_dict(product: Product) -> Dict[str, Any]:
    return {
        'id': product.id,
        'name': product.name,
        'slug': product.slug,
        'base_price': str(product.base_price),
        'category': product.category,
        'category_slug': product.category_slug,
        'short_description': product.short_description,
        'images': list(product.images),
        'options': [option_to_dict(option) for option in product.options],
        'turnaround': product.turnaround,
        'min_quantity': product.min_quantity,
        'pricing_strategy': product.pricing_strategy,
        'quantity_tiers': [[tier.min_qty, tier.max_qty, str(tier.price)] for tier in product.quantity_tiers],
        'pricing_rules': [[rule.rule_type, str(rule.value), rule.description] for rule in product.pricing_rules],
    }


def product_from_dict(data: Dict[str, Any]) -> Product:
    return Product(
        id=data['id'],
        name=data['name'],
        slug=data['slug'],
        base_price=Decimal(data['base_price']),
        category=data.get('category', ''),
        category_slug=data.get('category_slug', ''),
        short_description=data.get('short_description', ''),
        images=list(data.get('images', [])),
        options=parse_options(data.get('options', [])),
        turnaround=data.get('turnaround', ''),
        min_quantity=data.get('min_quantity', 1),
        pricing_strategy=data.get('pricing_strategy', 'auto'),
        quantity_tiers=[
            QuantityTier(min_qty=low, max_qty=high, price=Decimal(price))
            for low, high, price in data.get('quantity_tiers', [])
        ],
        pricing_rules=[
            PricingRule(rule_type=rule_type, value=Decimal(value), description=description)
            for rule_type, value, description in data.get('pricing_rules', [])
        ],
    )


def _json_value(value):
    if isinstance(value, Decimal):
        return str(value)
    return value


# ====================================================================
# Cart
# ====================================================================

class CartManager:
    """
    Loads the session's Cart, hands it to the use cases and writes it back.

    Every line stores its own product snapshot, so the cart never re-reads the
    catalog: later catalog edits do not change what is already in the cart.
    """

    SESSION_KEY = 'quikprint_cart'

    def __init__(self, request: HttpRequest):
        self.session = _require_session(request)
        self.cart: Cart = self._load()

    # --- Persistence ---

    def _load(self) -> Cart:
        raw_items = self.session.get(self.SESSION_KEY) or []
        items = []
        for raw in raw_items:
            items.append(CartItem(
                id=raw['id'],
                product=product_from_dict(raw['product']),
                quantity=raw['quantity'],
                configuration=dict(raw.get('configuration') or {}),
                configured_price=Decimal(raw['configured_price']),
                configured_quantity=raw['configured_quantity'],
                created_at=datetime.fromisoformat(raw['created_at']),
            ))
        return Cart(items=items)

    def save(self):
        self.session[self.SESSION_KEY] = [
            {
                'id': item.id,
                'product': product_to_dict(item.product),
                'quantity': item.quantity,
                'configuration': {key: _json_value(value) for key, value in item.configuration.items()},
                'configured_price': str(item.configured_price),
                'configured_quantity': item.configured_quantity,
                'created_at': item.created_at.isoformat(),
            }
            for item in self.cart.items
        ]
        self.session.modified = True

    def clear(self):
        """Empties the cart (checkout, logout)."""
        self.cart.clear()
        self.session.pop(self.SESSION_KEY, None)
        self.session.modified = True

    # --- Queries ---

    def get_cart(self) -> Cart:
        return self.cart

    def get_context(self) -> Dict[str, Any]:
        return {
            'cart': self.cart,
            'cart_item_count': self.cart.item_count,
            'cart_subtotal': self.cart.subtotal,
        }


# ====================================================================
# Configurator
# ====================================================================

class ConfiguratorStore:
    """In-flight configurator state per product, kept in the session."""

    SESSION_KEY = 'quikprint_configurator'

    def __init__(self, request: HttpRequest):
        self.session = _require_session(request)

    def load(self, product: Product) -> ProductConfigurator:
        state = (self.session.get(self.SESSION_KEY) or {}).get(product.slug)
        return ProductConfigurator.from_state(product, state)

    def start(self, product: Product) -> ProductConfigurator:
        """Fresh configurator, discarding any earlier state for the product."""
        configurator = ProductConfigurator(product)
        self.save(configurator)
        return configurator

    def save(self, configurator: ProductConfigurator):
        states = dict(self.session.get(self.SESSION_KEY) or {})
        states[configurator.product.slug] = configurator.to_state()
        self.session[self.SESSION_KEY] = states
        self.session.modified = True

    def discard(self, product: Product):
        states = dict(self.session.get(self.SESSION_KEY) or {})
        if states.pop(product.slug, None) is not None:
            self.session[self.SESSION_KEY] = states
            self.session.modified = True
