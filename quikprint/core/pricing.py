"""
Pricing engine for configurable print products.

A product is priced by one explicit strategy, evaluated as a single formula
over the whole configuration (option order never matters):

    flat               base
    additive           base + option modifiers
    area               base x width x height
    area_with_options  base x width x height + option modifiers

``base`` is the matching quantity tier price, or the product base price.
Setup and rush fees are added on top. ``auto`` resolves to ``area`` for
products with paired width/height dimensions and to ``additive`` otherwise.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Optional

from quikprint.core.entities import Configuration, Product, PricingRule
from quikprint.core.money import ZERO, parse_decimal, round_money

logger = logging.getLogger(__name__)

STRATEGY_AUTO = 'auto'
STRATEGY_FLAT = 'flat'
STRATEGY_ADDITIVE = 'additive'
STRATEGY_AREA = 'area'
STRATEGY_AREA_WITH_OPTIONS = 'area_with_options'

STRATEGIES = (
    STRATEGY_AUTO,
    STRATEGY_FLAT,
    STRATEGY_ADDITIVE,
    STRATEGY_AREA,
    STRATEGY_AREA_WITH_OPTIONS,
)


@dataclass
class PriceBreakdown:
    """Every component of a quote, as returned by the pricing API."""
    strategy: str
    base_price: Decimal
    quantity: int
    option_modifiers: Dict[str, Decimal] = field(default_factory=dict)
    dimensional_cost: Optional[Decimal] = None
    quantity_price: Optional[Decimal] = None
    setup_fee: Decimal = ZERO
    rush_fee: Decimal = ZERO
    subtotal: Decimal = ZERO
    total: Decimal = ZERO
    clamped: bool = False

    @property
    def unit_price(self) -> Decimal:
        return unit_price(self.total, self.quantity)


def configured_quantity(product: Product, configuration: Configuration) -> int:
    """
    Quantity ordered for a configuration: the quantity option value when the
    product has one (falling back to ``min_quantity``), otherwise 1.
    """
    option = product.quantity_option
    if option is None:
        return 1
    value = parse_decimal(configuration.get(option.id))
    if value is None or value < 1:
        return max(product.min_quantity, 1)
    return int(value)


def unit_price(total: Decimal, quantity: int) -> Decimal:
    """Display price per unit; the engine applies no per-unit discounts."""
    if quantity <= 0:
        return round_money(total)
    return round_money(Decimal(total) / quantity)


class PricingEngine:
    """Computes prices from a product definition and a configuration."""

    def resolve_strategy(self, product: Product) -> str:
        strategy = product.pricing_strategy or STRATEGY_AUTO
        if strategy not in STRATEGIES:
            logger.warning("Unknown pricing strategy %r on product %s, using auto.", strategy, product.slug)
            strategy = STRATEGY_AUTO
        if strategy == STRATEGY_AUTO:
            return STRATEGY_AREA if product.has_area_dimensions else STRATEGY_ADDITIVE
        return strategy

    def quote(self, product: Product, configuration: Configuration) -> PriceBreakdown:
        strategy = self.resolve_strategy(product)
        quantity = configured_quantity(product, configuration)

        tier = next((t for t in product.quantity_tiers if t.matches(quantity)), None)
        base = Decimal(tier.price) if tier else Decimal(product.base_price)

        breakdown = PriceBreakdown(
            strategy=strategy,
            base_price=Decimal(product.base_price),
            quantity=quantity,
            quantity_price=Decimal(tier.price) if tier else None,
            option_modifiers=self._option_modifiers(product, configuration),
        )
        modifiers = sum(breakdown.option_modifiers.values(), ZERO)

        if strategy in (STRATEGY_AREA, STRATEGY_AREA_WITH_OPTIONS):
            breakdown.dimensional_cost = self._area_cost(product, configuration, base)

        if strategy == STRATEGY_FLAT:
            subtotal = base
        elif strategy == STRATEGY_ADDITIVE:
            subtotal = base + modifiers
        elif strategy == STRATEGY_AREA:
            subtotal = breakdown.dimensional_cost if breakdown.dimensional_cost is not None else base
        else:
            area = breakdown.dimensional_cost if breakdown.dimensional_cost is not None else base
            subtotal = area + modifiers

        setup_fee = product.get_rule(PricingRule.SETUP_FEE)
        if setup_fee:
            breakdown.setup_fee = Decimal(setup_fee.value)
        rush_fee = product.get_rule(PricingRule.RUSH_FEE)
        if rush_fee and _wants_rush(configuration.get('rush')):
            breakdown.rush_fee = Decimal(rush_fee.value)

        total = subtotal + breakdown.setup_fee + breakdown.rush_fee
        if total < 0:
            logger.warning(
                "Price for %s went negative (%s) with configuration %r; clamped to zero.",
                product.slug, total, configuration,
            )
            total = ZERO
            breakdown.clamped = True

        breakdown.subtotal = round_money(subtotal)
        breakdown.total = round_money(total)
        return breakdown

    def compute_price(self, product: Product, configuration: Configuration) -> Decimal:
        return self.quote(product, configuration).total

    # --- Formula components ---

    def _option_modifiers(self, product: Product, configuration: Configuration) -> Dict[str, Decimal]:
        """Modifier of the chosen value of each choice option; lookups that miss count as zero."""
        modifiers = {}
        for option in product.options:
            if not option.is_choice:
                continue
            choice = option.find_choice(configuration.get(option.id))
            if choice is None or choice.price_modifier is None:
                continue
            modifiers[option.id] = Decimal(choice.price_modifier)
        return modifiers

    def _area_cost(self, product: Product, configuration: Configuration, base: Decimal) -> Optional[Decimal]:
        width = parse_decimal(configuration.get('width'))
        height = parse_decimal(configuration.get('height'))
        if width is None or height is None or not (width > 0 and height > 0):
            return None
        cost = base * width * height
        minimum = product.get_rule(PricingRule.MINIMUM_CHARGE)
        if minimum and cost < Decimal(minimum.value):
            cost = Decimal(minimum.value)
        return cost


default_engine = PricingEngine()


def compute_price(product: Product, configuration: Configuration) -> Decimal:
    """Total price of a product under a configuration."""
    return default_engine.compute_price(product, configuration)


def _wants_rush(value) -> bool:
    # A rush option may be a checkbox (bool) or a yes/no choice
    if isinstance(value, str):
        return value.strip().lower() in ('yes', 'true', '1', 'on')
    return value is True
