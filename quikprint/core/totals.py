from dataclasses import dataclass
from decimal import Decimal

from quikprint.core.money import ZERO, round_money

FREE_SHIPPING_THRESHOLD = Decimal('50000')
FLAT_SHIPPING_FEE = Decimal('5000')
TAX_RATE = Decimal('0.075')  # VAT


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal
    amount_to_free_shipping: Decimal


def calculate_order_totals(
    subtotal,
    free_shipping_threshold=FREE_SHIPPING_THRESHOLD,
    flat_shipping_fee=FLAT_SHIPPING_FEE,
    tax_rate=TAX_RATE,
) -> OrderTotals:
    """
    Shipping is waived strictly above the threshold; tax is a flat rate on the
    subtotal. Pure function of the subtotal.
    """
    subtotal = round_money(subtotal)
    threshold = Decimal(free_shipping_threshold)
    shipping = ZERO if subtotal > threshold else round_money(flat_shipping_fee)
    tax = round_money(subtotal * Decimal(str(tax_rate)))
    return OrderTotals(
        subtotal=subtotal,
        shipping=round_money(shipping),
        tax=tax,
        total=round_money(subtotal + shipping + tax),
        amount_to_free_shipping=round_money(max(threshold - subtotal, ZERO)),
    )


@dataclass(frozen=True)
class TotalsPolicy:
    """Shipping and tax parameters, read from settings by the wiring layer."""
    free_shipping_threshold: Decimal = FREE_SHIPPING_THRESHOLD
    flat_shipping_fee: Decimal = FLAT_SHIPPING_FEE
    tax_rate: Decimal = TAX_RATE

    def calculate(self, subtotal) -> OrderTotals:
        return calculate_order_totals(
            subtotal,
            free_shipping_threshold=self.free_shipping_threshold,
            flat_shipping_fee=self.flat_shipping_fee,
            tax_rate=self.tax_rate,
        )
