"""
Use cases (business logic) of the storefront.

This layer depends only on the Core entities and ports, which keeps the
business rules isolated from Django.
"""
import json
import os
import logging
import uuid
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional, Dict, Any

from quikprint.core.cart import Cart, CartItem
from quikprint.core.configurator import ProductConfigurator
from quikprint.core.entities import (
    Product, Category, Order, OrderItem, OrderNote, OrderStatusChange, ShippingAddress, User,
    PaymentTransaction, Configuration, ArtworkFile,
)
from quikprint.core.exceptions import (
    ProductNotFoundError,
    OrderItemNotFoundError,
    ArtworkNotFoundError,
    CategoryNotFoundError,
    CartItemNotFoundError,
    CartEmptyError,
    InvalidDataError,
    InvalidStatusError,
    OrderAccessDeniedError,
    OrderNotFoundError,
    PaymentFailedError,
)
from quikprint.core.money import ZERO, round_money
from quikprint.core.ports import (
    IProductRepository,
    ICategoryRepository,
    IOrderRepository,
    IUserRepository,
    IPaymentGateway,
    IEmailService,
    IArtworkRepository,
)
from quikprint.core.pricing import PriceBreakdown, PricingEngine, default_engine
from quikprint.core.totals import OrderTotals, TotalsPolicy

logger = logging.getLogger(__name__)


# ====================================================================
# 1. CATALOG USE CASES
# ====================================================================

class CatalogUseCase:
    """Lists categories and products and resolves product pages."""
    def __init__(self, product_repo: IProductRepository, category_repo: ICategoryRepository):
        self.product_repo = product_repo
        self.category_repo = category_repo

    def list_categories(self) -> List[Category]:
        return self.category_repo.list_all()

    def get_category(self, slug: str) -> Category:
        category = self.category_repo.get_by_slug(slug)
        if not category:
            raise CategoryNotFoundError(f"Category '{slug}' not found.")
        return category

    def list_products(self, search: Optional[str] = None, category_slug: Optional[str] = None) -> List[Product]:
        """Active products, filtered by free-text search and/or category."""
        return self.product_repo.search(search=search or None, category_slug=category_slug or None)

    def get_product(self, slug: str) -> Product:
        product = self.product_repo.get_by_slug(slug)
        if not product or not product.is_active:
            raise ProductNotFoundError(f"Product '{slug}' not found.")
        return product


class CalculatePriceUseCase:
    """Server-side price quote for a product configuration."""
    def __init__(self, product_repo: IProductRepository, engine: Optional[PricingEngine] = None):
        self.product_repo = product_repo
        self.engine = engine or default_engine

    def execute(self, product_slug: str, configuration: Configuration, quantity: Optional[int] = None) -> PriceBreakdown:
        product = self.product_repo.get_by_slug(product_slug)
        if not product or not product.is_active:
            raise ProductNotFoundError(f"Product '{product_slug}' not found.")

        configuration = dict(configuration or {})
        quantity_option = product.quantity_option
        if quantity and quantity_option is not None:
            configuration[quantity_option.id] = quantity_value(quantity_option, quantity)
        return self.engine.quote(product, configuration)


def quantity_value(option, quantity: int):
    # Quantity is often a select ("100", "250", ...) whose choices are strings
    return str(quantity) if option.is_choice else quantity


# ====================================================================
# 2. CART USE CASES
# ====================================================================

@dataclass
class CartSummary:
    items: List[CartItem]
    item_count: int
    subtotal: Decimal
    totals: OrderTotals


class ManageCartUseCase:
    """
    Cart operations on behalf of the API. Prices are always computed here,
    never taken from the client.
    """
    def __init__(self, product_repo: IProductRepository, engine: Optional[PricingEngine] = None,
                 totals_policy: Optional[TotalsPolicy] = None):
        self.product_repo = product_repo
        self.engine = engine or default_engine
        self.totals_policy = totals_policy or TotalsPolicy()

    def add_product(self, cart: Cart, product_slug: str, configuration: Optional[Configuration] = None,
                    quantity: Optional[int] = None) -> CartItem:
        """
        Validates the configuration, prices it and appends a new cart line.

        A requested quantity goes through the product's quantity option, so it
        is priced with the matching tier. Products without one are quoted per
        piece and the line costs the quote times the pieces.
        """
        product = self.product_repo.get_by_slug(product_slug)
        if not product or not product.is_active:
            raise ProductNotFoundError(f"Product '{product_slug}' not found.")

        configurator = ProductConfigurator(product, configuration=configuration or {}, engine=self.engine)
        quantity_option = product.quantity_option
        if quantity and quantity_option is not None:
            configurator.select(quantity_option.id, quantity_value(quantity_option, quantity))

        if quantity and quantity_option is None:
            line_quantity = int(quantity)
            line_price = configurator.price * line_quantity
        else:
            line_quantity = configurator.quantity
            line_price = configurator.price
        item = cart.add_item(product, line_quantity, configurator.configuration, line_price)
        logger.info("Added %s to cart as line %s (%s).", product.slug, item.id, item.total_price)
        return item

    def remove_item(self, cart: Cart, item_id: str) -> Cart:
        if cart.get_item(item_id) is None:
            raise CartItemNotFoundError(f"Cart line '{item_id}' not found.")
        cart.remove_item(item_id)
        return cart

    def update_quantity(self, cart: Cart, item_id: str, quantity: int) -> Optional[CartItem]:
        if cart.get_item(item_id) is None:
            raise CartItemNotFoundError(f"Cart line '{item_id}' not found.")
        if quantity is None:
            raise InvalidDataError("A quantity is required.")
        return cart.update_quantity(item_id, quantity)

    def clear(self, cart: Cart) -> Cart:
        cart.clear()
        return cart

    def summary(self, cart: Cart) -> CartSummary:
        subtotal = cart.subtotal
        return CartSummary(
            items=list(cart.items),
            item_count=cart.item_count,
            subtotal=subtotal,
            totals=self.totals_policy.calculate(subtotal),
        )


# ====================================================================
# 3. ORDER AND CHECKOUT USE CASES
# ====================================================================

class CreateOrderUseCase:
    """
    Checkout: snapshots the cart into an order, computes totals, persists it,
    empties the cart and notifies the customer.
    """
    def __init__(self, order_repo: IOrderRepository, email_service: IEmailService,
                 totals_policy: Optional[TotalsPolicy] = None):
        self.order_repo = order_repo
        self.email_service = email_service
        self.totals_policy = totals_policy or TotalsPolicy()

    def execute(self, cart: Cart, user: User, shipping_address: ShippingAddress) -> Order:
        if cart.is_empty():
            raise CartEmptyError("Cannot check out with an empty cart.")

        items = [
            OrderItem(
                product_id=item.product.id,
                product_slug=item.product.slug,
                product_name=item.product.name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=item.total_price,
                configuration=dict(item.configuration),
            )
            for item in cart.items
        ]
        totals = self.totals_policy.calculate(cart.subtotal)

        order = Order(
            user=user,
            items=items,
            status=Order.AWAITING_PAYMENT,
            subtotal=totals.subtotal,
            shipping=totals.shipping,
            tax=totals.tax,
            total=totals.total,
            shipping_address=shipping_address,
            status_history=[OrderStatusChange(status=Order.AWAITING_PAYMENT, note='Order placed', created_by_id=user.id)],
        )
        saved = self.order_repo.create(order)
        cart.clear()
        logger.info("Order %s placed by user %s (total %s).", saved.order_number, user.id, saved.total)

        try:
            self.email_service.send_order_confirmation(saved)
        except Exception:
            logger.exception("Could not send the confirmation e-mail for order %s.", saved.order_number)
        return saved


class CustomerOrdersUseCase:
    """Order history of the signed-in customer."""
    def __init__(self, order_repo: IOrderRepository):
        self.order_repo = order_repo

    def list_orders(self, user_id) -> List[Order]:
        return self.order_repo.list_by_user(user_id)

    def get_order(self, user_id, order_id) -> Order:
        order = self.order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFoundError(f"Order {order_id} not found.")
        if order.user.id != user_id:
            raise OrderAccessDeniedError()
        return order


# ====================================================================
# 4. ADMIN USE CASES
# ====================================================================

def _normalize_status(status: str) -> str:
    normalized = (status or '').strip().lower()
    if normalized not in Order.STATUSES:
        raise InvalidStatusError(f"'{status}' is not a valid order status.")
    return normalized


class AdminOrdersUseCase:
    """Order management for the back-office."""

    def __init__(self, order_repo: IOrderRepository, email_service: IEmailService):
        self.order_repo = order_repo
        self.email_service = email_service

    def list_all(self, status: Optional[str] = None) -> List[Order]:
        """Every order, optionally filtered by status."""
        if status:
            status = _normalize_status(status)
        return self.order_repo.list_all(status)

    def get_order(self, order_id) -> Order:
        order = self.order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFoundError(f"Order {order_id} not found.")
        return order

    def update_status(self, order_id, new_status: str, note: str = '', admin_id=None) -> Order:
        """Moves an order to a new status, records it in the history and tells the customer."""
        new_status = _normalize_status(new_status)
        order = self.get_order(order_id)
        previous = order.status

        updated = self.order_repo.update_status(order.id, new_status, note=note or '', changed_by_id=admin_id)
        logger.info("Order %s moved from %s to %s by %s.", updated.order_number, previous, new_status, admin_id)

        if previous != new_status:
            try:
                if new_status == Order.PAID:
                    self.email_service.send_payment_approved(updated)
                else:
                    self.email_service.send_status_change(updated, new_status)
            except Exception:
                logger.exception("Could not notify the customer of order %s.", updated.order_number)
        return updated

    def add_note(self, order_id, note: str, admin_id=None) -> OrderNote:
        if not note or not note.strip():
            raise InvalidDataError("The note cannot be empty.")
        order = self.get_order(order_id)
        return self.order_repo.add_note(order.id, note.strip(), created_by_id=admin_id)

    def list_notes(self, order_id) -> List[OrderNote]:
        order = self.get_order(order_id)
        return self.order_repo.list_notes(order.id)


class AdminCustomersUseCase:
    """Customer listing for the back-office."""
    def __init__(self, user_repo: IUserRepository):
        self.user_repo = user_repo

    def list_customers(self) -> List[Dict[str, Any]]:
        return self.user_repo.list_customers()


class ReportsUseCase:
    """Dashboard figures and sales reports."""

    # Statuses whose totals count as revenue
    REVENUE_STATUSES = (
        Order.PAID, Order.PROCESSING, Order.PRINTING, Order.READY, Order.SHIPPED, Order.DELIVERED,
    )
    OPEN_STATUSES = (Order.PENDING, Order.AWAITING_PAYMENT, Order.PAID, Order.PROCESSING, Order.PRINTING)

    def __init__(self, order_repo: IOrderRepository, product_repo: IProductRepository, user_repo: IUserRepository):
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.user_repo = user_repo

    def orders_by_status(self) -> Dict[str, int]:
        counts = self.order_repo.count_by_status()
        return {status: counts.get(status, 0) for status in Order.STATUSES}

    def dashboard(self, recent: int = 5) -> Dict[str, Any]:
        by_status = self.orders_by_status()
        return {
            'total_orders': sum(by_status.values()),
            'open_orders': sum(by_status[status] for status in self.OPEN_STATUSES),
            'total_revenue': round_money(self.order_repo.revenue(self.REVENUE_STATUSES) or ZERO),
            'total_customers': self.user_repo.count_customers(),
            'total_products': self.product_repo.count(),
            'recent_orders': self.order_repo.list_all()[:recent],
        }

    def daily_sales(self, days: int = 7, today: Optional[date] = None) -> List[Dict[str, Any]]:
        """One row per day (oldest first), days without sales included."""
        if days < 1:
            raise InvalidDataError("The report needs at least one day.")
        today = today or date.today()
        since = today - timedelta(days=days - 1)
        rows = {row['date']: row for row in self.order_repo.daily_sales(since)}
        report = []
        for offset in range(days):
            day = since + timedelta(days=offset)
            row = rows.get(day, {})
            report.append({
                'date': day,
                'orders': row.get('orders', 0),
                'revenue': round_money(row.get('revenue') or ZERO),
            })
        return report

    def weekly_sales(self, weeks: int = 12, today: Optional[date] = None) -> List[Dict[str, Any]]:
        """
        One row per Monday-to-Sunday week (oldest first), the current week
        included and weeks without sales reported as zero.
        """
        if weeks < 1:
            raise InvalidDataError("The report needs at least one week.")
        today = today or date.today()
        since = today - timedelta(days=today.weekday(), weeks=weeks - 1)
        report = [
            {
                'week_start': since + timedelta(weeks=index),
                'week_end': since + timedelta(weeks=index, days=6),
                'orders': 0,
                'revenue': ZERO,
            }
            for index in range(weeks)
        ]
        for row in self.order_repo.daily_sales(since):
            index = (row['date'] - since).days // 7
            if 0 <= index < weeks:
                report[index]['orders'] += row['orders']
                report[index]['revenue'] += row['revenue'] or ZERO

        for week in report:
            week['revenue'] = round_money(week['revenue'])
            average = week['revenue'] / week['orders'] if week['orders'] else ZERO
            week['average_order_value'] = round_money(average)
        return report


# ====================================================================
# 5. PAYMENTS
# ====================================================================

class PaymentUseCase:
    """Card/bank payments of orders through the payment gateway."""

    PAYABLE_STATUSES = (Order.PENDING, Order.AWAITING_PAYMENT)

    def __init__(self, order_repo: IOrderRepository, payment_gateway: IPaymentGateway, email_service: IEmailService):
        self.order_repo = order_repo
        self.payment_gateway = payment_gateway
        self.email_service = email_service

    def initialize(self, user: User, order_id) -> PaymentTransaction:
        """Opens a gateway transaction for one of the customer's unpaid orders."""
        order = CustomerOrdersUseCase(self.order_repo).get_order(user.id, order_id)
        if order.status not in self.PAYABLE_STATUSES:
            raise InvalidStatusError(f"Order {order.order_number} is not awaiting payment.")

        reference = f"{order.order_number}-{uuid.uuid4().hex[:8].upper()}"
        transaction = self.payment_gateway.initialize(order, user.email, reference)
        self.order_repo.set_payment_reference(order.id, transaction.reference)
        return transaction

    def verify(self, reference: str) -> Order:
        """Confirms a transaction with the gateway and marks its order as paid."""
        order = self.order_repo.get_by_payment_reference(reference)
        if not order:
            raise OrderNotFoundError(f"No order for payment reference {reference}.")
        if order.status not in self.PAYABLE_STATUSES:
            # Already settled (callback and webhook both arrive)
            return order

        transaction = self.payment_gateway.verify(reference)
        if transaction.status != 'success':
            raise PaymentFailedError(f"Payment {reference} was not successful ({transaction.status}).")
        if round_money(transaction.amount) < round_money(order.total):
            logger.warning("Payment %s covers %s of %s for order %s.",
                           reference, transaction.amount, order.total, order.order_number)
            raise PaymentFailedError(f"Payment {reference} does not cover the order total.")

        paid = self.order_repo.update_status(order.id, Order.PAID, note=f"Payment {reference} confirmed")
        try:
            self.email_service.send_payment_approved(paid)
        except Exception:
            logger.exception("Could not send the payment e-mail for order %s.", paid.order_number)
        return paid

    def handle_webhook(self, payload: bytes, signature: str) -> Optional[Order]:
        """
        Processes a gateway event. Only ``charge.success`` is acted upon, and
        always re-verified with the gateway before the order changes.
        """
        if not self.payment_gateway.is_valid_signature(payload, signature or ''):
            logger.warning("Rejected payment webhook with an invalid signature.")
            raise PaymentFailedError("Invalid webhook signature.")
        try:
            event = json.loads(payload.decode('utf-8'))
        except (ValueError, UnicodeDecodeError):
            raise InvalidDataError("Webhook payload is not valid JSON.")
        if not isinstance(event, dict):
            raise InvalidDataError("Webhook payload must be a JSON object.")

        if event.get('event') != 'charge.success':
            return None
        data = event.get('data') or {}
        if not isinstance(data, dict):
            raise InvalidDataError("Webhook event data must be a JSON object.")
        reference = data.get('reference')
        if not reference:
            raise InvalidDataError("Webhook event has no reference.")
        return self.verify(reference)


# ====================================================================
# 6. ARTWORK
# ====================================================================

class ArtworkUseCase:
    """
    Print-ready files attached to order lines.

    Customers manage the files of their own orders; staff can reach every
    order. Files are checked for size, extension and declared MIME type
    before they reach storage.
    """

    ALLOWED_EXTENSIONS = ('.pdf', '.png', '.jpg', '.jpeg')
    ALLOWED_CONTENT_TYPES = ('application/pdf', 'image/png', 'image/jpeg', 'image/jpg')
    DEFAULT_MAX_SIZE = 50 * 1024 * 1024

    def __init__(self, artwork_repo: IArtworkRepository, max_size: Optional[int] = None):
        self.artwork_repo = artwork_repo
        self.max_size = max_size or self.DEFAULT_MAX_SIZE

    def _check_access(self, user: User, order_item_id) -> None:
        owner_id = self.artwork_repo.get_item_owner_id(order_item_id)
        if owner_id is None:
            raise OrderItemNotFoundError(f"Order line {order_item_id} not found.")
        if not user.is_staff and owner_id != user.id:
            raise OrderAccessDeniedError()

    def validate(self, file_name: str, content_type: str, file_size: int) -> None:
        if not file_size:
            raise InvalidDataError("The file is empty.")
        if file_size > self.max_size:
            raise InvalidDataError(f"File too large. Maximum size is {self.max_size // (1024 * 1024)} MB.")
        extension = os.path.splitext(file_name or '')[1].lower()
        if extension not in self.ALLOWED_EXTENSIONS:
            raise InvalidDataError("Invalid file type. Allowed: PDF, PNG, JPG, JPEG.")
        if (content_type or '').lower() not in self.ALLOWED_CONTENT_TYPES:
            raise InvalidDataError(f"Invalid content type '{content_type}'.")

    def upload(self, user: User, order_item_id, content, file_name: str,
               content_type: str, file_size: int) -> ArtworkFile:
        self._check_access(user, order_item_id)
        self.validate(file_name, content_type, file_size)
        artwork = self.artwork_repo.create(
            order_item_id, content, file_name, content_type.lower(), file_size, uploaded_by_id=user.id,
        )
        logger.info("User %s uploaded %s (%s bytes) for order line %s.",
                    user.id, file_name, file_size, order_item_id)
        return artwork

    def list_files(self, user: User, order_item_id) -> List[ArtworkFile]:
        self._check_access(user, order_item_id)
        return self.artwork_repo.list_by_item(order_item_id)

    def get_file(self, user: User, file_id) -> ArtworkFile:
        artwork = self.artwork_repo.get_by_id(file_id)
        if artwork is None:
            raise ArtworkNotFoundError(f"File {file_id} not found.")
        self._check_access(user, artwork.order_item_id)
        return artwork

    def delete_file(self, user: User, file_id) -> None:
        artwork = self.get_file(user, file_id)
        self.artwork_repo.delete(artwork.id)
        logger.info("User %s deleted file %s of order line %s.", user.id, artwork.id, artwork.order_item_id)
