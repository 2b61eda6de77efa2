# quikprint/infrastructure/email_service.py

import logging
from typing import Optional

from django.core.mail import send_mail

from quikprint.core.entities import Order
from quikprint.core.money import format_naira
from quikprint.core.ports import IEmailService

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    Order.PROCESSING: "We are preparing your files for print.",
    Order.PRINTING: "Your order is on the press.",
    Order.READY: "Your order is printed and ready.",
    Order.SHIPPED: "Your order is on its way.",
    Order.DELIVERED: "Your order has been delivered. Thank you!",
    Order.CANCELLED: "Your order has been cancelled. Contact us if this is unexpected.",
}


class DjangoEmailService(IEmailService):
    """Plain-text transactional e-mails through Django's mail backend."""

    def __init__(self, from_email: Optional[str] = None):
        self.from_email = from_email

    def _send(self, order: Order, subject: str, body: str):
        if not order.user or not order.user.email:
            logger.warning("Order %s has no customer e-mail; skipping '%s'.", order.order_number, subject)
            return 0
        return send_mail(subject, body, self.from_email, [order.user.email], fail_silently=False)

    def send_order_confirmation(self, order: Order):
        lines = [f"Hello {order.user.name or order.user.email},", "", f"We received order {order.order_number}:", ""]
        for item in order.items:
            lines.append(f"  {item.quantity} x {item.product_name}  {format_naira(item.total_price)}")
        lines += [
            "",
            f"Subtotal: {format_naira(order.subtotal)}",
            f"Shipping: {format_naira(order.shipping)}",
            f"VAT: {format_naira(order.tax)}",
            f"Total: {format_naira(order.total)}",
            "",
            "Complete the payment to send your order to print.",
        ]
        return self._send(order, f"Order {order.order_number} received | QuikPrint", "\n".join(lines))

    def send_payment_approved(self, order: Order):
        body = (
            f"Payment of {format_naira(order.total)} for order {order.order_number} was confirmed.\n"
            "Your order is now queued for production."
        )
        return self._send(order, f"Payment confirmed for {order.order_number} | QuikPrint", body)

    def send_status_change(self, order: Order, new_status: str):
        label = new_status.replace('_', ' ')
        body = f"Order {order.order_number} is now {label}.\n{STATUS_MESSAGES.get(new_status, '')}".rstrip()
        return self._send(order, f"Order {order.order_number}: {label} | QuikPrint", body)
