import os
import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from quikprint.core.entities import Order as OrderEntity


class Order(models.Model):
    """
    A customer order. Totals and the shipping address are snapshots taken at
    checkout and are never recomputed.
    """
    STATUS_CHOICES = [
        (OrderEntity.PENDING, 'Pending'),
        (OrderEntity.AWAITING_PAYMENT, 'Awaiting payment'),
        (OrderEntity.PAID, 'Paid'),
        (OrderEntity.PROCESSING, 'Processing'),
        (OrderEntity.PRINTING, 'Printing'),
        (OrderEntity.READY, 'Ready'),
        (OrderEntity.SHIPPED, 'Shipped'),
        (OrderEntity.DELIVERED, 'Delivered'),
        (OrderEntity.CANCELLED, 'Cancelled'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='orders')
    order_number = models.CharField(max_length=32, unique=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=OrderEntity.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Amounts (NGN)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    shipping = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    # Payment
    payment_reference = models.CharField(max_length=100, unique=True, blank=True, null=True)

    # Shipping address snapshot
    shipping_name = models.CharField(max_length=255)
    shipping_street = models.CharField(max_length=255)
    shipping_city = models.CharField(max_length=100)
    shipping_state = models.CharField(max_length=100)
    shipping_zip = models.CharField(max_length=20, blank=True)
    shipping_country = models.CharField(max_length=100, default='Nigeria')

    class Meta:
        verbose_name = 'Order'
        verbose_name_plural = 'Orders'
        db_table = 'orders_order'
        ordering = ['-created_at']

    def __str__(self):
        return f"Order {self.order_number}"


class OrderItem(models.Model):
    """
    One line of an order. Keeps a snapshot of the product and of the chosen
    configuration at purchase time.
    """
    order = models.ForeignKey(Order, related_name='items', on_delete=models.CASCADE)
    product = models.ForeignKey('catalog.Product', on_delete=models.SET_NULL, null=True, blank=True,
                                related_name='order_items')

    product_name = models.CharField(max_length=255)
    product_slug = models.CharField(max_length=255, blank=True)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)
    configuration = models.JSONField(default=dict, blank=True)

    class Meta:
        verbose_name = 'Order item'
        verbose_name_plural = 'Order items'
        db_table = 'orders_order_item'

    def __str__(self):
        return f"{self.quantity}x {self.product_name} ({self.order.order_number})"


class OrderStatusHistory(models.Model):
    order = models.ForeignKey(Order, related_name='status_history', on_delete=models.CASCADE)
    status = models.CharField(max_length=20, choices=Order.STATUS_CHOICES)
    note = models.TextField(blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Status change'
        verbose_name_plural = 'Status history'
        db_table = 'orders_status_history'
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"{self.order.order_number}: {self.status}"


class OrderNote(models.Model):
    """Internal back-office note on an order."""
    order = models.ForeignKey(Order, related_name='notes', on_delete=models.CASCADE)
    note = models.TextField()
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='+')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Order note'
        verbose_name_plural = 'Order notes'
        db_table = 'orders_order_note'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"Note on {self.order.order_number}"


def artwork_upload_to(instance, filename):
    # Stored under a random name; the customer's file name is kept in file_name
    extension = os.path.splitext(filename)[1].lower()
    return timezone.now().strftime('artwork/%Y/%m/%d/') + f"{uuid.uuid4().hex}{extension}"


class OrderItemFile(models.Model):
    """Artwork uploaded by the customer for one order line."""
    order_item = models.ForeignKey(OrderItem, related_name='files', on_delete=models.CASCADE)
    file = models.FileField(upload_to=artwork_upload_to, max_length=255)
    file_name = models.CharField(max_length=255)
    file_size = models.PositiveBigIntegerField()
    content_type = models.CharField(max_length=100)
    uploaded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='+')
    uploaded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Artwork file'
        verbose_name_plural = 'Artwork files'
        db_table = 'orders_order_item_file'
        ordering = ['uploaded_at', 'id']

    def __str__(self):
        return f"{self.file_name} ({self.order_item})"
