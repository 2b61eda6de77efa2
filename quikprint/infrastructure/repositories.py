"""
Infrastructure layer: Django ORM repositories.

Translates the abstract operations of the Core ports into concrete ORM calls.
"""
import logging
import secrets
from datetime import date
from typing import Any, Dict, List, Optional

from django.apps import apps
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce, TruncDate
from django.utils import timezone

from quikprint.core.entities import ArtworkFile, Category, Order, OrderNote, Product, User
from quikprint.core.exceptions import InvalidDataError, OrderNotFoundError
from quikprint.core.ports import (
    IArtworkRepository,
    ICategoryRepository,
    IOrderRepository,
    IProductRepository,
    IUserRepository,
)

from .mappers import (
    ArtworkFileMapper,
    CategoryMapper,
    OrderItemMapper,
    OrderMapper,
    OrderNoteMapper,
    ProductMapper,
    UserMapper,
)

logger = logging.getLogger(__name__)


def get_model(app_label, model_name):
    """Looks the Django model up lazily."""
    return apps.get_model(app_label, model_name)


# ====================================================================
# 1. CATALOG
# ====================================================================

class ProductRepositoryDjango(IProductRepository):
    """Product lookups through the Django ORM."""

    @property
    def ProductModel(self):
        return get_model('catalog', 'Product')

    def _queryset(self):
        return self.ProductModel.objects.select_related('category').prefetch_related(
            'quantity_tiers', 'pricing_rules'
        )

    def get_by_slug(self, slug: str) -> Optional[Product]:
        try:
            return ProductMapper.to_entity(self._queryset().get(slug=slug))
        except self.ProductModel.DoesNotExist:
            return None

    def get_by_id(self, product_id) -> Optional[Product]:
        try:
            return ProductMapper.to_entity(self._queryset().get(pk=product_id))
        except (self.ProductModel.DoesNotExist, ValueError):
            return None

    def search(self, search: Optional[str] = None, category_slug: Optional[str] = None) -> List[Product]:
        qs = self._queryset().filter(is_active=True)
        if search:
            qs = qs.filter(
                Q(name__icontains=search)
                | Q(description__icontains=search)
                | Q(short_description__icontains=search)
            )
        if category_slug:
            qs = qs.filter(category__slug=category_slug)
        return [ProductMapper.to_entity(model) for model in qs]

    def count(self) -> int:
        return self.ProductModel.objects.filter(is_active=True).count()


class CategoryRepositoryDjango(ICategoryRepository):

    @property
    def CategoryModel(self):
        return get_model('catalog', 'Category')

    def _queryset(self):
        return self.CategoryModel.objects.filter(is_active=True).annotate(
            product_count=Count('products', filter=Q(products__is_active=True))
        )

    def list_all(self) -> List[Category]:
        return [CategoryMapper.to_entity(model) for model in self._queryset()]

    def get_by_slug(self, slug: str) -> Optional[Category]:
        try:
            return CategoryMapper.to_entity(self._queryset().get(slug=slug))
        except self.CategoryModel.DoesNotExist:
            return None


# ====================================================================
# 2. ORDERS
# ====================================================================

class OrderRepositoryDjango(IOrderRepository):
    """Order persistence and reporting through the Django ORM."""

    @property
    def OrderModel(self):
        return get_model('orders', 'Order')

    @property
    def OrderItemModel(self):
        return get_model('orders', 'OrderItem')

    @property
    def StatusHistoryModel(self):
        return get_model('orders', 'OrderStatusHistory')

    @property
    def OrderNoteModel(self):
        return get_model('orders', 'OrderNote')

    def _queryset(self):
        return self.OrderModel.objects.select_related('user').prefetch_related('items', 'status_history')

    def _get_model(self, order_id):
        try:
            return self.OrderModel.objects.get(pk=order_id)
        except (self.OrderModel.DoesNotExist, ValueError):
            raise OrderNotFoundError(f"Order {order_id} not found.")

    def _generate_order_number(self) -> str:
        # QP-YYYYMMDD-XXXXXX, retried on the (unlikely) collision
        today = timezone.localdate().strftime('%Y%m%d')
        while True:
            number = f"QP-{today}-{secrets.token_hex(3).upper()}"
            if not self.OrderModel.objects.filter(order_number=number).exists():
                return number

    @transaction.atomic
    def create(self, order: Order) -> Order:
        """Stores the order, its items and its status history in one transaction."""
        if not order.items:
            raise InvalidDataError("An order needs at least one item.")

        User = get_user_model()
        if not User.objects.filter(pk=order.user.id).exists():
            raise InvalidDataError(f"User {order.user.id} does not exist.")

        model = OrderMapper.to_model(order)
        model.order_number = order.order_number or self._generate_order_number()
        model.save()

        self.OrderItemModel.objects.bulk_create([
            OrderItemMapper.to_model(item, order_id=model.id) for item in order.items
        ])
        history = order.status_history or [None]
        self.StatusHistoryModel.objects.bulk_create([
            self.StatusHistoryModel(
                order=model,
                status=change.status if change else model.status,
                note=change.note if change else '',
                created_by_id=change.created_by_id if change else None,
            )
            for change in history
        ])
        return self.get_by_id(model.id)

    def get_by_id(self, order_id) -> Optional[Order]:
        try:
            return OrderMapper.to_entity(self._queryset().get(pk=order_id))
        except (self.OrderModel.DoesNotExist, ValueError):
            return None

    def get_by_payment_reference(self, reference: str) -> Optional[Order]:
        try:
            return OrderMapper.to_entity(self._queryset().get(payment_reference=reference))
        except self.OrderModel.DoesNotExist:
            return None

    def list_by_user(self, user_id) -> List[Order]:
        return [OrderMapper.to_entity(model) for model in self._queryset().filter(user_id=user_id)]

    def list_all(self, status: Optional[str] = None) -> List[Order]:
        qs = self._queryset()
        if status:
            qs = qs.filter(status=status)
        return [OrderMapper.to_entity(model) for model in qs]

    @transaction.atomic
    def update_status(self, order_id, status: str, note: str = '', changed_by_id=None) -> Order:
        model = self._get_model(order_id)
        model.status = status
        model.save(update_fields=['status', 'updated_at'])
        self.StatusHistoryModel.objects.create(
            order=model, status=status, note=note or '', created_by_id=changed_by_id
        )
        return self.get_by_id(model.id)

    def set_payment_reference(self, order_id, reference: str) -> Order:
        model = self._get_model(order_id)
        model.payment_reference = reference
        model.save(update_fields=['payment_reference', 'updated_at'])
        return self.get_by_id(model.id)

    def add_note(self, order_id, note: str, created_by_id=None) -> OrderNote:
        model = self._get_model(order_id)
        note_model = self.OrderNoteModel.objects.create(order=model, note=note, created_by_id=created_by_id)
        return OrderNoteMapper.to_entity(note_model)

    def list_notes(self, order_id) -> List[OrderNote]:
        return [
            OrderNoteMapper.to_entity(model)
            for model in self.OrderNoteModel.objects.filter(order_id=order_id)
        ]

    # --- Reporting ---

    def count_by_status(self) -> Dict[str, int]:
        rows = self.OrderModel.objects.values('status').annotate(count=Count('id'))
        return {row['status']: row['count'] for row in rows}

    def daily_sales(self, since: date) -> List[Dict[str, Any]]:
        rows = (
            self.OrderModel.objects
            .filter(created_at__date__gte=since)
            .exclude(status=Order.CANCELLED)
            .annotate(day=TruncDate('created_at'))
            .values('day')
            .annotate(orders=Count('id'), revenue=Sum('total'))
            .order_by('day')
        )
        return [{'date': row['day'], 'orders': row['orders'], 'revenue': row['revenue']} for row in rows]

    def revenue(self, statuses) -> Any:
        return self.OrderModel.objects.filter(status__in=list(statuses)).aggregate(
            total=Coalesce(Sum('total'), Value(0), output_field=DecimalField(max_digits=14, decimal_places=2))
        )['total']


# ====================================================================
# 3. USERS
# ====================================================================

class UserRepositoryDjango(IUserRepository):

    def _customers(self):
        return get_user_model().objects.filter(is_staff=False)

    def get_by_id(self, user_id) -> Optional[User]:
        UserModel = get_user_model()
        try:
            return UserMapper.to_entity(UserModel.objects.get(pk=user_id))
        except UserModel.DoesNotExist:
            return None

    def list_customers(self) -> List[Dict[str, Any]]:
        qs = self._customers().annotate(
            order_count=Count('orders'),
            total_spent=Coalesce(
                Sum('orders__total', filter=~Q(orders__status=Order.CANCELLED)),
                Value(0),
                output_field=DecimalField(max_digits=14, decimal_places=2),
            ),
        ).order_by('-date_joined')
        return [
            {
                'user': UserMapper.to_entity(model),
                'order_count': model.order_count,
                'total_spent': model.total_spent,
            }
            for model in qs
        ]

    def count_customers(self) -> int:
        return self._customers().count()


# ====================================================================
# 4. ARTWORK
# ====================================================================

class ArtworkRepositoryDjango(IArtworkRepository):
    """Artwork files kept on the configured Django storage (MEDIA_ROOT by default)."""

    @property
    def FileModel(self):
        return get_model('orders', 'OrderItemFile')

    def get_item_owner_id(self, order_item_id) -> Optional[int]:
        row = (
            get_model('orders', 'OrderItem').objects
            .filter(pk=order_item_id)
            .values('order__user_id')
            .first()
        )
        return row['order__user_id'] if row else None

    def create(self, order_item_id, content, file_name: str, content_type: str, file_size: int,
               uploaded_by_id=None) -> ArtworkFile:
        model = self.FileModel(
            order_item_id=order_item_id,
            file_name=file_name,
            file_size=file_size,
            content_type=content_type,
            uploaded_by_id=uploaded_by_id,
        )
        # Writes the content to storage, then saves the row
        model.file.save(file_name, content, save=True)
        return ArtworkFileMapper.to_entity(model)

    def get_by_id(self, file_id) -> Optional[ArtworkFile]:
        return ArtworkFileMapper.to_entity(self.FileModel.objects.filter(pk=file_id).first())

    def list_by_item(self, order_item_id) -> List[ArtworkFile]:
        return [
            ArtworkFileMapper.to_entity(model)
            for model in self.FileModel.objects.filter(order_item_id=order_item_id)
        ]

    def delete(self, file_id) -> None:
        model = self.FileModel.objects.filter(pk=file_id).first()
        if model is None:
            return
        model.file.delete(save=False)
        model.delete()
