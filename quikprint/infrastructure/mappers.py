"""
Mappers that convert between:
1. Django ORM models
2. Domain entities (quikprint.core.entities)
"""
from typing import Any, Iterable, List, Optional, Type

from django.apps import apps
from django.db import models

from quikprint.core.entities import (
    User as UserEntity,
    Category as CategoryEntity,
    Product as ProductEntity,
    ProductOption,
    OptionChoice,
    QuantityTier as QuantityTierEntity,
    PricingRule as PricingRuleEntity,
    Order as OrderEntity,
    OrderItem as OrderItemEntity,
    OrderStatusChange,
    OrderNote as OrderNoteEntity,
    ShippingAddress,
    ArtworkFile as ArtworkFileEntity,
)
from quikprint.core.exceptions import InvalidDataError
from quikprint.core.money import parse_decimal


def get_model(app_label: str, model_name: str):
    """Returns a Django model lazily, avoiding circular imports."""
    return apps.get_model(app_label, model_name)


# ====================================================================
# OPTION DEFINITIONS (JSON <-> entities)
# ====================================================================

def _number(raw: dict, key: str):
    value = raw.get(key)
    if value is None or value == '':
        return None
    number = parse_decimal(value)
    if number is None:
        raise InvalidDataError(f"Option '{raw.get('id')}': '{key}' must be a number.")
    return number


def parse_option(raw: dict) -> ProductOption:
    """
    Builds a ProductOption from its stored JSON. Choices may be stored under
    ``options`` or ``choices``; modifiers as ``priceModifier`` or ``price_modifier``.
    """
    if not isinstance(raw, dict):
        raise InvalidDataError("Each option must be an object.")
    raw_choices = raw.get('options', raw.get('choices')) or []
    choices = []
    for choice in raw_choices:
        if not isinstance(choice, dict) or 'value' not in choice:
            raise InvalidDataError(f"Option '{raw.get('id')}' has a choice without a value.")
        modifier = choice.get('priceModifier', choice.get('price_modifier'))
        choices.append(OptionChoice(
            value=str(choice['value']),
            label=choice.get('label') or str(choice['value']),
            price_modifier=parse_decimal(modifier) if modifier is not None else None,
        ))
    return ProductOption(
        id=str(raw.get('id') or ''),
        name=raw.get('name') or str(raw.get('id') or ''),
        type=raw.get('type'),
        choices=choices,
        min=_number(raw, 'min'),
        max=_number(raw, 'max'),
        step=_number(raw, 'step'),
        unit=raw.get('unit'),
    )


def parse_options(raw_options: Optional[Iterable[dict]]) -> List[ProductOption]:
    if raw_options is None:
        return []
    if not isinstance(raw_options, list):
        raise InvalidDataError("Options must be a list.")
    options = [parse_option(raw) for raw in raw_options]
    ids = [option.id for option in options]
    if len(ids) != len(set(ids)):
        raise InvalidDataError("Option ids must be unique within a product.")
    return options


def option_to_dict(option: ProductOption) -> dict:
    """Inverse of parse_option, in the stored JSON shape."""
    data = {'id': option.id, 'name': option.name, 'type': option.type}
    if option.is_choice:
        data['options'] = [
            {
                'value': choice.value,
                'label': choice.label,
                'priceModifier': float(choice.price_modifier) if choice.price_modifier is not None else None,
            }
            for choice in option.choices
        ]
    for key in ('min', 'max', 'step'):
        value = getattr(option, key)
        if value is not None:
            data[key] = float(value)
    if option.unit:
        data['unit'] = option.unit
    return data


class BaseMapper:

    @staticmethod
    def to_entity(model, entity_class):
        """Generic Model -> Entity conversion by field name."""
        if not model:
            return None
        entity_data = {
            name: getattr(model, name)
            for name in entity_class.__dataclass_fields__
            if hasattr(model, name)
        }
        return entity_class(**entity_data)


# ====================================================================
# CATALOG MAPPERS
# ====================================================================

class CategoryMapper(BaseMapper):

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('catalog', 'Category')

    @staticmethod
    def to_entity(model: Any) -> Optional[CategoryEntity]:
        if not model:
            return None
        return CategoryEntity(
            id=model.id,
            name=model.name,
            slug=model.slug,
            description=model.description,
            image=model.image or None,
            # Annotated by the repository when listing
            product_count=getattr(model, 'product_count', 0) or 0,
        )


class ProductMapper(BaseMapper):
    """Product model (with its tiers and rules) -> Product entity."""

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('catalog', 'Product')

    @staticmethod
    def to_entity(model: Any) -> Optional[ProductEntity]:
        if not model:
            return None
        category = model.category
        return ProductEntity(
            id=str(model.id),
            name=model.name,
            slug=model.slug,
            base_price=model.base_price,
            category=category.name if category else '',
            category_slug=category.slug if category else '',
            description=model.description,
            short_description=model.short_description,
            images=list(model.images or []),
            options=parse_options(model.options),
            features=list(model.features or []),
            turnaround=model.turnaround,
            min_quantity=model.min_quantity,
            pricing_strategy=model.pricing_strategy,
            quantity_tiers=[
                QuantityTierEntity(min_qty=tier.min_qty, max_qty=tier.max_qty, price=tier.price)
                for tier in model.quantity_tiers.all()
            ],
            pricing_rules=[
                PricingRuleEntity(rule_type=rule.rule_type, value=rule.value, description=rule.description)
                for rule in model.pricing_rules.all()
            ],
            is_active=model.is_active,
        )


# ====================================================================
# USER MAPPER
# ====================================================================

class UserMapper(BaseMapper):

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('infrastructure', 'User')

    @staticmethod
    def to_entity(model: Any) -> Optional[UserEntity]:
        if not model:
            return None
        return UserEntity(
            id=model.id,
            email=model.email,
            name=model.get_full_name(),
            phone=model.phone,
            is_staff=model.is_staff,
            date_joined=model.date_joined,
        )


# ====================================================================
# ORDER MAPPERS
# ====================================================================

class OrderItemMapper(BaseMapper):

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('orders', 'OrderItem')

    @staticmethod
    def to_entity(model: Any) -> Optional[OrderItemEntity]:
        if not model:
            return None
        return OrderItemEntity(
            id=model.id,
            product_id=str(model.product_id) if model.product_id else None,
            product_slug=model.product_slug,
            product_name=model.product_name,
            quantity=model.quantity,
            unit_price=model.unit_price,
            total_price=model.total_price,
            configuration=dict(model.configuration or {}),
        )

    @classmethod
    def to_model(cls, entity: OrderItemEntity, order_id: int) -> Any:
        """Snapshot of the line; the product FK is kept only while the product exists."""
        product_id = int(entity.product_id) if entity.product_id and str(entity.product_id).isdigit() else None
        return cls.model_class()(
            order_id=order_id,
            product_id=product_id,
            product_name=entity.product_name,
            product_slug=entity.product_slug,
            quantity=entity.quantity,
            unit_price=entity.unit_price,
            total_price=entity.total_price,
            configuration=_json_safe(entity.configuration),
        )


class OrderMapper(BaseMapper):

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('orders', 'Order')

    @staticmethod
    def to_entity(model: Any) -> Optional[OrderEntity]:
        """Order model -> Order entity, with items, history and address snapshot."""
        if not model:
            return None
        return OrderEntity(
            id=model.id,
            order_number=model.order_number,
            user=UserMapper.to_entity(model.user),
            status=model.status,
            subtotal=model.subtotal,
            shipping=model.shipping,
            tax=model.tax,
            total=model.total,
            payment_reference=model.payment_reference,
            shipping_address=ShippingAddress(
                name=model.shipping_name,
                street=model.shipping_street,
                city=model.shipping_city,
                state=model.shipping_state,
                zip=model.shipping_zip,
                country=model.shipping_country,
            ),
            items=[OrderItemMapper.to_entity(item) for item in model.items.all()],
            status_history=[
                OrderStatusChange(
                    status=change.status,
                    note=change.note,
                    created_by_id=change.created_by_id,
                    created_at=change.created_at,
                )
                for change in model.status_history.all()
            ],
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @classmethod
    def to_model(cls, entity: OrderEntity, model: Optional[Any] = None) -> Any:
        if not model:
            model = cls.model_class()(user_id=entity.user.id)

        model.status = entity.status
        model.subtotal = entity.subtotal
        model.shipping = entity.shipping
        model.tax = entity.tax
        model.total = entity.total
        model.payment_reference = entity.payment_reference

        address = entity.shipping_address
        model.shipping_name = address.name
        model.shipping_street = address.street
        model.shipping_city = address.city
        model.shipping_state = address.state
        model.shipping_zip = address.zip or ''
        model.shipping_country = address.country or 'Nigeria'
        return model


class OrderNoteMapper(BaseMapper):

    @staticmethod
    def to_entity(model: Any) -> Optional[OrderNoteEntity]:
        if not model:
            return None
        return OrderNoteEntity(
            id=model.id,
            note=model.note,
            created_by_id=model.created_by_id,
            created_at=model.created_at,
        )


class ArtworkFileMapper(BaseMapper):

    @classmethod
    def model_class(cls) -> Type[models.Model]:
        return get_model('orders', 'OrderItemFile')

    @staticmethod
    def to_entity(model: Any) -> Optional[ArtworkFileEntity]:
        if not model:
            return None
        return ArtworkFileEntity(
            id=model.id,
            order_item_id=model.order_item_id,
            file_name=model.file_name,
            file_size=model.file_size,
            content_type=model.content_type,
            url=model.file.url if model.file else '',
            uploaded_by_id=model.uploaded_by_id,
            uploaded_at=model.uploaded_at,
        )


def _json_safe(configuration: dict) -> dict:
    # Decimal values (dimensions) are stored as strings in JSON columns
    return {
        key: (str(value) if not isinstance(value, (str, int, float, bool, type(None))) else value)
        for key, value in (configuration or {}).items()
    }
