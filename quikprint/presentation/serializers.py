from django.contrib.auth import get_user_model
from django.contrib.auth import password_validation
from rest_framework import serializers

from quikprint.catalog.models import Category as CategoryModel, Product as ProductModel
from quikprint.core.entities import Order, ShippingAddress
from quikprint.core.exceptions import InvalidDataError
from quikprint.core.money import format_naira
from quikprint.infrastructure.mappers import parse_options


def Money(**kwargs):
    return serializers.DecimalField(max_digits=14, decimal_places=2, **kwargs)


# ====================================================================
# CATALOG (entities)
# ====================================================================

class CategorySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField()
    slug = serializers.CharField()
    description = serializers.CharField()
    image = serializers.CharField(allow_null=True)
    product_count = serializers.IntegerField()


class OptionChoiceSerializer(serializers.Serializer):
    value = serializers.CharField()
    label = serializers.CharField()
    price_modifier = Money(allow_null=True)


class ProductOptionSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    type = serializers.CharField()
    choices = OptionChoiceSerializer(many=True)
    min = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    max = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    step = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    unit = serializers.CharField(allow_null=True)


class QuantityTierSerializer(serializers.Serializer):
    min_qty = serializers.IntegerField()
    max_qty = serializers.IntegerField()
    price = Money()


class PricingRuleSerializer(serializers.Serializer):
    rule_type = serializers.CharField()
    value = Money()
    description = serializers.CharField()


class ProductSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    slug = serializers.CharField()
    category = serializers.CharField()
    category_slug = serializers.CharField()
    description = serializers.CharField()
    short_description = serializers.CharField()
    base_price = Money()
    images = serializers.ListField(child=serializers.CharField())
    options = ProductOptionSerializer(many=True)
    features = serializers.ListField(child=serializers.CharField())
    turnaround = serializers.CharField()
    min_quantity = serializers.IntegerField()
    pricing_strategy = serializers.CharField()
    quantity_tiers = QuantityTierSerializer(many=True)
    pricing_rules = PricingRuleSerializer(many=True)


class ProductSummarySerializer(serializers.Serializer):
    """Product as shown inside a cart line."""
    id = serializers.CharField()
    name = serializers.CharField()
    slug = serializers.CharField()
    image = serializers.SerializerMethodField()

    def get_image(self, product):
        return product.images[0] if product.images else None


# ====================================================================
# CATALOG (admin writes)
# ====================================================================

class CategoryModelSerializer(serializers.ModelSerializer):
    class Meta:
        model = CategoryModel
        fields = ['id', 'name', 'slug', 'description', 'image', 'is_active']
        extra_kwargs = {'slug': {'required': False}}


class ProductModelSerializer(serializers.ModelSerializer):
    category = serializers.SlugRelatedField(
        slug_field='slug', queryset=CategoryModel.objects.all(), allow_null=True, required=False
    )

    class Meta:
        model = ProductModel
        fields = [
            'id', 'name', 'slug', 'category', 'description', 'short_description', 'base_price',
            'pricing_strategy', 'min_quantity', 'images', 'options', 'features', 'turnaround', 'is_active',
        ]
        extra_kwargs = {'slug': {'required': False}}

    def validate_options(self, value):
        try:
            parse_options(value)
        except InvalidDataError as e:
            raise serializers.ValidationError(e.message)
        return value

    def validate_min_quantity(self, value):
        if value < 1:
            raise serializers.ValidationError("Minimum quantity must be at least 1.")
        return value


# ====================================================================
# PRICING AND CONFIGURATOR
# ====================================================================

class PriceCalculationSerializer(serializers.Serializer):
    product_slug = serializers.SlugField()
    configuration = serializers.DictField(required=False, default=dict)
    quantity = serializers.IntegerField(required=False, min_value=1)


class PriceBreakdownSerializer(serializers.Serializer):
    strategy = serializers.CharField()
    base_price = Money()
    quantity = serializers.IntegerField()
    option_modifiers = serializers.DictField(child=Money())
    dimensional_cost = Money(allow_null=True)
    quantity_price = Money(allow_null=True)
    setup_fee = Money()
    rush_fee = Money()
    subtotal = Money()
    total = Money()
    unit_price = Money()
    clamped = serializers.BooleanField()
    formatted_total = serializers.SerializerMethodField()

    def get_formatted_total(self, breakdown):
        return format_naira(breakdown.total)


class ConfiguratorActionSerializer(serializers.Serializer):
    ACTIONS = ['select', 'next', 'previous', 'go_to', 'confirm']

    action = serializers.ChoiceField(choices=ACTIONS)
    option_id = serializers.CharField(required=False)
    value = serializers.JSONField(required=False)
    step = serializers.IntegerField(required=False)

    def validate(self, attrs):
        if attrs['action'] == 'select' and ('option_id' not in attrs or 'value' not in attrs):
            raise serializers.ValidationError("'select' needs option_id and value.")
        if attrs['action'] == 'go_to' and 'step' not in attrs:
            raise serializers.ValidationError("'go_to' needs a step.")
        return attrs


class ConfiguratorStateSerializer(serializers.Serializer):
    """Read-only view of a ProductConfigurator."""
    product = serializers.SerializerMethodField()
    current_step = serializers.IntegerField()
    total_steps = serializers.IntegerField()
    steps = serializers.SerializerMethodField()
    current_option = ProductOptionSerializer(allow_null=True)
    can_go_next = serializers.BooleanField()
    can_go_previous = serializers.BooleanField()
    is_last_step = serializers.BooleanField()
    configuration = serializers.SerializerMethodField()
    breakdown = PriceBreakdownSerializer()

    def get_product(self, configurator):
        return configurator.product.slug

    def get_steps(self, configurator):
        return [
            {'number': step.number, 'name': step.name, 'option_id': step.option.id}
            for step in configurator.steps
        ]

    def get_configuration(self, configurator):
        return configurator.to_state()['configuration']


# ====================================================================
# CART
# ====================================================================

class CartItemSerializer(serializers.Serializer):
    id = serializers.CharField()
    product = ProductSummarySerializer()
    quantity = serializers.IntegerField()
    configuration = serializers.SerializerMethodField()
    unit_price = Money()
    total_price = Money()
    created_at = serializers.DateTimeField()

    def get_configuration(self, item):
        return {key: str(value) if not isinstance(value, (str, int, bool)) else value
                for key, value in item.configuration.items()}


class CartSerializer(serializers.Serializer):
    """CartSummary with its order totals."""
    items = CartItemSerializer(many=True)
    item_count = serializers.IntegerField()
    subtotal = Money()
    shipping = Money(source='totals.shipping')
    tax = Money(source='totals.tax')
    total = Money(source='totals.total')
    amount_to_free_shipping = Money(source='totals.amount_to_free_shipping')


class AddToCartSerializer(serializers.Serializer):
    product_slug = serializers.SlugField()
    configuration = serializers.DictField(required=False, default=dict)
    quantity = serializers.IntegerField(required=False, min_value=1)


class UpdateCartItemSerializer(serializers.Serializer):
    # Zero or less removes the line
    quantity = serializers.IntegerField()


# ====================================================================
# CHECKOUT AND ORDERS
# ====================================================================

class CheckoutSerializer(serializers.Serializer):
    """Shipping address of the checkout form."""
    name = serializers.CharField(max_length=255)
    street = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100)
    zip = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    country = serializers.CharField(max_length=100, required=False, default='Nigeria')

    def to_shipping_address(self) -> ShippingAddress:
        return ShippingAddress(**self.validated_data)


class ShippingAddressSerializer(serializers.Serializer):
    name = serializers.CharField()
    street = serializers.CharField()
    city = serializers.CharField()
    state = serializers.CharField()
    zip = serializers.CharField()
    country = serializers.CharField()


class OrderItemSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    product_id = serializers.CharField(allow_null=True)
    product_slug = serializers.CharField()
    product_name = serializers.CharField()
    quantity = serializers.IntegerField()
    unit_price = Money()
    total_price = Money()
    configuration = serializers.DictField()


class OrderStatusChangeSerializer(serializers.Serializer):
    status = serializers.CharField()
    note = serializers.CharField()
    created_by_id = serializers.IntegerField(allow_null=True)
    created_at = serializers.DateTimeField()


class OrderSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    order_number = serializers.CharField()
    customer_email = serializers.EmailField(source='user.email')
    customer_name = serializers.CharField(source='user.name')
    status = serializers.CharField()
    items = OrderItemSerializer(many=True)
    subtotal = Money()
    shipping = Money()
    tax = Money()
    total = Money()
    shipping_address = ShippingAddressSerializer()
    payment_reference = serializers.CharField(allow_null=True)
    status_history = OrderStatusChangeSerializer(many=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField(allow_null=True)


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=list(Order.STATUSES))
    note = serializers.CharField(required=False, allow_blank=True, default='')


class OrderNoteSerializer(serializers.Serializer):
    id = serializers.IntegerField(read_only=True)
    note = serializers.CharField()
    created_by_id = serializers.IntegerField(read_only=True, allow_null=True)
    created_at = serializers.DateTimeField(read_only=True)


class ArtworkUploadSerializer(serializers.Serializer):
    # Type and size checks belong to the artwork use case
    file = serializers.FileField(allow_empty_file=True)


class ArtworkFileSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    order_item_id = serializers.IntegerField()
    file_name = serializers.CharField()
    file_size = serializers.IntegerField()
    content_type = serializers.CharField()
    url = serializers.CharField()
    uploaded_by_id = serializers.IntegerField(allow_null=True)
    uploaded_at = serializers.DateTimeField()


class PaymentInitializeSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()


class PaymentTransactionSerializer(serializers.Serializer):
    reference = serializers.CharField()
    status = serializers.CharField()
    amount = Money()
    authorization_url = serializers.CharField(allow_null=True)
    access_code = serializers.CharField(allow_null=True)


# ====================================================================
# ACCOUNTS AND BACK-OFFICE
# ====================================================================

class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = get_user_model()
        fields = ['id', 'email', 'first_name', 'last_name', 'phone', 'is_staff', 'date_joined']
        read_only_fields = ['id', 'is_staff', 'date_joined']


class RegisterSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})

    class Meta:
        model = get_user_model()
        fields = ['email', 'password', 'first_name', 'last_name', 'phone']

    def validate_email(self, value):
        value = value.lower()
        if get_user_model().objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('An account with this e-mail already exists.')
        return value

    def validate_password(self, value):
        password_validation.validate_password(value)
        return value

    def create(self, validated_data):
        password = validated_data.pop('password')
        return get_user_model().objects.create_user(password=password, **validated_data)


class CustomerSerializer(serializers.Serializer):
    id = serializers.IntegerField(source='user.id')
    email = serializers.EmailField(source='user.email')
    name = serializers.CharField(source='user.name')
    phone = serializers.CharField(source='user.phone', allow_null=True)
    date_joined = serializers.DateTimeField(source='user.date_joined')
    order_count = serializers.IntegerField()
    total_spent = Money()


class DailySalesSerializer(serializers.Serializer):
    date = serializers.DateField()
    orders = serializers.IntegerField()
    revenue = Money()


class WeeklySalesSerializer(serializers.Serializer):
    week_start = serializers.DateField()
    week_end = serializers.DateField()
    orders = serializers.IntegerField()
    revenue = Money()
    average_order_value = Money()


class DashboardSerializer(serializers.Serializer):
    total_orders = serializers.IntegerField()
    open_orders = serializers.IntegerField()
    total_revenue = Money()
    total_customers = serializers.IntegerField()
    total_products = serializers.IntegerField()
    recent_orders = OrderSerializer(many=True)
