# quikprint/presentation/views.py

import logging

from django.conf import settings
from drf_spectacular.utils import extend_schema, OpenApiParameter
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from quikprint.catalog.models import Category as CategoryModel, Product as ProductModel
from quikprint.core.dependency_injection import (
    get_catalog_use_case,
    get_calculate_price_use_case,
    get_manage_cart_use_case,
    get_create_order_use_case,
    get_customer_orders_use_case,
    get_payment_use_case,
    get_artwork_use_case,
)
from quikprint.core.exceptions import (
    BaseCoreError,
    ItemNotFoundError,
    InvalidDataError,
    InvalidStepError,
    CartEmptyError,
    InvalidStatusError,
    OrderAccessDeniedError,
    PaymentFailedError,
)
from quikprint.infrastructure.mappers import UserMapper
from .cart_manager import CartManager, ConfiguratorStore
from .serializers import (
    CategorySerializer,
    CategoryModelSerializer,
    ProductSerializer,
    ProductModelSerializer,
    PriceCalculationSerializer,
    PriceBreakdownSerializer,
    ConfiguratorActionSerializer,
    ConfiguratorStateSerializer,
    CartSerializer,
    CartItemSerializer,
    AddToCartSerializer,
    UpdateCartItemSerializer,
    CheckoutSerializer,
    OrderSerializer,
    PaymentInitializeSerializer,
    PaymentTransactionSerializer,
    ArtworkUploadSerializer,
    ArtworkFileSerializer,
)

logger = logging.getLogger(__name__)


# ====================================================================
# ERROR MAPPING: Core exceptions -> HTTP responses
# ====================================================================

ERROR_STATUS = (
    (ItemNotFoundError, status.HTTP_404_NOT_FOUND),
    (OrderAccessDeniedError, status.HTTP_403_FORBIDDEN),
    (PaymentFailedError, status.HTTP_502_BAD_GATEWAY),
    ((InvalidDataError, InvalidStepError, CartEmptyError, InvalidStatusError), status.HTTP_400_BAD_REQUEST),
)


def error_response(error: BaseCoreError) -> Response:
    for error_classes, http_status in ERROR_STATUS:
        if isinstance(error, error_classes):
            return Response({'message': str(error)}, status=http_status)
    return Response({'message': str(error)}, status=status.HTTP_400_BAD_REQUEST)


def user_entity(request):
    return UserMapper.to_entity(request.user)


def cart_response(cart, http_status=status.HTTP_200_OK, item=None) -> Response:
    """Cart summary; a just-added line is returned next to it."""
    data = CartSerializer(get_manage_cart_use_case().summary(cart)).data
    if item is not None:
        data = {'item': CartItemSerializer(item).data, 'cart': data}
    return Response(data, status=http_status)


# ====================================================================
# CATALOG
# ====================================================================

class AdminWriteMixin:
    """Anyone can read the catalog; only admins create, update or delete."""

    def get_permissions(self):
        if self.action in ['create', 'update', 'partial_update', 'destroy']:
            self.permission_classes = [IsAdminUser]
        else:
            self.permission_classes = [AllowAny]
        return [permission() for permission in self.permission_classes]


class CategoryViewSet(AdminWriteMixin, viewsets.ModelViewSet):
    """
    Product categories. Reads go through the catalog use case (active
    categories with product counts); writes edit the model directly.
    """
    queryset = CategoryModel.objects.all()
    serializer_class = CategoryModelSerializer
    lookup_field = 'slug'

    def list(self, request, *args, **kwargs):
        categories = get_catalog_use_case().list_categories()
        return Response(CategorySerializer(categories, many=True).data)

    def retrieve(self, request, *args, **kwargs):
        try:
            category = get_catalog_use_case().get_category(kwargs['slug'])
        except BaseCoreError as e:
            return error_response(e)
        return Response(CategorySerializer(category).data)


class ProductViewSet(AdminWriteMixin, viewsets.ModelViewSet):
    """
    Printing products, filterable by ``?search=`` and ``?category=<slug>``.
    Also hosts the step-by-step configurator of each product.
    """
    queryset = ProductModel.objects.all()
    serializer_class = ProductModelSerializer
    lookup_field = 'slug'

    @extend_schema(parameters=[
        OpenApiParameter('search', str, description='Text searched in name and descriptions'),
        OpenApiParameter('category', str, description='Category slug'),
    ])
    def list(self, request, *args, **kwargs):
        products = get_catalog_use_case().list_products(
            search=request.query_params.get('search'),
            category_slug=request.query_params.get('category'),
        )
        return Response(ProductSerializer(products, many=True).data)

    def retrieve(self, request, *args, **kwargs):
        try:
            product = get_catalog_use_case().get_product(kwargs['slug'])
        except BaseCoreError as e:
            return error_response(e)
        return Response(ProductSerializer(product).data)

    @extend_schema(request=ConfiguratorActionSerializer, responses=ConfiguratorStateSerializer)
    @action(detail=True, methods=['get', 'post'])
    def configurator(self, request, slug=None):
        """
        GET starts a fresh configuration of the product (every visit resets it).
        POST applies one action: select, next, previous, go_to or confirm.
        Confirming adds the configured product to the session cart.
        """
        try:
            product = get_catalog_use_case().get_product(slug)
        except BaseCoreError as e:
            return error_response(e)

        store = ConfiguratorStore(request)
        if request.method == 'GET':
            configurator = store.start(product)
            return Response(ConfiguratorStateSerializer(configurator).data)

        serializer = ConfiguratorActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        configurator = store.load(product)

        try:
            if data['action'] == 'select':
                configurator.select(data['option_id'], data['value'])
            elif data['action'] == 'next':
                configurator.next()
            elif data['action'] == 'previous':
                configurator.previous()
            elif data['action'] == 'go_to':
                configurator.go_to(data['step'])
            else:
                cart_manager = CartManager(request)
                item = configurator.confirm(cart_manager.get_cart())
                cart_manager.save()
                store.discard(product)
                logger.info("Configured %s added to cart as line %s.", product.slug, item.id)
                return cart_response(
                    cart_manager.get_cart(), status.HTTP_201_CREATED, item=item
                )
        except BaseCoreError as e:
            return error_response(e)

        store.save(configurator)
        return Response(ConfiguratorStateSerializer(configurator).data)


class PriceCalculateView(APIView):
    """Server-side price quote for a product configuration."""
    permission_classes = [AllowAny]

    @extend_schema(request=PriceCalculationSerializer, responses=PriceBreakdownSerializer)
    def post(self, request):
        serializer = PriceCalculationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            breakdown = get_calculate_price_use_case().execute(
                serializer.validated_data['product_slug'],
                serializer.validated_data['configuration'],
                quantity=serializer.validated_data.get('quantity'),
            )
        except BaseCoreError as e:
            return error_response(e)
        return Response(PriceBreakdownSerializer(breakdown).data)


# ====================================================================
# CART (session-scoped, no login needed)
# ====================================================================

class CartView(APIView):
    """The visitor's cart with its order totals."""
    permission_classes = [AllowAny]

    @extend_schema(responses=CartSerializer)
    def get(self, request):
        return cart_response(CartManager(request).get_cart())

    @extend_schema(responses=CartSerializer)
    def delete(self, request):
        cart_manager = CartManager(request)
        get_manage_cart_use_case().clear(cart_manager.get_cart())
        cart_manager.save()
        return cart_response(cart_manager.get_cart())


class CartItemsView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=AddToCartSerializer, responses=CartSerializer)
    def post(self, request):
        """
        Adds a configured product. Expects 'product_slug', 'configuration'
        and optionally 'quantity'. The price is always computed here.
        """
        serializer = AddToCartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart_manager = CartManager(request)
        try:
            item = get_manage_cart_use_case().add_product(
                cart_manager.get_cart(),
                serializer.validated_data['product_slug'],
                configuration=serializer.validated_data['configuration'],
                quantity=serializer.validated_data.get('quantity'),
            )
        except BaseCoreError as e:
            return error_response(e)
        cart_manager.save()
        return cart_response(cart_manager.get_cart(), status.HTTP_201_CREATED, item=item)


class CartItemDetailView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=UpdateCartItemSerializer, responses=CartSerializer)
    def patch(self, request, item_id):
        """Changes a line's quantity; zero or less removes the line."""
        serializer = UpdateCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart_manager = CartManager(request)
        try:
            get_manage_cart_use_case().update_quantity(
                cart_manager.get_cart(), item_id, serializer.validated_data['quantity']
            )
        except BaseCoreError as e:
            return error_response(e)
        cart_manager.save()
        return cart_response(cart_manager.get_cart())

    @extend_schema(responses=CartSerializer)
    def delete(self, request, item_id):
        cart_manager = CartManager(request)
        try:
            get_manage_cart_use_case().remove_item(cart_manager.get_cart(), item_id)
        except BaseCoreError as e:
            return error_response(e)
        cart_manager.save()
        return cart_response(cart_manager.get_cart())


# ====================================================================
# CHECKOUT AND ORDERS
# ====================================================================

class CheckoutView(APIView):
    """Turns the session cart into an order awaiting payment."""
    permission_classes = [IsAuthenticated]

    @extend_schema(request=CheckoutSerializer, responses=OrderSerializer)
    def post(self, request):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        cart_manager = CartManager(request)
        try:
            order = get_create_order_use_case().execute(
                cart_manager.get_cart(),
                user_entity(request),
                serializer.to_shipping_address(),
            )
        except BaseCoreError as e:
            return error_response(e)
        cart_manager.clear()
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


class OrderListView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses=OrderSerializer(many=True))
    def get(self, request):
        orders = get_customer_orders_use_case().list_orders(request.user.id)
        return Response(OrderSerializer(orders, many=True).data)


class OrderDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses=OrderSerializer)
    def get(self, request, order_id):
        try:
            order = get_customer_orders_use_case().get_order(request.user.id, order_id)
        except BaseCoreError as e:
            return error_response(e)
        return Response(OrderSerializer(order).data)


# ====================================================================
# ARTWORK FILES
# ====================================================================

class OrderItemFilesView(APIView):
    """Artwork of one order line: list and multipart upload."""
    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(responses=ArtworkFileSerializer(many=True))
    def get(self, request, item_id):
        try:
            files = get_artwork_use_case().list_files(user_entity(request), item_id)
        except BaseCoreError as e:
            return error_response(e)
        return Response(ArtworkFileSerializer(files, many=True).data)

    @extend_schema(request=ArtworkUploadSerializer, responses=ArtworkFileSerializer)
    def post(self, request, item_id):
        serializer = ArtworkUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        upload = serializer.validated_data['file']
        try:
            artwork = get_artwork_use_case().upload(
                user_entity(request),
                item_id,
                upload,
                file_name=upload.name,
                content_type=upload.content_type,
                file_size=upload.size,
            )
        except BaseCoreError as e:
            return error_response(e)
        return Response(ArtworkFileSerializer(artwork).data, status=status.HTTP_201_CREATED)


class ArtworkFileDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses=ArtworkFileSerializer)
    def get(self, request, file_id):
        try:
            artwork = get_artwork_use_case().get_file(user_entity(request), file_id)
        except BaseCoreError as e:
            return error_response(e)
        return Response(ArtworkFileSerializer(artwork).data)

    def delete(self, request, file_id):
        try:
            get_artwork_use_case().delete_file(user_entity(request), file_id)
        except BaseCoreError as e:
            return error_response(e)
        return Response({'message': 'File deleted.'})


# ====================================================================
# PAYMENTS (Paystack)
# ====================================================================

class PaymentInitializeView(APIView):
    """Opens a Paystack transaction; the client redirects to authorization_url."""
    permission_classes = [IsAuthenticated]

    @extend_schema(request=PaymentInitializeSerializer, responses=PaymentTransactionSerializer)
    def post(self, request):
        serializer = PaymentInitializeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            transaction = get_payment_use_case().initialize(
                user_entity(request), serializer.validated_data['order_id']
            )
        except BaseCoreError as e:
            return error_response(e)
        data = PaymentTransactionSerializer(transaction).data
        data['public_key'] = settings.PAYSTACK_PUBLIC_KEY
        return Response(data, status=status.HTTP_201_CREATED)


class PaymentVerifyView(APIView):
    """Callback target: confirms the transaction and returns the order."""
    permission_classes = [IsAuthenticated]

    @extend_schema(responses=OrderSerializer)
    def get(self, request, reference):
        try:
            order = get_payment_use_case().verify(reference)
        except BaseCoreError as e:
            return error_response(e)
        if order.user.id != request.user.id and not request.user.is_staff:
            return error_response(OrderAccessDeniedError())
        return Response(OrderSerializer(order).data)


class PaymentWebhookView(APIView):
    """
    Paystack events. Authenticated by the x-paystack-signature header
    (HMAC-SHA512 of the raw body), not by a user.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(request=None, responses=None)
    def post(self, request):
        signature = request.META.get('HTTP_X_PAYSTACK_SIGNATURE', '')
        try:
            order = get_payment_use_case().handle_webhook(request.body, signature)
        except PaymentFailedError as e:
            return Response({'message': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except BaseCoreError as e:
            return error_response(e)

        if order is None:
            return Response({'message': 'Event ignored.'})
        return Response({'message': 'Payment confirmed.', 'order_number': order.order_number, 'status': order.status})
