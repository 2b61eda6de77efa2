# quikprint/core/dependency_injection.py
"""
Dependency Injection (DI) module.
Builds the use cases with the concrete repositories and gateways of the
Infrastructure layer. Must only be imported once Django is configured.
"""
from decimal import Decimal

from django.conf import settings

from quikprint.infrastructure.repositories import (
    ProductRepositoryDjango,
    CategoryRepositoryDjango,
    OrderRepositoryDjango,
    UserRepositoryDjango,
    ArtworkRepositoryDjango,
)
from quikprint.infrastructure.gateways import PaystackGateway
from quikprint.infrastructure.email_service import DjangoEmailService
from .pricing import default_engine
from .totals import TotalsPolicy
from .use_cases import (
    CatalogUseCase,
    CalculatePriceUseCase,
    ManageCartUseCase,
    CreateOrderUseCase,
    CustomerOrdersUseCase,
    AdminOrdersUseCase,
    AdminCustomersUseCase,
    ReportsUseCase,
    PaymentUseCase,
    ArtworkUseCase,
)

# Concrete repositories (stateless, safe to share)
product_repo = ProductRepositoryDjango()
category_repo = CategoryRepositoryDjango()
order_repo = OrderRepositoryDjango()
user_repo = UserRepositoryDjango()
artwork_repo = ArtworkRepositoryDjango()


def get_totals_policy() -> TotalsPolicy:
    return TotalsPolicy(
        free_shipping_threshold=Decimal(str(settings.FREE_SHIPPING_THRESHOLD)),
        flat_shipping_fee=Decimal(str(settings.FLAT_SHIPPING_FEE)),
        tax_rate=Decimal(str(settings.TAX_RATE)),
    )


def get_payment_gateway() -> PaystackGateway:
    return PaystackGateway(
        secret_key=settings.PAYSTACK_SECRET_KEY,
        base_url=settings.PAYSTACK_BASE_URL,
        callback_url=settings.PAYSTACK_CALLBACK_URL,
        timeout=settings.PAYSTACK_TIMEOUT,
    )


def get_email_service() -> DjangoEmailService:
    return DjangoEmailService(from_email=settings.DEFAULT_FROM_EMAIL)


# ====================================================================
# Catalog and pricing
# ====================================================================

def get_catalog_use_case() -> CatalogUseCase:
    return CatalogUseCase(product_repo, category_repo)

def get_calculate_price_use_case() -> CalculatePriceUseCase:
    return CalculatePriceUseCase(product_repo, default_engine)


# ====================================================================
# Cart and orders
# ====================================================================

def get_manage_cart_use_case() -> ManageCartUseCase:
    return ManageCartUseCase(product_repo, default_engine, get_totals_policy())

def get_create_order_use_case() -> CreateOrderUseCase:
    return CreateOrderUseCase(
        order_repo=order_repo,
        email_service=get_email_service(),
        totals_policy=get_totals_policy(),
    )

def get_customer_orders_use_case() -> CustomerOrdersUseCase:
    return CustomerOrdersUseCase(order_repo)

def get_payment_use_case() -> PaymentUseCase:
    return PaymentUseCase(order_repo, get_payment_gateway(), get_email_service())

def get_artwork_use_case() -> ArtworkUseCase:
    return ArtworkUseCase(artwork_repo, max_size=settings.ARTWORK_MAX_UPLOAD_SIZE_MB * 1024 * 1024)


# ====================================================================
# Back-office
# ====================================================================

def get_admin_orders_use_case() -> AdminOrdersUseCase:
    return AdminOrdersUseCase(order_repo, get_email_service())

def get_admin_customers_use_case() -> AdminCustomersUseCase:
    return AdminCustomersUseCase(user_repo)

def get_reports_use_case() -> ReportsUseCase:
    return ReportsUseCase(order_repo, product_repo, user_repo)
