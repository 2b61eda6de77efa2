from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from . import views, views_admin, views_auth


# Catalog viewsets (the product one also serves /products/<slug>/configurator/)
router = DefaultRouter()
router.register(r'categories', views.CategoryViewSet)
router.register(r'products', views.ProductViewSet)

urlpatterns = [
    path('', include(router.urls)),

    # Pricing and cart (session-scoped)
    path('pricing/calculate/', views.PriceCalculateView.as_view(), name='pricing-calculate'),
    path('cart/', views.CartView.as_view(), name='cart'),
    path('cart/items/', views.CartItemsView.as_view(), name='cart-items'),
    path('cart/items/<str:item_id>/', views.CartItemDetailView.as_view(), name='cart-item-detail'),

    # Accounts
    path('auth/register/', views_auth.RegisterView.as_view(), name='register'),
    path('auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', views_auth.MeView.as_view(), name='me'),
    path('auth/logout/', views_auth.LogoutView.as_view(), name='logout'),

    # Checkout, orders and payments
    path('checkout/', views.CheckoutView.as_view(), name='checkout'),
    path('orders/', views.OrderListView.as_view(), name='order-list'),
    path('orders/<int:order_id>/', views.OrderDetailView.as_view(), name='order-detail'),
    path('orders/items/<int:item_id>/files/', views.OrderItemFilesView.as_view(), name='order-item-files'),
    path('files/<int:file_id>/', views.ArtworkFileDetailView.as_view(), name='artwork-file-detail'),
    path('payments/initialize/', views.PaymentInitializeView.as_view(), name='payment-initialize'),
    path('payments/verify/<str:reference>/', views.PaymentVerifyView.as_view(), name='payment-verify'),
    path('payments/webhook/', views.PaymentWebhookView.as_view(), name='payment-webhook'),

    # Back-office
    path('admin/orders/', views_admin.AdminOrderListView.as_view(), name='admin-order-list'),
    path('admin/orders/<int:order_id>/', views_admin.AdminOrderDetailView.as_view(), name='admin-order-detail'),
    path('admin/orders/<int:order_id>/status/', views_admin.AdminOrderStatusView.as_view(), name='admin-order-status'),
    path('admin/orders/<int:order_id>/notes/', views_admin.AdminOrderNotesView.as_view(), name='admin-order-notes'),
    path('admin/customers/', views_admin.AdminCustomerListView.as_view(), name='admin-customers'),
    path('admin/dashboard/', views_admin.AdminDashboardView.as_view(), name='admin-dashboard'),
    path('admin/reports/orders-by-status/', views_admin.OrdersByStatusReportView.as_view(),
         name='admin-report-orders-by-status'),
    path('admin/reports/daily/', views_admin.DailySalesReportView.as_view(), name='admin-report-daily'),
    path('admin/reports/weekly/', views_admin.WeeklySalesReportView.as_view(), name='admin-report-weekly'),
]
