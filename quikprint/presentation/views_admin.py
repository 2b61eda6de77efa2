# quikprint/presentation/views_admin.py
"""
Back-office API: order management, customers, dashboard and reports.
Every view requires a staff user.
"""
from django.utils import timezone
from drf_spectacular.utils import extend_schema, OpenApiParameter
from rest_framework import status
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from quikprint.core.dependency_injection import (
    get_admin_orders_use_case,
    get_admin_customers_use_case,
    get_reports_use_case,
)
from quikprint.core.exceptions import BaseCoreError
from .serializers import (
    OrderSerializer,
    OrderStatusUpdateSerializer,
    OrderNoteSerializer,
    CustomerSerializer,
    DashboardSerializer,
    DailySalesSerializer,
    WeeklySalesSerializer,
)
from .views import error_response


class AdminAPIView(APIView):
    permission_classes = [IsAdminUser]


# ====================================================================
# ORDERS
# ====================================================================

class AdminOrderListView(AdminAPIView):

    @extend_schema(
        parameters=[OpenApiParameter('status', str, description='Only orders in this status')],
        responses=OrderSerializer(many=True),
    )
    def get(self, request):
        try:
            orders = get_admin_orders_use_case().list_all(request.query_params.get('status'))
        except BaseCoreError as e:
            return error_response(e)
        return Response(OrderSerializer(orders, many=True).data)


class AdminOrderDetailView(AdminAPIView):

    @extend_schema(responses=OrderSerializer)
    def get(self, request, order_id):
        try:
            order = get_admin_orders_use_case().get_order(order_id)
        except BaseCoreError as e:
            return error_response(e)
        return Response(OrderSerializer(order).data)


class AdminOrderStatusView(AdminAPIView):
    """Moves an order to a new status and notifies the customer."""

    @extend_schema(request=OrderStatusUpdateSerializer, responses=OrderSerializer)
    def put(self, request, order_id):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = get_admin_orders_use_case().update_status(
                order_id,
                serializer.validated_data['status'],
                note=serializer.validated_data['note'],
                admin_id=request.user.id,
            )
        except BaseCoreError as e:
            return error_response(e)
        return Response(OrderSerializer(order).data)


class AdminOrderNotesView(AdminAPIView):
    """Internal notes on an order (never shown to the customer)."""

    @extend_schema(responses=OrderNoteSerializer(many=True))
    def get(self, request, order_id):
        try:
            notes = get_admin_orders_use_case().list_notes(order_id)
        except BaseCoreError as e:
            return error_response(e)
        return Response(OrderNoteSerializer(notes, many=True).data)

    @extend_schema(request=OrderNoteSerializer, responses=OrderNoteSerializer)
    def post(self, request, order_id):
        serializer = OrderNoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            note = get_admin_orders_use_case().add_note(
                order_id, serializer.validated_data['note'], admin_id=request.user.id
            )
        except BaseCoreError as e:
            return error_response(e)
        return Response(OrderNoteSerializer(note).data, status=status.HTTP_201_CREATED)


# ====================================================================
# CUSTOMERS AND REPORTS
# ====================================================================

class AdminCustomerListView(AdminAPIView):

    @extend_schema(responses=CustomerSerializer(many=True))
    def get(self, request):
        customers = get_admin_customers_use_case().list_customers()
        return Response(CustomerSerializer(customers, many=True).data)


class AdminDashboardView(AdminAPIView):

    @extend_schema(responses=DashboardSerializer)
    def get(self, request):
        return Response(DashboardSerializer(get_reports_use_case().dashboard()).data)


class OrdersByStatusReportView(AdminAPIView):

    def get(self, request):
        return Response(get_reports_use_case().orders_by_status())


class DailySalesReportView(AdminAPIView):

    @extend_schema(
        parameters=[OpenApiParameter('days', int, description='Number of days, today included (default 7)')],
        responses=DailySalesSerializer(many=True),
    )
    def get(self, request):
        try:
            days = int(request.query_params.get('days', 7))
        except ValueError:
            return Response({'message': "'days' must be a whole number."}, status=status.HTTP_400_BAD_REQUEST)
        try:
            report = get_reports_use_case().daily_sales(days, today=timezone.localdate())
        except BaseCoreError as e:
            return error_response(e)
        return Response(DailySalesSerializer(report, many=True).data)


class WeeklySalesReportView(AdminAPIView):

    @extend_schema(
        parameters=[OpenApiParameter('weeks', int, description='Number of weeks, the current one included (default 12)')],
        responses=WeeklySalesSerializer(many=True),
    )
    def get(self, request):
        try:
            weeks = int(request.query_params.get('weeks', 12))
        except ValueError:
            return Response({'message': "'weeks' must be a whole number."}, status=status.HTTP_400_BAD_REQUEST)
        try:
            report = get_reports_use_case().weekly_sales(weeks, today=timezone.localdate())
        except BaseCoreError as e:
            return error_response(e)
        return Response(WeeklySalesSerializer(report, many=True).data)
