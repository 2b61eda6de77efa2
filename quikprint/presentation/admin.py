# Django admin for the QuikPrint models.

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from quikprint.catalog.models import Category, Product, QuantityTier, PricingRule
from quikprint.core.dependency_injection import get_admin_orders_use_case
from quikprint.infrastructure.models import User
from quikprint.orders.models import Order, OrderItem, OrderItemFile, OrderStatusHistory, OrderNote


# ====================================================================
# 1. USERS (e-mail login, no username)
# ====================================================================

@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('email', 'first_name', 'last_name', 'phone', 'is_staff', 'is_active')
    list_filter = ('is_staff', 'is_superuser', 'is_active')
    search_fields = ('email', 'first_name', 'last_name', 'phone')
    ordering = ('email',)

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Personal info', {'fields': ('first_name', 'last_name', 'phone')}),
        ('Permissions', {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Important dates', {'fields': ('last_login', 'date_joined')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'first_name', 'last_name', 'phone', 'password1', 'password2'),
        }),
    )


# ====================================================================
# 2. CATALOG
# ====================================================================

@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'is_active')
    list_filter = ('is_active',)
    prepopulated_fields = {'slug': ('name',)}
    search_fields = ('name',)


class QuantityTierInline(admin.TabularInline):
    model = QuantityTier
    extra = 1


class PricingRuleInline(admin.TabularInline):
    """Setup fee, rush fee and minimum charge of a product."""
    model = PricingRule
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'base_price', 'pricing_strategy', 'min_quantity', 'is_active')
    list_filter = ('is_active', 'pricing_strategy', 'category')
    search_fields = ('name', 'short_description', 'description')
    prepopulated_fields = {'slug': ('name',)}
    inlines = [QuantityTierInline, PricingRuleInline]
    fieldsets = (
        ('Basics', {
            'fields': ('name', 'slug', 'category', 'short_description', 'description', 'is_active'),
        }),
        ('Pricing', {
            'fields': ('base_price', 'pricing_strategy', 'min_quantity'),
        }),
        ('Configurator', {
            'description': 'Options as JSON: [{"id", "name", "type", "options": [...], "min", "max", "unit"}]',
            'fields': ('options', 'images', 'features', 'turnaround'),
        }),
    )


# ====================================================================
# 3. ORDERS
# ====================================================================

class OrderItemInline(admin.TabularInline):
    model = OrderItem
    readonly_fields = ('product_name', 'quantity', 'unit_price', 'total_price', 'configuration')
    fields = readonly_fields
    extra = 0
    can_delete = False


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    readonly_fields = ('status', 'note', 'created_by', 'created_at')
    fields = readonly_fields
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class OrderNoteInline(admin.TabularInline):
    model = OrderNote
    fields = ('note', 'created_by', 'created_at')
    readonly_fields = ('created_by', 'created_at')
    extra = 1


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('order_number', 'user', 'created_at', 'total', 'status')
    list_filter = ('status', 'created_at')
    search_fields = ('order_number', 'user__email', 'shipping_name', 'shipping_city', 'payment_reference')
    date_hierarchy = 'created_at'
    inlines = [OrderItemInline, OrderStatusHistoryInline, OrderNoteInline]
    readonly_fields = (
        'order_number',
        'user',
        'created_at',
        'subtotal',
        'shipping',
        'tax',
        'total',
        'payment_reference',
        'shipping_name',
        'shipping_street',
        'shipping_city',
        'shipping_state',
        'shipping_zip',
        'shipping_country',
    )

    def has_add_permission(self, request):
        """Orders only come from checkout."""
        return False

    def save_model(self, request, obj, form, change):
        # Status changes go through the use case so they reach the history and the customer
        if change and 'status' in form.changed_data:
            new_status = obj.status
            obj.status = form.initial['status']
            super().save_model(request, obj, form, change)
            get_admin_orders_use_case().update_status(obj.pk, new_status, admin_id=request.user.id)
            obj.refresh_from_db()
        else:
            super().save_model(request, obj, form, change)

    def save_formset(self, request, form, formset, change):
        instances = formset.save(commit=False)
        for instance in instances:
            if isinstance(instance, OrderNote) and instance.created_by_id is None:
                instance.created_by = request.user
            instance.save()
        for deleted in formset.deleted_objects:
            deleted.delete()
        formset.save_m2m()


@admin.register(OrderItemFile)
class OrderItemFileAdmin(admin.ModelAdmin):
    list_display = ('file_name', 'order_item', 'content_type', 'file_size', 'uploaded_by', 'uploaded_at')
    list_filter = ('content_type', 'uploaded_at')
    search_fields = ('file_name', 'order_item__order__order_number', 'uploaded_by__email')
    readonly_fields = ('order_item', 'file_name', 'file_size', 'content_type', 'uploaded_by', 'uploaded_at')

    def has_add_permission(self, request):
        """Artwork only comes from the upload API."""
        return False
