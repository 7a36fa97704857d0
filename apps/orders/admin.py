"""
Order App Django Admin
Orders are created at checkout; status changes go through the lifecycle
service so wallets and notifications stay in step
"""

from django.contrib import admin, messages

from core.exceptions import MarketplaceError
from . import status as statuses
from .models import Order, VendorOrder
from .services import update_order_status


class VendorOrderInline(admin.TabularInline):
    """Show each vendor's sub-order inside Order admin"""
    model = VendorOrder
    extra = 0
    fields = ['vendor', 'vendor_name', 'subtotal', 'status', 'tracking_number', 'carrier', 'delivered_at']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = [
        'order_code', 'customer_name', 'customer_email', 'order_status',
        'payment_status', 'total_amount', 'created_at'
    ]
    list_filter = ['order_status', 'payment_status', 'created_at']
    search_fields = ['order_code', 'customer_email', 'customer_name', 'transaction_id']
    readonly_fields = [
        'order_code', 'customer', 'items', 'subtotal', 'shipping_cost', 'tax',
        'discount', 'total_amount', 'order_status', 'payment_status', 'paid_at',
        'cancellation', 'returns', 'created_at', 'updated_at'
    ]

    fieldsets = (
        ('Order Details', {
            'fields': ('order_code', 'customer', 'customer_name', 'customer_email', 'order_status', 'notes')
        }),
        ('Items', {
            'fields': ('items',)
        }),
        ('Payment', {
            'fields': (
                'subtotal', 'shipping_cost', 'tax', 'discount', 'coupon_code', 'total_amount',
                'payment_method', 'payment_status', 'transaction_id', 'paid_at'
            )
        }),
        ('Addresses', {
            'fields': ('shipping_address', 'billing_address')
        }),
        ('Cancellation & Returns', {
            'fields': ('cancellation', 'returns'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )

    inlines = [VendorOrderInline]

    actions = ['mark_confirmed', 'mark_processing']

    def _move(self, request, queryset, new_status):
        count = 0
        for order in queryset:
            try:
                update_order_status(order.pk, new_status)
                count += 1
            except MarketplaceError as e:
                self.message_user(request, f'{order.order_code}: {e.message}', messages.ERROR)
        self.message_user(request, f'Moved {count} order(s) to {new_status}', messages.SUCCESS)

    def mark_confirmed(self, request, queryset):
        self._move(request, queryset, statuses.CONFIRMED)
    mark_confirmed.short_description = 'Mark selected orders confirmed'

    def mark_processing(self, request, queryset):
        self._move(request, queryset, statuses.PROCESSING)
    mark_processing.short_description = 'Mark selected orders processing'


@admin.register(VendorOrder)
class VendorOrderAdmin(admin.ModelAdmin):
    list_display = ['order', 'vendor_name', 'subtotal', 'status', 'tracking_number', 'status_updated_at']
    list_filter = ['status']
    search_fields = ['order__order_code', 'vendor_name', 'tracking_number']
    readonly_fields = [field.name for field in VendorOrder._meta.fields]

    def has_add_permission(self, request):
        return False
