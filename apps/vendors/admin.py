"""
Vendor App Django Admin
Vendors, wallets, the transaction ledger, payouts, products and vendor groups
"""

from django.contrib import admin, messages
from django.utils.html import format_html

from core.exceptions import MarketplaceError
from .models import (
    Payout, Product, Transaction, Vendor, VendorGroup, VendorGroupMembership, Wallet
)
from .services import recompute_wallet, set_product_status, update_vendor_status

STATUS_COLORS = {
    'approved': 'green',
    'completed': 'green',
    'rejected': 'red',
    'failed': 'red',
    'pending': 'orange',
    'processing': 'blue',
    'suspended': 'gray',
    'cancelled': 'gray',
}


def status_badge(obj):
    color = STATUS_COLORS.get(obj.status, 'gray')
    return format_html(
        '<span style="background-color: {}; color: white; padding: 3px 10px; border-radius: 3px;">{}</span>',
        color, obj.get_status_display()
    )


# ==========================================
# INLINE ADMIN CLASSES
# ==========================================

class WalletInline(admin.StackedInline):
    """Show the wallet inside Vendor admin"""
    model = Wallet
    can_delete = False
    readonly_fields = [
        'total_sales', 'total_earnings', 'total_withdrawn',
        'available_balance', 'pending_balance',
    ]
    fields = [
        'commission_rate', 'account_name', 'account_number', 'bank_name', 'branch_code',
        *readonly_fields,
    ]


class TransactionInline(admin.TabularInline):
    model = Transaction
    extra = 0
    fields = ['transaction_type', 'amount', 'status', 'reference', 'vendor_order', 'created_at']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


# ==========================================
# VENDOR ADMIN
# ==========================================

@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = [
        'business_name', 'user_email', 'business_phone', 'status_display',
        'rating', 'review_count', 'created_at'
    ]
    list_filter = ['status', 'business_type', 'created_at']
    search_fields = ['business_name', 'business_email', 'user__email', 'business_phone']
    readonly_fields = [
        'user', 'status', 'status_reason', 'status_updated_at',
        'rating', 'review_count', 'created_at', 'updated_at'
    ]

    fieldsets = (
        ('Business', {
            'fields': (
                'user', 'business_name', 'business_email', 'business_phone',
                'business_address', 'business_description', 'business_type', 'tax_id'
            )
        }),
        ('Branding', {
            'fields': ('logo', 'banner')
        }),
        ('Verification', {
            'fields': ('documents', 'status', 'status_reason', 'status_updated_at')
        }),
        ('Ratings (Auto-calculated)', {
            'fields': ('rating', 'review_count')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    inlines = [WalletInline]

    actions = ['approve_vendors', 'suspend_vendors', 'reject_vendors']

    def user_email(self, obj):
        return obj.user.email
    user_email.short_description = 'Email'

    def status_display(self, obj):
        return status_badge(obj)
    status_display.short_description = 'Status'

    def _set_status(self, request, queryset, status, reason):
        count = 0
        for vendor in queryset:
            try:
                update_vendor_status(vendor.pk, status, reason)
                count += 1
            except MarketplaceError as e:
                self.message_user(request, f'{vendor.business_name}: {e.message}', messages.ERROR)
        return count

    # Admin Actions
    def approve_vendors(self, request, queryset):
        count = self._set_status(request, queryset, Vendor.STATUS_APPROVED, '')
        self.message_user(request, f'Approved {count} vendor(s)', messages.SUCCESS)
    approve_vendors.short_description = 'Approve selected vendors'

    def suspend_vendors(self, request, queryset):
        count = self._set_status(request, queryset, Vendor.STATUS_SUSPENDED, 'Suspended by administrator')
        self.message_user(request, f'Suspended {count} vendor(s)', messages.WARNING)
    suspend_vendors.short_description = 'Suspend selected vendors'

    def reject_vendors(self, request, queryset):
        count = self._set_status(request, queryset, Vendor.STATUS_REJECTED, 'Rejected by administrator')
        self.message_user(request, f'Rejected {count} vendor(s)', messages.WARNING)
    reject_vendors.short_description = 'Reject selected vendors'


# ==========================================
# WALLET & LEDGER ADMIN
# ==========================================

@admin.register(Wallet)
class WalletAdmin(admin.ModelAdmin):
    list_display = [
        'vendor_name', 'commission_rate', 'available_balance', 'pending_balance',
        'total_earnings', 'total_withdrawn'
    ]
    search_fields = ['vendor__business_name', 'vendor__user__email']
    readonly_fields = [
        'vendor', 'total_sales', 'total_earnings', 'total_withdrawn',
        'available_balance', 'pending_balance', 'created_at', 'updated_at'
    ]
    inlines = [TransactionInline]
    actions = ['rebuild_balances']

    def vendor_name(self, obj):
        return obj.vendor.business_name
    vendor_name.short_description = 'Vendor'

    def rebuild_balances(self, request, queryset):
        """Recompute totals from the transaction log"""
        for wallet in queryset:
            recompute_wallet(wallet)
        self.message_user(request, f'Rebuilt {queryset.count()} wallet(s)', messages.SUCCESS)
    rebuild_balances.short_description = 'Rebuild balances from transactions'


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = [
        'transaction_id_short', 'wallet_vendor', 'transaction_type', 'amount',
        'status', 'balance_after', 'created_at'
    ]
    list_filter = ['transaction_type', 'status', 'created_at']
    search_fields = ['reference', 'wallet__vendor__business_name']
    readonly_fields = [field.name for field in Transaction._meta.fields]

    def transaction_id_short(self, obj):
        return str(obj.transaction_id)[:8]
    transaction_id_short.short_description = 'Transaction ID'

    def wallet_vendor(self, obj):
        return obj.wallet.vendor.business_name
    wallet_vendor.short_description = 'Vendor'

    # The ledger is append-only
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    list_display = ['reference', 'vendor', 'amount', 'status_display', 'payout_method', 'created_at']
    list_filter = ['status', 'payout_method', 'created_at']
    search_fields = ['reference', 'vendor__business_name']
    readonly_fields = ['vendor', 'amount', 'reference', 'bank_details', 'created_at']

    def status_display(self, obj):
        return status_badge(obj)
    status_display.short_description = 'Status'


# ==========================================
# PRODUCT ADMIN
# ==========================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'vendor', 'price', 'stock', 'status_display', 'rating', 'review_count']
    list_filter = ['status', 'created_at']
    search_fields = ['name', 'vendor__business_name']
    readonly_fields = ['status', 'status_reason', 'rating', 'review_count', 'created_at', 'updated_at']
    actions = ['approve_products', 'reject_products']

    def status_display(self, obj):
        return status_badge(obj)
    status_display.short_description = 'Status'

    def approve_products(self, request, queryset):
        for product in queryset:
            set_product_status(product.pk, Product.STATUS_APPROVED)
        self.message_user(request, f'Approved {queryset.count()} product(s)', messages.SUCCESS)
    approve_products.short_description = 'Approve selected products'

    def reject_products(self, request, queryset):
        for product in queryset:
            set_product_status(product.pk, Product.STATUS_REJECTED, 'Rejected by administrator')
        self.message_user(request, f'Rejected {queryset.count()} product(s)', messages.WARNING)
    reject_products.short_description = 'Reject selected products'


# ==========================================
# VENDOR GROUPS
# ==========================================

class VendorGroupMembershipInline(admin.TabularInline):
    model = VendorGroupMembership
    extra = 1
    fields = ['vendor', 'is_primary']


@admin.register(VendorGroup)
class VendorGroupAdmin(admin.ModelAdmin):
    list_display = ['name', 'member_count', 'created_at']
    search_fields = ['name', 'memberships__vendor__business_name']
    inlines = [VendorGroupMembershipInline]

    def member_count(self, obj):
        return obj.memberships.count()
    member_count.short_description = 'Vendors'
