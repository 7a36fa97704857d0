from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin

from apps.vendors.models import Vendor
from .models import CustomUser


class VendorInline(admin.StackedInline):
    """The user's shop, if they registered one"""
    model = Vendor
    can_delete = False
    extra = 0
    fields = ('business_name', 'status', 'status_reason')
    readonly_fields = fields
    show_change_link = True

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    model = CustomUser
    list_display = ('email', 'get_full_name', 'role', 'status', 'shop', 'is_active', 'date_joined')
    list_filter = ('role', 'status', 'is_active', 'is_staff')
    ordering = ('-date_joined',)
    search_fields = ('email', 'username', 'phone', 'vendor__business_name')
    readonly_fields = ('last_login', 'date_joined')
    inlines = [VendorInline]
    actions = ['suspend_users', 'reactivate_users']

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Personal info', {'fields': ('username', 'phone')}),
        ('Marketplace', {'fields': ('role', 'status')}),
        ('Permissions', {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups')}),
        ('Activity', {'fields': ('last_login', 'date_joined'), 'classes': ('collapse',)}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'password1', 'password2', 'role')}
        ),
    )

    def shop(self, obj):
        vendor = getattr(obj, 'vendor', None)
        return f'{vendor.business_name} ({vendor.status})' if vendor else '-'
    shop.short_description = 'Shop'

    def suspend_users(self, request, queryset):
        # Vendor accounts follow their shop status; suspend those from the vendor admin
        updated = queryset.exclude(role=CustomUser.ROLE_VENDOR).update(status=CustomUser.STATUS_SUSPENDED)
        self.message_user(request, f'Suspended {updated} account(s)', messages.WARNING)
    suspend_users.short_description = 'Suspend selected accounts'

    def reactivate_users(self, request, queryset):
        updated = queryset.exclude(role=CustomUser.ROLE_VENDOR).update(status=CustomUser.STATUS_ACTIVE)
        self.message_user(request, f'Reactivated {updated} account(s)', messages.SUCCESS)
    reactivate_users.short_description = 'Reactivate selected accounts'
