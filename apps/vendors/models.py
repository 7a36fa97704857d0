"""
Vendor App Models
Vendor shop profiles, wallets, ledger transactions, payouts, products and vendor groups
"""

from decimal import Decimal
import uuid

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.db.models import Q


def default_commission_rate():
    return getattr(settings, 'DEFAULT_COMMISSION_RATE', Decimal('10.00'))


# ==========================================
# VENDOR PROFILE
# ==========================================

class Vendor(models.Model):
    """
    Seller account / shop profile
    Keyed by the owning user: vendor.pk == user.pk
    """

    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_SUSPENDED = 'suspended'
    STATUS_REJECTED = 'rejected'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending Approval'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_SUSPENDED, 'Suspended'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name='vendor'
    )

    # Business Profile
    business_name = models.CharField(max_length=200)
    business_email = models.EmailField(blank=True)
    business_phone = models.CharField(max_length=20, blank=True)
    business_address = models.TextField(blank=True)
    business_description = models.TextField(blank=True)
    business_type = models.CharField(max_length=50, blank=True)
    tax_id = models.CharField(max_length=50, blank=True, verbose_name="TIN/VAT Number")

    # Media references (uploads are handled elsewhere, we keep URLs)
    logo = models.URLField(max_length=500, blank=True)
    banner = models.URLField(max_length=500, blank=True)
    documents = models.JSONField(
        default=dict,
        blank=True,
        help_text="Verification document URLs keyed by document type"
    )

    # Approval
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    status_reason = models.TextField(blank=True)
    status_updated_at = models.DateTimeField(null=True, blank=True)

    # Rating (maintained by the review moderation service)
    rating = models.DecimalField(max_digits=2, decimal_places=1, default=Decimal('0.0'))
    review_count = models.PositiveIntegerField(default=0)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Vendor"
        verbose_name_plural = "Vendors"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='vendor_status_idx'),
        ]

    def __str__(self):
        return f"{self.business_name} - {self.status}"

    @property
    def is_approved(self):
        return self.status == self.STATUS_APPROVED

    @property
    def is_suspended(self):
        return self.status == self.STATUS_SUSPENDED


# ==========================================
# WALLET & TRANSACTIONS
# ==========================================

class Wallet(models.Model):
    """
    Vendor wallet: payout bank details, commission rate and running balances
    Running totals are a materialized view over Transaction rows
    """
    vendor = models.OneToOneField(Vendor, on_delete=models.CASCADE, related_name='wallet')

    # Bank Account
    account_name = models.CharField(max_length=200, blank=True)
    account_number = models.CharField(max_length=30, blank=True)
    bank_name = models.CharField(max_length=100, blank=True)
    branch_code = models.CharField(max_length=20, blank=True)

    # Commission Rate (can be customized per vendor)
    commission_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=default_commission_rate,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text="Platform commission percentage (e.g., 10.00 for 10%)"
    )

    # Lifetime totals
    total_sales = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Gross value of delivered sub-orders"
    )
    total_earnings = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Net (after commission) value of delivered sub-orders"
    )
    total_withdrawn = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Total amount requested for payout"
    )

    # Balances
    available_balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Available balance (can be withdrawn)"
    )
    pending_balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Pending balance (paid orders not yet delivered)"
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Wallet"
        verbose_name_plural = "Wallets"
        constraints = [
            models.CheckConstraint(
                condition=Q(available_balance__gte=0),
                name='wallet_available_balance_non_negative',
            ),
        ]

    def __str__(self):
        return f"{self.vendor.business_name}'s Wallet - Rs. {self.available_balance}"

    @property
    def bank_details(self):
        """Snapshot of payout bank details"""
        return {
            'account_name': self.account_name,
            'account_number': self.account_number,
            'bank_name': self.bank_name,
            'branch_code': self.branch_code,
        }


class Transaction(models.Model):
    """
    Append-only wallet ledger (sub-order credits, payout debits)
    At most one credit per sub-order
    """

    TYPE_CREDIT = 'credit'
    TYPE_PAYOUT = 'payout'

    TRANSACTION_TYPE_CHOICES = [
        (TYPE_CREDIT, 'Credit'),
        (TYPE_PAYOUT, 'Payout'),
    ]

    STATUS_PENDING = 'pending'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    wallet = models.ForeignKey(Wallet, on_delete=models.CASCADE, related_name='transactions')
    transaction_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)

    # Transaction Details
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPE_CHOICES)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)

    # References
    reference = models.CharField(max_length=100, blank=True)
    description = models.TextField(blank=True)
    vendor_order = models.ForeignKey(
        'orders.VendorOrder',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='transactions'
    )
    payout = models.OneToOneField(
        'Payout',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='transaction'
    )

    # Available balance around the transaction
    balance_before = models.DecimalField(max_digits=12, decimal_places=2)
    balance_after = models.DecimalField(max_digits=12, decimal_places=2)

    # Settlement breakdown (gross, fee, net, commission_rate)
    metadata = models.JSONField(default=dict, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = "Transaction"
        verbose_name_plural = "Transactions"
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['vendor_order'],
                condition=Q(transaction_type='credit'),
                name='unique_credit_per_vendor_order',
            ),
        ]

    def __str__(self):
        return f"{self.transaction_type} - Rs. {self.amount} - {self.status}"


class Payout(models.Model):
    """
    Vendor withdrawal request
    The wallet is debited when the request is created; settlement happens outside
    """

    STATUS_PENDING = 'pending'
    STATUS_PROCESSING = 'processing'
    STATUS_COMPLETED = 'completed'
    STATUS_FAILED = 'failed'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_PROCESSING, 'Processing'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_FAILED, 'Failed'),
    ]

    vendor = models.ForeignKey(Vendor, on_delete=models.PROTECT, related_name='payouts')
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    reference = models.CharField(max_length=100, unique=True)

    bank_details = models.JSONField(default=dict, blank=True, help_text="Bank details at request time")
    payout_method = models.CharField(max_length=50, blank=True, default='bank_transfer')
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Payout"
        verbose_name_plural = "Payouts"
        ordering = ['-created_at']

    def __str__(self):
        return f"Payout {self.reference} - Rs. {self.amount} - {self.status}"


# ==========================================
# PRODUCTS
# ==========================================

class Product(models.Model):
    """
    Catalogue product
    Only the fields the ledger and review services rely on live here
    """

    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending Review'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    vendor = models.ForeignKey(Vendor, on_delete=models.CASCADE, related_name='products')
    name = models.CharField(max_length=200)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    stock = models.PositiveIntegerField(default=0)
    image = models.URLField(max_length=500, blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    status_reason = models.TextField(blank=True)

    # Rating (maintained by the review moderation service)
    rating = models.DecimalField(max_digits=2, decimal_places=1, default=Decimal('0.0'))
    review_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Product"
        verbose_name_plural = "Products"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['vendor', 'status'], name='product_vendor_status_idx'),
        ]

    def __str__(self):
        return self.name


# ==========================================
# VENDOR GROUPS
# ==========================================

class VendorGroup(models.Model):
    """
    Admin-curated storefront identity spanning several vendor records
    Stats for any member are reported across the whole group
    """
    name = models.CharField(max_length=200, unique=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Vendor Group"
        verbose_name_plural = "Vendor Groups"
        ordering = ['name']

    def __str__(self):
        return self.name


class VendorGroupMembership(models.Model):
    group = models.ForeignKey(VendorGroup, on_delete=models.CASCADE, related_name='memberships')
    vendor = models.OneToOneField(Vendor, on_delete=models.CASCADE, related_name='group_membership')
    is_primary = models.BooleanField(default=False)

    class Meta:
        verbose_name = "Vendor Group Membership"
        verbose_name_plural = "Vendor Group Memberships"

    def __str__(self):
        return f"{self.vendor.business_name} → {self.group.name}"
