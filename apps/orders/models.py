"""
Orders App Models
Customer orders and the per-vendor sub-orders they are split into
"""

from decimal import Decimal

from django.conf import settings
from django.db import models

from . import status as statuses


class Order(models.Model):
    """
    Customer order spanning one or more vendors

    Line items, addresses, cancellation and returns are JSON snapshots taken
    at checkout. Line items never change after creation.
    """

    STATUS_CHOICES = statuses.STATUS_CHOICES
    PAYMENT_STATUS_CHOICES = statuses.PAYMENT_STATUS_CHOICES

    order_code = models.CharField(max_length=40, unique=True, editable=False)

    # Customer snapshot
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='orders'
    )
    customer_email = models.EmailField(blank=True)
    customer_name = models.CharField(max_length=200, blank=True)
    shipping_address = models.JSONField(default=dict)
    billing_address = models.JSONField(default=dict, blank=True)

    # Line items (product_id, vendor_id, vendor_name, name, price, quantity, image, selected_variant)
    items = models.JSONField(default=list)

    # Money
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    shipping_cost = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    tax = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    discount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    coupon_code = models.CharField(max_length=50, blank=True, null=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)

    # Payment
    payment_method = models.CharField(max_length=50, blank=True)
    payment_status = models.CharField(
        max_length=20,
        choices=PAYMENT_STATUS_CHOICES,
        default=statuses.PAYMENT_PENDING
    )
    transaction_id = models.CharField(max_length=100, blank=True, null=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    # Overall (administrative) status
    order_status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=statuses.PENDING)
    notes = models.TextField(blank=True)
    cancellation = models.JSONField(null=True, blank=True)
    returns = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Order"
        verbose_name_plural = "Orders"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['customer', '-created_at'], name='order_customer_created_idx'),
            models.Index(fields=['order_status'], name='order_status_idx'),
        ]

    def __str__(self):
        return f"Order {self.order_code} - {self.order_status}"

    @property
    def link(self):
        return f"/orders/{self.order_code}"

    @property
    def vendor_ids(self):
        return [vendor_order.vendor_id for vendor_order in self.vendor_orders.all()]


class VendorOrder(models.Model):
    """
    One vendor's slice of an order, with its own fulfilment status
    Written together with the order and never deleted
    """

    STATUS_CHOICES = statuses.STATUS_CHOICES

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='vendor_orders')
    vendor = models.ForeignKey('vendors.Vendor', on_delete=models.PROTECT, related_name='vendor_orders')
    vendor_name = models.CharField(max_length=200, blank=True)
    position = models.PositiveIntegerField(default=0, help_text="First-seen order of the vendor in the cart")

    items = models.JSONField(default=list)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=statuses.PENDING)
    tracking_number = models.CharField(max_length=100, blank=True, null=True)
    carrier = models.CharField(max_length=100, blank=True, null=True)

    status_updated_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Vendor Order"
        verbose_name_plural = "Vendor Orders"
        ordering = ['order', 'position']
        constraints = [
            models.UniqueConstraint(fields=['order', 'vendor'], name='unique_vendor_per_order'),
        ]
        indexes = [
            models.Index(fields=['vendor', 'status'], name='vendororder_vendor_status_idx'),
        ]

    def __str__(self):
        return f"{self.order.order_code} / {self.vendor_name or self.vendor_id} - {self.status}"
