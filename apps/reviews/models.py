"""
Reviews App Models
Product and store reviews with moderation status
"""

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models


class Review(models.Model):
    """
    Customer review of a product, or of a store when product is empty
    Only approved reviews count toward product/vendor ratings
    """

    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending Moderation'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]

    # Subject
    product = models.ForeignKey(
        'vendors.Product',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='reviews'
    )
    product_name = models.CharField(max_length=200, blank=True, null=True)
    vendor = models.ForeignKey('vendors.Vendor', on_delete=models.CASCADE, related_name='reviews')
    vendor_name = models.CharField(max_length=200, blank=True, null=True)

    # Author
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='reviews'
    )
    customer_name = models.CharField(max_length=200, default='Anonymous')
    order = models.ForeignKey(
        'orders.Order',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviews'
    )

    # Content
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    title = models.CharField(max_length=200, blank=True)
    comment = models.TextField(blank=True)
    images = models.JSONField(default=list, blank=True)

    # Moderation
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    moderation_reason = models.CharField(max_length=100, blank=True)

    helpful = models.PositiveIntegerField(default=0)
    vendor_reply = models.JSONField(null=True, blank=True, help_text="{'text': ..., 'replied_at': ...}")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Review"
        verbose_name_plural = "Reviews"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['product', 'status'], name='review_product_status_idx'),
            models.Index(fields=['vendor', 'status'], name='review_vendor_status_idx'),
            models.Index(fields=['customer', 'status'], name='review_customer_status_idx'),
        ]

    def __str__(self):
        subject = self.product_name or self.vendor_name or 'store'
        return f"{self.rating}★ {subject} - {self.status}"

    @property
    def is_store_review(self):
        return self.product_id is None
