"""
Notifications App Models
In-app notifications for customers, vendors and admins
"""

from django.conf import settings
from django.db import models


class Notification(models.Model):
    """
    In-app notification (inbox row)
    Informational only, never the source of truth for order state
    """

    TYPE_ORDER = 'order'
    TYPE_PRODUCT = 'product'
    TYPE_SYSTEM = 'system'
    TYPE_PROMOTION = 'promotion'

    NOTIFICATION_TYPE_CHOICES = [
        (TYPE_ORDER, 'Order Update'),
        (TYPE_PRODUCT, 'Product Update'),
        (TYPE_SYSTEM, 'System Notification'),
        (TYPE_PROMOTION, 'Promotion'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    notification_type = models.CharField(max_length=20, choices=NOTIFICATION_TYPE_CHOICES)
    title = models.CharField(max_length=200)
    message = models.TextField()
    link = models.CharField(max_length=500, blank=True, null=True)
    data = models.JSONField(default=dict, blank=True)

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Notification"
        verbose_name_plural = "Notifications"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'is_read'], name='notification_user_read_idx'),
        ]

    def __str__(self):
        return f"{self.title} - {self.user}"
