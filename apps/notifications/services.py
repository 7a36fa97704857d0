"""
Notification Service
In-app notifications plus transactional email

Email:
- Django email backend (SMTP, console, ...)
- Mock mode logs instead of sending (USE_MOCK_NOTIFICATIONS, default on)

Failures to send email are logged and reported as False, never raised.
"""

import logging
from typing import Dict, Iterable, List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Q
from django.utils import timezone

from core.exceptions import NotFoundError, ValidationError
from core.utils.email_service import clean_recipients, send_marketplace_email
from core.utils.helpers import format_currency
from .models import Notification

logger = logging.getLogger(__name__)

User = get_user_model()


class EmailService:
    """
    Email service over Django's configured backend
    """

    @property
    def use_mock(self) -> bool:
        return bool(getattr(settings, 'USE_MOCK_NOTIFICATIONS', True))

    @property
    def from_email(self) -> str:
        return getattr(settings, 'DEFAULT_FROM_EMAIL', 'noreply@aronegifts.lk')

    def send_email(
        self,
        to_email,
        subject: str,
        message: str,
        html_message: Optional[str] = None,
        from_email: Optional[str] = None
    ) -> bool:
        """
        Send email using Django's email backend

        Args:
            to_email: Recipient email, or a list of them
            subject: Email subject
            message: Plain text message
            html_message: HTML message (optional)
            from_email: Sender email (optional, uses default)

        Returns:
            True if sent successfully, False otherwise
        """
        recipients = clean_recipients([to_email] if isinstance(to_email, str) else to_email)
        if not recipients:
            logger.warning(f'Email "{subject}" skipped: no recipient')
            return False

        if self.use_mock:
            return self._mock_send_email(', '.join(recipients), subject, message)

        try:
            send_marketplace_email(
                subject=subject,
                message=message,
                recipient_list=recipients,
                html_message=html_message,
                from_email=from_email or self.from_email,
            )
            return True

        except Exception as e:
            logger.error(f'Email send error: {str(e)}')
            return False

    def _mock_send_email(self, to_email: str, subject: str, message: str) -> bool:
        """Mock email sending for development and tests"""
        logger.info(f'[MOCK EMAIL] To: {to_email} | Subject: {subject}')
        logger.info(f'[MOCK EMAIL] Message: {message[:100]}...')
        return True


class NotificationService:
    """
    In-app inbox operations and the emails that accompany them
    """

    def __init__(self):
        self.email = EmailService()

    # ==========================================
    # INBOX
    # ==========================================

    def create(self, user_id, notification_type: str, title: str, message: str,
               link: Optional[str] = None, data: Optional[Dict] = None) -> Notification:
        """Create one in-app notification"""
        if user_id in (None, ''):
            raise ValidationError('user_id is required', field='user_id')
        if notification_type not in dict(Notification.NOTIFICATION_TYPE_CHOICES):
            raise ValidationError(f'Unknown notification type: {notification_type}', field='type')
        if not title:
            raise ValidationError('title is required', field='title')

        return Notification.objects.create(
            user_id=user_id,
            notification_type=notification_type,
            title=title,
            message=message or '',
            link=link or None,
            data=data or {},
        )

    def notify(self, user_id, template: Dict, data: Optional[Dict] = None) -> Notification:
        """Create a notification from a catalogue template"""
        return self.create(
            user_id=user_id,
            notification_type=template['type'],
            title=template['title'],
            message=template['message'],
            link=template.get('link'),
            data=data,
        )

    def list_for_user(self, user_id, unread_only: bool = False, limit: int = 50) -> List[Notification]:
        notifications = Notification.objects.filter(user_id=user_id).order_by('-created_at', '-pk')
        if unread_only:
            notifications = notifications.filter(is_read=False)
        if limit:
            notifications = notifications[:int(limit)]
        return list(notifications)

    def unread_count(self, user_id) -> int:
        return Notification.objects.filter(user_id=user_id, is_read=False).count()

    def _get(self, notification_id, user_id=None) -> Notification:
        notifications = Notification.objects.filter(pk=notification_id) if str(notification_id).isdigit() else None
        if notifications is not None and user_id is not None:
            notifications = notifications.filter(user_id=user_id)
        notification = notifications.first() if notifications is not None else None
        if notification is None:
            raise NotFoundError('Notification', notification_id)
        return notification

    def mark_read(self, notification_id, user_id=None) -> Notification:
        notification = self._get(notification_id, user_id)
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = timezone.now()
            notification.save(update_fields=['is_read', 'read_at'])
        return notification

    def mark_all_read(self, user_id) -> int:
        return Notification.objects.filter(user_id=user_id, is_read=False).update(
            is_read=True,
            read_at=timezone.now(),
        )

    def delete(self, notification_id, user_id=None) -> bool:
        self._get(notification_id, user_id).delete()
        return True

    def delete_all(self, user_id) -> int:
        deleted, _ = Notification.objects.filter(user_id=user_id).delete()
        return deleted

    def send_bulk(self, user_ids: Iterable, template: Dict) -> List[Notification]:
        """Send the same notification to many users in one insert"""
        user_ids = [user_id for user_id in dict.fromkeys(user_ids or []) if user_id not in (None, '')]
        if not user_ids:
            return []
        if template.get('type') not in dict(Notification.NOTIFICATION_TYPE_CHOICES):
            raise ValidationError(f'Unknown notification type: {template.get("type")}', field='type')

        notifications = Notification.objects.bulk_create([
            Notification(
                user_id=user_id,
                notification_type=template['type'],
                title=template['title'],
                message=template.get('message', ''),
                link=template.get('link') or None,
                data=template.get('data') or {},
            )
            for user_id in user_ids
        ])
        logger.info(f'Sent {len(notifications)} notification(s): {template["title"]}')
        return notifications

    def admin_user_ids(self) -> List[int]:
        return list(
            User.objects.filter(Q(role=User.ROLE_ADMIN) | Q(is_superuser=True))
            .filter(is_active=True)
            .values_list('pk', flat=True)
        )

    def notify_admins(self, template: Dict) -> List[Notification]:
        return self.send_bulk(self.admin_user_ids(), template)

    # ==========================================
    # EMAILS
    # ==========================================

    def send_order_confirmation(self, order) -> bool:
        """Email the customer a summary of a new order"""
        lines = '\n'.join(
            f"- {item.get('name') or 'Item'} x {item.get('quantity')} @ {format_currency(item.get('price') or 0)}"
            for item in order.items
        )
        return self.email.send_email(
            to_email=order.customer_email,
            subject=f'Order Confirmation - #{order.order_code}',
            message=f"""
Hello {order.customer_name or 'there'},

Thank you for your order #{order.order_code}.

{lines}

Total: {format_currency(order.total_amount)}

Track your order: {settings.SITE_URL}{order.link}

Best regards,
{settings.SITE_NAME} Team
            """,
        )

    def send_order_status_update(self, order, status: str) -> bool:
        """Email the customer when their order (or part of it) changes status"""
        status_messages = {
            'confirmed': 'Your order has been confirmed and is being prepared.',
            'processing': 'Your order is being processed.',
            'shipped': 'Your order has been shipped.',
            'delivered': 'Your order has been delivered. Enjoy your purchase!',
            'cancelled': 'Your order has been cancelled.',
        }
        message = status_messages.get(status, f'Your order status: {status}')

        return self.email.send_email(
            to_email=order.customer_email,
            subject=f'Order Update - #{order.order_code}',
            message=f"""
Hello,

{message}

Order ID: #{order.order_code}
Total: {format_currency(order.total_amount)}

Thank you for shopping on {settings.SITE_NAME}!

Best regards,
{settings.SITE_NAME} Team
            """,
        )

    def send_new_order(self, vendor_order) -> bool:
        """Email the vendor about their part of a new order"""
        vendor = vendor_order.vendor
        return self.email.send_email(
            to_email=vendor.business_email or vendor.user.email,
            subject=f'New Order Received - #{vendor_order.order.order_code}',
            message=f"""
Hello {vendor.business_name},

You have received a new order #{vendor_order.order.order_code} worth {format_currency(vendor_order.subtotal)}.

View it in your dashboard: {settings.SITE_URL}/vendor/orders/{vendor_order.order.order_code}

Best regards,
{settings.SITE_NAME} Team
            """,
        )

    def send_vendor_status_update(self, vendor, status: str, reason: str = '') -> bool:
        subjects = {
            'approved': 'Your Vendor Account is Approved!',
            'suspended': 'Your Vendor Account has been Suspended',
            'rejected': 'Vendor Application Update',
        }
        return self.email.send_email(
            to_email=vendor.user.email,
            subject=subjects.get(status, 'Vendor Account Update'),
            message=f"""
Hello {vendor.business_name},

Your vendor account status is now: {status}.
{f'Reason: {reason}' if reason else ''}

Best regards,
{settings.SITE_NAME} Team
            """,
        )

    def notify_admin_new_vendor(self, vendor) -> bool:
        """Email the admin addresses about a vendor awaiting approval"""
        admin_emails = getattr(settings, 'ADMIN_EMAILS', [])
        if not admin_emails:
            return False

        return self.email.send_email(
            to_email=admin_emails,
            subject=f'New Vendor Pending Review - {vendor.business_name}',
            message=f"""
New vendor pending review:

Business: {vendor.business_name}
Email: {vendor.business_email or vendor.user.email}
Phone: {vendor.business_phone}
Type: {vendor.business_type or 'Not set'}

Review in admin: {settings.SITE_URL}/admin/vendors/vendor/{vendor.pk}/change/

Best regards,
{settings.SITE_NAME} System
            """,
        )


# Singleton instance
notification_service = NotificationService()
