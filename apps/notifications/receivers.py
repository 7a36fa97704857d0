"""
Notification Receivers
Turn marketplace events into in-app notifications and emails
"""

import logging

from django.dispatch import receiver

from apps.orders import status as statuses
from . import events, templates
from .services import notification_service

logger = logging.getLogger(__name__)

ORDER_STATUS_TEMPLATES = {
    statuses.CONFIRMED: templates.order_confirmed,
    statuses.PROCESSING: templates.order_processing,
    statuses.DELIVERED: templates.order_delivered,
}


def _best_effort(label, send, *args):
    """Run one send; a failure is logged so the remaining recipients still hear about it"""
    try:
        send(*args)
    except Exception as e:
        logger.error(f'Notification "{label}" failed: {e}')


# ==========================================
# ORDERS
# ==========================================

@receiver(events.order_placed)
def notify_order_placed(sender, order, vendor_orders=None, **kwargs):
    """Customer confirmation, one note per vendor and one per admin"""
    data = {'order_id': order.pk, 'order_code': order.order_code}

    if order.customer_id:
        _best_effort('order placed', notification_service.notify,
                     order.customer_id, templates.order_placed(order.order_code), data)
    _best_effort('order confirmation email', notification_service.send_order_confirmation, order)

    for vendor_order in order.vendor_orders.select_related('vendor__user'):
        _best_effort(f'new order for vendor {vendor_order.vendor_id}', notification_service.notify,
                     vendor_order.vendor_id, templates.vendor_new_order(order.order_code), data)
        _best_effort(f'new order email for vendor {vendor_order.vendor_id}',
                     notification_service.send_new_order, vendor_order)

    _best_effort('admin new order', notification_service.notify_admins,
                 dict(templates.admin_new_order(order.order_code, order.total_amount), data=data))


@receiver(events.vendor_order_status_changed)
def notify_vendor_order_status(sender, vendor_order, new_status, **kwargs):
    """Tell the customer when a vendor ships, delivers or cancels their items"""
    if new_status not in statuses.CUSTOMER_NOTIFIED_STATUSES:
        return

    order = vendor_order.order
    data = {'order_id': order.pk, 'order_code': order.order_code, 'vendor_id': vendor_order.vendor_id}

    if new_status == statuses.SHIPPED and vendor_order.tracking_number:
        template = templates.order_shipped(order.order_code, vendor_order.tracking_number)
    else:
        template = templates.order_items_status_update(order.order_code, new_status)

    if order.customer_id:
        notification_service.notify(order.customer_id, template, data)
    notification_service.send_order_status_update(order, new_status)


@receiver(events.order_status_changed)
def notify_order_status(sender, order, new_status, **kwargs):
    """Every overall status change is reported to the customer"""
    data = {'order_id': order.pk, 'order_code': order.order_code}

    if new_status == statuses.SHIPPED:
        template = templates.order_shipped(order.order_code)
    elif new_status in ORDER_STATUS_TEMPLATES:
        template = ORDER_STATUS_TEMPLATES[new_status](order.order_code)
    else:
        template = templates.order_status_update(order.order_code, new_status)

    if order.customer_id:
        notification_service.notify(order.customer_id, template, data)
    notification_service.send_order_status_update(order, new_status)


# ==========================================
# VENDORS & PRODUCTS
# ==========================================

@receiver(events.vendor_registered)
def notify_vendor_registered(sender, vendor, **kwargs):
    notification_service.notify_admins(
        dict(templates.admin_new_vendor(vendor.business_name), data={'vendor_id': vendor.pk})
    )
    notification_service.notify_admin_new_vendor(vendor)


@receiver(events.vendor_status_changed)
def notify_vendor_status(sender, vendor, previous_status, new_status, reason='', **kwargs):
    if new_status == previous_status:
        return

    if new_status == 'approved':
        template = templates.vendor_activated() if previous_status == 'suspended' else templates.vendor_approved()
    elif new_status == 'suspended':
        template = templates.vendor_suspended()
    elif new_status == 'rejected':
        template = templates.vendor_rejected(reason)
    else:
        return

    notification_service.notify(vendor.pk, template, {'vendor_id': vendor.pk, 'status': new_status})
    notification_service.send_vendor_status_update(vendor, new_status, reason)


@receiver(events.product_status_changed)
def notify_product_status(sender, product, new_status, reason='', **kwargs):
    if new_status == 'approved':
        template = templates.product_approved(product.name)
    elif new_status == 'rejected':
        template = templates.product_rejected(product.name, reason)
    else:
        return

    notification_service.notify(product.vendor_id, template, {'product_id': product.pk})


@receiver(events.payout_requested)
def notify_payout_requested(sender, payout, **kwargs):
    notification_service.notify(
        payout.vendor_id,
        templates.payout_processing(payout.amount),
        {'payout_id': payout.pk, 'reference': payout.reference},
    )


# ==========================================
# REVIEWS
# ==========================================

@receiver(events.review_submitted)
def notify_review_submitted(sender, review, **kwargs):
    subject_name = review.product_name or review.vendor_name or 'your store'
    notification_service.notify(
        review.vendor_id,
        templates.new_review(subject_name, review.rating),
        {'review_id': review.pk, 'product_id': review.product_id},
    )
