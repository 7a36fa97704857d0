"""
Order Lifecycle
Status transitions for sub-orders and the overall order, tracking,
cancellation, returns and payment status

Each mutation locks the row it changes, checks the transition against the
locked value and writes in the same transaction.
"""

import logging
from typing import Optional, Union

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from core.exceptions import NotFoundError, StateError, ValidationError
from apps.notifications import events
from apps.orders import status as statuses
from apps.orders.models import Order, VendorOrder
from apps.vendors.services import ledger

logger = logging.getLogger(__name__)


def _locked_order(order_id_or_code) -> Order:
    """Lock an order row found by primary key or order code"""
    if order_id_or_code in (None, ''):
        raise NotFoundError('Order', order_id_or_code)

    lookup = Q(order_code=str(order_id_or_code))
    if str(order_id_or_code).isdigit():
        lookup |= Q(pk=int(order_id_or_code))

    order = Order.objects.select_for_update().filter(lookup).order_by('pk').first()
    if order is None:
        raise NotFoundError('Order', order_id_or_code)
    return order


def _locked_vendor_order(order: Order, vendor_id) -> VendorOrder:
    vendor_order = None
    if str(vendor_id).isdigit():
        vendor_order = (
            VendorOrder.objects.select_for_update()
            .filter(order=order, vendor_id=int(vendor_id))
            .first()
        )
    if vendor_order is None:
        raise NotFoundError('Vendor order', f'{order.order_code}/{vendor_id}')
    return vendor_order


def _set_vendor_order_status(vendor_order: VendorOrder, new_status: str, extra_fields=()):
    previous_status = vendor_order.status
    now = timezone.now()

    vendor_order.status = new_status
    vendor_order.status_updated_at = now
    fields = ['status', 'status_updated_at', 'updated_at', *extra_fields]
    if new_status == statuses.DELIVERED:
        vendor_order.delivered_at = now
        fields.append('delivered_at')
    vendor_order.save(update_fields=fields)

    if new_status == statuses.DELIVERED:
        ledger.credit_vendor_order(vendor_order)
    elif new_status == statuses.CANCELLED:
        ledger.release_pending_credit(vendor_order)

    events.emit(
        events.vendor_order_status_changed,
        sender=VendorOrder,
        vendor_order=vendor_order,
        previous_status=previous_status,
        new_status=new_status,
    )
    logger.info(
        f'Order {vendor_order.order.order_code} vendor {vendor_order.vendor_id}: '
        f'{previous_status} -> {new_status}'
    )


def _set_order_status(order: Order, new_status: str, extra_fields=()):
    previous_status = order.order_status
    order.order_status = new_status
    order.save(update_fields=['order_status', 'updated_at', *extra_fields])

    events.emit(
        events.order_status_changed,
        sender=Order,
        order=order,
        previous_status=previous_status,
        new_status=new_status,
    )
    logger.info(f'Order {order.order_code}: {previous_status} -> {new_status}')


def _rollup_order_status(order: Order):
    """Mark the order delivered once every sub-order is delivered"""
    if not getattr(settings, 'ORDER_STATUS_ROLLUP', False):
        return
    if order.order_status in statuses.TERMINAL_STATUSES:
        return

    sub_statuses = set(order.vendor_orders.values_list('status', flat=True))
    if sub_statuses == {statuses.DELIVERED}:
        _set_order_status(order, statuses.DELIVERED)


# ==========================================
# STATUS UPDATES
# ==========================================

def update_order_status(order_id, new_status: str, acting_vendor_id=None) -> Union[Order, VendorOrder]:
    """
    Move a sub-order (vendor given) or the overall order (no vendor) to a new status

    Forward moves may skip steps; cancelled is allowed from any non-terminal
    status. A sub-order reaching delivered credits the vendor's wallet in
    the same transaction.

    Returns:
        The updated VendorOrder (vendor-scoped) or Order (overall)

    Raises:
        ValidationError: unknown status
        NotFoundError: unknown order or vendor not part of the order
        StateError: same-state, backward or out-of-terminal move
    """
    statuses.validate_status(new_status)

    with transaction.atomic():
        order = _locked_order(order_id)

        if acting_vendor_id not in (None, ''):
            vendor_order = _locked_vendor_order(order, acting_vendor_id)
            statuses.check_transition(vendor_order.status, new_status, axis='vendor order')
            _set_vendor_order_status(vendor_order, new_status)
            if new_status == statuses.DELIVERED:
                _rollup_order_status(order)
            return vendor_order

        statuses.check_transition(order.order_status, new_status, axis='order')
        _set_order_status(order, new_status)
        return order


def add_tracking_info(order_id, vendor_id, tracking_number: str, carrier: str = '') -> VendorOrder:
    """
    Attach tracking to a vendor's sub-order and mark it shipped

    A sub-order that is already shipped only has its tracking replaced.
    """
    tracking_number = str(tracking_number or '').strip()
    if not tracking_number:
        raise ValidationError('tracking_number is required', field='tracking_number')
    carrier = str(carrier or '').strip()

    with transaction.atomic():
        order = _locked_order(order_id)
        vendor_order = _locked_vendor_order(order, vendor_id)

        if vendor_order.status in statuses.TERMINAL_STATUSES:
            raise StateError(vendor_order.status, statuses.SHIPPED, axis='vendor order')

        vendor_order.tracking_number = tracking_number
        vendor_order.carrier = carrier

        if vendor_order.status == statuses.SHIPPED:
            vendor_order.save(update_fields=['tracking_number', 'carrier', 'updated_at'])
            logger.info(f'Tracking updated for order {order.order_code} vendor {vendor_id}')
        else:
            _set_vendor_order_status(vendor_order, statuses.SHIPPED, extra_fields=('tracking_number', 'carrier'))

    return vendor_order


def cancel_order(order_id, reason: str, cancelled_by) -> Order:
    """Cancel the overall order and record who cancelled it and why"""
    with transaction.atomic():
        order = _locked_order(order_id)
        statuses.check_transition(order.order_status, statuses.CANCELLED, axis='order')

        order.cancellation = {
            'reason': reason or '',
            'cancelled_by': None if cancelled_by is None else str(cancelled_by),
            'cancelled_at': timezone.now().isoformat(),
        }
        _set_order_status(order, statuses.CANCELLED, extra_fields=('cancellation',))

    return order


# ==========================================
# RETURNS & PAYMENT
# ==========================================

def request_return(order_id, item_id, reason: str) -> dict:
    """
    Append a return request for one line item

    Returns:
        The stored return record
    """
    if item_id in (None, ''):
        raise ValidationError('item_id is required', field='item_id')
    reason = str(reason or '').strip()
    if not reason:
        raise ValidationError('reason is required', field='reason')

    with transaction.atomic():
        order = _locked_order(order_id)

        product_ids = {str(item.get('product_id')) for item in order.items}
        if str(item_id) not in product_ids:
            raise NotFoundError('Order item', item_id)

        record = {
            'item_id': item_id,
            'reason': reason,
            'status': 'requested',
            'requested_at': timezone.now().isoformat(),
        }
        order.returns = list(order.returns or []) + [record]
        order.save(update_fields=['returns', 'updated_at'])

    logger.info(f'Return requested on order {order.order_code} for item {item_id}')
    return record


def update_payment_status(order_id, payment_status: str, transaction_id: Optional[str] = None) -> Order:
    """
    Record the payment status reported by the payment collaborator

    On completed: stamps paid_at and books each active sub-order's net
    amount as pending balance for its vendor.
    """
    if payment_status not in dict(statuses.PAYMENT_STATUS_CHOICES):
        raise ValidationError(f'Unknown payment status: {payment_status}', field='payment_status')

    with transaction.atomic():
        order = _locked_order(order_id)

        order.payment_status = payment_status
        fields = ['payment_status', 'updated_at']
        if transaction_id:
            order.transaction_id = transaction_id
            fields.append('transaction_id')

        if payment_status == statuses.PAYMENT_COMPLETED:
            if order.paid_at is None:
                order.paid_at = timezone.now()
                fields.append('paid_at')
            order.save(update_fields=fields)

            for vendor_order in order.vendor_orders.exclude(status=statuses.CANCELLED):
                if vendor_order.status != statuses.DELIVERED:
                    ledger.book_pending_credit(vendor_order)
        else:
            order.save(update_fields=fields)

    logger.info(f'Order {order.order_code} payment status: {payment_status}')
    return order
