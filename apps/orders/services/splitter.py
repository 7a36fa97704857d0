"""
Order Splitter
Turns a checkout payload into an Order plus one VendorOrder per vendor
"""

import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Q

from core.exceptions import NotFoundError, PersistenceError, ValidationError
from core.utils.helpers import generate_order_code, quantize_money, sanitize_document, to_decimal
from apps.notifications import events
from apps.orders import status as statuses
from apps.orders.models import Order, VendorOrder
from apps.vendors.models import Vendor

logger = logging.getLogger(__name__)

User = get_user_model()

ITEM_FIELDS = (
    'product_id',
    'vendor_id',
    'vendor_name',
    'name',
    'price',
    'quantity',
    'image',
    'selected_variant',
)

ADDRESS_REQUIRED_FIELDS = ('name', 'phone', 'address', 'city')


# ==========================================
# VALIDATION
# ==========================================

def _clean_quantity(value, index: int) -> int:
    field = f'items[{index}].quantity'
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be a whole number', field=field)
    try:
        quantity = Decimal(str(value))
    except (ArithmeticError, ValueError):
        raise ValidationError(f'{field} must be a whole number', field=field)
    if not quantity.is_finite() or quantity != quantity.to_integral_value():
        raise ValidationError(f'{field} must be a whole number', field=field)
    if quantity < 1:
        raise ValidationError(f'{field} must be at least 1', field=field)
    return int(quantity)


def _clean_items(items) -> List[Dict]:
    if not isinstance(items, (list, tuple)) or not items:
        raise ValidationError('Order must contain at least one item', field='items')

    cleaned = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f'items[{index}] must be an object', field='items')

        vendor_id = item.get('vendor_id')
        if vendor_id in (None, ''):
            raise ValidationError(f'items[{index}].vendor_id is required', field=f'items[{index}].vendor_id')

        price = to_decimal(item.get('price'), f'items[{index}].price')
        if price < 0:
            raise ValidationError(f'items[{index}].price must not be negative', field=f'items[{index}].price')

        try:
            vendor_id = int(vendor_id)
        except (TypeError, ValueError):
            raise ValidationError(f'Unknown vendor: {vendor_id}', field=f'items[{index}].vendor_id')

        cleaned_item = dict(item)
        cleaned_item['vendor_id'] = vendor_id
        cleaned_item['price'] = quantize_money(price)
        cleaned_item['quantity'] = _clean_quantity(item.get('quantity'), index)
        cleaned.append(cleaned_item)

    return cleaned


def _clean_address(address, field: str = 'shipping_address') -> Dict:
    if not isinstance(address, dict) or not address:
        raise ValidationError(f'{field} is required', field=field)

    missing = [key for key in ADDRESS_REQUIRED_FIELDS if not str(address.get(key) or '').strip()]
    if missing:
        raise ValidationError(f'{field} is missing: {", ".join(missing)}', field=field)
    return address


def _optional_money(payload: Dict, field: str) -> Decimal:
    value = payload.get(field)
    if value in (None, ''):
        return Decimal('0.00')
    amount = quantize_money(to_decimal(value, field))
    if amount < 0:
        raise ValidationError(f'{field} must not be negative', field=field)
    return amount


def _resolve_customer(payload: Dict) -> Optional[User]:
    customer_id = payload.get('customer_id')
    customer_email = str(payload.get('customer_email') or '').strip()

    if customer_id in (None, '') and not customer_email:
        raise ValidationError('customer_id or customer_email is required', field='customer_id')

    if customer_id in (None, ''):
        return None

    customer = None
    if str(customer_id).isdigit():
        customer = User.objects.filter(pk=int(customer_id)).first()
    if customer is None:
        raise ValidationError(f'Unknown customer: {customer_id}', field='customer_id')
    return customer


def group_items_by_vendor(items: List[Dict]) -> "OrderedDict[str, Dict]":
    """
    Group line items by vendor id, keeping the first-seen vendor order

    Returns:
        OrderedDict vendor_id -> {'vendor_id', 'vendor_name', 'items', 'subtotal'}
    """
    groups: "OrderedDict[str, Dict]" = OrderedDict()
    for item in items:
        key = str(item['vendor_id'])
        if key not in groups:
            groups[key] = {
                'vendor_id': item['vendor_id'],
                'vendor_name': item.get('vendor_name'),
                'items': [],
                'subtotal': Decimal('0.00'),
            }
        group = groups[key]
        group['items'].append(item)
        group['subtotal'] += item['price'] * item['quantity']

    for group in groups.values():
        group['subtotal'] = quantize_money(group['subtotal'])
    return groups


# ==========================================
# CREATE
# ==========================================

def create_order(payload: Dict) -> Order:
    """
    Validate a checkout payload and persist the order with its sub-orders

    Line items are grouped by vendor in first-seen order, each group's
    subtotal is sum(price * quantity) and every sub-order starts pending.
    Order and sub-orders are written in one transaction.

    Raises:
        ValidationError: Bad items/address/customer or inconsistent totals
        PersistenceError: The write failed (nothing was saved)
    """
    if not isinstance(payload, dict):
        raise ValidationError('Order payload must be an object')

    items = _clean_items(payload.get('items'))
    shipping_address = _clean_address(payload.get('shipping_address'))
    billing_address = payload.get('billing_address') or shipping_address
    customer = _resolve_customer(payload)

    groups = group_items_by_vendor(items)

    vendor_keys = list(groups)
    vendors = {str(v.pk): v for v in Vendor.objects.filter(pk__in=[g['vendor_id'] for g in groups.values()])}
    unknown = [key for key in vendor_keys if key not in vendors]
    if unknown:
        raise ValidationError(f'Unknown vendor: {", ".join(unknown)}', field='vendor_id')

    computed_subtotal = sum((g['subtotal'] for g in groups.values()), Decimal('0.00'))
    if payload.get('subtotal') not in (None, ''):
        subtotal = quantize_money(to_decimal(payload['subtotal'], 'subtotal'))
        if subtotal != computed_subtotal:
            raise ValidationError(
                f'subtotal {subtotal} does not match item total {computed_subtotal}',
                field='subtotal',
            )
    subtotal = computed_subtotal

    shipping_cost = _optional_money(payload, 'shipping_cost')
    tax = _optional_money(payload, 'tax')
    discount = _optional_money(payload, 'discount')

    expected_total = subtotal + shipping_cost + tax - discount
    if payload.get('total_amount') not in (None, ''):
        total_amount = quantize_money(to_decimal(payload['total_amount'], 'total_amount'))
        if total_amount != expected_total:
            raise ValidationError(
                f'total_amount {total_amount} does not match {expected_total}',
                field='total_amount',
            )
    total_amount = expected_total
    if total_amount < 0:
        raise ValidationError('total_amount must not be negative', field='total_amount')

    max_attempts = max(1, int(getattr(settings, 'ORDER_CODE_MAX_ATTEMPTS', 3)))

    for attempt in range(1, max_attempts + 1):
        order_code = generate_order_code()
        try:
            with transaction.atomic():
                order = Order.objects.create(
                    order_code=order_code,
                    customer=customer,
                    customer_email=str(payload.get('customer_email') or getattr(customer, 'email', '') or ''),
                    customer_name=str(payload.get('customer_name') or getattr(customer, 'full_name', '') or ''),
                    shipping_address=sanitize_document(shipping_address, ADDRESS_REQUIRED_FIELDS),
                    billing_address=sanitize_document(billing_address),
                    items=sanitize_document(items, ITEM_FIELDS),
                    subtotal=subtotal,
                    shipping_cost=shipping_cost,
                    tax=tax,
                    discount=discount,
                    coupon_code=payload.get('coupon_code') or None,
                    total_amount=total_amount,
                    payment_method=str(payload.get('payment_method') or ''),
                    notes=str(payload.get('notes') or ''),
                )

                vendor_orders = VendorOrder.objects.bulk_create([
                    VendorOrder(
                        order=order,
                        vendor=vendors[key],
                        vendor_name=group['vendor_name'] or vendors[key].business_name,
                        position=position,
                        items=sanitize_document(group['items'], ITEM_FIELDS),
                        subtotal=group['subtotal'],
                        status=statuses.PENDING,
                    )
                    for position, (key, group) in enumerate(groups.items())
                ])

                events.emit(events.order_placed, sender=Order, order=order, vendor_orders=vendor_orders)
        except IntegrityError as e:
            if Order.objects.filter(order_code=order_code).exists() and attempt < max_attempts:
                logger.warning(f'Order code collision on {order_code}, retrying ({attempt}/{max_attempts})')
                continue
            logger.error(f'Order creation failed: {e}')
            raise PersistenceError()
        except DatabaseError as e:
            logger.error(f'Order creation failed: {e}')
            raise PersistenceError()

        logger.info(
            f'Order {order.order_code} created: {len(vendor_orders)} vendor order(s), total {total_amount}'
        )
        return order

    raise PersistenceError()


# ==========================================
# LOOKUPS
# ==========================================

def get_order(order_id_or_code) -> Order:
    """
    Fetch an order by primary key or by order code

    Raises:
        NotFoundError: Neither matches
    """
    if order_id_or_code in (None, ''):
        raise NotFoundError('Order', order_id_or_code)

    orders = Order.objects.prefetch_related('vendor_orders')
    lookup = Q(order_code=str(order_id_or_code))
    if str(order_id_or_code).isdigit():
        lookup |= Q(pk=int(order_id_or_code))

    order = orders.filter(lookup).order_by('pk').first()
    if order is None:
        raise NotFoundError('Order', order_id_or_code)
    return order


def list_customer_orders(customer_id) -> List[Order]:
    """Orders placed by a customer, newest first"""
    return list(
        Order.objects.filter(customer_id=customer_id)
        .prefetch_related('vendor_orders')
        .order_by('-created_at', '-pk')
    )


def list_vendor_orders(vendor_id, status: Optional[str] = None) -> List[VendorOrder]:
    """A vendor's sub-orders (with their parent order), newest first"""
    vendor_orders = VendorOrder.objects.filter(vendor_id=vendor_id).select_related('order')
    if status:
        vendor_orders = vendor_orders.filter(status=statuses.validate_status(status))
    return list(vendor_orders.order_by('-order__created_at', '-order_id'))


def list_all_orders(status: Optional[str] = None, limit: int = 50) -> List[Order]:
    """Most recent orders across the marketplace (admin)"""
    orders = Order.objects.prefetch_related('vendor_orders').order_by('-created_at', '-pk')
    if status:
        orders = orders.filter(order_status=statuses.validate_status(status))
    if limit:
        orders = orders[:int(limit)]
    return list(orders)
