"""
Vendor Account Service
Registration, profile updates, admin approval and derived customer lists
"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from core.exceptions import NotFoundError, PersistenceError, ValidationError
from core.utils.helpers import Deadline
from apps.notifications import events
from apps.vendors.models import Product, Vendor, Wallet

logger = logging.getLogger(__name__)

User = get_user_model()

PROFILE_FIELDS = (
    'business_name',
    'business_email',
    'business_phone',
    'business_address',
    'business_description',
    'business_type',
    'tax_id',
    'logo',
    'banner',
)

BANK_FIELDS = ('account_name', 'account_number', 'bank_name', 'branch_code')

REQUIRED_REGISTRATION_FIELDS = ('business_name', 'business_email', 'business_phone', 'business_address')


def _clean_documents(documents: Optional[Dict]) -> Dict[str, str]:
    """Keep document entries that are URL strings, drop empty ones"""
    cleaned = {}
    for key, value in (documents or {}).items():
        if not value:
            continue
        if not isinstance(value, str):
            logger.warning(f'Skipping non-URL document "{key}"')
            continue
        cleaned[str(key)] = value.strip()
    return cleaned


# ==========================================
# REGISTRATION
# ==========================================

def register_vendor(user_id, vendor_data: Dict, documents: Optional[Dict] = None,
                    timeout: Optional[float] = None) -> Vendor:
    """
    Register a user as a vendor (status pending)

    The whole registration runs in one transaction under a deadline
    (settings.VENDOR_REGISTRATION_TIMEOUT seconds). Once the deadline
    passes nothing is committed.

    Args:
        user_id: Owning user id (becomes the vendor id)
        vendor_data: Business profile fields plus optional bank fields
        documents: Verification document URLs keyed by type
        timeout: Override for the deadline in seconds

    Raises:
        ValidationError: Missing business fields or user already a vendor
        NotFoundError: Unknown user
        RequestTimeoutError: Deadline exceeded
    """
    vendor_data = vendor_data or {}

    missing = [field for field in REQUIRED_REGISTRATION_FIELDS if not str(vendor_data.get(field) or '').strip()]
    if missing:
        raise ValidationError(f'Missing required fields: {", ".join(missing)}', fields=missing)

    if timeout is None:
        timeout = getattr(settings, 'VENDOR_REGISTRATION_TIMEOUT', 20)
    deadline = Deadline(timeout)

    try:
        with transaction.atomic():
            deadline.check('load user')
            user = User.objects.select_for_update().filter(pk=user_id).first()
            if user is None:
                raise NotFoundError('User', user_id)

            if Vendor.objects.filter(pk=user.pk).exists():
                raise ValidationError('This account is already registered as a vendor')

            deadline.check('create vendor')
            vendor = Vendor.objects.create(
                user=user,
                documents=_clean_documents(documents),
                status=Vendor.STATUS_PENDING,
                **{field: (vendor_data.get(field) or '').strip() for field in PROFILE_FIELDS},
            )

            deadline.check('save bank details')
            wallet = getattr(vendor, 'wallet', None) or Wallet(vendor=vendor)
            for field in BANK_FIELDS:
                setattr(wallet, field, (vendor_data.get(field) or '').strip())
            wallet.save()

            events.emit(events.vendor_registered, sender=Vendor, vendor=vendor)

            deadline.check('commit')
    except IntegrityError:
        raise ValidationError('This account is already registered as a vendor')
    except DatabaseError as e:
        logger.error(f'Vendor registration failed for user {user_id}: {e}')
        raise PersistenceError()

    logger.info(f'Vendor registered: {vendor.business_name} (user {user_id})')
    return vendor


# ==========================================
# LOOKUPS
# ==========================================

def get_vendor(vendor_id) -> Vendor:
    vendor = Vendor.objects.select_related('user', 'wallet').filter(pk=vendor_id).first()
    if vendor is None:
        raise NotFoundError('Vendor', vendor_id)
    return vendor


def list_vendors(status: Optional[str] = None) -> List[Vendor]:
    """All vendors newest first, optionally filtered by status (admin)"""
    vendors = Vendor.objects.select_related('user', 'wallet').order_by('-created_at')
    if status:
        if status not in dict(Vendor.STATUS_CHOICES):
            raise ValidationError(f'Unknown vendor status: {status}', field='status')
        vendors = vendors.filter(status=status)
    return list(vendors)


# ==========================================
# PROFILE
# ==========================================

def update_vendor_profile(vendor_id, updates: Dict) -> Vendor:
    """
    Update business profile and bank details

    Status, balances and ratings cannot be changed here.
    """
    updates = updates or {}

    unknown = set(updates) - set(PROFILE_FIELDS) - set(BANK_FIELDS)
    if unknown:
        raise ValidationError(f'Fields cannot be updated: {", ".join(sorted(unknown))}')

    if 'business_name' in updates and not str(updates['business_name'] or '').strip():
        raise ValidationError('business_name cannot be empty', field='business_name')

    with transaction.atomic():
        vendor = Vendor.objects.select_for_update().filter(pk=vendor_id).first()
        if vendor is None:
            raise NotFoundError('Vendor', vendor_id)

        profile_changes = [field for field in PROFILE_FIELDS if field in updates]
        for field in profile_changes:
            setattr(vendor, field, (updates[field] or '').strip())
        if profile_changes:
            vendor.save(update_fields=profile_changes + ['updated_at'])

        bank_changes = [field for field in BANK_FIELDS if field in updates]
        if bank_changes:
            wallet, _ = Wallet.objects.select_for_update().get_or_create(vendor=vendor)
            for field in bank_changes:
                setattr(wallet, field, (updates[field] or '').strip())
            wallet.save(update_fields=bank_changes + ['updated_at'])

    logger.info(f'Vendor {vendor_id} profile updated: {", ".join(sorted(updates))}')
    return vendor


def update_vendor_status(vendor_id, status: str, reason: str = '') -> Vendor:
    """
    Approve, suspend or reject a vendor (admin)

    - suspended/rejected: owning user demoted to customer and marked suspended
    - approved: owning user promoted to vendor and reactivated
    """
    if status not in dict(Vendor.STATUS_CHOICES):
        raise ValidationError(f'Unknown vendor status: {status}', field='status')

    with transaction.atomic():
        vendor = Vendor.objects.select_for_update().select_related('user').filter(pk=vendor_id).first()
        if vendor is None:
            raise NotFoundError('Vendor', vendor_id)

        previous_status = vendor.status
        vendor.status = status
        vendor.status_reason = reason or ''
        vendor.status_updated_at = timezone.now()
        vendor.save(update_fields=['status', 'status_reason', 'status_updated_at', 'updated_at'])

        user = vendor.user
        if status in (Vendor.STATUS_SUSPENDED, Vendor.STATUS_REJECTED):
            user.role = User.ROLE_CUSTOMER
            user.status = User.STATUS_SUSPENDED
            user.save(update_fields=['role', 'status'])
        elif status == Vendor.STATUS_APPROVED:
            user.role = User.ROLE_VENDOR
            user.status = User.STATUS_ACTIVE
            user.save(update_fields=['role', 'status'])

        events.emit(
            events.vendor_status_changed,
            sender=Vendor,
            vendor=vendor,
            previous_status=previous_status,
            new_status=status,
            reason=reason or '',
        )

    logger.info(f'Vendor {vendor_id} status: {previous_status} -> {status}')
    return vendor


# ==========================================
# PRODUCTS
# ==========================================

def set_product_status(product_id, status: str, reason: str = '') -> Product:
    """Approve or reject a product listing (admin)"""
    if status not in dict(Product.STATUS_CHOICES):
        raise ValidationError(f'Unknown product status: {status}', field='status')

    with transaction.atomic():
        product = Product.objects.select_for_update().filter(pk=product_id).first()
        if product is None:
            raise NotFoundError('Product', product_id)

        previous_status = product.status
        product.status = status
        product.status_reason = reason or ''
        product.save(update_fields=['status', 'status_reason', 'updated_at'])

        if previous_status != status:
            events.emit(
                events.product_status_changed,
                sender=Product,
                product=product,
                previous_status=previous_status,
                new_status=status,
                reason=reason or '',
            )

    logger.info(f'Product {product_id} status: {previous_status} -> {status}')
    return product


# ==========================================
# CUSTOMERS
# ==========================================

def get_vendor_customers(vendor_id) -> List[Dict]:
    """
    Distinct customers who ordered from a vendor, derived from sub-orders

    Each entry: id, name, email, phone, city, total_orders, total_spent
    (vendor's share only), last_order_date. Ordered by most recent order.
    """
    from apps.orders.models import VendorOrder

    vendor_orders = (
        VendorOrder.objects
        .filter(vendor_id=vendor_id)
        .select_related('order')
        .order_by('-order__created_at')
    )

    customers: Dict = {}
    for vendor_order in vendor_orders:
        order = vendor_order.order
        key = order.customer_id or order.customer_email
        shipping = order.shipping_address or {}

        if key not in customers:
            customers[key] = {
                'id': order.customer_id,
                'name': order.customer_name,
                'email': order.customer_email,
                'phone': shipping.get('phone') or 'N/A',
                'city': shipping.get('city') or 'N/A',
                'total_orders': 0,
                'total_spent': Decimal('0.00'),
                'last_order_date': order.created_at,
            }

        customer = customers[key]
        customer['total_orders'] += 1
        customer['total_spent'] += vendor_order.subtotal

    return list(customers.values())
