"""
Commission & Balance Ledger
Per-vendor platform fee, sub-order settlement, wallet balances and payouts

Every balance change writes a Transaction row and updates the wallet's
running totals in the same database transaction. The wallet row is locked
(select_for_update) and the stored balance is re-read before each write.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Union

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Q, Sum
from django.utils import timezone

from core.exceptions import (
    InsufficientBalanceError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from core.utils.helpers import (
    calculate_commission,
    generate_reference,
    quantize_money,
    to_decimal,
)
from apps.notifications import events
from apps.vendors.models import (
    Payout,
    Product,
    Transaction,
    Vendor,
    VendorGroupMembership,
    Wallet,
)

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


# ==========================================
# SETTLEMENT
# ==========================================

@dataclass(frozen=True)
class Settlement:
    gross: Decimal
    fee: Decimal
    net: Decimal
    commission_rate: Decimal

    def as_metadata(self) -> Dict[str, str]:
        return {
            'gross': str(self.gross),
            'fee': str(self.fee),
            'net': str(self.net),
            'commission_rate': str(self.commission_rate),
        }


def resolve_commission_rate(vendor_or_wallet=None) -> Decimal:
    """
    Commission percentage for a vendor, wallet or explicit rate

    Falls back to settings.DEFAULT_COMMISSION_RATE when the record
    carries no rate.
    """
    default_rate = Decimal(getattr(settings, 'DEFAULT_COMMISSION_RATE', Decimal('10')))

    if vendor_or_wallet is None:
        return default_rate

    if isinstance(vendor_or_wallet, (Decimal, int, float, str)):
        return to_decimal(vendor_or_wallet, 'commission_rate')

    wallet = vendor_or_wallet
    if isinstance(vendor_or_wallet, Vendor):
        wallet = Wallet.objects.filter(vendor=vendor_or_wallet).first()

    rate = getattr(wallet, 'commission_rate', None)
    return default_rate if rate is None else Decimal(rate)


def compute_settlement(gross, vendor_or_wallet=None) -> Settlement:
    """
    Split a sub-order's gross amount into platform fee and vendor net

    fee = gross * rate / 100 (half-up to 2 places), net = gross - fee

    Args:
        gross: Sub-order subtotal
        vendor_or_wallet: Vendor, Wallet or a percentage; None uses the default rate

    Returns:
        Settlement(gross, fee, net, commission_rate)
    """
    gross = quantize_money(to_decimal(gross, 'gross'))
    if gross < 0:
        raise ValidationError('gross must not be negative', field='gross')

    rate = resolve_commission_rate(vendor_or_wallet)
    if rate < 0 or rate > 100:
        raise ValidationError('commission_rate must be between 0 and 100', field='commission_rate')

    fee, net = calculate_commission(gross, rate)
    return Settlement(gross=gross, fee=fee, net=net, commission_rate=rate)


def _locked_wallet(vendor_id) -> Wallet:
    """Lock (and lazily create) a vendor's wallet row"""
    wallet = Wallet.objects.select_for_update().filter(vendor_id=vendor_id).first()
    if wallet is None:
        if not Vendor.objects.filter(pk=vendor_id).exists():
            raise NotFoundError('Vendor', vendor_id)
        Wallet.objects.get_or_create(vendor_id=vendor_id)
        wallet = Wallet.objects.select_for_update().get(vendor_id=vendor_id)
    return wallet


# ==========================================
# SUB-ORDER CREDITS
# ==========================================

def book_pending_credit(vendor_order) -> Transaction:
    """
    Record a paid sub-order's net amount as pending balance

    Idempotent per sub-order: an existing credit row is returned unchanged.
    """
    try:
        with transaction.atomic():
            wallet = _locked_wallet(vendor_order.vendor_id)

            existing = Transaction.objects.filter(
                vendor_order=vendor_order,
                transaction_type=Transaction.TYPE_CREDIT,
            ).first()
            if existing:
                return existing

            settlement = compute_settlement(vendor_order.subtotal, wallet)

            credit = Transaction.objects.create(
                wallet=wallet,
                transaction_type=Transaction.TYPE_CREDIT,
                amount=settlement.net,
                status=Transaction.STATUS_PENDING,
                reference=generate_reference('CREDIT'),
                description=f'Payment received for order {vendor_order.order.order_code}',
                vendor_order=vendor_order,
                balance_before=wallet.available_balance,
                balance_after=wallet.available_balance,
                metadata=settlement.as_metadata(),
            )

            wallet.pending_balance += settlement.net
            wallet.save(update_fields=['pending_balance', 'updated_at'])
    except DatabaseError as e:
        logger.error(f'Pending credit failed for vendor order {vendor_order.pk}: {e}')
        raise PersistenceError()

    logger.info(f'Pending credit {settlement.net} booked for vendor {vendor_order.vendor_id}')
    return credit


def release_pending_credit(vendor_order) -> Optional[Transaction]:
    """
    Drop a cancelled sub-order's pending credit from pending_balance

    Only pending credits are touched; settled credits stay as they are.
    """
    try:
        with transaction.atomic():
            wallet = _locked_wallet(vendor_order.vendor_id)

            credit = Transaction.objects.select_for_update().filter(
                vendor_order=vendor_order,
                transaction_type=Transaction.TYPE_CREDIT,
                status=Transaction.STATUS_PENDING,
            ).first()
            if credit is None:
                return None

            wallet.pending_balance = max(ZERO, wallet.pending_balance - credit.amount)
            wallet.save(update_fields=['pending_balance', 'updated_at'])

            credit.status = Transaction.STATUS_CANCELLED
            credit.save(update_fields=['status'])
    except DatabaseError as e:
        logger.error(f'Releasing pending credit failed for vendor order {vendor_order.pk}: {e}')
        raise PersistenceError()

    logger.info(f'Pending credit {credit.amount} released for vendor {vendor_order.vendor_id}')
    return credit


def credit_vendor_order(vendor_order) -> Optional[Transaction]:
    """
    Settle a delivered sub-order into the vendor's wallet, exactly once

    - available_balance += net, total_earnings += net, total_sales += gross
    - A pending credit booked at payment time is released from pending_balance
    - A sub-order that was already credited is left alone (returns None)

    Returns:
        The completed credit transaction, or None if already settled
    """
    try:
        with transaction.atomic():
            wallet = _locked_wallet(vendor_order.vendor_id)

            credit = Transaction.objects.select_for_update().filter(
                vendor_order=vendor_order,
                transaction_type=Transaction.TYPE_CREDIT,
            ).first()

            if credit and credit.status == Transaction.STATUS_COMPLETED:
                logger.info(f'Vendor order {vendor_order.pk} already credited, skipping')
                return None

            if credit:
                # Settle at the rate booked when the order was paid
                gross = Decimal(credit.metadata.get('gross', vendor_order.subtotal))
                net = credit.amount
                wallet.pending_balance = max(ZERO, wallet.pending_balance - net)
            else:
                settlement = compute_settlement(vendor_order.subtotal, wallet)
                gross, net = settlement.gross, settlement.net
                credit = Transaction(
                    wallet=wallet,
                    transaction_type=Transaction.TYPE_CREDIT,
                    amount=net,
                    reference=generate_reference('CREDIT'),
                    description=f'Earnings from order {vendor_order.order.order_code}',
                    vendor_order=vendor_order,
                    metadata=settlement.as_metadata(),
                )

            credit.balance_before = wallet.available_balance
            wallet.available_balance += net
            wallet.total_earnings += net
            wallet.total_sales += gross
            wallet.save(update_fields=[
                'available_balance', 'pending_balance', 'total_earnings', 'total_sales', 'updated_at',
            ])

            credit.balance_after = wallet.available_balance
            credit.status = Transaction.STATUS_COMPLETED
            credit.completed_at = timezone.now()
            credit.save()
    except DatabaseError as e:
        logger.error(f'Credit failed for vendor order {vendor_order.pk}: {e}')
        raise PersistenceError()

    logger.info(f'Vendor {vendor_order.vendor_id} credited {net} (gross {gross})')
    return credit


# ==========================================
# STATS
# ==========================================

def _normalize_ids(vendor_id_or_ids) -> List:
    if isinstance(vendor_id_or_ids, (list, tuple, set, frozenset)):
        ids = list(vendor_id_or_ids)
    else:
        ids = [vendor_id_or_ids]

    normalized = []
    for vendor_id in ids:
        if vendor_id in (None, ''):
            continue
        try:
            vendor_id = int(vendor_id)
        except (TypeError, ValueError):
            raise ValidationError(f'Invalid vendor id: {vendor_id}', field='vendor_id')
        if vendor_id not in normalized:
            normalized.append(vendor_id)

    if not normalized:
        raise ValidationError('vendor_id is required', field='vendor_id')
    return normalized


def expand_vendor_ids(vendor_id_or_ids) -> List[int]:
    """
    Expand vendor ids with every other member of their vendor groups

    Order: the requested ids first, then group members by id.
    """
    ids = _normalize_ids(vendor_id_or_ids)

    group_ids = VendorGroupMembership.objects.filter(vendor_id__in=ids).values_list('group_id', flat=True)
    members = (
        VendorGroupMembership.objects
        .filter(group_id__in=list(group_ids))
        .order_by('vendor_id')
        .values_list('vendor_id', flat=True)
    )

    for member_id in members:
        if member_id not in ids:
            ids.append(member_id)
    return ids


def get_vendor_stats(vendor_id_or_ids) -> Dict:
    """
    Aggregate wallet, rating and product stats across vendor records

    Sums balances and lifetime totals over the ids (expanded through vendor
    groups). Rating comes from the record with the most reviews while review
    counts are summed across all records.

    Raises:
        NotFoundError: If none of the ids is a known vendor
    """
    ids = expand_vendor_ids(vendor_id_or_ids)

    vendors = list(Vendor.objects.filter(pk__in=ids).select_related('wallet'))
    if not vendors:
        raise NotFoundError('Vendor', ids[0] if len(ids) == 1 else ids)

    # Keep the requested order so ties on review count go to the first id
    vendors.sort(key=lambda v: ids.index(v.pk))

    totals = Wallet.objects.filter(vendor_id__in=ids).aggregate(
        total_sales=Sum('total_sales'),
        total_earnings=Sum('total_earnings'),
        available_balance=Sum('available_balance'),
        pending_balance=Sum('pending_balance'),
        total_withdrawn=Sum('total_withdrawn'),
    )

    top_rated = vendors[0]
    for vendor in vendors[1:]:
        if vendor.review_count > top_rated.review_count:
            top_rated = vendor

    products = Product.objects.filter(vendor_id__in=ids)

    return {
        'vendor_ids': [v.pk for v in vendors],
        'total_sales': totals['total_sales'] or ZERO,
        'total_earnings': totals['total_earnings'] or ZERO,
        'available_balance': totals['available_balance'] or ZERO,
        'pending_balance': totals['pending_balance'] or ZERO,
        'total_withdrawn': totals['total_withdrawn'] or ZERO,
        'rating': top_rated.rating,
        'review_count': sum(v.review_count for v in vendors),
        'total_products': products.count(),
        'active_products': products.filter(status=Product.STATUS_APPROVED).count(),
    }


# ==========================================
# PAYOUTS
# ==========================================

def process_vendor_payout(vendor_id, amount, payout_details: Optional[Dict] = None) -> Payout:
    """
    Debit a vendor's available balance and record a pending payout request

    The debit is applied immediately; external settlement is handled elsewhere.

    Args:
        vendor_id: Vendor (user) id
        amount: Amount to withdraw
        payout_details: Optional payout_method / notes

    Raises:
        ValidationError: amount not positive or below PAYOUT_MINIMUM_AMOUNT
        NotFoundError: unknown vendor
        InsufficientBalanceError: amount above available balance
    """
    amount = quantize_money(to_decimal(amount, 'amount'))
    if amount <= 0:
        raise ValidationError('Payout amount must be greater than zero', field='amount')

    minimum = Decimal(getattr(settings, 'PAYOUT_MINIMUM_AMOUNT', ZERO))
    if amount < minimum:
        raise ValidationError(f'Minimum payout amount is {minimum}', field='amount')

    payout_details = payout_details or {}

    try:
        with transaction.atomic():
            if not Vendor.objects.filter(pk=vendor_id).exists():
                raise NotFoundError('Vendor', vendor_id)

            wallet = _locked_wallet(vendor_id)

            if amount > wallet.available_balance:
                raise InsufficientBalanceError(requested=amount, available=wallet.available_balance)

            payout = Payout.objects.create(
                vendor_id=vendor_id,
                amount=amount,
                status=Payout.STATUS_PENDING,
                reference=generate_reference('PAYOUT'),
                bank_details=wallet.bank_details,
                payout_method=payout_details.get('payout_method') or 'bank_transfer',
                notes=payout_details.get('notes') or '',
            )

            balance_before = wallet.available_balance
            wallet.available_balance -= amount
            wallet.total_withdrawn += amount
            wallet.save(update_fields=['available_balance', 'total_withdrawn', 'updated_at'])

            Transaction.objects.create(
                wallet=wallet,
                transaction_type=Transaction.TYPE_PAYOUT,
                amount=amount,
                status=Transaction.STATUS_PENDING,
                reference=payout.reference,
                description='Payout request',
                payout=payout,
                balance_before=balance_before,
                balance_after=wallet.available_balance,
            )

            events.emit(events.payout_requested, sender=Payout, payout=payout)
    except DatabaseError as e:
        logger.error(f'Payout failed for vendor {vendor_id}: {e}')
        raise PersistenceError()

    logger.info(f'Payout {payout.reference} of {amount} requested by vendor {vendor_id}')
    return payout


def list_vendor_payouts(vendor_id) -> List[Payout]:
    """Payout requests for a vendor, newest first"""
    return list(Payout.objects.filter(vendor_id=vendor_id).order_by('-created_at'))


# ==========================================
# RECONCILIATION
# ==========================================

def recompute_wallet(wallet: Wallet, save: bool = True) -> Dict[str, Decimal]:
    """
    Rebuild a wallet's running totals from its transaction log

    Returns:
        Dict of recomputed totals (saved onto the wallet unless save=False)
    """
    log = Transaction.objects.filter(wallet=wallet)

    def total(query) -> Decimal:
        return log.filter(query).aggregate(total=Sum('amount'))['total'] or ZERO

    completed_credits = log.filter(
        transaction_type=Transaction.TYPE_CREDIT,
        status=Transaction.STATUS_COMPLETED,
    )
    gross_sales = sum(
        (Decimal(credit.metadata.get('gross', credit.amount)) for credit in completed_credits),
        ZERO,
    )

    earned = total(Q(transaction_type=Transaction.TYPE_CREDIT, status=Transaction.STATUS_COMPLETED))
    withdrawn = total(Q(transaction_type=Transaction.TYPE_PAYOUT))

    totals = {
        'total_sales': quantize_money(gross_sales),
        'total_earnings': earned,
        'pending_balance': total(Q(transaction_type=Transaction.TYPE_CREDIT, status=Transaction.STATUS_PENDING)),
        'total_withdrawn': withdrawn,
        'available_balance': earned - withdrawn,
    }

    if save:
        with transaction.atomic():
            locked = Wallet.objects.select_for_update().get(pk=wallet.pk)
            for field, value in totals.items():
                setattr(locked, field, value)
            locked.save(update_fields=list(totals) + ['updated_at'])
            for field, value in totals.items():
                setattr(wallet, field, value)

    return totals


def iter_wallets() -> Iterable[Wallet]:
    """Wallets by vendor id, loaded up front so callers can write while looping"""
    return list(Wallet.objects.select_related('vendor').order_by('vendor_id'))
