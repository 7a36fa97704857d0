"""
Review Moderation
Decides whether a new review is published immediately or held for a
moderator, and keeps product/vendor rating aggregates in sync
"""

import logging
from typing import Dict, List, Optional, Tuple

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F, Q, Sum
from django.utils import timezone

from core.exceptions import NotFoundError, ValidationError
from core.utils.helpers import round_rating
from apps.notifications import events
from apps.reviews.models import Review
from apps.vendors.models import Product, Vendor

logger = logging.getLogger(__name__)

User = get_user_model()

REASON_FIRST_TIME = 'First time reviewer'
REASON_LOW_RATING = 'Low rating'
REASON_FLAGGED = 'Flagged content'
REASON_UNAVAILABLE = 'Moderation unavailable'


# ==========================================
# DECISION
# ==========================================

def contains_denylisted_term(text: str) -> bool:
    content = (text or '').lower()
    return any(term.lower() in content for term in getattr(settings, 'REVIEW_DENYLIST', []))


def decide(customer_id, rating: int, title: str = '', comment: str = '') -> Tuple[str, str]:
    """
    Moderation decision, first match wins

    1. No earlier approved review by this customer -> pending
    2. Rating of 2 or less -> pending
    3. Denylisted term in title + comment -> pending
    4. Otherwise approved

    Returns:
        (status, moderation_reason)
    """
    has_approved = Review.objects.filter(customer_id=customer_id, status=Review.STATUS_APPROVED).exists()
    if not has_approved:
        return Review.STATUS_PENDING, REASON_FIRST_TIME

    if rating <= 2:
        return Review.STATUS_PENDING, REASON_LOW_RATING

    if contains_denylisted_term(f'{title or ""} {comment or ""}'):
        return Review.STATUS_PENDING, REASON_FLAGGED

    return Review.STATUS_APPROVED, ''


# ==========================================
# AGGREGATES
# ==========================================

def recompute_product_rating(product_id) -> Optional[Product]:
    """Set a product's rating/review_count from its approved reviews"""
    approved = Review.objects.filter(product_id=product_id, status=Review.STATUS_APPROVED)
    totals = approved.aggregate(total=Sum('rating'))
    count = approved.count()

    updated = Product.objects.filter(pk=product_id).update(
        rating=round_rating(totals['total'] or 0, count),
        review_count=count,
    )
    if not updated:
        logger.warning(f'Rating recompute skipped, product {product_id} not found')
        return None
    return Product.objects.get(pk=product_id)


def recompute_vendor_rating(vendor_id) -> Optional[Vendor]:
    """Set a vendor's rating/review_count from all its approved reviews"""
    approved = Review.objects.filter(vendor_id=vendor_id, status=Review.STATUS_APPROVED)
    totals = approved.aggregate(total=Sum('rating'))
    count = approved.count()

    updated = Vendor.objects.filter(pk=vendor_id).update(
        rating=round_rating(totals['total'] or 0, count),
        review_count=count,
    )
    if not updated:
        logger.warning(f'Rating recompute skipped, vendor {vendor_id} not found')
        return None
    return Vendor.objects.get(pk=vendor_id)


def _recompute_ratings(product_id=None, vendor_id=None):
    """Best-effort recompute, never raises"""
    try:
        if product_id:
            recompute_product_rating(product_id)
        if vendor_id:
            recompute_vendor_rating(vendor_id)
    except Exception as e:
        logger.error(f'Rating recompute failed (product {product_id}, vendor {vendor_id}): {e}')


def schedule_rating_recompute(product_id=None, vendor_id=None):
    """Recompute aggregates once the current transaction commits"""
    transaction.on_commit(
        lambda: _recompute_ratings(product_id=product_id, vendor_id=vendor_id),
        robust=True,
    )


# ==========================================
# SUBMIT
# ==========================================

def _clean_rating(value) -> int:
    if isinstance(value, bool) or value in (None, ''):
        raise ValidationError('rating must be a whole number from 1 to 5', field='rating')
    try:
        rating = int(str(value).strip())
    except ValueError:
        raise ValidationError('rating must be a whole number from 1 to 5', field='rating')
    if rating < 1 or rating > 5:
        raise ValidationError('rating must be a whole number from 1 to 5', field='rating')
    return rating


def _lookup(model, pk, kind):
    obj = model.objects.filter(pk=pk).first() if str(pk).isdigit() else None
    if obj is None:
        raise NotFoundError(kind, pk)
    return obj


def submit_review(data: Dict) -> Review:
    """
    Validate and store a review with its moderation decision

    A failure inside the decision stores the review as pending rather
    than losing it.

    Raises:
        ValidationError: missing customer, missing product/vendor, bad rating
        NotFoundError: unknown customer, product, vendor or order
    """
    data = data or {}

    customer_id = data.get('customer_id')
    if customer_id in (None, ''):
        raise ValidationError('customer_id is required', field='customer_id')

    product_id = data.get('product_id')
    vendor_id = data.get('vendor_id')
    if product_id in (None, '') and vendor_id in (None, ''):
        raise ValidationError('vendor_id or product_id is required', field='vendor_id')

    rating = _clean_rating(data.get('rating'))
    title = str(data.get('title') or '').strip()
    comment = str(data.get('comment') or '').strip()

    customer = _lookup(User, customer_id, 'User')

    product = None
    if product_id not in (None, ''):
        product = _lookup(Product, product_id, 'Product')
        if vendor_id not in (None, '') and str(product.vendor_id) != str(vendor_id):
            raise ValidationError('Product does not belong to this vendor', field='vendor_id')
        vendor = product.vendor
    else:
        vendor = _lookup(Vendor, vendor_id, 'Vendor')

    order = None
    if data.get('order_id') not in (None, ''):
        from apps.orders.models import Order
        order = _lookup(Order, data['order_id'], 'Order')

    try:
        status, reason = decide(customer.pk, rating, title, comment)
    except Exception as e:
        logger.error(f'Moderation decision failed for customer {customer.pk}: {e}')
        status, reason = Review.STATUS_PENDING, REASON_UNAVAILABLE

    images = data.get('images') or []
    if not isinstance(images, list):
        raise ValidationError('images must be a list', field='images')

    with transaction.atomic():
        review = Review.objects.create(
            product=product,
            product_name=data.get('product_name') or (product.name if product else None),
            vendor=vendor,
            vendor_name=data.get('vendor_name') or vendor.business_name,
            customer=customer,
            customer_name=data.get('customer_name') or customer.full_name or 'Anonymous',
            order=order,
            rating=rating,
            title=title,
            comment=comment,
            images=images,
            status=status,
            moderation_reason=reason,
        )

        if status == Review.STATUS_APPROVED:
            schedule_rating_recompute(product_id=review.product_id, vendor_id=review.vendor_id)

        events.emit(events.review_submitted, sender=Review, review=review)

    logger.info(f'Review {review.pk} submitted: {status}{f" ({reason})" if reason else ""}')
    return review


# ==========================================
# LISTINGS
# ==========================================

def _visible_to(reviews, viewer_id=None):
    visible = Q(status=Review.STATUS_APPROVED)
    if viewer_id not in (None, ''):
        visible |= Q(status=Review.STATUS_PENDING, customer_id=viewer_id)
    return reviews.filter(visible).order_by('-created_at', '-pk')


def list_product_reviews(product_id, viewer_id=None) -> List[Review]:
    """Approved reviews of a product plus the viewer's own pending ones"""
    return list(_visible_to(Review.objects.filter(product_id=product_id), viewer_id))


def list_store_reviews(vendor_id, viewer_id=None) -> List[Review]:
    """Store-level (no product) reviews of a vendor, same visibility rules"""
    return list(_visible_to(Review.objects.filter(vendor_id=vendor_id, product__isnull=True), viewer_id))


def list_vendor_reviews(vendor_id) -> List[Review]:
    """Every review of a vendor, any status (vendor dashboard)"""
    return list(Review.objects.filter(vendor_id=vendor_id).order_by('-created_at', '-pk'))


def list_customer_reviews(customer_id) -> List[Review]:
    return list(Review.objects.filter(customer_id=customer_id).order_by('-created_at', '-pk'))


def list_all_reviews(status: Optional[str] = None) -> List[Review]:
    """All reviews, optionally by status (admin)"""
    reviews = Review.objects.order_by('-created_at', '-pk')
    if status:
        if status not in dict(Review.STATUS_CHOICES):
            raise ValidationError(f'Unknown review status: {status}', field='status')
        reviews = reviews.filter(status=status)
    return list(reviews)


# ==========================================
# MODERATION ACTIONS
# ==========================================

def _get_review(review_id, lock: bool = False) -> Review:
    reviews = Review.objects.select_for_update() if lock else Review.objects
    review = reviews.filter(pk=review_id).first() if str(review_id).isdigit() else None
    if review is None:
        raise NotFoundError('Review', review_id)
    return review


def update_review_status(review_id, status: str) -> Review:
    if status not in dict(Review.STATUS_CHOICES):
        raise ValidationError(f'Unknown review status: {status}', field='status')

    with transaction.atomic():
        review = _get_review(review_id, lock=True)
        previous_status = review.status
        review.status = status
        review.save(update_fields=['status', 'updated_at'])
        schedule_rating_recompute(product_id=review.product_id, vendor_id=review.vendor_id)

    logger.info(f'Review {review_id} status: {previous_status} -> {status}')
    return review


def reply_to_review(review_id, text: str) -> Review:
    """Store the vendor's reply; replying publishes the review"""
    text = str(text or '').strip()
    if not text:
        raise ValidationError('Reply text is required', field='text')

    with transaction.atomic():
        review = _get_review(review_id, lock=True)
        review.vendor_reply = {'text': text, 'replied_at': timezone.now().isoformat()}
        review.status = Review.STATUS_APPROVED
        review.save(update_fields=['vendor_reply', 'status', 'updated_at'])
        schedule_rating_recompute(product_id=review.product_id, vendor_id=review.vendor_id)

    logger.info(f'Vendor replied to review {review_id}')
    return review


def mark_review_helpful(review_id) -> int:
    """Increment the helpful counter, returns the new count"""
    updated = Review.objects.filter(pk=review_id).update(helpful=F('helpful') + 1) if str(review_id).isdigit() else 0
    if not updated:
        raise NotFoundError('Review', review_id)
    return Review.objects.values_list('helpful', flat=True).get(pk=review_id)


def delete_review(review_id) -> bool:
    with transaction.atomic():
        review = _get_review(review_id, lock=True)
        product_id, vendor_id = review.product_id, review.vendor_id
        review.delete()
        schedule_rating_recompute(product_id=product_id, vendor_id=vendor_id)

    logger.info(f'Review {review_id} deleted')
    return True


def reconcile_all_ratings() -> Dict[str, int]:
    """Recompute every product and vendor aggregate (maintenance)"""
    products = 0
    for product_id in list(Product.objects.values_list('pk', flat=True)):
        recompute_product_rating(product_id)
        products += 1

    vendors = 0
    for vendor_id in list(Vendor.objects.values_list('pk', flat=True)):
        recompute_vendor_rating(vendor_id)
        vendors += 1

    return {'products': products, 'vendors': vendors}
