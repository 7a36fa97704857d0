"""
Review Services Package
"""

from .moderation import (
    decide,
    delete_review,
    list_all_reviews,
    list_customer_reviews,
    list_product_reviews,
    list_store_reviews,
    list_vendor_reviews,
    mark_review_helpful,
    recompute_product_rating,
    recompute_vendor_rating,
    reconcile_all_ratings,
    reply_to_review,
    submit_review,
    update_review_status,
)

__all__ = [
    'decide',
    'delete_review',
    'list_all_reviews',
    'list_customer_reviews',
    'list_product_reviews',
    'list_store_reviews',
    'list_vendor_reviews',
    'mark_review_helpful',
    'recompute_product_rating',
    'recompute_vendor_rating',
    'reconcile_all_ratings',
    'reply_to_review',
    'submit_review',
    'update_review_status',
]
