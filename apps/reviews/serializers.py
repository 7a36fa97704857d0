"""
Review App Serializers
"""


def serialize_review(review):
    return {
        'id': review.pk,
        'product_id': review.product_id,
        'product_name': review.product_name,
        'vendor_id': review.vendor_id,
        'vendor_name': review.vendor_name,
        'customer_id': review.customer_id,
        'customer_name': review.customer_name,
        'order_id': review.order_id,
        'rating': review.rating,
        'title': review.title,
        'comment': review.comment,
        'images': review.images,
        'status': review.status,
        'moderation_reason': review.moderation_reason,
        'helpful': review.helpful,
        'vendor_reply': review.vendor_reply,
        'created_at': review.created_at,
    }
