from django.contrib import admin, messages

from .models import Review
from .services import update_review_status


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ['subject', 'customer_name', 'rating', 'status', 'moderation_reason', 'helpful', 'created_at']
    list_filter = ['status', 'rating', 'moderation_reason', 'created_at']
    search_fields = ['product_name', 'vendor_name', 'customer_name', 'title', 'comment']
    readonly_fields = [
        'product', 'vendor', 'customer', 'order', 'rating', 'status',
        'moderation_reason', 'helpful', 'vendor_reply', 'created_at', 'updated_at'
    ]
    actions = ['approve_reviews', 'reject_reviews']

    def subject(self, obj):
        return obj.product_name or obj.vendor_name or 'Store'
    subject.short_description = 'Product / Store'

    # Status changes go through the service so ratings are recomputed
    def approve_reviews(self, request, queryset):
        for review in queryset:
            update_review_status(review.pk, Review.STATUS_APPROVED)
        self.message_user(request, f'Approved {queryset.count()} review(s)', messages.SUCCESS)
    approve_reviews.short_description = 'Approve selected reviews'

    def reject_reviews(self, request, queryset):
        for review in queryset:
            update_review_status(review.pk, Review.STATUS_REJECTED)
        self.message_user(request, f'Rejected {queryset.count()} review(s)', messages.WARNING)
    reject_reviews.short_description = 'Reject selected reviews'
