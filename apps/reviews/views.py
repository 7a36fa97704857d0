"""
Review App Views
Submitting, listing and moderating product and store reviews
"""

import logging

from django.views.decorators.http import require_http_methods

from core.exceptions import NotFoundError
from core.utils.responses import json_response, parse_json_body
from apps.vendors.decorators import (
    admin_required,
    approved_vendor_required,
    login_required_json,
    service_errors_as_json,
    vendor_required,
)
from apps.vendors.forms import form_errors
from .forms import ReviewReplyForm, ReviewStatusForm
from .models import Review
from .serializers import serialize_review
from .services import (
    delete_review,
    list_all_reviews,
    list_customer_reviews,
    list_product_reviews,
    list_store_reviews,
    list_vendor_reviews,
    mark_review_helpful,
    reply_to_review,
    submit_review,
    update_review_status,
)

logger = logging.getLogger(__name__)


def _serialize_all(reviews):
    return {'reviews': [serialize_review(r) for r in reviews]}


# ==========================================
# PUBLIC
# ==========================================

@require_http_methods(["GET"])
@service_errors_as_json
def product_reviews(request, product_id):
    viewer_id = request.user.pk if request.user.is_authenticated else None
    return json_response(_serialize_all(list_product_reviews(product_id, viewer_id=viewer_id)))


@require_http_methods(["GET"])
@service_errors_as_json
def store_reviews(request, vendor_id):
    viewer_id = request.user.pk if request.user.is_authenticated else None
    return json_response(_serialize_all(list_store_reviews(vendor_id, viewer_id=viewer_id)))


@require_http_methods(["POST"])
@service_errors_as_json
def helpful(request, review_id):
    return json_response({'success': True, 'helpful': mark_review_helpful(review_id)})


# ==========================================
# CUSTOMER
# ==========================================

@login_required_json
@require_http_methods(["GET", "POST"])
@service_errors_as_json
def my_reviews(request):
    """
    GET: the customer's own reviews
    POST: submit a product or store review
    """
    if request.method == 'POST':
        data = parse_json_body(request)
        data['customer_id'] = request.user.pk
        review = submit_review(data)
        return json_response({'success': True, 'review': serialize_review(review)}, status=201)

    return json_response(_serialize_all(list_customer_reviews(request.user.pk)))


@login_required_json
@require_http_methods(["DELETE"])
@service_errors_as_json
def my_review(request, review_id):
    """Authors may delete their own review"""
    if not Review.objects.filter(pk=review_id, customer_id=request.user.pk).exists():
        raise NotFoundError('Review', review_id)

    delete_review(review_id)
    return json_response({'success': True})


# ==========================================
# VENDOR
# ==========================================

def _own_review(vendor, review_id):
    if not Review.objects.filter(pk=review_id, vendor_id=vendor.pk).exists():
        raise NotFoundError('Review', review_id)


@vendor_required
@require_http_methods(["GET"])
@service_errors_as_json
def vendor_reviews(request):
    return json_response(_serialize_all(list_vendor_reviews(request.vendor.pk)))


@approved_vendor_required
@require_http_methods(["POST"])
@service_errors_as_json
def reply(request, review_id):
    _own_review(request.vendor, review_id)

    form = ReviewReplyForm(parse_json_body(request))
    if not form.is_valid():
        raise form_errors(form)

    review = reply_to_review(review_id, form.cleaned_data['text'])
    return json_response({'success': True, 'review': serialize_review(review)})


@approved_vendor_required
@require_http_methods(["POST"])
@service_errors_as_json
def vendor_review_status(request, review_id):
    """Approve or reject a review of the vendor's own store or products"""
    _own_review(request.vendor, review_id)

    form = ReviewStatusForm(parse_json_body(request))
    if not form.is_valid():
        raise form_errors(form)

    review = update_review_status(review_id, form.cleaned_data['status'])
    return json_response({'success': True, 'review': serialize_review(review)})


# ==========================================
# ADMIN
# ==========================================

@admin_required
@require_http_methods(["GET"])
@service_errors_as_json
def admin_reviews(request):
    return json_response(_serialize_all(list_all_reviews(status=request.GET.get('status') or None)))


@admin_required
@require_http_methods(["POST", "DELETE"])
@service_errors_as_json
def admin_review(request, review_id):
    """
    POST: approve / reject
    DELETE: remove the review
    """
    if request.method == 'DELETE':
        delete_review(review_id)
        return json_response({'success': True})

    form = ReviewStatusForm(parse_json_body(request))
    if not form.is_valid():
        raise form_errors(form)

    review = update_review_status(review_id, form.cleaned_data['status'])
    return json_response({'success': True, 'review': serialize_review(review)})
