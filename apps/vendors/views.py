"""
Vendor App Views
JSON endpoints for vendor registration, profile, wallet, payouts and admin approval
"""

import logging

from django.views.decorators.http import require_http_methods

from core.utils.responses import json_response, parse_json_body
from .decorators import (
    admin_required,
    is_admin,
    login_required_json,
    service_errors_as_json,
    vendor_required,
    approved_vendor_required,
)
from .forms import (
    PayoutRequestForm,
    ProductStatusForm,
    VendorProfileForm,
    VendorRegistrationForm,
    VendorStatusForm,
    form_errors,
)
from .serializers import serialize_payout, serialize_product, serialize_vendor
from .services import (
    get_vendor,
    get_vendor_customers,
    get_vendor_stats,
    list_vendor_payouts,
    list_vendors,
    process_vendor_payout,
    register_vendor,
    set_product_status,
    update_vendor_profile,
    update_vendor_status,
)

logger = logging.getLogger(__name__)


# ==========================================
# REGISTRATION & PROFILE
# ==========================================

@login_required_json
@require_http_methods(["POST"])
@service_errors_as_json
def register(request):
    """
    Apply to become a vendor (status starts pending)
    """
    form = VendorRegistrationForm(parse_json_body(request))
    if not form.is_valid():
        raise form_errors(form)

    vendor = register_vendor(request.user.pk, form.vendor_data(), form.documents())
    return json_response({'success': True, 'vendor': serialize_vendor(vendor, include_wallet=True)}, status=201)


@require_http_methods(["GET"])
@service_errors_as_json
def vendor_detail(request, vendor_id):
    """Public store profile"""
    vendor = get_vendor(vendor_id)
    owner_or_admin = request.user.is_authenticated and (request.user.pk == vendor.user_id or is_admin(request.user))
    return json_response({'vendor': serialize_vendor(vendor, include_wallet=owner_or_admin)})


@vendor_required
@require_http_methods(["GET", "POST"])
@service_errors_as_json
def profile(request):
    """
    GET: own vendor profile with wallet
    POST: update business profile / bank details
    """
    if request.method == 'POST':
        form = VendorProfileForm(parse_json_body(request))
        if not form.is_valid():
            raise form_errors(form)
        update_vendor_profile(request.vendor.pk, form.updates())

    vendor = get_vendor(request.vendor.pk)
    return json_response({'success': True, 'vendor': serialize_vendor(vendor, include_wallet=True)})


# ==========================================
# DASHBOARD
# ==========================================

@vendor_required
@require_http_methods(["GET"])
@service_errors_as_json
def stats(request):
    """Wallet, rating and product stats across the vendor's group"""
    return json_response({'stats': get_vendor_stats(request.vendor.pk)})


@vendor_required
@require_http_methods(["GET"])
@service_errors_as_json
def customers(request):
    return json_response({'customers': get_vendor_customers(request.vendor.pk)})


# ==========================================
# PAYOUTS
# ==========================================

@approved_vendor_required
@require_http_methods(["GET", "POST"])
@service_errors_as_json
def payouts(request):
    """
    GET: payout history
    POST: request a payout from the available balance
    """
    if request.method == 'POST':
        form = PayoutRequestForm(parse_json_body(request))
        if not form.is_valid():
            raise form_errors(form)

        payout = process_vendor_payout(
            request.vendor.pk,
            form.cleaned_data['amount'],
            {
                'payout_method': form.cleaned_data.get('payout_method'),
                'notes': form.cleaned_data.get('notes'),
            },
        )
        return json_response({'success': True, 'payout': serialize_payout(payout)}, status=201)

    return json_response({'payouts': [serialize_payout(p) for p in list_vendor_payouts(request.vendor.pk)]})


# ==========================================
# ADMIN
# ==========================================

@admin_required
@require_http_methods(["GET"])
@service_errors_as_json
def admin_vendor_list(request):
    vendors = list_vendors(status=request.GET.get('status') or None)
    return json_response({'vendors': [serialize_vendor(v, include_wallet=True) for v in vendors]})


@admin_required
@require_http_methods(["GET"])
@service_errors_as_json
def admin_vendor_stats(request, vendor_id):
    return json_response({'stats': get_vendor_stats(vendor_id)})


@admin_required
@require_http_methods(["POST"])
@service_errors_as_json
def admin_vendor_status(request, vendor_id):
    """Approve / suspend / reject a vendor"""
    form = VendorStatusForm(parse_json_body(request))
    if not form.is_valid():
        raise form_errors(form)

    vendor = update_vendor_status(vendor_id, form.cleaned_data['status'], form.cleaned_data.get('reason', ''))
    return json_response({'success': True, 'vendor': serialize_vendor(vendor, include_wallet=True)})


@admin_required
@require_http_methods(["POST"])
@service_errors_as_json
def admin_product_status(request, product_id):
    """Approve or reject a product listing"""
    form = ProductStatusForm(parse_json_body(request))
    if not form.is_valid():
        raise form_errors(form)

    product = set_product_status(product_id, form.cleaned_data['status'], form.cleaned_data.get('reason', ''))
    return json_response({'success': True, 'product': serialize_product(product)})
