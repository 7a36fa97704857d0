"""
Order App Views
Checkout, order history, vendor fulfilment and admin order management
"""

import logging

from django.views.decorators.http import require_http_methods

from core.exceptions import NotFoundError
from core.utils.responses import json_response, parse_json_body
from apps.vendors.decorators import (
    admin_required,
    approved_vendor_required,
    is_admin,
    login_required_json,
    selling_vendor,
    service_errors_as_json,
)
from apps.vendors.forms import form_errors
from .forms import CancelOrderForm, OrderStatusForm, PaymentStatusForm, ReturnRequestForm, TrackingForm
from .serializers import serialize_order, serialize_vendor_order
from .services import (
    add_tracking_info,
    cancel_order,
    create_order,
    get_order,
    list_all_orders,
    list_customer_orders,
    list_vendor_orders,
    request_return,
    update_order_status,
    update_payment_status,
)

logger = logging.getLogger(__name__)


def _vendor_id(user):
    vendor = selling_vendor(user)
    return vendor.pk if vendor is not None else None


def _get_order_for(user, order_code):
    """
    Load an order the user may see: its customer, a vendor on it, or an admin

    Anyone else gets NotFound so order codes can't be probed.
    """
    order = get_order(order_code)
    if is_admin(user) or (order.customer_id and order.customer_id == user.pk):
        return order, None

    vendor_id = _vendor_id(user)
    if vendor_id is not None and vendor_id in order.vendor_ids:
        return order, vendor_id

    raise NotFoundError('Order', order_code)


def _bound_form(form_class, request):
    form = form_class(parse_json_body(request))
    if not form.is_valid():
        raise form_errors(form)
    return form.cleaned_data


# ==========================================
# CUSTOMER
# ==========================================

@login_required_json
@require_http_methods(["GET", "POST"])
@service_errors_as_json
def orders(request):
    """
    GET: the customer's orders
    POST: place an order from a checkout payload
    """
    if request.method == 'POST':
        payload = parse_json_body(request)
        payload['customer_id'] = request.user.pk
        payload.setdefault('customer_email', request.user.email)
        payload.setdefault('customer_name', request.user.full_name)

        order = create_order(payload)
        return json_response({'success': True, 'order': serialize_order(get_order(order.pk))}, status=201)

    return json_response({'orders': [serialize_order(o) for o in list_customer_orders(request.user.pk)]})


@login_required_json
@require_http_methods(["GET"])
@service_errors_as_json
def order_detail(request, order_code):
    order, vendor_id = _get_order_for(request.user, order_code)
    return json_response({'order': serialize_order(order, vendor_id=vendor_id)})


@login_required_json
@require_http_methods(["POST"])
@service_errors_as_json
def cancel(request, order_code):
    order, vendor_id = _get_order_for(request.user, order_code)
    if vendor_id is not None:
        # Vendors cancel their own sub-order through the status endpoint
        raise NotFoundError('Order', order_code)

    data = _bound_form(CancelOrderForm, request)
    order = cancel_order(order.pk, data.get('reason', ''), request.user.pk)
    return json_response({'success': True, 'order': serialize_order(get_order(order.pk))})


@login_required_json
@require_http_methods(["POST"])
@service_errors_as_json
def returns(request, order_code):
    order, vendor_id = _get_order_for(request.user, order_code)
    if vendor_id is not None:
        raise NotFoundError('Order', order_code)

    data = _bound_form(ReturnRequestForm, request)
    record = request_return(order.pk, data['item_id'], data['reason'])
    return json_response({'success': True, 'return': record}, status=201)


# ==========================================
# VENDOR FULFILMENT
# ==========================================

@approved_vendor_required
@require_http_methods(["GET"])
@service_errors_as_json
def vendor_orders(request):
    vendor_orders = list_vendor_orders(request.vendor.pk, status=request.GET.get('status') or None)
    return json_response({
        'orders': [serialize_vendor_order(vo, include_order_code=True) for vo in vendor_orders]
    })


@login_required_json
@require_http_methods(["POST"])
@service_errors_as_json
def order_status(request, order_code):
    """
    Vendors move their own sub-order; admins move the overall order,
    or one vendor's sub-order when vendor_id is given
    """
    data = _bound_form(OrderStatusForm, request)

    if is_admin(request.user):
        acting_vendor_id = data.get('vendor_id')
    else:
        acting_vendor_id = _vendor_id(request.user)
        if acting_vendor_id is None:
            raise NotFoundError('Order', order_code)

    updated = update_order_status(order_code, data['status'], acting_vendor_id=acting_vendor_id)
    if acting_vendor_id is None:
        return json_response({'success': True, 'order': serialize_order(get_order(updated.pk))})
    return json_response({'success': True, 'vendor_order': serialize_vendor_order(updated)})


@approved_vendor_required
@require_http_methods(["POST"])
@service_errors_as_json
def tracking(request, order_code):
    data = _bound_form(TrackingForm, request)
    vendor_order = add_tracking_info(order_code, request.vendor.pk, data['tracking_number'], data.get('carrier', ''))
    return json_response({'success': True, 'vendor_order': serialize_vendor_order(vendor_order)})


# ==========================================
# ADMIN / PAYMENT
# ==========================================

@admin_required
@require_http_methods(["GET"])
@service_errors_as_json
def admin_orders(request):
    limit = request.GET.get('limit', '')
    orders = list_all_orders(status=request.GET.get('status') or None, limit=int(limit) if limit.isdigit() else 50)
    return json_response({'orders': [serialize_order(o) for o in orders]})


@admin_required
@require_http_methods(["POST"])
@service_errors_as_json
def payment_status(request, order_code):
    """Payment collaborator callback, recorded by an admin"""
    data = _bound_form(PaymentStatusForm, request)
    order = update_payment_status(order_code, data['payment_status'], data.get('transaction_id') or None)
    return json_response({'success': True, 'order': serialize_order(get_order(order.pk))})
