"""
Order App Serializers
"""


def serialize_vendor_order(vendor_order, include_order_code=False):
    data = {
        'id': vendor_order.pk,
        'vendor_id': vendor_order.vendor_id,
        'vendor_name': vendor_order.vendor_name,
        'items': vendor_order.items,
        'subtotal': vendor_order.subtotal,
        'status': vendor_order.status,
        'tracking_number': vendor_order.tracking_number,
        'carrier': vendor_order.carrier,
        'status_updated_at': vendor_order.status_updated_at,
        'delivered_at': vendor_order.delivered_at,
    }
    if include_order_code:
        order = vendor_order.order
        data.update({
            'order_id': order.pk,
            'order_code': order.order_code,
            'customer_name': order.customer_name,
            'shipping_address': order.shipping_address,
            'payment_status': order.payment_status,
            'created_at': order.created_at,
        })
    return data


def serialize_order(order, vendor_id=None):
    """
    Full order document

    With vendor_id only that vendor's sub-order is included
    """
    vendor_orders = order.vendor_orders.all()
    if vendor_id is not None:
        vendor_orders = [vo for vo in vendor_orders if vo.vendor_id == vendor_id]

    return {
        'id': order.pk,
        'order_code': order.order_code,
        'customer_id': order.customer_id,
        'customer_email': order.customer_email,
        'customer_name': order.customer_name,
        'shipping_address': order.shipping_address,
        'billing_address': order.billing_address,
        'items': order.items,
        'vendor_orders': [serialize_vendor_order(vo) for vo in vendor_orders],
        'subtotal': order.subtotal,
        'shipping_cost': order.shipping_cost,
        'tax': order.tax,
        'discount': order.discount,
        'coupon_code': order.coupon_code,
        'total_amount': order.total_amount,
        'payment_method': order.payment_method,
        'payment_status': order.payment_status,
        'transaction_id': order.transaction_id,
        'paid_at': order.paid_at,
        'order_status': order.order_status,
        'notes': order.notes,
        'cancellation': order.cancellation,
        'returns': order.returns,
        'link': order.link,
        'created_at': order.created_at,
        'updated_at': order.updated_at,
    }
