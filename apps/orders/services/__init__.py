"""
Order Services Package
"""

from .lifecycle import (
    add_tracking_info,
    cancel_order,
    request_return,
    update_order_status,
    update_payment_status,
)
from .splitter import (
    create_order,
    get_order,
    list_all_orders,
    list_customer_orders,
    list_vendor_orders,
)

__all__ = [
    'add_tracking_info',
    'cancel_order',
    'request_return',
    'update_order_status',
    'update_payment_status',
    'create_order',
    'get_order',
    'list_all_orders',
    'list_customer_orders',
    'list_vendor_orders',
]
