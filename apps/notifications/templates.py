"""
Notification Templates
Fixed catalogue of in-app notification texts. Each template returns the
type/title/message/link part of a notification.
"""

from typing import Dict

from core.utils.helpers import format_currency


def order_link(order_code: str) -> str:
    return f'/orders/{order_code}'


def order_placed(order_code: str) -> Dict:
    return {
        'type': 'order',
        'title': 'Order Placed Successfully',
        'message': f'Your order #{order_code} has been placed successfully.',
        'link': order_link(order_code),
    }


def order_confirmed(order_code: str) -> Dict:
    return {
        'type': 'order',
        'title': 'Order Confirmed',
        'message': f'Your order #{order_code} has been confirmed and is being processed.',
        'link': order_link(order_code),
    }


def order_processing(order_code: str) -> Dict:
    return {
        'type': 'order',
        'title': 'Order Processing',
        'message': f'Your order #{order_code} is now being prepared for shipment.',
        'link': order_link(order_code),
    }


def order_shipped(order_code: str, tracking_number: str = '') -> Dict:
    return {
        'type': 'order',
        'title': 'Order Shipped',
        'message': f'Your order #{order_code} has been shipped. Tracking: {tracking_number or "Check details"}',
        'link': order_link(order_code),
    }


def order_delivered(order_code: str) -> Dict:
    return {
        'type': 'order',
        'title': 'Order Delivered',
        'message': f'Your order #{order_code} has been delivered.',
        'link': order_link(order_code),
    }


def order_status_update(order_code: str, status: str) -> Dict:
    return {
        'type': 'order',
        'title': 'Order Status Update',
        'message': f'Your order #{order_code} is now {status}.',
        'link': order_link(order_code),
    }


def order_items_status_update(order_code: str, status: str) -> Dict:
    return {
        'type': 'order',
        'title': 'Order Status Update',
        'message': f'Item(s) in your order #{order_code} have been marked as {status}.',
        'link': order_link(order_code),
    }


def vendor_new_order(order_code: str) -> Dict:
    return {
        'type': 'order',
        'title': 'New Order Received',
        'message': f'You have received a new order #{order_code}.',
        'link': f'/vendor/orders/{order_code}',
    }


def product_approved(product_name: str) -> Dict:
    return {
        'type': 'product',
        'title': 'Product Approved',
        'message': f'Your product "{product_name}" has been approved and is now live.',
        'link': '/vendor/products',
    }


def product_rejected(product_name: str, reason: str = '') -> Dict:
    return {
        'type': 'product',
        'title': 'Product Rejected',
        'message': f'Your product "{product_name}" was rejected. Reason: {reason or "Not specified"}',
        'link': '/vendor/products',
    }


def vendor_approved() -> Dict:
    return {
        'type': 'system',
        'title': 'Vendor Account Approved',
        'message': 'Congratulations! Your vendor account has been approved. You can now start selling.',
        'link': '/vendor/dashboard',
    }


def vendor_suspended() -> Dict:
    return {
        'type': 'system',
        'title': 'Account Suspended',
        'message': 'Your vendor account has been suspended by the administrator. You can only use customer features.',
        'link': '/',
    }


def vendor_activated() -> Dict:
    return {
        'type': 'system',
        'title': 'Account Activated',
        'message': 'Great news! Your vendor account has been activated. Full access restored.',
        'link': '/vendor/dashboard',
    }


def vendor_rejected(reason: str = '') -> Dict:
    return {
        'type': 'system',
        'title': 'Vendor Application Rejected',
        'message': f'Your vendor application was not approved. Reason: {reason or "Please contact support for details."}',
        'link': '/',
    }


def new_review(subject_name: str, rating: int) -> Dict:
    return {
        'type': 'product',
        'title': 'New Review',
        'message': f'Your product "{subject_name}" received a {rating}-star review.',
        'link': '/vendor/reviews',
    }


def payout_processing(amount) -> Dict:
    return {
        'type': 'system',
        'title': 'Payout Requested',
        'message': f'Your payout request of {format_currency(amount)} is being processed.',
        'link': '/vendor/payouts',
    }


def admin_new_vendor(business_name: str) -> Dict:
    return {
        'type': 'system',
        'title': 'New Vendor Registration',
        'message': f'{business_name} has registered as a new vendor and is awaiting approval.',
        'link': '/admin/vendors',
    }


def admin_new_order(order_code: str, amount) -> Dict:
    return {
        'type': 'order',
        'title': 'New Order Placed',
        'message': f'Order #{order_code} placed - {format_currency(amount)}',
        'link': '/admin/orders',
    }
