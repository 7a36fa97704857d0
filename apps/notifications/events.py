"""
Marketplace Domain Events
Signals sent by the order, vendor and review services once their
transaction commits. Receivers live in apps.notifications.receivers.
"""

import logging

from django.db import transaction
from django.dispatch import Signal

logger = logging.getLogger(__name__)


# ==========================================
# ORDER EVENTS
# ==========================================

# kwargs: order, vendor_orders
order_placed = Signal()

# kwargs: vendor_order, previous_status, new_status
vendor_order_status_changed = Signal()

# kwargs: order, previous_status, new_status
order_status_changed = Signal()


# ==========================================
# VENDOR EVENTS
# ==========================================

# kwargs: vendor
vendor_registered = Signal()

# kwargs: vendor, previous_status, new_status, reason
vendor_status_changed = Signal()

# kwargs: product, previous_status, new_status, reason
product_status_changed = Signal()

# kwargs: payout
payout_requested = Signal()


# ==========================================
# REVIEW EVENTS
# ==========================================

# kwargs: review
review_submitted = Signal()


def emit(signal: Signal, sender, **kwargs):
    """
    Send a domain event after the current transaction commits

    Outside a transaction the event is sent immediately. Receiver
    failures are logged and never reach the caller.
    """
    def _send():
        responses = signal.send_robust(sender=sender, **kwargs)
        for receiver, response in responses:
            if isinstance(response, Exception):
                logger.error(
                    f'Event receiver {getattr(receiver, "__name__", receiver)} failed: {response}',
                    exc_info=response,
                )

    transaction.on_commit(_send, robust=True)
