"""
Order Status Rules
Status choices and the transition table shared by the overall order and
each vendor's sub-order
"""

from core.exceptions import StateError, ValidationError

PENDING = 'pending'
CONFIRMED = 'confirmed'
PROCESSING = 'processing'
SHIPPED = 'shipped'
DELIVERED = 'delivered'
CANCELLED = 'cancelled'

STATUS_CHOICES = [
    (PENDING, 'Pending'),
    (CONFIRMED, 'Confirmed'),
    (PROCESSING, 'Processing'),
    (SHIPPED, 'Shipped'),
    (DELIVERED, 'Delivered'),
    (CANCELLED, 'Cancelled'),
]

# Forward path; skipping ahead is allowed
PROGRESSION = [PENDING, CONFIRMED, PROCESSING, SHIPPED, DELIVERED]

TERMINAL_STATUSES = frozenset({DELIVERED, CANCELLED})

ALLOWED_TRANSITIONS = {
    status: [later for later in PROGRESSION[index + 1:]] + [CANCELLED]
    for index, status in enumerate(PROGRESSION)
    if status not in TERMINAL_STATUSES
}
ALLOWED_TRANSITIONS[DELIVERED] = []
ALLOWED_TRANSITIONS[CANCELLED] = []

PAYMENT_PENDING = 'pending'
PAYMENT_PROCESSING = 'processing'
PAYMENT_COMPLETED = 'completed'
PAYMENT_FAILED = 'failed'
PAYMENT_REFUNDED = 'refunded'

PAYMENT_STATUS_CHOICES = [
    (PAYMENT_PENDING, 'Pending'),
    (PAYMENT_PROCESSING, 'Processing'),
    (PAYMENT_COMPLETED, 'Completed'),
    (PAYMENT_FAILED, 'Failed'),
    (PAYMENT_REFUNDED, 'Refunded'),
]

# Statuses the customer is told about
CUSTOMER_NOTIFIED_STATUSES = frozenset({SHIPPED, DELIVERED, CANCELLED})


def validate_status(status: str) -> str:
    if status not in ALLOWED_TRANSITIONS:
        raise ValidationError(f'Unknown order status: {status}', field='status')
    return status


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, [])


def check_transition(current: str, new: str, axis: str = 'order'):
    """
    Raises:
        ValidationError: new status is not a known status
        StateError: move is same-state, backward or out of a terminal status
    """
    validate_status(new)
    if not can_transition(current, new):
        raise StateError(current, new, axis=axis)
