"""
Shared Helper Functions
Money arithmetic, reference codes, document sanitization and deadlines
"""

import secrets
import string
import time
import logging
from datetime import datetime, date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional, Tuple

from django.conf import settings

from core.exceptions import ValidationError, RequestTimeoutError

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_uppercase
TWO_PLACES = Decimal('0.01')
ONE_PLACE = Decimal('0.1')


# ==========================================
# REFERENCE CODES
# ==========================================

def to_base36(number: int) -> str:
    """Encode a non-negative integer in upper-case base 36"""
    if number < 0:
        raise ValueError('number must be non-negative')
    if number == 0:
        return '0'

    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return ''.join(reversed(digits))


def generate_order_code(prefix: Optional[str] = None, suffix_length: int = 5) -> str:
    """
    Generate a human-facing order code

    Combines the base-36 millisecond timestamp with a short random suffix.
    Collisions are possible; the orders table enforces uniqueness and the
    splitter regenerates on conflict.

    Args:
        prefix: Code prefix (defaults to settings.ORDER_CODE_PREFIX)
        suffix_length: Length of random part

    Returns:
        Order code (e.g., 'ARLZ8K3M9P2Q7XA')
    """
    if prefix is None:
        prefix = getattr(settings, 'ORDER_CODE_PREFIX', 'AR')

    timestamp = to_base36(int(time.time() * 1000))
    random_part = ''.join(secrets.choice(BASE36_ALPHABET) for _ in range(suffix_length))

    return f"{prefix}{timestamp}{random_part}"


def generate_reference(prefix: str = 'REF', length: int = 10) -> str:
    """
    Generate reference code for ledger entries and payouts

    Returns:
        Reference string (e.g., 'PAYOUT_20260101_A8K3M9P2L5')
    """
    chars = string.ascii_uppercase + string.digits
    random_part = ''.join(secrets.choice(chars) for _ in range(length))
    timestamp = datetime.now().strftime('%Y%m%d')

    return f"{prefix}_{timestamp}_{random_part}"


# ==========================================
# MONEY & CALCULATIONS
# ==========================================

def to_decimal(value: Any, field: str = 'amount') -> Decimal:
    """
    Convert user input (int, float, str, Decimal) to Decimal

    Floats go through str() so 0.1 stays 0.1.

    Raises:
        ValidationError: If value is missing or not numeric
    """
    if value is None or value == '':
        raise ValidationError(f'{field} is required', field=field)

    if isinstance(value, bool):
        raise ValidationError(f'{field} must be a number', field=field)

    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(f'{field} must be a number', field=field)

    if not result.is_finite():
        raise ValidationError(f'{field} must be a number', field=field)

    return result


def quantize_money(amount: Decimal) -> Decimal:
    """Round to 2 decimal places (half-up, currency style)"""
    return Decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def calculate_commission(amount: Decimal, commission_rate: Decimal) -> Tuple[Decimal, Decimal]:
    """
    Calculate commission and vendor amount

    Args:
        amount: Gross amount
        commission_rate: Commission percentage (e.g., 10.00 for 10%)

    Returns:
        Tuple of (commission_amount, vendor_amount)
    """
    commission = quantize_money((Decimal(amount) * Decimal(commission_rate)) / 100)
    vendor_amount = quantize_money(Decimal(amount) - commission)

    return commission, vendor_amount


def round_rating(total: Decimal, count: int) -> Decimal:
    """Mean rating rounded to one decimal place, 0 when there are no ratings"""
    if not count:
        return Decimal('0.0')
    return (Decimal(total) / Decimal(count)).quantize(ONE_PLACE, rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal, symbol: Optional[str] = None) -> str:
    """
    Format amount as currency string

    Returns:
        Formatted string (e.g., 'Rs. 10,000.00')
    """
    if symbol is None:
        symbol = getattr(settings, 'CURRENCY_SYMBOL', 'Rs.')

    return f"{symbol} {Decimal(amount):,.2f}"


# ==========================================
# DOCUMENT SANITIZATION
# ==========================================

def sanitize_document(value: Any, fields: Optional[Tuple[str, ...]] = None) -> Any:
    """
    Make a nested structure safe to persist in a JSON column

    - Every key listed in `fields` is present on the top-level dict
      (missing ones become None)
    - Decimals become 2-place strings, dates become ISO strings
    - Nested dicts/lists are sanitized recursively

    Args:
        value: Dict, list or scalar
        fields: Keys a top-level dict must carry

    Returns:
        Sanitized copy
    """
    if isinstance(value, dict):
        cleaned = {str(key): sanitize_document(item) for key, item in value.items()}
        for field in fields or ():
            cleaned.setdefault(field, None)
        return cleaned

    if isinstance(value, (list, tuple)):
        return [sanitize_document(item, fields) for item in value]

    if isinstance(value, Decimal):
        return str(quantize_money(value))

    if isinstance(value, (datetime, date)):
        return value.isoformat()

    return value


# ==========================================
# DEADLINES
# ==========================================

class Deadline:
    """
    Deadline propagated through a multi-step operation

    Call check() before each database step. Raising inside
    transaction.atomic() rolls back everything written so far.
    """

    def __init__(self, seconds: float, clock=time.monotonic):
        self.seconds = seconds
        self._clock = clock
        self.expires_at = clock() + seconds

    @property
    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self._clock() >= self.expires_at

    def check(self, step: str = ''):
        if self.expired:
            logger.warning(f'Deadline of {self.seconds}s exceeded at step: {step or "unknown"}')
            raise RequestTimeoutError()
