"""
Marketplace Exceptions
Error taxonomy shared by the order, vendor, review and notification services.

Views translate these into JSON error responses (see core.utils.responses).
"""


class MarketplaceError(Exception):
    """Base exception for all marketplace service errors"""

    status_code = 400
    default_message = 'Request could not be processed'

    def __init__(self, message=None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(MarketplaceError):
    """Malformed or missing input. Always fixable by the caller."""

    default_message = 'Invalid request data'


class NotFoundError(MarketplaceError):
    """Referenced order/vendor/product/review does not exist"""

    status_code = 404
    default_message = 'Not found'

    def __init__(self, kind: str, key=None):
        self.kind = kind
        self.key = key
        message = f'{kind} not found' if key is None else f'{kind} not found: {key}'
        super().__init__(message, kind=kind, key=key)


class InsufficientBalanceError(MarketplaceError):
    """Payout amount exceeds the vendor's available balance"""

    status_code = 409
    default_message = 'Insufficient balance for payout'

    def __init__(self, requested=None, available=None):
        self.requested = requested
        self.available = available
        super().__init__(requested=requested, available=available)


class StateError(MarketplaceError):
    """Illegal status transition"""

    status_code = 409

    def __init__(self, current: str, requested: str, axis: str = 'order'):
        self.current = current
        self.requested = requested
        self.axis = axis
        super().__init__(
            f'Cannot move {axis} status from "{current}" to "{requested}"',
            current=current,
            requested=requested,
        )


class PersistenceError(MarketplaceError):
    """Underlying database operation failed. Caller may retry."""

    status_code = 503
    default_message = 'Could not save changes. Please try again.'


class RequestTimeoutError(MarketplaceError):
    """Operation exceeded its deadline"""

    status_code = 504
    default_message = 'Request timed out. Please check your internet connection.'
