"""
Vendor Services Package
Centralized imports for all services
"""

from .ledger import (
    Settlement,
    book_pending_credit,
    compute_settlement,
    credit_vendor_order,
    expand_vendor_ids,
    get_vendor_stats,
    list_vendor_payouts,
    process_vendor_payout,
    recompute_wallet,
    release_pending_credit,
    resolve_commission_rate,
)
from .vendors import (
    get_vendor,
    get_vendor_customers,
    list_vendors,
    register_vendor,
    set_product_status,
    update_vendor_profile,
    update_vendor_status,
)

__all__ = [
    'Settlement',
    'book_pending_credit',
    'compute_settlement',
    'credit_vendor_order',
    'expand_vendor_ids',
    'get_vendor_stats',
    'list_vendor_payouts',
    'process_vendor_payout',
    'recompute_wallet',
    'release_pending_credit',
    'resolve_commission_rate',
    'get_vendor',
    'get_vendor_customers',
    'list_vendors',
    'register_vendor',
    'set_product_status',
    'update_vendor_profile',
    'update_vendor_status',
]
