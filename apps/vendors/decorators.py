"""
Access Control Decorators
JSON-returning guards for the marketplace API views
"""

from functools import wraps

from django.http import JsonResponse

from core.exceptions import MarketplaceError
from core.utils.responses import error_response


def _json_error(message, status):
    return JsonResponse({'success': False, 'error': message}, status=status)


def is_admin(user):
    return user.is_authenticated and (user.is_staff or getattr(user, 'is_admin_role', False))


def selling_vendor(user):
    """
    The user's vendor record when they may currently sell: shop approved,
    role vendor, account not suspended. None otherwise.
    """
    if not user.is_authenticated:
        return None

    vendor = getattr(user, 'vendor', None)
    if vendor is None or not vendor.is_approved:
        return None
    if user.role != user.ROLE_VENDOR or user.status == user.STATUS_SUSPENDED:
        return None
    return vendor


# ==========================================
# AUTHENTICATION
# ==========================================

def login_required_json(view_func):
    """
    Decorator for API views that require a logged-in user
    Returns JSON error instead of redirect

    Usage:
        @login_required_json
        def my_orders(request):
            ...
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return _json_error('Authentication required', 401)

        return view_func(request, *args, **kwargs)

    return wrapper


# ==========================================
# VENDOR ACCESS
# ==========================================

def vendor_required(view_func):
    """
    Decorator to ensure user is authenticated and owns a vendor record
    that has not been suspended or rejected. Attaches request.vendor

    Usage:
        @vendor_required
        def vendor_orders(request):
            ...
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return _json_error('Authentication required', 401)

        vendor = getattr(request.user, 'vendor', None)
        if vendor is None:
            return _json_error('Vendor profile required', 403)

        if vendor.status in (vendor.STATUS_SUSPENDED, vendor.STATUS_REJECTED) \
                or request.user.status == request.user.STATUS_SUSPENDED:
            return _json_error('Your vendor account is suspended', 403)

        request.vendor = vendor
        return view_func(request, *args, **kwargs)

    return wrapper


def approved_vendor_required(view_func):
    """
    Decorator to ensure the vendor has been approved by an admin
    and still holds the vendor role. Pending vendors get a 403
    """
    @wraps(view_func)
    @vendor_required
    def wrapper(request, *args, **kwargs):
        if selling_vendor(request.user) is None:
            return _json_error(
                'Your vendor account is not approved. You will be notified once approved.',
                403,
            )
        return view_func(request, *args, **kwargs)

    return wrapper


# ==========================================
# ADMIN ONLY
# ==========================================

def admin_required(view_func):
    """
    Decorator for views that only admins should access
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return _json_error('Authentication required', 401)

        if not is_admin(request.user):
            return _json_error('Admin access required', 403)

        return view_func(request, *args, **kwargs)

    return wrapper


# ==========================================
# ERROR HANDLING
# ==========================================

def service_errors_as_json(view_func):
    """
    Translate service exceptions raised by the view into JSON errors
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except MarketplaceError as e:
            return error_response(e)

    return wrapper