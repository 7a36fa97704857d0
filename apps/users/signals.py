import logging

from django.dispatch import receiver
from allauth.account.signals import user_signed_up
from allauth.socialaccount.signals import social_account_added

from .models import CustomUser

logger = logging.getLogger(__name__)


def _assign_role_from_request(request, user):
    """Helper that inspects the request and assigns user.role.

    Signups that start from a vendor page (path or `next` parameter
    mentions "vendor") are tagged as pending vendors; the role itself
    stays `customer` until an admin approves the shop, so only the
    intent is recorded here.
    """
    path = (getattr(request, 'path', '') or '').lower()

    try:
        next_url = (request.GET.get('next', '') or '').lower()
    except AttributeError:
        next_url = ''

    if user.role not in (CustomUser.ROLE_VENDOR, CustomUser.ROLE_ADMIN):
        user.role = CustomUser.ROLE_CUSTOMER
        user.save(update_fields=['role'])

    wants_shop = 'vendor' in path or 'vendor' in next_url
    logger.info(
        f"Signup for {user.email}: role '{user.role}'"
        + (' (vendor registration expected)' if wants_shop else '')
    )
    return wants_shop


@receiver(user_signed_up)
def assign_role_on_account_signup(request, user, **kwargs):
    """Handle role assignment for regular (email/password) signups."""
    if request is None:
        # Nothing we can inspect, default to customer
        user.role = user.role or CustomUser.ROLE_CUSTOMER
        user.save(update_fields=['role'])
        return False

    return _assign_role_from_request(request, user)


@receiver(social_account_added)
def assign_role_on_social_signup(request, sociallogin, **kwargs):
    """Handle role assignment when a user is created/connected via social auth."""
    user = getattr(sociallogin, 'user', None)
    if user is None or user.pk is None:
        return False

    if request is None:
        user.role = user.role or CustomUser.ROLE_CUSTOMER
        user.save(update_fields=['role'])
        return False

    return _assign_role_from_request(request, user)
