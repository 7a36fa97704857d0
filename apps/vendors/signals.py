"""
Vendor App Signals
Automatically create the wallet for new vendors
"""

import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Vendor, Wallet

logger = logging.getLogger(__name__)


# ==========================================
# VENDOR SIGNALS
# ==========================================

@receiver(post_save, sender=Vendor)
def create_vendor_wallet(sender, instance, created, **kwargs):
    """
    Automatically create a Wallet when a Vendor is created
    Commission rate starts at settings.DEFAULT_COMMISSION_RATE
    """
    if created:
        Wallet.objects.get_or_create(vendor=instance)
        logger.info(f"Wallet created for vendor: {instance.business_name or instance.pk}")
