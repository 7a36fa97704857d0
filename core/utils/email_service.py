"""
Outbound email over Django's configured backend
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from django.conf import settings
from django.core.mail import EmailMultiAlternatives

from core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def clean_recipients(recipient_list: Optional[Iterable[str]]) -> list[str]:
    return [str(r).strip() for r in (recipient_list or []) if r and str(r).strip()]


def send_marketplace_email(
    subject: str,
    message: str,
    recipient_list: Iterable[str],
    html_message: Optional[str] = None,
    from_email: Optional[str] = None,
) -> int:
    """
    Send one email, plain text with an optional HTML alternative

    Backend errors propagate to the caller.

    Raises:
        ValidationError: empty subject, non-string body or no usable recipient
    """
    if not subject or not isinstance(subject, str):
        raise ValidationError('Email subject is required', field='subject')

    if not isinstance(message, str):
        raise ValidationError('Email message must be text', field='message')

    recipients = clean_recipients(recipient_list)
    if not recipients:
        raise ValidationError('At least one recipient is required', field='recipient_list')

    email = EmailMultiAlternatives(
        subject=subject,
        body=message,
        from_email=from_email or settings.DEFAULT_FROM_EMAIL,
        to=recipients,
    )
    if html_message:
        email.attach_alternative(html_message, 'text/html')

    sent_count = email.send(fail_silently=False)
    logger.info(f'Email "{subject}" sent to {len(recipients)} recipient(s)')
    return sent_count
