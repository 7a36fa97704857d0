"""
Send one email through the configured backend to check delivery settings
Run: python manage.py send_test_email someone@example.com [--html]
"""

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from core.exceptions import MarketplaceError
from core.utils.email_service import send_marketplace_email


class Command(BaseCommand):
    help = 'Send a test email using the configured email backend'

    def add_arguments(self, parser):
        parser.add_argument('to', nargs='+', help='Recipient email address(es)')
        parser.add_argument('--subject', default=f'{settings.SITE_NAME} test email')
        parser.add_argument('--message', default=f'This is a test email sent from {settings.SITE_NAME}.')
        parser.add_argument('--html', action='store_true', help='Attach an HTML version of the message')

    def handle(self, *args, **options):
        if settings.EMAIL_BACKEND.endswith('smtp.EmailBackend') and not settings.EMAIL_HOST_PASSWORD:
            raise CommandError('EMAIL_HOST_PASSWORD is not set')

        html_message = f'<p>{options["message"]}</p>' if options['html'] else None

        try:
            sent = send_marketplace_email(
                subject=options['subject'],
                message=options['message'],
                recipient_list=options['to'],
                html_message=html_message,
            )
        except MarketplaceError as e:
            raise CommandError(e.message) from e
        except OSError as e:
            raise CommandError(f'Email send failed: {e}') from e

        self.stdout.write(self.style.SUCCESS(f'Sent {sent} email(s) to {", ".join(options["to"])}'))
