"""
WSGI config for the AR ONE marketplace project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'ArOneMarketplace.settings')

application = get_wsgi_application()
