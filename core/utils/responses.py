"""
JSON response helpers shared by the app views
"""

import json
import logging
from decimal import Decimal

from django.core.serializers.json import DjangoJSONEncoder
from django.http import JsonResponse

from core.exceptions import MarketplaceError, ValidationError

logger = logging.getLogger(__name__)


class MarketplaceJSONEncoder(DjangoJSONEncoder):
    """Serialize Decimal amounts as numbers-in-strings with 2 places"""

    def default(self, o):
        if isinstance(o, Decimal):
            return str(o)
        return super().default(o)


def json_response(data, status: int = 200) -> JsonResponse:
    return JsonResponse(data, status=status, encoder=MarketplaceJSONEncoder, safe=False)


def error_response(error: MarketplaceError) -> JsonResponse:
    """Translate a service exception into a JSON error body"""
    logger.info(f'{error.__class__.__name__}: {error.message}')
    return JsonResponse(
        {'success': False, 'error': error.message, 'code': error.__class__.__name__},
        status=error.status_code,
    )


def parse_json_body(request) -> dict:
    """
    Read a JSON object from the request body, falling back to POST data

    Raises:
        ValidationError: If body is not valid JSON object
    """
    if request.content_type == 'application/json':
        try:
            data = json.loads(request.body or b'{}')
        except ValueError:
            raise ValidationError('Request body must be valid JSON')
        if not isinstance(data, dict):
            raise ValidationError('Request body must be a JSON object')
        return data

    return request.POST.dict()
