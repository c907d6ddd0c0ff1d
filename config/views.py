import logging

from django.db import connection
from django.http import JsonResponse
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def health_check(request):
    """Liveness probe for the hosting platform."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
    except Exception:
        logger.exception('Health check failed: database unreachable')
        return JsonResponse({'status': 'error', 'database': 'unreachable'}, status=503)
    return JsonResponse({'status': 'ok'})


def api_exception_handler(exc, context):
    """
    Reshape DRF error responses into ``{"error": ..., "code": ...}``.

    Clients identify failures by ``code`` (e.g. ``already_redeemed``),
    never by matching on the message. Field validation errors keep
    DRF's per-field structure.
    """
    response = exception_handler(exc, context)
    if response is None:
        return None

    data = response.data
    if isinstance(data, dict) and 'detail' in data:
        detail = data['detail']
        code = getattr(detail, 'code', None) or getattr(exc, 'default_code', 'error')
        response.data = {'error': str(detail), 'code': code}

    if response.status_code >= 500:
        logger.error('API error %s in %s: %s', response.status_code, context.get('view'), exc)

    return response


def error_404(request, exception):
    """Custom 404 handler."""
    return JsonResponse({
        'error': 'Not found',
        'status': 404
    }, status=404)


def error_500(request):
    """Custom 500 handler."""
    return JsonResponse({
        'error': 'Internal server error',
        'status': 500
    }, status=500)
