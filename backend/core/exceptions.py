"""
Domain errors raised by the storage layer and the DRF exception handler
that renders them as ``{"error": message}``.
"""
import logging

from django.http import Http404
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class AtelierError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Request could not be processed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(AtelierError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Not found'


class InsufficientStockError(AtelierError):
    default_message = 'Insufficient stock'


class DuplicateNameError(AtelierError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Name already exists'


class BusinessRuleError(AtelierError):
    pass


def api_exception_handler(exc, context):
    """Render domain and DRF errors as ``{"error": ...}`` JSON."""
    view = context.get('view')
    view_name = getattr(view, '__name__', None) or view.__class__.__name__

    if isinstance(exc, AtelierError):
        logger.warning(f"{exc.__class__.__name__} in {view_name}: {exc.message}")
        return Response({'error': exc.message}, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        logger.error(f"Unexpected error in {view_name}: {str(exc)}", exc_info=exc)
        return Response({'error': 'An unexpected error occurred'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, Http404):
        response.data = {'error': 'Not found'}
    elif isinstance(response.data, dict) and set(response.data) == {'detail'}:
        response.data = {'error': str(response.data['detail'])}
    return response
