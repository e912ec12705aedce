"""Request helpers and audit logging"""
import logging
from datetime import datetime, time

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from rest_framework import serializers

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None):
    """
    Create an audit log entry

    Args:
        request: Django/DRF request (for user and IP), optional if user is provided
        action: Action type (create, update, delete, stock_in, login, ...)
        model_name: Name of the model being acted upon
        object_id: ID of the object
        changes: Dictionary of changes made; values are stringified for JSON
        user: Optional user override (defaults to request.user)
        object_name: Human-readable name of the object (piece name, order number)
    """
    audit_user = user
    if audit_user is None and request is not None:
        audit_user = getattr(request, 'user', None)

    if not action or not model_name or object_id is None:
        logger.warning(f"Audit log creation skipped: missing required fields (action={action}, model_name={model_name}, object_id={object_id})")
        return None

    try:
        return AuditLog.objects.create(
            user=audit_user if audit_user is not None and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            changes=_jsonable(changes or {}),
            ip_address=get_client_ip(request) if request else None,
        )
    except Exception as e:
        # The mutation already succeeded; a lost audit row is only logged.
        logger.error(f"Failed to create audit log: {str(e)}", exc_info=True)
        return None


def _jsonable(value):
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


class ListQuerySerializer(serializers.Serializer):
    """Base for query-string serializers: blank parameters count as absent.

    ``aliases`` maps public parameter names that are Python keywords
    (``from``, ``to``) onto field names.
    """
    aliases = {}

    def to_internal_value(self, data):
        cleaned = {}
        for key, value in data.items():
            if value in ('', None):
                continue
            cleaned[self.aliases.get(key, key)] = value
        return super().to_internal_value(cleaned)


def parse_query(serializer_class, request):
    """Validate ``request.query_params``; invalid input raises a 400."""
    serializer = serializer_class(data=request.query_params.dict())
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


class DateBoundField(serializers.Field):
    """ISO date or datetime used as a range bound; a bare date covers the whole day."""

    default_error_messages = {
        'invalid': 'Expected an ISO date or datetime.',
    }

    def __init__(self, end=False, **kwargs):
        self.end = end
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        text = str(data).strip()
        try:
            value = parse_datetime(text)
            if value is None:
                day = parse_date(text)
                if day is None:
                    self.fail('invalid')
                value = datetime.combine(day, time.max if self.end else time.min)
        except ValueError:
            self.fail('invalid')
        if timezone.is_naive(value):
            value = timezone.make_aware(value)
        return value

    def to_representation(self, value):
        return value.isoformat()
