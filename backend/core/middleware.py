import logging
import time

logger = logging.getLogger('backend.requests')
audit_logger = logging.getLogger('backend.audit')

AUDITED_PREFIXES = (
    '/api/auth',
    '/api/login',
    '/api/register',
    '/api/logout',
    '/api/password',
)


class RequestLoggingMiddleware:
    """Log every /api request with its status and duration; auth routes also go to the audit log."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if not request.path.startswith('/api'):
            return self.get_response(request)

        start = time.monotonic()
        response = self.get_response(request)
        duration_ms = int((time.monotonic() - start) * 1000)

        user = getattr(request, 'user', None)
        user_id = user.id if user is not None and user.is_authenticated else None
        message = f"{request.method} {request.path} {response.status_code} in {duration_ms}ms (user {user_id})"

        if response.status_code >= 500:
            logger.error(message)
        elif response.status_code >= 400:
            logger.warning(message)
        else:
            logger.info(message)

        if request.path.startswith(AUDITED_PREFIXES):
            audit_logger.info(f"[AUTH] user {user_id}: {request.method} {request.path} {response.status_code} ({duration_ms}ms)")
        return response
