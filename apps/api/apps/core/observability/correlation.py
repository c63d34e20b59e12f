"""
Request correlation middleware.

Generates/propagates X-Request-ID and injects it into logs.
"""
import uuid
import time
import logging
from django.utils.deprecation import MiddlewareMixin
from threading import local

# Thread-local storage for request context
_request_context = local()

logger = logging.getLogger(__name__)


def get_request_id():
    """Get current request ID from thread-local storage."""
    return getattr(_request_context, 'request_id', None)


def get_user_id():
    """Get current user ID from thread-local storage."""
    return getattr(_request_context, 'user_id', None)


def get_user_role():
    """Get current user role from thread-local storage."""
    return getattr(_request_context, 'user_role', None)


class RequestCorrelationMiddleware(MiddlewareMixin):
    """
    Middleware to handle request correlation.

    - Generates/propagates X-Request-ID
    - Stores context in thread-local for logging
    - Adds correlation header to response
    - Logs request duration
    """

    REQUEST_ID_HEADER = 'HTTP_X_REQUEST_ID'

    def process_request(self, request):
        """Process incoming request and setup correlation context."""
        request_id = request.META.get(self.REQUEST_ID_HEADER)
        if not request_id:
            request_id = str(uuid.uuid4())

        request.request_id = request_id
        request.start_time = time.time()

        _request_context.request_id = request_id

        # Session-authenticated users only; JWT users resolve inside DRF views
        user = getattr(request, 'user', None)
        if user is not None and user.is_authenticated:
            _request_context.user_id = str(user.id)
            _request_context.user_role = getattr(user, 'role', None)
        else:
            _request_context.user_id = None
            _request_context.user_role = None

    def process_response(self, request, response):
        """Add correlation header to response and log completion."""
        if hasattr(request, 'request_id'):
            response['X-Request-ID'] = request.request_id

        if hasattr(request, 'start_time'):
            duration_ms = (time.time() - request.start_time) * 1000

            logger.info(
                'Request completed',
                extra={
                    'event': 'http_request_completed',
                    'path': request.path,
                    'method': request.method,
                    'status_code': response.status_code,
                    'duration_ms': round(duration_ms, 2),
                    'request_id': getattr(request, 'request_id', None),
                    'user_id': get_user_id(),
                }
            )

        clear_request_context()
        return response

    def process_exception(self, request, exception):
        """Log exceptions with correlation context."""
        duration_ms = 0
        if hasattr(request, 'start_time'):
            duration_ms = (time.time() - request.start_time) * 1000

        logger.error(
            f'Request failed: {exception.__class__.__name__}',
            exc_info=True,
            extra={
                'event': 'http_request_exception',
                'path': request.path,
                'method': request.method,
                'exception_type': exception.__class__.__name__,
                'duration_ms': round(duration_ms, 2),
                'request_id': getattr(request, 'request_id', None),
                'user_id': get_user_id(),
            }
        )


def clear_request_context():
    """Clear thread-local request context."""
    for attr in ['request_id', 'user_id', 'user_role']:
        if hasattr(_request_context, attr):
            delattr(_request_context, attr)
