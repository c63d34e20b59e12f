"""
Health check endpoints.

Provides /healthz and /readyz endpoints for monitoring.
"""
from django.http import JsonResponse
from django.views import View
from django.db import DatabaseError, connection
from django.conf import settings

from .logging import get_sanitized_logger

logger = get_sanitized_logger(__name__)


class HealthzView(View):
    """
    Basic health check endpoint.

    Returns 200 OK if application is running.
    Does not check dependencies.
    """

    def get(self, request):
        """Return basic health status."""
        health_data = {
            'status': 'ok',
            'version': getattr(settings, 'VERSION', 'unknown'),
        }

        commit_hash = getattr(settings, 'COMMIT_HASH', None)
        if commit_hash:
            health_data['commit'] = commit_hash

        return JsonResponse(health_data, status=200)


class ReadyzView(View):
    """
    Readiness check endpoint.

    Returns 200 OK if the database accepts queries, 503 otherwise.
    """

    def get(self, request):
        """Return readiness status with dependency checks."""
        checks = {
            'database': self._check_database(),
        }

        all_healthy = all(checks.values())

        response_data = {
            'status': 'ready' if all_healthy else 'not_ready',
            'checks': checks,
        }

        return JsonResponse(response_data, status=200 if all_healthy else 503)

    def _check_database(self):
        """Check database connection."""
        try:
            with connection.cursor() as cursor:
                cursor.execute('SELECT 1')
                return True
        except DatabaseError as e:
            logger.error(
                'Database health check failed',
                extra={
                    'event': 'health_check_failed',
                    'check': 'database',
                    'error': str(e)
                }
            )
            return False
