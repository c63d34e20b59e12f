"""
Observability module for the donor registry.

Provides structured logging, metrics, domain events and health checks
with donor PII protection.
"""
from .metrics import metrics
from .events import log_domain_event
from .logging import get_sanitized_logger

__all__ = ['metrics', 'log_domain_event', 'get_sanitized_logger']
