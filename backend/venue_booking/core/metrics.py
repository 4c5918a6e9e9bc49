"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking request metrics
booking_requests = Counter(
    'booking_requests_total',
    'Public booking request submissions',
    ['outcome']  # created, booked, past, missing, invalid, insert_error
)

# Notification metrics
email_notifications = Counter(
    'email_notifications_total',
    'Booking confirmation emails',
    ['result']  # sent, skipped, failed
)

# Admin metrics
admin_status_updates = Counter(
    'admin_status_updates_total',
    'Booking status changes made from the admin console',
    ['status']
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get: hit/miss, set: stored/error
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_request(outcome: str):
    """Record booking submission. Outcome: created, booked, past, missing, invalid, insert_error"""
    booking_requests.labels(outcome=outcome).inc()


def record_email(result: str):
    """Record notification outcome. Result: sent, skipped, failed"""
    email_notifications.labels(result=result).inc()


def record_status_update(status: str):
    admin_status_updates.labels(status=status).inc()


def record_cache_operation(operation: str, result: str):
    """Record cache operation. get: hit/miss, set: stored/error"""
    cache_operations.labels(operation=operation, result=result).inc()
