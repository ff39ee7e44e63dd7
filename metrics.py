"""Prometheus metrics for the interview task store."""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
import time
from functools import wraps
from logger import logger

# Define metrics
storage_read_failures = Counter(
    'storage_read_failures_total',
    'Collection reads that fell back to an empty collection',
    ['key']
)

storage_writes = Counter(
    'storage_writes_total',
    'Whole-collection writes',
    ['key']
)

storage_write_duration = Histogram(
    'storage_write_duration_seconds',
    'Whole-collection write latency'
)

ledger_tasks_created = Counter(
    'ledger_tasks_created_total',
    'Task ledger entries created',
    ['type']
)

submissions_created = Counter(
    'submissions_created_total',
    'Candidate submissions recorded'
)

reviews_attached = Counter(
    'reviews_attached_total',
    'Reviews attached to submissions'
)

interview_tasks_created = Counter(
    'interview_tasks_created_total',
    'Interview tasks created'
)

error_count = Counter(
    'errors_total',
    'Total user-facing errors',
    ['error_type', 'action']
)


def track_time(metric_histogram):
    """Decorator to track execution time."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return func(*args, **kwargs)
            finally:
                duration = time.time() - start_time
                metric_histogram.observe(duration)
                logger.debug(f"{func.__name__} took {duration:.3f}s", extra={
                    'function': func.__name__,
                    'duration': duration
                })
        return wrapper
    return decorator


def render_metrics() -> tuple[bytes, str]:
    """Generate Prometheus exposition text and its content type."""
    return generate_latest(), CONTENT_TYPE_LATEST
