import logging
import time
from typing import Optional

from fastapi import Request
from prometheus_client import Counter, Gauge, Histogram
from starlette.routing import Match

logger = logging.getLogger(__name__)

UNMATCHED_ROUTE = "unmatched"

# ----------------------------- HTTP -----------------------------

http_requests_total = Counter(
    "http_requests_total",
    "HTTP requests by route template and status",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

http_requests_in_progress = Gauge(
    "http_requests_in_progress",
    "HTTP requests currently being served",
    ["method"],
)

# ----------------------------- Planning -----------------------------

db_operations_total = Counter(
    "db_operations_total",
    "MongoDB writes by collection and outcome",
    ["operation_type", "collection", "status"],
)

plan_edits_total = Counter(
    "dyeing_plan_edits_total",
    "Saved dyeing plan edits",
    ["operation"],  # field, status, chemical_add, chemical_update, chemical_remove, reorder, recalculate
)

occupancy_queries_total = Counter(
    "machine_occupancy_queries_total",
    "Machine occupancy lookups",
    ["result"],  # occupied, free
)


def _route_template(request: Request) -> str:
    """
    Path template of the matching route (/api/v1/production/machines/{machine_no}/slots),
    so label cardinality does not grow with plan ids.
    """
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", UNMATCHED_ROUTE)
    return UNMATCHED_ROUTE


class PrometheusMiddleware:
    """HTTP middleware recording request count, latency and concurrency."""

    async def __call__(self, request: Request, call_next):
        method = request.method
        endpoint = _route_template(request)
        status_code: Optional[int] = None

        http_requests_in_progress.labels(method=method).inc()
        started = time.perf_counter()
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception as e:
            status_code = 500
            logger.error(f"{method} {endpoint} failed: {e}")
            raise
        finally:
            http_requests_in_progress.labels(method=method).dec()
            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
                time.perf_counter() - started
            )
            http_requests_total.labels(
                method=method, endpoint=endpoint, status_code=status_code
            ).inc()


def track_db_operation(operation_type: str, collection: str, success: bool):
    db_operations_total.labels(
        operation_type=operation_type,
        collection=collection,
        status="success" if success else "error",
    ).inc()


def track_plan_edit(operation: str):
    plan_edits_total.labels(operation=operation).inc()


def track_occupancy_query(occupied: bool):
    occupancy_queries_total.labels(result="occupied" if occupied else "free").inc()
