"""
FastAPI scaffolding shared by the voter, poll and votes services.

Every service gets the same outer surface:
- CORS and rate limiting middleware
- Request counters feeding the health endpoint and Prometheus
- GET / (welcome), GET /<resource>/health and GET /metrics
"""
import logging
import time

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from .config import ServiceSettings
from .errors import VotingError
from .stats import RequestStats

logger = logging.getLogger(__name__)

# Prometheus metrics
request_counter = Counter(
    "http_requests_total",
    "Total number of HTTP requests handled",
    ["service", "method", "status"]
)
request_duration = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["service", "method"]
)


def configure_logging(settings: ServiceSettings) -> None:
    """Configure root logging for a service process."""
    level = logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def http_error(error: VotingError) -> HTTPException:
    """Translate a domain error into the matching HTTP error."""
    return HTTPException(status_code=error.status_code, detail=error.message)


def install_common(
    app: FastAPI,
    settings: ServiceSettings,
    stats: RequestStats,
    resource: str,
    welcome: str
) -> None:
    """
    Add middleware and the shared endpoints to a service app.

    Must run before the service's own routes are included so that
    /<resource>/health is not captured by /<resource>/{id}.

    Args:
        app: The service application
        settings: Service settings
        stats: Request counters for this app
        resource: Collection path segment, e.g. "voters"
        welcome: Message returned by GET /
    """
    app.state.stats = stats

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )

    app.state.limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[settings.RATE_LIMIT]
    )
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    @app.middleware("http")
    async def stats_middleware(request: Request, call_next):
        """Middleware to count requests, errors and handling time."""
        stats.record_call()
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration = time.perf_counter() - start
            stats.record_result(status_code, duration)
            request_counter.labels(
                service=settings.SERVICE_NAME,
                method=request.method,
                status=str(status_code)
            ).inc()
            request_duration.labels(
                service=settings.SERVICE_NAME,
                method=request.method
            ).observe(duration)

    router = APIRouter()

    @router.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "message": welcome,
            "service": settings.SERVICE_NAME,
            "version": settings.API_VERSION
        }

    @router.get(f"/{resource}/health")
    async def health_check(request: Request):
        """Report uptime and request counters for this process."""
        return request.app.state.stats.snapshot()

    @router.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(
            content=generate_latest(),
            media_type=CONTENT_TYPE_LATEST
        )

    app.include_router(router)
