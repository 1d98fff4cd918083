import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from config.settings import settings

logger = logging.getLogger("gpa_dashboard.request")


class TimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = int((time.perf_counter() - start) * 1000)
        response.headers["X-Latency-Ms"] = str(latency_ms)
        if settings.REQUEST_LOG_ENABLED:
            logger.info(f"{request.method} {request.url.path} → {response.status_code} ({latency_ms}ms)")
        return response
