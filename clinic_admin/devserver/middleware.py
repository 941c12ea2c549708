"""
Request timing and logging middleware
"""
import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class TimingMiddleware(BaseHTTPMiddleware):
    """
    Log method, path, duration and status for every request
    """
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        # Process request
        response = await call_next(request)

        # Calculate duration
        duration_ms = (time.time() - start_time) * 1000

        logger.info(f"[TIMING] {request.method} {request.url.path} | duration={duration_ms:.2f}ms | status={response.status_code}")

        return response
