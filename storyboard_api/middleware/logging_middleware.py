import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from storyboard_api.logging_config import get_logger

logger = get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        client = request.client.host if request.client else "unknown"

        logger.info(f"Request: {request.method} {request.url.path} - Client: {client}")

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            f"Response: {request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.4f}s"
        )

        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response
