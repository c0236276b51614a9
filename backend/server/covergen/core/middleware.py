"""
Request logging middleware
"""
import time
import uuid
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
import structlog

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


def get_client_ip(request: Request) -> str:
    """Client IP address, honouring proxy headers"""
    for header in ("X-Forwarded-For", "X-Real-IP"):
        if header in request.headers:
            # Take the first IP in case of comma-separated list
            ip = request.headers[header].split(",")[0].strip()
            if ip:
                return ip
    return request.client.host if request.client else "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request and binds a request id to every log event it produces"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.time()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client_ip=get_client_ip(request),
        )

        response = await call_next(request)
        process_time = time.time() - start_time

        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time=round(process_time, 4),
        )

        response.headers["X-Process-Time"] = str(process_time)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
