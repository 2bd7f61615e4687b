import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from core.logging_config import get_logger, log_api_request

logger = get_logger("core.middleware")

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all API requests and responses"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Reuse an upstream request id so logs can be correlated across proxies
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.perf_counter()

        method = request.method
        path = request.url.path
        client_host = request.client.host if request.client else "unknown"

        logger.debug(
            f"Request started: {method} {path}",
            extra={
                "request_id": request_id,
                "method": method,
                "path": path,
                "client_host": client_host,
                "user_agent": request.headers.get("user-agent", ""),
                "event": "request_start"
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {method} {path} - {type(e).__name__}: {str(e)}",
                exc_info=e,
                extra={
                    "request_id": request_id,
                    "method": method,
                    "path": path,
                    "client_host": client_host,
                    "duration": duration_ms,
                    "event": "request_error"
                }
            )
            # Re-raise the exception to be handled by exception handlers
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        log_api_request(
            logger=logger,
            method=method,
            endpoint=path,
            status_code=response.status_code,
            duration_ms=duration_ms,
            request_id=request_id,
            sales_channel_id=getattr(request.state, "sales_channel_id", None),
            customer_id=getattr(request.state, "customer_id", None),
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
