import uuid
from fastapi.responses import JSONResponse
from fastapi.requests import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from core.exceptions import StoreApiError
from core.logging_config import get_logger, log_error

logger = get_logger("core.handlers")


def create_response(success: bool, message: str, data=None, code=status.HTTP_200_OK):
    return JSONResponse(
        status_code=code,
        content={
            "success": success,
            "message": message,
            "data": jsonable_encoder(data) if data is not None else []
        }
    )


def _request_info(request: Request) -> dict:
    return {
        "method": request.method,
        "url": str(request.url),
        "client_host": request.client.host if request.client else "unknown",
        "request_id": getattr(request.state, "request_id", None),
    }


async def store_api_exception_handler(request: Request, exc: StoreApiError):
    """Render domain errors with their status and error code"""
    logger.warning(
        f"Store API error: {exc.error_code} - {exc.message}",
        extra={
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            **_request_info(request),
        }
    )

    return create_response(
        success=False,
        message=exc.message,
        data={"code": exc.error_code, **exc.parameters},
        code=exc.status_code,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with proper logging"""
    error_id = str(uuid.uuid4())

    log_error(
        logger,
        f"HTTP Exception: {exc.status_code} - {exc.detail}",
        error_id=error_id,
        status_code=exc.status_code,
        exception_detail=exc.detail,
        **_request_info(request),
    )

    message = exc.detail if isinstance(exc.detail, str) else "Error occurred"

    return create_response(
        success=False,
        message=message,
        data={"error_id": error_id} if exc.status_code >= 500 else None,
        code=exc.status_code,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation exceptions with proper logging"""
    error_id = str(uuid.uuid4())

    logger.warning(
        f"Validation Error: {len(exc.errors())} validation errors",
        extra={
            "error_id": error_id,
            "validation_errors": exc.errors(),
            "error_count": len(exc.errors()),
            **_request_info(request),
        }
    )

    return create_response(
        success=False,
        message="Validation error",
        data={"validation_errors": exc.errors(), "error_id": error_id},
        code=status.HTTP_422_UNPROCESSABLE_ENTITY,
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions with comprehensive logging"""
    error_id = str(uuid.uuid4())

    logger.critical(
        f"Unhandled Exception: {type(exc).__name__}: {str(exc)}",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
            **_request_info(request),
        }
    )

    # Internal details stay in the logs
    return create_response(
        success=False,
        message="Internal server error",
        data={"error_id": error_id},
        code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
