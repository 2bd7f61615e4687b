from fastapi import FastAPI
from routers import wishlist as wishlist_router
from core.config import settings
from core.exceptions import StoreApiError
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from core.handlers import (
    store_api_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    general_exception_handler,
)
from core.logging_config import setup_logging, get_logger
from core.middleware import LoggingMiddleware

# ------------------------------------------------------
# Logging setup
# ------------------------------------------------------
setup_logging(
    log_level=settings.LOG_LEVEL,
    log_to_console=settings.LOG_TO_CONSOLE,
    json_logs=settings.JSON_LOGS,
)
logger = get_logger("store_api")

# ------------------------------------------------------
# FastAPI app
# ------------------------------------------------------
app = FastAPI(title=settings.PROJECT_NAME)

app.add_middleware(LoggingMiddleware)

logger.info(f"Starting {settings.PROJECT_NAME} application", extra={
    "log_level": settings.LOG_LEVEL,
    "api_versions": settings.SUPPORTED_API_VERSIONS,
})

# ------------------------------------------------------
# Routers
# ------------------------------------------------------
logger.info("Registering API routes")
app.include_router(wishlist_router.router, prefix=settings.STORE_API_PREFIX, tags=["Wishlist"])

# ------------------------------------------------------
# Global exception handlers
# ------------------------------------------------------
logger.info("Registering global exception handlers")
app.add_exception_handler(StoreApiError, store_api_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)


# ------------------------------------------------------
# Health check
# ------------------------------------------------------
@app.head("/")
def health_check():
    logger.debug("Health check endpoint accessed")
    return {
        "status": "ok",
        "service": settings.PROJECT_NAME,
        "message": "Service is running"
    }


logger.info(f"{settings.PROJECT_NAME} application startup complete")
