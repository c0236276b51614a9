"""
CoverGen Backend - Main FastAPI Application
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from covergen.core.config import settings
from covergen.core.logging import configure_logging
from covergen.core.middleware import LoggingMiddleware
from covergen.api.v1.api import api_router
from covergen.schemas.common import ErrorResponse
from covergen.core.exceptions import (
    AuthenticationError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    StorageError,
    ValidationError,
)
import structlog
import time

configure_logging()
logger = structlog.get_logger()

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Backend for generating app store cover images from project assets and a wizard configuration.",
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc"
)

app.add_middleware(LoggingMiddleware)

# Set up CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time", "X-Request-ID"]
)


def error_response(status_code: int, message, details=None) -> JSONResponse:
    body = ErrorResponse(code=status_code, message=message, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


# Global exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with proper error format"""
    logger.warning(
        "HTTP Exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method
    )
    return error_response(exc.status_code, exc.detail)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    # Only include loc, msg and type of each error
    error_details = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]
    logger.warning(
        "Request Validation Error",
        errors=error_details,
        path=request.url.path,
        method=request.method
    )
    return error_response(422, "Request validation failed", details=error_details)


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    return error_response(422, str(exc))


@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError):
    return error_response(404, str(exc))


@app.exception_handler(InvalidStateError)
async def invalid_state_exception_handler(request: Request, exc: InvalidStateError):
    """Illegal job status transition"""
    details = {"current_status": exc.current_status} if exc.current_status else None
    return error_response(400, str(exc), details=details)


@app.exception_handler(ForbiddenError)
async def forbidden_exception_handler(request: Request, exc: ForbiddenError):
    return error_response(403, str(exc))


@app.exception_handler(AuthenticationError)
async def authentication_exception_handler(request: Request, exc: AuthenticationError):
    return error_response(401, str(exc))


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError):
    logger.error("Storage Error", error=str(exc), path=request.url.path, method=request.method)
    return error_response(500, "Storage operation failed")


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions"""
    logger.error(
        "Unexpected Error",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method
    )
    return error_response(500, "Internal server error")


# Include API router with proper prefix
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "status": "active",
        "docs_url": f"{settings.API_V1_STR}/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.VERSION
    }


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info(
        "CoverGen Backend starting up",
        version=settings.VERSION,
        api_prefix=settings.API_V1_STR,
        cors_origins=settings.CORS_ORIGINS,
        default_provider=settings.DEFAULT_PROVIDER,
        storage_provider=settings.STORAGE_PROVIDER
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("CoverGen Backend shutting down")
