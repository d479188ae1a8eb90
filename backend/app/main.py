from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.database import check_database_connection, close_db, init_db
from app.core.exceptions import ComplaintSystemError, error_response, exception_response
from app.core.logging_config import logger
from app.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from app.core.rate_limiter import enforce_rate_limit
from app.api.router import api_router
from app.api.endpoints import health
import app.models  # noqa: F401 - import models so metadata knows about them


async def validate_critical_config():
    """Validate critical configuration at startup - fail fast if missing"""
    errors = []
    warnings = []

    if not settings.JWT_SECRET_KEY or settings.JWT_SECRET_KEY == "CHANGE_ME":
        if settings.is_production():
            errors.append("JWT_SECRET_KEY is not set or using default value")
        else:
            warnings.append("JWT_SECRET_KEY is using the development default")

    if settings.is_production() and settings.DEBUG:
        warnings.append("DEBUG is enabled in production - error messages will be exposed")

    if errors:
        for err in errors:
            logger.critical(f"[Startup] CRITICAL: {err}")
        raise RuntimeError(f"Missing critical configuration: {', '.join(errors)}")

    for warn in warnings:
        logger.warning(f"[Startup] WARNING: {warn}")

    logger.info("[Startup] Critical configuration validated")
    return True


async def ensure_database_ready() -> bool:
    """Probe the database (with retries) and create any missing tables"""
    if not await check_database_connection():
        return False

    try:
        await init_db()
        logger.info("[Startup] Database tables created/verified")
        return True
    except SQLAlchemyError as e:
        logger.log_error_with_context(e, context="ensure_database_ready")
        return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown"""
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME}...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info("=" * 60)

    await validate_critical_config()

    db_ready = await ensure_database_ready()
    if not db_ready:
        logger.warning("[Startup] Database not ready - requests will fail until it is reachable")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="Complaint and meeting tracking for university students, lecturers and administrators",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False  # Prevent 307 redirects that break CORS
)

# Add middleware (last added is outermost)
# 1. Request size limit
app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE)

# 2. Security headers
app.add_middleware(SecurityHeadersMiddleware)

# 3. Request logging
app.add_middleware(RequestLoggingMiddleware)

# 4. CORS - Origins from CORS_ORIGINS_STR in .env
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


# Exception handlers
@app.exception_handler(ComplaintSystemError)
async def service_exception_handler(request: Request, exc: ComplaintSystemError):
    headers = dict(exc.headers or {})
    if exc.status_code == 401:
        headers["WWW-Authenticate"] = "Bearer"
    return JSONResponse(
        status_code=exc.status_code,
        content=exception_response(exc),
        headers=headers or None
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_response("Validation failed", "VALIDATION_ERROR", {"errors": errors})
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Route {request.method} {request.url.path} not found"
        code = "ROUTE_NOT_FOUND"
    elif exc.status_code == 405:
        message = f"Method {request.method} not allowed on {request.url.path}"
        code = "METHOD_NOT_ALLOWED"
    else:
        message = str(exc.detail)
        code = f"HTTP_{exc.status_code}"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(message, code),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=error_response(
            str(exc) if settings.DEBUG else "A database error occurred",
            "DATABASE_ERROR"
        )
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_response(
            str(exc) if settings.DEBUG else "An internal server error occurred",
            "INTERNAL_ERROR"
        )
    )


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """Welcome message with a map of the API"""
    prefix = settings.API_PREFIX
    return {
        "success": True,
        "message": f"Welcome to the {settings.APP_NAME} API",
        "data": {
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "endpoints": {
                "health": "/health",
                "docs": "/docs",
                "auth": f"{prefix}/auth",
                "users": f"{prefix}/users",
                "complaints": f"{prefix}/complaints",
                "meetings": f"{prefix}/meetings",
                "admin": f"{prefix}/admin",
            },
        },
    }

app.include_router(health.router)
# Rate limit applies to /api only
app.include_router(
    api_router,
    prefix=settings.API_PREFIX,
    dependencies=[Depends(enforce_rate_limit)]
)


def run():
    """Console entry point"""
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    run()
