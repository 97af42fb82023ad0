"""
Main FastAPI application.
"""
import logging
import warnings
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from app.core.config import DEBUG, LOG_LEVEL, API_HOST, API_PORT, ENVIRONMENT
from app.api.v1.api import api_router
from app.api.v1.routers import admin
from app.api.v1.services.auth import auth_service
from app.core.async_redis import async_redis_client
from app.core.env_validator import validate_environment_variables, print_environment_summary
from app.core.exceptions import AppException, AuthenticationError, DatabaseError, UnknownError
from app.core.middleware import RouteGuardMiddleware
from app.core.route_guard import RouteGuard
from app.core.routes import AUTH_ROUTES
from app.core.utils import add_cors_headers
from app.services.warmup import service_warmup

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Validate environment variables at import time
validate_environment_variables(strict=True)

# Suppress passlib's bcrypt version probe warnings
warnings.filterwarnings("ignore", category=UserWarning, module="passlib.handlers.bcrypt")
logging.getLogger("passlib").setLevel(logging.ERROR)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting Tenant Signup API server...")
    logger.info(f"Environment: {ENVIRONMENT}")
    logger.info(f"Debug mode: {DEBUG}")

    print_environment_summary()

    # Warm up Firestore and Redis to prevent a slow first request
    logger.info("Warming up backing services...")
    await service_warmup.warm_up()

    yield

    # Shutdown
    logger.info("Shutting down Tenant Signup API server...")
    await async_redis_client.close()


app = FastAPI(
    title="Tenant Signup API",
    description="Tenant self-service signup and admin session gate",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if DEBUG else None,
    redoc_url="/redoc" if DEBUG else None,
    redirect_slashes=False,
)

# Starlette applies middleware in REVERSE order (last added = outermost).
# The guard is added first so CORS wraps its redirects too.
app.add_middleware(RouteGuardMiddleware, guard=RouteGuard(AUTH_ROUTES, authenticate=auth_service.authenticate))

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,  # Must be False when using ["*"]
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
    max_age=3600,
)

# Include routers
app.include_router(api_router)
app.include_router(admin.router)


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Tenant Signup API", "version": "1.0.0"}


# Handle Starlette HTTPException (404s, rate limiting)
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with CORS headers."""
    response = JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "NOT_FOUND" if exc.status_code == 404 else "HTTP_EXCEPTION",
            "message": exc.detail if isinstance(exc.detail, str) else f"HTTP {exc.status_code} error",
            "details": {}
        },
        headers=getattr(exc, "headers", None),
    )
    return add_cors_headers(response)


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError):
    """Handle authentication errors."""
    logger.warning(f"Authentication failed: {exc.message}")
    response = JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=exc.to_dict(),
        headers={"WWW-Authenticate": "Bearer"}
    )
    return add_cors_headers(response)


@app.exception_handler(DatabaseError)
async def database_error_handler(request: Request, exc: DatabaseError):
    """Store failures that escaped a service are reported without store detail."""
    logger.error(f"Database error in {exc.operation} ({exc.kind.value}): {exc.message}")
    response = JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=UnknownError().to_dict()
    )
    return add_cors_headers(response)


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """Handle application exceptions using their own status code."""
    if exc.status_code >= 500:
        logger.error(f"Application error: {exc.message}", extra={"details": exc.details})
    else:
        logger.warning(f"Request rejected: {exc.message}", extra={"details": exc.details})
    response = JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
    return add_cors_headers(response)


# Global exception handler for uncaught exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for uncaught exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    response = JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "INTERNAL_SERVER_ERROR",
            "message": "An unexpected error occurred" if not DEBUG else str(exc),
            "details": {}
        }
    )
    return add_cors_headers(response)


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=DEBUG,
        log_level=LOG_LEVEL.lower(),
        proxy_headers=True
    )
