"""
Tally Dashboard Application Factory
===================================

Pusat perakitan aplikasi FastAPI menggunakan Application Factory Pattern.
"""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import time
import uuid

from .routes import auth_router, ledger_router, invoice_router, sync_router, admin_user_router
from .services.exceptions import (
    DashboardException, ValidationError, NotFoundError, ConflictError,
    AuthenticationError, AuthorizationError, TallyIntegrationError
)
from .responses import APIResponse
from .services import TallyService
from .database import AsyncSessionLocal
from .config import settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Urutan penting: subclass dicek lebih dulu
EXCEPTION_STATUS = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (TallyIntegrationError, status.HTTP_502_BAD_GATEWAY),
)


def setup_logging(level: str = None):
    """Configure root logger dari LOG_LEVEL"""
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT
    )


def setup_middleware(app: FastAPI):
    """Setup semua middleware aplikasi."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.ALLOWED_HOSTS
    )

    @app.middleware("http")
    async def add_request_id_and_process_time(request: Request, call_next):
        request_id = str(uuid.uuid4())
        start_time = time.time()

        request.state.request_id = request_id
        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        response.headers["X-Request-ID"] = request_id
        return response


def _status_for(exc: DashboardException) -> int:
    for exc_class, status_code in EXCEPTION_STATUS:
        if isinstance(exc, exc_class):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def setup_exception_handlers(app: FastAPI):
    """Setup semua custom exception handlers."""

    @app.exception_handler(DashboardException)
    async def dashboard_exception_handler(request: Request, exc: DashboardException):
        status_code = _status_for(exc)
        if status_code >= 500:
            logger.error(f"{exc.error_code}: {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content=APIResponse.error(
                message=exc.message,
                error_code=exc.error_code,
                request_id=getattr(request.state, 'request_id', None),
                details=exc.details
            )
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=APIResponse.error(
                message="An unexpected error occurred",
                error_code='INTERNAL_ERROR',
                request_id=getattr(request.state, 'request_id', None)
            )
        )


def setup_routes(app: FastAPI):
    """Daftarkan (include) semua router ke aplikasi."""

    @app.get("/api/health", tags=["System"])
    async def health_check():
        return {"success": True, "status": "healthy", "timestamp": time.time()}

    @app.get("/", tags=["System"])
    async def root():
        return {"message": "Tally Dashboard API", "version": "1.0.0", "docs": "/docs"}

    app.include_router(auth_router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(ledger_router, prefix="/api/tally/ledgers", tags=["Ledgers"])
    app.include_router(invoice_router, prefix="/api/tally/invoices", tags=["Invoices"])
    app.include_router(sync_router, prefix="/api/tally", tags=["Sync & Dashboard"])
    app.include_router(admin_user_router, prefix="/api/admin/users", tags=["Admin"])


def create_app() -> FastAPI:
    """
    Application Factory: Membuat dan mengkonfigurasi instance FastAPI.
    """
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Tally Dashboard API starting up (Tally host: {settings.TALLY_HOST})")
        # Satu TallyService (dan satu requests.Session) untuk semua request
        app.state.tally_service = TallyService.from_config(settings.tally_config(), AsyncSessionLocal)
        yield
        app.state.tally_service.close()
        logger.info("Tally Dashboard API shutting down")

    app = FastAPI(
        title="Tally Dashboard API",
        description="Ledger & invoice dashboard dengan sync ke Tally ERP",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    setup_middleware(app)
    setup_exception_handlers(app)
    setup_routes(app)

    return app
