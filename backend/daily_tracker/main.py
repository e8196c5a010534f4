"""FastAPI application factory with middleware, routers, and lifespan."""

import logging
import time
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from .api import api_router
from .config import log_configuration_report, settings, setup_logging
from .dependencies import AuthRequired
from .integrations.cache import create_cache_service
from .otp.service import OtpManager
from .quota.service import QuotaCounter
from .rate_limit import limiter
from .realtime.broadcaster import Broadcaster
from .realtime.routes import router as realtime_router
from .storage import BackendMode, RecordStore, create_store

logger = logging.getLogger(__name__)

_startup_time: float = 0.0


def _run_migrations(database_url: str) -> None:
    """Run Alembic migrations (upgrade head) on startup."""
    from alembic import command
    from alembic.config import Config

    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(Path(__file__).parent.parent / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    command.upgrade(alembic_cfg, "head")


def init_services(app: FastAPI, store: RecordStore) -> None:
    """Attach the process-wide services to ``app.state``."""
    app.state.store = store
    app.state.otp = OtpManager(store, ttl=timedelta(minutes=settings.otp_ttl_minutes))
    app.state.quota = QuotaCounter()
    app.state.broadcaster = Broadcaster()
    app.state.cache = create_cache_service(settings.redis_url)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    global _startup_time
    _startup_time = time.time()

    setup_logging()
    log_configuration_report(settings)

    database_url = settings.effective_database_url
    store = create_store(database_url, settings.database_connect_timeout)
    if store.mode is BackendMode.DATABASE:
        try:
            _run_migrations(database_url)
        except Exception:
            logger.exception("Schema migration failed")
            store.fail_over("migration failed")

    init_services(app, store)
    logger.info("Daily Tracker started (storage=%s)", store.mode)

    yield

    if store.database is not None:
        store.database.dispose()


def _rate_limit_handler(request: Request, exc: RateLimitExceeded) -> Response:
    retry_after = "60"
    return JSONResponse(
        {"error": "Too many requests", "detail": str(exc.detail), "retry_after": int(retry_after)},
        status_code=429,
        headers={"Retry-After": retry_after},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Daily Tracker",
        lifespan=lifespan,
    )

    # --- Exception handlers ---
    @app.exception_handler(AuthRequired)
    async def auth_required_handler(request: Request, exc: AuthRequired):
        return JSONResponse({"error": "Not authenticated"}, status_code=401)

    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    # --- Middleware stack (LIFO: last added = outermost) ---

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.secret_key,
        max_age=settings.session_max_age,
        https_only=settings.is_production,
    )

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    if settings.trusted_hosts_list != ["*"]:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=settings.trusted_hosts_list,
        )

    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=63072000; includeSubDomains"
        return response

    app.include_router(api_router)
    app.include_router(realtime_router)

    # --- Health check ---
    @app.get("/health")
    def health(request: Request):
        store: RecordStore = request.app.state.store
        uptime = round(time.time() - _startup_time, 1) if _startup_time else 0.0
        return {
            "status": "ok",
            "storage": str(store.mode),
            "websocketClients": request.app.state.broadcaster.client_count,
            "uptime_seconds": uptime,
        }

    return app


app = create_app()
