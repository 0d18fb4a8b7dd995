"""Main FastAPI application"""
import logging
import logging.config
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from routes import router as api_router
from services.expense_store import ExpenseStore
from utils.errors import ExpenseAPIError, InvalidBody, MethodNotAllowed, PayloadTooLarge
from utils.settings import Settings, get_settings

from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


# --- Unified Logging Configuration with Rich ---
def build_logging_config(level: str = "INFO") -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                # RichHandler renders time and level itself
                "format": "%(name)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "default": {
                "class": "rich.logging.RichHandler",
                "formatter": "default",
                "level": "DEBUG",
                "rich_tracebacks": True,
                "show_time": True,
                "show_path": False,
                "log_time_format": "%Y-%m-%d %H:%M:%S",
                "markup": False,
            },
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": "INFO", "propagate": False},
            "uvicorn.error": {"handlers": ["default"], "level": "INFO", "propagate": False},
            "uvicorn.access": {"handlers": ["default"], "level": "INFO", "propagate": False},
            "": {  # Root logger for our application
                "handlers": ["default"],
                "level": level,
                "propagate": False,
            },
        },
    }


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(build_logging_config(level))


# --- Middleware ---
class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Adds permissive CORS headers to every response and answers OPTIONS preflights."""

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response


class LimitBodySizeMiddleware(BaseHTTPMiddleware):
    """Rejects POSTs to the expenses route whose Content-Length exceeds max_body_size."""

    def __init__(self, app, path: str, max_body_size: int):
        super().__init__(app)
        self.path = path
        self.max_body_size = max_body_size

    async def dispatch(self, request: Request, call_next):
        if request.method == "POST" and request.url.path == self.path:
            content_length_header = request.headers.get("content-length")
            if content_length_header:
                try:
                    content_length = int(content_length_header)
                except ValueError:
                    logger.warning("Request rejected: invalid Content-Length header.")
                    return InvalidBody().to_response()
                if content_length > self.max_body_size:
                    logger.warning(f"Request rejected: body size {content_length} exceeds limit {self.max_body_size}.")
                    return PayloadTooLarge(self.max_body_size).to_response()
            # Chunked bodies carry no Content-Length and are not checked here
        return await call_next(request)


# --- Exception Handlers ---
async def expense_api_error_handler(request: Request, exc: ExpenseAPIError) -> Response:
    return exc.to_response()


async def method_mismatch_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Renders router 405s for verbs without any route the same way as the explicit ones."""
    if exc.status_code == 405:
        logger.warning(f"{request.method} {request.url.path} rejected: method not allowed.")
        return MethodNotAllowed(request.method).to_response()
    return await http_exception_handler(request, exc)


async def unhandled_error_handler(request: Request, exc: Exception) -> Response:
    logger.exception(f"Unexpected error handling {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"}, headers=CORS_HEADERS)


def create_app(settings: Optional[Settings] = None, store: Optional[ExpenseStore] = None) -> FastAPI:
    """Builds the API with its own expense store, limiter and middleware stack."""
    settings = settings or get_settings()
    if store is None:
        store = ExpenseStore.with_examples() if settings.seed_example_expenses else ExpenseStore()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Expenses API starting with {len(store)} expenses in memory (data is not persisted).")
        logger.info(f"Configuration: API_PREFIX = {settings.api_prefix!r}, MAX_BODY_SIZE = {settings.max_body_size}, RATE_LIMIT = {settings.rate_limit}")
        yield  # Application runs here
        logger.info(f"Expenses API shutting down; discarding {len(store)} in-memory expenses.")

    app = FastAPI(
        title="Expense Tracker API",
        description="API for listing and adding expenses held in memory.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.expense_store = store

    # --- Rate Limiter Setup (disabled unless RATE_LIMIT is set) ---
    app.state.limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit] if settings.rate_limit else [],
        enabled=bool(settings.rate_limit),
    )
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(ExpenseAPIError, expense_api_error_handler)
    app.add_exception_handler(StarletteHTTPException, method_mismatch_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # --- Add Middleware (last added runs first) ---
    if settings.rate_limit:
        app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        LimitBodySizeMiddleware,
        path=f"{settings.api_prefix}/expenses",
        max_body_size=settings.max_body_size,
    )
    app.add_middleware(CORSHeadersMiddleware)

    app.include_router(api_router, prefix=settings.api_prefix, tags=["api"])

    @app.get("/health", include_in_schema=False)
    async def health(request: Request):
        return {"status": "ok", "expenses": len(request.app.state.expense_store)}

    return app


settings = get_settings()
configure_logging(settings.log_level)
app = create_app(settings)

if __name__ == "__main__":
    import uvicorn
    # Our application logs use the RichHandler configured above
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
    )
