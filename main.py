#main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.errors import InputValidationError
from db import close_pool
from middleware import RequestContextMiddleware
from routes.auth import router as auth_router
from routes.commission import router as commission_router
from routes.health import router as health_router
from routes.transactions import router as transactions_router
from routes.users import router as users_router
from routes.wallets import router as wallets_router
from services.observability import configure_logging
from settings import cors_origins, settings, validate_env_settings

logger = logging.getLogger("agency")

INVALID_JSON = "Invalid JSON body"
UNEXPECTED_ERROR = "An unexpected error occurred"


def _error(status_code: int, errors: list[str], headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "errors": errors},
        headers=headers,
    )


def _validation_messages(exc: RequestValidationError) -> list[str]:
    out: list[str] = []
    for err in exc.errors():
        if err.get("type") == "json_invalid":
            return [INVALID_JSON]
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg") or "Invalid value"
        out.append(f"{loc}: {msg}" if loc else msg)
    return out or [INVALID_JSON]


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_pool()


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)
    validate_env_settings()

    app = FastAPI(title="Agency API", version=settings.APP_VERSION, lifespan=lifespan)

    # -----------------------------
    # MIDDLEWARE
    # -----------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(),
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type", "x-request-id"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestContextMiddleware)

    # -----------------------------
    # ERRORS
    # -----------------------------
    @app.exception_handler(InputValidationError)
    async def input_validation_handler(request: Request, exc: InputValidationError):
        return _error(exc.status_code, exc.errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return _error(exc.status_code, [detail], headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _error(400, _validation_messages(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return _error(500, [UNEXPECTED_ERROR])

    # -----------------------------
    # ROUTERS
    # -----------------------------
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(transactions_router)
    app.include_router(wallets_router)
    app.include_router(users_router)
    app.include_router(commission_router)

    return app


app = create_app()
