import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, get_settings
from .db import Database
from .errors import InternalError, TaskistError
from .routers import api_router

logger = logging.getLogger(__name__)


def _configure_logging(settings: Settings) -> None:
    """Ensure server + request handlers emit structured logs."""

    log_level = settings.log_level
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        force=True,
    )
    logging.getLogger("uvicorn").setLevel(log_level)
    logging.getLogger("uvicorn.access").setLevel("WARNING")
    logging.getLogger("request").setLevel(log_level)
    logging.getLogger("sql-profiler").setLevel(settings.sql_log_level or "WARNING")


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(location)
    message = first.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TaskistError)
    async def handle_taskist_error(request: Request, exc: TaskistError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return _error_response(400, _describe_validation_error(exc))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(SQLAlchemyError)
    async def handle_storage_error(request: Request, exc: SQLAlchemyError):
        logger.exception("Storage failure during %s %s", request.method, request.url.path)
        return _error_response(500, InternalError.default_message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error during %s %s", request.method, request.url.path)
        return _error_response(500, InternalError.default_message)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    _configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(settings)
        if settings.auto_create_tables:
            database.create_all()
        app.state.database = database
        logger.info("Taskist API started (env=%s, backend=%s)", settings.env, database.backend)
        try:
            yield
        finally:
            database.dispose()

    # Starlette debug mode would answer 500s with a traceback instead of the JSON error.
    app = FastAPI(title="Taskist API", debug=False, lifespan=lifespan)
    app.state.settings = settings

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_logger = logging.getLogger("request")
        request_logger.info(
            "--> %s %s from %s",
            request.method,
            request.url.path,
            request.client.host if request.client else "?",
        )
        start = time.perf_counter()
        response = await call_next(request)
        duration = (time.perf_counter() - start) * 1000
        request_logger.info(
            "<-- %s %s %s %.2fms", request.method, request.url.path, response.status_code, duration
        )
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    _register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")

    @app.get("/", response_class=PlainTextResponse)
    def index():
        return "API running"

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    reload_flag = os.environ.get("ENABLE_RELOAD", "0").lower() in {"1", "true", "yes"}
    uvicorn.run(
        "taskist.main:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", 3001)),
        reload=reload_flag,
    )
