import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from events_api import __version__
from events_api.config import Settings, load_settings
from events_api.database import build_engine, build_session_factory, safe_url, wait_for_database
from events_api.exceptions import ConfigurationError
from events_api.routes.events import router as events_router
from events_api.services.event_repository import EventRepository, SQLEventRepository

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

http_logger = logging.getLogger("events.http")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


async def log_requests(request: Request, call_next):
    """Log method, path and elapsed time of every request."""

    start = time.perf_counter()
    try:
        return await call_next(request)
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"
        http_logger.info("%s %s %.2fms", request.method, target, elapsed_ms)


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = str(error.get("msg", "invalid input"))
        # pydantic prefixes messages raised from validators
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "invalid request"


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": _validation_message(exc)})


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[EventRepository] = None,
) -> FastAPI:
    """Build the API.

    When ``repository`` is given it is used as-is and no database is touched;
    otherwise an SQL-backed repository is created on startup from
    ``settings.database_url``.
    """

    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Events API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings
    app.state.event_repository = repository
    app.state.engine = None

    app.middleware("http")(log_requests)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(events_router)

    @app.on_event("startup")
    async def on_startup():
        if app.state.event_repository is not None:
            logging.info(
                "Events API started with %s repository.",
                app.state.event_repository.backend_name,
            )
            return

        if not settings.database_url:
            raise ConfigurationError("DATABASE_URL is not set")

        engine = build_engine(
            settings.database_url,
            pool_recycle=settings.pool_recycle,
            connect_timeout=settings.connect_timeout,
            echo=settings.echo_sql,
        )
        try:
            await wait_for_database(
                engine,
                max_attempts=settings.db_init_max_attempts,
                base_delay=settings.db_init_retry_seconds,
                timeout=settings.connect_timeout,
            )
        except Exception:
            await engine.dispose()
            raise

        app.state.engine = engine
        app.state.event_repository = SQLEventRepository(build_session_factory(engine))
        logging.info("Events API started (using %s).", safe_url(settings.database_url))

    @app.on_event("shutdown")
    async def on_shutdown():
        engine = app.state.engine
        if engine is not None:
            await engine.dispose()
            app.state.engine = None
            app.state.event_repository = None
        logging.info("Events API stopped.")

    @app.get("/health", tags=["meta"])
    async def health():
        return {"ok": True}

    return app
