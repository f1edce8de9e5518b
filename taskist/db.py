import logging
import time
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from .config import Settings
from .models import Base

logger = logging.getLogger(__name__)
_sql_logger = logging.getLogger("sql-profiler")


def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    context._query_start_time = time.perf_counter()
    _sql_logger.debug("SQL start | %s", (statement or "").strip().replace("\n", " ")[:400])


def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    duration_ms = (time.perf_counter() - getattr(context, "_query_start_time", time.perf_counter())) * 1000
    rowcount = cursor.rowcount if cursor else -1
    _sql_logger.info("SQL done | %.2f ms | rows=%s", duration_ms, rowcount)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless this is set per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _engine_options(settings: Settings) -> dict[str, Any]:
    """Backend-specific engine arguments for the configured DATABASE_URL."""

    if settings.is_sqlite:
        return {"connect_args": {"check_same_thread": False}}
    options: dict[str, Any] = {"pool_pre_ping": True}
    if settings.env.lower() == "production":
        options["connect_args"] = {"sslmode": "require"}
    return options


def _ensure_sqlite_directory(url: str) -> None:
    database = make_url(url).database
    if database and database != ":memory:":
        Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)


class Database:
    """Owns the engine and session factory for the lifetime of the process."""

    def __init__(self, settings: Settings):
        self.url = settings.database_url
        if settings.is_sqlite:
            _ensure_sqlite_directory(self.url)
        self.engine: Engine = create_engine(self.url, future=True, **_engine_options(settings))
        if settings.is_sqlite:
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        event.listen(self.engine, "before_cursor_execute", _before_cursor_execute)
        event.listen(self.engine, "after_cursor_execute", _after_cursor_execute)
        self.session_factory = sessionmaker(
            bind=self.engine, autoflush=False, autocommit=False, future=True
        )

    @property
    def backend(self) -> str:
        return self.engine.dialect.name

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables are ready (%s)", self.backend)

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")

