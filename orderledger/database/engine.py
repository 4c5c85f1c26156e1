import logging
import sqlite3

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from orderledger.config import Settings, get_settings


app_settings: Settings = get_settings()
logger = logging.getLogger(__name__)

# Connection execution option: open the SQLite transaction with the write lock.
SQLITE_BEGIN_IMMEDIATE = "sqlite_begin_immediate"


def _is_memory_database(url) -> bool:
    database = url.database
    if database in (None, "", ":memory:"):
        return True
    return url.query.get("mode") == "memory"


def build_engine(database_url: str, *, echo: bool = False, busy_timeout_seconds: int | None = None) -> Engine:
    """Create an engine for ``database_url``.

    SQLite connections get foreign keys and a busy timeout. Connections carrying
    the ``SQLITE_BEGIN_IMMEDIATE`` option start with ``BEGIN IMMEDIATE`` so
    concurrent writers queue on the database lock instead of failing when they
    upgrade a stale read snapshot; all other transactions are deferred, so
    readers never wait for a writer.
    """
    if busy_timeout_seconds is None:
        busy_timeout_seconds = app_settings.SQLITE_BUSY_TIMEOUT_SECONDS

    url = make_url(database_url)
    is_sqlite = url.get_backend_name() == "sqlite"
    is_memory = is_sqlite and _is_memory_database(url)

    connect_args = {}
    engine_kwargs: dict[str, object] = dict(pool_pre_ping=True, echo=echo)
    if is_sqlite:
        connect_args = {"check_same_thread": False, "timeout": busy_timeout_seconds}
        if is_memory:
            engine_kwargs.update(poolclass=StaticPool)

    engine = create_engine(database_url, connect_args=connect_args, **engine_kwargs)

    if is_sqlite:
        busy_timeout_ms = busy_timeout_seconds * 1000

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, _connection_record):
            # Transactions are started explicitly by the "begin" listener below.
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            try:
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.execute(f"PRAGMA busy_timeout={busy_timeout_ms}")
                if not is_memory:
                    try:
                        cursor.execute("PRAGMA journal_mode=WAL")
                        cursor.execute("PRAGMA synchronous=NORMAL")
                    except sqlite3.DatabaseError:
                        logger.warning("Unable to enable WAL journal mode for %s.", url.database)
            finally:
                cursor.close()

        @event.listens_for(engine, "begin")
        def _begin(conn):
            if conn.get_execution_options().get(SQLITE_BEGIN_IMMEDIATE):
                conn.exec_driver_sql("BEGIN IMMEDIATE")
            else:
                conn.exec_driver_sql("BEGIN")

    return engine


engine = build_engine(app_settings.DATABASE_URL, echo=app_settings.DATABASE_ECHO)


__all__ = ["SQLITE_BEGIN_IMMEDIATE", "build_engine", "engine"]
