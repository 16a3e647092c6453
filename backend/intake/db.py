from contextlib import contextmanager
from typing import Any, Dict, Iterator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import Settings
from .logging import get_logger

Base = declarative_base()

logger = get_logger(__name__)


def _engine_options(settings: Settings) -> Dict[str, Any]:
    """Per-dialect statement timeout and isolation level."""
    backend = make_url(settings.database_url).get_backend_name()
    timeout = settings.statement_timeout_seconds
    if backend == "sqlite":
        # SQLite transactions are serializable; only the busy timeout applies.
        return {"connect_args": {"timeout": timeout, "check_same_thread": False}}

    options: Dict[str, Any] = {
        "pool_pre_ping": True,
        "isolation_level": settings.isolation_level,
    }
    if backend == "postgresql":
        options["connect_args"] = {"options": f"-c statement_timeout={int(timeout * 1000)}"}
    elif backend in ("mysql", "mariadb"):
        options["connect_args"] = {"read_timeout": int(timeout), "write_timeout": int(timeout)}
    return options


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Engine and session factory owned by the application lifecycle."""

    def __init__(self, settings: Settings) -> None:
        self.engine: Engine = create_engine(settings.database_url, **_engine_options(settings))
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def init_db(self) -> None:
        from . import models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema ready", dialect=self.engine.dialect.name)

    def dispose(self) -> None:
        self.engine.dispose()

    def session(self) -> Session:
        return self.SessionLocal()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Session whose writes commit on clean exit and roll back on any error."""
        with self.SessionLocal() as session, session.begin():
            yield session

    def ping(self) -> Dict[str, Any]:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        pool = self.engine.pool
        return {"dialect": self.engine.dialect.name, "pool": pool.status()}
