from typing import Iterator
from fastapi import Request
from sqlalchemy import Column, DateTime, create_engine, event, func, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from taskforge.core.logging_config import logger


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


def _configure_sqlite(engine: Engine) -> None:
    """
    Make SQLite behave closely enough to PostgreSQL for development and tests.

    SQLite has no row locks, so ``SELECT ... FOR UPDATE`` is a no-op there.
    A transaction started with the ``sqlite_begin="IMMEDIATE"`` execution
    option takes the database write lock up front instead, which serializes
    count-then-insert sequences the way the row lock does on Postgres. WAL
    journaling keeps plain readers from blocking that writer.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Hand transaction control to SQLAlchemy's "begin" event below
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        mode = conn.get_execution_options().get("sqlite_begin", "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")


def lock_for_write(db: Session) -> None:
    """
    On SQLite, start the session's transaction holding the write lock.

    Only effective before the transaction's first statement. On other
    databases row locks taken with ``with_for_update`` do this job and this
    is a no-op.
    """
    if db.get_bind().dialect.name != "sqlite":
        return
    if db.in_transaction():
        logger.debug("Transaction already begun; SQLite write lock not taken up front")
        return
    db.connection(execution_options={"sqlite_begin": "IMMEDIATE"})


class Database:
    """
    Owns the engine and session factory for one process.

    Created at application startup, stored on ``app.state`` and disposed at
    shutdown. Services never import it; they receive a ``Session``.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        if url.startswith("sqlite"):
            self.engine = create_engine(
                url,
                connect_args={"check_same_thread": False, "timeout": 30},
                echo=echo,
                future=True,
            )
            _configure_sqlite(self.engine)
        else:
            self.engine = create_engine(
                url,
                pool_pre_ping=True,      # Test connections before using
                pool_size=10,            # Base connection pool size
                max_overflow=20,         # Max connections beyond pool_size
                pool_timeout=30,         # Timeout for getting connection (seconds)
                pool_recycle=3600,       # Recycle connections after 1 hour
                echo=echo,               # Set to True for debugging SQL logs
                future=True,
            )

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            future=True,
        )

    def session(self) -> Session:
        return self.SessionLocal()

    def create_all(self) -> None:
        """Create every table. Production schemas are managed by Alembic."""
        # Make sure every model is registered on Base.metadata
        import taskforge.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def ping(self) -> None:
        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database connections closed")


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
