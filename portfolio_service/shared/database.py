"""Database setup and connection management."""

import logging
from threading import Event, Lock, Timer
from typing import Optional

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def create_db_engine(database_url: str, ssl: bool = False) -> Engine:
    """Create the pooled SQLAlchemy engine for the configured database."""
    # Heroku uses postgres:// but SQLAlchemy 2.0+ requires postgresql://
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)

    engine_kwargs = {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_recycle": 3600,  # Recycle connections after 1 hour
    }
    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        connect_args = {"connect_timeout": 10}
        if ssl:
            # Supabase requires SSL
            connect_args["sslmode"] = "require"
        engine_kwargs["connect_args"] = connect_args

    return create_engine(database_url, **engine_kwargs)


def init_db(engine: Engine) -> None:
    """Initialize database tables."""
    # Registers the portfolio table on Base.metadata
    from portfolio_service.shared.contact import database  # noqa: F401

    Base.metadata.create_all(bind=engine, checkfirst=True)
    logging.info("Database tables initialized successfully")


class ConnectionManager:
    """
    Owns the connection pool and the readiness flag.

    connect() never raises: a failed attempt is logged and retried after a fixed
    delay, forever, until it succeeds or close() is called.
    """

    def __init__(self, database_url: str, ssl: bool = False, retry_delay: float = 5.0):
        self.engine = create_db_engine(database_url, ssl=ssl)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self.retry_delay = retry_delay
        self._ready = Event()
        self._lock = Lock()
        self._retry_timer: Optional[Timer] = None
        self._closed = False

    def is_ready(self) -> bool:
        return self._ready.is_set()

    def connect(self) -> bool:
        """Attempt to connect; on failure schedule another attempt."""
        with self._lock:
            self._retry_timer = None
            if self._closed:
                return False

        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            init_db(self.engine)
        except Exception as e:
            self._ready.clear()
            logging.error(f"Database connection error: {str(e)}")
            self._schedule_retry()
            return False

        with self._lock:
            # close() may have run while this attempt was in flight
            if self._closed:
                return False
            self._ready.set()
        logging.info("Connected to database successfully")
        return True

    def _schedule_retry(self) -> None:
        with self._lock:
            if self._closed:
                return
            logging.info(f"Retrying database connection in {self.retry_delay:g} seconds...")
            timer = Timer(self.retry_delay, self.connect)
            timer.daemon = True
            self._retry_timer = timer
            timer.start()

    def close(self) -> None:
        """Cancel any pending retry and drain the pool."""
        with self._lock:
            self._closed = True
            if self._retry_timer is not None:
                self._retry_timer.cancel()
                self._retry_timer = None
            self._ready.clear()
        self.engine.dispose()
        logging.info("Database pool closed")

    def get_session(self):
        """Yield a session; roll back on error and always close it."""
        db = self.SessionLocal()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


def get_connection_manager(request: Request) -> ConnectionManager:
    """Dependency returning the application's connection manager."""
    return request.app.state.connection_manager


def get_db(request: Request):
    """Dependency to get database session."""
    yield from get_connection_manager(request).get_session()
