"""Database engine, session dependency and connection supervisor.

The engine is configured from `settings.DATABASE_URL`. Creating the
engine does not touch the database; the `ConnectionSupervisor` performs
the first real connection at startup, creates the tables, and keeps
retrying with a fixed delay for as long as the database is unreachable.
"""

import enum
import logging
import threading
import time
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from .config import settings

logger = logging.getLogger("study_planner.database")

DB_URL = settings.DATABASE_URL
_connect_args = {"check_same_thread": False} if DB_URL.startswith("sqlite") else {}
engine = create_engine(DB_URL, echo=False, pool_pre_ping=True, connect_args=_connect_args)


def create_db_and_tables(bind=None):
    """Create database tables using SQLModel metadata."""
    from . import models  # noqa: F401  (registers the tables)

    SQLModel.metadata.create_all(bind or engine)


def get_session():
    """Yield a database `Session` for FastAPI dependency injection.

    The generator yields a session and ensures it is closed when the
    request scope finishes.
    """
    with Session(engine) as session:
        yield session


class ConnectionState(enum.IntEnum):
    """Connection state codes reported by the health endpoint."""
    DISCONNECTED = 0
    CONNECTED = 1
    CONNECTING = 2
    DISCONNECTING = 3


class ConnectionSupervisor:
    """Establish the database connection and retry until it succeeds.

    Retries are unbounded with a fixed `retry_delay` between attempts;
    the process is never terminated because the database is down.
    `sleep` is injectable so tests can run without real delays.
    """

    def __init__(self, bind=None, retry_delay: float = 5.0, sleep=time.sleep):
        self.bind = bind if bind is not None else engine
        self.retry_delay = retry_delay
        self.state = ConnectionState.DISCONNECTED
        self.attempts = 0
        self.last_error: Optional[str] = None
        self.connected = threading.Event()
        self.stopped = threading.Event()
        self._sleep = sleep
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def try_connect(self) -> bool:
        """Run a single connection attempt and update the state."""
        self.attempts += 1
        self.state = ConnectionState.CONNECTING
        logger.info("Attempting database connection (attempt %d)...", self.attempts)
        try:
            with self.bind.connect() as conn:
                conn.exec_driver_sql("SELECT 1")
            create_db_and_tables(self.bind)
        except SQLAlchemyError as exc:
            self.state = ConnectionState.DISCONNECTED
            self.last_error = str(exc)
            logger.error("Database connection error: %s", exc)
            return False
        if self.stopped.is_set():
            # dispose() ran while this attempt was in flight
            self.state = ConnectionState.DISCONNECTED
            return False
        self.state = ConnectionState.CONNECTED
        self.last_error = None
        self.connected.set()
        logger.info("Connected to database after %d attempt(s)", self.attempts)
        return True

    def connect(self) -> None:
        """Block until connected or stopped, sleeping `retry_delay` between attempts."""
        while not self.stopped.is_set():
            if self.try_connect():
                return
            if self.stopped.is_set():
                break
            logger.info("Retrying database connection in %.0fs...", self.retry_delay)
            self._sleep(self.retry_delay)
        logger.info("Database connection retries stopped")

    def start(self) -> Optional[threading.Thread]:
        """Run `connect()` on a daemon thread so startup does not block."""
        with self._lock:
            if self.state == ConnectionState.CONNECTED:
                return self._thread
            self.stopped.clear()
            if self._thread is None or not self._thread.is_alive():
                self._thread = threading.Thread(target=self.connect, name="db-supervisor", daemon=True)
                self._thread.start()
            return self._thread

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for the connection; returns True once connected."""
        return self.connected.wait(timeout)

    def dispose(self) -> None:
        """Stop any pending retries, release pooled connections and mark the supervisor disconnected."""
        self.stopped.set()
        self.state = ConnectionState.DISCONNECTING
        self.bind.dispose()
        self.connected.clear()
        self.state = ConnectionState.DISCONNECTED
        logger.info("Database connection closed")


supervisor = ConnectionSupervisor(retry_delay=settings.DB_RETRY_DELAY_SECONDS)
