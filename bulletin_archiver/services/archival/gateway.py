# bulletin_archiver/services/archival/gateway.py
"""
Storage gateway for the archiver.

Owns exactly one live connection to the bulletin database for the lifetime
of the archiver. The connection is never shared with request handlers.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import text
from sqlalchemy.engine import Connection, CursorResult, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import Executable

from bulletin_archiver.database import create_db_engine

logger = logging.getLogger(__name__)


class StorageGateway:
    """
    Single-connection wrapper with explicit transaction boundaries.

    Usage:
        gateway = StorageGateway(database_url)
        gateway.ensure_connected()
        with gateway.transaction():
            rows = gateway.execute(select(...)).all()
    """

    def __init__(self, database_url: str | None = None, engine: Engine | None = None):
        self._database_url = database_url
        self._engine = engine
        self._owns_engine = engine is None
        self._connection: Connection | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            kwargs = {"pool_pre_ping": True}
            if self._database_url and not self._database_url.startswith("sqlite"):
                # One dedicated connection, no overflow
                kwargs.update(pool_size=1, max_overflow=0)
            self._engine = create_db_engine(self._database_url, **kwargs)
        return self._engine

    @property
    def is_connected(self) -> bool:
        conn = self._connection
        return conn is not None and not conn.closed and not conn.invalidated

    def connect(self) -> Connection:
        """Open the archiver's connection, replacing any previous one."""
        self._discard_connection()
        self._connection = self.engine.connect()
        logger.info("Archival gateway connected to database", extra={"event": "gateway_connected"})
        return self._connection

    def ensure_connected(self) -> Connection:
        """
        Make sure the connection is usable, reconnecting at most once.

        Raises:
            SQLAlchemyError: If the reconnect attempt also fails
        """
        if self.is_connected:
            try:
                self._connection.execute(text("SELECT 1"))
                self._connection.rollback()
                return self._connection
            except SQLAlchemyError as e:
                logger.warning(
                    f"Archival connection unusable, reconnecting: {e}",
                    extra={"event": "gateway_reconnect"},
                )
        return self.connect()

    @property
    def connection(self) -> Connection:
        if self._connection is None:
            raise RuntimeError("StorageGateway is not connected")
        return self._connection

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """
        One transaction on the owned connection.

        Commits when the block exits normally, rolls back everything done
        inside the block if an exception escapes it.
        """
        conn = self.connection
        trans = conn.begin()
        try:
            yield conn
        except BaseException:
            if trans.is_active:
                trans.rollback()
            raise
        else:
            trans.commit()

    @contextmanager
    def savepoint(self) -> Iterator[Connection]:
        """Nested transaction so one failed statement doesn't poison the outer one."""
        conn = self.connection
        nested = conn.begin_nested()
        try:
            yield conn
        except BaseException:
            if nested.is_active:
                nested.rollback()
            raise
        else:
            nested.commit()

    def execute(self, statement: Executable, params: dict | None = None) -> CursorResult:
        """Execute a parameterized statement on the owned connection."""
        return self.connection.execute(statement, params)

    def _discard_connection(self) -> None:
        if self._connection is None:
            return
        try:
            self._connection.close()
        except SQLAlchemyError as e:
            logger.debug(f"Ignoring error while closing stale connection: {e}")
        self._connection = None

    def close(self) -> None:
        """Close the connection and dispose of the engine's pool."""
        self._discard_connection()
        if self._owns_engine and self._engine is not None:
            self._engine.dispose()
        logger.info("Archival gateway closed", extra={"event": "gateway_closed"})
