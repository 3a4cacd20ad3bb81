#!/usr/bin/env python3
"""
Database Connection Manager

Handles PostgreSQL connections with proper lifecycle management,
per-thread connections and transaction scoping.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import psycopg
from psycopg.rows import dict_row

from core.exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Manages database connections with error handling and recovery.

    Each thread gets its own autocommit connection, so providers fetched on a
    thread pool never interleave statements inside one another's transaction.
    """

    def __init__(self, config):
        """
        Initialize connection manager with configuration.

        Args:
            config: Database configuration object (``DatabaseConfig``)
        """
        self.config = config
        self._local = threading.local()
        self._connections: List[psycopg.Connection] = []
        self._lock = threading.Lock()

    def _connect(self) -> psycopg.Connection:
        """Establish a new database connection."""
        try:
            connection = psycopg.connect(
                self.config.database_url,
                row_factory=dict_row,
                autocommit=True,
                connect_timeout=self.config.connection_timeout
            )
        except psycopg.Error as e:
            raise DatabaseConnectionError(e) from e

        with self._lock:
            self._connections.append(connection)
        logger.debug(f"Database connection established for thread {threading.current_thread().name}")
        return connection

    def get_connection(self) -> psycopg.Connection:
        """
        Get the active connection for the calling thread.

        Returns:
            Active database connection

        Raises:
            DatabaseConnectionError: If connection cannot be established
        """
        connection = getattr(self._local, 'connection', None)
        if connection is None or connection.closed:
            if connection is not None:
                logger.warning("Connection closed, reconnecting...")
            connection = self._connect()
            self._local.connection = connection
        return connection

    @contextmanager
    def get_cursor(self) -> Iterator[psycopg.Cursor]:
        """
        Get database cursor as context manager (autocommit).

        Yields:
            Database cursor
        """
        connection = self.get_connection()
        with connection.cursor() as cursor:
            yield cursor

    @contextmanager
    def transaction(self) -> Iterator[psycopg.Cursor]:
        """
        Execute operations in a database transaction.

        Commits when the block exits normally, rolls back and re-raises when
        it exits with an exception.

        Yields:
            Database cursor within transaction
        """
        connection = self.get_connection()
        with connection.transaction():
            with connection.cursor() as cursor:
                yield cursor

    def release_thread_connection(self) -> None:
        """Close the calling thread's connection, if it opened one."""
        connection = getattr(self._local, 'connection', None)
        if connection is None:
            return

        self._local.connection = None
        with self._lock:
            self._connections = [c for c in self._connections if c is not connection]
        if not connection.closed:
            connection.close()
        logger.debug(f"Database connection released for thread {threading.current_thread().name}")

    def close(self) -> None:
        """Close every connection opened by this manager."""
        with self._lock:
            connections, self._connections = self._connections, []
        for connection in connections:
            if not connection.closed:
                connection.close()
        self._local = threading.local()
        logger.debug("Database connections closed")

    def health_check(self) -> Dict[str, Any]:
        """
        Perform health check on database connection.

        Returns:
            Health status information
        """
        try:
            with self.get_cursor() as cursor:
                cursor.execute("SELECT 1 AS test")
                result = cursor.fetchone()

                cursor.execute("SELECT version() AS version")
                version_info = cursor.fetchone()

            return {
                'connected': True,
                'test_query': result['test'] == 1,
                'version': version_info['version']
            }

        except (psycopg.Error, DatabaseConnectionError) as e:
            logger.error(f"Database health check failed: {e}")
            return {
                'connected': False,
                'error': str(e)
            }

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
