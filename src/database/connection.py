"""
Binary File Importer - Database Connection Management
Provides SQLAlchemy engine pooling and ORM session management for the record store.

The engine URL comes from DATABASE_URL when set (e.g. sqlite for local runs),
otherwise a MySQL URL is built from the DB_* settings.
"""

from contextlib import contextmanager
from sqlalchemy import create_engine, text
from sqlalchemy.pool import QueuePool
from sqlalchemy.engine import Engine, Connection, URL
from sqlalchemy.orm import Session
from typing import Generator

from utils.config import (
    DATABASE_URL, DB_HOST, DB_PORT, DB_NAME, DB_USER, DB_PASSWORD,
    DB_POOL_SIZE, DB_POOL_MAX_OVERFLOW, DB_POOL_RECYCLE, DB_POOL_PRE_PING,
    config
)
from utils.logger import logger, log_database_error


class DatabaseConnection:
    """
    Manages record store connections with connection pooling.

    Features:
    - Connection pooling (10 connections + 20 overflow) for MySQL
    - Automatic connection recycling (every hour)
    - Health checks before connection use (pool_pre_ping)
    """

    def __init__(self, url: str = None):
        self._url = url
        self._engine: Engine = None

    def get_engine(self) -> Engine:
        """
        Get or create the SQLAlchemy engine.

        Returns:
            SQLAlchemy Engine instance

        Raises:
            DatabaseConnectionError: If engine creation fails
        """
        if self._engine is None:
            try:
                url = self._url or DATABASE_URL
                if url:
                    self._engine = create_engine(url, echo=False, hide_parameters=True)
                else:
                    # URL.create() keeps the password out of logs
                    connection_url = URL.create(
                        drivername="mysql+pymysql",
                        username=DB_USER,
                        password=DB_PASSWORD,
                        host=DB_HOST,
                        port=DB_PORT,
                        database=DB_NAME,
                        query={
                            "charset": "utf8mb4",
                            "init_command": "SET time_zone='+00:00'",
                        },
                    )

                    self._engine = create_engine(
                        connection_url,
                        poolclass=QueuePool,
                        pool_size=DB_POOL_SIZE,
                        max_overflow=DB_POOL_MAX_OVERFLOW,
                        pool_recycle=DB_POOL_RECYCLE,
                        pool_pre_ping=DB_POOL_PRE_PING,
                        echo=False,
                        hide_parameters=True,
                    )

                logger.info("Database connection pool initialized", extra={
                    "host": DB_HOST if not url else None,
                    "database": DB_NAME if not url else None,
                    "environment": config.environment
                })

            except Exception as e:
                log_database_error(e, "Failed to create database engine")
                raise DatabaseConnectionError(f"Failed to create database engine: {e}")

        return self._engine

    @contextmanager
    def get_connection(self) -> Generator[Connection, None, None]:
        """
        Context manager for database connections.

        Yields:
            SQLAlchemy Connection object
        """
        engine = self.get_engine()
        connection = engine.connect()
        try:
            yield connection
            connection.commit()
        except Exception as e:
            connection.rollback()
            log_database_error(e, "Transaction failed, rolled back")
            raise
        finally:
            connection.close()

    def test_connection(self) -> bool:
        """
        Test database connectivity.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            with self.get_connection() as conn:
                result = conn.execute(text("SELECT 1"))
                result.fetchone()
            logger.info("Database connection test successful")
            return True
        except Exception as e:
            logger.error("Database connection test failed", extra={
                "error": str(e)
            })
            return False

    def close(self):
        """Close all connections in the pool."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            logger.info("Database connection pool closed")


class DatabaseConnectionError(Exception):
    """Raised when database connection fails."""
    pass


# Global database connection instance
db = DatabaseConnection()


def get_db_connection():
    """
    Get database connection context manager.

    Example:
        >>> with get_db_connection() as conn:
        ...     result = conn.execute(text("SELECT COUNT(*) FROM binary_files"))
    """
    return db.get_connection()


def init_schema() -> None:
    """Create any missing record store tables."""
    from models import Base
    Base.metadata.create_all(db.get_engine())
    logger.info("Database schema initialized")


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Context manager for ORM database sessions.

    Sessions are committed on success or rolled back on error.

    Yields:
        SQLAlchemy Session object

    Example:
        >>> from database.repositories.import_repository import ImportRunRepository
        >>> with get_db_session() as session:
        ...     repo = ImportRunRepository(session)
        ...     run = repo.get_by_import_id("imp_0123456789abcdef")
    """
    from models.base import db_session

    session = db_session(bind=db.get_engine())

    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        log_database_error(e, "ORM transaction failed, rolled back")
        raise
    finally:
        session.close()
        db_session.remove()  # Remove scoped session to prevent connection leaks
