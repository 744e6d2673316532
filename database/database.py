import contextlib
import logging
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.config_loader import DatabaseConfig
from database.models import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns one engine and its session factory.

    Constructed explicitly and injected wherever sessions are needed; call
    ``dispose()`` when the owning process or app shuts down.
    """

    def __init__(self, config: Optional[DatabaseConfig] = None, engine: Optional[Engine] = None):
        self.config = config or DatabaseConfig()
        self.engine = engine or self._create_engine(self.config)
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )

    @staticmethod
    def _create_engine(config: DatabaseConfig) -> Engine:
        url = config.url

        if url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
                # One shared connection, otherwise every session sees an empty DB
                kwargs["poolclass"] = StaticPool
            return create_engine(url, echo=config.echo, **kwargs)

        engine = create_engine(
            url,
            echo=config.echo,
            pool_pre_ping=True,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow
        )

        if config.statement_timeout_ms and engine.dialect.name == "postgresql":
            timeout = int(config.statement_timeout_ms)

            @event.listens_for(engine, "connect")
            def _set_statement_timeout(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute(f"SET statement_timeout = {timeout}")
                cursor.close()

        return engine

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(self.engine)

    @contextlib.contextmanager
    def session_scope(self):
        """Provide a transactional scope around a series of operations."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        logger.info("Disposing database engine")
        self.engine.dispose()
