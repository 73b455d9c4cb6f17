"""Engine and session management for documents stored with SQLAlchemy."""

from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from docref.config import get_settings
from docref.models.base import Base


class Database:
    """Owns the engine that document tables live in and hands out sessions."""

    def __init__(self, database_url: str | None = None, pool_size: int | None = None, max_overflow: int | None = None):
        """
        Create the engine.

        Args:
            database_url: SQLAlchemy URL. If None, reads DATABASE_URL from settings.
            pool_size: Pooled connections for server databases. If None, uses settings.
            max_overflow: Connections allowed beyond pool_size. If None, uses settings.
        """
        settings = get_settings()
        url = database_url or settings.get_database_url()

        engine_args: dict[str, Any] = {"echo": settings.sql_echo, "pool_pre_ping": True}
        if url.startswith("sqlite"):
            # SQLite pools are per-thread; pool sizing does not apply
            engine_args["connect_args"] = {"check_same_thread": False}
        else:
            engine_args.update(
                pool_size=settings.db_pool_size if pool_size is None else pool_size,
                max_overflow=settings.db_max_overflow if max_overflow is None else max_overflow,
                pool_timeout=settings.db_pool_timeout,
            )

        self.engine = create_engine(url, **engine_args)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_tables(self) -> None:
        """Create every table declared on ``Base``."""
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        One unit of work: commits on success, rolls back and re-raises on error.

        Usage:
            with db.session() as session:
                graph = DocumentGraph.for_session(session, registry)
                graph.association(person, "posts").push(post)
        """
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
        """Close all pooled connections."""
        self.engine.dispose()
