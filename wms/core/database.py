"""
Database setup with SQLAlchemy 2.0.
Provides connection pooling, session management, and base model.
"""
import logging
from typing import Generator, Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from sqlalchemy import MetaData, DateTime, create_engine, func, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from wms.core.config import settings


# Naming convention for constraints
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)

# Plain stdlib logger: wms.logging_config imports this package
logger = logging.getLogger("wms.database")


class Base(DeclarativeBase):
    """Base class for all database models."""
    metadata = metadata

    # Common columns for all tables
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


# Global engine and session factory
engine: Engine | None = None
SessionLocal: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Get or create the database engine."""
    global engine

    if engine is None:
        if settings.database_url.startswith("sqlite"):
            # File-backed SQLite needs its directory to exist
            _, _, db_path = settings.database_url.partition(":///")
            if db_path and db_path != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            engine = create_engine(
                settings.database_url,
                echo=settings.db_echo,
                connect_args={"check_same_thread": False}
            )
        else:
            engine = create_engine(
                settings.database_url,
                echo=settings.db_echo,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=True,  # Verify connections before using
                pool_recycle=3600,   # Recycle connections after 1 hour
            )

    return engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the session factory."""
    global SessionLocal

    if SessionLocal is None:
        SessionLocal = sessionmaker(
            bind=get_engine(),
            expire_on_commit=False,
            autoflush=False
        )

    return SessionLocal


@contextmanager
def get_db_context() -> Iterator[Session]:
    """
    Unit of work outside a request, e.g. startup tasks and scripts.

    Commits on success and rolls back on any exception.
    """
    with get_session_factory()() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


def get_db() -> Generator[Session, None, None]:
    """
    Request-scoped session for FastAPI endpoints.

    Usage:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.scalars(select(StockItem)).all()
    """
    with get_db_context() as session:
        yield session


def init_db() -> None:
    """Create missing tables. Migrations own the schema outside development."""
    from wms import models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def close_db() -> None:
    global engine, SessionLocal

    if engine is not None:
        engine.dispose()
        engine = None
    SessionLocal = None


def check_db_connection() -> bool:
    """True when a trivial query succeeds."""
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error(f"Database health check failed: {exc}")
        return False
    return True
