import logging
from typing import Optional

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base, Session

from ..config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """
    Store client with an explicit lifecycle.

    Created once per process, opened on startup and closed on shutdown.
    Handlers get sessions from it through the `get_db` dependency.
    """

    def __init__(self, url: Optional[str] = None, **engine_options):
        self.url = url or settings.DATABASE_URL
        self.engine_options = engine_options
        self.engine = None
        self.SessionLocal = None

    def open(self):
        if self.engine is not None:
            return self

        options = dict(self.engine_options)
        if not self.url.startswith("sqlite"):
            options.setdefault("pool_size", settings.POOL_SIZE)
            options.setdefault("max_overflow", settings.MAX_OVERFLOW)
            options.setdefault("pool_pre_ping", True)
        options.setdefault("echo", settings.ECHO_SQL)

        self.engine = create_engine(self.url, **options)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        logger.info(f"Database engine created ({self.engine.url.get_backend_name()})")
        return self

    def close(self):
        if self.engine is None:
            return
        self.engine.dispose()
        self.engine = None
        self.SessionLocal = None
        logger.info("Database engine disposed")

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def session(self) -> Session:
        if self.SessionLocal is None:
            raise RuntimeError("Database is not open")
        return self.SessionLocal()

    def create_schema(self):
        # Register models on Base.metadata before create_all
        from . import models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def ping(self):
        """Run a trivial query; raises if the store is unreachable."""
        if self.engine is None:
            raise RuntimeError("Database is not open")
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))


def get_db(request: Request):
    """Dependency for FastAPI to get DB session"""
    db = request.app.state.database.session()
    try:
        yield db
    except Exception:
        db.rollback()  # Rollback on error to prevent stuck transactions
        raise
    finally:
        db.close()
