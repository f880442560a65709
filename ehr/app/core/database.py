import logging

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from ehr.app.core.errors import PersistenceError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):  # metadata for every table in the patient store
    pass


class Database:
    """
    Owns the engine and session factory for the patient store.

    Built once by the caller and handed to the app; ``connect`` must succeed
    before requests are served and ``close`` disposes the pool on shutdown.
    """

    def __init__(self, url, **engine_options):
        if not url:
            raise PersistenceError("DATABASE_URL is not set")
        self.url = url
        self.engine_options = engine_options
        self.engine = None
        self.SessionLocal = None

    @property
    def connected(self):
        return self.engine is not None

    def connect(self):
        if self.connected:
            return
        options = {"pool_pre_ping": True, "future": True}
        options.update(self.engine_options)
        engine = create_engine(self.url, **options)
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as exc:
            engine.dispose()
            logger.error("Database connection failed: %s", exc)
            raise PersistenceError(f"Could not connect to database: {exc}") from exc

        self.engine = engine
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=engine,
            future=True,
        )
        logger.info("Database connected: %s", engine.url.render_as_string(hide_password=True))

    def close(self):
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database connection closed")
        self.engine = None
        self.SessionLocal = None

    def ping(self):
        if not self.connected:
            return False
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Database ping failed")
            return False
        return True

    def get_session(self):
        """FastAPI dependency: one session per request."""
        if not self.connected:
            raise PersistenceError("Database is not connected")
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()


def get_db(request: Request):
    """Per-request session from the ``Database`` attached to the app."""
    yield from request.app.state.database.get_session()
