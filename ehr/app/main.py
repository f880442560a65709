import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from ehr.app.api import health, patients
from ehr.app.core import config
from ehr.app.core.database import Database
from ehr.app.core.errors import PersistenceError
from ehr.app.core.log import configure_logging

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


def create_app(database=None):
    """
    Build the dashboard app around a ``Database``.

    The database is connected when the app starts up; if that fails the
    startup fails and no request is served.
    """
    if database is None:
        database = Database(config.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app):
        database.connect()
        try:
            yield
        finally:
            database.close()

    app = FastAPI(title="EHR Ward Dashboard", lifespan=lifespan)
    app.state.database = database

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(health.router)
    app.include_router(patients.router)

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return PlainTextResponse("Server Error", status_code=500)

    return app


def run():
    import uvicorn

    configure_logging()
    try:
        database = Database(config.DATABASE_URL)
        database.connect()
    except PersistenceError as exc:
        logger.error("Not starting: %s", exc)
        sys.exit(1)

    logger.info("EHR server running on port %s", config.PORT)
    logger.info("Open your browser at http://localhost:%s", config.PORT)
    uvicorn.run(create_app(database), host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
