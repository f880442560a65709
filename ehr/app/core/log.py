import logging

from ehr.app.core.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level=None):
    """Console logging for the server process."""
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
