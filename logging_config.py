# logging_config.py
"""Logging setup for the inventory service."""
import logging
import sys


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
     """
     Route application logs to stderr.

     Args:
          level: Level name for the application loggers (DEBUG, INFO, ...)
     """
     handler = logging.StreamHandler(sys.stderr)
     handler.setFormatter(logging.Formatter(LOG_FORMAT))

     root_logger = logging.getLogger()
     root_logger.handlers.clear()
     root_logger.addHandler(handler)
     root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

     # Keep library chatter down unless SQL_ECHO asks for it
     logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
     logging.getLogger("alembic").setLevel(logging.WARNING)
