# create_tables.py: run once to create missing tables (development helper)
import logging
import sys

from teenbudget.db import models  # noqa: F401  registers the tables on Base.metadata
from teenbudget.db.base import Base
from teenbudget.db.session import engine

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_tables(bind=engine) -> None:
    Base.metadata.create_all(bind=bind)


if __name__ == "__main__":
    logger.info("Creating tables in the database (if not exist)...")
    try:
        create_tables()
        logger.info("Done.")
    except Exception:
        logger.exception("Error creating tables:")
        sys.exit(1)
