"""Create (or recreate) the lin_* tables.

    python -m cms.db.create_tables [--drop]
"""
from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from . import models  # noqa: F401  # registers the tables on Base.metadata
from .session import Base, get_engine

logger = logging.getLogger(__name__)


def create_all() -> list[str]:
    """Create missing tables and return the table names now present."""
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    return sorted(inspect(engine).get_table_names())


def drop_all() -> None:
    Base.metadata.drop_all(bind=get_engine())
    logger.warning("Dropped CMS tables")


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Create the CMS database tables")
    ap.add_argument("--drop", action="store_true", help="drop existing tables first (destroys data)")
    args = ap.parse_args(argv)
    try:
        if args.drop:
            drop_all()
        tables = create_all()
    except SQLAlchemyError as exc:
        logger.error("Failed to create tables: %s", exc)
        return 1
    logger.info("Tables ready: %s", ", ".join(tables))
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    raise SystemExit(main())
