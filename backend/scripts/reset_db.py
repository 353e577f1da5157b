"""Reset the household ledger database to the current schema.

If settings.database_url points at a local SQLite file, the file is removed
and `init_db()` recreates every table empty. Other databases have their
tables dropped and recreated.

Use cautiously: this destroys all recorded debts, savings and cashflow items.
"""

from pathlib import Path
import logging

from homeledger.config import settings
from homeledger.db.models import Base
from homeledger.db.session import engine, init_db

logger = logging.getLogger("reset_db")
logging.basicConfig(level=logging.INFO)


def sqlite_path(database_url: str) -> Path | None:
    """Resolve the file behind a sqlite URL, or None for in-memory/other databases."""
    if not database_url.startswith("sqlite:"):
        return None

    # sqlite:///./data/homeledger.db or sqlite:////absolute/path.db
    path_part = database_url.split("sqlite:///")[-1]
    if not path_part or path_part == ":memory:":
        return None
    db_path = Path(path_part)
    if not db_path.is_absolute():
        db_path = Path.cwd() / db_path
    return db_path


def main() -> int:
    logger.info("Starting database reset")
    try:
        db_path = sqlite_path(settings.database_url)
        if db_path is None:
            logger.info("Not a SQLite file; dropping tables instead.")
            Base.metadata.drop_all(bind=engine)
        elif db_path.exists():
            engine.dispose()
            logger.info(f"Removing SQLite database file: {db_path}")
            db_path.unlink()
        else:
            logger.info(f"No SQLite file found at {db_path}; nothing to remove.")

        init_db()
        logger.info("Database reset and initialized successfully.")
        return 0
    except Exception:
        logger.exception("Failed to reset database")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
