"""
Declarative base and schema bootstrap for the nutrition admin tables.

Runtime reads and writes go through the Supabase client; this module only
describes the schema and can create it on a database reachable through
DATABASE_URL.
"""
import logging
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from app.config.settings import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def get_engine(database_url: Optional[str] = None) -> Engine:
    """Build an engine for DATABASE_URL (or the url given)."""
    url = database_url or settings.database_url
    if not url:
        raise RuntimeError("DATABASE_URL is not configured")
    engine = create_engine(url, pool_pre_ping=True)
    if engine.dialect.name == "sqlite":
        # SQLite ignores ON DELETE clauses unless foreign keys are switched on
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_schema(engine: Engine) -> None:
    """Create every table that does not exist yet."""
    # Import models so they register on Base.metadata
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Schema ensured: %s", ", ".join(sorted(Base.metadata.tables)))
