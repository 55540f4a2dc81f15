"""
Relational store - engine, transactions and raw-SQL helpers.

PostgreSQL in production; any SQLAlchemy URL (SQLite for local runs and the
test suite) through ``DATABASE_URL``. Services write plain SQL with ``text()``
and get rows back as dicts.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from placement_portal.core.config import get_settings
from placement_portal.db.tables import metadata

logger = logging.getLogger(__name__)

settings = get_settings()


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # TestClient runs handlers on a worker thread
        return {"connect_args": {"check_same_thread": False}}
    # 5 pooled connections, up to 10 more under load
    return {"pool_size": 5, "max_overflow": 10, "pool_pre_ping": True}


engine = create_engine(
    settings.sqlalchemy_url,
    echo=settings.debug,
    **_engine_options(settings.sqlalchemy_url)
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_session() -> Iterator[Session]:
    """
    One unit of work: commit when the block exits cleanly, roll back and
    re-raise otherwise.

        with get_db_session() as db:
            db.execute(text("UPDATE jobs SET status = 'CLOSED' WHERE job_id = :id"), {"id": 3})
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_schema() -> None:
    """Create any missing tables. Safe to call on every startup."""
    metadata.create_all(bind=engine)


def test_postgres_connection() -> bool:
    """True when the relational store answers ``SELECT 1``."""
    try:
        with get_db_session() as db:
            return db.execute(text("SELECT 1")).scalar() == 1
    except Exception:
        logger.exception("Relational store connection failed")
        return False


def execute_raw_sql(sql: str, params: Optional[dict] = None) -> List[dict]:
    """Run one statement in its own transaction and return the rows as dicts."""
    with get_db_session() as db:
        result = db.execute(text(sql), params or {})
        return [dict(row) for row in result.mappings().fetchall()]


def fetch_one(sql: str, params: Optional[dict] = None) -> Optional[dict]:
    rows = execute_raw_sql(sql, params)
    return rows[0] if rows else None
