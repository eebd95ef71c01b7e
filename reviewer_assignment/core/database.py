# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""SQLAlchemy engine factory and schema bootstrap."""
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from reviewer_assignment.core.config import settings
from reviewer_assignment.core.logging import get_logger

logger = get_logger(__name__)

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS teams (
        team_name TEXT PRIMARY KEY
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        user_id   TEXT PRIMARY KEY,
        username  TEXT NOT NULL,
        is_active BOOLEAN NOT NULL DEFAULT TRUE,
        team_name TEXT NOT NULL REFERENCES teams (team_name)
    )
    """,
    "CREATE INDEX IF NOT EXISTS users_team_active_idx ON users (team_name, is_active)",
    """
    CREATE TABLE IF NOT EXISTS pull_requests (
        pull_request_id    TEXT PRIMARY KEY,
        pull_request_name  TEXT NOT NULL,
        author_id          TEXT NOT NULL REFERENCES users (user_id),
        status             TEXT NOT NULL DEFAULT 'OPEN' CHECK (status IN ('OPEN', 'MERGED')),
        assigned_reviewers TEXT[] NOT NULL DEFAULT '{}',
        created_at         TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        merged_at          TIMESTAMPTZ
    )
    """,
    "CREATE INDEX IF NOT EXISTS pull_requests_reviewers_idx ON pull_requests USING GIN (assigned_reviewers)",
)


def make_engine(url: str | None = None) -> Engine:
    return create_engine(
        url or settings.DATABASE_URL,
        pool_pre_ping=True,
        pool_size=settings.POOL_SIZE,
        max_overflow=settings.MAX_OVERFLOW,
        pool_recycle=settings.POOL_RECYCLE,
    )


def create_schema(engine: Engine) -> None:
    """Create tables and indexes if they are missing. Safe to run repeatedly."""
    with engine.begin() as conn:
        for statement in SCHEMA_STATEMENTS:
            conn.execute(text(statement))
    logger.info("Database schema ensured (%d statements)", len(SCHEMA_STATEMENTS))
