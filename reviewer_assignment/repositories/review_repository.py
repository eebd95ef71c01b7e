# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Data-access layer for teams, users and pull requests (PostgreSQL).

Uniqueness and referential integrity are left to the database; SQLSTATE codes
are translated into the service's business failures. Multi-statement writes
run inside a single ``engine.begin()`` transaction.
"""
from typing import Any, List, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from reviewer_assignment.core.database import create_schema
from reviewer_assignment.core.errors import (
    AlreadyMergedError,
    NoCandidateError,
    NotAssignedError,
    NotFoundError,
    PullRequestExistsError,
    TeamExistsError,
)
from reviewer_assignment.core.logging import get_logger
from reviewer_assignment.models.domain import (
    PRStatus,
    PullRequest,
    PullRequestShort,
    Team,
    TeamMember,
    User,
)

logger = get_logger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"

PR_COLS = (
    "pull_request_id, pull_request_name, author_id, status, "
    "assigned_reviewers, created_at, merged_at"
)
PR_SHORT_COLS = "pull_request_id, pull_request_name, author_id, status"


def _sqlstate(exc: IntegrityError) -> Optional[str]:
    # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
    orig = exc.orig
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def _row_to_pull_request(row: Mapping[str, Any]) -> PullRequest:
    return PullRequest(
        id=row["pull_request_id"],
        name=row["pull_request_name"],
        author_id=row["author_id"],
        status=PRStatus(row["status"]),
        reviewers=list(row["assigned_reviewers"] or []),
        created_at=row["created_at"],
        merged_at=row["merged_at"],
    )


def _row_to_short(row: Mapping[str, Any]) -> PullRequestShort:
    return PullRequestShort(
        id=row["pull_request_id"],
        name=row["pull_request_name"],
        author_id=row["author_id"],
        status=PRStatus(row["status"]),
    )


class ReviewRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Teams & users ──────────────────────────────────────────────────

    def add_team(self, team: Team) -> Team:
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    text("INSERT INTO teams (team_name) VALUES (:team_name)"),
                    {"team_name": team.name},
                )
                if team.members:
                    conn.execute(
                        text("""
                            INSERT INTO users (user_id, username, is_active, team_name)
                            VALUES (:user_id, :username, :is_active, :team_name)
                            ON CONFLICT (user_id) DO UPDATE
                            SET username  = EXCLUDED.username,
                                is_active = EXCLUDED.is_active,
                                team_name = EXCLUDED.team_name
                        """),
                        [
                            {"user_id": m.id, "username": m.name,
                             "is_active": m.is_active, "team_name": team.name}
                            for m in team.members
                        ],
                    )
        except IntegrityError as exc:
            if _sqlstate(exc) == UNIQUE_VIOLATION:
                raise TeamExistsError(f"Team '{team.name}' already exists") from exc
            raise
        return team

    def get_team(self, name: str) -> Team:
        with self._engine.connect() as conn:
            found = conn.execute(
                text("SELECT team_name FROM teams WHERE team_name = :team_name"),
                {"team_name": name},
            ).first()
            if found is None:
                raise NotFoundError(f"Team '{name}' not found")
            rows = conn.execute(
                text("""
                    SELECT user_id, username, is_active
                    FROM users WHERE team_name = :team_name
                    ORDER BY user_id
                """),
                {"team_name": name},
            ).mappings().all()
        return Team(
            name=name,
            members=[
                TeamMember(id=r["user_id"], name=r["username"], is_active=r["is_active"])
                for r in rows
            ],
        )

    def set_user_active(self, user_id: str, is_active: bool) -> User:
        with self._engine.begin() as conn:
            row = conn.execute(
                text("""
                    UPDATE users SET is_active = :is_active
                    WHERE user_id = :user_id
                    RETURNING user_id, username, team_name, is_active
                """),
                {"user_id": user_id, "is_active": is_active},
            ).mappings().first()
        if row is None:
            raise NotFoundError(f"User '{user_id}' not found")
        return User(
            id=row["user_id"], name=row["username"],
            team_name=row["team_name"], is_active=row["is_active"],
        )

    def list_active_teammate_ids(self, user_id: str) -> List[str]:
        """Active members of ``user_id``'s team, ``user_id`` itself included."""
        with self._engine.connect() as conn:
            team_name = conn.execute(
                text("SELECT team_name FROM users WHERE user_id = :user_id"),
                {"user_id": user_id},
            ).scalar()
            if team_name is None:
                raise NotFoundError(f"User '{user_id}' not found")
            rows = conn.execute(
                text("""
                    SELECT user_id FROM users
                    WHERE team_name = :team_name AND is_active = TRUE
                    ORDER BY user_id
                """),
                {"team_name": team_name},
            ).fetchall()
        return [r[0] for r in rows]

    # ── Pull requests ──────────────────────────────────────────────────

    def get_pull_request(self, pr_id: str) -> PullRequest:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {PR_COLS} FROM pull_requests WHERE pull_request_id = :id"),
                {"id": pr_id},
            ).mappings().first()
        if row is None:
            raise NotFoundError(f"Pull request '{pr_id}' not found")
        return _row_to_pull_request(row)

    def insert_pull_request(self, pr_id: str, name: str, author_id: str,
                            reviewer_ids: List[str]) -> PullRequest:
        try:
            with self._engine.begin() as conn:
                row = conn.execute(
                    text(f"""
                        INSERT INTO pull_requests
                            (pull_request_id, pull_request_name, author_id, status, assigned_reviewers)
                        VALUES
                            (:id, :name, :author_id, 'OPEN', CAST(:reviewers AS TEXT[]))
                        RETURNING {PR_COLS}
                    """),
                    {"id": pr_id, "name": name, "author_id": author_id,
                     "reviewers": list(reviewer_ids)},
                ).mappings().first()
        except IntegrityError as exc:
            state = _sqlstate(exc)
            if state == UNIQUE_VIOLATION:
                raise PullRequestExistsError(f"Pull request '{pr_id}' already exists") from exc
            if state == FOREIGN_KEY_VIOLATION:
                raise NotFoundError(f"Author '{author_id}' not found") from exc
            raise
        return _row_to_pull_request(row)

    def mark_merged(self, pr_id: str) -> PullRequest:
        with self._engine.begin() as conn:
            row = conn.execute(
                text(f"""
                    UPDATE pull_requests
                    SET status = 'MERGED', merged_at = COALESCE(merged_at, NOW())
                    WHERE pull_request_id = :id
                    RETURNING {PR_COLS}
                """),
                {"id": pr_id},
            ).mappings().first()
        if row is None:
            raise NotFoundError(f"Pull request '{pr_id}' not found")
        return _row_to_pull_request(row)

    def replace_reviewer(self, pr_id: str, old_reviewer_id: str,
                         new_reviewer_id: str) -> PullRequest:
        """Swap one reviewer for another as a single conditional update.

        Status and membership are re-checked by the UPDATE itself, so a
        concurrent merge or reassignment between the caller's read and this
        write makes the update match nothing. The cause is then read back in
        the same transaction and reported.
        """
        params = {"id": pr_id, "old_id": old_reviewer_id, "new_id": new_reviewer_id}
        with self._engine.begin() as conn:
            row = conn.execute(
                text(f"""
                    UPDATE pull_requests
                    SET assigned_reviewers = array_replace(
                            assigned_reviewers, CAST(:old_id AS TEXT), CAST(:new_id AS TEXT))
                    WHERE pull_request_id = :id
                      AND status = 'OPEN'
                      AND CAST(:old_id AS TEXT) = ANY(assigned_reviewers)
                      AND NOT (CAST(:new_id AS TEXT) = ANY(assigned_reviewers))
                    RETURNING {PR_COLS}
                """),
                params,
            ).mappings().first()
            if row is not None:
                return _row_to_pull_request(row)

            logger.warning("Reviewer swap on %s matched no row, checking current state", pr_id)
            current = conn.execute(
                text("SELECT status, assigned_reviewers FROM pull_requests WHERE pull_request_id = :id"),
                {"id": pr_id},
            ).mappings().first()

        if current is None:
            raise NotFoundError(f"Pull request '{pr_id}' not found")
        if current["status"] == PRStatus.MERGED.value:
            raise AlreadyMergedError(f"Pull request '{pr_id}' is already merged")
        reviewers = list(current["assigned_reviewers"] or [])
        if old_reviewer_id not in reviewers:
            raise NotAssignedError(f"User '{old_reviewer_id}' is not a reviewer of '{pr_id}'")
        raise NoCandidateError(f"User '{new_reviewer_id}' is already a reviewer of '{pr_id}'")

    def list_by_reviewer(self, user_id: str) -> List[PullRequestShort]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"""
                    SELECT {PR_SHORT_COLS} FROM pull_requests
                    WHERE CAST(:user_id AS TEXT) = ANY(assigned_reviewers)
                """),
                {"user_id": user_id},
            ).mappings().all()
        return [_row_to_short(r) for r in rows]

    # ── Ops ────────────────────────────────────────────────────────────

    def ensure_schema(self):
        create_schema(self._engine)

    def verify_connection(self):
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self):
        self._engine.dispose()
