# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: in-memory storage for teams, users and pull requests.
Same contract as ReviewRepository. Every operation runs under one lock, so
inserts are conflict-detecting and reviewer swaps are compare-and-swap.
NO business rules here.
"""

import threading
from datetime import datetime, timezone
from typing import Any, Optional

from reviewer_assignment.core.errors import (
    AlreadyMergedError,
    NoCandidateError,
    NotAssignedError,
    NotFoundError,
    PullRequestExistsError,
    TeamExistsError,
)
from reviewer_assignment.models.domain import (
    PRStatus,
    PullRequest,
    PullRequestShort,
    Team,
    TeamMember,
    User,
)


class InMemoryReviewRepository:
    """Dict-backed storage gateway (single process only)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._teams: set[str] = set()
        # user_id -> {"name", "is_active", "team_name"}; dict order is member order
        self._users: dict[str, dict[str, Any]] = {}
        self._pull_requests: dict[str, PullRequest] = {}

    # ── Teams & users ──

    def add_team(self, team: Team) -> Team:
        with self._lock:
            if team.name in self._teams:
                raise TeamExistsError(f"Team '{team.name}' already exists")
            self._teams.add(team.name)
            for member in team.members:
                self._users[member.id] = {
                    "name": member.name,
                    "is_active": member.is_active,
                    "team_name": team.name,
                }
        return team

    def get_team(self, name: str) -> Team:
        with self._lock:
            if name not in self._teams:
                raise NotFoundError(f"Team '{name}' not found")
            members = [
                TeamMember(id=user_id, name=u["name"], is_active=u["is_active"])
                for user_id, u in self._users.items()
                if u["team_name"] == name
            ]
        return Team(name=name, members=members)

    def set_user_active(self, user_id: str, is_active: bool) -> User:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise NotFoundError(f"User '{user_id}' not found")
            user["is_active"] = is_active
            return User(
                id=user_id, name=user["name"],
                team_name=user["team_name"], is_active=user["is_active"],
            )

    def list_active_teammate_ids(self, user_id: str) -> list[str]:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise NotFoundError(f"User '{user_id}' not found")
            return [
                uid for uid, u in self._users.items()
                if u["team_name"] == user["team_name"] and u["is_active"]
            ]

    # ── Pull requests ──

    def get_pull_request(self, pr_id: str) -> PullRequest:
        with self._lock:
            return self._copy(self._require(pr_id))

    def insert_pull_request(self, pr_id: str, name: str, author_id: str,
                            reviewer_ids: list[str]) -> PullRequest:
        with self._lock:
            if pr_id in self._pull_requests:
                raise PullRequestExistsError(f"Pull request '{pr_id}' already exists")
            if author_id not in self._users:
                raise NotFoundError(f"Author '{author_id}' not found")
            pr = PullRequest(
                id=pr_id,
                name=name,
                author_id=author_id,
                status=PRStatus.OPEN,
                reviewers=list(reviewer_ids),
                created_at=datetime.now(timezone.utc),
            )
            self._pull_requests[pr_id] = pr
            return self._copy(pr)

    def mark_merged(self, pr_id: str) -> PullRequest:
        with self._lock:
            pr = self._require(pr_id)
            if pr.status != PRStatus.MERGED:
                pr.status = PRStatus.MERGED
                pr.merged_at = datetime.now(timezone.utc)
            return self._copy(pr)

    def replace_reviewer(self, pr_id: str, old_reviewer_id: str,
                         new_reviewer_id: str) -> PullRequest:
        with self._lock:
            pr = self._require(pr_id)
            if pr.status == PRStatus.MERGED:
                raise AlreadyMergedError(f"Pull request '{pr_id}' is already merged")
            if old_reviewer_id not in pr.reviewers:
                raise NotAssignedError(f"User '{old_reviewer_id}' is not a reviewer of '{pr_id}'")
            if new_reviewer_id in pr.reviewers:
                raise NoCandidateError(f"User '{new_reviewer_id}' is already a reviewer of '{pr_id}'")
            pr.reviewers = [
                new_reviewer_id if r == old_reviewer_id else r for r in pr.reviewers
            ]
            return self._copy(pr)

    def list_by_reviewer(self, user_id: str) -> list[PullRequestShort]:
        with self._lock:
            return [
                pr.short() for pr in self._pull_requests.values()
                if user_id in pr.reviewers
            ]

    # ── Ops ──

    def ensure_schema(self) -> None:
        return None

    def verify_connection(self) -> None:
        return None

    def dispose(self) -> None:
        return None

    def clear(self) -> None:
        with self._lock:
            self._teams.clear()
            self._users.clear()
            self._pull_requests.clear()

    # ── Private ──

    def _require(self, pr_id: str) -> PullRequest:
        pr: Optional[PullRequest] = self._pull_requests.get(pr_id)
        if pr is None:
            raise NotFoundError(f"Pull request '{pr_id}' not found")
        return pr

    @staticmethod
    def _copy(pr: PullRequest) -> PullRequest:
        return pr.model_copy(deep=True)
