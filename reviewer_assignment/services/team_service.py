# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Team and user management — thin pass-through to the repository,
with logging and metrics.
"""

from reviewer_assignment.core.errors import ReviewServiceError
from reviewer_assignment.core.logging import get_logger
from reviewer_assignment.metrics.prometheus import TEAMS_CREATED, USER_ACTIVITY_CHANGES
from reviewer_assignment.models.domain import Team, User
from reviewer_assignment.repositories import StorageGateway

logger = get_logger(__name__)


class TeamService:
    def __init__(self, repo: StorageGateway) -> None:
        self._repo = repo

    def create(self, team: Team) -> Team:
        """Create a team; members already known elsewhere move into it."""
        try:
            created = self._repo.add_team(team)
        except ReviewServiceError as exc:
            logger.error("Failed to create team %s: %s", team.name, exc,
                         extra={"team_name": team.name})
            raise
        TEAMS_CREATED.inc()
        logger.info("Team created: name=%s, members=%d", team.name, len(team.members),
                    extra={"team_name": team.name})
        return created

    def get(self, name: str) -> Team:
        try:
            return self._repo.get_team(name)
        except ReviewServiceError as exc:
            logger.error("Failed to get team %s: %s", name, exc)
            raise


class UserService:
    def __init__(self, repo: StorageGateway) -> None:
        self._repo = repo

    def set_active(self, user_id: str, is_active: bool) -> User:
        try:
            user = self._repo.set_user_active(user_id, is_active)
        except ReviewServiceError as exc:
            logger.error("Failed to set is_active for %s: %s", user_id, exc,
                         extra={"user_id": user_id})
            raise
        USER_ACTIVITY_CHANGES.labels(is_active=str(is_active).lower()).inc()
        logger.info("User activity changed: id=%s, is_active=%s", user_id, is_active,
                    extra={"user_id": user_id})
        return user
