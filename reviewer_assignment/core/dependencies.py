# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection — wire the storage gateway and services.
"""

import random

from reviewer_assignment.core.config import settings
from reviewer_assignment.core.database import make_engine
from reviewer_assignment.core.logging import get_logger
from reviewer_assignment.repositories import (
    InMemoryReviewRepository,
    ReviewRepository,
    StorageGateway,
)
from reviewer_assignment.services.pull_request_service import PullRequestService
from reviewer_assignment.services.team_service import TeamService, UserService

logger = get_logger(__name__)


def build_repository() -> StorageGateway:
    if settings.STORAGE_BACKEND == "memory":
        logger.info("Using in-memory storage backend")
        return InMemoryReviewRepository()
    if settings.STORAGE_BACKEND != "postgres":
        raise ValueError(f"Unknown STORAGE_BACKEND '{settings.STORAGE_BACKEND}'")
    return ReviewRepository(make_engine())


# ── Singleton instances ──
_repo = build_repository()
_rng = random.Random(settings.RANDOM_SEED)

_team_service = TeamService(_repo)
_user_service = UserService(_repo)
_pull_request_service = PullRequestService(
    _repo, rng=_rng, reviewers_per_pr=settings.REVIEWERS_PER_PR,
)


# ── FastAPI dependency functions ──
def get_repo() -> StorageGateway:
    return _repo


def get_team_service() -> TeamService:
    return _team_service


def get_user_service() -> UserService:
    return _user_service


def get_pull_request_service() -> PullRequestService:
    return _pull_request_service
