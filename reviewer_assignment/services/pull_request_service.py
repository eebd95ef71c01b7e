# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Pull request lifecycle — creation with reviewer assignment,
merge, and reviewer reassignment.

State machine:
    OPEN ─► MERGED            (merge, terminal, idempotent on repeat)
    OPEN ─► OPEN              (reassign, reviewer set changes)

The storage gateway arbitrates uniqueness and performs the reviewer swap
atomically; this layer enforces the rules that are not storage constraints
(no self-review, candidates drawn from active teammates, NoCandidate).
"""

import random
from typing import Optional

from reviewer_assignment.core.errors import (
    AlreadyMergedError,
    NoCandidateError,
    NotAssignedError,
    ReviewServiceError,
)
from reviewer_assignment.core.logging import get_logger
from reviewer_assignment.metrics.prometheus import (
    PULL_REQUESTS_CREATED,
    PULL_REQUESTS_MERGED,
    REASSIGNMENTS,
    REVIEWERS_ASSIGNED,
)
from reviewer_assignment.models.domain import PullRequest, PullRequestShort
from reviewer_assignment.repositories import StorageGateway
from reviewer_assignment.services.selection import select_reviewers

logger = get_logger(__name__)

DEFAULT_REVIEWERS_PER_PR = 2


class PullRequestService:
    """Business logic for the pull request lifecycle."""

    def __init__(
        self,
        repo: StorageGateway,
        rng: Optional[random.Random] = None,
        reviewers_per_pr: int = DEFAULT_REVIEWERS_PER_PR,
    ) -> None:
        self._repo = repo
        self._rng = rng or random.Random()
        self._reviewers_per_pr = reviewers_per_pr

    # ── Commands ──

    def create(self, pr_id: str, name: str, author_id: str) -> PullRequest:
        """Create an OPEN pull request with up to ``reviewers_per_pr`` reviewers
        drawn from the author's active teammates."""
        try:
            teammates = self._repo.list_active_teammate_ids(author_id)
            pool = [uid for uid in teammates if uid != author_id]
            reviewers = select_reviewers(pool, self._reviewers_per_pr, self._rng)
            pr = self._repo.insert_pull_request(pr_id, name, author_id, reviewers)
        except ReviewServiceError as exc:
            logger.error("Failed to create pull request %s: %s", pr_id, exc,
                         extra={"pull_request_id": pr_id, "user_id": author_id})
            raise

        PULL_REQUESTS_CREATED.inc()
        REVIEWERS_ASSIGNED.observe(len(pr.reviewers))
        logger.info(
            "Pull request created: id=%s, author=%s, reviewers=%s",
            pr.id, author_id, pr.reviewers,
            extra={"pull_request_id": pr.id, "user_id": author_id},
        )
        return pr

    def merge(self, pr_id: str) -> PullRequest:
        """Mark a pull request MERGED. Repeating the call returns the stored
        record with its original ``merged_at``."""
        try:
            pr = self._repo.mark_merged(pr_id)
        except ReviewServiceError as exc:
            logger.error("Failed to merge pull request %s: %s", pr_id, exc,
                         extra={"pull_request_id": pr_id})
            raise
        PULL_REQUESTS_MERGED.inc()
        logger.info("Pull request merged: id=%s, merged_at=%s", pr.id, pr.merged_at,
                    extra={"pull_request_id": pr.id})
        return pr

    def reassign(self, pr_id: str, old_reviewer_id: str) -> tuple[PullRequest, str]:
        """Replace ``old_reviewer_id`` with a random eligible teammate.

        Returns the updated pull request and the id of the new reviewer.
        Raises NotFoundError, AlreadyMergedError, NotAssignedError or
        NoCandidateError.
        """
        try:
            pr = self._repo.get_pull_request(pr_id)
            if pr.is_merged:
                raise AlreadyMergedError(f"Pull request '{pr_id}' is already merged")
            if old_reviewer_id not in pr.reviewers:
                raise NotAssignedError(
                    f"User '{old_reviewer_id}' is not a reviewer of '{pr_id}'"
                )

            # TODO: draw from the author's team once cross-team moves are
            # prevented; the old reviewer's current team is used for now.
            teammates = self._repo.list_active_teammate_ids(old_reviewer_id)
            excluded = set(pr.reviewers) | {pr.author_id}
            pool = [uid for uid in teammates if uid not in excluded]
            if not pool:
                raise NoCandidateError(
                    f"No active replacement candidate for '{old_reviewer_id}' on '{pr_id}'"
                )

            new_reviewer_id = select_reviewers(pool, 1, self._rng)[0]
            updated = self._repo.replace_reviewer(pr_id, old_reviewer_id, new_reviewer_id)
        except ReviewServiceError as exc:
            REASSIGNMENTS.labels(outcome=exc.code.lower()).inc()
            logger.error("Failed to reassign reviewer on %s: %s", pr_id, exc,
                         extra={"pull_request_id": pr_id, "user_id": old_reviewer_id})
            raise

        REASSIGNMENTS.labels(outcome="success").inc()
        logger.info(
            "Reviewer reassigned: pr=%s, old=%s, new=%s",
            pr_id, old_reviewer_id, new_reviewer_id,
            extra={"pull_request_id": pr_id, "user_id": new_reviewer_id},
        )
        return updated, new_reviewer_id

    # ── Queries ──

    def list_by_reviewer(self, user_id: str) -> list[PullRequestShort]:
        return self._repo.list_by_reviewer(user_id)
