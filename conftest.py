# type: ignore
"""Shared pytest setup: every test runs against the in-memory storage backend."""
import os

os.environ["STORAGE_BACKEND"] = "memory"
os.environ.setdefault("AUTO_CREATE_SCHEMA", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import random  # noqa: E402

import pytest  # noqa: E402

from reviewer_assignment.repositories import InMemoryReviewRepository  # noqa: E402
from reviewer_assignment.services.pull_request_service import PullRequestService  # noqa: E402


@pytest.fixture
def repo():
    return InMemoryReviewRepository()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def pr_service(repo, rng):
    return PullRequestService(repo, rng=rng)
