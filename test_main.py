"""
Reviewer Assignment Service — Unit Tests
========================================
Run:  pytest test_main.py -v --cov=main --cov=reviewer_assignment --cov-report=term-missing
Target: ≥ 80 % line coverage

The app runs on the in-memory storage backend (see conftest.py), which is
cleared before every test.
"""
import json
import logging
import random
import sys
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from main import app
from reviewer_assignment.core import dependencies
from reviewer_assignment.core.dependencies import get_pull_request_service, get_repo
from reviewer_assignment.core.errors import (
    AlreadyExistsError,
    NotAssignedError,
    PullRequestExistsError,
    TeamExistsError,
)
from reviewer_assignment.core.logging import JSONFormatter, get_logger, request_id_var
from reviewer_assignment.services.pull_request_service import PullRequestService

client = TestClient(app)


@pytest.fixture(autouse=True)
def reset():
    get_repo().clear()
    app.dependency_overrides[get_pull_request_service] = lambda: PullRequestService(
        get_repo(), rng=random.Random(7),
    )
    yield
    app.dependency_overrides.clear()


# ── Helpers ──────────────────────────────────────────────────────────────
def _add_team(name, *member_ids, inactive=()):
    r = client.post("/team/add", json={
        "team_name": name,
        "members": [
            {"user_id": uid, "username": uid.upper(), "is_active": uid not in inactive}
            for uid in member_ids
        ],
    })
    assert r.status_code == 201, r.text
    return r.json()


def _create_pr(pr_id, author_id, name="Change"):
    return client.post("/pullRequest/create", json={
        "pull_request_id": pr_id, "pull_request_name": name, "author_id": author_id,
    })


def _error_code(r):
    return r.json()["error"]["code"]


# ═══════════════════════════════════════════════════════════════════════════
# HEALTH & METRICS
# ═══════════════════════════════════════════════════════════════════════════
class TestHealth:
    def test_health_ok(self):
        r = client.get("/health")
        assert r.status_code == 200
        d = r.json()
        assert d["status"] == "ok"
        assert d["service"] == "reviewer-assignment"
        assert d["storage"] == "memory"

    def test_readiness_ok(self):
        r = client.get("/health/ready")
        assert r.status_code == 200
        assert r.json() == {"status": "ready", "storage": "memory"}

    def test_readiness_fails_when_storage_down(self):
        with patch.object(dependencies._repo, "verify_connection", side_effect=Exception("boom")):
            r = client.get("/health/ready")
        assert r.status_code == 503
        assert r.json()["status"] == "unavailable"
        assert r.json()["error"] == "boom"

    def test_metrics_endpoint(self):
        _add_team("core", "a", "b")
        r = client.get("/metrics")
        assert r.status_code == 200
        assert "review_requests_total" in r.text
        assert "teams_created_total" in r.text

    def test_request_id_propagated(self):
        r = client.get("/team/get", params={"team_name": "none"}, headers={"X-Request-ID": "my-req-42"})
        assert r.headers["X-Request-ID"] == "my-req-42"

    def test_request_id_generated(self):
        r = client.get("/health")
        assert r.headers.get("X-Request-ID")

    def test_oversized_request_id_replaced(self):
        r = client.get("/health", headers={"X-Request-ID": "x" * 500})
        assert r.headers["X-Request-ID"] != "x" * 500
        assert len(r.headers["X-Request-ID"]) == 32


# ═══════════════════════════════════════════════════════════════════════════
# TEAMS
# ═══════════════════════════════════════════════════════════════════════════
class TestTeams:
    def test_add_team(self):
        d = _add_team("backend", "u1", "u2")
        assert d["team"]["team_name"] == "backend"
        assert [m["user_id"] for m in d["team"]["members"]] == ["u1", "u2"]

    def test_duplicate_team_400(self):
        _add_team("backend", "u1")
        r = client.post("/team/add", json={"team_name": "backend", "members": []})
        assert r.status_code == 400
        assert _error_code(r) == "TEAM_EXISTS"

    def test_get_team(self):
        _add_team("backend", "u1", "u2", inactive=("u2",))
        r = client.get("/team/get", params={"team_name": "backend"})
        assert r.status_code == 200
        members = {m["user_id"]: m["is_active"] for m in r.json()["members"]}
        assert members == {"u1": True, "u2": False}

    def test_get_team_not_found(self):
        r = client.get("/team/get", params={"team_name": "ghost"})
        assert r.status_code == 404
        assert _error_code(r) == "NOT_FOUND"

    def test_get_team_missing_param_422(self):
        assert client.get("/team/get").status_code == 422

    def test_duplicate_member_ids_422(self):
        r = client.post("/team/add", json={
            "team_name": "t",
            "members": [{"user_id": "u1", "username": "A"}, {"user_id": "u1", "username": "B"}],
        })
        assert r.status_code == 422

    def test_missing_team_name_422(self):
        assert client.post("/team/add", json={"members": []}).status_code == 422


# ═══════════════════════════════════════════════════════════════════════════
# USERS
# ═══════════════════════════════════════════════════════════════════════════
class TestUsers:
    def test_set_is_active(self):
        _add_team("backend", "u1")
        r = client.post("/users/setIsActive", json={"user_id": "u1", "is_active": False})
        assert r.status_code == 200
        assert r.json()["user"] == {
            "user_id": "u1", "username": "U1", "team_name": "backend", "is_active": False,
        }

    def test_set_is_active_unknown_404(self):
        r = client.post("/users/setIsActive", json={"user_id": "ghost", "is_active": True})
        assert r.status_code == 404
        assert _error_code(r) == "NOT_FOUND"

    def test_get_review_empty(self):
        r = client.get("/users/getReview", params={"user_id": "nobody"})
        assert r.status_code == 200
        assert r.json() == {"user_id": "nobody", "pull_requests": []}

    def test_get_review_lists_assignments(self):
        _add_team("backend", "a", "r1")
        _create_pr("pr1", "a", name="First")
        r = client.get("/users/getReview", params={"user_id": "r1"})
        assert r.json()["pull_requests"] == [{
            "pull_request_id": "pr1", "pull_request_name": "First",
            "author_id": "a", "status": "OPEN",
        }]

    def test_get_review_missing_param_422(self):
        assert client.get("/users/getReview").status_code == 422


# ═══════════════════════════════════════════════════════════════════════════
# PULL REQUESTS
# ═══════════════════════════════════════════════════════════════════════════
class TestCreatePullRequest:
    def test_create_success(self):
        _add_team("backend", "a", "r1", "r2", "r3")
        r = _create_pr("pr1", "a")
        assert r.status_code == 201
        d = r.json()["pull_request"]
        assert d["status"] == "OPEN"
        assert d["author_id"] == "a"
        assert len(d["assigned_reviewers"]) == 2
        assert "a" not in d["assigned_reviewers"]
        assert d["createdAt"] is not None
        assert d["mergedAt"] is None

    def test_create_without_candidates(self):
        _add_team("solo", "a")
        r = _create_pr("pr1", "a")
        assert r.status_code == 201
        assert r.json()["pull_request"]["assigned_reviewers"] == []

    def test_duplicate_409(self):
        _add_team("backend", "a", "r1")
        _create_pr("pr1", "a")
        r = _create_pr("pr1", "a")
        assert r.status_code == 409
        assert _error_code(r) == "PR_EXISTS"

    def test_unknown_author_404(self):
        r = _create_pr("pr1", "ghost")
        assert r.status_code == 404
        assert _error_code(r) == "NOT_FOUND"

    def test_missing_fields_422(self):
        r = client.post("/pullRequest/create", json={"pull_request_id": "pr1"})
        assert r.status_code == 422


class TestMergePullRequest:
    def test_merge(self):
        _add_team("backend", "a", "r1")
        _create_pr("pr1", "a")
        r = client.post("/pullRequest/merge", json={"pull_request_id": "pr1"})
        assert r.status_code == 200
        d = r.json()["pull_request"]
        assert d["status"] == "MERGED"
        assert d["mergedAt"] is not None

    def test_merge_is_idempotent(self):
        _add_team("backend", "a", "r1")
        _create_pr("pr1", "a")
        first = client.post("/pullRequest/merge", json={"pull_request_id": "pr1"}).json()
        second = client.post("/pullRequest/merge", json={"pull_request_id": "pr1"})
        assert second.status_code == 200
        assert second.json() == first

    def test_merge_unknown_404(self):
        r = client.post("/pullRequest/merge", json={"pull_request_id": "ghost"})
        assert r.status_code == 404


class TestReassign:
    def test_reassign_success(self):
        _add_team("backend", "a", "r1", "r2", "r3")
        reviewers = _create_pr("pr1", "a").json()["pull_request"]["assigned_reviewers"]
        old = reviewers[0]
        r = client.post("/pullRequest/reassign", json={"pull_request_id": "pr1", "old_user_id": old})
        assert r.status_code == 200
        d = r.json()
        expected = ({"r1", "r2", "r3"} - set(reviewers)).pop()
        assert d["replaced_by"] == expected
        assert old not in d["pr"]["assigned_reviewers"]
        assert expected in d["pr"]["assigned_reviewers"]

    def test_reassign_accepts_old_reviewer_id(self):
        _add_team("backend", "a", "r1", "r2", inactive=("r2",))
        assert _create_pr("pr1", "a").json()["pull_request"]["assigned_reviewers"] == ["r1"]
        client.post("/users/setIsActive", json={"user_id": "r2", "is_active": True})
        r = client.post("/pullRequest/reassign", json={"pull_request_id": "pr1", "old_reviewer_id": "r1"})
        assert r.status_code == 200
        assert r.json()["replaced_by"] == "r2"
        assert r.json()["pr"]["assigned_reviewers"] == ["r2"]

    def test_reassign_no_candidate_409(self):
        _add_team("backend", "a", "r1", "r2")
        _create_pr("pr1", "a")
        r = client.post("/pullRequest/reassign", json={"pull_request_id": "pr1", "old_user_id": "r1"})
        assert r.status_code == 409
        assert _error_code(r) == "NO_CANDIDATE"

    def test_reassign_merged_409(self):
        _add_team("backend", "a", "r1", "r2", "r3")
        _create_pr("pr1", "a")
        client.post("/pullRequest/merge", json={"pull_request_id": "pr1"})
        r = client.post("/pullRequest/reassign", json={"pull_request_id": "pr1", "old_user_id": "r1"})
        assert r.status_code == 409
        assert _error_code(r) == "PR_MERGED"

    def test_reassign_not_assigned_409(self):
        _add_team("backend", "a", "r1")
        _create_pr("pr1", "a")
        r = client.post("/pullRequest/reassign", json={"pull_request_id": "pr1", "old_user_id": "a"})
        assert r.status_code == 409
        assert _error_code(r) == "NOT_ASSIGNED"

    def test_reassign_unknown_pr_404(self):
        r = client.post("/pullRequest/reassign", json={"pull_request_id": "ghost", "old_user_id": "r1"})
        assert r.status_code == 404

    def test_reassign_missing_fields_422(self):
        r = client.post("/pullRequest/reassign", json={"pull_request_id": "pr1"})
        assert r.status_code == 422


# ═══════════════════════════════════════════════════════════════════════════
# ERROR HANDLING
# ═══════════════════════════════════════════════════════════════════════════
class TestErrors:
    def test_unexpected_error_500(self):
        failing = MagicMock()
        failing.get.side_effect = RuntimeError("disk on fire")
        app.dependency_overrides[dependencies.get_team_service] = lambda: failing
        with TestClient(app, raise_server_exceptions=False) as c:
            r = c.get("/team/get", params={"team_name": "x"})
        assert r.status_code == 500
        assert _error_code(r) == "internal_server_error"

    def test_error_bodies_documented(self):
        openapi = client.get("/openapi.json").json()
        reassign = openapi["paths"]["/pullRequest/reassign"]["post"]["responses"]
        assert {"200", "404", "409", "422"} <= set(reassign)
        assert "ErrorResponse" in openapi["components"]["schemas"]

    def test_exists_errors_share_a_base(self):
        assert issubclass(TeamExistsError, AlreadyExistsError)
        assert issubclass(PullRequestExistsError, AlreadyExistsError)
        assert (TeamExistsError.status_code, PullRequestExistsError.status_code) == (400, 409)

    def test_unknown_storage_backend(self):
        with patch.object(dependencies.settings, "STORAGE_BACKEND", "mongo"):
            with pytest.raises(ValueError):
                dependencies.build_repository()


# ═══════════════════════════════════════════════════════════════════════════
# LOGGING
# ═══════════════════════════════════════════════════════════════════════════
class TestJSONLogging:
    def _record(self, **extra):
        record = logging.LogRecord("svc", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_fields(self):
        d = json.loads(JSONFormatter().format(self._record()))
        assert d["message"] == "hello world"
        assert d["level"] == "INFO"
        assert d["service"] == "reviewer-assignment"
        assert "request_id" not in d

    def test_request_id_from_context(self):
        token = request_id_var.set("req-7")
        try:
            d = json.loads(JSONFormatter().format(self._record()))
        finally:
            request_id_var.reset(token)
        assert d["request_id"] == "req-7"

    def test_exception_fields(self):
        try:
            raise ValueError("bad input")
        except ValueError:
            record = self._record(exc_info=sys.exc_info())
        d = json.loads(JSONFormatter().format(record))
        assert d["error"] == "bad input"
        assert d["error_type"] == "ValueError"

    def test_context_fields_and_error_code(self):
        try:
            raise NotAssignedError("u1 is not a reviewer")
        except NotAssignedError:
            record = self._record(exc_info=sys.exc_info(), pull_request_id="pr1", user_id="u1")
        d = json.loads(JSONFormatter().format(record))
        assert d["pull_request_id"] == "pr1"
        assert d["user_id"] == "u1"
        assert d["error_code"] == "NOT_ASSIGNED"
        assert "team_name" not in d

    def test_loggers_share_the_service_handler(self):
        assert get_logger("main").name == "reviewer_assignment.main"
        assert get_logger("reviewer_assignment.seeder").name == "reviewer_assignment.seeder"
        assert get_logger("main").handlers == []
