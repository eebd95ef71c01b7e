# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas — API contract definitions.
These are Pydantic models used ONLY at the controller (HTTP) boundary.
"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from reviewer_assignment.models.domain import (
    PullRequest,
    PullRequestShort,
    Team,
    TeamMember,
    User,
)


# ── Team Schemas ──

class TeamMemberSchema(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=255)
    username: str = Field(..., min_length=1, max_length=255)
    is_active: bool = True


class TeamSchema(BaseModel):
    team_name: str = Field(..., min_length=1, max_length=255)
    members: list[TeamMemberSchema] = Field(default_factory=list)

    @field_validator("members")
    @classmethod
    def unique_member_ids(cls, v: list[TeamMemberSchema]) -> list[TeamMemberSchema]:
        ids = [m.user_id for m in v]
        if len(ids) != len(set(ids)):
            raise ValueError("member user_id values must be unique")
        return v

    def to_domain(self) -> Team:
        return Team(
            name=self.team_name,
            members=[
                TeamMember(id=m.user_id, name=m.username, is_active=m.is_active)
                for m in self.members
            ],
        )

    @classmethod
    def from_domain(cls, team: Team) -> "TeamSchema":
        return cls(
            team_name=team.name,
            members=[
                TeamMemberSchema(user_id=m.id, username=m.name, is_active=m.is_active)
                for m in team.members
            ],
        )


class TeamResponse(BaseModel):
    team: TeamSchema


# ── User Schemas ──

class SetIsActiveRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    is_active: bool


class UserSchema(BaseModel):
    user_id: str
    username: str
    team_name: str
    is_active: bool

    @classmethod
    def from_domain(cls, user: User) -> "UserSchema":
        return cls(
            user_id=user.id, username=user.name,
            team_name=user.team_name, is_active=user.is_active,
        )


class UserResponse(BaseModel):
    user: UserSchema


# ── Pull Request Schemas ──

class CreatePullRequestRequest(BaseModel):
    pull_request_id: str = Field(..., min_length=1, max_length=255)
    pull_request_name: str = Field(..., min_length=1, max_length=500)
    author_id: str = Field(..., min_length=1)


class MergePullRequestRequest(BaseModel):
    pull_request_id: str = Field(..., min_length=1)


class ReassignRequest(BaseModel):
    pull_request_id: str = Field(..., min_length=1)
    old_user_id: str = Field(
        ..., min_length=1,
        validation_alias=AliasChoices("old_user_id", "old_reviewer_id"),
    )


class PullRequestShortSchema(BaseModel):
    pull_request_id: str
    pull_request_name: str
    author_id: str
    status: str

    @classmethod
    def from_domain(cls, pr: PullRequestShort) -> "PullRequestShortSchema":
        return cls(
            pull_request_id=pr.id, pull_request_name=pr.name,
            author_id=pr.author_id, status=pr.status.value,
        )


class PullRequestSchema(PullRequestShortSchema):
    assigned_reviewers: list[str]
    # response_model re-validates the by-alias dump, so both spellings are accepted
    created_at: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )
    merged_at: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("merged_at", "mergedAt"),
        serialization_alias="mergedAt",
    )

    @classmethod
    def from_domain(cls, pr: PullRequest) -> "PullRequestSchema":
        return cls(
            pull_request_id=pr.id, pull_request_name=pr.name,
            author_id=pr.author_id, status=pr.status.value,
            assigned_reviewers=list(pr.reviewers),
            created_at=pr.created_at, merged_at=pr.merged_at,
        )


class PullRequestResponse(BaseModel):
    pull_request: PullRequestSchema


class ReassignResponse(BaseModel):
    pr: PullRequestSchema
    replaced_by: str


class ReviewListResponse(BaseModel):
    user_id: str
    pull_requests: list[PullRequestShortSchema]


# ── Errors ──

class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    error: ErrorDetail
