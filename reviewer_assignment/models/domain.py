# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models — pure data structures, NO FastAPI dependency.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PRStatus(str, Enum):
    OPEN = "OPEN"
    MERGED = "MERGED"


class TeamMember(BaseModel):
    """A member of exactly one team, identified by ``id`` system-wide."""
    id: str = Field(..., min_length=1)
    name: str
    is_active: bool = True


class Team(BaseModel):
    name: str = Field(..., min_length=1)
    members: list[TeamMember] = Field(default_factory=list)


class User(BaseModel):
    """Read projection of a team member plus the name of its team."""
    id: str
    name: str
    team_name: str
    is_active: bool


class PullRequestShort(BaseModel):
    id: str
    name: str
    author_id: str
    status: PRStatus


class PullRequest(PullRequestShort):
    reviewers: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    merged_at: Optional[datetime] = None

    @property
    def is_merged(self) -> bool:
        return self.status == PRStatus.MERGED

    def short(self) -> PullRequestShort:
        return PullRequestShort(
            id=self.id, name=self.name, author_id=self.author_id, status=self.status,
        )
