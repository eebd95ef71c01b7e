# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Team and user endpoints.
Thin HTTP layer — delegates ALL logic to TeamService / UserService /
PullRequestService. Business failures propagate to the app's
exception handler.
"""

from fastapi import APIRouter, Depends, Query

from reviewer_assignment.core.dependencies import (
    get_pull_request_service,
    get_team_service,
    get_user_service,
)
from reviewer_assignment.schemas.review import (
    ErrorResponse,
    PullRequestShortSchema,
    ReviewListResponse,
    SetIsActiveRequest,
    TeamResponse,
    TeamSchema,
    UserResponse,
    UserSchema,
)
from reviewer_assignment.services.pull_request_service import PullRequestService
from reviewer_assignment.services.team_service import TeamService, UserService

team_router = APIRouter(prefix="/team", tags=["Teams"])
users_router = APIRouter(prefix="/users", tags=["Users"])

NOT_FOUND = {404: {"model": ErrorResponse}}


@team_router.post("/add", status_code=201, response_model=TeamResponse,
                  responses={400: {"model": ErrorResponse}})
def add_team(
    payload: TeamSchema,
    service: TeamService = Depends(get_team_service),
):
    """Create a team with its members (members are upserted by user_id)."""
    team = service.create(payload.to_domain())
    return TeamResponse(team=TeamSchema.from_domain(team))


@team_router.get("/get", response_model=TeamSchema, responses=NOT_FOUND)
def get_team(
    team_name: str = Query(..., min_length=1),
    service: TeamService = Depends(get_team_service),
):
    """Get a team with all of its members."""
    return TeamSchema.from_domain(service.get(team_name))


@users_router.post("/setIsActive", response_model=UserResponse, responses=NOT_FOUND)
def set_is_active(
    payload: SetIsActiveRequest,
    service: UserService = Depends(get_user_service),
):
    """Activate or deactivate a user. Existing assignments are kept."""
    user = service.set_active(payload.user_id, payload.is_active)
    return UserResponse(user=UserSchema.from_domain(user))


@users_router.get("/getReview", response_model=ReviewListResponse)
def get_review(
    user_id: str = Query(..., min_length=1),
    service: PullRequestService = Depends(get_pull_request_service),
):
    """Pull requests where the user is currently an assigned reviewer."""
    prs = service.list_by_reviewer(user_id)
    return ReviewListResponse(
        user_id=user_id,
        pull_requests=[PullRequestShortSchema.from_domain(pr) for pr in prs],
    )
