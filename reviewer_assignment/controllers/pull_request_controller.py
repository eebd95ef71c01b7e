# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Pull request creation, merge and reviewer reassignment."""

from fastapi import APIRouter, Depends

from reviewer_assignment.core.dependencies import get_pull_request_service
from reviewer_assignment.schemas.review import (
    CreatePullRequestRequest,
    ErrorResponse,
    MergePullRequestRequest,
    PullRequestResponse,
    PullRequestSchema,
    ReassignRequest,
    ReassignResponse,
)
from reviewer_assignment.services.pull_request_service import PullRequestService

router = APIRouter(prefix="/pullRequest", tags=["Pull Requests"])

NOT_FOUND = {404: {"model": ErrorResponse}}
CONFLICT = {409: {"model": ErrorResponse}}


@router.post("/create", status_code=201, response_model=PullRequestResponse,
             responses={**NOT_FOUND, **CONFLICT})
def create_pull_request(
    payload: CreatePullRequestRequest,
    service: PullRequestService = Depends(get_pull_request_service),
):
    pr = service.create(payload.pull_request_id, payload.pull_request_name, payload.author_id)
    return PullRequestResponse(pull_request=PullRequestSchema.from_domain(pr))


@router.post("/merge", response_model=PullRequestResponse, responses=NOT_FOUND)
def merge_pull_request(
    payload: MergePullRequestRequest,
    service: PullRequestService = Depends(get_pull_request_service),
):
    pr = service.merge(payload.pull_request_id)
    return PullRequestResponse(pull_request=PullRequestSchema.from_domain(pr))


@router.post("/reassign", response_model=ReassignResponse,
             responses={**NOT_FOUND, **CONFLICT})
def reassign_reviewer(
    payload: ReassignRequest,
    service: PullRequestService = Depends(get_pull_request_service),
):
    pr, replaced_by = service.reassign(payload.pull_request_id, payload.old_user_id)
    return ReassignResponse(pr=PullRequestSchema.from_domain(pr), replaced_by=replaced_by)
