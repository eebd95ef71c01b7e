# type: ignore
# pyright: reportGeneralTypeIssues=false
# pyright: reportOptionalMemberAccess=false
"""
Reviewer Assignment Service
===========================
Tracks teams, their members and pull requests, and assigns code reviewers:
up to two active teammates of the author at creation time, with random
replacement of a single reviewer later on.

Pull request state machine:
    OPEN ─► MERGED   (terminal, merge is idempotent)
    OPEN ─► OPEN     (reviewer reassignment)

Port: 8080
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reviewer_assignment.controllers import pull_request_controller, system_controller, team_controller
from reviewer_assignment.core.config import settings
from reviewer_assignment.core.dependencies import get_repo
from reviewer_assignment.core.errors import ReviewServiceError
from reviewer_assignment.core.logging import get_logger
from reviewer_assignment.middleware import MetricsMiddleware, RequestIDMiddleware
from reviewer_assignment.schemas.review import ErrorDetail, ErrorResponse

logger = get_logger(__name__)


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    repo = get_repo()
    if settings.AUTO_CREATE_SCHEMA:
        try:
            repo.ensure_schema()
        except Exception:
            logger.warning("Could not ensure schema, DB may not be ready yet")
    logger.info("Service started storage=%s", settings.STORAGE_BACKEND)
    yield
    repo.dispose()
    logger.info("Shutting down, storage disposed")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Reviewer Assignment Service",
    description="Assigns and rebalances pull request reviewers within teams.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ReviewServiceError)
async def review_error_handler(request: Request, exc: ReviewServiceError):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=ErrorDetail(code=exc.code, message=exc.message)).model_dump(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(code="internal_server_error", message=str(exc)),
        ).model_dump(),
    )


app.include_router(system_controller.router)
app.include_router(team_controller.team_router)
app.include_router(team_controller.users_router)
app.include_router(pull_request_controller.router)


# ── Entrypoint ────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT, log_level="info")
