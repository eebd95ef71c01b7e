# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Business failures raised by the storage gateways and the services.

Each kind carries the machine-readable ``code`` and HTTP ``status_code`` the
transport layer renders; message text is informational only.
"""


class ReviewServiceError(Exception):
    code: str = "INTERNAL"
    status_code: int = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class NotFoundError(ReviewServiceError):
    """Referenced team, user or pull request does not exist."""
    code = "NOT_FOUND"
    status_code = 404


class AlreadyExistsError(ReviewServiceError):
    code = "ALREADY_EXISTS"
    status_code = 409


class TeamExistsError(AlreadyExistsError):
    code = "TEAM_EXISTS"
    status_code = 400


class PullRequestExistsError(AlreadyExistsError):
    code = "PR_EXISTS"
    status_code = 409


class AlreadyMergedError(ReviewServiceError):
    code = "PR_MERGED"
    status_code = 409


class NotAssignedError(ReviewServiceError):
    code = "NOT_ASSIGNED"
    status_code = 409


class NoCandidateError(ReviewServiceError):
    code = "NO_CANDIDATE"
    status_code = 409
