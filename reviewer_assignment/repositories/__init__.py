# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package — re-exports the two storage gateways."""
from typing import Union

from reviewer_assignment.repositories.memory_repository import InMemoryReviewRepository
from reviewer_assignment.repositories.review_repository import ReviewRepository

StorageGateway = Union[ReviewRepository, InMemoryReviewRepository]

__all__ = ["InMemoryReviewRepository", "ReviewRepository", "StorageGateway"]
