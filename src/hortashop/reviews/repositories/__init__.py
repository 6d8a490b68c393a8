"""Review repositories package."""

from hortashop.reviews.repositories.http_repository import HttpReviewRepository
from hortashop.reviews.repositories.interfaces import IReviewRepository

__all__ = ["HttpReviewRepository", "IReviewRepository"]
