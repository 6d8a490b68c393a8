"""Review repository contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from hortashop.reviews.dtos import CreateReviewDTO, ProductReviewsDTO, ReviewDTO


class IReviewRepository(ABC):
    @abstractmethod
    def create(self, dto: CreateReviewDTO) -> ReviewDTO:
        """Submit a review as the authenticated buyer."""

    @abstractmethod
    def get_product_reviews(self, product_id: str) -> ProductReviewsDTO:
        """Public listing of a product's reviews (no token needed)."""

    @abstractmethod
    def get_my_reviews(self) -> List[ReviewDTO]:
        """Reviews written by the authenticated buyer."""

    @abstractmethod
    def delete(self, review_id: str) -> bool:
        """Delete one of the buyer's reviews."""
