"""Review submission gate.

A buyer may rate an item only once its order was delivered and only if
the item was not reviewed yet.  Out-of-range ratings never leave the
device; backend rejections surface the server's message verbatim.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_snake

from hortashop.core.exceptions import NetworkError, NotFoundError
from hortashop.core.http import extract_error_message
from hortashop.orders.constants import OrderStatus
from hortashop.reviews.dtos import CreateReviewDTO
from hortashop.reviews.exceptions import (
    InvalidRating,
    InvalidReviewData,
    ReviewNotAllowed,
    ReviewSubmissionError,
)

if TYPE_CHECKING:
    from hortashop.orders.dtos import OrderDTO, OrderItemDTO
    from hortashop.reviews.dtos import ProductReviewsDTO, ReviewDTO
    from hortashop.reviews.repositories.interfaces import IReviewRepository

logger = structlog.get_logger(__name__)

RATING_FIELDS = frozenset({"rating", "producer_rating", "order_rating"})


def can_review(order: OrderDTO, item: OrderItemDTO) -> bool:
    return order.status is OrderStatus.DELIVERED and not item.reviewed


def reviewable_items(order: OrderDTO) -> List[OrderItemDTO]:
    return [item for item in order.items if can_review(order, item)]


class ReviewService:
    def __init__(self, repository: IReviewRepository) -> None:
        self._repo = repository

    def submit_review(
        self,
        product_id: str,
        rating: int,
        comment: Optional[str] = None,
        order_item_id: Optional[str] = None,
        *,
        producer_id: Optional[str] = None,
        producer_rating: Optional[int] = None,
        producer_comment: Optional[str] = None,
        order_rating: Optional[int] = None,
        order_comment: Optional[str] = None,
    ) -> ReviewDTO:
        """Validate locally, then forward the review.

        The producer and order ratings are optional and follow the same
        1..5 range as the product rating.

        Raises:
            InvalidRating: a rating outside 1..5 (no request sent).
            InvalidReviewData: any other field rejected (no request sent).
            ReviewSubmissionError: the backend refused or was unreachable.
        """
        try:
            dto = CreateReviewDTO(
                product_id=product_id,
                rating=rating,
                comment=comment,
                order_item_id=order_item_id,
                producer_id=producer_id,
                producer_rating=producer_rating,
                producer_comment=producer_comment,
                order_rating=order_rating,
                order_comment=order_comment,
            )
        except PydanticValidationError as exc:
            fields = sorted({to_snake(str(err["loc"][0])) for err in exc.errors() if err["loc"]})
            logger.info("review.rejected_locally", product_id=product_id, fields=fields)
            if RATING_FIELDS.intersection(fields):
                raise InvalidRating(payload={"fields": fields, "rating": rating}) from exc
            raise InvalidReviewData(payload={"fields": fields}) from exc

        try:
            return self._repo.create(dto)
        except (NetworkError, NotFoundError) as exc:
            message = extract_error_message(exc.payload)
            logger.warning(
                "review.submit_failed",
                product_id=product_id,
                status_code=exc.status_code,
            )
            raise ReviewSubmissionError(
                message, status_code=exc.status_code, payload=exc.payload
            ) from exc

    def review_item(
        self,
        order: OrderDTO,
        item: OrderItemDTO,
        rating: int,
        comment: Optional[str] = None,
    ) -> ReviewDTO:
        """Submit a review for *item* after checking the gate."""
        if not can_review(order, item):
            raise ReviewNotAllowed(payload={"order_id": order.id, "item_id": item.id})
        return self.submit_review(
            product_id=item.product_id or item.id,
            rating=rating,
            comment=comment,
            order_item_id=item.id,
        )

    def get_product_reviews(self, product_id: str) -> ProductReviewsDTO:
        return self._repo.get_product_reviews(product_id)

    def get_my_reviews(self) -> List[ReviewDTO]:
        return self._repo.get_my_reviews()

    def delete_review(self, review_id: str) -> bool:
        return self._repo.delete(review_id)
