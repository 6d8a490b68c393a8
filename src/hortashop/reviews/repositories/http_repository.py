"""HTTP implementation of the review repository."""

from __future__ import annotations

from typing import List
from urllib.parse import quote

import structlog
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from hortashop.core.exceptions import NetworkError
from hortashop.core.http import ApiClient
from hortashop.core.session import Role
from hortashop.reviews.dtos import CreateReviewDTO, ProductReviewsDTO, ReviewDTO
from hortashop.reviews.exceptions import ReviewSubmissionError
from hortashop.reviews.repositories.interfaces import IReviewRepository

logger = structlog.get_logger(__name__)

_review_list = TypeAdapter(List[ReviewDTO])


class HttpReviewRepository(IReviewRepository):
    role = Role.BUYER

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    def create(self, dto: CreateReviewDTO) -> ReviewDTO:
        logger.info("review.submit_requested", product_id=dto.product_id)
        payload = self._api.post(
            "/reviews",
            role=self.role,
            json=dto.to_payload(),
            fallback_message=ReviewSubmissionError.default_message,
        )
        return self._validate(ReviewDTO.model_validate, payload)

    def get_product_reviews(self, product_id: str) -> ProductReviewsDTO:
        payload = self._api.get(
            f"/reviews/products/{quote(str(product_id), safe='')}",
            fallback_message="Não foi possível carregar as avaliações do produto.",
        )
        return self._validate(ProductReviewsDTO.model_validate, payload)

    def get_my_reviews(self) -> List[ReviewDTO]:
        payload = self._api.get(
            "/reviews/me",
            role=self.role,
            fallback_message="Não foi possível carregar suas avaliações.",
        )
        return self._validate(_review_list.validate_python, payload)

    def delete(self, review_id: str) -> bool:
        logger.info("review.delete_requested", review_id=review_id)
        self._api.delete(
            f"/reviews/{quote(str(review_id), safe='')}",
            role=self.role,
            fallback_message="Não foi possível excluir a avaliação.",
        )
        return True

    @staticmethod
    def _validate(parse, payload):
        try:
            return parse(payload)
        except PydanticValidationError as exc:
            logger.error("review.invalid_payload", error=str(exc))
            raise NetworkError("Resposta inválida do servidor.", payload=payload) from exc
