"""Review domain exceptions."""

from __future__ import annotations

from hortashop.core.exceptions import ServerError, ValidationError


class InvalidRating(ValidationError):
    """Rating outside 1..5; rejected before any request is sent."""

    default_message = "A avaliação deve ser um número entre 1 e 5."


class ReviewNotAllowed(ValidationError):
    """The item is not reviewable (order not delivered, or already reviewed)."""

    default_message = "Este produto só pode ser avaliado após a entrega do pedido."


class ReviewSubmissionError(ServerError):
    default_message = "Não foi possível enviar sua avaliação. Tente novamente."


class InvalidReviewData(ValidationError):
    """A review field other than a rating was rejected locally."""

    default_message = "Dados da avaliação inválidos."
