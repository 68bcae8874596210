"""
Recommendation Service - Bridges the API layer with the selection pipeline.
"""

import logging
from typing import Optional

from recommandateur.recommendation.selector import RecommendationSelector

from api.schemas.recommendations import RecommendationResponse, ScoreBreakdownModel

logger = logging.getLogger(__name__)


def generate_recommendation(
    selector: RecommendationSelector,
    type: Optional[str],
    genre: Optional[str]
) -> RecommendationResponse:
    """
    Run one selection and shape it as the API response.

    Raises:
        ValidationError, NotFoundError, StorageUnavailable from the selector
    """
    selection = selector.select(type, genre)
    payload = selection.to_payload()
    logger.debug(
        f"Recommendation for type={type} genre={genre!r}: {selection.candidate.canonical_key} "
        f"(pool={selection.pool_size}, eligible={selection.eligible})"
    )
    return RecommendationResponse(
        titre=payload["titre"],
        formatted_card=payload["formatted_card"],
        poster_url=payload["poster_url"],
        notes=payload["notes"],
        score_breakdown=ScoreBreakdownModel(**payload["score_breakdown"]),
        raw=payload["raw"],
        intro=payload.get("intro"),
    )
