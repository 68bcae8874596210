"""
Recommendations Router - Next recommendation endpoint
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from api.dependencies import AppState, get_app_state, require_api_token
from api.schemas.recommendations import RecommendationResponse
from api.services import recommendation_service
from recommandateur.errors import NotFoundError, StorageUnavailable, ValidationError

router = APIRouter(dependencies=[Depends(require_api_token)])
logger = logging.getLogger(__name__)


@router.get(
    "/recommendations/next",
    response_model=RecommendationResponse,
    response_model_exclude_none=True,
)
def next_recommendation(
    type: Optional[str] = Query(None, description="film | serie"),
    genre: Optional[str] = Query(None, description="Genre, or 'tous' for every genre"),
    state: AppState = Depends(get_app_state)
):
    """
    Recommend the best-scoring title not yet rated, parked or rejected.

    Candidates come fresh from the catalog provider on every call. An empty
    or failed provider response and a pool with no eligible title both
    answer 404.
    """
    if not state.is_ready():
        raise HTTPException(status_code=503, detail="Service not ready")

    try:
        response = recommendation_service.generate_recommendation(state.selector(), type, genre)
        logger.info(f"Recommended '{response.titre}' for type={type} genre={genre!r}")
        return response

    except ValidationError as e:
        logger.warning(f"Recommendation request rejected: {e}")
        return JSONResponse(status_code=400, content={"error": str(e)})

    except NotFoundError as e:
        return JSONResponse(status_code=404, content={"error": str(e)})

    except StorageUnavailable as e:
        logger.error(f"Store unavailable during recommendation: {e}")
        raise HTTPException(status_code=503, detail=str(e))

    except Exception as e:
        logger.error(f"Recommendation failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Failed to generate recommendation: {str(e)}"
        )
