"""
Recommendation API Schemas - Response model of the next-recommendation endpoint
"""

from typing import Dict, Optional, Any
from pydantic import BaseModel, Field


class ScoreBreakdownModel(BaseModel):
    """Renormalized weights and per-component values of the winning score"""

    weights: Dict[str, float] = Field(
        ...,
        description="Weights actually used (allocine, user_pref, castcrew), summing to 1"
    )
    components: Dict[str, float] = Field(
        ...,
        description="Component values in [0, 1] before weighting"
    )


class RecommendationResponse(BaseModel):
    """The chosen title, rendered and explained"""

    titre: str = Field(..., description="Title of the recommended film/series")
    formatted_card: str = Field(..., description="Card template filled with the title's fields")
    poster_url: Optional[str] = Field(None, description="Poster URL")
    notes: Dict[str, str] = Field(
        ...,
        description="Spectator and press ratings as displayed (one decimal, '–' when missing)"
    )
    score_breakdown: ScoreBreakdownModel
    raw: Dict[str, Any] = Field(
        ...,
        description="Full candidate object with score and components (debugging)"
    )
    intro: Optional[str] = Field(
        None,
        description="Intro line, stable for a given winning title"
    )
