"""
List API Schemas - Responses of the ratings/parked/rejects endpoints

Items themselves stay free-form dicts: only canonical_key (and rating for
ratings) is interpreted, every other field is passed through.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ListPageResponse(BaseModel):
    """A slice of one list"""

    total: int = Field(..., description="Number of items in the whole list")
    offset: int = Field(..., ge=0, description="Index of the first returned item")
    limit: int = Field(..., ge=1, description="Maximum number of returned items")
    items: List[Dict[str, Any]] = Field(default_factory=list)


class InsertResponse(BaseModel):
    """Outcome of an insert"""

    ok: bool = True
    added: bool = Field(..., description="False when the key was already in this list")
    reason: Optional[str] = Field(None, description="'duplicate' when not added")


class ConflictResponse(BaseModel):
    """The key is already held by another list"""

    ok: bool = False
    conflict_with: str = Field(..., description="Name of the list holding the key")


class PodiumRequest(BaseModel):
    keys: List[str] = Field(..., description="Up to three canonical keys taken from the parked list")


class PodiumResponse(BaseModel):
    ok: bool = True
    keys: List[str] = Field(default_factory=list)
