"""
Configuration API Schemas - meta/menu documents

Settings and meta bodies are merge-patches of free-form JSON documents and
are accepted as plain dicts by the routers.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class MenuUpdateRequest(BaseModel):
    menu: List[Dict[str, Any]] = Field(..., description="Menu entries: {num, emoji, label}")
    welcome_template: Optional[str] = Field(None, description="Truncated to 5000 characters")


class MenuResponse(BaseModel):
    menu: List[Dict[str, Any]] = Field(default_factory=list)
    welcome_template: Optional[str] = None
