"""
Cache Router - one-round-trip snapshot of the user's lists
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import AppState, get_app_state, require_api_token
from recommandateur.errors import StorageUnavailable
from recommandateur.lists.batch import parse_requested_keys

router = APIRouter(dependencies=[Depends(require_api_token)])
logger = logging.getLogger(__name__)


@router.get("/cache/pool")
def cache_pool(
    key: Optional[List[str]] = Query(None, description="List name, repeatable"),
    keys: Optional[List[str]] = Query(None, description="List name or JSON array of names, repeatable"),
    keys_brackets: Optional[List[str]] = Query(None, alias="keys[]"),
    state: AppState = Depends(get_app_state)
) -> Dict[str, Any]:
    """
    Read several lists in parallel.

    Without any requested name all three lists are returned. Unknown names
    are silently dropped. Lists are always arrays, never null.
    """
    requested = parse_requested_keys((key or []) + (keys or []) + (keys_brackets or []))
    try:
        return state.batch_reader().snapshot(requested)
    except StorageUnavailable as e:
        logger.error(f"Cache pool read failed: {e}")
        raise HTTPException(status_code=503, detail=str(e))
