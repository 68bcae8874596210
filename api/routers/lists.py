"""
Lists Router - ratings, parked and rejects
"""

import logging
from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from api.dependencies import get_store, require_api_token
from api.schemas.lists import ConflictResponse, InsertResponse, ListPageResponse, PodiumRequest, PodiumResponse
from recommandateur import constants
from recommandateur.errors import ConflictError, StorageUnavailable, ValidationError
from recommandateur.lists.store import ListStore

router = APIRouter(dependencies=[Depends(require_api_token)])
logger = logging.getLogger(__name__)

ListName = Literal["ratings", "parked", "rejects"]


@router.get("/lists/parked_podium", response_model=PodiumResponse)
def get_parked_podium(store: ListStore = Depends(get_store)) -> PodiumResponse:
    """Keys currently pinned on the parked podium."""
    try:
        podium = store.kv.get_json(constants.PARKED_PODIUM)
    except StorageUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    return PodiumResponse(keys=podium if isinstance(podium, list) else [])


@router.put("/lists/parked_podium", response_model=PodiumResponse)
def put_parked_podium(
    request: PodiumRequest,
    store: ListStore = Depends(get_store)
):
    """
    Pin up to three parked titles.

    Keys are trimmed, deduplicated and cut to three; each must be in parked.
    """
    keys = list(dict.fromkeys(k.strip() for k in request.keys if k and k.strip()))[:constants.PODIUM_SIZE]
    try:
        parked = store.read_collection(constants.PARKED)
        parked_keys = {p.get("canonical_key") for p in parked if isinstance(p, dict)}
        missing = [k for k in keys if k not in parked_keys]
        if missing:
            return JSONResponse(status_code=400, content={"error": "keys not in parked", "missing": missing})
        store.kv.put_json(constants.PARKED_PODIUM, keys)
    except StorageUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    return PodiumResponse(keys=keys)


@router.get("/lists/{name}", response_model=ListPageResponse)
def get_list(
    name: ListName,
    offset: int = Query(0, description="Index of the first item (clamped to >= 0)"),
    limit: Optional[int] = Query(None, description="Page size (clamped to [1, 5000], default 1000)"),
    store: ListStore = Depends(get_store)
) -> ListPageResponse:
    """Read a contiguous slice of a list plus its total size."""
    try:
        page = store.list_items(name, offset=offset, limit=limit)
    except StorageUnavailable as e:
        logger.error(f"Reading {name} failed: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    return ListPageResponse(total=page.total, offset=page.offset, limit=page.limit, items=page.items)


@router.post(
    "/lists/{name}",
    status_code=201,
    response_model=InsertResponse,
    responses={200: {"model": InsertResponse}, 409: {"model": ConflictResponse}},
)
def add_to_list(
    name: ListName,
    item: Dict[str, Any] = Body(..., description="Item with at least canonical_key (and rating for ratings)"),
    store: ListStore = Depends(get_store)
):
    """
    Append an item to a list.

    Returns 201 when added, 200 with reason "duplicate" when the key is
    already in this list, 409 when another list holds it, 400 on bad input.
    """
    try:
        result = store.insert(name, item)
    except ValidationError as e:
        logger.warning(f"Rejected insert into {name}: {e}")
        return JSONResponse(status_code=400, content={"error": str(e)})
    except ConflictError as e:
        return JSONResponse(
            status_code=409,
            content=ConflictResponse(conflict_with=e.conflict_with).model_dump(),
        )
    except StorageUnavailable as e:
        logger.error(f"Insert into {name} failed: {e}")
        raise HTTPException(status_code=503, detail=str(e))

    if not result.added:
        return JSONResponse(
            status_code=200,
            content=InsertResponse(added=False, reason=result.reason).model_dump(),
        )
    return InsertResponse(added=True)
