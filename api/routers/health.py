"""
Health Router - Health checks and diagnostics
"""

from fastapi import APIRouter, Depends, HTTPException
from typing import Dict, Any

from api.dependencies import get_app_state, AppState, require_api_token
from recommandateur import constants
from recommandateur.config.defaults import default_meta, default_settings
from recommandateur.errors import StorageUnavailable

router = APIRouter()


@router.get("/health")
async def health() -> Dict[str, Any]:
    """Liveness probe."""
    return {"ok": True}


@router.get("/ready")
async def health_check_ready(state: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    """Readiness probe: store and candidate source built."""
    return {
        "ready": state.is_ready(),
        "details": state.get_status()
    }


@router.get("/diag", dependencies=[Depends(require_api_token)])
def diag(state: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    """
    Item counts per list and configuration versions.
    """
    try:
        lists = state.store.read_collections(list(constants.COLLECTIONS))
        podium = state.kv.get_json(constants.PARKED_PODIUM)
        meta = state.kv.get_json(constants.META_KEY)
        settings_doc = state.kv.get_json(constants.SETTINGS_KEY)
    except StorageUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))

    meta = meta if isinstance(meta, dict) else default_meta()
    settings_doc = settings_doc if isinstance(settings_doc, dict) else default_settings()
    status = state.get_status()

    counts = {name: len(items) for name, items in lists.items()}
    counts[constants.PARKED_PODIUM] = len(podium) if isinstance(podium, list) else 0
    return {
        "ok": status["kv_bound"] and status["has_api_token"],
        "kvBound": status["kv_bound"],
        "hasApiToken": status["has_api_token"],
        "authorized": True,
        "counts": counts,
        "versions": {
            "app_version": meta.get("app_version"),
            "config_version": settings_doc.get("config_version"),
        },
    }
