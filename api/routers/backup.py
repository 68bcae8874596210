"""
Backup Router - whole-store export and import
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException

from api.dependencies import AppState, get_app_state, require_api_token
from recommandateur import constants
from recommandateur.config.defaults import default_meta, default_settings, utc_now_iso
from recommandateur.errors import StorageUnavailable

router = APIRouter(dependencies=[Depends(require_api_token)])
logger = logging.getLogger(__name__)

# Section name -> fallback used when an imported section has the wrong shape
_IMPORT_FALLBACKS = {
    constants.META_KEY: (dict, default_meta),
    constants.SETTINGS_KEY: (dict, default_settings),
    constants.RATINGS: (list, list),
    constants.PARKED: (list, list),
    constants.REJECTS: (list, list),
    constants.PARKED_PODIUM: (list, list),
}


@router.get("/backup/export")
def backup_export(state: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    """Every well-known key as stored (null when absent, podium defaults to [])."""
    try:
        dump = {key: state.kv.get_json(key) for key in constants.ALL_KEYS}
    except StorageUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    if dump[constants.PARKED_PODIUM] is None:
        dump[constants.PARKED_PODIUM] = []
    return {"exported_at": utc_now_iso(), **dump}


@router.post("/backup/import")
def backup_import(
    body: Dict[str, Any] = Body(...),
    state: AppState = Depends(get_app_state)
) -> Dict[str, Any]:
    """
    Replace every section present in the body.

    Sections with the wrong type are replaced by defaults (meta/settings)
    or by empty arrays (lists). List invariants are not re-checked.
    """
    written = []
    try:
        for key, (expected, fallback) in _IMPORT_FALLBACKS.items():
            if key not in body:
                continue
            value = body[key] if isinstance(body[key], expected) else fallback()
            state.kv.put_json(key, value)
            written.append(key)
    except StorageUnavailable as e:
        logger.error(f"Backup import failed after {written}: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    logger.info(f"Backup imported: {written}")
    return {"ok": True, "imported": written}
