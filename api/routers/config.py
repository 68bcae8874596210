"""
Config Router - settings, meta and menu documents

Reads fall back to the built-in defaults when nothing is stored. Writes are
merge-patches: objects merge recursively, arrays are replaced wholesale.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException

from api.dependencies import AppState, get_app_state, require_api_token
from api.schemas.config import MenuResponse, MenuUpdateRequest
from recommandateur import constants
from recommandateur.config.defaults import default_meta, default_settings, utc_now_iso
from recommandateur.config.merge import deep_merge, normalize_menu
from recommandateur.errors import StorageUnavailable

router = APIRouter()
logger = logging.getLogger(__name__)


def _read_document(state: AppState, key: str, fallback) -> Dict[str, Any]:
    try:
        doc = state.kv.get_json(key)
    except StorageUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    return doc if isinstance(doc, dict) else fallback()


def _write_document(state: AppState, key: str, doc: Dict[str, Any]) -> None:
    try:
        state.kv.put_json(key, doc)
    except StorageUnavailable as e:
        logger.error(f"Writing {key} failed: {e}")
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/settings")
def get_settings_document(state: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    """Algorithm settings (thresholds, weights, templates, prompts...)."""
    return _read_document(state, constants.SETTINGS_KEY, default_settings)


@router.put("/settings", dependencies=[Depends(require_api_token)])
def put_settings_document(
    patch: Dict[str, Any] = Body(...),
    state: AppState = Depends(get_app_state)
) -> Dict[str, Any]:
    current = _read_document(state, constants.SETTINGS_KEY, default_settings)
    merged = deep_merge(current, patch)
    merged["updated_at"] = utc_now_iso()
    _write_document(state, constants.SETTINGS_KEY, merged)
    logger.info(f"Settings updated (keys: {sorted(patch)})")
    return {"ok": True, "settings": merged}


@router.get("/meta")
def get_meta(state: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return _read_document(state, constants.META_KEY, default_meta)


@router.put("/meta", dependencies=[Depends(require_api_token)])
def put_meta(
    patch: Dict[str, Any] = Body(...),
    state: AppState = Depends(get_app_state)
) -> Dict[str, Any]:
    current = _read_document(state, constants.META_KEY, default_meta)
    merged = deep_merge(current, patch)
    if isinstance(merged.get("menu"), list):
        merged["menu"] = normalize_menu(merged["menu"])
    merged["last_updated"] = utc_now_iso()
    _write_document(state, constants.META_KEY, merged)
    return {"ok": True, "meta": merged}


@router.get("/meta/menu", response_model=MenuResponse)
def get_menu(state: AppState = Depends(get_app_state)) -> MenuResponse:
    meta = _read_document(state, constants.META_KEY, default_meta)
    return MenuResponse(menu=meta.get("menu") or [], welcome_template=meta.get("welcome_template"))


@router.put("/meta/menu", dependencies=[Depends(require_api_token)])
def put_menu(
    request: MenuUpdateRequest,
    state: AppState = Depends(get_app_state)
) -> Dict[str, Any]:
    """Replace the menu (normalized) and optionally the welcome template."""
    meta = _read_document(state, constants.META_KEY, default_meta)
    meta["menu"] = normalize_menu(request.menu)
    if request.welcome_template is not None:
        meta["welcome_template"] = request.welcome_template[:5000]
    meta["last_updated"] = utc_now_iso()
    _write_document(state, constants.META_KEY, meta)
    return {"ok": True, "meta": meta}
