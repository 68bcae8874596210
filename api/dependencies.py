"""
API Dependencies - Application state and FastAPI dependency injection

Holds the store and the candidate source built from settings. Nothing about
the user's lists is cached here: every request reads the store.
"""

import asyncio
import hmac
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, Header, HTTPException, Query

from recommandateur.adapters.allocine.allocine import build_candidate_source
from recommandateur.adapters.base import CandidateSource
from recommandateur.lists.batch import BatchReader
from recommandateur.lists.store import ListStore
from recommandateur.recommendation.selector import RecommendationSelector
from recommandateur.settings import Settings, get_settings
from recommandateur.storage.kv import BaseKVStore, build_kv_store

logger = logging.getLogger(__name__)


class AppState:
    """
    Global application state - holds the store and the candidate source.

    Singleton pattern: one instance shared across all requests.
    """

    def __init__(self,
                settings: Optional[Settings] = None,
                kv: Optional[BaseKVStore] = None,
                source: Optional[CandidateSource] = None):
        self.settings: Settings = settings or get_settings()
        self.kv: Optional[BaseKVStore] = kv
        self.source: Optional[CandidateSource] = source
        self.store: Optional[ListStore] = ListStore(kv) if kv is not None else None

        self._initialized = kv is not None and source is not None
        self._initialization_lock = asyncio.Lock()

    def _build(self) -> None:
        if self.kv is None:
            logger.info(f"Creating {self.settings.kv_backend} key-value store...")
            self.kv = build_kv_store(self.settings)
            self.store = ListStore(self.kv)
        if self.source is None:
            self.source = build_candidate_source(self.settings)
        self._initialized = True

    async def initialize(self) -> None:
        """Build the store and the candidate source (idempotent)."""
        async with self._initialization_lock:
            if self._initialized:
                logger.debug("AppState already initialized")
                return
            logger.info("Initializing AppState...")
            try:
                self._build()
                logger.info("AppState initialization complete!")
            except Exception as e:
                logger.error(f"Failed to initialize AppState: {e}", exc_info=True)
                raise

    def is_ready(self) -> bool:
        return self._initialized and self.store is not None and self.source is not None

    def get_status(self) -> dict:
        return {
            "initialized": self._initialized,
            "ready": self.is_ready(),
            "kv_backend": self.settings.kv_backend,
            "kv_bound": self.kv is not None,
            "candidate_source": type(self.source).__name__ if self.source else None,
            "has_api_token": self.settings.api_token is not None,
        }

    def selector(self) -> RecommendationSelector:
        return RecommendationSelector(self.store, self.source)

    def batch_reader(self) -> BatchReader:
        return BatchReader(self.store)


# Global singleton instance
app_state = AppState()


def get_app_state() -> AppState:
    """
    FastAPI dependency to access app state.

    Usage in routers:
        @router.get("/example")
        async def example(state: AppState = Depends(get_app_state)):
            store = state.store
            ...
    """
    if not app_state.is_ready():
        logger.warning("AppState not initialized, initializing synchronously...")
        app_state._build()
    return app_state


def get_store(state: AppState = Depends(get_app_state)) -> ListStore:
    if state.store is None:
        raise HTTPException(status_code=503, detail="KV store not bound")
    return state.store


def require_api_token(
    authorization: Optional[str] = Header(None),
    x_api_token: Optional[str] = Header(None),
    api_token: Optional[str] = Query(None, description="Token (alternative to headers)"),
    state: AppState = Depends(get_app_state),
) -> None:
    """
    Check the shared token from `Authorization: Bearer`, `X-Api-Token` or `?api_token=`.

    When no token is configured every protected call is refused.
    """
    expected = state.settings.api_token
    bearer = ""
    if authorization and authorization[:7].lower() == "bearer ":
        bearer = authorization[7:].strip()
    alt = (x_api_token or api_token or "").strip()
    if expected is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    secret = expected.get_secret_value()
    if not any(c and hmac.compare_digest(c.encode(), secret.encode()) for c in (bearer, alt)):
        raise HTTPException(status_code=401, detail="Unauthorized")


@asynccontextmanager
async def lifespan_handler(app):
    """
    FastAPI lifespan context manager for startup/shutdown.

    Usage in main.py:
        app = FastAPI(lifespan=lifespan_handler)
    """
    logger.info("FastAPI starting up...")
    await app_state.initialize()
    yield
    logger.info("Shutdown complete")
