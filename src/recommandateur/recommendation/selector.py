"""
Recommendation selector - picks the next title to recommend.

Per call (nothing is cached between calls):
    1. validate (type, genre)
    2. load preferences and the three lists concurrently
    3. fetch a candidate pool from the candidate source
    4. filter: type, genre, not already listed, spectator rating above
       threshold, poster present, press rating present
    5. score, sort (stable), keep the first still-unlisted candidate
    6. render the card and pick the intro line
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Set

from recommandateur import constants
from recommandateur.adapters.base import CandidateSource
from recommandateur.config.defaults import default_settings
from recommandateur.config.preferences import Preferences, is_all_genres_query
from recommandateur.errors import NotFoundError, ValidationError
from recommandateur.lists.store import ListStore, exclusion_set
from recommandateur.recommendation.card import card_notes, pick_intro, render_card
from recommandateur.recommendation.schemas import Candidate, ScoredCandidate, Selection
from recommandateur.recommendation.scoring import score_candidate
from recommandateur.utils.text_cleaning import normalize_canonical

logger = logging.getLogger(__name__)


def _spectator_rating(candidate: Candidate) -> float:
    try:
        value = float(candidate.spectateurs or 0)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def filter_candidates(pool: List[Candidate],
                      type: str,
                      genre: str,
                      exclusions: Set[str],
                      min_rating: float) -> List[Candidate]:
    """Apply the eligibility filters, in order, keeping pool order."""
    lower_genre = (genre or "").lower()
    all_genres = is_all_genres_query(genre)

    eligible = [c for c in pool if c.type == type]
    if not all_genres:
        eligible = [c for c in eligible if any(lower_genre in str(g).lower() for g in (c.genres or []))]
    eligible = [c for c in eligible if normalize_canonical(c.canonical_key) not in exclusions]
    eligible = [c for c in eligible if _spectator_rating(c) > min_rating]
    eligible = [c for c in eligible if c.affiche_url]
    eligible = [c for c in eligible if c.presse is not None]
    return eligible


class RecommendationSelector:
    """Orchestrates exclusion, retrieval, filtering, scoring and selection"""

    def __init__(self, store: ListStore, source: CandidateSource):
        self.store = store
        self.source = source

    def load_context(self) -> Dict[str, Any]:
        """Settings document and the three lists, read concurrently."""
        with ThreadPoolExecutor(max_workers=2) as pool:
            settings_future = pool.submit(self.store.kv.get_json, constants.SETTINGS_KEY)
            lists_future = pool.submit(self.store.read_collections, list(constants.COLLECTIONS))
            settings_doc = settings_future.result()
            lists = lists_future.result()
        if not isinstance(settings_doc, dict):
            settings_doc = default_settings()
        return {"settings": settings_doc, "lists": lists}

    def select(self, type: Optional[str], genre: Optional[str]) -> Selection:
        """
        Pick and render the next recommendation.

        Args:
            type: "film" or "serie"
            genre: free-text genre query (containing "tous" disables genre filtering)

        Returns:
            Selection for the best-scoring eligible candidate

        Raises:
            ValidationError: missing/invalid type or genre
            NotFoundError: no eligible candidate (including upstream failures)
            StorageUnavailable: store unreachable
        """
        if type not in constants.TITLE_TYPES or not genre:
            raise ValidationError("Paramètres requis : type=film|serie et genre=...")

        context = self.load_context()
        prefs = Preferences.from_settings(context["settings"])
        lists = context["lists"]
        ratings = lists.get(constants.RATINGS, [])

        exclusions = exclusion_set(lists)

        try:
            pool = self.source.fetch_candidates(type, genre, prefs.thresholds) or []
        except Exception as e:
            # A failing source counts as an empty pool
            logger.warning(f"Candidate source failed for type={type} genre={genre!r}: {e}")
            pool = []
        min_rating = prefs.thresholds.for_genre(genre)
        eligible = filter_candidates(pool, type, genre, exclusions, min_rating)
        logger.info(
            f"Selection type={type} genre={genre!r}: pool={len(pool)} eligible={len(eligible)} "
            f"excluded_keys={len(exclusions)} threshold={min_rating}"
        )
        if not eligible:
            raise NotFoundError(constants.NO_RECOMMENDATION)

        weights = prefs.weights.normalized()
        scored = [
            ScoredCandidate(candidate=c, breakdown=score_candidate(c, ratings, prefs, weights))
            for c in eligible
        ]
        # sorted() is stable: equal scores keep pool order
        scored = sorted(scored, key=lambda s: s.score, reverse=True)

        top = next(
            (s for s in scored if normalize_canonical(s.candidate.canonical_key) not in exclusions),
            None,
        )
        if top is None:
            raise NotFoundError(constants.NO_RECOMMENDATION)

        winner = top.candidate
        logger.info(f"Selected '{winner.canonical_key}' with score {top.score:.3f}")
        return Selection(
            candidate=winner,
            breakdown=top.breakdown,
            formatted_card=render_card(prefs.card_template, winner),
            notes=card_notes(winner),
            intro=pick_intro(prefs.intro_pool, winner.canonical_key or winner.titre or ""),
            pool_size=len(pool),
            eligible=len(eligible),
        )
