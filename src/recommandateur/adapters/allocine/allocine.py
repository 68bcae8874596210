# Allociné search as a candidate source
import logging
import math
import re
from typing import Any, Dict, List, Optional

from recommandateur.adapters.allocine.client import AllocineAPIClient
from recommandateur.adapters.base import CandidateSource
from recommandateur.config.preferences import Thresholds
from recommandateur.recommendation.schemas import Candidate
from recommandateur.settings import Settings, get_allocine_settings
from recommandateur.utils.text_cleaning import normalize_canonical

logger = logging.getLogger(__name__)

# Allociné names the two feeds differently from our title types
FEED_FILTERS = {"film": "movie", "serie": "tvseries"}

_PEOPLE_SEPARATORS = re.compile(r",|/|•")


def _rating(value: Any) -> Optional[float]:
    """Parse an Allociné rating (string or number) rounded to one decimal."""
    if value is None or value == "":
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed):
        return None
    return round(parsed, 1)


def _people(value: Any) -> List[str]:
    if not value:
        return []
    return [s.strip() for s in _PEOPLE_SEPARATORS.split(str(value)) if s.strip()]


def _genres(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    genres = []
    for g in value:
        name = (g.get("$") or g.get("name")) if isinstance(g, dict) else g
        if name:
            genres.append(str(name))
    return genres


def parse_feed_item(item: Dict[str, Any], type: str, min_spectators: float) -> Optional[Candidate]:
    """
    Convert one Allociné feed entry into a Candidate.

    Returns None when the entry has no title, no poster, or a spectator
    rating that does not strictly exceed min_spectators.
    """
    titre = item.get("title") or item.get("originalTitle") or item.get("name") or item.get("original_name")
    if not titre:
        return None

    stats = item.get("statistics") or {}
    spectateurs = _rating(stats.get("userRating"))
    if spectateurs is None or spectateurs <= min_spectators:
        return None

    poster = item.get("poster") or {}
    affiche_url = poster.get("href") if isinstance(poster, dict) else None
    if not affiche_url:
        return None

    annee = str(item.get("productionYear") or item.get("year") or "").strip()
    casting = item.get("castingShort") if isinstance(item.get("castingShort"), dict) else {}

    return Candidate(
        titre=str(titre),
        annee=annee,
        type=type,
        genres=_genres(item.get("genre")),
        presse=_rating(stats.get("pressRating")),
        spectateurs=spectateurs,
        accroche=item.get("synopsisShort") or item.get("synopsis") or "",
        affiche_url=affiche_url,
        cast=_people(casting.get("actors")),
        crew=_people(casting.get("directors")),
        canonical_key=normalize_canonical(f"{titre} {annee}"),
    )


class AllocineCandidateSource(CandidateSource):
    """Candidate pool from the Allociné v3 search endpoint"""

    def __init__(self, client: Optional[AllocineAPIClient], thresholds: Thresholds = Thresholds(), count: int = 20):
        self._client = client
        self.thresholds = thresholds
        self.count = count

    def search(self, type: str, genre_query: str) -> Dict[str, Any]:
        """Raw search response for a genre query on the film or series feed"""
        params = {"filter": FEED_FILTERS[type], "count": self.count, "q": genre_query}
        return self._client.get("search", params=params)

    def fetch_candidates(self, type: str, genre_query: str,
                         thresholds: Optional[Thresholds] = None) -> List[Candidate]:
        if self._client is None:
            logger.warning("No Allociné partner code configured, candidate pool is empty")
            return []
        if type not in FEED_FILTERS:
            return []

        min_spectators = (thresholds or self.thresholds).for_genre(genre_query)
        try:
            data = self.search(type, genre_query)
            feed = data.get("feed") if isinstance(data, dict) else None
            if not isinstance(feed, dict):
                return []
            items = feed.get(FEED_FILTERS[type]) or []
            if not isinstance(items, list):
                return []
            candidates = [parse_feed_item(item, type, min_spectators) for item in items if isinstance(item, dict)]
        except Exception as e:
            # Upstream failures degrade to "no candidates"
            logger.warning(f"Allociné search failed for type={type} genre={genre_query!r}: {e}")
            return []

        pool = [c for c in candidates if c is not None]
        logger.info(f"Allociné returned {len(items)} items, {len(pool)} usable candidates")
        return pool


def build_candidate_source(cfg: Settings) -> AllocineCandidateSource:
    """Allociné source configured from settings; without a partner code the pool is always empty."""
    allocine_cfg = get_allocine_settings(cfg)
    if allocine_cfg is None:
        logger.warning("ALLOCINE_* settings missing: recommendations will find no candidates")
        return AllocineCandidateSource(None)
    client = AllocineAPIClient(allocine_cfg, timeout=cfg.request_timeout_s, verify_ssl=cfg.verify_ssl)
    return AllocineCandidateSource(client, count=allocine_cfg.count)
