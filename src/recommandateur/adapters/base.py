"""
Candidate sources - where fresh recommendation candidates come from.

Contract of fetch_candidates(type, genre_query):
    - results are already restricted to the requested type
    - ratings are on a 0-5 scale
    - titles without a poster, or whose spectator rating does not strictly
      exceed the applicable threshold, are left out by the source itself
    - on any failure the source returns [] instead of raising
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from recommandateur.config.preferences import Thresholds
from recommandateur.recommendation.schemas import Candidate

logger = logging.getLogger(__name__)


class CandidateSource(ABC):
    """Abstract base class for catalog/search providers"""

    @abstractmethod
    def fetch_candidates(self, type: str, genre_query: str,
                         thresholds: Optional[Thresholds] = None) -> List[Candidate]:
        """
        Fetch a candidate pool for a (type, genre) query.

        Args:
            type: "film" or "serie"
            genre_query: free-text genre, e.g. "science-fiction" or "tous genres"
            thresholds: rating floors to apply (source defaults when None)

        Returns:
            List of Candidate (empty on any upstream failure)
        """
        pass


class StaticCandidateSource(CandidateSource):
    """Serves a fixed pool, filtered by type (offline runs and tests)"""

    def __init__(self, candidates: Iterable[Candidate]):
        self.candidates = list(candidates)

    def fetch_candidates(self, type: str, genre_query: str,
                         thresholds: Optional[Thresholds] = None) -> List[Candidate]:
        pool = [c for c in self.candidates if c.type == type]
        logger.debug(f"Static source returning {len(pool)} candidates for type={type}")
        return pool
