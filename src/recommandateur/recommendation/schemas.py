from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Candidate:
    """A catalog title proposed by a candidate source"""
    titre: str
    annee: str
    type: str  # "film" | "serie"
    genres: List[str] = field(default_factory=list)
    presse: Optional[float] = None  # press rating, 0-5
    spectateurs: Optional[float] = None  # spectator rating, 0-5
    accroche: str = ""
    affiche_url: Optional[str] = None
    cast: List[str] = field(default_factory=list)
    crew: List[str] = field(default_factory=list)
    canonical_key: str = ""
    duree: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ScoreBreakdown:
    """Per-component values and the renormalized weights that produced a score"""
    allocine: float
    user_pref: float
    castcrew: float
    weights: Dict[str, float]
    score: float

    def components(self) -> Dict[str, float]:
        return {"allocine": self.allocine, "user_pref": self.user_pref, "castcrew": self.castcrew}


@dataclass
class ScoredCandidate:
    candidate: Candidate
    breakdown: ScoreBreakdown

    @property
    def score(self) -> float:
        return self.breakdown.score


@dataclass
class Selection:
    """Winner of a recommendation run, rendered for display"""
    candidate: Candidate
    breakdown: ScoreBreakdown
    formatted_card: str
    notes: Dict[str, str]
    intro: Optional[str] = None
    pool_size: int = 0
    eligible: int = 0

    def to_payload(self) -> Dict[str, Any]:
        raw = self.candidate.to_dict()
        raw["score"] = self.breakdown.score
        raw["components"] = self.breakdown.components()
        payload = {
            "titre": self.candidate.titre,
            "formatted_card": self.formatted_card,
            "poster_url": self.candidate.affiche_url,
            "notes": self.notes,
            "score_breakdown": {
                "weights": self.breakdown.weights,
                "components": self.breakdown.components(),
            },
            "raw": raw,
        }
        if self.intro:
            payload["intro"] = self.intro
        return payload
