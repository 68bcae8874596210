"""
Typed view of the stored settings document.

The settings document is loosely typed JSON edited by clients. The pipeline
never reads it directly: Preferences.from_settings() extracts what scoring
and selection need, field by field, falling back to built-in defaults for
anything missing or malformed.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from recommandateur import constants
from recommandateur.utils.text_cleaning import fold_accents


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value):
        return default
    return float(value)


def _names(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(v) for v in value if v is not None)


def _section(doc: Any, *path: str) -> Dict[str, Any]:
    node = doc
    for key in path:
        if not isinstance(node, dict):
            return {}
        node = node.get(key)
    return node if isinstance(node, dict) else {}


@dataclass(frozen=True)
class Thresholds:
    """Minimum spectator rating a candidate must strictly exceed"""
    default: float = constants.DEFAULT_THRESHOLD
    horror: float = constants.HORROR_THRESHOLD

    def for_genre(self, genre_query: Optional[str]) -> float:
        return self.horror if is_horror_query(genre_query) else self.default


@dataclass(frozen=True)
class Weights:
    allocine: float = constants.DEFAULT_WEIGHTS["allocine"]
    user_pref: float = constants.DEFAULT_WEIGHTS["user_pref"]
    castcrew: float = constants.DEFAULT_WEIGHTS["castcrew"]

    def normalized(self) -> Dict[str, float]:
        """
        Weights divided by their sum.

        All-zero, negative or non-finite weights fall back to the defaults.
        Weights are first scaled by the largest one so the sum cannot overflow.
        """
        raw = {"allocine": self.allocine, "user_pref": self.user_pref, "castcrew": self.castcrew}
        largest = max(raw.values())
        if (not all(math.isfinite(w) and w >= 0 for w in raw.values())) or largest <= 0:
            return Weights().normalized()
        scaled = {name: w / largest for name, w in raw.items()}
        total = sum(scaled.values())
        return {name: w / total for name, w in scaled.items()}


@dataclass(frozen=True)
class CastCrewPreferences:
    favorites: Tuple[str, ...] = ()
    blacklist: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Preferences:
    thresholds: Thresholds = field(default_factory=Thresholds)
    weights: Weights = field(default_factory=Weights)
    castcrew: CastCrewPreferences = field(default_factory=CastCrewPreferences)
    card_template: str = constants.MISSING_TEMPLATE
    intro_pool: Union[Tuple[str, ...], str, None] = None

    @classmethod
    def from_settings(cls, doc: Optional[Dict[str, Any]]) -> "Preferences":
        """
        Build preferences from a stored settings document.

        Args:
            doc: Settings document (as returned by default_settings() or stored by clients)

        Returns:
            Preferences with every missing/non-numeric field replaced by its default
        """
        doc = doc if isinstance(doc, dict) else {}

        raw_thresholds = _section(doc, "thresholds")
        thresholds = Thresholds(
            default=_number(raw_thresholds.get("default"), constants.DEFAULT_THRESHOLD),
            horror=_number(raw_thresholds.get("horror"), constants.HORROR_THRESHOLD),
        )

        raw_weights = _section(doc, "weights")
        weights = Weights(**{
            name: _positive_weight(raw_weights.get(name), default)
            for name, default in constants.DEFAULT_WEIGHTS.items()
        })

        raw_castcrew = _section(doc, "behaviors", "l1", "castcrew_preferences")
        castcrew = CastCrewPreferences(
            favorites=_names(raw_castcrew.get("favorites")),
            blacklist=_names(raw_castcrew.get("blacklist")),
        )

        template = _section(doc, "templates").get("l1_card")
        if not isinstance(template, str):
            template = constants.MISSING_TEMPLATE

        pool = _section(doc, "ux_prompts").get("l1_intro_pool")
        if isinstance(pool, list):
            pool = tuple(str(p) for p in pool)
        elif not isinstance(pool, str):
            pool = None

        return cls(
            thresholds=thresholds,
            weights=weights,
            castcrew=castcrew,
            card_template=template,
            intro_pool=pool,
        )


def _positive_weight(value: Any, default: float) -> float:
    weight = _number(value, default)
    return weight if weight >= 0 else default


def is_all_genres_query(genre_query: Optional[str]) -> bool:
    return not genre_query or constants.ALL_GENRES_KEYWORD in fold_accents(genre_query)


def is_horror_query(genre_query: Optional[str]) -> bool:
    folded = fold_accents(genre_query or "")
    return any(word in folded for word in constants.HORROR_KEYWORDS)
