"""
Candidate scoring.

Score = weighted sum of three components, each in [0, 1]:
    - allocine: spectator/press ratings blend
    - user_pref: affinity with the user's rated titles of the same type/genres
    - castcrew: favorite/blacklisted people among cast and crew

Weights come from Preferences and are renormalized to sum to 1.
"""

import math
from typing import Any, Dict, List, Optional, Sequence

from recommandateur.config.preferences import CastCrewPreferences, Preferences
from recommandateur.recommendation.schemas import Candidate, ScoreBreakdown
from recommandateur.utils.text_cleaning import normalize_canonical

NO_HISTORY_PREFERENCE = 0.2
CASTCREW_BASELINE = 0.5
MAX_FAVORITE_BONUS = 0.4
MAX_BLACKLIST_MALUS = 0.5


def clamp01(value: Any) -> float:
    """Clamp to [0, 1]; non-numeric and non-finite values count as 0."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return min(1.0, max(0.0, value))


def _to_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def allocine_component(candidate: Candidate) -> float:
    """0.7 x spectator + 0.3 x press (both /5); press falls back to spectator."""
    spectator = clamp01(_to_float(candidate.spectateurs) / 5)
    press_value = _to_float(candidate.presse)
    press = spectator if math.isnan(press_value) else clamp01(press_value / 5)
    return clamp01(spectator * 0.7 + press * 0.3)


def user_preference_component(ratings: Sequence[Dict[str, Any]], candidate: Candidate) -> float:
    """
    Affinity of the user's rating history with the candidate.

    Only rated items of the same type sharing at least one genre count.
    Their mean rating is mapped from [2, 5] to [0, 1] and blended (0.8/0.2)
    with the share of candidate genres they cover. Without such history the
    component is NO_HISTORY_PREFERENCE.
    """
    if not ratings:
        return NO_HISTORY_PREFERENCE
    candidate_genres = {str(g).lower() for g in (candidate.genres or [])}
    if not candidate_genres:
        return NO_HISTORY_PREFERENCE

    relevant: List[Dict[str, Any]] = [
        item for item in ratings
        if isinstance(item, dict)
        and item.get("type") == candidate.type
        and isinstance(item.get("genres"), list)
        and any(str(g).lower() in candidate_genres for g in item["genres"])
    ]
    if not relevant:
        return NO_HISTORY_PREFERENCE

    total = 0.0
    for item in relevant:
        value = _to_float(item.get("rating"))
        total += 0.0 if math.isnan(value) else value
    normalized = clamp01((total / len(relevant) - 2) / 3)

    shared = sum(
        sum(1 for g in item["genres"] if str(g).lower() in candidate_genres)
        for item in relevant
    )
    coverage = clamp01(shared / (len(candidate_genres) * len(relevant)))
    return clamp01(normalized * 0.8 + coverage * 0.2)


def castcrew_component(candidate: Candidate, prefs: CastCrewPreferences) -> float:
    # Ratios are taken over the configured lists, duplicates included
    favorites = [k for k in (normalize_canonical(v) for v in prefs.favorites) if k]
    blacklist = [k for k in (normalize_canonical(v) for v in prefs.blacklist) if k]
    participants = [
        k for k in (normalize_canonical(n) for n in list(candidate.cast or []) + list(candidate.crew or []))
        if k
    ]
    if not participants:
        return 0.0 if favorites else CASTCREW_BASELINE

    score = CASTCREW_BASELINE
    if favorites:
        favorite_set = set(favorites)
        matches = sum(1 for p in participants if p in favorite_set)
        score += min(MAX_FAVORITE_BONUS, matches / len(favorites))
    if blacklist:
        blacklist_set = set(blacklist)
        matches = sum(1 for p in participants if p in blacklist_set)
        score -= min(MAX_BLACKLIST_MALUS, matches / len(blacklist))
    return clamp01(score)


def score_candidate(candidate: Candidate,
                    ratings: Sequence[Dict[str, Any]],
                    prefs: Preferences,
                    weights: Optional[Dict[str, float]] = None) -> ScoreBreakdown:
    """
    Score one candidate against the user's history and preferences.

    Args:
        candidate: Candidate to score
        ratings: the user's ratings list
        prefs: Preferences (weights, cast/crew lists)
        weights: pre-normalized weights, computed from prefs when None

    Returns:
        ScoreBreakdown with the three components, the weights and the final score
    """
    weights = weights or prefs.weights.normalized()
    allocine = allocine_component(candidate)
    user_pref = user_preference_component(ratings, candidate)
    castcrew = castcrew_component(candidate, prefs.castcrew)
    score = clamp01(
        weights["allocine"] * allocine
        + weights["user_pref"] * user_pref
        + weights["castcrew"] * castcrew
    )
    return ScoreBreakdown(
        allocine=allocine,
        user_pref=user_pref,
        castcrew=castcrew,
        weights=weights,
        score=score,
    )
