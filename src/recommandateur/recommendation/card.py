from typing import Dict, Optional, Tuple, Union

from recommandateur import constants
from recommandateur.recommendation.schemas import Candidate


def format_note(value) -> str:
    """Rating as shown on the card: one decimal, or a dash when missing."""
    if value is None:
        return constants.MISSING_NOTE
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value:.1f}"
    return str(value)


def card_notes(candidate: Candidate) -> Dict[str, str]:
    return {
        "spectateurs": format_note(candidate.spectateurs),
        "presse": format_note(candidate.presse),
    }


def render_card(template: str, candidate: Candidate) -> str:
    """
    Fill the card template by literal placeholder replacement.

    Placeholders: {titre} {annee} {type} {duree} {genres} {note_presse}
    {note_spectateurs} {presse} {spectateurs} {resume} {affiche_url}.
    Unknown placeholders are left untouched.
    """
    notes = card_notes(candidate)
    replacements = [
        ("{titre}", candidate.titre or ""),
        ("{annee}", candidate.annee or constants.MISSING_VALUE),
        ("{type}", candidate.type or ""),
        ("{duree}", str(candidate.duree) if candidate.duree is not None else constants.MISSING_VALUE),
        ("{genres}", constants.GENRE_JOINER.join(candidate.genres or [])),
        ("{note_presse}", notes["presse"]),
        ("{note_spectateurs}", notes["spectateurs"]),
        ("{presse}", notes["presse"]),
        ("{spectateurs}", notes["spectateurs"]),
        ("{resume}", candidate.accroche or constants.MISSING_SUMMARY),
        ("{affiche_url}", candidate.affiche_url or constants.MISSING_POSTER),
    ]
    card = template
    for placeholder, value in replacements:
        card = card.replace(placeholder, value)
    return card


def _string_hash(seed: str) -> int:
    # 31-based rolling hash on UTF-16 code units, wrapped to signed 32 bits
    data = seed.encode("utf-16-le")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def pick_intro(pool: Union[Tuple[str, ...], str, None], seed: Optional[str]) -> Optional[str]:
    """
    Deterministically pick an intro line for a seed (the winner's key).

    Same seed and same pool always give the same line. An empty seed picks
    the first line; a plain-string pool is returned as is.
    """
    if isinstance(pool, str):
        return pool.strip() or None
    if not pool:
        return None
    if not seed:
        return str(pool[0]).strip()
    index = abs(_string_hash(seed)) % len(pool)
    return str(pool[index]).strip()
