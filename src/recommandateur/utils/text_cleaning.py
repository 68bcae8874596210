import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def fold_accents(s: str) -> str:
    """
    Normalize a string for keyword comparison by removing accents and standardizing case.

    This function:
    1. Decomposes Unicode characters (é becomes e + ´)
    2. Removes accent marks and diacritics
    3. Converts to lowercase using casefold()

    Example:
        "Épouvante" -> "epouvante"
    """
    decomposed = unicodedata.normalize("NFKD", s)
    no_accents = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return no_accents.casefold()


def normalize_canonical(key) -> str:
    """
    Build the canonical identifier of a title.

    Lower-cases, strips diacritics, collapses every run of non-alphanumeric
    characters into a single hyphen and trims hyphens at both ends. Empty or
    None input yields "". The result is a fixed point:
    normalize_canonical(normalize_canonical(x)) == normalize_canonical(x).

    Args:
        key: Title, name or key to normalize (non-strings are converted with str())

    Returns:
        str: ASCII slug, e.g. "Matrix, The" -> "matrix-the"
    """
    if key is None:
        return ""
    s = str(key)
    if not s:
        return ""
    # ASCII-only alphabet after folding, so locale never changes the result
    folded = fold_accents(s)
    return _NON_ALNUM.sub("-", folded).strip("-")
