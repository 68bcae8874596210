from typing import Any, Dict, List

from recommandateur.config.defaults import default_emoji


def deep_merge(base: Any, patch: Any) -> Any:
    """
    Merge-patch `patch` into `base` and return a new document.

    Mappings are merged key by key, recursively. Lists are always replaced
    wholesale by the patch value, never concatenated. Any other value in the
    patch (scalars, None, type changes) overrides the base value.

    Example:
        deep_merge({"w": {"a": 1, "b": 2}, "l": [1, 2]}, {"w": {"b": 3}, "l": [9]})
        -> {"w": {"a": 1, "b": 3}, "l": [9]}
    """
    if not isinstance(base, dict) or not isinstance(patch, dict):
        return patch
    out = dict(base)
    for key, value in patch.items():
        current = base.get(key)
        if isinstance(current, list) and isinstance(value, list):
            out[key] = list(value)
        elif isinstance(current, dict) and isinstance(value, dict):
            out[key] = deep_merge(current, value)
        else:
            out[key] = value
    return out


def normalize_menu(menu: List[Any]) -> List[Dict[str, Any]]:
    """Drop entries without a label; default num to position and emoji to a keycap."""
    entries = [x for x in menu if isinstance(x, dict) and isinstance(x.get("label"), str) and x["label"].strip()]
    normalized = []
    for i, entry in enumerate(entries, start=1):
        num = entry.get("num")
        emoji = entry.get("emoji")
        normalized.append({
            "num": num if isinstance(num, int) and not isinstance(num, bool) else i,
            "emoji": emoji if isinstance(emoji, str) and emoji.strip() else default_emoji(i),
            "label": entry["label"].strip(),
        })
    return normalized
