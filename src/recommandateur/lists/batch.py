import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from recommandateur import constants
from recommandateur.config.defaults import utc_now_iso
from recommandateur.lists.store import ListStore

logger = logging.getLogger(__name__)


def parse_requested_keys(values: Iterable[Optional[str]]) -> List[str]:
    """
    Flatten raw request values into lower-cased list names.

    A value shaped like a JSON array ('["ratings","parked"]') contributes
    each of its elements; anything else is taken as a single name.
    """
    names = []
    for raw in values:
        if not raw:
            continue
        trimmed = raw.strip()
        if trimmed.startswith("[") and trimmed.endswith("]"):
            try:
                parsed = json.loads(trimmed)
            except ValueError:
                parsed = None
            if isinstance(parsed, list):
                names.extend(str(v).lower() for v in parsed if v is not None and str(v))
                continue
        if trimmed:
            names.append(trimmed.lower())
    return names


class BatchReader:
    """One-round-trip snapshot of several lists"""

    def __init__(self, store: ListStore):
        self.store = store

    def snapshot(self, requested: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """
        Read the requested lists in parallel.

        Args:
            requested: list names; None or empty means all three. Unknown
                names are dropped and duplicates collapsed.

        Returns:
            {"synced_at": <ISO timestamp>, <name>: [items], ...}
        """
        unique = list(dict.fromkeys(n.lower() for n in (requested or []) if n))
        keys = [k for k in (unique or constants.COLLECTIONS) if k in constants.COLLECTIONS]
        dropped = [k for k in unique if k not in constants.COLLECTIONS]
        if dropped:
            logger.debug(f"Ignoring unknown list names: {dropped}")

        lists = self.store.read_collections(keys)
        payload: Dict[str, Any] = {"synced_at": utc_now_iso()}
        for k in keys:
            payload[k] = lists.get(k) or []
        return payload
