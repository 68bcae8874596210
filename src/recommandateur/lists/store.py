"""
ListStore - the three user lists (ratings, parked, rejects)

Each list is one JSON array stored under its own key. Items are opaque
dicts identified by their normalized canonical_key. Invariants enforced on
insert:
    - canonical_key is unique inside a list (second insert is a no-op)
    - a key lives in at most one of the three lists (ConflictError otherwise)
    - ratings items carry a rating in [0, 5]; parked/rejects items carry none
"""

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from recommandateur import constants
from recommandateur.config.defaults import utc_now_iso
from recommandateur.errors import ConflictError, ValidationError
from recommandateur.storage.kv import BaseKVStore
from recommandateur.utils.text_cleaning import normalize_canonical

logger = logging.getLogger(__name__)


@dataclass
class InsertResult:
    added: bool
    key: str
    reason: Optional[str] = None  # "duplicate" when added is False


@dataclass
class ListPage:
    items: List[Dict[str, Any]]
    total: int
    offset: int
    limit: int


def clamp_page(offset: Optional[int], limit: Optional[int]) -> tuple:
    """Clamp offset to >= 0 and limit to [1, MAX_LIMIT] (None => DEFAULT_LIMIT)."""
    offset = max(0, offset or 0)
    if limit is None:
        limit = constants.DEFAULT_LIMIT
    limit = min(max(1, limit), constants.MAX_LIMIT)
    return offset, limit


def _check_collection(name: str) -> str:
    if name not in constants.COLLECTIONS:
        raise ValidationError(f"Unknown list '{name}' (expected one of {list(constants.COLLECTIONS)})")
    return name


def exclusion_set(lists: Dict[str, List[Dict[str, Any]]]) -> Set[str]:
    """Union of the normalized keys of already-loaded lists."""
    return {
        normalize_canonical(item.get("canonical_key"))
        for items in lists.values()
        for item in items
        if isinstance(item, dict)
    } - {""}


def _is_rating(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and 0 <= value <= 5


class ListStore:
    """CRUD-lite access to the ratings/parked/rejects lists"""

    def __init__(self, kv: BaseKVStore):
        self.kv = kv
        # Serializes the read-check-write of insert() within this process.
        self._write_lock = threading.Lock()

    # ---- reads ----

    def read_collection(self, name: str) -> List[Dict[str, Any]]:
        """Whole list; anything that is not a JSON array reads as empty."""
        value = self.kv.get_json(_check_collection(name))
        return value if isinstance(value, list) else []

    def read_collections(self, names: List[str]) -> Dict[str, List[Dict[str, Any]]]:
        """Read several lists concurrently, one store read per list."""
        names = [_check_collection(n) for n in names]
        if not names:
            return {}
        with ThreadPoolExecutor(max_workers=len(names)) as pool:
            results = list(pool.map(self.read_collection, names))
        return dict(zip(names, results))

    def exclusion_keys(self) -> Set[str]:
        """Normalized keys present in any of the three lists."""
        return exclusion_set(self.read_collections(list(constants.COLLECTIONS)))

    def membership(self, key: str, lists: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> Optional[str]:
        """
        Resolve which list currently holds key.

        Args:
            key: canonical key (normalized here before comparison)
            lists: already-loaded lists, to avoid a second round trip

        Returns:
            "ratings", "parked", "rejects" or None
        """
        key = normalize_canonical(key)
        if not key:
            return None
        if lists is None:
            lists = self.read_collections(list(constants.COLLECTIONS))
        for name in constants.COLLECTIONS:
            if any(normalize_canonical(x.get("canonical_key")) == key
                   for x in lists.get(name, []) if isinstance(x, dict)):
                return name
        return None

    def list_items(self, name: str, offset: Optional[int] = 0, limit: Optional[int] = None) -> ListPage:
        offset, limit = clamp_page(offset, limit)
        full = self.read_collection(name)
        return ListPage(items=full[offset:offset + limit], total=len(full), offset=offset, limit=limit)

    # ---- writes ----

    def insert(self, name: str, item: Dict[str, Any]) -> InsertResult:
        """
        Validate and append an item to a list.

        Raises:
            ValidationError: bad canonical_key, bad/missing/forbidden rating
            ConflictError: key already held by another list (nothing written)
            StorageUnavailable: store unreachable
        """
        _check_collection(name)
        if not isinstance(item, dict):
            raise ValidationError("Invalid payload (object expected)")

        raw_key = item.get("canonical_key")
        if not isinstance(raw_key, str) or not raw_key.strip():
            raise ValidationError("canonical_key (non-empty string) required")
        key = normalize_canonical(raw_key.strip())
        if not key:
            raise ValidationError("canonical_key has no alphanumeric character")

        if name == constants.RATINGS:
            if not _is_rating(item.get("rating")):
                raise ValidationError("rating (number between 0 and 5) required for ratings")
        elif "rating" in item:
            raise ValidationError(f"rating not allowed for {name}")

        item = dict(item, canonical_key=key)

        with self._write_lock:
            lists = self.read_collections(list(constants.COLLECTIONS))
            holder = self.membership(key, lists)
            if holder is not None and holder != name:
                logger.warning(f"Insert of '{key}' into {name} rejected: already in {holder}")
                raise ConflictError(key, holder)
            if holder == name:
                logger.info(f"'{key}' already in {name}, not added")
                return InsertResult(added=False, key=key, reason="duplicate")

            stamp = "rated_at" if name == constants.RATINGS else "added_at"
            if not item.get(stamp):
                item[stamp] = utc_now_iso()

            target = lists[name]
            target.append(item)
            self.kv.put_json(name, target)

        logger.info(f"Added '{key}' to {name} ({len(target)} items)")
        return InsertResult(added=True, key=key)

    def replace_collection(self, name: str, items: List[Dict[str, Any]]) -> None:
        """Bulk replacement (backup import); no invariant checks."""
        self.kv.put_json(_check_collection(name), list(items))
