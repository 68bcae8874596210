"""
Key-value store backends.

The application keeps a handful of well-known keys (one per list, one for
settings, one for meta), each holding a whole JSON document. Backends only
move those documents around; list semantics live in ListStore.

- InMemoryKVStore: process-local dict (tests, offline runs)
- LocalFileKVStore: one JSON file per key under a directory
- CloudflareKVStore: Workers KV namespace through the Cloudflare REST API
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

import certifi  # Provides Mozilla's CA bundle for SSL certificate verification
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from recommandateur.errors import StorageUnavailable
from recommandateur.settings import CloudflareKVSettings, Settings, get_cloudflare_settings

logger = logging.getLogger(__name__)


def _decode(raw: Optional[str], key: str) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning(f"Ignoring unparsable JSON stored under '{key}'")
        return None


class BaseKVStore(ABC):
    """Abstract base class for key-value backends"""

    @abstractmethod
    def get_raw(self, key: str) -> Optional[str]:
        """
        Read the raw string stored under key.

        Returns:
            Stored string, or None when the key is absent

        Raises:
            StorageUnavailable: backend unreachable
        """
        pass

    @abstractmethod
    def put_raw(self, key: str, value: str) -> None:
        """
        Replace the value stored under key.

        Raises:
            StorageUnavailable: backend unreachable
        """
        pass

    def get_json(self, key: str) -> Any:
        """Read and decode key; absent or unparsable values yield None."""
        return _decode(self.get_raw(key), key)

    def put_json(self, key: str, value: Any) -> None:
        self.put_raw(key, json.dumps(value, ensure_ascii=False))


class InMemoryKVStore(BaseKVStore):
    """Store backed by a dict of serialized JSON strings"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()
        for key, value in (initial or {}).items():
            self.put_json(key, value)

    def get_raw(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def put_raw(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value


class LocalFileKVStore(BaseKVStore):
    """Store writing each key to <root>/<key>.json"""

    def __init__(self, root: Path):
        self.root = Path(root)
        logger.info(f"LocalFileKVStore initialized with root: {self.root}")

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def get_raw(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageUnavailable(f"Cannot read {path}: {e}") from e

    def put_raw(self, key: str, value: str) -> None:
        out = self._path(key)
        try:
            out.parent.mkdir(parents=True, exist_ok=True)
            tmp = out.with_suffix(out.suffix + ".tmp")
            tmp.write_text(value, encoding="utf-8")
            tmp.replace(out)             # atomic replace on same filesystem
        except OSError as e:
            raise StorageUnavailable(f"Cannot write {out}: {e}") from e


class CloudflareKVStore(BaseKVStore):
    """Store backed by a Cloudflare Workers KV namespace"""

    def __init__(self,
                cfg: CloudflareKVSettings,
                timeout: float = 10.0,
                verify_ssl: bool = True,
                total_retries: int = 2,
                backoff_factor: float = 0.4,
                status_forcelist: tuple = (429, 500, 502, 503, 504)):
        self.cfg = cfg
        self.timeout = timeout
        self.verify = certifi.where() if verify_ssl else False
        self.session = requests.Session()

        retry_strategy = Retry(
            total=total_retries,
            connect=total_retries,
            read=total_retries,
            backoff_factor=backoff_factor,
            status_forcelist=status_forcelist,
            allowed_methods=frozenset(["GET", "PUT"]),
            raise_on_status=False
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

        self.session.headers.update({
            "Authorization": f"Bearer {cfg.api_token.get_secret_value()}",
        })

    def _url(self, key: str) -> str:
        base = str(self.cfg.api_base_url).rstrip("/")
        return (f"{base}/accounts/{self.cfg.account_id}"
                f"/storage/kv/namespaces/{self.cfg.namespace_id}/values/{key}")

    def get_raw(self, key: str) -> Optional[str]:
        try:
            resp = self.session.get(self._url(key), timeout=self.timeout, verify=self.verify)
        except requests.RequestException as e:
            logger.error(f"KV read of '{key}' failed: {e}")
            raise StorageUnavailable(f"KV read of '{key}' failed") from e
        if resp.status_code == 404:
            return None
        if not resp.ok:
            logger.error(f"KV read of '{key}' answered HTTP {resp.status_code}: {resp.text[:200]}")
            raise StorageUnavailable(f"KV read of '{key}' answered HTTP {resp.status_code}")
        return resp.text

    def put_raw(self, key: str, value: str) -> None:
        try:
            resp = self.session.put(
                self._url(key),
                data=value.encode("utf-8"),
                headers={"Content-Type": "text/plain; charset=utf-8"},
                timeout=self.timeout,
                verify=self.verify,
            )
        except requests.RequestException as e:
            logger.error(f"KV write of '{key}' failed: {e}")
            raise StorageUnavailable(f"KV write of '{key}' failed") from e
        if not resp.ok:
            logger.error(f"KV write of '{key}' answered HTTP {resp.status_code}: {resp.text[:200]}")
            raise StorageUnavailable(f"KV write of '{key}' answered HTTP {resp.status_code}")


def build_kv_store(cfg: Settings) -> BaseKVStore:
    """Instantiate the backend selected by cfg.kv_backend."""
    if cfg.kv_backend == "memory":
        return InMemoryKVStore()
    if cfg.kv_backend == "cloudflare":
        cloudflare = get_cloudflare_settings(cfg)
        if cloudflare is None:
            raise StorageUnavailable("kv_backend=cloudflare but no CF_KV_* settings provided")
        return CloudflareKVStore(cloudflare, timeout=cfg.request_timeout_s, verify_ssl=cfg.verify_ssl)
    return LocalFileKVStore(cfg.kv_dir)
