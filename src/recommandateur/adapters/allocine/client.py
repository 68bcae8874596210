import logging
from typing import Any

import certifi  # Provides Mozilla's CA bundle for SSL certificate verification
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from recommandateur.settings import AllocineSettings

logger = logging.getLogger(__name__)


class AllocineAPIClient:
    def __init__(self,
                cfg: AllocineSettings,
                timeout: float = 10.0,
                verify_ssl: bool = True,
                total_retries: int = 2,
                backoff_factor: float = 0.5,
                status_forcelist: tuple = (429, 500, 502, 503, 504)):
        """
        Initializes a requests.Session with:
            - JSON accept header
            - HTTPAdapter for retries on connection errors and specified HTTP status codes
        The partner code is sent as a query parameter on every call.
        """
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
            allowed_methods=frozenset(["GET"]),
            raise_on_status=False
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

        self.session.headers.update({
            "Accept": "application/json",
        })

    def _handle_response(self, resp: requests.Response) -> Any:
        """
        Handle API response with proper error checking and JSON parsing.

        Raises:
            requests.HTTPError: For 4xx/5xx HTTP status codes
            ValueError: If response is not valid JSON
        """
        try:
            resp.raise_for_status()

            if not resp.content:
                logger.warning(f"Empty response received for {resp.url}")
                return {}

            return resp.json()

        except requests.HTTPError:
            logger.error(f"HTTP {resp.status_code} error for {resp.url}: {resp.text[:200]}")
            raise

        except ValueError as e:
            logger.error(f"Invalid JSON response from {resp.url}: {resp.text[:200]}...")
            raise ValueError(f"Invalid JSON response: {e}")

    def get(self, path: str, params=None) -> Any:
        """Perform a GET request against the Allociné REST API, returning parsed JSON."""
        api_base_url: str = str(self.cfg.api_base_url)
        url = f"{api_base_url.rstrip('/')}/{path.lstrip('/')}"
        params = dict(params or {})
        params.setdefault("partner", self.cfg.partner_code.get_secret_value())
        params.setdefault("format", "json")
        resp = self.session.get(url, params=params, timeout=self.timeout, verify=self.verify)
        return self._handle_response(resp)
