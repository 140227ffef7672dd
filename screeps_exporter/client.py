import logging
from typing import Any, Dict, Optional

import requests

from .errors import TransportError

log = logging.getLogger(__name__)

DEFAULT_API_URL = "https://screeps.com"

ACCOUNT_PATH = "/api/auth/me"
MARKET_ORDERS_PATH = "/api/game/market/my-orders"
MEMORY_PATH = "/api/user/memory"
SEGMENT_PATH = "/api/user/memory-segment"


class ScreepsClient:
    """Authenticated GETs against the Screeps web API.

    Every request carries the ``X-Token`` header. There are no retries: a
    failed request fails the current cycle and the next cycle tries again.
    ``timeout=None`` keeps the transport default, which never times out.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._session.headers.update({"X-Token": token, "Accept": "application/json"})

    def fetch(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> bytes:
        url = f"{self.base_url}{endpoint}"
        log.debug(f"GET {url} {params or {}}")
        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError(str(exc), url) from exc
        if response.status_code >= 400:
            raise TransportError(f"HTTP {response.status_code}", url)
        return response.content

    def fetch_account(self) -> bytes:
        return self.fetch(ACCOUNT_PATH)

    def fetch_market_orders(self) -> bytes:
        return self.fetch(MARKET_ORDERS_PATH)

    def fetch_memory(self, shard: str, path: str = "") -> bytes:
        params = {"shard": shard}
        if path:
            params["path"] = path
        return self.fetch(MEMORY_PATH, params)

    def fetch_segment(self, shard: str, segment: int) -> bytes:
        return self.fetch(SEGMENT_PATH, {"segment": segment, "shard": shard})

    def close(self) -> None:
        self._session.close()
