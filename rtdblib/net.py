import logging
from typing import Dict, Optional

import urllib3
from urllib3.util.retry import Retry
from urllib3 import exceptions as urllib3_exc

from .errors import RequestError
from .types import HttpResponse


logger = logging.getLogger(__name__)

IDEMPOTENT_METHODS = ["GET", "PUT", "DELETE"]


class HttpClient:
    def __init__(self, user_agent: str, request_timeout: float, max_connections: int = 4, retries: int = 0):
        self.user_agent = user_agent
        self.timeout = urllib3.Timeout(connect=5.0, read=request_timeout)
        self.http = urllib3.PoolManager(
            num_pools=1,
            maxsize=max(1, max_connections),
            headers=self._base_headers(),
            retries=Retry(
                total=max(0, retries),
                backoff_factor=0.3,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=IDEMPOTENT_METHODS,
                raise_on_status=False,
            ),
        )

    def _base_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
        }

    def request(self, method: str, url: str, body: Optional[bytes] = None) -> HttpResponse:
        # per-request headers replace the pool defaults, so resend them
        headers = self._base_headers()
        if body is not None:
            headers["Content-Type"] = "application/json"
        try:
            response = self.http.request(
                method,
                url,
                body=body,
                headers=headers,
                timeout=self.timeout,
                preload_content=True,
            )
        except urllib3_exc.HTTPError as exc:
            logger.debug("Transport failure for %s %s: %s", method, url, exc)
            raise RequestError(f"{method} {url} failed: {exc}", url=url) from exc
        return HttpResponse(
            status=response.status,
            content_type=response.headers.get("Content-Type", ""),
            body=response.data or b"",
        )

    def close(self) -> None:
        self.http.clear()
