"""REST references into a Realtime Database.

A ``Database`` points at one location (``https://<host>/<segments>.json``).
``at()`` walks down the tree and every operation is a single HTTP round trip
against the referenced location.
"""

import copy
import json
import logging
import time
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote, unquote, urlencode, urlsplit

from .codec import parse_json
from .config import ClientConfig
from .errors import DecodeError, NotFoundError, RequestError, UrlParseError
from .metrics import Metrics
from .net import HttpClient
from .types import HttpClientProtocol, HttpResponse


logger = logging.getLogger(__name__)

JSON_SUFFIX = ".json"


def split_database_url(url: str) -> Tuple[str, List[str]]:
    """Validate a database URL and split it into origin and path segments."""
    try:
        parsed = urlsplit(url.strip())
        host = parsed.hostname
    except ValueError as exc:
        raise UrlParseError(f"Cannot parse database URL {url!r}: {exc}") from exc
    if parsed.scheme != "https":
        raise UrlParseError(f"Database URL must use https: {url!r}")
    if not host:
        raise UrlParseError(f"Database URL has no host: {url!r}")
    path = parsed.path
    if path.endswith(JSON_SUFFIX):
        path = path[: -len(JSON_SUFFIX)]
    segments = [unquote(s) for s in path.split("/") if s]
    return f"https://{parsed.netloc}", segments


def _split_path(path: str) -> List[str]:
    return [s for s in path.strip("/").split("/") if s]


class Database:
    def __init__(
        self,
        url: Optional[str] = None,
        http_client: HttpClientProtocol | None = None,
        config: Optional[ClientConfig] = None,
        metrics: Optional[Metrics] = None,
    ):
        self.config = config or ClientConfig()
        self.origin, segments = split_database_url(url or self.config.database_url)
        self.segments: Tuple[str, ...] = tuple(segments)
        self.query: Tuple[Tuple[str, str], ...] = ()
        self.http = http_client or HttpClient(
            self.config.user_agent,
            self.config.request_timeout,
            self.config.max_connections,
            self.config.retries,
        )
        self.metrics = metrics or Metrics()

    def _derive(self, segments: Optional[Tuple[str, ...]] = None, query: Optional[Tuple[Tuple[str, str], ...]] = None) -> "Database":
        child = copy.copy(self)
        if segments is not None:
            child.segments = segments
        if query is not None:
            child.query = query
        return child

    def at(self, path: str) -> "Database":
        # a child reference never inherits the parent's query
        return self._derive(segments=self.segments + tuple(_split_path(path)), query=())

    def with_params(self) -> "QueryParams":
        return QueryParams(self)

    @property
    def url(self) -> str:
        path = "/".join(quote(s, safe="") for s in self.segments)
        url = f"{self.origin}/{path}{JSON_SUFFIX}"
        if self.query:
            url += "?" + urlencode(self.query)
        return url

    def __repr__(self) -> str:
        return f"Database({self.url!r})"

    def _send(self, method: str, data: Any = None, has_body: bool = False) -> HttpResponse:
        url = self.url
        body = json.dumps(data, ensure_ascii=False).encode("utf-8") if has_body else None
        t0 = time.perf_counter()
        try:
            response = self.http.request(method, url, body)
        except RequestError:
            self.metrics.record_request(method, False, 0, (time.perf_counter() - t0) * 1000.0)
            raise
        dt_ms = (time.perf_counter() - t0) * 1000.0
        ok = response.status < 400
        self.metrics.record_request(method, ok, len(response.body), dt_ms)
        logger.debug("%s %s -> %d (%.1f ms)", method, url, response.status, dt_ms)
        if not ok:
            raise RequestError(
                f"{method} {url} returned {response.status}: {_error_message(response)}",
                status=response.status,
                url=url,
            )
        return response

    def set(self, data: Any) -> str:
        """Push ``data`` as a new child with a server-generated key."""
        return _text(self._send("POST", data, has_body=True))

    def set_with_key(self, key: str, data: Any) -> str:
        return _text(self.at(key)._send("PUT", data, has_body=True))

    def get_as_string(self) -> str:
        return _text(self._send("GET"))

    def get_json(self) -> Any:
        return parse_json(self.get_as_string())

    def get(self) -> Any:
        value = self.get_json()
        if value is None:
            raise NotFoundError(f"No data at {self.url}", status=200, url=self.url)
        return value

    def update(self, data: Any) -> str:
        return _text(self._send("PATCH", data, has_body=True))

    def delete(self) -> None:
        self._send("DELETE")

    def close(self) -> None:
        close = getattr(self.http, "close", None)
        if close is not None:
            close()


class QueryParams:
    """Builder for the filtering parameters of the REST API."""

    def __init__(self, database: Database):
        self._database = database
        self._params: Dict[str, str] = dict(database.query)

    def order_by(self, key: str) -> "QueryParams":
        self._params["orderBy"] = json.dumps(key)
        return self

    def equal_to(self, value: Any) -> "QueryParams":
        self._params["equalTo"] = json.dumps(value)
        return self

    def start_at(self, value: Any) -> "QueryParams":
        self._params["startAt"] = json.dumps(value)
        return self

    def end_at(self, value: Any) -> "QueryParams":
        self._params["endAt"] = json.dumps(value)
        return self

    def shallow(self, flag: bool = True) -> "QueryParams":
        if flag:
            self._params["shallow"] = "true"
        else:
            self._params.pop("shallow", None)
        return self

    def finish(self) -> Database:
        return self._database._derive(query=tuple(self._params.items()))


def _text(response: HttpResponse) -> str:
    try:
        return response.text
    except UnicodeDecodeError as exc:
        raise DecodeError(f"Response body is not UTF-8: {exc}") from exc


def _error_message(response: HttpResponse) -> str:
    text = response.body.decode("utf-8", errors="replace")
    try:
        payload = json.loads(text)
    except ValueError:
        return text[:200] or "(empty body)"
    if isinstance(payload, dict) and "error" in payload:
        return str(payload["error"])
    return text[:200]
