import json
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import unquote, urlsplit

import pytest

from rtdblib.types import HttpResponse


class FakeRtdb:
    """In-memory stand-in for the Realtime Database REST API."""

    def __init__(self, fail: Optional[Dict[str, int]] = None):
        self.root: Dict[str, Any] = {}
        self.calls: List[Tuple[str, str, Optional[bytes]]] = []
        self.fail = fail or {}
        self._next_key = 0
        self.closed = False

    def close(self) -> None:
        self.closed = True

    @staticmethod
    def _segments(url: str) -> List[str]:
        path = urlsplit(url).path
        if path.endswith(".json"):
            path = path[: -len(".json")]
        return [unquote(s) for s in path.split("/") if s]

    def _lookup(self, segments: List[str]) -> Any:
        node: Any = self.root
        for s in segments:
            if not isinstance(node, dict) or s not in node:
                return None
            node = node[s]
        return node

    def _put(self, segments: List[str], value: Any) -> None:
        if not segments:
            self.root = value if isinstance(value, dict) else {}
            return
        node = self.root
        for s in segments[:-1]:
            node = node.setdefault(s, {})
        node[segments[-1]] = value

    def _remove(self, segments: List[str]) -> None:
        if not segments:
            self.root = {}
            return
        parents = [self.root]
        for s in segments[:-1]:
            child = parents[-1].get(s) if isinstance(parents[-1], dict) else None
            if not isinstance(child, dict):
                return
            parents.append(child)
        parents[-1].pop(segments[-1], None)
        # empty nodes do not exist
        for depth in range(len(parents) - 1, 0, -1):
            if not parents[depth]:
                parents[depth - 1].pop(segments[depth - 1], None)

    @staticmethod
    def _json(status: int, payload: Any) -> HttpResponse:
        return HttpResponse(status=status, content_type="application/json", body=json.dumps(payload).encode("utf-8"))

    def request(self, method: str, url: str, body: Optional[bytes] = None) -> HttpResponse:
        self.calls.append((method, url, body))
        if method in self.fail:
            return self._json(self.fail[method], {"error": "Permission denied"})
        segments = self._segments(url)
        data = json.loads(body) if body is not None else None
        if method == "GET":
            return self._json(200, self._lookup(segments))
        if method == "POST":
            self._next_key += 1
            key = f"-Nfake{self._next_key:04d}"
            self._put(segments + [key], data)
            return self._json(200, {"name": key})
        if method == "PUT":
            self._put(segments, data)
            return self._json(200, data)
        if method == "PATCH":
            node = self._lookup(segments)
            merged = dict(node) if isinstance(node, dict) else {}
            merged.update(data)
            self._put(segments, merged)
            return self._json(200, data)
        if method == "DELETE":
            self._remove(segments)
            return self._json(200, None)
        return self._json(405, {"error": f"Unsupported method {method}"})


@pytest.fixture
def make_fake_rtdb():
    def make(fail: Optional[Dict[str, int]] = None) -> FakeRtdb:
        return FakeRtdb(fail=fail)
    return make


@pytest.fixture
def fake_rtdb(make_fake_rtdb):
    return make_fake_rtdb()
