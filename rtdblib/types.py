from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class User:
    name: str
    age: int
    email: str


@dataclass(frozen=True)
class PushResponse:
    # server-generated key of the pushed child
    name: str


@dataclass(frozen=True)
class HttpResponse:
    status: int
    content_type: str
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")


class HttpClientProtocol(Protocol):
    def request(self, method: str, url: str, body: Optional[bytes] = None) -> HttpResponse: ...
