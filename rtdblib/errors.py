from typing import Optional


class RtdbError(Exception):
    """Base class for every error raised by rtdblib."""


class UrlParseError(RtdbError):
    pass


class RequestError(RtdbError):
    def __init__(self, message: str, status: Optional[int] = None, url: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.url = url


class NotFoundError(RequestError):
    """A read returned JSON null where a value was required."""


class DecodeError(RtdbError):
    pass
