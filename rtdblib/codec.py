import json
from dataclasses import asdict
from typing import Any, Dict

from .errors import DecodeError
from .types import PushResponse, User

U32_MAX = 2**32 - 1


def parse_json(s: str) -> Any:
    try:
        return json.loads(s)
    except ValueError as exc:
        raise DecodeError(f"Response is not valid JSON: {exc}") from exc


def _require(d: Dict[str, Any], key: str, kind: type) -> Any:
    if key not in d:
        raise DecodeError(f"Missing field {key!r}")
    value = d[key]
    # bool is an int subclass; JSON true/false is not an age
    if not isinstance(value, kind) or isinstance(value, bool):
        raise DecodeError(f"Field {key!r} has type {type(value).__name__}, expected {kind.__name__}")
    return value


def user_to_dict(user: User) -> Dict[str, Any]:
    return asdict(user)


def user_from_dict(d: Any) -> User:
    if not isinstance(d, dict):
        raise DecodeError(f"Expected a JSON object for user, got {type(d).__name__}")
    age = _require(d, "age", int)
    if not 0 <= age <= U32_MAX:
        raise DecodeError(f"Field 'age' out of range: {age}")
    return User(name=_require(d, "name", str), age=age, email=_require(d, "email", str))


def users_from_mapping(d: Any) -> Dict[str, User]:
    if not isinstance(d, dict):
        raise DecodeError(f"Expected a JSON object of users, got {type(d).__name__}")
    return {key: user_from_dict(value) for key, value in d.items()}


def string_to_response(s: str) -> PushResponse:
    d = parse_json(s)
    if not isinstance(d, dict):
        raise DecodeError(f"Expected a JSON object for push response, got {type(d).__name__}")
    return PushResponse(name=_require(d, "name", str))


def string_to_user(s: str) -> User:
    return user_from_dict(parse_json(s))
