"""
Wire Protocol — line-delimited JSON requests, replies and notifications

Handles:
- Parameter rendering (bare numbers, quoted strings, composite flow expressions)
- Request construction with correlation ids
- Classification of inbound lines into Result / Error / Notification
"""

import json
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Sequence, Union

from yeelink.connection.errors import MalformedMessage
from yeelink.types import FlowExpression, Properties, to_millis

LINE_TERMINATOR = b"\r\n"


class Result(NamedTuple):
    """Successful reply to the request with the same id."""
    id: int
    values: List[str]


class Error(NamedTuple):
    """Error reply to the request with the same id."""
    id: int
    code: int
    message: str


class Notification(NamedTuple):
    """Unsolicited state change pushed by the device; never carries an id."""
    method: str
    params: Dict[str, Any]


WireMessage = Union[Result, Error, Notification]


def stringify(value: Any) -> str:
    """Render one request parameter the way the device expects it."""
    if isinstance(value, Enum):
        return stringify(value.value)
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, timedelta):
        return str(to_millis(value))
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, FlowExpression):
        return json.dumps(str(value))
    if isinstance(value, Properties):
        return ",".join(stringify(p) for p in value)
    raise TypeError(f"Cannot encode parameter of type {type(value).__name__}")


def encode_request(request_id: int, method: str, params: Sequence[str]) -> bytes:
    """Build one request line from already-stringified params."""
    line = '{"id":%d,"method":%s,"params":[%s]}' % (
        request_id, json.dumps(method), ",".join(params),
    )
    return line.encode("utf-8") + LINE_TERMINATOR


def decode_line(line: Union[bytes, str]) -> WireMessage:
    """
    Parse one inbound line and classify it by field presence.
    Raises MalformedMessage when the line is not one of the three shapes.
    """
    raw = line if isinstance(line, bytes) else line.encode("utf-8")
    try:
        msg = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedMessage(f"Invalid JSON: {exc}", raw) from exc

    if not isinstance(msg, dict):
        raise MalformedMessage("Message must be a JSON object", raw)

    has_id = "id" in msg

    if has_id and "result" in msg:
        request_id = _request_id(msg, raw)
        result = msg["result"]
        if not isinstance(result, list):
            raise MalformedMessage("result must be a list", raw)
        if not all(_is_scalar(v) for v in result):
            raise MalformedMessage("result values must be strings or numbers", raw)
        return Result(request_id, [str(v) for v in result])

    if has_id and "error" in msg:
        request_id = _request_id(msg, raw)
        error = msg["error"]
        if not isinstance(error, dict):
            raise MalformedMessage("error must be an object", raw)
        code = error.get("code")
        if not isinstance(code, int) or isinstance(code, bool):
            raise MalformedMessage("error.code must be an integer", raw)
        return Error(request_id, code, str(error.get("message", "")))

    if not has_id and "method" in msg and "params" in msg:
        method = msg["method"]
        params = msg["params"]
        if not isinstance(method, str) or not isinstance(params, dict):
            raise MalformedMessage("Notification needs a method name and a params object", raw)
        return Notification(method, params)

    raise MalformedMessage("Cannot determine message type", raw)


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def _request_id(msg: Dict[str, Any], raw: bytes) -> int:
    request_id = msg["id"]
    if not isinstance(request_id, int) or isinstance(request_id, bool) or request_id < 0:
        raise MalformedMessage("id must be a non-negative integer", raw)
    return request_id
