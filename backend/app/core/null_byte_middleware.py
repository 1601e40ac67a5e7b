"""ASGI middleware to strip null bytes from JSON request bodies (CWE-158).

PostgreSQL rejects null bytes in text columns, but Pydantic's str
validation lets them through. A ``\\u0000`` inside an identifier or reason
would otherwise reach asyncpg and surface as a 500 instead of a normal
"not found" or validation answer.

Query strings are cleaned as well (literal ``\\x00`` and ``%00``). Non-JSON
bodies pass through untouched.

This is a raw ASGI middleware (not BaseHTTPMiddleware) so it can replace
the receive callable.
"""

from __future__ import annotations

import json
import re
from typing import Any

from starlette.types import ASGIApp, Message, Receive, Scope, Send

_JSON_CONTENT_TYPE = b"application/json"

_PERCENT_NULL_RE = re.compile(rb"%00", re.IGNORECASE)

# Deletion bodies are tiny; anything larger is passed through unparsed
_MAX_JSON_BODY_SIZE = 64 * 1024

_MAX_NESTING_DEPTH = 16


class NullByteMiddleware:
    """Strip null bytes from query strings and JSON request bodies."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        query_string = scope.get("query_string", b"")
        if b"\x00" in query_string or b"%00" in query_string.lower():
            cleaned = query_string.replace(b"\x00", b"")
            scope["query_string"] = _PERCENT_NULL_RE.sub(b"", cleaned)

        if not _is_json_request(scope):
            await self.app(scope, receive, send)
            return

        consumed = False

        async def sanitized_receive() -> Message:
            nonlocal consumed
            if consumed:
                return {"type": "http.request", "body": b"", "more_body": False}

            chunks: list[bytes] = []
            while True:
                message = await receive()
                if message["type"] != "http.request":
                    return message
                chunks.append(message.get("body", b""))
                if not message.get("more_body", False):
                    break

            consumed = True
            body = b"".join(chunks)
            if body and len(body) <= _MAX_JSON_BODY_SIZE:
                body = strip_null_bytes_from_json(body)
            return {"type": "http.request", "body": body, "more_body": False}

        await self.app(scope, sanitized_receive, send)


def _is_json_request(scope: Scope) -> bool:
    for header_name, header_value in scope.get("headers", []):
        if header_name.lower() == b"content-type":
            return bool(header_value.startswith(_JSON_CONTENT_TYPE))
    return False


def strip_null_bytes_from_json(body: bytes) -> bytes:
    """Parse a JSON body, drop null bytes from every string, re-serialize.

    Args:
        body: Raw JSON body bytes.

    Returns:
        Cleaned body, or the original bytes if it is not valid JSON.
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError):
        return body
    return json.dumps(_strip(data), ensure_ascii=False).encode("utf-8")


def _strip(value: Any, depth: int = 0) -> Any:
    # Any: JSON values have no common base type
    if depth > _MAX_NESTING_DEPTH:
        return value
    if isinstance(value, str):
        return value.replace("\x00", "")
    if isinstance(value, dict):
        return {
            (k.replace("\x00", "") if isinstance(k, str) else k): _strip(v, depth + 1)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [_strip(item, depth + 1) for item in value]
    return value
