import json
from typing import Any


def decode_payload(body: bytes | str | None) -> Any:
    """Parse a captured body as JSON, falling back to the raw text, or None when empty."""
    if body is None:
        return None
    if isinstance(body, bytes):
        if not body:
            return None
        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError:
            text = body.decode("latin-1")
    else:
        text = body
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def build_url(path: str, query_string: str) -> str:
    """Reassemble the request target as the client sent it."""
    if query_string:
        return f"{path}?{query_string}"
    return path
