"""Opaque cursor helpers for keyset pagination (newest first)."""

import base64
import binascii
import json


def cursor_encode(last_id: int | str) -> str:
    """Encode the last seen primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.urlsafe_b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | str | None:
    """Decode a cursor back to the last seen id. Malformed cursors read as None."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
        last_id = payload["id"]
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError):
        return None
    if isinstance(last_id, bool) or not isinstance(last_id, (int, str)):
        return None
    return last_id
