"""
Pagination helpers.

List endpoints page with opaque continuation tokens produced by the record
store; the tokens are passed back unchanged by clients.
"""

from typing import Optional
import base64
import json
import math

from app.utils.exceptions import ValidationError


def encode_cursor(seq: int) -> str:
    """Wrap a store position into an opaque token."""
    raw = json.dumps({"s": seq}, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def decode_cursor(token: Optional[str]) -> Optional[int]:
    """
    Unwrap a continuation token.

    Raises:
        ValidationError: If the token was not produced by `encode_cursor`
    """
    if not token:
        return None
    try:
        padded = token + "=" * (-len(token) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded.encode()))
        seq = payload["s"]
        if not isinstance(seq, int) or seq < 0:
            raise ValueError("bad position")
        return seq
    except (ValueError, KeyError, TypeError) as e:
        raise ValidationError(f"Invalid pagination cursor: {token}") from e


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total > 0 else 0
