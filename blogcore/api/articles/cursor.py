# blogcore/api/articles/cursor.py
"""
Opaque pagination cursor.

Wire format: standard base64 of the UTF-8 JSON ``{"id":<int>,"value":<str>}``
where ``value`` is the last-seen sort key: an ISO-8601 timestamp for
``publishedAt``/``createdAt`` or the stringified id for ``id``.

Decoding never raises. A token that cannot be decoded, or whose value does
not fit the requested sort key, comes back as ``IgnoredCursor`` and the query
starts from the top of the result set.
"""
import base64
import binascii
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

logger = logging.getLogger(__name__)

TIMESTAMP_SORT_KEYS = ("publishedAt", "createdAt")
SORT_KEYS = TIMESTAMP_SORT_KEYS + ("id",)


@dataclass(frozen=True)
class Cursor:
    id: int
    value: Union[datetime, int]


@dataclass(frozen=True)
class IgnoredCursor:
    reason: str


CursorResult = Union[Cursor, IgnoredCursor]


def format_timestamp(dt: datetime) -> str:
    # stored values are naive UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def parse_timestamp(raw: str) -> datetime:
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    dt = datetime.fromisoformat(raw)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def encode_cursor(article_id: int, sort_by: str, sort_value: Union[datetime, int]) -> str:
    if sort_by == "id":
        value = str(article_id)
    else:
        value = format_timestamp(sort_value)
    payload = json.dumps({"id": article_id, "value": value}, separators=(",", ":"))
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def decode_cursor(token: Optional[str], sort_by: str) -> Optional[CursorResult]:
    """None when no cursor was supplied, otherwise a Cursor or an IgnoredCursor."""
    if not token:
        return None

    try:
        raw = base64.b64decode(token.encode("ascii"), validate=True).decode("utf-8")
        data = json.loads(raw)
        article_id = data["id"]
        value = data["value"]
        if isinstance(article_id, bool) or not isinstance(article_id, int):
            raise ValueError("cursor id must be an integer")
        if not isinstance(value, str):
            raise ValueError("cursor value must be a string")

        if sort_by == "id":
            # an id cursor carries its own id as the value
            if int(value) != article_id:
                raise ValueError("id cursor value does not match its id")
            return Cursor(id=article_id, value=article_id)
        return Cursor(id=article_id, value=parse_timestamp(value))
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as e:
        logger.warning("Invalid cursor provided, ignoring: %s", e)
        return IgnoredCursor(reason=str(e))
