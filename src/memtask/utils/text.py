# src/memtask/utils/text.py

"""Input validation, sanitization and small text helpers shared by the managers."""

from __future__ import annotations

import math
import re
import uuid
from collections import Counter
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from ..core.errors import ValidationError

_ID_RE = re.compile(r"^[A-Za-z0-9-]+$")
_ANGLE_RE = re.compile(r"[<>]")
_PUNCT_RE = re.compile(r"[^\w\s]")

MAX_TAG_LEN = 50


def new_id() -> str:
    return str(uuid.uuid4())


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(raw: str) -> datetime:
    """Parse an ISO-8601 timestamp (a trailing 'Z' is accepted); naive values are UTC."""
    dt = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def sanitize(text: str, max_len: int) -> str:
    return _ANGLE_RE.sub("", text[:max_len])


def require_text(value: Any, field: str, max_len: int) -> str:
    """Required string field: must be non-empty; truncated and stripped of angle brackets."""
    if not isinstance(value, str):
        raise ValidationError(field, "must be a string")
    if not value.strip():
        raise ValidationError(field, "is required")
    return sanitize(value, max_len)


def validate_id(value: Any, field: str = "id") -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError(field, "is required")
    if not _ID_RE.match(value):
        raise ValidationError(field, "contains invalid characters")
    return value


def validate_ids(values: Any, field: str) -> list[str]:
    """List of ids, de-duplicated with first-seen order kept."""
    if values is None:
        return []
    if not isinstance(values, (list, tuple)):
        raise ValidationError(field, "must be a list of ids")
    out: list[str] = []
    for v in values:
        vid = validate_id(v, field)
        if vid not in out:
            out.append(vid)
    return out


def sanitize_tags(tags: Any) -> list[str]:
    if tags is None:
        return []
    if not isinstance(tags, (list, tuple)):
        raise ValidationError("tags", "must be a list")
    out: list[str] = []
    for i, tag in enumerate(tags):
        if not isinstance(tag, str) or not tag:
            raise ValidationError("tags", f"tag at index {i} must be a non-empty string")
        out.append(sanitize(tag, MAX_TAG_LEN))
    return out


def _tokenize(text: str) -> list[str]:
    return [w for w in _PUNCT_RE.sub("", text.lower()).split() if w]


def word_overlap(query: str, text: str) -> float:
    """Share of distinct query words that also occur in text."""
    q = set(query.lower().split())
    if not q:
        return 0.0
    words = set(text.lower().split())
    return len(q & words) / len(q)


def tf_cosine(a: str, b: str) -> float:
    """Cosine similarity of normalized term-frequency vectors."""
    wa, wb = _tokenize(a), _tokenize(b)
    if not wa or not wb:
        return 0.0
    ta = {w: c / len(wa) for w, c in Counter(wa).items()}
    tb = {w: c / len(wb) for w, c in Counter(wb).items()}
    dot = sum(ta[w] * tb.get(w, 0.0) for w in ta)
    na = math.sqrt(sum(v * v for v in ta.values()))
    nb = math.sqrt(sum(v * v for v in tb.values()))
    if na == 0 or nb == 0:
        return 0.0
    return dot / (na * nb)


def contains_any(query: str, fields: Iterable[str]) -> bool:
    q = query.lower()
    return any(q in f.lower() for f in fields)
