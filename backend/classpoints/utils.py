"""
Small helpers shared by the data-access modules.

- Integer coercion for point values.
- Student record normalization (legacy field shapes -> canonical shape).
- Natural, case-insensitive sort key for class names.
- Sanitization of arbitrary values before they are stored in Firestore.
"""

from __future__ import annotations

import math
import numbers
import re
import unicodedata
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from classpoints.models import Points, Student

# Keys that normalize_student folds into the canonical shape
_LEGACY_KEYS = {"id", "name", "points", "daily", "total", "_extra", "_raw"}

_DIGITS = re.compile(r"(\d+)")


def to_int(n: Any) -> int:
    """
    Coerce any value to a non-negative integer.

    Numbers are truncated toward zero, numeric strings are parsed, and
    everything else (None, NaN, infinity, garbage) becomes 0.
    """
    if isinstance(n, bool):
        value: Union[int, float] = int(n)
    elif isinstance(n, numbers.Real):
        value = float(n) if not isinstance(n, int) else n
    elif isinstance(n, str):
        text = n.strip()
        if not text:
            return 0
        try:
            value = float(text)
        except ValueError:
            return 0
    else:
        # Decimal and other objects that define __float__
        try:
            value = float(n)
        except (TypeError, ValueError):
            return 0

    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return max(0, int(value))


def points_from(data: Optional[Mapping[str, Any]]) -> Points:
    """Read the `points` map of a stored student document, normalized."""
    raw = (data or {}).get("points")
    if not isinstance(raw, Mapping):
        return Points()
    return Points(daily=to_int(raw.get("daily")), total=to_int(raw.get("total")))


def points_update(raw: Any) -> Dict[str, int]:
    """
    Normalize a partial `points` payload for a merge-write.

    Only the fields the caller supplied are kept, so the other one is left
    untouched by the merge. A scalar counts as the total.
    """
    if isinstance(raw, Mapping):
        return {key: to_int(raw[key]) for key in ("daily", "total") if key in raw}
    return {"total": to_int(raw)}


def is_canonical_count(value: Any) -> bool:
    """True for a stored point value that is already a non-negative int."""
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def normalize_student(s: Mapping[str, Any]) -> Student:
    """
    Reconcile legacy/alternate student shapes into a canonical Student.

    `daily` wins over `points.daily`; `points.total` wins over `total`,
    which wins over a scalar `points`. Keys outside the known set are kept
    in `extra`, and the optional `_extra` bag is merged on top.
    """
    points_field = s.get("points")
    nested = points_field if isinstance(points_field, Mapping) else {}

    daily = _first_present(s.get("daily"), nested.get("daily"))
    total = _first_present(nested.get("total"), s.get("total"), points_field)

    extra: Dict[str, Any] = {k: v for k, v in s.items() if k not in _LEGACY_KEYS}
    bag = s.get("_extra")
    if isinstance(bag, Mapping):
        extra.update(bag)

    name = s.get("name")
    return Student(
        id=s.get("id"),
        name=name if name is not None else "",
        points=Points(daily=to_int(daily or 0), total=to_int(total or 0)),
        extra=sanitize_for_firestore(extra),
    )


def class_sort_key(name: str) -> Tuple[Any, ...]:
    """
    Sort key for display names: numeric-aware, ignoring case and accents.

    "Class 2" sorts before "Class 10"; "élan" sorts with "Elan".
    """
    decomposed = unicodedata.normalize("NFKD", name or "")
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    parts = _DIGITS.split(folded)
    # re.split with a capture group alternates text, digits, text, ...
    return tuple(int(part) if i % 2 else part for i, part in enumerate(parts))


def sanitize_for_firestore(obj: Any) -> Any:
    """
    Recursively sanitize an object so it can be stored in Firestore.

    - datetime -> ISO 8601 string (naive values are treated as UTC)
    - float('nan'), float('inf'), float('-inf') -> None
    - tuples and sets -> lists
    - Firestore sentinels and transforms are passed through untouched.
    """
    if obj is None or isinstance(obj, (bool, int, str)):
        return obj

    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            return None
        return obj

    if isinstance(obj, datetime):
        if obj.tzinfo is None:
            obj = obj.replace(tzinfo=timezone.utc)
        return obj.isoformat()

    if isinstance(obj, Mapping):
        return {str(k): sanitize_for_firestore(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple, set)):
        return [sanitize_for_firestore(v) for v in obj]

    # Sentinels (DELETE_FIELD, SERVER_TIMESTAMP), Increment, bytes, GeoPoint...
    return obj
