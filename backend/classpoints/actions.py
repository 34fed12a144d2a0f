"""
Common point actions reused by the UI: increment, reset, daily bump, custom strings.
"""

from __future__ import annotations

import numbers
from typing import Any, Dict, Optional

from firebase_admin import firestore

from classpoints.batching import ChunkedBatch
from classpoints.paths import student_ref, students_ref
from classpoints.students import get_student, set_student
from classpoints.utils import is_canonical_count, points_from, to_int
from core.errors import ValidationError
from core.logger import logger


def _delta(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValidationError(f"{name} must be a number")
    return int(value)


def _stored_points_canonical(student: Optional[Dict[str, Any]]) -> bool:
    raw = (student or {}).get("points")
    if raw is None:
        return True
    if not isinstance(raw, dict):
        return False
    return all(key not in raw or is_canonical_count(raw[key]) for key in ("daily", "total"))


def increment_points(db: Any, class_id: str, student_id: str, daily: int = 1, total: int = 1) -> None:
    """
    Add to a student's points: {daily += daily, total += total}.

    When both deltas are non-negative and the stored points are already
    non-negative ints, the write uses Firestore's atomic Increment
    transform, so concurrent increments are not lost. Otherwise the stored
    values are normalized, the deltas added and the result clamped at 0 in a
    read-modify-write, which can lose concurrent updates. A missing student
    is created with just the points.
    """
    daily = _delta(daily, "daily")
    total = _delta(total, "total")

    current = get_student(db, class_id, student_id)
    if daily >= 0 and total >= 0 and _stored_points_canonical(current):
        student_ref(db, class_id, student_id).set({
            "points": {"daily": firestore.Increment(daily), "total": firestore.Increment(total)},
        }, merge=True)
    else:
        points = points_from(current)
        set_student(db, class_id, student_id, {
            "points": {
                "daily": to_int(points.daily + daily),
                "total": to_int(points.total + total),
            },
        })
    logger.info(f"Incremented points for {class_id}/{student_id} by daily={daily}, total={total}")


def reset_daily(db: Any, class_id: str, student_id: str) -> None:
    """Reset daily points for one student; no-op if the student does not exist."""
    current = get_student(db, class_id, student_id)
    if not current:
        logger.debug(f"reset_daily: student {class_id}/{student_id} not found")
        return
    points = points_from(current)
    set_student(db, class_id, student_id, {"points": {"daily": 0, "total": points.total}})
    logger.info(f"Reset daily points for {class_id}/{student_id}")


def reset_total(db: Any, class_id: str, student_id: str) -> None:
    """Reset total points for one student; no-op if the student does not exist."""
    current = get_student(db, class_id, student_id)
    if not current:
        logger.debug(f"reset_total: student {class_id}/{student_id} not found")
        return
    points = points_from(current)
    set_student(db, class_id, student_id, {"points": {"daily": points.daily, "total": 0}})
    logger.info(f"Reset total points for {class_id}/{student_id}")


def add_daily_to_all(db: Any, class_id: str) -> int:
    """
    Add +1 daily and +1 total to every student in a class.

    Commits in chunks of MAX_BATCH_OPS so large rosters do not exceed the
    per-batch write limit.

    Returns:
        Number of students updated
    """
    batch = ChunkedBatch(db)
    for doc in students_ref(db, class_id).stream():
        points = points_from(doc.to_dict())
        batch.set(doc.reference, {
            "points": {"daily": points.daily + 1, "total": points.total + 1},
        }, merge=True)
    updated = batch.commit()
    logger.info(f"Added daily point to {updated} students in class {class_id}")
    return updated


def set_student_string(db: Any, class_id: str, student_id: str, key: str, value: str) -> None:
    """Write a custom string field (pet name, mood, note...)."""
    if not isinstance(value, str):
        raise TypeError("value must be a string")
    if not key or not isinstance(key, str):
        raise ValidationError("key is required and must be a non-empty string")
    set_student(db, class_id, student_id, {key: value})
