"""
Student CRUD under classes/{classId}/students.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from classpoints.models import Student
from classpoints.paths import student_ref
from classpoints.utils import normalize_student, points_update, sanitize_for_firestore
from core.errors import required
from core.logger import logger


def get_student(db: Any, class_id: str, student_id: str) -> Optional[Dict[str, Any]]:
    """
    Read one student.

    Returns:
        {"id": ..., **data}, or None if the document does not exist
    """
    snap = student_ref(db, class_id, student_id).get()
    if not snap.exists:
        return None
    return {"id": snap.id, **(snap.to_dict() or {})}


def set_student(db: Any, class_id: str, student_id: str, fields: Dict[str, Any]) -> None:
    """
    Add or update one student with partial fields (merge-write).

    A `points` value is coerced field by field to non-negative ints; fields
    the caller left out keep their stored value.
    """
    payload = dict(fields)
    if "points" in payload:
        payload["points"] = points_update(payload["points"])
    student_ref(db, class_id, student_id).set(sanitize_for_firestore(payload), merge=True)
    logger.debug(f"Merged {sorted(fields)} into student {class_id}/{student_id}")


def _normalized(entries: Iterable[Dict[str, Any]], label: str) -> List[Student]:
    students = []
    for entry in entries:
        if not entry.get("id"):
            required(f"{label}[].id")
        students.append(normalize_student(entry))
    return students


def save_students_batch(
    db: Any,
    class_id: str,
    adds: Iterable[Dict[str, Any]] = (),
    edits: Iterable[Dict[str, Any]] = (),
    dels: Iterable[str] = (),
) -> int:
    """
    Apply deletions, adds and edits in one atomic commit.

    Adds and edits are normalized and merge-written. Every entry is checked
    for an id before anything is written.

    Returns:
        Number of operations committed
    """
    dels = list(dels)
    writes = _normalized(adds, "adds") + _normalized(edits, "edits")

    batch = db.batch()
    for student_id in dels:
        batch.delete(student_ref(db, class_id, student_id))
    for student in writes:
        batch.set(student_ref(db, class_id, student.id), student.to_firestore(), merge=True)
    batch.commit()

    ops = len(dels) + len(writes)
    logger.info(f"Saved student batch for class {class_id}: {len(writes)} writes, {len(dels)} deletions")
    return ops
