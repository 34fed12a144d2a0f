"""
Class directory and class CRUD.

Collection layout:
- classes/{classId}: {displayName, idPrefix, createdAt}
- classes/{classId}/students/{studentId}: student documents (see students.py)

The class id is the display name given at creation, so renaming a class
through create_class creates a new class document.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, List, Optional

from classpoints.batching import ChunkedBatch
from classpoints.models import ClassInfo, StudentRow
from classpoints.paths import class_ref, classes_ref, students_ref
from classpoints.utils import class_sort_key
from core.errors import validate_class_fields
from core.logger import logger

MetaCallback = Callable[[ClassInfo], None]
StudentsCallback = Callable[[List[StudentRow]], None]
ErrorCallback = Callable[[Exception], None]


def _class_info(class_id: str, data: Optional[Dict[str, Any]]) -> ClassInfo:
    data = data or {}
    return ClassInfo(
        id=class_id,
        display_name=data.get("displayName") or class_id,
        id_prefix=data.get("idPrefix") or "",
    )


def _number_or_zero(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return 0


def _student_row(doc) -> StudentRow:
    data = doc.to_dict() or {}
    points = data.get("points")
    points = points if isinstance(points, dict) else {}
    return StudentRow(
        id=doc.id,
        name=data.get("name") or "",
        points=_number_or_zero(points.get("total")),
        daily=_number_or_zero(points.get("daily")),
        raw=data,
    )


def list_classes(db: Any) -> List[ClassInfo]:
    """
    Read all classes once (no live updates).

    Returns:
        ClassInfo list sorted by display name, numeric-aware and case-insensitive
    """
    classes = [_class_info(doc.id, doc.to_dict()) for doc in classes_ref(db).stream()]
    classes.sort(key=lambda c: class_sort_key(c.display_name))
    logger.debug(f"Read {len(classes)} classes from Firestore")
    return classes


def watch_class(
    db: Any,
    class_id: str,
    on_meta: Optional[MetaCallback] = None,
    on_students: Optional[StudentsCallback] = None,
    on_error: Optional[ErrorCallback] = None,
) -> Callable[[], None]:
    """
    Live-watch a class document and its roster.

    Both callbacks fire for the initial snapshot and on every change.
    Failures while handling a snapshot go to on_error (or the log when no
    on_error is given); listeners are not restarted.

    on_error only covers exceptions raised while a snapshot is handled,
    including ones from on_meta/on_students. Stream-level failures such as
    permission denied are handled by the Firestore client's watch thread,
    which closes the listener and logs; they never reach on_error.

    Returns:
        A function that detaches both listeners; safe to call more than once
    """
    def report(exc: Exception) -> None:
        if on_error is not None:
            on_error(exc)
        else:
            logger.error(f"Error watching class {class_id}: {exc}", exc_info=True)

    def handle_meta(docs, changes, read_time) -> None:
        try:
            snap = docs[0] if docs else None
            data = snap.to_dict() if snap is not None and snap.exists else {}
            if on_meta is not None:
                on_meta(_class_info(class_id, data))
        except Exception as exc:
            report(exc)

    def handle_students(docs, changes, read_time) -> None:
        try:
            rows = [_student_row(doc) for doc in docs]
            if on_students is not None:
                on_students(rows)
        except Exception as exc:
            report(exc)

    meta_watch = class_ref(db, class_id).on_snapshot(handle_meta)
    try:
        students_watch = students_ref(db, class_id).on_snapshot(handle_students)
    except Exception:
        meta_watch.unsubscribe()
        raise

    lock = threading.Lock()
    state = {"closed": False}

    def unsubscribe() -> None:
        with lock:
            if state["closed"]:
                return
            state["closed"] = True
        meta_watch.unsubscribe()
        students_watch.unsubscribe()
        logger.debug(f"Stopped watching class {class_id}")

    return unsubscribe


def create_class(db: Any, display_name: str, id_prefix: str) -> ClassInfo:
    """Create or update a class doc keyed by its display name."""
    validate_class_fields(display_name, id_prefix)

    class_ref(db, display_name).set(
        {
            "displayName": display_name,
            "idPrefix": id_prefix,
            "createdAt": int(time.time() * 1000),
        },
        merge=True,
    )
    logger.info(f"Saved class {display_name} (prefix: {id_prefix})")
    return ClassInfo(id=display_name, display_name=display_name, id_prefix=id_prefix)


def delete_class(db: Any, class_id: str) -> int:
    """
    Delete a class and all its students.

    Students go first in chunked batches, then the class document. A failure
    part way leaves the already-committed deletions in place.

    Returns:
        Number of student documents deleted
    """
    batch = ChunkedBatch(db)
    for doc in students_ref(db, class_id).stream():
        batch.delete(doc.reference)
    deleted = batch.commit()

    class_ref(db, class_id).delete()
    logger.info(f"Deleted class {class_id} with {deleted} students")
    return deleted
