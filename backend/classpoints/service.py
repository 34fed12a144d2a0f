"""
ClassroomService: every data helper bound to one injected FirebaseContext.

Callers (the Flask routes, scripts, tests) build the service once and call
methods without threading db/auth/provider through every call. Tests pass
a context holding in-memory fakes.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional

from classpoints import actions, classes, session, students
from classpoints.bootstrap import FirebaseContext
from classpoints.models import AuthUser, ClassInfo


class ClassroomService:
    def __init__(self, context: FirebaseContext):
        self.context = context

    @property
    def db(self) -> Any:
        return self.context.db

    # Auth

    def is_signed_in(self) -> bool:
        return session.is_signed_in(self.context.auth)

    def observe_auth(self, on_change: Callable[[Optional[AuthUser]], None]) -> Callable[[], None]:
        return session.observe_auth(self.context.auth, on_change)

    def sign_in_with_google(self) -> AuthUser:
        return session.sign_in_with_google(self.context.auth, self.context.provider)

    def sign_out(self) -> None:
        session.sign_out_user(self.context.auth)

    # Classes

    def list_classes(self) -> List[ClassInfo]:
        return classes.list_classes(self.db)

    def watch_class(self, class_id: str, on_meta=None, on_students=None, on_error=None) -> Callable[[], None]:
        return classes.watch_class(self.db, class_id, on_meta=on_meta, on_students=on_students, on_error=on_error)

    def create_class(self, display_name: str, id_prefix: str) -> ClassInfo:
        return classes.create_class(self.db, display_name, id_prefix)

    def delete_class(self, class_id: str) -> int:
        return classes.delete_class(self.db, class_id)

    # Students

    def get_student(self, class_id: str, student_id: str) -> Optional[Dict[str, Any]]:
        return students.get_student(self.db, class_id, student_id)

    def set_student(self, class_id: str, student_id: str, fields: Dict[str, Any]) -> None:
        students.set_student(self.db, class_id, student_id, fields)

    def save_students_batch(self, class_id: str, adds: Iterable[Dict[str, Any]] = (),
                            edits: Iterable[Dict[str, Any]] = (), dels: Iterable[str] = ()) -> int:
        return students.save_students_batch(self.db, class_id, adds=adds, edits=edits, dels=dels)

    # Point actions

    def increment_points(self, class_id: str, student_id: str, daily: int = 1, total: int = 1) -> None:
        actions.increment_points(self.db, class_id, student_id, daily=daily, total=total)

    def reset_daily(self, class_id: str, student_id: str) -> None:
        actions.reset_daily(self.db, class_id, student_id)

    def reset_total(self, class_id: str, student_id: str) -> None:
        actions.reset_total(self.db, class_id, student_id)

    def add_daily_to_all(self, class_id: str) -> int:
        return actions.add_daily_to_all(self.db, class_id)

    def set_student_string(self, class_id: str, student_id: str, key: str, value: str) -> None:
        actions.set_student_string(self.db, class_id, student_id, key, value)
