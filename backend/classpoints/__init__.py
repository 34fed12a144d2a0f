"""
Data-access helpers for the classroom points tracker.

This package re-exports the helper functions for convenient imports.
"""

from .actions import (  # noqa: F401
    add_daily_to_all,
    increment_points,
    reset_daily,
    reset_total,
    set_student_string,
)
from .bootstrap import FirebaseContext, init_firebase  # noqa: F401
from .classes import create_class, delete_class, list_classes, watch_class  # noqa: F401
from .models import AuthUser, ClassInfo, Points, Student, StudentRow  # noqa: F401
from .service import ClassroomService  # noqa: F401
from .session import (  # noqa: F401
    FirebaseAuth,
    GoogleAuthProvider,
    is_signed_in,
    observe_auth,
    sign_in_with_google,
    sign_out_user,
)
from .students import get_student, save_students_batch, set_student  # noqa: F401
from .utils import normalize_student, to_int  # noqa: F401
