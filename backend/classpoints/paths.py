"""Firestore document paths: classes/{classId} and classes/{classId}/students/{studentId}."""

from typing import Any

CLASSES_COLLECTION = "classes"
STUDENTS_SUBCOLLECTION = "students"


def classes_ref(db: Any):
    return db.collection(CLASSES_COLLECTION)


def class_ref(db: Any, class_id: str):
    return classes_ref(db).document(class_id)


def students_ref(db: Any, class_id: str):
    return class_ref(db, class_id).collection(STUDENTS_SUBCOLLECTION)


def student_ref(db: Any, class_id: str, student_id: str):
    return students_ref(db, class_id).document(student_id)
