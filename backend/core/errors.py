"""Error types and input validation shared by the data helpers and the API."""
from typing import Any, Dict, Iterable, List, Optional


class ValidationError(ValueError):
    """Custom validation error"""
    pass


class MissingFieldError(ValidationError):
    """A batch entry is missing a required field (usually its id)"""

    def __init__(self, what: str):
        self.what = what
        super().__init__(f"Missing: {what}")


class AuthError(Exception):
    """Sign-in or session failure reported by the auth helpers"""

    def __init__(self, code: str, message: Optional[str] = None):
        self.code = code
        super().__init__(message or code)


def required(what: str):
    """Raise MissingFieldError for the named field."""
    raise MissingFieldError(what)


def validate_class_fields(display_name: Any, id_prefix: Any) -> None:
    """Validate the fields needed to create a class"""
    errors = []

    if not display_name or not isinstance(display_name, str):
        errors.append('displayName is required and must be a non-empty string')

    if not id_prefix or not isinstance(id_prefix, str):
        errors.append('idPrefix is required and must be a non-empty string')

    if errors:
        raise ValidationError('; '.join(errors))


def validate_student_changes(adds: Iterable[Dict[str, Any]],
                             edits: Iterable[Dict[str, Any]],
                             dels: Iterable[str]) -> None:
    """Validate batch payload shapes coming from the HTTP layer"""
    errors: List[str] = []

    for label, entries in (('adds', adds), ('edits', edits)):
        if not isinstance(entries, list):
            errors.append(f'{label} must be a list')
        elif not all(isinstance(entry, dict) for entry in entries):
            errors.append(f'all {label} entries must be objects')

    if not isinstance(dels, list):
        errors.append('dels must be a list')
    elif not all(isinstance(student_id, str) and student_id for student_id in dels):
        errors.append('all dels entries must be non-empty strings')

    if errors:
        raise ValidationError('; '.join(errors))
