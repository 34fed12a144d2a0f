"""
Record types for classes, students and signed-in users.

Firestore documents are plain dicts; these types give the known fields a
fixed shape and keep anything else in an explicit `extra` map so unknown
fields round-trip through normalization.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Points:
    daily: int = 0
    total: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"daily": self.daily, "total": self.total}


@dataclass
class Student:
    """Canonical student record as written to `classes/{id}/students/{id}`."""

    id: Optional[str]
    name: str = ""
    points: Points = field(default_factory=Points)
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_firestore(self) -> Dict[str, Any]:
        """Flatten to a document payload; extra fields win over known ones, like a spread."""
        payload: Dict[str, Any] = {
            "name": self.name,
            "id": self.id,
            "points": self.points.to_dict(),
        }
        payload.update(self.extra)
        return payload


@dataclass
class ClassInfo:
    id: str
    display_name: str
    id_prefix: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "displayName": self.display_name, "idPrefix": self.id_prefix}


@dataclass
class StudentRow:
    """A roster row delivered by `watch_class`: points flattened for display."""

    id: str
    name: str
    points: int
    daily: int
    raw: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "points": self.points,
            "daily": self.daily,
            "raw": self.raw,
        }


@dataclass
class AuthUser:
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    id_token: Optional[str] = field(default=None, repr=False)
    refresh_token: Optional[str] = field(default=None, repr=False)
