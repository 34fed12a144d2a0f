from flask import Blueprint, current_app

from api.routes_classes import register_class_routes
from api.routes_students import register_student_routes
from classpoints.service import ClassroomService


api = Blueprint("api", __name__)


def get_service() -> ClassroomService:
    """Return the ClassroomService attached to the running app."""
    service = current_app.config.get("CLASSROOM_SERVICE")
    if service is None:
        raise RuntimeError("CLASSROOM_SERVICE is not configured")
    return service


# Register route groups on the shared blueprint
register_class_routes(api, get_service)
register_student_routes(api, get_service)
