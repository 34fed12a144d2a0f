"""
Student routes: read, merge-write, batch save and point actions.
"""
from typing import Callable

from flask import Blueprint, jsonify, request

from classpoints.service import ClassroomService
from core.auth import require_auth
from core.errors import validate_student_changes
from core.logger import logger


def register_student_routes(
    api: Blueprint,
    get_service: Callable[[], ClassroomService],
) -> None:
    """Register student and point-action routes on the given blueprint."""

    @api.route("/classes/<class_id>/students/<student_id>", methods=["GET"])
    @require_auth
    def get_student(class_id, student_id):
        """Get one student."""
        try:
            student = get_service().get_student(class_id, student_id)
            if not student:
                return jsonify({"error": "Student not found"}), 404
            return jsonify({"success": True, "student": student}), 200
        except Exception as e:  # pragma: no cover - defensive
            logger.error(f"Error getting student {class_id}/{student_id}: {str(e)}", exc_info=True)
            return jsonify({"error": f"Failed to fetch student: {str(e)}"}), 500

    @api.route("/classes/<class_id>/students/<student_id>", methods=["PUT"])
    @require_auth
    def update_student(class_id, student_id):
        """Merge the given fields into a student."""
        try:
            fields = request.get_json(silent=True)
            if not fields or not isinstance(fields, dict):
                return jsonify({"error": "Request body is required"}), 400

            get_service().set_student(class_id, student_id, fields)
            return jsonify({"success": True}), 200
        except Exception as e:  # pragma: no cover - defensive
            logger.error(f"Error updating student {class_id}/{student_id}: {str(e)}", exc_info=True)
            return jsonify({"error": f"Failed to update student: {str(e)}"}), 500

    @api.route("/classes/<class_id>/students/batch", methods=["POST"])
    @require_auth
    def save_students_batch(class_id):
        """Apply adds, edits and deletions in one commit."""
        try:
            data = request.get_json(silent=True) or {}
            adds = data.get("adds", [])
            edits = data.get("edits", [])
            dels = data.get("dels", [])
            validate_student_changes(adds, edits, dels)

            ops = get_service().save_students_batch(class_id, adds=adds, edits=edits, dels=dels)
            return jsonify({"success": True, "operations": ops}), 200
        except ValueError as e:
            logger.warning(f"Rejected student batch for class {class_id}: {str(e)}")
            return jsonify({"error": str(e)}), 400
        except Exception as e:  # pragma: no cover - defensive
            logger.error(f"Error saving student batch for class {class_id}: {str(e)}", exc_info=True)
            return jsonify({"error": f"Failed to save students: {str(e)}"}), 500

    @api.route("/classes/<class_id>/students/<student_id>/points", methods=["POST"])
    @require_auth
    def increment_points(class_id, student_id):
        """Increment daily/total points (defaults +1/+1)."""
        try:
            data = request.get_json(silent=True) or {}
            service = get_service()
            service.increment_points(
                class_id,
                student_id,
                daily=data.get("daily", 1),
                total=data.get("total", 1),
            )
            return jsonify({"success": True, "student": service.get_student(class_id, student_id)}), 200
        except ValueError as e:
            return jsonify({"error": str(e)}), 400
        except Exception as e:  # pragma: no cover - defensive
            logger.error(f"Error incrementing points for {class_id}/{student_id}: {str(e)}", exc_info=True)
            return jsonify({"error": str(e)}), 500

    @api.route("/classes/<class_id>/students/<student_id>/reset", methods=["POST"])
    @require_auth
    def reset_points(class_id, student_id):
        """Reset daily or total points ({"field": "daily" | "total"})."""
        try:
            data = request.get_json(silent=True) or {}
            field = data.get("field", "daily")
            service = get_service()
            if field == "daily":
                service.reset_daily(class_id, student_id)
            elif field == "total":
                service.reset_total(class_id, student_id)
            else:
                return jsonify({"error": 'field must be "daily" or "total"'}), 400
            return jsonify({"success": True}), 200
        except Exception as e:  # pragma: no cover - defensive
            logger.error(f"Error resetting points for {class_id}/{student_id}: {str(e)}", exc_info=True)
            return jsonify({"error": str(e)}), 500

    @api.route("/classes/<class_id>/students/<student_id>/fields/<key>", methods=["PUT"])
    @require_auth
    def set_student_string(class_id, student_id, key):
        """Write a custom string field ({"value": "..."})."""
        try:
            data = request.get_json(silent=True) or {}
            get_service().set_student_string(class_id, student_id, key, data.get("value"))
            return jsonify({"success": True}), 200
        except (TypeError, ValueError) as e:
            return jsonify({"error": str(e)}), 400
        except Exception as e:  # pragma: no cover - defensive
            logger.error(f"Error setting {key} for {class_id}/{student_id}: {str(e)}", exc_info=True)
            return jsonify({"error": str(e)}), 500
