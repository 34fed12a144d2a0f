"""
Class management routes (class directory, create, cascading delete, daily bump).
"""
from typing import Callable

from flask import Blueprint, jsonify, request

from classpoints.service import ClassroomService
from core.auth import require_auth
from core.logger import logger


def register_class_routes(
    api: Blueprint,
    get_service: Callable[[], ClassroomService],
) -> None:
    """Register class management routes on the given blueprint."""

    @api.route("/classes", methods=["GET"])
    @require_auth
    def get_classes():
        """Get all classes, sorted by display name."""
        try:
            classes = get_service().list_classes()
            return jsonify({"success": True, "classes": [c.to_dict() for c in classes]}), 200
        except Exception as e:  # pragma: no cover - defensive
            logger.error(f"Error getting classes: {str(e)}", exc_info=True)
            return jsonify({"error": str(e)}), 500

    @api.route("/classes", methods=["POST"])
    @require_auth
    def add_class():
        """Create (or update) a class keyed by its display name."""
        try:
            data = request.get_json(silent=True)
            if not data:
                return jsonify({"error": "Missing request body"}), 400

            info = get_service().create_class(data.get("displayName"), data.get("idPrefix"))
            return jsonify({"success": True, "class": info.to_dict()}), 201
        except ValueError as e:
            logger.warning(f"Rejected class creation: {str(e)}")
            return jsonify({"error": str(e)}), 400
        except Exception as e:  # pragma: no cover - defensive
            logger.error(f"Error adding class: {str(e)}", exc_info=True)
            return jsonify({"error": str(e)}), 500

    @api.route("/classes/<class_id>", methods=["DELETE"])
    @require_auth
    def delete_class(class_id):
        """Delete a class and all of its students."""
        try:
            deleted = get_service().delete_class(class_id)
            return jsonify({"success": True, "deletedStudents": deleted}), 200
        except Exception as e:  # pragma: no cover - defensive
            logger.error(f"Error deleting class {class_id}: {str(e)}", exc_info=True)
            return jsonify({"error": str(e)}), 500

    @api.route("/classes/<class_id>/daily", methods=["POST"])
    @require_auth
    def add_daily_to_all(class_id):
        """Give every student in the class +1 daily and +1 total."""
        try:
            updated = get_service().add_daily_to_all(class_id)
            return jsonify({"success": True, "updated": updated}), 200
        except Exception as e:  # pragma: no cover - defensive
            logger.error(f"Error adding daily points for class {class_id}: {str(e)}", exc_info=True)
            return jsonify({"error": str(e)}), 500
