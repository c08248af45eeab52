from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import ConflictError, ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _error(exc: Exception, status: int):
        return jsonify({"error": str(exc), "code": getattr(exc, "code", "INTERNAL_ERROR")}), status

    @app.route("/api/attendance/toggle", methods=["POST"], endpoint="attendance_toggle")
    def attendance_toggle():
        """Tag (or employee) presentation from a reader: check in or check out."""
        body = request.get_json(silent=True) or {}
        try:
            result = container.attendance_service.toggle(
                tag_uid=body.get("tagUid"),
                employee_id=body.get("employeeId"),
                reader_id=body.get("readerId"),
                location=body.get("location"),
                idempotency_key=body.get("idempotencyKey"),
                method=body.get("checkInMethod"),
                metadata=body.get("metadata"),
            )
        except ValidationError as e:
            return _error(e, 400)
        except ConflictError as e:
            return _error(e, 409)
        except Exception as e:
            logger.exception("POST /api/attendance/toggle failed")
            return jsonify({"error": f"Internal server error: {e}", "code": "INTERNAL_ERROR"}), 500

        return jsonify(result.to_dict()), 201 if result.created else 200

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    def attendance_today():
        try:
            summary = container.attendance_service.today_summary()
        except Exception as e:
            logger.exception("GET /api/attendance/today failed")
            return jsonify({"error": f"Internal server error: {e}", "code": "INTERNAL_ERROR"}), 500
        return jsonify(summary.to_dict()), 200

    @app.route("/api/attendance/mark-leave", methods=["POST"], endpoint="attendance_mark_leave")
    def attendance_mark_leave():
        """Close stale open sessions (before cutoff_date, default today) as leave."""
        body = request.get_json(silent=True) or {}
        try:
            result = container.attendance_service.mark_leave(body.get("cutoff_date"))
        except ValidationError as e:
            return _error(e, 400)
        except Exception as e:
            logger.exception("POST /api/attendance/mark-leave failed")
            return jsonify({"error": f"Internal server error: {e}", "code": "INTERNAL_ERROR"}), 500
        return jsonify(result.to_dict()), 200
